from .block_cipher import AESChain, BLOCK_SIZE, KEY_SIZES
from .errors import (
    AllocationError,
    BufferOverflowError,
    DerivationError,
    IterationError,
    KeySetupError,
)
from .kdf import ITERATIONS, LegacyKDFParams, derive, derive_into, new_salt, seed_key, work_buffer

__version__ = "0.1.0"
