from __future__ import annotations

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .errors import KeySetupError


BLOCK_SIZE = 16       # AES block length in bytes
KEY_SIZES = (16, 24, 32)  # AES-128 / AES-192 / AES-256


class AESChain:
    """
    One continuous AES-CBC encryption stream.

    The chaining state starts as an all-zero IV and is carried from one
    ``encrypt`` call to the next, so successive calls behave exactly like a
    single CBC encryption of the concatenated inputs.
    """

    def __init__(self, key: bytes):
        if len(key) not in KEY_SIZES:
            raise KeySetupError(f"Invalid key size ({len(key) * 8}) for AES.")
        try:
            self._ctx = Cipher(
                algorithms.AES(bytes(key)),
                modes.CBC(bytes(BLOCK_SIZE)),
            ).encryptor()
        except (ValueError, UnsupportedAlgorithm) as e:
            raise KeySetupError(f"AES rejected the key: {e}") from e

    def encrypt(self, buffer: bytes) -> bytes:
        n = len(buffer)
        # Partial tail block is zero padded; the last full ciphertext block
        # stays in the context as chaining state.
        pad = -n % BLOCK_SIZE
        return self._ctx.update(bytes(buffer) + bytes(pad))[:n]

    def close(self) -> None:
        self._ctx.finalize()

    def __enter__(self) -> "AESChain":
        return self

    def __exit__(self, *exc) -> None:
        self.close()
