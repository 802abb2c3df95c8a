from __future__ import annotations


class DerivationError(ValueError):
    """Base class for every failure raised by the key derivation."""


class KeySetupError(DerivationError):
    pass


class AllocationError(DerivationError):
    pass


class BufferOverflowError(DerivationError):
    pass


class IterationError(DerivationError):
    def __init__(self, iteration: int, reason: str = ""):
        super().__init__(
            f"Encryption failed at iteration {iteration}" + (f": {reason}" if reason else ".")
        )
        self.iteration = iteration
