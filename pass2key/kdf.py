from __future__ import annotations
import logging
import os
import struct
from dataclasses import dataclass
from typing import Callable, Union

from .block_cipher import AESChain, KEY_SIZES
from .errors import AllocationError, BufferOverflowError, IterationError, KeySetupError
from .secure import scrubbed


logger = logging.getLogger(__name__)

# Fixed by the legacy key-wrapping scheme; changing it changes every key.
ITERATIONS = 1000
ITERATION_FIELD = struct.Struct("<I")  # 4 bytes, little-endian as on the legacy hosts

Password = Union[str, bytes, bytearray, memoryview]


@dataclass(frozen=True)
class LegacyKDFParams:
    key_len: int = 32  # 32 bytes = 256-bit key (AES-256)
    salt_len: int = 8


def new_salt(params: LegacyKDFParams = LegacyKDFParams()) -> bytes:
    if params.salt_len + ITERATION_FIELD.size > params.key_len:
        raise BufferOverflowError(
            f"A {params.salt_len}-byte salt does not fit a {params.key_len}-byte key."
        )
    return os.urandom(params.salt_len)


def _as_bytes(value: Password, what: str) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise ValueError(f"{what} must be bytes.")
    return bytes(value)


def _check_length(desired_length: int) -> None:
    if type(desired_length) is not int or desired_length not in KEY_SIZES:
        raise KeySetupError(
            f"Invalid key length {desired_length}; expected one of {KEY_SIZES}."
        )


def seed_key(password: Password, desired_length: int) -> bytearray:
    """
    Build the cipher key the derivation starts from: the password truncated
    or zero padded to ``desired_length`` bytes.
    """
    pw = _as_bytes(password, "Password")
    key = bytearray(desired_length)
    n = min(len(pw), desired_length)
    key[:n] = pw[:n]
    return key


def work_buffer(salt: bytes, desired_length: int) -> bytearray:
    """
    Assemble the initial work buffer: salt, then the iteration count, then
    zero bytes up to ``desired_length``.
    """
    salt = _as_bytes(salt, "Salt")
    end = len(salt) + ITERATION_FIELD.size
    if end > desired_length:
        raise BufferOverflowError(
            f"Salt of {len(salt)} bytes plus the {ITERATION_FIELD.size}-byte "
            f"iteration field exceeds the {desired_length}-byte buffer."
        )
    try:
        buf = bytearray(desired_length)
    except MemoryError as e:
        raise AllocationError("Could not allocate the work buffer.") from e
    buf[:len(salt)] = salt
    ITERATION_FIELD.pack_into(buf, len(salt), ITERATIONS)
    return buf


def derive(
    password: Password,
    salt: bytes,
    desired_length: int = LegacyKDFParams.key_len,
    cipher: Callable[[bytes], AESChain] = AESChain,
) -> bytes:
    """
    Derive a ``desired_length`` byte key from ``password`` and ``salt``.

    The seed key configures one CBC stream. The work buffer is encrypted in
    place once, then ``ITERATIONS`` more times, each pass consuming the
    previous ciphertext and the chaining state left by the previous pass.
    The final buffer is the key.

    ``cipher`` is called with the seed key and must return an object with an
    ``encrypt(buffer) -> bytes`` method and work as a context manager that
    releases the primitive on exit.

    Raises ``KeySetupError``, ``BufferOverflowError``, ``AllocationError`` or
    ``IterationError``; never returns a partial key.
    """
    _check_length(desired_length)

    with scrubbed(seed_key(password, desired_length)) as key:
        try:
            chain = cipher(bytes(key))
        except KeySetupError:
            raise
        except (ValueError, TypeError) as e:
            raise KeySetupError(f"Cipher rejected the seed key: {e}") from e
        logger.debug("Key configured: %d-bit", desired_length * 8)

        with chain, scrubbed(work_buffer(salt, desired_length)) as buf:
            logger.debug("Work buffer assembled: salt %d bytes", len(salt))
            for i in range(ITERATIONS + 1):
                try:
                    out = chain.encrypt(buf)
                except Exception as e:
                    raise IterationError(i, str(e)) from e
                if len(out) != desired_length:
                    raise IterationError(i, f"cipher returned {len(out)} bytes")
                buf[:] = out
            result = bytes(buf)

    logger.debug("Derivation complete after %d iterations", ITERATIONS)
    return result


def derive_into(
    password: Password,
    salt: bytes,
    desired_length: int,
    out: bytearray,
    cipher: Callable[[bytes], AESChain] = AESChain,
) -> int:
    """
    Write the derived key into ``out`` and return its length. ``out`` is left
    untouched when the derivation fails.
    """
    key = derive(password, salt, desired_length, cipher=cipher)
    out[:] = key
    return len(key)
