"""
validators.py — secret normalization and input validation.

Every check here runs before the engine computes a single HMAC, so rejected
input costs no cryptographic work.
"""

import math
from collections import abc
from typing import Optional, Sequence, Tuple, Union

from .errors import (
    AlgorithmError,
    Base32PluginMissingError,
    CounterNegativeError,
    CounterNotIntegerError,
    CounterOverflowError,
    CounterToleranceError,
    CounterToleranceTooLargeError,
    DigitsError,
    EpochToleranceError,
    EpochToleranceNegativeError,
    EpochToleranceTooLargeError,
    PeriodTooLargeError,
    PeriodTooSmallError,
    SecretMissingError,
    SecretTooLongError,
    SecretTooShortError,
    SecretTypeError,
    TimeNegativeError,
    TimeNotFiniteError,
    TokenFormatError,
    TokenLengthError,
)
from .guardrails import DEFAULT_GUARDRAILS, Guardrails
from .plugins import DIGEST_SIZES, Base32Plugin

CounterTolerance = Union[int, Sequence[int]]
EpochTolerance = Union[int, Sequence[int]]

DIGITS = (6, 7, 8)


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# --- Secret ----------------------------------------------------------------
def normalize_secret(secret, base32: Optional[Base32Plugin] = None) -> bytes:
    """
    Turn a secret into raw key bytes.

    - bytes / bytearray / memoryview are returned as bytes
    - str is treated as Base32 and decoded through the plugin

    Raises:
        SecretMissingError: secret is None or empty
        Base32PluginMissingError: secret is a str and no plugin was given
        SecretTypeError: secret is neither bytes-like nor str
    """
    if secret is None or (isinstance(secret, (str, bytes, bytearray)) and len(secret) == 0):
        raise SecretMissingError()
    if isinstance(secret, str):
        if base32 is None:
            raise Base32PluginMissingError()
        return base32.decode(secret)
    if isinstance(secret, (bytes, bytearray, memoryview)):
        return bytes(secret)
    raise SecretTypeError(f"Secret must be bytes or a Base32 string, got {type(secret).__name__}")


def validate_secret(secret: bytes, guardrails: Guardrails = DEFAULT_GUARDRAILS) -> None:
    if len(secret) < guardrails.MIN_SECRET_BYTES:
        raise SecretTooShortError(guardrails.MIN_SECRET_BYTES, len(secret))
    if len(secret) > guardrails.MAX_SECRET_BYTES:
        raise SecretTooLongError(guardrails.MAX_SECRET_BYTES, len(secret))


# --- Counter / time / period -----------------------------------------------
def validate_counter(counter: int, guardrails: Guardrails = DEFAULT_GUARDRAILS) -> None:
    if not _is_int(counter):
        raise CounterNotIntegerError()
    if counter < 0:
        raise CounterNegativeError()
    if counter > guardrails.counter_limit:
        raise CounterOverflowError(guardrails.counter_limit)


def validate_time(time: float) -> None:
    """Epoch seconds must be a finite, non-negative number."""
    if isinstance(time, bool) or not isinstance(time, (int, float)):
        raise TimeNotFiniteError()
    # ints are always finite, and huge ones do not fit a float
    if isinstance(time, float) and not math.isfinite(time):
        raise TimeNotFiniteError()
    if time < 0:
        raise TimeNegativeError()


def validate_period(period: int, guardrails: Guardrails = DEFAULT_GUARDRAILS) -> None:
    # non-integer periods are reported as "too small": there is no valid
    # fractional period
    if not _is_int(period) or period < guardrails.MIN_PERIOD:
        raise PeriodTooSmallError(guardrails.MIN_PERIOD)
    if period > guardrails.MAX_PERIOD:
        raise PeriodTooLargeError(guardrails.MAX_PERIOD)


# --- Digits / algorithm / token --------------------------------------------
def validate_digits(digits: int) -> None:
    if not _is_int(digits) or digits not in DIGITS:
        raise DigitsError(f"Digits must be 6, 7, or 8, got {digits!r}")


def validate_algorithm(algorithm: str) -> str:
    """Return the canonical lower-case algorithm name."""
    name = algorithm.lower() if isinstance(algorithm, str) else algorithm
    if name not in DIGEST_SIZES:
        raise AlgorithmError(
            f"Algorithm must be one of 'sha1', 'sha256', or 'sha512', got {algorithm!r}"
        )
    return name


def validate_token(token: str, digits: int) -> None:
    if not isinstance(token, str):
        raise TokenFormatError()
    if len(token) != digits:
        raise TokenLengthError(digits, len(token))
    # str.isdigit() accepts non-ASCII digits such as '٣'
    if not (token.isascii() and token.isdigit()):
        raise TokenFormatError()


# --- Tolerance windows -----------------------------------------------------
def counter_window_size(counter_tolerance: CounterTolerance) -> int:
    if _is_int(counter_tolerance):
        return abs(counter_tolerance) * 2 + 1
    return len(counter_tolerance)


def validate_counter_tolerance(
    counter_tolerance: CounterTolerance, guardrails: Guardrails = DEFAULT_GUARDRAILS
) -> None:
    """
    HOTP look-around window.

    An int n checks counters -n..+n (2n + 1 candidates); a sequence checks
    exactly the offsets it lists. Either way the candidate count must not
    exceed MAX_WINDOW * 2 + 1.
    """
    if not _is_int(counter_tolerance):
        if isinstance(counter_tolerance, (str, bytes)) or not isinstance(counter_tolerance, abc.Sequence):
            raise CounterToleranceError("Counter tolerance must be an integer or a sequence of integers")
        if not all(_is_int(offset) for offset in counter_tolerance):
            raise CounterToleranceError("Counter tolerance offsets must be integers")

    size = counter_window_size(counter_tolerance)
    limit = guardrails.MAX_WINDOW * 2 + 1
    if size > limit:
        raise CounterToleranceTooLargeError(limit, size)


def normalize_epoch_tolerance(epoch_tolerance: EpochTolerance) -> Tuple[int, int]:
    """int -> (n, n); (past, future) -> (past, future)."""
    if _is_int(epoch_tolerance):
        return epoch_tolerance, epoch_tolerance
    if isinstance(epoch_tolerance, abc.Sequence) and not isinstance(epoch_tolerance, (str, bytes)):
        if len(epoch_tolerance) == 2 and all(_is_int(v) for v in epoch_tolerance):
            past, future = epoch_tolerance
            return past, future
    raise EpochToleranceError("Epoch tolerance must be an integer or a (past, future) pair of integers")


def validate_epoch_tolerance(
    epoch_tolerance: EpochTolerance,
    period: int = 30,
    guardrails: Guardrails = DEFAULT_GUARDRAILS,
) -> Tuple[int, int]:
    """
    Validate a TOTP clock-drift tolerance given in seconds.

    Returns:
        (past_seconds, future_seconds)

    Raises:
        EpochToleranceNegativeError: either side is negative
        EpochToleranceTooLargeError: a side exceeds MAX_WINDOW periods
    """
    past, future = normalize_epoch_tolerance(epoch_tolerance)
    if past < 0 or future < 0:
        raise EpochToleranceNegativeError()

    limit = guardrails.MAX_WINDOW * period
    widest = max(past, future)
    if widest > limit:
        raise EpochToleranceTooLargeError(limit, widest)
    return past, future
