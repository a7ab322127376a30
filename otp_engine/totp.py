"""
totp.py — TOTP (RFC 6238): HOTP keyed by a time step.

    T = floor((epoch - T0) / period)
    TOTP = HOTP(K, T)

Defaults follow RFC 6238: T0 = 0, period = 30 seconds, SHA-1, 6 digits.

A TOTP code encodes only the time step, not an instant: every code from a
period that overlaps the tolerance window is accepted, so acceptance is
period-granular. `after_time_step` adds a replay floor on top of that.
"""

import logging
import math
import time as _time
from typing import Optional

from .errors import CounterNegativeError
from .guardrails import DEFAULT_GUARDRAILS, Guardrails
from .hotp import DEFAULT_ALGORITHM, DEFAULT_DIGITS, require_crypto_plugin, token_steps
from .plugins import Base32Plugin, CryptoPlugin
from .result import VerifyResult
from .validators import (
    EpochTolerance,
    normalize_secret,
    validate_algorithm,
    validate_counter,
    validate_digits,
    validate_epoch_tolerance,
    validate_period,
    validate_secret,
    validate_time,
    validate_token,
)
from .window import counter_range_candidates, run_async, run_sync, search

logger = logging.getLogger(__name__)

DEFAULT_TIME_STEP = 30  # seconds
DEFAULT_T0 = 0


def _now() -> int:
    return int(_time.time())


def time_step(epoch: float, period: int, t0: float = DEFAULT_T0) -> int:
    """floor((epoch - t0) / period), no validation."""
    # floor division keeps large int epochs exact
    return int((epoch - t0) // period)


# --- Generate --------------------------------------------------------------
def _prepare_generate(secret, epoch, t0, period, algorithm, digits, crypto, base32, guardrails):
    if epoch is None:
        epoch = _now()
    key = normalize_secret(secret, base32)
    validate_secret(key, guardrails)
    validate_time(epoch)
    validate_period(period, guardrails)
    validate_digits(digits)
    algorithm = validate_algorithm(algorithm)
    require_crypto_plugin(crypto)

    counter = time_step(epoch, period, t0)
    if counter < 0:
        # epoch before t0
        raise CounterNegativeError()
    validate_counter(counter, guardrails)
    return token_steps(key, counter, algorithm, digits)


async def generate(
    secret,
    epoch: Optional[float] = None,
    *,
    t0: float = DEFAULT_T0,
    period: int = DEFAULT_TIME_STEP,
    algorithm: str = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    crypto: Optional[CryptoPlugin] = None,
    base32: Optional[Base32Plugin] = None,
    guardrails: Guardrails = DEFAULT_GUARDRAILS,
) -> str:
    """
    Generate a TOTP code.

    Arguments:
        secret: raw key bytes, or a Base32 string (needs `base32`)
        epoch: unix seconds to compute for (None -> time.time())
        t0: unix time at which step 0 starts (default 0)
        period: time step X in seconds (default 30)
        algorithm, digits, crypto, base32, guardrails: as in hotp.generate

    Raises:
        TimeNegativeError: epoch < 0
        PeriodTooSmallError / PeriodTooLargeError: period out of bounds
        CounterNegativeError: epoch is before t0
    """
    steps = _prepare_generate(secret, epoch, t0, period, algorithm, digits, crypto, base32, guardrails)
    return await run_async(steps, crypto)


def generate_sync(
    secret,
    epoch: Optional[float] = None,
    *,
    t0: float = DEFAULT_T0,
    period: int = DEFAULT_TIME_STEP,
    algorithm: str = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    crypto: Optional[CryptoPlugin] = None,
    base32: Optional[Base32Plugin] = None,
    guardrails: Guardrails = DEFAULT_GUARDRAILS,
) -> str:
    steps = _prepare_generate(secret, epoch, t0, period, algorithm, digits, crypto, base32, guardrails)
    return run_sync(steps, crypto)


# --- Verify ----------------------------------------------------------------
class _Window:
    """Counter range for one verification call."""

    def __init__(self, current: int, low: int, high: int, period: int, t0: float):
        self.current = current
        self.low = low
        self.high = high
        self.period = period
        self.t0 = t0

    def to_result(self, match) -> VerifyResult:
        if match is None:
            return VerifyResult.invalid()
        counter, delta = match
        return VerifyResult(True, delta, counter * self.period + self.t0)


def _prepare_verify(secret, token, epoch, t0, period, epoch_tolerance, after_time_step, algorithm, digits,
                    crypto, base32, guardrails):
    if epoch is None:
        epoch = _now()
    key = normalize_secret(secret, base32)
    validate_secret(key, guardrails)
    validate_time(epoch)
    validate_period(period, guardrails)
    validate_digits(digits)
    algorithm = validate_algorithm(algorithm)
    validate_token(token, digits)
    past, future = validate_epoch_tolerance(epoch_tolerance, period, guardrails)
    require_crypto_plugin(crypto)

    current = time_step(epoch, period, t0)
    low = max(0, time_step(epoch - past, period, t0))
    high = time_step(epoch + future, period, t0)
    if after_time_step is not None:
        # steps at or below the floor are never accepted
        low = max(low, math.floor(after_time_step) + 1)
    high = min(high, guardrails.counter_limit)

    logger.debug("TOTP verify: current step=%d, checking steps %d..%d", current, low, high)
    window = _Window(current, low, high, period, t0)
    steps = search(
        counter_range_candidates(low, high, current),
        token,
        lambda c: token_steps(key, c, algorithm, digits),
    )
    return window, steps


async def verify(
    secret,
    token: str,
    epoch: Optional[float] = None,
    *,
    t0: float = DEFAULT_T0,
    period: int = DEFAULT_TIME_STEP,
    epoch_tolerance: EpochTolerance = 0,
    after_time_step: Optional[int] = None,
    algorithm: str = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    crypto: Optional[CryptoPlugin] = None,
    base32: Optional[Base32Plugin] = None,
    guardrails: Guardrails = DEFAULT_GUARDRAILS,
) -> VerifyResult:
    """
    Verify a TOTP code.

    Arguments:
        epoch_tolerance: clock drift allowance in seconds, either n (n past
            and n future) or (past, future). Every step overlapping
            [epoch - past, epoch + future] is checked, oldest first.
        after_time_step: replay floor; a match at a step <= this value is
            rejected. Pass the step of the last accepted code.

    Returns:
        VerifyResult(valid=True, delta=<steps from current>, epoch=<start
        of matched period>) or VerifyResult(valid=False)
    """
    window, steps = _prepare_verify(secret, token, epoch, t0, period, epoch_tolerance, after_time_step,
                                    algorithm, digits, crypto, base32, guardrails)
    return window.to_result(await run_async(steps, crypto))


def verify_sync(
    secret,
    token: str,
    epoch: Optional[float] = None,
    *,
    t0: float = DEFAULT_T0,
    period: int = DEFAULT_TIME_STEP,
    epoch_tolerance: EpochTolerance = 0,
    after_time_step: Optional[int] = None,
    algorithm: str = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    crypto: Optional[CryptoPlugin] = None,
    base32: Optional[Base32Plugin] = None,
    guardrails: Guardrails = DEFAULT_GUARDRAILS,
) -> VerifyResult:
    window, steps = _prepare_verify(secret, token, epoch, t0, period, epoch_tolerance, after_time_step,
                                    algorithm, digits, crypto, base32, guardrails)
    return window.to_result(run_sync(steps, crypto))


# --- Time helpers ----------------------------------------------------------
def get_remaining_time(
    time: Optional[float] = None,
    period: int = DEFAULT_TIME_STEP,
    t0: float = DEFAULT_T0,
    guardrails: Guardrails = DEFAULT_GUARDRAILS,
) -> float:
    """
    Seconds left until the next period starts.

    Example: get_remaining_time(29, 30) -> 1, get_remaining_time(30, 30) -> 30
    """
    if time is None:
        time = _now()
    validate_time(time)
    validate_period(period, guardrails)
    counter = time_step(time, period, t0)
    return (counter + 1) * period + t0 - time


def get_time_step_used(
    time: Optional[float] = None,
    period: int = DEFAULT_TIME_STEP,
    t0: float = DEFAULT_T0,
    guardrails: Guardrails = DEFAULT_GUARDRAILS,
) -> int:
    """The TOTP counter for `time`."""
    if time is None:
        time = _now()
    validate_time(time)
    validate_period(period, guardrails)
    return time_step(time, period, t0)
