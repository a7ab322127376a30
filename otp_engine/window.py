"""
window.py — tolerance window search and the HMAC drivers.

The OTP algorithm is written once, as a generator that yields HMAC requests
and receives digests back:

    digest = yield HMACRequest(algorithm, key, message)

run_sync() answers each request with plugin.hmac_sync(), run_async() awaits
plugin.hmac(). Sync and async entry points therefore share every line of the
truncation and search logic and differ only in how the HMAC step suspends.
"""

import inspect
import logging
from collections import namedtuple
from typing import Callable, Generator, Iterable, List, Optional, Tuple

from .compare import constant_time_equal
from .errors import HMACError
from .plugins import CryptoPlugin

logger = logging.getLogger(__name__)

HMACRequest = namedtuple("HMACRequest", ["algorithm", "key", "data"])

# generator yielding HMACRequest, receiving bytes, returning R
Steps = Generator[HMACRequest, bytes, object]


# --- Drivers ---------------------------------------------------------------
def run_sync(steps: Steps, crypto: CryptoPlugin):
    """
    Drive `steps` to completion with the plugin's synchronous HMAC.

    Raises:
        HMACError: the plugin has no hmac_sync (async-only backend)
    """
    hmac_sync = getattr(crypto, "hmac_sync", None)
    if not callable(hmac_sync):
        steps.close()
        raise HMACError("Crypto plugin does not support synchronous HMAC operations")

    digest = None
    while True:
        try:
            request = steps.send(digest)
        except StopIteration as stop:
            return stop.value
        digest = hmac_sync(*request)


async def run_async(steps: Steps, crypto: CryptoPlugin):
    """Drive `steps` to completion, awaiting the plugin's HMAC."""
    digest = None
    while True:
        try:
            request = steps.send(digest)
        except StopIteration as stop:
            return stop.value
        digest = crypto.hmac(*request)
        # plugins may return bytes directly from hmac()
        if inspect.isawaitable(digest):
            digest = await digest


# --- Search ----------------------------------------------------------------
def hotp_offsets(counter_tolerance) -> List[int]:
    """
    Offsets to try, ascending (most past first).

    5       -> [-5, -4, ..., 4, 5]
    [0, 3]  -> [0, 3]
    [2, -1] -> [-1, 2]
    """
    if isinstance(counter_tolerance, int):
        n = abs(counter_tolerance)
        return list(range(-n, n + 1))
    return sorted(set(counter_tolerance))


def hotp_candidates(counter: int, offsets: Iterable[int], max_counter: int) -> Iterable[Tuple[int, int]]:
    """Yield (candidate_counter, delta), silently skipping out-of-range counters."""
    for offset in offsets:
        candidate = counter + offset
        if candidate < 0 or candidate > max_counter:
            continue
        yield candidate, offset


def counter_range_candidates(
    min_counter: int, max_counter: int, current_counter: int
) -> Iterable[Tuple[int, int]]:
    for candidate in range(min_counter, max_counter + 1):
        yield candidate, candidate - current_counter


def search(
    candidates: Iterable[Tuple[int, int]],
    token: str,
    token_steps: Callable[[int], Steps],
) -> Generator[HMACRequest, bytes, Optional[Tuple[int, int]]]:
    """
    Try each candidate moving factor in order and stop at the first match.

    Arguments:
        candidates: (moving_factor, delta) pairs, already in search order
        token: the caller-supplied code
        token_steps: moving_factor -> steps generator producing the expected code

    Returns (via StopIteration):
        (moving_factor, delta) of the first match, or None
    """
    tried = 0
    for moving_factor, delta in candidates:
        tried += 1
        expected = yield from token_steps(moving_factor)
        if constant_time_equal(expected, token):
            logger.debug("OTP matched after %d candidate(s), delta=%d", tried, delta)
            return moving_factor, delta
    logger.debug("OTP did not match any of %d candidate(s)", tried)
    return None
