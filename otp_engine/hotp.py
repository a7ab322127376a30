"""
hotp.py — HOTP (RFC 4226): HMAC-based one-time passwords.

Steps (RFC 4226 section 5.3):
1. Counter -> 8-byte big-endian message
2. HMAC-<alg>(key=secret, msg=counter)
3. Dynamic truncation -> 31-bit integer
4. otp = value % 10^digits, zero-padded to `digits`

generate/verify are coroutines; generate_sync/verify_sync need a plugin with
hmac_sync. Both families run the same steps (see window.py).

Counter resynchronization (RFC 4226 section 7.4): after a successful verify
the caller should store `counter + result.delta + 1` so the same code can not
be replayed.
"""

import logging
import struct
from typing import Optional

from .errors import CryptoPluginMissingError
from .guardrails import DEFAULT_GUARDRAILS, Guardrails
from .plugins import Base32Plugin, CryptoPlugin
from .result import VerifyResult
from .validators import (
    CounterTolerance,
    normalize_secret,
    validate_algorithm,
    validate_counter,
    validate_counter_tolerance,
    validate_digits,
    validate_secret,
    validate_token,
)
from .window import HMACRequest, Steps, hotp_candidates, hotp_offsets, run_async, run_sync, search

logger = logging.getLogger(__name__)

DEFAULT_DIGITS = 6
DEFAULT_ALGORITHM = "sha1"


# --- RFC helpers -----------------------------------------------------------
def counter_to_bytes(counter: int) -> bytes:
    """
    8-byte big-endian counter, as RFC 4226 section 5.1 requires.

    Example: counter_to_bytes(1) -> b'\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x01'
    """
    return struct.pack(">Q", counter)


def dynamic_truncate(hmac_digest: bytes) -> int:
    """
    RFC 4226 dynamic truncation.

    - offset = low nibble of the last byte
    - take 4 bytes from offset, clear the top bit of the first one
    - return the 31-bit unsigned integer

    Works for any digest of at least 20 bytes (offset <= 15, 15 + 4 <= 20).
    """
    offset = hmac_digest[-1] & 0x0F
    return (
        ((hmac_digest[offset] & 0x7F) << 24)
        | ((hmac_digest[offset + 1] & 0xFF) << 16)
        | ((hmac_digest[offset + 2] & 0xFF) << 8)
        | (hmac_digest[offset + 3] & 0xFF)
    )


def truncate_digits(value: int, digits: int) -> str:
    return str(value % (10 ** digits)).zfill(digits)


def token_steps(key: bytes, counter: int, algorithm: str, digits: int) -> Steps:
    digest = yield HMACRequest(algorithm, key, counter_to_bytes(counter))
    return truncate_digits(dynamic_truncate(digest), digits)


def require_crypto_plugin(crypto: Optional[CryptoPlugin]) -> CryptoPlugin:
    if crypto is None:
        raise CryptoPluginMissingError()
    return crypto


# --- Generate --------------------------------------------------------------
def _prepare_generate(secret, counter, algorithm, digits, crypto, base32, guardrails):
    key = normalize_secret(secret, base32)
    validate_secret(key, guardrails)
    validate_counter(counter, guardrails)
    validate_digits(digits)
    algorithm = validate_algorithm(algorithm)
    require_crypto_plugin(crypto)
    return token_steps(key, counter, algorithm, digits)


async def generate(
    secret,
    counter: int,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    crypto: Optional[CryptoPlugin] = None,
    base32: Optional[Base32Plugin] = None,
    guardrails: Guardrails = DEFAULT_GUARDRAILS,
) -> str:
    """
    Generate an HOTP code.

    Arguments:
        secret: raw key bytes, or a Base32 string (needs `base32`)
        counter: moving factor, 0 <= counter <= MAX_COUNTER
        algorithm: 'sha1' (default), 'sha256' or 'sha512'
        digits: 6 (default), 7 or 8
        crypto: CryptoPlugin computing the HMAC
        base32: Base32Plugin, only needed for string secrets
        guardrails: bounds policy (defaults to RFC recommendations)

    Returns:
        str: zero-padded code, e.g. "755224"

    Raises:
        SecretTooShortError, SecretTooLongError, CounterNegativeError,
        CounterOverflowError, DigitsError, AlgorithmError,
        CryptoPluginMissingError: before any HMAC is computed
    """
    steps = _prepare_generate(secret, counter, algorithm, digits, crypto, base32, guardrails)
    return await run_async(steps, crypto)


def generate_sync(
    secret,
    counter: int,
    *,
    algorithm: str = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    crypto: Optional[CryptoPlugin] = None,
    base32: Optional[Base32Plugin] = None,
    guardrails: Guardrails = DEFAULT_GUARDRAILS,
) -> str:
    """Synchronous generate(); raises HMACError for async-only plugins."""
    steps = _prepare_generate(secret, counter, algorithm, digits, crypto, base32, guardrails)
    return run_sync(steps, crypto)


# --- Verify ----------------------------------------------------------------
def _prepare_verify(secret, counter, token, counter_tolerance, algorithm, digits, crypto, base32, guardrails):
    key = normalize_secret(secret, base32)
    validate_secret(key, guardrails)
    validate_counter(counter, guardrails)
    validate_digits(digits)
    algorithm = validate_algorithm(algorithm)
    validate_token(token, digits)
    validate_counter_tolerance(counter_tolerance, guardrails)
    require_crypto_plugin(crypto)

    offsets = hotp_offsets(counter_tolerance)
    if offsets:
        logger.debug("HOTP verify: counter=%d, offsets %d..%d", counter, offsets[0], offsets[-1])
    candidates = hotp_candidates(counter, offsets, guardrails.counter_limit)
    return search(candidates, token, lambda c: token_steps(key, c, algorithm, digits))


def _to_result(match) -> VerifyResult:
    if match is None:
        return VerifyResult.invalid()
    _, delta = match
    return VerifyResult(True, delta)


async def verify(
    secret,
    counter: int,
    token: str,
    *,
    counter_tolerance: CounterTolerance = 0,
    algorithm: str = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    crypto: Optional[CryptoPlugin] = None,
    base32: Optional[Base32Plugin] = None,
    guardrails: Guardrails = DEFAULT_GUARDRAILS,
) -> VerifyResult:
    """
    Verify an HOTP code against `counter`, looking around by `counter_tolerance`.

    counter_tolerance:
        int n          -> offsets -n..+n
        [o1, o2, ...]  -> exactly those offsets

    Offsets are tried ascending, so when several could match the most
    negative delta wins. Offsets that would make the counter negative are
    skipped. A wrong but well-formed token returns VerifyResult(valid=False).
    """
    steps = _prepare_verify(secret, counter, token, counter_tolerance, algorithm, digits, crypto, base32,
                            guardrails)
    return _to_result(await run_async(steps, crypto))


def verify_sync(
    secret,
    counter: int,
    token: str,
    *,
    counter_tolerance: CounterTolerance = 0,
    algorithm: str = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    crypto: Optional[CryptoPlugin] = None,
    base32: Optional[Base32Plugin] = None,
    guardrails: Guardrails = DEFAULT_GUARDRAILS,
) -> VerifyResult:
    steps = _prepare_verify(secret, counter, token, counter_tolerance, algorithm, digits, crypto, base32,
                            guardrails)
    return _to_result(run_sync(steps, crypto))
