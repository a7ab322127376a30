"""
otp_engine package
==================

HOTP / TOTP generation and verification per RFC 4226 & RFC 6238, with
pluggable HMAC and Base32 backends and guardrails bounding the work a
single verification may do.

──────────────────────────────────────────────
Core algorithms
──────────────────────────────────────────────
- HOTP (HMAC-based One-Time Password):
  code = Truncate(HMAC-<alg>(key=secret, msg=counter)) mod 10^digits
  → the counter moves on every event (button press, SMS, ...).

- TOTP (Time-based One-Time Password):
  HOTP with counter = floor((epoch - T0) / period)
  → default period 30 s, SHA-1, 6 digits (RFC 6238).

- Dynamic truncation:
  4 bytes are taken from the HMAC at offset (last byte & 0x0F), top bit
  cleared, giving a 31-bit integer.

- Verification window:
  candidates are checked oldest first and the search stops at the first
  match; `delta` tells the caller how far the match was from the expected
  counter / time step.

──────────────────────────────────────────────
Notes for integrators
──────────────────────────────────────────────
1. Counter storage is yours. After a successful HOTP verify store
   `counter + result.delta + 1`; for TOTP keep the last accepted step and
   pass it back as `after_time_step` to block replays.

2. Engine functions take explicit plugins:
       from otp_engine import hotp, HashlibCryptoPlugin
       hotp.generate_sync(b"12345678901234567890", 0, crypto=HashlibCryptoPlugin())
       # '755224'

3. The functional API fills in default plugins:
       from otp_engine import generate_secret, generate_sync, verify_sync
       secret = generate_secret()
       code = generate_sync(secret)
       verify_sync(secret, code, epoch_tolerance=30).valid   # True

4. Prefer return values over exceptions? wrap them:
       safe_verify = wrap_result(verify_sync)
       res = safe_verify(secret, "12x456")
       res.ok           # False
       res.error        # TokenFormatError(...)
"""

import logging

from . import hotp, totp
from .classes import HOTP, OTP, TOTP
from .compare import constant_time_equal
from .errors import (
    AlgorithmError,
    Base32DecodeError,
    Base32Error,
    Base32PluginMissingError,
    ConfigurationError,
    CounterError,
    CounterNegativeError,
    CounterNotIntegerError,
    CounterOverflowError,
    CounterToleranceError,
    CounterToleranceTooLargeError,
    CryptoError,
    CryptoPluginMissingError,
    DigitsError,
    EpochToleranceError,
    EpochToleranceNegativeError,
    EpochToleranceTooLargeError,
    HMACError,
    IssuerMissingError,
    LabelMissingError,
    OTPError,
    PeriodError,
    PeriodTooLargeError,
    PeriodTooSmallError,
    PluginError,
    SecretError,
    SecretMissingError,
    SecretTooLongError,
    SecretTooShortError,
    SecretTypeError,
    TimeError,
    TimeNegativeError,
    TimeNotFiniteError,
    TokenError,
    TokenFormatError,
    TokenLengthError,
)
from .functional import generate, generate_secret, generate_sync, generate_uri, verify, verify_sync
from .guardrails import DEFAULT_GUARDRAILS, Guardrails, create_guardrails, has_guardrail_overrides
from .plugins import (
    Base32Plugin,
    CryptoPlugin,
    CryptographyCryptoPlugin,
    HashlibCryptoPlugin,
    StdlibBase32Plugin,
)
from .result import Err, Ok, VerifyResult, wrap_result, wrap_result_async
from .validators import (
    normalize_secret,
    validate_counter,
    validate_counter_tolerance,
    validate_epoch_tolerance,
    validate_period,
    validate_secret,
    validate_time,
    validate_token,
)

# library: stay silent unless the application configures logging
logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "1.0.0"
