"""
functional.py — one entry point for both strategies, with stock plugins.

    from otp_engine.functional import generate_secret, generate_sync, verify_sync

    secret = generate_secret()                       # Base32, 160-bit
    code = generate_sync(secret=secret)              # TOTP, now
    verify_sync(secret=secret, token=code).valid     # True

    generate_sync(secret=secret, strategy="hotp", counter=7)

Defaults: HashlibCryptoPlugin, StdlibBase32Plugin, SHA-1, 6 digits, 30 s.
Everything below is a thin dispatch onto hotp.py / totp.py.
"""

from typing import Callable, Optional

from . import hotp, totp, uri
from .errors import ConfigurationError
from .guardrails import DEFAULT_GUARDRAILS, Guardrails
from .plugins import Base32Plugin, CryptoPlugin, HashlibCryptoPlugin, StdlibBase32Plugin
from .result import VerifyResult
from .validators import CounterTolerance, EpochTolerance

SECRET_BYTES = 20  # 160-bit secret, RFC 4226 recommendation

default_crypto = HashlibCryptoPlugin()
default_base32 = StdlibBase32Plugin()

STRATEGIES = ("totp", "hotp")


def _dispatch(strategy: str, counter: Optional[int], on_totp: Callable, on_hotp: Callable):
    if strategy == "totp":
        return on_totp()
    if strategy == "hotp":
        if counter is None:
            raise ConfigurationError(
                "Counter is required for HOTP strategy. Example: strategy='hotp', counter=0"
            )
        return on_hotp(counter)
    raise ConfigurationError(f"Unknown OTP strategy: {strategy!r}. Valid strategies are 'totp' or 'hotp'.")


def generate_secret(
    length: int = SECRET_BYTES,
    crypto: Optional[CryptoPlugin] = None,
    base32: Optional[Base32Plugin] = None,
) -> str:
    """
    Random Base32 secret without '=' padding (the form authenticator apps
    accept).
    """
    crypto = crypto or default_crypto
    base32 = base32 or default_base32
    return base32.encode(crypto.random_bytes(length), padding=False)


def generate_uri(
    label: str,
    issuer: str,
    secret: str,
    strategy: str = "totp",
    algorithm: str = hotp.DEFAULT_ALGORITHM,
    digits: int = hotp.DEFAULT_DIGITS,
    period: int = totp.DEFAULT_TIME_STEP,
    counter: Optional[int] = None,
) -> str:
    return _dispatch(
        strategy,
        counter,
        lambda: uri.generate_totp_uri(label, issuer, secret, algorithm, digits, period),
        lambda c: uri.generate_hotp_uri(label, issuer, secret, algorithm, digits, c),
    )


def _generate_kwargs(algorithm, digits, crypto, base32, guardrails) -> dict:
    return {
        "algorithm": algorithm,
        "digits": digits,
        "crypto": crypto or default_crypto,
        "base32": base32 or default_base32,
        "guardrails": guardrails,
    }


def generate_sync(
    secret,
    strategy: str = "totp",
    counter: Optional[int] = None,
    epoch: Optional[float] = None,
    t0: float = totp.DEFAULT_T0,
    period: int = totp.DEFAULT_TIME_STEP,
    algorithm: str = hotp.DEFAULT_ALGORITHM,
    digits: int = hotp.DEFAULT_DIGITS,
    crypto: Optional[CryptoPlugin] = None,
    base32: Optional[Base32Plugin] = None,
    guardrails: Guardrails = DEFAULT_GUARDRAILS,
) -> str:
    kwargs = _generate_kwargs(algorithm, digits, crypto, base32, guardrails)
    return _dispatch(
        strategy,
        counter,
        lambda: totp.generate_sync(secret, epoch, t0=t0, period=period, **kwargs),
        lambda c: hotp.generate_sync(secret, c, **kwargs),
    )


async def generate(
    secret,
    strategy: str = "totp",
    counter: Optional[int] = None,
    epoch: Optional[float] = None,
    t0: float = totp.DEFAULT_T0,
    period: int = totp.DEFAULT_TIME_STEP,
    algorithm: str = hotp.DEFAULT_ALGORITHM,
    digits: int = hotp.DEFAULT_DIGITS,
    crypto: Optional[CryptoPlugin] = None,
    base32: Optional[Base32Plugin] = None,
    guardrails: Guardrails = DEFAULT_GUARDRAILS,
) -> str:
    kwargs = _generate_kwargs(algorithm, digits, crypto, base32, guardrails)
    return await _dispatch(
        strategy,
        counter,
        lambda: totp.generate(secret, epoch, t0=t0, period=period, **kwargs),
        lambda c: hotp.generate(secret, c, **kwargs),
    )


def verify_sync(
    secret,
    token: str,
    strategy: str = "totp",
    counter: Optional[int] = None,
    epoch: Optional[float] = None,
    t0: float = totp.DEFAULT_T0,
    period: int = totp.DEFAULT_TIME_STEP,
    epoch_tolerance: EpochTolerance = 0,
    counter_tolerance: CounterTolerance = 0,
    after_time_step: Optional[int] = None,
    algorithm: str = hotp.DEFAULT_ALGORITHM,
    digits: int = hotp.DEFAULT_DIGITS,
    crypto: Optional[CryptoPlugin] = None,
    base32: Optional[Base32Plugin] = None,
    guardrails: Guardrails = DEFAULT_GUARDRAILS,
) -> VerifyResult:
    kwargs = _generate_kwargs(algorithm, digits, crypto, base32, guardrails)
    return _dispatch(
        strategy,
        counter,
        lambda: totp.verify_sync(secret, token, epoch, t0=t0, period=period, epoch_tolerance=epoch_tolerance,
                                 after_time_step=after_time_step, **kwargs),
        lambda c: hotp.verify_sync(secret, c, token, counter_tolerance=counter_tolerance, **kwargs),
    )


async def verify(
    secret,
    token: str,
    strategy: str = "totp",
    counter: Optional[int] = None,
    epoch: Optional[float] = None,
    t0: float = totp.DEFAULT_T0,
    period: int = totp.DEFAULT_TIME_STEP,
    epoch_tolerance: EpochTolerance = 0,
    counter_tolerance: CounterTolerance = 0,
    after_time_step: Optional[int] = None,
    algorithm: str = hotp.DEFAULT_ALGORITHM,
    digits: int = hotp.DEFAULT_DIGITS,
    crypto: Optional[CryptoPlugin] = None,
    base32: Optional[Base32Plugin] = None,
    guardrails: Guardrails = DEFAULT_GUARDRAILS,
) -> VerifyResult:
    kwargs = _generate_kwargs(algorithm, digits, crypto, base32, guardrails)
    return await _dispatch(
        strategy,
        counter,
        lambda: totp.verify(secret, token, epoch, t0=t0, period=period, epoch_tolerance=epoch_tolerance,
                            after_time_step=after_time_step, **kwargs),
        lambda c: hotp.verify(secret, c, token, counter_tolerance=counter_tolerance, **kwargs),
    )
