"""
classes.py — HOTP / TOTP objects that remember their options.

Handy when one service issues codes for many users with the same settings:

    totp = TOTP(issuer="MyService", crypto=HashlibCryptoPlugin(), base32=StdlibBase32Plugin())
    secret = totp.generate_secret()
    uri = totp.to_uri(label="alice@example.com", secret=secret)
    totp.verify_sync(user_code, secret=secret, epoch_tolerance=30)

OTP holds a strategy name and hands each call to HOTP or TOTP.

Per-call keyword arguments override the stored options. The math is all in
hotp.py / totp.py; these classes only merge options.
"""

from typing import Any, Optional

from . import functional, hotp, totp, uri
from .errors import Base32PluginMissingError, ConfigurationError, CryptoPluginMissingError, SecretMissingError
from .guardrails import create_guardrails
from .result import VerifyResult

_SECRET_BYTES = 20


class _OTPBase:
    _defaults: dict = {}

    def __init__(self, guardrails=None, **options: Any):
        self.options = dict(self._defaults)
        self.options.update(options)
        if guardrails is None or isinstance(guardrails, dict):
            guardrails = create_guardrails(guardrails)
        self.guardrails = guardrails

    def _merged(self, overrides: dict) -> dict:
        opts = dict(self.options)
        opts.update({k: v for k, v in overrides.items() if v is not None})
        opts.setdefault("guardrails", self.guardrails)
        if not opts.get("secret"):
            raise SecretMissingError()
        if opts.get("crypto") is None:
            raise CryptoPluginMissingError()
        return opts

    def generate_secret(self, length: int = _SECRET_BYTES) -> str:
        crypto = self.options.get("crypto")
        base32 = self.options.get("base32")
        if crypto is None:
            raise CryptoPluginMissingError()
        if base32 is None:
            raise Base32PluginMissingError()
        return base32.encode(crypto.random_bytes(length), padding=False)

    def _uri_fields(self, label, issuer, secret):
        return (
            label if label is not None else self.options.get("label"),
            issuer if issuer is not None else self.options.get("issuer"),
            secret if secret is not None else self.options.get("secret"),
        )


class HOTP(_OTPBase):
    """
    Options: secret, counter, algorithm, digits, counter_tolerance, crypto,
    base32, label, issuer, guardrails.

    generate and verify need a counter, stored or per call; to_uri defaults
    it to 0.
    """

    _defaults = {"algorithm": hotp.DEFAULT_ALGORITHM, "digits": hotp.DEFAULT_DIGITS, "counter_tolerance": 0}

    def _generate_args(self, overrides):
        opts = self._merged(overrides)
        counter = opts.get("counter")
        if counter is None:
            raise ConfigurationError("Counter is required for HOTP. Example: otp.generate_sync(counter=0)")
        kwargs = {k: opts.get(k) for k in ("algorithm", "digits", "crypto", "base32", "guardrails")}
        return opts, counter, kwargs

    async def generate(self, **overrides) -> str:
        opts, counter, kwargs = self._generate_args(overrides)
        return await hotp.generate(opts["secret"], counter, **kwargs)

    def generate_sync(self, **overrides) -> str:
        opts, counter, kwargs = self._generate_args(overrides)
        return hotp.generate_sync(opts["secret"], counter, **kwargs)

    async def verify(self, token: str, **overrides) -> VerifyResult:
        opts, counter, kwargs = self._generate_args(overrides)
        return await hotp.verify(opts["secret"], counter, token,
                                 counter_tolerance=opts["counter_tolerance"], **kwargs)

    def verify_sync(self, token: str, **overrides) -> VerifyResult:
        opts, counter, kwargs = self._generate_args(overrides)
        return hotp.verify_sync(opts["secret"], counter, token,
                                counter_tolerance=opts["counter_tolerance"], **kwargs)

    def to_uri(self, label: Optional[str] = None, issuer: Optional[str] = None,
               secret: Optional[str] = None, counter: Optional[int] = None) -> str:
        label, issuer, secret = self._uri_fields(label, issuer, secret)
        if counter is None:
            counter = self.options.get("counter") or 0
        return uri.generate_hotp_uri(label, issuer, secret, self.options["algorithm"], self.options["digits"],
                                     counter)


class TOTP(_OTPBase):
    """
    Options: secret, epoch, t0, period, algorithm, digits, epoch_tolerance,
    after_time_step, crypto, base32, label, issuer, guardrails.
    """

    _defaults = {
        "algorithm": hotp.DEFAULT_ALGORITHM,
        "digits": hotp.DEFAULT_DIGITS,
        "period": totp.DEFAULT_TIME_STEP,
        "t0": totp.DEFAULT_T0,
        "epoch_tolerance": 0,
    }

    def _generate_args(self, overrides):
        opts = self._merged(overrides)
        kwargs = {k: opts.get(k) for k in ("t0", "period", "algorithm", "digits", "crypto", "base32",
                                             "guardrails")}
        return opts, kwargs

    async def generate(self, **overrides) -> str:
        opts, kwargs = self._generate_args(overrides)
        return await totp.generate(opts["secret"], opts.get("epoch"), **kwargs)

    def generate_sync(self, **overrides) -> str:
        opts, kwargs = self._generate_args(overrides)
        return totp.generate_sync(opts["secret"], opts.get("epoch"), **kwargs)

    async def verify(self, token: str, **overrides) -> VerifyResult:
        opts, kwargs = self._generate_args(overrides)
        return await totp.verify(opts["secret"], token, opts.get("epoch"),
                                 epoch_tolerance=opts["epoch_tolerance"],
                                 after_time_step=opts.get("after_time_step"), **kwargs)

    def verify_sync(self, token: str, **overrides) -> VerifyResult:
        opts, kwargs = self._generate_args(overrides)
        return totp.verify_sync(opts["secret"], token, opts.get("epoch"),
                                epoch_tolerance=opts["epoch_tolerance"],
                                after_time_step=opts.get("after_time_step"), **kwargs)

    def to_uri(self, label: Optional[str] = None, issuer: Optional[str] = None,
               secret: Optional[str] = None) -> str:
        label, issuer, secret = self._uri_fields(label, issuer, secret)
        return uri.generate_totp_uri(label, issuer, secret, self.options["algorithm"], self.options["digits"],
                                     self.options["period"])


class OTP(_OTPBase):
    """
    Either strategy behind one object, mirroring the functional API.

        otp = OTP(strategy="hotp")
        secret = otp.generate_secret()
        otp.generate_sync(secret=secret, counter=0)

    Options: everything HOTP and TOTP accept. crypto and base32 default to
    the functional API's HashlibCryptoPlugin / StdlibBase32Plugin.

    Raises:
        ConfigurationError: unknown strategy
    """

    def __init__(self, strategy: str = "totp", guardrails=None, **options: Any):
        if strategy not in functional.STRATEGIES:
            raise ConfigurationError(
                f"Unknown OTP strategy: {strategy!r}. Valid strategies are 'totp' or 'hotp'."
            )
        options.setdefault("crypto", functional.default_crypto)
        options.setdefault("base32", functional.default_base32)
        super().__init__(guardrails, **options)
        self.strategy = strategy

    def get_strategy(self) -> str:
        return self.strategy

    def _delegate(self, overrides: dict):
        counter = overrides.get("counter")
        if counter is None:
            counter = self.options.get("counter")
        return functional._dispatch(
            self.strategy,
            counter,
            lambda: TOTP(self.guardrails, **self.options),
            lambda c: HOTP(self.guardrails, **self.options),
        )

    async def generate(self, **overrides) -> str:
        return await self._delegate(overrides).generate(**overrides)

    def generate_sync(self, **overrides) -> str:
        return self._delegate(overrides).generate_sync(**overrides)

    async def verify(self, token: str, **overrides) -> VerifyResult:
        return await self._delegate(overrides).verify(token, **overrides)

    def verify_sync(self, token: str, **overrides) -> VerifyResult:
        return self._delegate(overrides).verify_sync(token, **overrides)

    def generate_uri(self, label: Optional[str] = None, issuer: Optional[str] = None,
                     secret: Optional[str] = None, counter: Optional[int] = None) -> str:
        if counter is None:
            counter = self.options.get("counter") or 0
        return functional._dispatch(
            self.strategy,
            counter,
            lambda: TOTP(self.guardrails, **self.options).to_uri(label, issuer, secret),
            lambda c: HOTP(self.guardrails, **self.options).to_uri(label, issuer, secret, c),
        )
