"""
uri.py — otpauth:// key URIs for authenticator apps (Google Authenticator,
Authy, ...).

- TOTP: otpauth://totp/{issuer}:{label}?secret=...&issuer=...&algorithm=...&digits=...&period=...
- HOTP: otpauth://hotp/{issuer}:{label}?secret=...&issuer=...&algorithm=...&digits=...&counter=...

Issuer and label are percent-encoded. Only generation lives here; parsing a
URI back is left to the caller.
"""

from urllib.parse import quote, urlencode

from .errors import IssuerMissingError, LabelMissingError, SecretMissingError, SecretTypeError
from .hotp import DEFAULT_ALGORITHM, DEFAULT_DIGITS
from .totp import DEFAULT_TIME_STEP
from .validators import validate_algorithm, validate_digits


def _check(label, issuer, secret) -> None:
    if not secret:
        raise SecretMissingError()
    if not label:
        raise LabelMissingError()
    if not issuer:
        raise IssuerMissingError()
    if not isinstance(secret, str):
        raise SecretTypeError()


def _build(otp_type: str, label: str, issuer: str, params: dict) -> str:
    path = f"{quote(issuer, safe='')}:{quote(label, safe='@')}"
    query = urlencode(params, quote_via=quote)
    return f"otpauth://{otp_type}/{path}?{query}"


def generate_totp_uri(
    label: str,
    issuer: str,
    secret: str,
    algorithm: str = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    period: int = DEFAULT_TIME_STEP,
) -> str:
    """
    Build a TOTP key URI.

    Arguments:
        label: account name, e.g. 'alice@example.com'
        issuer: service name, e.g. 'MyService'
        secret: Base32 secret (string, no padding needed)

    Raises:
        LabelMissingError, IssuerMissingError, SecretTypeError
    """
    _check(label, issuer, secret)
    algorithm = validate_algorithm(algorithm)
    validate_digits(digits)
    return _build("totp", label, issuer, {
        "secret": secret,
        "issuer": issuer,
        "algorithm": algorithm.upper(),
        "digits": digits,
        "period": period,
    })


def generate_hotp_uri(
    label: str,
    issuer: str,
    secret: str,
    algorithm: str = DEFAULT_ALGORITHM,
    digits: int = DEFAULT_DIGITS,
    counter: int = 0,
) -> str:
    _check(label, issuer, secret)
    algorithm = validate_algorithm(algorithm)
    validate_digits(digits)
    return _build("hotp", label, issuer, {
        "secret": secret,
        "issuer": issuer,
        "algorithm": algorithm.upper(),
        "digits": digits,
        "counter": counter,
    })
