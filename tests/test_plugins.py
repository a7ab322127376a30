"""Tests for the crypto / Base32 backends and constant-time compare."""

import hashlib

import pyotp
import pytest

from otp_engine import functional, hotp, totp
from otp_engine.compare import constant_time_equal
from otp_engine.errors import AlgorithmError, Base32DecodeError
from otp_engine.plugins import CryptographyCryptoPlugin, HashlibCryptoPlugin

from .conftest import RFC_SECRET_B32, RFC_SECRET_SHA1, RFC_SECRET_SHA256, AsyncOnlyPlugin, run


# ── Constant-time compare ────────────────────────────────────────────────────

@pytest.mark.parametrize("a,b,expected", [
    ("123456", "123456", True),
    ("123456", "023456", False),
    ("123456", "124456", False),
    ("123456", "123457", False),
    ("123456", "12345", False),
    ("", "", True),
    (b"\x00\x01", b"\x00\x01", True),
    (b"\x00\x01", "\x00\x01", True),
    ("é", "e", False),
])
def test_constant_time_equal(a, b, expected: bool) -> None:
    assert constant_time_equal(a, b) is expected


@pytest.mark.parametrize("plugin", [HashlibCryptoPlugin(), CryptographyCryptoPlugin(), AsyncOnlyPlugin()])
def test_plugin_compare(plugin) -> None:
    assert plugin.constant_time_equal("287082", "287082")
    assert not plugin.constant_time_equal("287082", "287083")
    assert not plugin.constant_time_equal("287082", "2870820")


# ── Crypto backends ──────────────────────────────────────────────────────────

@pytest.mark.parametrize("algorithm", ["sha1", "sha256", "sha512"])
def test_backends_agree(algorithm: str) -> None:
    data = hotp.counter_to_bytes(1234)
    stdlib = HashlibCryptoPlugin().hmac_sync(algorithm, RFC_SECRET_SHA256, data)
    openssl = CryptographyCryptoPlugin().hmac_sync(algorithm, RFC_SECRET_SHA256, data)
    assert stdlib == openssl
    assert len(stdlib) == {"sha1": 20, "sha256": 32, "sha512": 64}[algorithm]


def test_cryptography_backend_rfc_vector() -> None:
    plugin = CryptographyCryptoPlugin()
    assert hotp.generate_sync(RFC_SECRET_SHA1, 1, crypto=plugin) == "287082"
    assert run(totp.generate(RFC_SECRET_SHA1, 59, digits=8, crypto=plugin)) == "94287082"


@pytest.mark.parametrize("plugin", [HashlibCryptoPlugin(), CryptographyCryptoPlugin()])
def test_unknown_algorithm(plugin) -> None:
    with pytest.raises(AlgorithmError):
        plugin.hmac_sync("md5", b"k" * 16, b"data")


@pytest.mark.parametrize("plugin", [HashlibCryptoPlugin(), CryptographyCryptoPlugin()])
def test_random_bytes(plugin) -> None:
    first = plugin.random_bytes(20)
    assert len(first) == 20
    assert first != plugin.random_bytes(20)


# ── Base32 backend ───────────────────────────────────────────────────────────

def test_base32_encode(base32) -> None:
    assert base32.encode(RFC_SECRET_SHA1) == RFC_SECRET_B32
    assert base32.encode(b"a") == "ME======"
    assert base32.encode(b"a", padding=False) == "ME"


@pytest.mark.parametrize("text", [
    RFC_SECRET_B32,
    RFC_SECRET_B32.lower(),
    "GEZD GNBV GY3T QOJQ GEZD GNBV GY3T QOJQ",
    "gezd-gnbv-gy3t-qojq-gezd-gnbv-gy3t-qojq",
])
def test_base32_decode_is_lenient(base32, text: str) -> None:
    assert base32.decode(text) == RFC_SECRET_SHA1


def test_base32_decode_restores_padding(base32) -> None:
    assert base32.decode("ME") == b"a"
    assert base32.decode("ME======") == b"a"


@pytest.mark.parametrize("text", ["!!!!", "GEZDGNB1", "A"])
def test_base32_decode_errors(base32, text: str) -> None:
    with pytest.raises(Base32DecodeError):
        base32.decode(text)


# ── Interop with pyotp ───────────────────────────────────────────────────────

@pytest.mark.parametrize("counter", [0, 1, 9, 12345, 2 ** 40])
def test_hotp_matches_pyotp(counter: int) -> None:
    ours = functional.generate_sync(RFC_SECRET_B32, strategy="hotp", counter=counter)
    assert ours == pyotp.HOTP(RFC_SECRET_B32).at(counter)


@pytest.mark.parametrize("epoch", [0, 59, 1111111109, 1234567890, 2000000000])
def test_totp_matches_pyotp(epoch: int) -> None:
    assert functional.generate_sync(RFC_SECRET_B32, epoch=epoch) == pyotp.TOTP(RFC_SECRET_B32).at(epoch)


def test_totp_sha256_matches_pyotp(base32) -> None:
    secret = base32.encode(RFC_SECRET_SHA256, padding=False)
    ours = functional.generate_sync(secret, epoch=1234567890, algorithm="sha256", digits=8)
    theirs = pyotp.TOTP(secret, digits=8, digest=hashlib.sha256).at(1234567890)
    assert ours == theirs == "91819424"


def test_secrets_are_interchangeable() -> None:
    ours = functional.generate_secret()
    assert functional.verify_sync(ours, pyotp.TOTP(ours).at(1234567890), epoch=1234567890).valid

    theirs = pyotp.random_base32()
    token = functional.generate_sync(theirs, strategy="hotp", counter=3)
    assert pyotp.HOTP(theirs).verify(token, 3)
