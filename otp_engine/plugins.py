"""
plugins.py — crypto and Base32 capability interfaces, plus stock backends.

The engine never imports hashlib or base64 directly; it talks to a
CryptoPlugin (HMAC, random bytes, constant-time compare) and, for string
secrets, a Base32Plugin. Plugins are injected per call.

Backends shipped here:
- HashlibCryptoPlugin       hmac + hashlib + os.urandom (standard library)
- CryptographyCryptoPlugin  cryptography.hazmat HMAC (OpenSSL backed)
- StdlibBase32Plugin        base64.b32encode / b32decode

A plugin that only implements the coroutine `hmac` is valid; the *_sync
engine entry points then fail with HMACError.
"""

import base64
import binascii
import hashlib
import hmac as std_hmac
import os
import re
from abc import ABC, abstractmethod

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac as crypto_hmac

from .compare import constant_time_equal, to_bytes
from .errors import AlgorithmError, Base32DecodeError

# digest sizes in bytes: sha1 20, sha256 32, sha512 64
DIGEST_SIZES = {"sha1": 20, "sha256": 32, "sha512": 64}


class CryptoPlugin(ABC):
    """HMAC / randomness backend consumed by the engine."""

    @abstractmethod
    async def hmac(self, algorithm: str, key: bytes, data: bytes) -> bytes:
        ...

    @abstractmethod
    def random_bytes(self, length: int) -> bytes:
        ...

    def constant_time_equal(self, a, b) -> bool:
        return constant_time_equal(a, b)


class Base32Plugin(ABC):
    @abstractmethod
    def encode(self, data: bytes, padding: bool = True) -> str:
        ...

    @abstractmethod
    def decode(self, text: str) -> bytes:
        ...


# --- Crypto backends -------------------------------------------------------
class HashlibCryptoPlugin(CryptoPlugin):
    """Standard library backend: hmac.new(key, msg, hashlib.<alg>)."""

    _DIGESTS = {"sha1": hashlib.sha1, "sha256": hashlib.sha256, "sha512": hashlib.sha512}

    def hmac_sync(self, algorithm: str, key: bytes, data: bytes) -> bytes:
        try:
            digestmod = self._DIGESTS[algorithm]
        except KeyError:
            raise AlgorithmError(f"Unsupported HMAC algorithm '{algorithm}'") from None
        return std_hmac.new(key, data, digestmod).digest()

    async def hmac(self, algorithm: str, key: bytes, data: bytes) -> bytes:
        return self.hmac_sync(algorithm, key, data)

    def random_bytes(self, length: int) -> bytes:
        return os.urandom(length)

    def constant_time_equal(self, a, b) -> bool:
        return std_hmac.compare_digest(to_bytes(a), to_bytes(b))


class CryptographyCryptoPlugin(CryptoPlugin):
    """Backend built on the `cryptography` package (OpenSSL HMAC)."""

    _HASHES = {"sha1": hashes.SHA1, "sha256": hashes.SHA256, "sha512": hashes.SHA512}

    def hmac_sync(self, algorithm: str, key: bytes, data: bytes) -> bytes:
        try:
            hash_cls = self._HASHES[algorithm]
        except KeyError:
            raise AlgorithmError(f"Unsupported HMAC algorithm '{algorithm}'") from None
        h = crypto_hmac.HMAC(key, hash_cls())
        h.update(data)
        return h.finalize()

    async def hmac(self, algorithm: str, key: bytes, data: bytes) -> bytes:
        return self.hmac_sync(algorithm, key, data)

    def random_bytes(self, length: int) -> bytes:
        return os.urandom(length)


# --- Base32 backend --------------------------------------------------------
_SEPARATORS = re.compile(r"[\s-]+")


class StdlibBase32Plugin(Base32Plugin):
    """
    RFC 4648 Base32 via the base64 module.

    decode() is lenient the way authenticator apps are: case-insensitive,
    spaces and dashes ignored, missing '=' padding restored.
    """

    def encode(self, data: bytes, padding: bool = True) -> str:
        b32 = base64.b32encode(bytes(data)).decode("ascii")
        return b32 if padding else b32.rstrip("=")

    def decode(self, text: str) -> bytes:
        cleaned = _SEPARATORS.sub("", text).rstrip("=")
        cleaned += "=" * (-len(cleaned) % 8)
        try:
            return base64.b32decode(cleaned, casefold=True)
        except (binascii.Error, ValueError) as e:
            raise Base32DecodeError(str(e)) from e
