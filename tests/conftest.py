import asyncio

import pytest

from otp_engine.plugins import CryptoPlugin, HashlibCryptoPlugin, StdlibBase32Plugin

# RFC 4226 Appendix D / RFC 6238 Appendix B secrets
RFC_SECRET_SHA1 = b"12345678901234567890"
RFC_SECRET_SHA256 = b"12345678901234567890123456789012"
RFC_SECRET_SHA512 = b"1234567890123456789012345678901234567890123456789012345678901234"
RFC_SECRET_B32 = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"


def run(coro):
    return asyncio.run(coro)


class CountingPlugin(HashlibCryptoPlugin):
    """Records every HMAC request."""

    def __init__(self):
        self.calls = []

    def hmac_sync(self, algorithm, key, data):
        self.calls.append(int.from_bytes(data, "big"))
        return super().hmac_sync(algorithm, key, data)


class AsyncOnlyPlugin(CryptoPlugin):
    """No hmac_sync, like a WebCrypto-style backend."""

    def __init__(self):
        self._inner = HashlibCryptoPlugin()

    async def hmac(self, algorithm, key, data):
        await asyncio.sleep(0)
        return self._inner.hmac_sync(algorithm, key, data)

    def random_bytes(self, length):
        return self._inner.random_bytes(length)


class ConstantDigestPlugin(CountingPlugin):
    """Same all-zero digest for every counter -> every candidate is '000000'."""

    def hmac_sync(self, algorithm, key, data):
        self.calls.append(int.from_bytes(data, "big"))
        return bytes(20)


class ExplodingPlugin(HashlibCryptoPlugin):
    def hmac_sync(self, algorithm, key, data):
        raise RuntimeError("backend down")


@pytest.fixture
def crypto():
    return HashlibCryptoPlugin()


@pytest.fixture
def base32():
    return StdlibBase32Plugin()


@pytest.fixture
def counting():
    return CountingPlugin()
