"""Tests for otp_engine.totp."""

import math

import pytest

from otp_engine import totp
from otp_engine.errors import (
    CounterNegativeError,
    CounterOverflowError,
    EpochToleranceError,
    EpochToleranceNegativeError,
    EpochToleranceTooLargeError,
    HMACError,
    PeriodTooLargeError,
    PeriodTooSmallError,
    TimeNegativeError,
    TimeNotFiniteError,
)

from .conftest import (
    RFC_SECRET_SHA1,
    RFC_SECRET_SHA256,
    RFC_SECRET_SHA512,
    AsyncOnlyPlugin,
    ConstantDigestPlugin,
    run,
)

# ── RFC 6238 Appendix B test vectors ─────────────────────────────────────────
SECRETS = {"sha1": RFC_SECRET_SHA1, "sha256": RFC_SECRET_SHA256, "sha512": RFC_SECRET_SHA512}

RFC_TOTP_VECTORS = [
    (59, "sha1", "94287082"),
    (59, "sha256", "46119246"),
    (59, "sha512", "90693936"),
    (1111111109, "sha1", "07081804"),
    (1111111109, "sha256", "68084774"),
    (1111111109, "sha512", "25091201"),
    (1111111111, "sha1", "14050471"),
    (1111111111, "sha256", "67062674"),
    (1111111111, "sha512", "99943326"),
    (1234567890, "sha1", "89005924"),
    (1234567890, "sha256", "91819424"),
    (1234567890, "sha512", "93441116"),
    (2000000000, "sha1", "69279037"),
    (2000000000, "sha256", "90698825"),
    (2000000000, "sha512", "38618901"),
    (20000000000, "sha1", "65353130"),
    (20000000000, "sha256", "77737706"),
    (20000000000, "sha512", "47863826"),
]


@pytest.mark.parametrize("epoch,algorithm,expected", RFC_TOTP_VECTORS)
def test_totp_rfc6238_vectors(crypto, epoch: int, algorithm: str, expected: str) -> None:
    code = totp.generate_sync(SECRETS[algorithm], epoch, algorithm=algorithm, digits=8, crypto=crypto)
    assert code == expected


@pytest.mark.parametrize("epoch,algorithm,expected", RFC_TOTP_VECTORS[::3])
def test_totp_rfc6238_vectors_async(crypto, epoch: int, algorithm: str, expected: str) -> None:
    code = run(totp.generate(SECRETS[algorithm], epoch, algorithm=algorithm, digits=8, crypto=crypto))
    assert code == expected


@pytest.mark.parametrize("epoch,algorithm,expected", RFC_TOTP_VECTORS)
def test_totp_rfc6238_vectors_verify(crypto, epoch: int, algorithm: str, expected: str) -> None:
    result = totp.verify_sync(SECRETS[algorithm], expected, epoch, algorithm=algorithm, digits=8, crypto=crypto)
    assert result.valid
    assert result.delta == 0
    assert result.epoch == (epoch // 30) * 30


# ── Time steps ───────────────────────────────────────────────────────────────

def test_period_boundaries(crypto) -> None:
    assert totp.generate_sync(RFC_SECRET_SHA1, 29, crypto=crypto) == "755224"
    assert totp.generate_sync(RFC_SECRET_SHA1, 30, crypto=crypto) == "287082"
    assert totp.generate_sync(RFC_SECRET_SHA1, 59, crypto=crypto) == "287082"
    assert totp.generate_sync(RFC_SECRET_SHA1, 59.9, crypto=crypto) == "287082"


def test_custom_period_and_t0(crypto) -> None:
    assert totp.generate_sync(RFC_SECRET_SHA1, 60, period=60, crypto=crypto) == "287082"
    assert totp.generate_sync(RFC_SECRET_SHA1, 130, t0=100, crypto=crypto) == "287082"


def test_epoch_before_t0(crypto) -> None:
    with pytest.raises(CounterNegativeError):
        totp.generate_sync(RFC_SECRET_SHA1, 10, t0=100, crypto=crypto)


def test_huge_int_epoch(crypto) -> None:
    with pytest.raises(CounterOverflowError):
        totp.generate_sync(RFC_SECRET_SHA1, 10 ** 400, crypto=crypto)
    assert not totp.verify_sync(RFC_SECRET_SHA1, "287082", 10 ** 400, crypto=crypto).valid
    assert totp.get_time_step_used(10 ** 400) == 10 ** 400 // 30


def test_default_epoch_is_now(crypto, monkeypatch) -> None:
    monkeypatch.setattr(totp, "_now", lambda: 59)
    assert totp.generate_sync(RFC_SECRET_SHA1, digits=8, crypto=crypto) == "94287082"
    assert totp.verify_sync(RFC_SECRET_SHA1, "94287082", digits=8, crypto=crypto).valid


@pytest.mark.parametrize("epoch,error", [
    (-1, TimeNegativeError),
    (math.nan, TimeNotFiniteError),
    (math.inf, TimeNotFiniteError),
    ("59", TimeNotFiniteError),
])
def test_bad_epoch(crypto, epoch, error) -> None:
    with pytest.raises(error):
        totp.generate_sync(RFC_SECRET_SHA1, epoch, crypto=crypto)


@pytest.mark.parametrize("period,error", [
    (0, PeriodTooSmallError),
    (1.5, PeriodTooSmallError),
    (3601, PeriodTooLargeError),
])
def test_bad_period(crypto, period, error) -> None:
    with pytest.raises(error):
        totp.generate_sync(RFC_SECRET_SHA1, 59, period=period, crypto=crypto)


def test_sync_requires_sync_plugin() -> None:
    with pytest.raises(HMACError):
        totp.generate_sync(RFC_SECRET_SHA1, 59, crypto=AsyncOnlyPlugin())
    assert run(totp.generate(RFC_SECRET_SHA1, 59, digits=8, crypto=AsyncOnlyPlugin())) == "94287082"


# ── Verify window ────────────────────────────────────────────────────────────

def test_drift_within_tolerance(crypto) -> None:
    # code from step 1, checked during step 2
    result = totp.verify_sync(RFC_SECRET_SHA1, "94287082", 89, epoch_tolerance=30, digits=8, crypto=crypto)
    assert result.valid
    assert result.delta == -1
    assert result.epoch == 30
    assert result.as_dict() == {"valid": True, "delta": -1, "epoch": 30}


def test_drift_without_tolerance(crypto) -> None:
    assert not totp.verify_sync(RFC_SECRET_SHA1, "94287082", 89, digits=8, crypto=crypto)


def test_future_code(crypto) -> None:
    result = totp.verify_sync(RFC_SECRET_SHA1, "287082", 29, epoch_tolerance=(0, 1), crypto=crypto)
    assert result.valid and result.delta == 1


def test_acceptance_is_period_granular(crypto) -> None:
    # one second of past tolerance reaches back into the whole previous period
    result = totp.verify_sync(RFC_SECRET_SHA1, "287082", 60, epoch_tolerance=(1, 0), crypto=crypto)
    assert result.valid and result.delta == -1


def test_steps_checked_oldest_first() -> None:
    plugin = ConstantDigestPlugin()
    result = totp.verify_sync(RFC_SECRET_SHA1, "000000", 300, epoch_tolerance=60, crypto=plugin)
    assert result.delta == -2
    assert result.epoch == 240
    assert plugin.calls == [8]


def test_window_cost() -> None:
    plugin = ConstantDigestPlugin()
    totp.verify_sync(RFC_SECRET_SHA1, "111111", 300, epoch_tolerance=60, crypto=plugin)
    assert plugin.calls == [8, 9, 10, 11, 12]


def test_window_clamped_at_step_zero() -> None:
    plugin = ConstantDigestPlugin()
    totp.verify_sync(RFC_SECRET_SHA1, "111111", 10, epoch_tolerance=60, crypto=plugin)
    assert plugin.calls == [0, 1, 2]


def test_replay_floor(crypto) -> None:
    token = totp.generate_sync(RFC_SECRET_SHA1, 60, crypto=crypto)
    assert token == "359152"

    ok = totp.verify_sync(RFC_SECRET_SHA1, token, 90, epoch_tolerance=30, after_time_step=1, crypto=crypto)
    assert ok.valid and ok.delta == -1 and ok.epoch == 60

    replay = totp.verify_sync(RFC_SECRET_SHA1, token, 90, epoch_tolerance=30, after_time_step=2, crypto=crypto)
    assert not replay.valid


def test_replay_floor_skips_hmac() -> None:
    plugin = ConstantDigestPlugin()
    totp.verify_sync(RFC_SECRET_SHA1, "111111", 300, epoch_tolerance=60, after_time_step=9, crypto=plugin)
    assert plugin.calls == [10, 11, 12]


def test_verify_async(crypto) -> None:
    result = run(totp.verify(RFC_SECRET_SHA1, "94287082", 89, epoch_tolerance=30, digits=8, crypto=crypto))
    assert result.valid and result.delta == -1


# ── Epoch tolerance validation ───────────────────────────────────────────────

def test_epoch_tolerance_limit(crypto) -> None:
    # MAX_WINDOW (100) periods on either side
    assert totp.verify_sync(RFC_SECRET_SHA1, "287082", 59, epoch_tolerance=3000, crypto=crypto).valid
    with pytest.raises(EpochToleranceTooLargeError):
        totp.verify_sync(RFC_SECRET_SHA1, "287082", 59, epoch_tolerance=3001, crypto=crypto)
    with pytest.raises(EpochToleranceTooLargeError):
        totp.verify_sync(RFC_SECRET_SHA1, "287082", 59, epoch_tolerance=(0, 3001), crypto=crypto)


def test_epoch_tolerance_limit_scales_with_period(crypto) -> None:
    result = totp.verify_sync(RFC_SECRET_SHA1, "287082", 60, period=60, epoch_tolerance=6000, crypto=crypto)
    assert result.valid


@pytest.mark.parametrize("tolerance,error", [
    ((-1, 0), EpochToleranceNegativeError),
    (-5, EpochToleranceNegativeError),
    ("30", EpochToleranceError),
    ((1, 2, 3), EpochToleranceError),
    (1.5, EpochToleranceError),
])
def test_bad_epoch_tolerance(counting, tolerance, error) -> None:
    with pytest.raises(error):
        totp.verify_sync(RFC_SECRET_SHA1, "287082", 59, epoch_tolerance=tolerance, crypto=counting)
    assert counting.calls == []


# ── Time helpers ─────────────────────────────────────────────────────────────

@pytest.mark.parametrize("now,period,t0,expected", [
    (0, 30, 0, 30),
    (29, 30, 0, 1),
    (30, 30, 0, 30),
    (59, 30, 0, 1),
    (15, 30, 10, 25),
    (100, 60, 0, 20),
])
def test_get_remaining_time(now, period, t0, expected) -> None:
    assert totp.get_remaining_time(now, period, t0) == expected


@pytest.mark.parametrize("now,expected", [(0, 0), (29, 0), (30, 1), (59, 1), (1111111109, 37037036)])
def test_get_time_step_used(now, expected) -> None:
    assert totp.get_time_step_used(now) == expected


def test_time_helpers_validate() -> None:
    with pytest.raises(TimeNegativeError):
        totp.get_remaining_time(-1)
    with pytest.raises(PeriodTooSmallError):
        totp.get_time_step_used(10, period=0)
