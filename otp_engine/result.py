"""
result.py — verification results and the non-throwing call wrappers.

wrap_result / wrap_result_async turn an engine call that raises OTPError into
one that returns Ok(value) or Err(error). The concrete error class is kept,
so `isinstance(res.error, SecretTooShortError)` still works. Anything that is
not an OTPError (a crashing plugin, KeyboardInterrupt, ...) still propagates.
"""

import functools
from typing import Any, Awaitable, Callable, NamedTuple, Optional

from .errors import OTPError


class VerifyResult(NamedTuple):
    valid: bool
    delta: Optional[int] = None
    # TOTP only: start of the matched period, in epoch seconds
    epoch: Optional[int] = None

    def __bool__(self) -> bool:
        return self.valid

    @classmethod
    def invalid(cls) -> "VerifyResult":
        return cls(False)

    def as_dict(self) -> dict:
        if not self.valid:
            return {"valid": False}
        out = {"valid": True, "delta": self.delta}
        if self.epoch is not None:
            out["epoch"] = self.epoch
        return out


class Ok(NamedTuple):
    value: Any
    ok: bool = True


class Err(NamedTuple):
    error: OTPError
    ok: bool = False


def wrap_result(fn: Callable[..., Any]) -> Callable[..., Any]:
    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return Ok(fn(*args, **kwargs))
        except OTPError as e:
            return Err(e)

    return wrapper


def wrap_result_async(fn: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
    @functools.wraps(fn)
    async def wrapper(*args, **kwargs):
        try:
            return Ok(await fn(*args, **kwargs))
        except OTPError as e:
            return Err(e)

    return wrapper
