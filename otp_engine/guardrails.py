"""
guardrails.py — immutable bounds policy shared by every validator.

The defaults follow RFC 4226 / RFC 6238 recommendations:

- MIN_SECRET_BYTES = 16   (128-bit minimum, RFC 4226 section 4 R6)
- MAX_SECRET_BYTES = 64   (not in the RFCs; bounds HMAC key size)
- MIN_PERIOD / MAX_PERIOD = 1 .. 3600 seconds
- MAX_COUNTER = 2**53 - 1
- MAX_WINDOW = 100        (caps HMAC calls per verification)

create_guardrails() does not range-check custom values. Weakening a bound is
allowed on purpose; has_guardrail_overrides() lets callers audit for it.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

# --- Config / constants ----------------------------------------------------
MIN_SECRET_BYTES = 16
MAX_SECRET_BYTES = 64
MIN_PERIOD = 1
MAX_PERIOD = 3600
MAX_COUNTER = 2 ** 53 - 1
MAX_WINDOW = 100

# counters are packed as unsigned 64-bit big-endian
COUNTER_FIELD_MAX = 2 ** 64 - 1


@dataclass(frozen=True)
class Guardrails:
    MIN_SECRET_BYTES: int = MIN_SECRET_BYTES
    MAX_SECRET_BYTES: int = MAX_SECRET_BYTES
    MIN_PERIOD: int = MIN_PERIOD
    MAX_PERIOD: int = MAX_PERIOD
    MAX_COUNTER: int = MAX_COUNTER
    MAX_WINDOW: int = MAX_WINDOW

    def as_dict(self) -> Dict[str, int]:
        """Public bounds, safe to serialize."""
        return asdict(self)

    @property
    def counter_limit(self) -> int:
        """MAX_COUNTER, capped to what the 8-byte counter field can hold."""
        return min(self.MAX_COUNTER, COUNTER_FIELD_MAX)


DEFAULT_GUARDRAILS = Guardrails()

_FIELD_NAMES = frozenset(DEFAULT_GUARDRAILS.as_dict())


def create_guardrails(custom: Optional[Mapping[str, Any]] = None, **overrides: Any) -> Guardrails:
    """
    Build a guardrails policy by merging overrides onto the defaults.

    Overrides can be given as a mapping, as keyword arguments, or both
    (keywords win). With no overrides the shared DEFAULT_GUARDRAILS instance
    is returned.

    Arguments:
        custom: mapping of field name -> value, e.g. {"MAX_WINDOW": 10}
        **overrides: same fields as keyword arguments

    Returns:
        Guardrails: frozen policy

    Raises:
        ConfigurationError: an unknown field name was given
    """
    merged = dict(custom or {})
    merged.update(overrides)
    if not merged:
        return DEFAULT_GUARDRAILS

    unknown = set(merged) - _FIELD_NAMES
    if unknown:
        raise ConfigurationError(f"Unknown guardrail field(s): {', '.join(sorted(unknown))}")

    guardrails = Guardrails(**merged)
    if has_guardrail_overrides(guardrails):
        logger.warning("Non-default OTP guardrails in use: %s", guardrails.as_dict())
    return guardrails


def has_guardrail_overrides(guardrails: Guardrails) -> bool:
    """
    True when any bound differs from the defaults.

    Compares values, so a policy built with Guardrails(...) or
    dataclasses.replace() is caught the same as one from create_guardrails().
    """
    return guardrails != DEFAULT_GUARDRAILS
