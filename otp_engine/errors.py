"""
errors.py — exception hierarchy for otp_engine.

Every error raised by the engine derives from OTPError, so callers can catch
the whole family at once or a single concrete class. Validation errors are
raised before any HMAC is computed; plugin failures are never wrapped.
"""


class OTPError(Exception):
    """Base class for all otp_engine errors."""


# --- Secret ----------------------------------------------------------------
class SecretError(OTPError):
    pass


class SecretTooShortError(SecretError):
    def __init__(self, min_bytes: int, actual_bytes: int):
        super().__init__(
            f"Secret must be at least {min_bytes} bytes ({min_bytes * 8} bits), "
            f"got {actual_bytes} bytes"
        )
        self.min_bytes = min_bytes
        self.actual_bytes = actual_bytes


class SecretTooLongError(SecretError):
    def __init__(self, max_bytes: int, actual_bytes: int):
        super().__init__(f"Secret must not exceed {max_bytes} bytes, got {actual_bytes} bytes")
        self.max_bytes = max_bytes
        self.actual_bytes = actual_bytes


# --- Counter ---------------------------------------------------------------
class CounterError(OTPError):
    pass


class CounterNegativeError(CounterError):
    def __init__(self):
        super().__init__("Counter must be non-negative")


class CounterOverflowError(CounterError):
    def __init__(self, max_counter: int):
        super().__init__(f"Counter exceeds maximum allowed value {max_counter}")
        self.max_counter = max_counter


class CounterNotIntegerError(CounterError):
    def __init__(self):
        super().__init__("Counter must be an integer")


# --- Time / period ---------------------------------------------------------
class TimeError(OTPError):
    pass


class TimeNegativeError(TimeError):
    def __init__(self):
        super().__init__("Time must be non-negative")


class TimeNotFiniteError(TimeError):
    def __init__(self):
        super().__init__("Time must be a finite number")


class PeriodError(OTPError):
    pass


class PeriodTooSmallError(PeriodError):
    def __init__(self, min_period: int):
        super().__init__(f"Period must be an integer of at least {min_period} second(s)")
        self.min_period = min_period


class PeriodTooLargeError(PeriodError):
    def __init__(self, max_period: int):
        super().__init__(f"Period must not exceed {max_period} seconds")
        self.max_period = max_period


# --- Digits / algorithm ----------------------------------------------------
class DigitsError(OTPError):
    pass


class AlgorithmError(OTPError):
    pass


# --- Token -----------------------------------------------------------------
class TokenError(OTPError):
    pass


class TokenLengthError(TokenError):
    def __init__(self, expected: int, actual: int):
        super().__init__(f"Token must be {expected} digits, got {actual}")
        self.expected = expected
        self.actual = actual


class TokenFormatError(TokenError):
    def __init__(self):
        super().__init__("Token must contain only digits")


# --- Tolerance windows -----------------------------------------------------
class CounterToleranceError(OTPError):
    pass


class CounterToleranceTooLargeError(CounterToleranceError):
    def __init__(self, max_window: int, actual: int):
        super().__init__(
            f"Counter tolerance checks {actual} counters, the limit is {max_window}"
        )
        self.max_window = max_window
        self.actual = actual


class EpochToleranceError(OTPError):
    pass


class EpochToleranceNegativeError(EpochToleranceError):
    def __init__(self):
        super().__init__("Epoch tolerance cannot contain negative values")


class EpochToleranceTooLargeError(EpochToleranceError):
    def __init__(self, max_seconds: int, actual: int):
        super().__init__(
            f"Epoch tolerance of {actual} seconds exceeds the limit of {max_seconds} seconds"
        )
        self.max_seconds = max_seconds
        self.actual = actual


# --- Crypto / Base32 -------------------------------------------------------
class CryptoError(OTPError):
    pass


class HMACError(CryptoError):
    def __init__(self, message: str):
        super().__init__(f"HMAC computation failed: {message}")


class Base32Error(OTPError):
    pass


class Base32DecodeError(Base32Error):
    def __init__(self, message: str):
        super().__init__(f"Base32 decoding failed: {message}")


# --- Configuration ---------------------------------------------------------
class ConfigurationError(OTPError):
    pass


class SecretMissingError(ConfigurationError):
    def __init__(self):
        super().__init__(
            "Secret is required. Example: generate_secret() or pass secret=b'...'"
        )


class SecretTypeError(ConfigurationError):
    def __init__(self, message: str = "Secret must be a Base32 string"):
        super().__init__(message)


class LabelMissingError(ConfigurationError):
    def __init__(self):
        super().__init__("Label is required for URI generation. Example: label='user@example.com'")


class IssuerMissingError(ConfigurationError):
    def __init__(self):
        super().__init__("Issuer is required for URI generation. Example: issuer='MyApp'")


class PluginError(ConfigurationError):
    pass


class CryptoPluginMissingError(PluginError):
    def __init__(self):
        super().__init__("Crypto plugin is required.")


class Base32PluginMissingError(PluginError):
    def __init__(self):
        super().__init__("Base32 plugin is required to decode string secrets.")
