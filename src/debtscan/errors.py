"""Exception types raised by debtscan."""


class DebtScanError(Exception):
    """Base class for all debtscan errors."""


class ConfigError(DebtScanError):
    """Configuration values that cannot work together."""


class ProviderError(DebtScanError):
    """An embedding or generation backend failed or answered nonsense."""


class CacheIntegrityError(DebtScanError):
    """A cache entry matches the requested key but its contents are broken.

    Loading it would hand the index chunks and vectors that are no longer
    co-indexed, so this is raised instead of being treated as a miss.
    """


class ValidationExhaustedError(DebtScanError):
    """Generated output failed validation on every allowed attempt."""

    def __init__(self, attempts: int, last_error: str):
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Validation failed after {attempts} attempts. Last error: {last_error}"
        )
