"""
keysmith.errors
Exceptions raised by the generator core.
"""


class KeysmithError(Exception):
    """Base class for keysmith failures."""


class MalformedRequirements(KeysmithError, ValueError):
    """Caller-supplied requirements are missing, mistyped or contradictory."""

    def __init__(self, reason: str, field: str = None):
        super().__init__(reason)
        self.reason = reason
        self.field = field


class RandomSourceUnavailable(KeysmithError):
    """The secure random source kept failing; no biased fallback is used."""


class GenerationExhausted(KeysmithError):
    """Every candidate within the attempt budget was rejected."""

    def __init__(self, attempts: int):
        super().__init__(f"no acceptable password after {attempts} attempts")
        self.attempts = attempts
