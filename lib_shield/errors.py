"""Exception hierarchy for LibShield."""

from typing import Optional


class LibShieldError(Exception):
    """Base class for all LibShield errors."""


class UnsupportedEcosystemError(LibShieldError, ValueError):
    """Raised when an ecosystem hint maps to no known driver."""

    def __init__(self, hint: str) -> None:
        self.hint = hint
        super().__init__(f"Unsupported ecosystem: {hint!r}")


class VersionParseError(LibShieldError, ValueError):
    """Raised when a version string does not follow the ecosystem grammar."""

    def __init__(self, version: str, ecosystem: str, reason: Optional[str] = None) -> None:
        self.version = version
        self.ecosystem = ecosystem
        message = f"Invalid {ecosystem} version: {version!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class InvalidConstraintError(LibShieldError, ValueError):
    """Raised when an advisory constraint cannot be parsed."""

    def __init__(self, constraint: str, ecosystem: str, reason: Optional[str] = None) -> None:
        self.constraint = constraint
        self.ecosystem = ecosystem
        message = f"Invalid {ecosystem} constraint: {constraint!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class StoreError(LibShieldError):
    """Raised when the advisory store cannot be read."""
