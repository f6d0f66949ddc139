"""Base comparator class shared by the ecosystem version engines."""

from abc import ABC, abstractmethod
from typing import Any, Union

from ..errors import VersionParseError


class BaseComparator(ABC):
    """Abstract base class for ecosystem version comparators.

    A comparator owns one ecosystem's version grammar, its ordering and its
    constraint language. Comparators hold no mutable state and can be shared
    between threads.
    """

    ecosystem: str = ""

    @abstractmethod
    def parse_version(self, version: str) -> Any:
        """Parse a version string.

        Args:
            version: Version string in the ecosystem's native format

        Returns:
            Comparable version object

        Raises:
            VersionParseError: If the string is not a valid version
        """

    @abstractmethod
    def _matches(self, version: Any, spec: str) -> bool:
        """Evaluate a constraint against an already parsed version.

        Raises:
            InvalidConstraintError: If the constraint is malformed
        """

    def _coerce(self, version: Union[str, Any]) -> Any:
        if isinstance(version, str):
            return self.parse_version(version)
        return version

    def satisfies(self, version: Union[str, Any], spec: str) -> bool:
        """Check whether a version satisfies a constraint.

        Args:
            version: Version string or object returned by parse_version()
            spec: Constraint in the ecosystem's grammar

        Returns:
            True if the version satisfies the constraint

        Raises:
            VersionParseError: If the version is invalid
            InvalidConstraintError: If the constraint is malformed
        """
        return self._matches(self._coerce(version), spec)

    def is_patched(self, version: Union[str, Any], spec: str) -> bool:
        """Check whether a version is covered by a patched-versions entry.

        A bare version ``X`` in a patched list means the fix landed in ``X``,
        so every version at or above ``X`` counts as patched. Anything else
        is evaluated as a regular constraint.
        """
        parsed = self._coerce(version)
        threshold = self._bare_version(spec)
        if threshold is not None:
            return parsed >= threshold
        return self._matches(parsed, spec)

    def compare(self, left: Union[str, Any], right: Union[str, Any]) -> int:
        """Three-way comparison of two versions (-1, 0 or 1)."""
        a = self._coerce(left)
        b = self._coerce(right)
        if a < b:
            return -1
        if a > b:
            return 1
        return 0

    def _bare_version(self, spec: str) -> Any:
        try:
            return self.parse_version(spec.strip())
        except VersionParseError:
            return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
