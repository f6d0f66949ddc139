"""PyPI version engine built on packaging (PEP 440)."""

from functools import lru_cache
from typing import Tuple

from packaging import version as packaging_version
from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import Version

from ..errors import InvalidConstraintError, VersionParseError
from .base import BaseComparator

_OPERATOR_CHARS = "<>=!~"


@lru_cache(maxsize=4096)
def parse_specifier(spec: str) -> Tuple[SpecifierSet, ...]:
    """Parse an advisory specifier into OR-ed specifier sets.

    Commas AND specifiers together as usual. ``||`` separates alternatives,
    and a bare version is shorthand for ``==``.

    Raises:
        InvalidConstraintError: If the specifier is malformed
    """
    sets = []
    for part in spec.split("||"):
        part = part.strip()
        if not part:
            raise InvalidConstraintError(spec, "pip", "empty specifier")
        if part[0] not in _OPERATOR_CHARS:
            part = f"=={part}"
        try:
            sets.append(SpecifierSet(part))
        except InvalidSpecifier as e:
            raise InvalidConstraintError(spec, "pip", str(e)) from e
    return tuple(sets)


class PipComparator(BaseComparator):
    """Comparator for Python packages (Pipfile.lock, poetry.lock)."""

    ecosystem = "pip"

    def parse_version(self, version: str) -> Version:
        try:
            return Version(version.strip())
        except packaging_version.InvalidVersion as e:
            raise VersionParseError(version, self.ecosystem, str(e)) from e

    def _matches(self, version: Version, spec: str) -> bool:
        # Installed prereleases are real installs, never filtered out
        return any(
            specifier_set.contains(version, prereleases=True)
            for specifier_set in parse_specifier(spec)
        )
