"""npm version engine (node-semver range semantics)."""

import re
from functools import lru_cache

from semantic_version import NpmSpec, Version

from ..errors import InvalidConstraintError, VersionParseError
from .base import BaseComparator

_OPERATOR_SPACE = re.compile(r"(<=|>=|<|>|=|~|\^)\s+")
_PARTIAL = re.compile(r"^v?(\d+)(?:\.(\d+))?$")


def normalize_range(spec: str) -> str:
    """Rewrite advisory-feed range spellings into node-semver syntax.

    Feeds separate AND-ed comparators with commas, put spaces after
    operators and borrow ``~>`` from RubyGems.
    """
    text = " ".join(spec.replace(",", " ").split())
    text = text.replace("~>", "~")
    return _OPERATOR_SPACE.sub(r"\1", text)


@lru_cache(maxsize=4096)
def parse_range(spec: str) -> NpmSpec:
    """Parse an npm range.

    Raises:
        InvalidConstraintError: If the range is malformed
    """
    try:
        return NpmSpec(normalize_range(spec))
    except ValueError as e:
        raise InvalidConstraintError(spec, "npm", str(e)) from e


class NpmComparator(BaseComparator):
    """Comparator for npm packages (package-lock.json, yarn.lock)."""

    ecosystem = "npm"

    def parse_version(self, version: str) -> Version:
        text = version.strip()
        if text.startswith("v"):
            text = text[1:]
        try:
            return Version(text)
        except ValueError as e:
            raise VersionParseError(version, self.ecosystem, str(e)) from e

    def _matches(self, version: Version, spec: str) -> bool:
        return version in parse_range(spec)

    def _bare_version(self, spec: str):
        # "1.2" names the first release of its line
        partial = _PARTIAL.match(spec.strip())
        if partial:
            major, minor = partial.groups()
            return Version(major=int(major), minor=int(minor or 0), patch=0)
        return super()._bare_version(spec)
