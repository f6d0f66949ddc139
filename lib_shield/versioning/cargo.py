"""Cargo version engine (Rust semver crate requirement semantics)."""

import re
from functools import lru_cache
from typing import List, NamedTuple, Optional, Tuple

from semantic_version import Version

from ..errors import InvalidConstraintError, VersionParseError
from .base import BaseComparator

_REQUIREMENT = re.compile(
    r"^(=|>=|>|<=|<|~|\^)?\s*"
    r"(\d+|[*xX])"
    r"(?:\.(\d+|[*xX]))?"
    r"(?:\.(\d+|[*xX]))?"
    r"(?:-([0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
)
_WILDCARDS = ("*", "x", "X")


class Requirement(NamedTuple):
    """One comparator of a Cargo version requirement, as written."""

    op: str
    major: Optional[int]
    minor: Optional[int]
    patch: Optional[int]
    pre: Tuple
    bounds: Tuple[Tuple[str, Version], ...]

    def allows_prerelease_of(self, version: Version) -> bool:
        return (
            bool(self.pre)
            and self.major == version.major
            and self.minor == version.minor
            and self.patch == version.patch
        )


def _release(major: int, minor: int = 0, patch: int = 0, pre: Tuple = ()) -> Version:
    return Version(major=major, minor=minor, patch=patch, prerelease=pre)


def _bounds(op: str, major: int, minor: Optional[int], patch: Optional[int], pre: Tuple) -> List[Tuple[str, Version]]:
    full = _release(major, minor or 0, patch or 0, pre)

    if op == "=":
        if minor is None:
            return [(">=", _release(major)), ("<", _release(major + 1))]
        if patch is None:
            return [(">=", _release(major, minor)), ("<", _release(major, minor + 1))]
        return [("=", full)]
    if op == ">":
        if minor is None:
            return [(">=", _release(major + 1))]
        if patch is None:
            return [(">=", _release(major, minor + 1))]
        return [(">", full)]
    if op == ">=":
        return [(">=", full)]
    if op == "<":
        return [("<", full)]
    if op == "<=":
        if minor is None:
            return [("<", _release(major + 1))]
        if patch is None:
            return [("<", _release(major, minor + 1))]
        return [("<=", full)]
    if op == "~":
        if minor is None:
            return [(">=", full), ("<", _release(major + 1))]
        return [(">=", full), ("<", _release(major, minor + 1))]

    # Caret, also the default operator
    if major > 0 or minor is None:
        upper = _release(major + 1)
    elif minor > 0 or patch is None:
        upper = _release(0, minor + 1)
    else:
        upper = _release(0, 0, patch + 1)
    return [(">=", full), ("<", upper)]


def _parse_comparator(text: str, spec: str) -> Requirement:
    match = _REQUIREMENT.match(text)
    if not match:
        raise InvalidConstraintError(spec, "cargo", f"bad comparator {text!r}")
    op, major, minor, patch, pre = match.groups()
    op = op or "^"

    parts = [major, minor, patch]
    wildcard = next((i for i, part in enumerate(parts) if part in _WILDCARDS), None)
    if wildcard is not None:
        if op not in ("^", "=") or any(p is not None and p not in _WILDCARDS for p in parts[wildcard:]):
            raise InvalidConstraintError(spec, "cargo", f"unexpected wildcard in {text!r}")
        if pre:
            raise InvalidConstraintError(spec, "cargo", "wildcard with prerelease")
        if wildcard == 0:
            return Requirement("*", None, None, None, (), ())
        numbers = [int(p) for p in parts[:wildcard]]
        major_n = numbers[0]
        minor_n = numbers[1] if wildcard == 2 else None
        return Requirement("=", major_n, minor_n, None, (), tuple(_bounds("=", major_n, minor_n, None, ())))

    if pre and patch is None:
        raise InvalidConstraintError(spec, "cargo", "prerelease requires a full version")
    major_n = int(major)
    minor_n = int(minor) if minor is not None else None
    patch_n = int(patch) if patch is not None else None
    pre_ids = tuple(pre.split(".")) if pre else ()
    return Requirement(op, major_n, minor_n, patch_n, pre_ids, tuple(_bounds(op, major_n, minor_n, patch_n, pre_ids)))


@lru_cache(maxsize=4096)
def parse_requirement(spec: str) -> Tuple[Tuple[Requirement, ...], ...]:
    """Parse a Cargo requirement into OR-ed groups of comparators.

    Comma separates AND-ed comparators. ``||`` is not part of Cargo.toml
    syntax but appears in advisory feeds, so it is accepted as OR.

    Raises:
        InvalidConstraintError: If the requirement is malformed
    """
    groups = []
    for group in spec.split("||"):
        parts = [part.strip() for part in group.split(",")]
        if any(not part for part in parts):
            raise InvalidConstraintError(spec, "cargo", "empty comparator")
        groups.append(tuple(_parse_comparator(part, spec) for part in parts))
    return tuple(groups)


def _test(op: str, version: Version, bound: Version) -> bool:
    if op == "=":
        # Build metadata does not take part in precedence
        return version.precedence_key == bound.precedence_key
    if op == "<":
        return version < bound
    if op == "<=":
        return version <= bound
    if op == ">":
        return version > bound
    return version >= bound


def _matches_group(group: Tuple[Requirement, ...], version: Version) -> bool:
    for requirement in group:
        if not all(_test(op, version, bound) for op, bound in requirement.bounds):
            return False
    if not version.prerelease:
        return True
    return any(requirement.allows_prerelease_of(version) for requirement in group)


class CargoComparator(BaseComparator):
    """Comparator for Rust crates (Cargo.lock)."""

    ecosystem = "cargo"

    def parse_version(self, version: str) -> Version:
        text = version.strip()
        if text.startswith("v"):
            raise VersionParseError(version, self.ecosystem, "leading 'v' is not allowed")
        try:
            return Version(text)
        except ValueError as e:
            raise VersionParseError(version, self.ecosystem, str(e)) from e

    def _matches(self, version: Version, spec: str) -> bool:
        return any(_matches_group(group, version) for group in parse_requirement(spec))
