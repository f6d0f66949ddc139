"""RubyGems version engine (Gem::Version and Gem::Requirement semantics)."""

import re
from functools import lru_cache, total_ordering
from typing import List, Tuple, Union

from ..errors import InvalidConstraintError, VersionParseError
from .base import BaseComparator

Segment = Union[int, str]

_VERSION = re.compile(r"^[0-9]+(?:\.[0-9a-zA-Z]+)*(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$")
_SEGMENT = re.compile(r"[0-9]+|[a-zA-Z]+")
_REQUIREMENT = re.compile(r"^(=|!=|>=|>|<=|<|~>)?\s*(\S+)$")


@total_ordering
class GemVersion:
    """A RubyGems version.

    Segments are split on dots and on letter/digit boundaries. Any letter
    segment makes the version a prerelease, and numeric segments sort above
    string segments at the same position.
    """

    __slots__ = ("text", "segments", "_canonical")

    def __init__(self, text: str) -> None:
        text = text.strip()
        if not text:
            text = "0"
        if not _VERSION.match(text):
            raise ValueError(f"Malformed version number string {text}")
        self.text = text
        normalized = text.replace("-", ".pre.")
        self.segments: Tuple[Segment, ...] = tuple(
            int(s) if s.isdigit() else s for s in _SEGMENT.findall(normalized)
        )
        self._canonical = self._canonical_segments()

    def _canonical_segments(self) -> Tuple[Segment, ...]:
        string_start = next(
            (i for i, s in enumerate(self.segments) if isinstance(s, str)),
            len(self.segments),
        )
        numeric = list(self.segments[:string_start])
        strings = list(self.segments[string_start:])
        # Trailing zeros carry no meaning in either half
        for part in (numeric, strings):
            while part and part[-1] == 0:
                part.pop()
        return tuple(numeric + strings)

    @property
    def is_prerelease(self) -> bool:
        return any(isinstance(s, str) for s in self.segments)

    def release(self) -> "GemVersion":
        """The version with every prerelease segment removed."""
        if not self.is_prerelease:
            return self
        segments = list(self.segments)
        while any(isinstance(s, str) for s in segments):
            segments.pop()
        return GemVersion(".".join(str(s) for s in segments))

    def bump(self) -> "GemVersion":
        """The upper bound used by the pessimistic operator."""
        segments = list(self.segments)
        while any(isinstance(s, str) for s in segments):
            segments.pop()
        if len(segments) > 1:
            segments.pop()
        segments[-1] = int(segments[-1]) + 1
        return GemVersion(".".join(str(s) for s in segments))

    def _cmp(self, other: "GemVersion") -> int:
        lhs, rhs = self._canonical, other._canonical
        for i in range(max(len(lhs), len(rhs))):
            left = lhs[i] if i < len(lhs) else 0
            right = rhs[i] if i < len(rhs) else 0
            if left == right:
                continue
            if isinstance(left, str) and isinstance(right, int):
                return -1
            if isinstance(left, int) and isinstance(right, str):
                return 1
            return -1 if left < right else 1
        return 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GemVersion):
            return NotImplemented
        return self._cmp(other) == 0

    def __lt__(self, other: "GemVersion") -> bool:
        if not isinstance(other, GemVersion):
            return NotImplemented
        return self._cmp(other) < 0

    def __hash__(self) -> int:
        return hash(self._canonical)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"GemVersion('{self.text}')"


def _satisfied(op: str, version: GemVersion, bound: GemVersion) -> bool:
    if op == "=":
        return version == bound
    if op == "!=":
        return version != bound
    if op == ">":
        return version > bound
    if op == "<":
        return version < bound
    if op == ">=":
        return version >= bound
    if op == "<=":
        return version <= bound
    # "~>"
    return version >= bound and version.release() < bound.bump()


@lru_cache(maxsize=4096)
def parse_requirement(spec: str) -> Tuple[Tuple[Tuple[str, GemVersion], ...], ...]:
    """Parse a requirement string into OR-ed groups of (operator, version).

    Commas and semicolons separate AND-ed clauses, ``||`` separates
    alternatives.

    Raises:
        InvalidConstraintError: If the requirement is malformed
    """
    groups = []
    for group in spec.split("||"):
        clauses: List[Tuple[str, GemVersion]] = []
        for clause in re.split(r"[,;]", group):
            clause = clause.strip()
            match = _REQUIREMENT.match(clause)
            if not match:
                raise InvalidConstraintError(spec, "rubygems", f"bad clause {clause!r}")
            op, text = match.groups()
            try:
                clauses.append((op or "=", GemVersion(text)))
            except ValueError as e:
                raise InvalidConstraintError(spec, "rubygems", str(e)) from e
        groups.append(tuple(clauses))
    return tuple(groups)


class RubyGemsComparator(BaseComparator):
    """Comparator for Ruby gems (Gemfile.lock)."""

    ecosystem = "rubygems"

    def parse_version(self, version: str) -> GemVersion:
        if not version.strip():
            raise VersionParseError(version, self.ecosystem, "empty version")
        try:
            return GemVersion(version)
        except ValueError as e:
            raise VersionParseError(version, self.ecosystem, str(e)) from e

    def _matches(self, version: GemVersion, spec: str) -> bool:
        return any(
            all(_satisfied(op, version, bound) for op, bound in group)
            for group in parse_requirement(spec)
        )
