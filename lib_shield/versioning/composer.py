"""Composer version engine (Composer VersionParser semantics)."""

import re
from functools import lru_cache, total_ordering
from typing import List, Optional, Tuple

from ..errors import InvalidConstraintError, VersionParseError
from .base import BaseComparator

STABILITIES = {
    "dev": 0,
    "alpha": 1,
    "beta": 2,
    "rc": 3,
    "stable": 4,
    "patch": 5,
}

_STABILITY_ALIASES = {
    "a": "alpha",
    "alpha": "alpha",
    "b": "beta",
    "beta": "beta",
    "rc": "rc",
    "stable": "stable",
    "p": "patch",
    "pl": "patch",
    "patch": "patch",
}

_MODIFIER = r"[._-]?(?:(stable|beta|b|rc|alpha|a|patch|pl|p)((?:[.-]?\d+)*)?)?([.-]?dev)?"
_VERSION = re.compile(
    r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:\.(\d+))?" + _MODIFIER + r"$",
    re.IGNORECASE,
)
_WILDCARD = re.compile(r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?\.[*x]$", re.IGNORECASE)
_SIMPLE = re.compile(r"^(<>|!=|>=?|<=?|==?)?\s*(\S+)$")
_HYPHEN = re.compile(r"^(\S+)\s+-\s+(\S+)$")
_OPERATOR_SPACE = re.compile(r"(<>|!=|>=|<=|==|>|<|=)\s+")


@total_ordering
class ComposerVersion:
    """A normalized Composer version: four numeric parts plus a stability."""

    __slots__ = ("numbers", "stability", "stability_numbers", "dev", "explicit_stability", "given_parts")

    def __init__(
        self,
        numbers: Tuple[int, int, int, int],
        stability: str = "stable",
        stability_numbers: Tuple[int, ...] = (),
        dev: bool = False,
        explicit_stability: bool = False,
        given_parts: int = 4,
    ) -> None:
        self.numbers = numbers
        self.stability = stability
        self.stability_numbers = stability_numbers
        # "-dev" after a modifier, e.g. 1.0.0-RC1-dev sorts just below RC1
        self.dev = dev
        self.explicit_stability = explicit_stability
        self.given_parts = given_parts

    @classmethod
    def parse(cls, text: str) -> "ComposerVersion":
        """Normalize a Composer version string.

        Raises:
            ValueError: If the string is not a comparable version
        """
        text = text.strip()
        # Build metadata and inline aliases do not take part in ordering
        text = text.split("+", 1)[0]
        if " as " in text:
            text = text.split(" as ", 1)[0].strip()
        if text.lower().startswith("dev-"):
            raise ValueError(f"dev branch {text!r} has no release order")

        match = _VERSION.match(text)
        if not match:
            raise ValueError(f"invalid version string {text!r}")

        parts = [p for p in match.groups()[:4]]
        given = sum(1 for p in parts if p is not None)
        numbers = tuple(int(p) if p is not None else 0 for p in parts)
        modifier, modifier_numbers, dev_suffix = match.group(5), match.group(6), match.group(7)

        if modifier:
            stability = _STABILITY_ALIASES[modifier.lower()]
            digits = tuple(int(n) for n in re.findall(r"\d+", modifier_numbers or ""))
            return cls(numbers, stability, digits, bool(dev_suffix), True, given)  # type: ignore[arg-type]
        if dev_suffix:
            return cls(numbers, "dev", (), False, True, given)  # type: ignore[arg-type]
        return cls(numbers, "stable", (), False, False, given)  # type: ignore[arg-type]

    def with_stability(self, stability: str) -> "ComposerVersion":
        return ComposerVersion(self.numbers, stability, (), False, True, self.given_parts)

    def _key(self) -> Tuple:
        return (
            self.numbers,
            STABILITIES[self.stability],
            self.stability_numbers,
            0 if self.dev else 1,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ComposerVersion):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "ComposerVersion") -> bool:
        if not isinstance(other, ComposerVersion):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        text = ".".join(str(n) for n in self.numbers)
        if self.stability != "stable":
            text += "-" + self.stability + "".join(str(n) for n in self.stability_numbers)
        if self.dev:
            text += "-dev"
        return text

    def __repr__(self) -> str:
        return f"ComposerVersion('{self}')"


Constraint = Tuple[str, ComposerVersion]

_ANY: Tuple[Constraint, ...] = ()


def _lowest(numbers: List[int]) -> ComposerVersion:
    padded = (numbers + [0, 0, 0, 0])[:4]
    return ComposerVersion(tuple(padded), "dev", (), False, True)  # type: ignore[arg-type]


def _bump(numbers: List[int], position: int) -> ComposerVersion:
    """Increment the part at position, zero everything after it, mark as dev."""
    bumped = (numbers + [0, 0, 0, 0])[:4]
    bumped[position] += 1
    for i in range(position + 1, 4):
        bumped[i] = 0
    return _lowest(bumped)


def _numbers(version: ComposerVersion) -> List[int]:
    return list(version.numbers[:version.given_parts])


def _parse_version(text: str, spec: str) -> ComposerVersion:
    try:
        return ComposerVersion.parse(text)
    except ValueError as e:
        raise InvalidConstraintError(spec, "composer", str(e)) from e


def _tilde(text: str, spec: str) -> List[Constraint]:
    version = _parse_version(text, spec)
    numbers = _numbers(version)
    lower = version if version.explicit_stability else version.with_stability("dev")
    # ~1 behaves like ~1.0
    position = max(len(numbers) - 2, 0)
    return [(">=", lower), ("<", _bump(numbers, position))]


def _caret(text: str, spec: str) -> List[Constraint]:
    version = _parse_version(text, spec)
    numbers = _numbers(version)
    lower = version if version.explicit_stability else version.with_stability("dev")
    padded = numbers + [0] * (3 - len(numbers))
    if padded[0] != 0 or len(numbers) == 1:
        position = 0
    elif padded[1] != 0 or len(numbers) == 2:
        position = 1
    else:
        position = 2
    return [(">=", lower), ("<", _bump(numbers, position))]


def _wildcard(match: "re.Match[str]") -> List[Constraint]:
    numbers = [int(p) for p in match.groups() if p is not None]
    return [(">=", _lowest(numbers)), ("<", _bump(numbers, len(numbers) - 1))]


def _hyphen(low: str, high: str, spec: str) -> List[Constraint]:
    lower = _parse_version(low, spec)
    if not lower.explicit_stability:
        lower = lower.with_stability("dev")
    upper = _parse_version(high, spec)
    if upper.given_parts >= 3 or upper.explicit_stability:
        return [(">=", lower), ("<=", upper)]
    return [(">=", lower), ("<", _bump(_numbers(upper), upper.given_parts - 1))]


def _simple(text: str, spec: str) -> List[Constraint]:
    if text in ("*", "x", "X", "*.*", "x.x"):
        return list(_ANY)
    # Stability flags only steer dependency resolution
    text = re.sub(r"@(stable|rc|beta|alpha|dev)$", "", text, flags=re.IGNORECASE)

    if text.startswith("~"):
        return _tilde(text[1:].strip(), spec)
    if text.startswith("^"):
        return _caret(text[1:].strip(), spec)
    wildcard = _WILDCARD.match(text)
    if wildcard:
        return _wildcard(wildcard)

    match = _SIMPLE.match(text)
    if not match:
        raise InvalidConstraintError(spec, "composer", f"could not parse {text!r}")
    op, version_text = match.groups()
    op = {None: "==", "=": "==", "<>": "!="}.get(op, op)
    version = _parse_version(version_text, spec)
    # Open bounds include or exclude the whole dev/alpha/beta/RC line of a stable version
    if op in ("<", ">=") and not version.explicit_stability:
        version = version.with_stability("dev")
    return [(op, version)]


def _parse_and_group(text: str, spec: str) -> Tuple[Constraint, ...]:
    constraints: List[Constraint] = []
    for part in re.split(r"\s*[,;]\s*", text.strip()):
        if not part:
            raise InvalidConstraintError(spec, "composer", "empty constraint")
        hyphen = _HYPHEN.match(part)
        if hyphen:
            constraints.extend(_hyphen(hyphen.group(1), hyphen.group(2), spec))
            continue
        for token in _OPERATOR_SPACE.sub(r"\1", part).split():
            constraints.extend(_simple(token, spec))
    return tuple(constraints)


@lru_cache(maxsize=4096)
def parse_constraint(spec: str) -> Tuple[Tuple[Constraint, ...], ...]:
    """Parse a Composer constraint into OR-ed groups of (operator, version).

    Raises:
        InvalidConstraintError: If the constraint is malformed
    """
    if not spec.strip():
        raise InvalidConstraintError(spec, "composer", "empty constraint")
    return tuple(_parse_and_group(group, spec) for group in re.split(r"\s*\|\|?\s*", spec.strip()))


def _satisfied(op: str, version: ComposerVersion, bound: ComposerVersion) -> bool:
    if op == "==":
        return version == bound
    if op == "!=":
        return version != bound
    if op == "<":
        return version < bound
    if op == "<=":
        return version <= bound
    if op == ">":
        return version > bound
    return version >= bound


class ComposerComparator(BaseComparator):
    """Comparator for PHP packages (composer.lock)."""

    ecosystem = "composer"

    def parse_version(self, version: str) -> ComposerVersion:
        try:
            return ComposerVersion.parse(version)
        except ValueError as e:
            raise VersionParseError(version, self.ecosystem, str(e)) from e

    def _matches(self, version: ComposerVersion, spec: str) -> bool:
        return any(
            all(_satisfied(op, version, bound) for op, bound in group)
            for group in parse_constraint(spec)
        )

    def _bare_version(self, spec: str) -> Optional[ComposerVersion]:
        text = spec.strip()
        if not text or text[0] in "<>=!~^":
            return None
        return super()._bare_version(text)
