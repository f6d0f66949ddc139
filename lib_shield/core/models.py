"""Data models for advisories and detection results."""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple


class Ecosystem(str, Enum):
    """Package ecosystems with a dedicated version engine."""

    COMPOSER = "composer"
    RUBYGEMS = "rubygems"
    PIP = "pip"
    NPM = "npm"
    CARGO = "cargo"

    def __str__(self) -> str:
        return self.value


def _string_tuple(value: Any, field_name: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        raise ValueError(f"{field_name} must be a list of strings, not a string")
    if not isinstance(value, Iterable):
        raise ValueError(f"{field_name} must be a list of strings")
    items = tuple(value)
    for item in items:
        if not isinstance(item, str):
            raise ValueError(f"{field_name} contains a non-string entry: {item!r}")
    return items


@dataclass(frozen=True)
class Advisory:
    """One vulnerability affecting one package, as stored in a bucket."""

    vulnerability_id: str
    pkg_name: str = ""
    vulnerable_versions: Tuple[str, ...] = ()
    patched_versions: Tuple[str, ...] = ()
    unaffected_versions: Tuple[str, ...] = ()
    title: str = ""
    references: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate advisory data."""
        if not self.vulnerability_id:
            raise ValueError("Vulnerability ID cannot be empty")
        for name in ("vulnerable_versions", "patched_versions", "unaffected_versions", "references"):
            object.__setattr__(self, name, _string_tuple(getattr(self, name), name))

    @classmethod
    def from_dict(cls, pkg_name: str, data: Mapping[str, Any]) -> "Advisory":
        """Build an advisory from a stored record.

        Args:
            pkg_name: Package the record is filed under
            data: Record with an ``id`` and optional version lists

        Raises:
            ValueError: If the record is malformed
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"advisory record for {pkg_name} must be a mapping")
        vulnerability_id = data.get("id") or data.get("vulnerability_id")
        if not isinstance(vulnerability_id, str):
            raise ValueError(f"advisory record for {pkg_name} has no id")
        title = data.get("title") or ""
        if not isinstance(title, str):
            raise ValueError(f"title of {vulnerability_id} must be a string")

        return cls(
            vulnerability_id=vulnerability_id,
            pkg_name=pkg_name,
            vulnerable_versions=data.get("vulnerable_versions"),  # type: ignore[arg-type]
            patched_versions=data.get("patched_versions"),  # type: ignore[arg-type]
            unaffected_versions=data.get("unaffected_versions"),  # type: ignore[arg-type]
            title=title,
            references=data.get("references"),  # type: ignore[arg-type]
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the stored record shape."""
        record: Dict[str, Any] = {"id": self.vulnerability_id}
        for name in ("vulnerable_versions", "patched_versions", "unaffected_versions", "references"):
            values = getattr(self, name)
            if values:
                record[name] = list(values)
        if self.title:
            record["title"] = self.title
        return record


@dataclass(frozen=True)
class DetectedVulnerability:
    """A vulnerability that applies to an installed package version."""

    vulnerability_id: str
    pkg_name: str
    installed_version: str
    fixed_version: str = ""
    url: Optional[str] = None
    title: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
