"""File-backed advisory store (YAML or JSON documents)."""

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

import yaml

from ..core.models import Advisory
from ..errors import StoreError
from ..utils.logging import get_logger
from ..utils.performance import benchmark
from .base import AdvisoryStore

PathLike = Union[str, Path]

SUPPORTED_SUFFIXES = (".yaml", ".yml", ".json")


def _load_document(path: Path) -> Any:
    """Load and parse one fixture file.

    Raises:
        StoreError: If the file cannot be read or parsed
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix == ".json":
                return json.load(f)
            return yaml.safe_load(f) or {}
    except OSError as e:
        raise StoreError(f"Cannot read advisory file {path}: {e}") from e
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise StoreError(f"Corrupt advisory file {path}: {e}") from e


def parse_document(document: Any, source: str) -> Dict[str, Dict[str, List[Advisory]]]:
    """Validate a ``{bucket: {package: [record, ...]}}`` document.

    Raises:
        StoreError: If the document does not have that shape
    """
    if not isinstance(document, dict):
        raise StoreError(f"{source}: top level must map bucket names to packages")

    buckets: Dict[str, Dict[str, List[Advisory]]] = {}
    for bucket, packages in document.items():
        if not isinstance(packages, dict):
            raise StoreError(f"{source}: bucket {bucket!r} must map package names to advisories")
        parsed_packages: Dict[str, List[Advisory]] = {}
        for pkg_name, records in packages.items():
            if not isinstance(records, list):
                raise StoreError(f"{source}: {bucket}/{pkg_name} must be a list of advisories")
            try:
                parsed_packages[str(pkg_name)] = [Advisory.from_dict(str(pkg_name), record) for record in records]
            except ValueError as e:
                raise StoreError(f"{source}: {bucket}/{pkg_name}: {e}") from e
        buckets[str(bucket)] = parsed_packages
    return buckets


class FileAdvisoryStore(AdvisoryStore):
    """Advisory store loaded into memory from fixture files.

    Accepts single files or directories; directories are searched
    recursively for .yaml, .yml and .json files in sorted order. When the
    same bucket and package appear in several files, records are appended
    in file order.
    """

    def __init__(self, paths: Union[PathLike, Sequence[PathLike]]) -> None:
        super().__init__()
        if isinstance(paths, (str, Path)):
            paths = [paths]
        self.paths = [Path(p) for p in paths]
        self.logger = get_logger("FileAdvisoryStore")
        self._buckets: Dict[str, Dict[str, List[Advisory]]] = {}

    def _files(self) -> List[Path]:
        files: List[Path] = []
        for path in self.paths:
            if path.is_dir():
                files.extend(sorted(
                    p for p in path.rglob("*")
                    if p.is_file() and p.suffix in SUPPORTED_SUFFIXES
                ))
            elif path.exists():
                files.append(path)
            else:
                raise StoreError(f"Advisory path does not exist: {path}")
        return files

    @benchmark
    def open(self) -> None:
        if self._is_open:
            return
        buckets: Dict[str, Dict[str, List[Advisory]]] = {}
        files = self._files()
        for path in files:
            for bucket, packages in parse_document(_load_document(path), str(path)).items():
                target = buckets.setdefault(bucket, {})
                for pkg_name, advisories in packages.items():
                    target.setdefault(pkg_name, []).extend(advisories)

        self._buckets = buckets
        self._is_open = True
        total = sum(len(a) for packages in buckets.values() for a in packages.values())
        self.logger.info(f"Loaded {total} advisories in {len(buckets)} buckets from {len(files)} files")

    def close(self) -> None:
        self._buckets = {}
        self._is_open = False

    def get(self, bucket: str, pkg_name: str) -> List[Advisory]:
        self._ensure_open()
        return list(self._buckets.get(bucket, {}).get(pkg_name, []))

    def bucket_names(self) -> List[str]:
        self._ensure_open()
        return list(self._buckets)

    def iter_records(self):
        """Yield ``(bucket, package, advisory)`` triples in store order."""
        self._ensure_open()
        for bucket, packages in self._buckets.items():
            for pkg_name, advisories in packages.items():
                for advisory in advisories:
                    yield bucket, pkg_name, advisory
