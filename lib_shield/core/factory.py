"""Ecosystem registry and driver factory."""

from dataclasses import dataclass
from pathlib import PurePath
from typing import Dict, List, Optional, Sequence, Union

from ..config import DetectorConfig
from ..errors import UnsupportedEcosystemError
from ..store.base import AdvisoryStore, BucketPolicy
from ..utils.logging import get_logger
from ..versioning import (
    BaseComparator,
    CargoComparator,
    ComposerComparator,
    NpmComparator,
    PipComparator,
    RubyGemsComparator,
)
from .driver import Driver
from .models import Ecosystem


@dataclass(frozen=True)
class EcosystemEntry:
    """Everything needed to build a driver for one ecosystem."""

    ecosystem: Ecosystem
    comparator: BaseComparator
    legacy_bucket: Optional[str]
    file_names: Sequence[str] = ()
    aliases: Sequence[str] = ()

    @property
    def policy(self) -> BucketPolicy:
        return BucketPolicy.for_ecosystem(self.ecosystem, self.legacy_bucket)


class EcosystemRegistry:
    """Registry mapping manifest names and ecosystem aliases to ecosystems."""

    def __init__(self) -> None:
        self._entries: Dict[Ecosystem, EcosystemEntry] = {}
        self._file_names: Dict[str, Ecosystem] = {}
        self._aliases: Dict[str, Ecosystem] = {}

    def register(self, entry: EcosystemEntry) -> None:
        """Register an ecosystem, replacing any earlier entry for it.

        Args:
            entry: Ecosystem definition to register
        """
        self._entries[entry.ecosystem] = entry
        for file_name in entry.file_names:
            self._file_names[file_name] = entry.ecosystem
        for alias in (entry.ecosystem.value, *entry.aliases):
            self._aliases[alias.lower()] = entry.ecosystem

    def get(self, ecosystem: Ecosystem) -> EcosystemEntry:
        return self._entries[ecosystem]

    def resolve(self, hint: Union[str, Ecosystem]) -> EcosystemEntry:
        """Find the entry for a hint.

        Args:
            hint: An Ecosystem, a manifest or lockfile path, or an
                ecosystem alias such as "pypi"

        Raises:
            UnsupportedEcosystemError: If nothing matches the hint
        """
        if isinstance(hint, Ecosystem):
            if hint in self._entries:
                return self._entries[hint]
            raise UnsupportedEcosystemError(hint.value)

        text = str(hint).strip()
        name = PurePath(text).name if text else ""
        ecosystem = self._file_names.get(name) or self._aliases.get(text.lower())
        if ecosystem is None or ecosystem not in self._entries:
            raise UnsupportedEcosystemError(str(hint))
        return self._entries[ecosystem]

    def supported_ecosystems(self) -> List[Ecosystem]:
        return list(self._entries)

    def supported_hints(self) -> List[str]:
        return sorted(self._file_names) + sorted(self._aliases)


def default_registry() -> EcosystemRegistry:
    """Registry with every built-in ecosystem."""
    registry = EcosystemRegistry()
    registry.register(EcosystemEntry(
        Ecosystem.COMPOSER,
        ComposerComparator(),
        "php-security-advisories",
        file_names=("composer.lock", "composer.json"),
        aliases=("php", "packagist"),
    ))
    registry.register(EcosystemEntry(
        Ecosystem.RUBYGEMS,
        RubyGemsComparator(),
        "ruby-advisory-db",
        file_names=("Gemfile.lock", "Gemfile", "gems.locked"),
        aliases=("ruby", "bundler", "gem"),
    ))
    registry.register(EcosystemEntry(
        Ecosystem.PIP,
        PipComparator(),
        "python-safety-db",
        file_names=("Pipfile.lock", "poetry.lock", "requirements.txt", "uv.lock"),
        aliases=("pypi", "python", "poetry", "pipenv"),
    ))
    registry.register(EcosystemEntry(
        Ecosystem.NPM,
        NpmComparator(),
        "nodejs-security-wg",
        file_names=("package-lock.json", "yarn.lock", "pnpm-lock.yaml", "package.json"),
        aliases=("node", "nodejs", "yarn"),
    ))
    registry.register(EcosystemEntry(
        Ecosystem.CARGO,
        CargoComparator(),
        "rust-advisory-db",
        file_names=("Cargo.lock",),
        aliases=("rust", "crates.io"),
    ))
    return registry


class DriverFactory:
    """Builds drivers bound to an injected advisory store.

    The factory performs no I/O; the store is only queried when a driver
    detects.
    """

    def __init__(
        self,
        store: AdvisoryStore,
        config: Optional[DetectorConfig] = None,
        registry: Optional[EcosystemRegistry] = None,
    ) -> None:
        self.store = store
        self.config = config or DetectorConfig()
        self.registry = registry or default_registry()
        self.logger = get_logger("DriverFactory")

    def new_driver(self, hint: Union[str, Ecosystem]) -> Driver:
        """Create the driver for an ecosystem hint.

        Args:
            hint: Manifest/lockfile name (e.g. "composer.lock"), ecosystem
                alias or Ecosystem

        Returns:
            Driver for the matching ecosystem

        Raises:
            UnsupportedEcosystemError: If the hint maps to no ecosystem
        """
        entry = self.registry.resolve(hint)
        self.logger.debug(f"Using {entry.ecosystem} driver for {hint}")
        return Driver(
            ecosystem=entry.ecosystem,
            comparator=entry.comparator,
            policy=entry.policy,
            store=self.store,
            empty_range_policy=self.config.empty_range_policy,
        )

    def supported_hints(self) -> List[str]:
        return self.registry.supported_hints()
