"""Tests for the ecosystem registry and driver factory."""

import pytest

from lib_shield.config import DetectorConfig, EmptyRangePolicy
from lib_shield.core import DriverFactory, Ecosystem, EcosystemEntry, EcosystemRegistry, default_registry
from lib_shield.errors import UnsupportedEcosystemError
from lib_shield.store import FileAdvisoryStore
from lib_shield.versioning import (
    CargoComparator,
    ComposerComparator,
    NpmComparator,
    PipComparator,
    RubyGemsComparator,
)


@pytest.fixture
def unopened_store(tmp_path):
    """A store that was never opened."""
    return FileAdvisoryStore(tmp_path / "missing.yaml")


class TestEcosystemRegistry:
    """Test hint resolution."""

    @pytest.mark.parametrize("hint,ecosystem", [
        ("composer.lock", Ecosystem.COMPOSER),
        ("composer.json", Ecosystem.COMPOSER),
        ("Gemfile.lock", Ecosystem.RUBYGEMS),
        ("gems.locked", Ecosystem.RUBYGEMS),
        ("Pipfile.lock", Ecosystem.PIP),
        ("poetry.lock", Ecosystem.PIP),
        ("requirements.txt", Ecosystem.PIP),
        ("package-lock.json", Ecosystem.NPM),
        ("yarn.lock", Ecosystem.NPM),
        ("pnpm-lock.yaml", Ecosystem.NPM),
        ("Cargo.lock", Ecosystem.CARGO),
        ("/srv/app/composer.lock", Ecosystem.COMPOSER),
        ("PyPI", Ecosystem.PIP),
        ("crates.io", Ecosystem.CARGO),
        ("ruby", Ecosystem.RUBYGEMS),
        (Ecosystem.NPM, Ecosystem.NPM),
    ])
    def test_resolve(self, hint, ecosystem):
        assert default_registry().resolve(hint).ecosystem == ecosystem

    @pytest.mark.parametrize("hint", ["pom.xml", "go.sum", "", "composer.lock.bak"])
    def test_unsupported(self, hint):
        with pytest.raises(UnsupportedEcosystemError) as exc_info:
            default_registry().resolve(hint)
        assert exc_info.value.hint == hint

    def test_legacy_buckets(self):
        registry = default_registry()
        assert {e.value: registry.get(e).legacy_bucket for e in registry.supported_ecosystems()} == {
            "composer": "php-security-advisories",
            "rubygems": "ruby-advisory-db",
            "pip": "python-safety-db",
            "npm": "nodejs-security-wg",
            "cargo": "rust-advisory-db",
        }

    def test_custom_registry(self):
        registry = EcosystemRegistry()
        registry.register(EcosystemEntry(Ecosystem.NPM, NpmComparator(), None, file_names=("bun.lockb",)))

        assert registry.resolve("bun.lockb").ecosystem == Ecosystem.NPM
        with pytest.raises(UnsupportedEcosystemError):
            registry.resolve("composer.lock")
        with pytest.raises(UnsupportedEcosystemError):
            registry.resolve(Ecosystem.CARGO)


class TestDriverFactory:
    """Test driver construction."""

    @pytest.mark.parametrize("hint,comparator_class", [
        ("composer.lock", ComposerComparator),
        ("Gemfile.lock", RubyGemsComparator),
        ("Pipfile.lock", PipComparator),
        ("package-lock.json", NpmComparator),
        ("Cargo.lock", CargoComparator),
    ])
    def test_each_ecosystem_owns_its_comparator(self, unopened_store, hint, comparator_class):
        driver = DriverFactory(unopened_store).new_driver(hint)
        assert isinstance(driver.comparator, comparator_class)

    def test_policy(self, unopened_store):
        driver = DriverFactory(unopened_store).new_driver("composer.lock")
        assert driver.policy.prefix == "composer::"
        assert driver.policy.legacy == "php-security-advisories"

    def test_new_driver_does_not_touch_store(self, unopened_store):
        DriverFactory(unopened_store).new_driver("Cargo.lock")
        assert not unopened_store.is_open

    def test_unsupported_hint(self, unopened_store):
        with pytest.raises(UnsupportedEcosystemError):
            DriverFactory(unopened_store).new_driver("mix.lock")

    def test_config_reaches_driver(self, write_fixture):
        path = write_fixture({"cargo::source": {"serde": [{"id": "ADV-EMPTY"}]}})
        config = DetectorConfig(empty_range_policy=EmptyRangePolicy.SAFE)
        with FileAdvisoryStore(path) as store:
            assert DriverFactory(store, config).new_driver("Cargo.lock").detect("serde", "1.0.0") == []
            assert len(DriverFactory(store).new_driver("Cargo.lock").detect("serde", "1.0.0")) == 1

    def test_supported_hints(self, unopened_store):
        hints = DriverFactory(unopened_store).supported_hints()
        assert "composer.lock" in hints
        assert "pypi" in hints
