"""Tests for the detection driver."""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest

from lib_shield.config import DetectorConfig, EmptyRangePolicy
from lib_shield.core import DetectedVulnerability, DriverFactory
from lib_shield.errors import StoreError, VersionParseError
from lib_shield.store import FileAdvisoryStore, SqliteAdvisoryStore, build_database

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def _driver(store, hint, **config):
    return DriverFactory(store, DetectorConfig(**config)).new_driver(hint)


@pytest.fixture
def driver_log(caplog):
    """Attach caplog to the Driver logger, which does not propagate."""
    logger = logging.getLogger("Driver")
    logger.addHandler(caplog.handler)
    yield caplog
    logger.removeHandler(caplog.handler)


class TestDetectScenarios:
    """Test detection against the bundled advisory fixtures."""

    def test_composer_vulnerable_version(self, fixture_store):
        store = fixture_store("php.yaml")
        results = _driver(store, "composer.lock").detect("symfony/symfony", "4.2.6")

        assert results == [
            DetectedVulnerability(
                vulnerability_id="CVE-2019-10909",
                pkg_name="symfony/symfony",
                installed_version="4.2.6",
                fixed_version="4.2.7",
                url="https://avd.aquasec.com/nvd/cve-2019-10909",
                title="Validation messages are not escaped when using the form theme of the PHP templating engine",
            )
        ]

    def test_composer_one_step_below_fix(self, fixture_store):
        store = fixture_store("php.yaml")
        results = _driver(store, "composer.lock").detect("symfony/symfony", "4.4.6")

        assert [r.vulnerability_id for r in results] == ["CVE-2020-5275"]
        assert results[0].fixed_version == "4.4.7"
        assert results[0].url == "https://avd.aquasec.com/nvd/cve-2020-5275"

    def test_composer_version_equal_to_fix(self, fixture_store):
        store = fixture_store("php.yaml")
        assert _driver(store, "composer.lock").detect("symfony/symfony", "4.4.7") == []

    def test_python_custom_vulnerability_id(self, fixture_store):
        store = fixture_store("python.yaml")
        results = _driver(store, "Pipfile.lock").detect("django-cors-headers/django-cors-headers", "2.5.2")

        assert results == [
            DetectedVulnerability(
                vulnerability_id="pyup.io-37132",
                pkg_name="django-cors-headers/django-cors-headers",
                installed_version="2.5.2",
                fixed_version=">=3.0.0",
            )
        ]
        assert results[0].url is None

    def test_ruby_without_vulnerable_versions(self, fixture_store):
        store = fixture_store("ruby.yaml")
        results = _driver(store, "Gemfile.lock").detect("activesupport", "4.1.1")

        assert len(results) == 1
        assert results[0].vulnerability_id == "CVE-2015-3226"
        assert results[0].fixed_version == ">= 4.2.2, ~> 4.1.11"
        assert results[0].url == "https://avd.aquasec.com/nvd/cve-2015-3226"

    @pytest.mark.parametrize("version", ["4.1.11", "4.1.16", "4.2.2", "5.0.0"])
    def test_ruby_patched_versions(self, fixture_store, version):
        store = fixture_store("ruby.yaml")
        assert _driver(store, "Gemfile.lock").detect("activesupport", version) == []

    def test_npm_or_range(self, fixture_store):
        store = fixture_store("npm.yaml")
        driver = _driver(store, "package-lock.json")

        assert [r.vulnerability_id for r in driver.detect("minimist", "1.2.0")] == ["CVE-2020-7598"]
        assert [r.vulnerability_id for r in driver.detect("minimist", "0.1.9")] == ["CVE-2020-7598"]
        assert driver.detect("minimist", "0.2.4") == []
        assert driver.detect("minimist", "1.2.3") == []

    def test_cargo_multiple_vulnerable_ranges(self, fixture_store):
        store = fixture_store("cargo.yaml")
        driver = _driver(store, "Cargo.lock")

        assert [r.vulnerability_id for r in driver.detect("smallvec", "1.6.0")] == ["RUSTSEC-2021-0003"]
        assert [r.vulnerability_id for r in driver.detect("smallvec", "0.6.13")] == ["RUSTSEC-2021-0003"]
        assert driver.detect("smallvec", "0.6.2") == []
        assert driver.detect("smallvec", "1.6.1") == []

    def test_unknown_package(self, fixture_store):
        store = fixture_store("php.yaml")
        assert _driver(store, "composer.lock").detect("laravel/framework", "5.0.0") == []


class TestBucketPolicy:
    """Test prefixed and legacy bucket lookup."""

    def test_legacy_bucket_fallback(self, fixture_store):
        store = fixture_store("php-without-prefix.yaml")
        results = _driver(store, "composer.lock").detect("symfony/symfony", "4.2.6")

        assert [r.vulnerability_id for r in results] == ["CVE-2019-10909"]
        assert results[0].fixed_version == "4.2.7"
        assert results[0].url is None

    def test_legacy_bucket_ignored_when_prefixed_has_records(self, write_fixture):
        path = write_fixture({
            "composer::GitHub Security Advisory Composer": {
                "symfony/symfony": [{"id": "CVE-NEW", "vulnerable_versions": ["< 1.0.0"]}],
            },
            "php-security-advisories": {
                "symfony/symfony": [{"id": "CVE-LEGACY", "vulnerable_versions": ["< 5.0.0"]}],
            },
        })
        with FileAdvisoryStore(path) as store:
            assert _driver(store, "composer.lock").detect("symfony/symfony", "4.2.6") == []

    def test_prefixed_buckets_merged_in_sorted_order(self, write_fixture):
        path = write_fixture({
            "npm::b-source": {"lodash": [{"id": "ADV-B"}]},
            "npm::a-source": {"lodash": [{"id": "ADV-A1"}, {"id": "ADV-A2"}]},
            "composer::a-source": {"lodash": [{"id": "ADV-COMPOSER"}]},
        })
        with FileAdvisoryStore(path) as store:
            results = _driver(store, "yarn.lock").detect("lodash", "4.17.0")

        assert [r.vulnerability_id for r in results] == ["ADV-A1", "ADV-A2", "ADV-B"]

    def test_other_ecosystem_buckets_not_consulted(self, fixture_store):
        store = fixture_store("php.yaml", "python.yaml")
        driver = _driver(store, "requirements.txt")
        assert driver.detect("symfony/symfony", "4.2.6") == []


class TestEmptyRanges:
    """Test advisories that carry no version information."""

    @pytest.fixture
    def store(self, write_fixture):
        path = write_fixture({
            "pip::source": {"requests": [{"id": "ADV-EMPTY", "vulnerable_versions": [" ", ""]}]},
        })
        with FileAdvisoryStore(path) as store:
            yield store

    def test_vulnerable_by_default(self, store):
        results = _driver(store, "pip").detect("requests", "2.0.0")
        assert [r.vulnerability_id for r in results] == ["ADV-EMPTY"]
        assert results[0].fixed_version == ""

    def test_safe_policy(self, store):
        driver = _driver(store, "pip", empty_range_policy=EmptyRangePolicy.SAFE)
        assert driver.detect("requests", "2.0.0") == []

    def test_blank_patched_entries_left_out_of_fixed_version(self, write_fixture):
        path = write_fixture({
            "pip::source": {"requests": [
                {"id": "ADV-1", "vulnerable_versions": ["<2.0"], "patched_versions": ["", " ", ">=2.0"]},
            ]},
        })
        with FileAdvisoryStore(path) as store:
            results = _driver(store, "pip").detect("requests", "1.5")
        assert [r.fixed_version for r in results] == [">=2.0"]

    def test_unaffected_versions_only(self, write_fixture):
        path = write_fixture({
            "pip::source": {"requests": [{"id": "ADV-1", "unaffected_versions": ["<2.0"]}]},
        })
        with FileAdvisoryStore(path) as store:
            driver = _driver(store, "pip")
            assert driver.detect("requests", "1.9") == []
            assert [r.vulnerability_id for r in driver.detect("requests", "2.1")] == ["ADV-1"]


class TestErrors:
    """Test error propagation and recovery."""

    def test_malformed_constraint_skips_advisory(self, write_fixture, driver_log):
        path = write_fixture({
            "composer::source": {
                "symfony/symfony": [
                    {"id": "ADV-BROKEN", "vulnerable_versions": ["< 5.0.0"], "patched_versions": [">= banana"]},
                    {"id": "ADV-OK", "vulnerable_versions": ["< 5.0.0"]},
                ],
            },
        })
        with FileAdvisoryStore(path) as store:
            driver = _driver(store, "composer.lock")
            results = driver.detect("symfony/symfony", "4.2.6")

        assert [r.vulnerability_id for r in results] == ["ADV-OK"]
        warnings = [r for r in driver_log.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "ADV-BROKEN" in warnings[0].getMessage()

    def test_malformed_constraint_skipped_even_when_out_of_range(self, write_fixture):
        path = write_fixture({
            "npm::source": {
                "lodash": [{"id": "ADV-BROKEN", "vulnerable_versions": ["<1.0.0", ">=abc"]}],
            },
        })
        with FileAdvisoryStore(path) as store:
            assert _driver(store, "npm").detect("lodash", "4.17.0") == []

    def test_invalid_installed_version(self, fixture_store):
        store = fixture_store("php.yaml")
        with pytest.raises(VersionParseError):
            _driver(store, "composer.lock").detect("symfony/symfony", "dev-master")

    def test_invalid_version_without_advisories(self, fixture_store):
        store = fixture_store("php.yaml")
        assert _driver(store, "composer.lock").detect("laravel/framework", "not a version") == []

    def test_closed_store(self, fixture_store):
        store = fixture_store("php.yaml")
        driver = _driver(store, "composer.lock")
        store.close()
        with pytest.raises(StoreError):
            driver.detect("symfony/symfony", "4.2.6")

    def test_repeated_calls_are_independent(self, fixture_store):
        store = fixture_store("php.yaml")
        driver = _driver(store, "composer.lock")
        first = driver.detect("symfony/symfony", "4.2.6")
        driver.detect("symfony/symfony", "4.4.7")
        assert driver.detect("symfony/symfony", "4.2.6") == first


class TestConcurrency:
    """Test one driver shared between threads."""

    queries = [
        ("symfony/symfony", "4.2.6"),
        ("symfony/symfony", "4.4.6"),
        ("symfony/symfony", "4.4.7"),
        ("laravel/framework", "5.0.0"),
    ]

    def test_shared_driver_over_sqlite(self, tmp_path):
        db_path = tmp_path / "advisories.db"
        build_database(db_path, [FIXTURES_DIR])

        with SqliteAdvisoryStore(db_path) as store:
            driver = _driver(store, "composer.lock")
            expected = [driver.detect(*query) for query in self.queries]

            def scan(worker):
                return [
                    driver.detect(*self.queries[(worker + i) % len(self.queries)])
                    for i in range(50)
                ]

            with ThreadPoolExecutor(max_workers=8) as executor:
                outcomes = list(executor.map(scan, range(8)))

        assert expected[0] and expected[1]
        for worker, results in enumerate(outcomes):
            assert results == [expected[(worker + i) % len(self.queries)] for i in range(50)]
