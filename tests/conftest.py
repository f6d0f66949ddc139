"""Shared fixtures for LibShield tests."""

import pytest
import yaml
from pathlib import Path

from lib_shield.store import FileAdvisoryStore

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def fixture_store():
    """Open a file store over the named fixture files."""
    stores = []

    def _open(*names):
        store = FileAdvisoryStore([FIXTURES_DIR / name for name in names])
        store.open()
        stores.append(store)
        return store

    yield _open
    for store in stores:
        store.close()


@pytest.fixture
def write_fixture(tmp_path):
    """Write an advisory document to a YAML file under tmp_path."""
    def _write(document, name="advisories.yaml"):
        path = tmp_path / name
        path.write_text(yaml.safe_dump(document, sort_keys=False))
        return path

    return _write
