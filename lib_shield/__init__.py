"""LibShield - ecosystem-aware detection of vulnerable library versions."""

__version__ = "0.1.0"

from .config import DetectorConfig, EmptyRangePolicy
from .core import Advisory, DetectedVulnerability, Driver, DriverFactory, Ecosystem
from .errors import (
    InvalidConstraintError,
    LibShieldError,
    StoreError,
    UnsupportedEcosystemError,
    VersionParseError,
)
from .store import AdvisoryStore, FileAdvisoryStore, SqliteAdvisoryStore, build_database, open_store

__all__ = [
    "DetectorConfig",
    "EmptyRangePolicy",
    "Advisory",
    "DetectedVulnerability",
    "Driver",
    "DriverFactory",
    "Ecosystem",
    "InvalidConstraintError",
    "LibShieldError",
    "StoreError",
    "UnsupportedEcosystemError",
    "VersionParseError",
    "AdvisoryStore",
    "FileAdvisoryStore",
    "SqliteAdvisoryStore",
    "build_database",
    "open_store",
]
