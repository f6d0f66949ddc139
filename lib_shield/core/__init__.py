"""Core detection logic for LibShield."""

from .models import Advisory, DetectedVulnerability, Ecosystem
from .assembler import ResultAssembler
from .driver import Driver
from .factory import DriverFactory, EcosystemEntry, EcosystemRegistry, default_registry

__all__ = [
    "Advisory",
    "DetectedVulnerability",
    "Ecosystem",
    "ResultAssembler",
    "Driver",
    "DriverFactory",
    "EcosystemEntry",
    "EcosystemRegistry",
    "default_registry",
]
