"""Ecosystem-specific version comparators."""

from .base import BaseComparator
from .cargo import CargoComparator
from .composer import ComposerComparator
from .npm import NpmComparator
from .pep440 import PipComparator
from .rubygems import RubyGemsComparator

__all__ = [
    "BaseComparator",
    "CargoComparator",
    "ComposerComparator",
    "NpmComparator",
    "PipComparator",
    "RubyGemsComparator",
]
