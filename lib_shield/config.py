"""Runtime configuration for LibShield."""

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, Union

ENV_DB_PATH = "LIBSHIELD_DB_PATH"
ENV_EMPTY_RANGE_POLICY = "LIBSHIELD_EMPTY_RANGE_POLICY"
ENV_VERBOSE = "LIBSHIELD_VERBOSE"

_TRUTHY = ("1", "true", "yes", "on")


class EmptyRangePolicy(str, Enum):
    """Outcome for an advisory that lists neither vulnerable nor patched versions."""

    VULNERABLE = "vulnerable"
    SAFE = "safe"


@dataclass
class DetectorConfig:
    """Configuration shared by the driver factory and the CLI."""

    database_path: Optional[Path] = None
    empty_range_policy: Union[EmptyRangePolicy, str] = EmptyRangePolicy.VULNERABLE
    verbose: bool = False

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.database_path is not None and not isinstance(self.database_path, Path):
            self.database_path = Path(self.database_path)
        try:
            self.empty_range_policy = EmptyRangePolicy(self.empty_range_policy)
        except ValueError:
            choices = ", ".join(policy.value for policy in EmptyRangePolicy)
            raise ValueError(
                f"Invalid empty range policy {self.empty_range_policy!r} (expected one of: {choices})"
            ) from None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "DetectorConfig":
        """Build a configuration from LIBSHIELD_* environment variables."""
        env = os.environ if environ is None else environ
        db_path = env.get(ENV_DB_PATH)
        return cls(
            database_path=Path(db_path) if db_path else None,
            empty_range_policy=env.get(ENV_EMPTY_RANGE_POLICY, EmptyRangePolicy.VULNERABLE.value).lower(),
            verbose=env.get(ENV_VERBOSE, "").lower() in _TRUTHY,
        )
