"""Advisory store client interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from ..core.models import Advisory, Ecosystem
from ..errors import StoreError


@dataclass(frozen=True)
class BucketPolicy:
    """Two-name bucket lookup used while advisory data migrates.

    Current data lives in one bucket per data source, all sharing the
    ``"<ecosystem>::"`` prefix. Older databases keep a single bare bucket per
    ecosystem, which is consulted only when the prefixed buckets have nothing
    for a package.
    """

    prefix: str
    legacy: Optional[str] = None

    @classmethod
    def for_ecosystem(cls, ecosystem: Ecosystem, legacy: Optional[str] = None) -> "BucketPolicy":
        return cls(prefix=f"{ecosystem.value}::", legacy=legacy)

    def primary_buckets(self, bucket_names: Iterable[str]) -> List[str]:
        """Prefixed buckets in a stable (sorted) order."""
        return sorted(name for name in bucket_names if name.startswith(self.prefix))


class AdvisoryStore(ABC):
    """Read-only advisory lookup with an explicit open/close lifecycle."""

    def __init__(self) -> None:
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    @abstractmethod
    def open(self) -> None:
        """Acquire the underlying resources.

        Raises:
            StoreError: If the store cannot be opened
        """

    @abstractmethod
    def close(self) -> None:
        """Release the underlying resources. Closing twice is a no-op."""

    @abstractmethod
    def get(self, bucket: str, pkg_name: str) -> List[Advisory]:
        """Return advisories filed under a package in one bucket.

        Records come back in store order; an unknown bucket or package
        yields an empty list.

        Raises:
            StoreError: If the store is closed, unreadable or corrupt
        """

    @abstractmethod
    def bucket_names(self) -> List[str]:
        """Names of all buckets in the store."""

    def get_advisories(self, policy: BucketPolicy, pkg_name: str) -> List[Advisory]:
        """Look a package up through a bucket policy.

        Args:
            policy: Prefixed and legacy bucket names for one ecosystem
            pkg_name: Package name as used in the advisory data

        Returns:
            Advisories from the prefixed buckets, or from the legacy bucket
            when the prefixed ones have none for this package
        """
        self._ensure_open()
        advisories: List[Advisory] = []
        for bucket in policy.primary_buckets(self.bucket_names()):
            advisories.extend(self.get(bucket, pkg_name))
        if advisories or not policy.legacy:
            return advisories
        return self.get(policy.legacy, pkg_name)

    def _ensure_open(self) -> None:
        if not self._is_open:
            raise StoreError(f"{type(self).__name__} is not open")

    def __enter__(self) -> "AdvisoryStore":
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
