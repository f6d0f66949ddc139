"""Per-ecosystem detection driver."""

from typing import Any, List, Optional, Sequence, Tuple

from ..config import EmptyRangePolicy
from ..errors import InvalidConstraintError
from ..store.base import AdvisoryStore, BucketPolicy
from ..utils.logging import get_logger
from ..versioning.base import BaseComparator
from .assembler import ResultAssembler
from .models import Advisory, DetectedVulnerability, Ecosystem


def _specs(values: Sequence[str]) -> Tuple[str, ...]:
    # Blank entries carry no condition
    return tuple(value for value in values if value.strip())


class Driver:
    """Detects vulnerabilities for packages of one ecosystem.

    A driver binds the ecosystem's comparator, its bucket policy and a store
    client. It keeps no per-call state, so one instance can serve every
    package of a scan from any number of threads.
    """

    def __init__(
        self,
        ecosystem: Ecosystem,
        comparator: BaseComparator,
        policy: BucketPolicy,
        store: AdvisoryStore,
        empty_range_policy: EmptyRangePolicy = EmptyRangePolicy.VULNERABLE,
        assembler: Optional[ResultAssembler] = None,
    ) -> None:
        self._ecosystem = ecosystem
        self._comparator = comparator
        self._policy = policy
        self._store = store
        self._empty_range_policy = EmptyRangePolicy(empty_range_policy)
        self._assembler = assembler or ResultAssembler()
        self.logger = get_logger("Driver")

    @property
    def ecosystem(self) -> Ecosystem:
        return self._ecosystem

    @property
    def comparator(self) -> BaseComparator:
        return self._comparator

    @property
    def policy(self) -> BucketPolicy:
        return self._policy

    def detect(self, pkg_name: str, pkg_version: str) -> List[DetectedVulnerability]:
        """Find the advisories that apply to one installed package.

        Args:
            pkg_name: Package name as used in the advisory data
            pkg_version: Installed version in the ecosystem's format

        Returns:
            One result per matching advisory, in store order

        Raises:
            VersionParseError: If pkg_version is not a valid version
            StoreError: If the advisory store fails
        """
        advisories = self._store.get_advisories(self._policy, pkg_name)
        if not advisories:
            return []

        self.logger.debug(f"Found {len(advisories)} {self._ecosystem} advisories for {pkg_name} (version: {pkg_version})")
        version = self._comparator.parse_version(pkg_version)

        results = []
        for advisory in advisories:
            try:
                vulnerable = self._is_vulnerable(version, advisory)
            except InvalidConstraintError as e:
                self.logger.warning(f"Skipping {advisory.vulnerability_id} for {pkg_name}: {e}")
                continue

            if vulnerable:
                self.logger.debug(f"MATCH: {pkg_name} {pkg_version} matches {advisory.vulnerability_id}")
                results.append(self._assembler.assemble(advisory, pkg_name, pkg_version))
            else:
                self.logger.debug(f"NO MATCH: {pkg_name} {pkg_version} does not match {advisory.vulnerability_id}")

        return results

    def _is_vulnerable(self, version: Any, advisory: Advisory) -> bool:
        vulnerable = _specs(advisory.vulnerable_versions)
        patched = _specs(advisory.patched_versions)
        unaffected = _specs(advisory.unaffected_versions)

        if not (vulnerable or patched or unaffected):
            return self._empty_range_policy is EmptyRangePolicy.VULNERABLE

        # No short-circuit: any malformed spec skips the whole advisory
        in_range = [self._comparator.satisfies(version, spec) for spec in vulnerable]
        fixed = [self._comparator.is_patched(version, spec) for spec in patched]
        safe = [self._comparator.satisfies(version, spec) for spec in unaffected]

        if vulnerable and not any(in_range):
            return False
        return not (any(fixed) or any(safe))

    def __repr__(self) -> str:
        return f"Driver(ecosystem={self._ecosystem.value!r}, policy={self._policy!r})"
