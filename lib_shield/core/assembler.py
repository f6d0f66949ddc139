"""Turns matched advisories into detection results."""

from typing import Optional

from .models import Advisory, DetectedVulnerability


class ResultAssembler:
    """Builds DetectedVulnerability records from matched advisories.

    The fixed version is the advisory's non-blank patched specs, joined
    for display. It may describe several alternatives rather than a single
    version.
    """

    separator = ", "

    def assemble(self, advisory: Advisory, pkg_name: str, installed_version: str) -> DetectedVulnerability:
        return DetectedVulnerability(
            vulnerability_id=advisory.vulnerability_id,
            pkg_name=pkg_name,
            installed_version=installed_version,
            fixed_version=self.separator.join(v for v in advisory.patched_versions if v.strip()),
            url=self._primary_url(advisory),
            title=advisory.title,
        )

    @staticmethod
    def _primary_url(advisory: Advisory) -> Optional[str]:
        return next((ref for ref in advisory.references if ref), None)
