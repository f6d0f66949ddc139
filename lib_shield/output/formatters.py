"""Output formatters for LibShield results."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..core.models import DetectedVulnerability


class ConsoleFormatter:
    """Rich console formatter for detection results."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console()

    def format_detections(
        self,
        results: List[DetectedVulnerability],
        pkg_name: str,
        pkg_version: str,
        ecosystem: str,
    ) -> None:
        """Display the detections for one package.

        Args:
            results: Detected vulnerabilities
            pkg_name: Package that was checked
            pkg_version: Installed version that was checked
            ecosystem: Ecosystem of the driver used
        """
        if not results:
            self.console.print(Panel(
                f"No vulnerabilities found for {pkg_name} {pkg_version} ({ecosystem})",
                style="green",
            ))
            return

        table = Table(title=f"{pkg_name} {pkg_version} ({ecosystem})")
        table.add_column("Vulnerability", style="red", no_wrap=True)
        table.add_column("Installed", style="cyan")
        table.add_column("Fixed", style="green")
        table.add_column("Title")
        table.add_column("URL", style="dim")

        for result in results:
            table.add_row(
                result.vulnerability_id,
                result.installed_version,
                result.fixed_version or "-",
                result.title or "",
                result.url or "",
            )

        self.console.print(table)
        self.console.print(f"[bold red]{len(results)} vulnerabilities found[/bold red]")


class JSONFormatter:
    """JSON formatter for detection results."""

    def __init__(self, output_file: Optional[Path] = None) -> None:
        self.output_file = output_file

    def format_detections(self, results: List[DetectedVulnerability]) -> List[Dict[str, Any]]:
        return [result.to_dict() for result in results]

    def dumps(self, results: List[DetectedVulnerability]) -> str:
        return json.dumps(self.format_detections(results), indent=2)

    def save_results(self, results: List[DetectedVulnerability]) -> None:
        """Write results to the configured output file."""
        if self.output_file is None:
            raise ValueError("No output file configured")
        with open(self.output_file, 'w', encoding='utf-8') as f:
            f.write(self.dumps(results))
