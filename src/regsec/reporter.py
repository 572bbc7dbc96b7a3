from __future__ import annotations
from typing import Any, Dict

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import Report, Severity


class Reporter:
    def __init__(self, console: Console) -> None:
        self.console = console

    def report(self, report: Report) -> None:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Status", width=8)
        table.add_column("Step", style="bold")
        table.add_column("Detail")
        for f in report.findings:
            status = "✅" if f.ok else ("⚠️" if f.severity == Severity.WARN else "❌")
            table.add_row(status, f.step, f.detail)
        style = "bold red" if report.has_failures() else "bold blue"
        self.console.print(Panel.fit(table, title=Text(report.title, style=style)))

    def mapping(self, title: str, data: Dict[str, Any]) -> None:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Field", style="bold")
        table.add_column("Value")
        for key, value in data.items():
            table.add_row(key, "" if value is None else str(value))
        self.console.print(Panel.fit(table, title=Text(title, style="bold blue")))

    def exit_code(self, report: Report) -> int:
        return 1 if report.has_failures() else 0
