"""
Reporters - turn executor callbacks into terminal output

Records and the final count go to stdout through ``echo``; status lines,
progress and errors go to a rich Console (stderr in the CLI). Quiet mode
silences status and progress but never the records, the final count or
errors.
"""

import json
from typing import Any, Callable, Optional

from rich.console import Console
from rich.markup import escape

from kvscan.cli.formatters.base import BaseFormatter
from kvscan.core.errors import CloseError, KvscanError
from kvscan.core.filters import FilterSet
from kvscan.core.spec import ScanSpec
from kvscan.core.stats import ProgressSnapshot, ScanStats

Echo = Callable[[str], None]


def format_duration(seconds: float) -> str:
    """
    Render an elapsed time for humans

    Examples:
        0.85 -> "850ms", 1.2041 -> "1.204s", 123.1 -> "2m 3.100s"
    """
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.3f}s"
    minutes, rest = divmod(seconds, 60)
    return f"{int(minutes)}m {rest:.3f}s"


class Reporter:
    """Shared status and error output"""

    def __init__(self, echo: Echo, console: Console, quiet: bool = False):
        self.echo = echo
        self.console = console
        self.quiet = quiet

    def log(self, message: str, style: str = "dim") -> None:
        """Status line, silenced by quiet"""
        if not self.quiet:
            self.console.print(f"[{style}]{escape(message)}[/{style}]")

    def error(self, message: str) -> None:
        """Error line, never silenced"""
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")

    def start(self, store_description: str, spec: ScanSpec, filters: FilterSet) -> None:
        """Announce the scan and echo the read-stream options"""
        if spec.count_mode:
            self.log(f"Counting records in db: {store_description}")
        else:
            self.log(f"Streaming from db: {store_description}")

        self.log(f"Read stream options:\n{json.dumps(spec.to_dict(), indent=2)}")

        if filters.active:
            self.log(f"Filters:\n{json.dumps(filters.describe(), indent=2)}")

    def on_record(self, record: dict[str, Any]) -> None:
        pass

    def on_progress(self, snapshot: ProgressSnapshot) -> None:
        pass

    def on_end(self, stats: ScanStats) -> None:
        pass

    def on_error(self, error: KvscanError, stats: ScanStats) -> None:
        self.error(str(error))
        self.console.print(
            f"[yellow]Partial results: {stats.total_seen} records read, "
            f"{stats.total_emitted} emitted, {stats.total_filtered} filtered "
            f"in {format_duration(stats.elapsed)}[/yellow]"
        )

    def on_close_error(self, error: CloseError) -> None:
        self.error(str(error))

    def on_closed(self) -> None:
        self.log("Database closed.")

    def on_cancelled(self, stats: ScanStats) -> None:
        self.log(
            f"Scan cancelled after {stats.total_seen} records "
            f"({stats.total_emitted} emitted) in {format_duration(stats.elapsed)}",
            style="yellow",
        )


class CountReporter(Reporter):
    """
    Count mode

    Records are not printed. Progress lines report the survivors counted in
    the last window. The final line says whether the count can be trusted to
    cover the whole store, which depends only on the ScanSpec.
    """

    def __init__(
        self,
        echo: Echo,
        console: Console,
        spec: ScanSpec,
        filters: Optional[FilterSet] = None,
        quiet: bool = False,
    ):
        super().__init__(echo, console, quiet)
        self.filters = filters if filters is not None else FilterSet()
        self.complete = spec.covers_all_records

    def on_progress(self, snapshot: ProgressSnapshot) -> None:
        self.log(
            f"{snapshot.window_count} records in the last "
            f"{format_duration(snapshot.window_elapsed)} "
            f"({snapshot.total_emitted} records in {format_duration(snapshot.total_elapsed)})"
        )

    def summary(self, stats: ScanStats) -> str:
        caveat = (
            "All records counted."
            if self.complete
            else "Limited count; may not include all records."
        )
        line = f"Counted {stats.total_emitted} records in {format_duration(stats.elapsed)}. {caveat}"
        if self.filters.active:
            line += f" ({stats.total_filtered} of {stats.total_seen} scanned records filtered out)"
        return line

    def on_end(self, stats: ScanStats) -> None:
        self.echo(self.summary(stats))


class StreamReporter(Reporter):
    """Stream mode - one formatted line per surviving record"""

    def __init__(
        self,
        echo: Echo,
        console: Console,
        formatter: BaseFormatter,
        quiet: bool = False,
    ):
        super().__init__(echo, console, quiet)
        self.formatter = formatter

    def on_record(self, record: dict[str, Any]) -> None:
        self.echo(self.formatter.format_record(record))

    def on_end(self, stats: ScanStats) -> None:
        self.log(f"Read {stats.total_emitted} records in {format_duration(stats.elapsed)}")
