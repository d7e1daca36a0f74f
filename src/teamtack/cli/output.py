"""
Output - console output for the ttt commands.

Everything a command shows the user goes through Console: headers and
sections, status lines, aligned label/value fields, tables and the sync
summary. Errors go to stderr and are never silenced by --quiet.
"""

import sys

from teamtack.application.sync import SyncResult


class Colors:
    """ANSI escape codes used by the console."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"

    BG_YELLOW = "\033[43m"


class Symbols:
    """Unicode symbols for terminal output."""

    CHECK = "✓"
    CROSS = "✗"
    ARROW = "→"
    DOT = "•"
    WARN = "⚠"
    INFO = "ℹ"
    LINK = "🔗"

    # One per local status
    PENDING = "○"
    IN_PROGRESS = "◐"
    IN_REVIEW = "◑"
    COMPLETED = "●"
    BLOCKED = "⊘"

    BOX_H = "─"


class Console:
    """
    Terminal writer for command output.

    Attributes:
        color: Whether ANSI colors are emitted (only ever True on a TTY).
        verbose: Whether debug lines are shown.
        quiet: Whether everything but errors and forced lines is dropped.
    """

    def __init__(self, color: bool = True, verbose: bool = False, quiet: bool = False):
        self.color = color and sys.stdout.isatty()
        self.verbose = verbose and not quiet
        self.quiet = quiet

    def styled(self, text: str, *codes: str) -> str:
        """Wrap text in color codes when color is enabled."""
        if not self.color or not codes:
            return text
        return "".join(codes) + text + Colors.RESET

    # -------------------------------------------------------------------------
    # Plain lines
    # -------------------------------------------------------------------------

    def print(self, text: str = "", force: bool = False) -> None:
        """
        Print one line to stdout.

        Args:
            text: Line to print; empty for a blank line.
            force: Print even in quiet mode.
        """
        if self.quiet and not force:
            return
        print(text)

    def header(self, text: str) -> None:
        """Title of a command's output, framed by rules."""
        if self.quiet:
            return
        width = max(len(text) + 4, 50)
        rule = self.styled(Symbols.BOX_H * width, Colors.CYAN) if self.color else "-" * width
        self.print()
        self.print(rule)
        self.print(self.styled(f"  {text}", Colors.BOLD, Colors.CYAN))
        self.print(rule)
        self.print()

    def section(self, text: str) -> None:
        if self.quiet:
            return
        self.print()
        self.print(self.styled(f"{Symbols.ARROW} {text}", Colors.BOLD, Colors.BLUE))

    def field(self, label: str, value: object, width: int = 14) -> None:
        """Aligned ``label: value`` line; ``width`` is the padded label width."""
        self.print(f"  {label + ':':<{width}} {value}")

    # -------------------------------------------------------------------------
    # Status lines
    # -------------------------------------------------------------------------

    def success(self, text: str) -> None:
        self.print(self.styled(f"  {Symbols.CHECK} {text}", Colors.GREEN))

    def warning(self, text: str) -> None:
        self.print(self.styled(f"  {Symbols.WARN} {text}", Colors.YELLOW))

    def info(self, text: str) -> None:
        self.print(self.styled(f"  {Symbols.INFO} {text}", Colors.CYAN))

    def detail(self, text: str) -> None:
        self.print(self.styled(f"    {text}", Colors.DIM))

    def debug(self, text: str) -> None:
        if self.verbose:
            self.print(self.styled(f"  [DEBUG] {text}", Colors.DIM))

    def error(self, text: str) -> None:
        """Print an error to stderr, in quiet mode too."""
        message = f"{Symbols.CROSS} {text}"
        if self.color and sys.stderr.isatty():
            message = Colors.RED + message + Colors.RESET
        print(message, file=sys.stderr)

    def item(self, text: str, status: str | None = None) -> None:
        """
        Bulleted line with an optional marker.

        ``status`` "ok" and "fail" render as a check or a cross; any other
        string is shown dimmed in brackets.
        """
        marker = ""
        if status == "ok":
            marker = self.styled(f" [{Symbols.CHECK}]", Colors.GREEN)
        elif status == "fail":
            marker = self.styled(f" [{Symbols.CROSS}]", Colors.RED)
        elif status:
            marker = self.styled(f" [{status}]", Colors.DIM)
        self.print(f"    {Symbols.DOT} {text}{marker}")

    def table(self, headers: list[str], rows: list[list[str]]) -> None:
        """Left-aligned table; columns are as wide as their widest cell."""
        if self.quiet:
            return
        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row[: len(widths)]):
                widths[i] = max(widths[i], len(str(cell)))

        self.print(
            "  " + "  ".join(self.styled(h.ljust(w), Colors.BOLD) for h, w in zip(headers, widths))
        )
        self.print("  " + "  ".join("-" * w for w in widths))
        for row in rows:
            cells = [str(cell).ljust(w) for cell, w in zip(row, widths)]
            self.print(("  " + "  ".join(cells)).rstrip())

    # -------------------------------------------------------------------------
    # Sync
    # -------------------------------------------------------------------------

    def dry_run_banner(self) -> None:
        if self.quiet:
            return
        banner = "  DRY-RUN - remote statuses and comments will not be changed"
        if self.color:
            self.print(f"{Colors.BG_YELLOW}{Colors.BOLD}{banner}{Colors.RESET}")
        else:
            self.print(f"*** {banner.strip()} ***")
        self.print()

    def sync_result(self, result: SyncResult) -> None:
        """
        Print the outcome of a sync pass.

        In quiet mode a single ``key=value`` line is printed so scripts can
        parse it; errors follow on stderr either way.
        """
        if self.quiet:
            parts = [
                f"status={'OK' if result.success else 'FAILED'}",
                f"mode={'dry-run' if result.dry_run else 'executed'}",
                f"cycle={result.cycle_id}",
                f"fetched={result.tasks_fetched}",
                f"new={result.tasks_new}",
                f"failed_writes={len(result.failed_operations)}",
            ]
            self.print(" ".join(parts), force=True)
        else:
            for line in result.summary().splitlines():
                self.print(f"  {line}" if line else "")

        for error in result.errors:
            self.error(error)
