"""Human-readable transcript of a demo run, rendered with rich."""

from __future__ import annotations

from collections.abc import Callable

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from composable_car.ledger import Receipt

Prompt = Callable[[str], object]


def interactive_prompt(console: Console) -> Prompt:
    """Prompt that blocks until the operator presses Enter."""

    def _prompt(message: str) -> object:
        return console.input(f"[dim]{message} (press Enter to continue)[/dim] ")

    return _prompt


class Transcript:
    def __init__(self, console: Console | None = None, *, prompt: Prompt | None = None) -> None:
        self.console = console or Console()
        self.prompt = prompt

    def banner(self, title: str) -> None:
        self.console.print()
        self.console.rule(f"[bold]{title}[/bold]", align="left")

    def rule(self) -> None:
        self.console.rule(style="dim")

    def row(self, text: str = "") -> None:
        self.console.print(f"  {text}", markup=False, highlight=False)

    def success(self, text: str) -> None:
        self.console.print(f"  [green]✓[/green] {escape(text)}", highlight=False)

    def transaction(self, receipt: Receipt) -> None:
        self.row(f"Transaction hash: {receipt.tx_hash}")
        self.row(f"Gas used: {receipt.gas_used}")

    def deployments(self, addresses: dict[str, str]) -> None:
        table = Table(title="Deployed contracts", show_header=True)
        table.add_column("Contract", style="cyan")
        table.add_column("Address", style="dim")
        for name, address in addresses.items():
            table.add_row(name, address)
        self.console.print(table)

    def ownership(self, title: str, rows: list[tuple[str, str]]) -> None:
        table = Table(title=title, show_header=True)
        table.add_column("Token", style="cyan")
        table.add_column("Held by")
        for token, holder in rows:
            table.add_row(token, holder)
        self.console.print(table)

    def error(self, exc: BaseException) -> None:
        self.console.print(
            Panel.fit(
                Text(f"{type(exc).__name__}: {exc}"),
                title="[red]Demo failed[/red]",
                border_style="red",
            )
        )

    def pause(self, message: str) -> None:
        """Wait for the operator between narrated steps; no-op without a prompt."""
        if self.prompt is not None:
            self.prompt(message)
