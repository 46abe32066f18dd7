"""Console output for the Spectra host tools.

Usage:
    from spectra.console import console

    with console.spinner("Summing columns..."):
        buffer = dft_pass.dispatch(image)

    console.success("Wrote magnitude image", detail="out.png")
    console.warn("Odd-sized region", detail="shift map is fftshift, not an involution")
    console.error("Bad rectangle", detail=str(err))
    console.info("Backend: triton")
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.text import Text


class Console:
    """Thin wrapper over rich with the message kinds the host tools use."""

    __slots__ = ("_console",)

    def __init__(self, *, stderr: bool = False) -> None:
        self._console = RichConsole(stderr=stderr)

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Show a spinner while a dispatch is running."""
        with self._console.status(f"[bold cyan]{message}", spinner="dots"):
            yield

    def success(self, message: str, *, detail: Optional[str] = None, title: Optional[str] = None) -> None:
        if title:
            text = Text(message, style="bold green")
            if detail:
                text.append(f"\n{detail}", style="dim")
            self._console.print(Panel(text, title=f"[cyan]{title}[/cyan]", border_style="green"))
            return
        self._console.print(f"[bold green]✓[/bold green] {message}" + _dim(detail))

    def warn(self, message: str, *, detail: Optional[str] = None) -> None:
        self._console.print(f"[yellow]⚠[/yellow] {message}" + _dim(detail))

    def error(self, message: str, *, detail: Optional[str] = None) -> None:
        self._console.print(f"[bold red]✗[/bold red] {message}" + _dim(detail))

    def info(self, message: str, *, detail: Optional[str] = None) -> None:
        self._console.print(f"[blue]•[/blue] {message}" + _dim(detail))

    def header(self, title: str, **fields: object) -> None:
        """Show a panel of key/value fields (dispatch geometry, backend, ...)."""
        lines = [f"[bold]{k}:[/bold] {v}" for k, v in fields.items()]
        self._console.print(Panel("\n".join(lines), title=f"[cyan]{title}[/cyan]", border_style="blue"))


def _dim(detail: Optional[str]) -> str:
    return f" [dim]{detail}[/dim]" if detail else ""


console = Console()
