"""Console output helpers shared by the talon CLI commands."""

from rich.console import Console

_console = Console(highlight=False)


def success(message: str) -> None:
    """Print a success message with green checkmark."""
    _console.print(f"[green]✓[/green] {message}")


def error(message: str) -> None:
    """Print an error message with red X."""
    _console.print(f"[red]✗[/red] {message}")


def warning(message: str) -> None:
    """Print a warning message with yellow exclamation."""
    _console.print(f"[yellow]![/yellow] {message}")


def info(message: str) -> None:
    """Print a plain informational message."""
    _console.print(message)


def heading(message: str) -> None:
    """Print a bold section heading."""
    _console.print(f"[bold]{message}[/bold]")


def bullet(message: str, indent: int = 2) -> None:
    """Print an indented list item."""
    _console.print(f"{' ' * indent}• {message}")


def dim(message: str) -> None:
    """Print a dimmed message (for secondary info)."""
    _console.print(f"[dim]{message}[/dim]")
