import sys

from rich import print
from rich.console import Console

console = Console()


def log(msg: str):
    print(f"[green][INFO][/green] {msg}")


def warn(msg: str):
    print(f"[yellow][WARN][/yellow] {msg}")


def error(msg: str):
    print(f"[red][ERROR][/red] {msg}")
    sys.exit(1)


def echo(text: str):
    """Prints scripts and remote output as-is, without markup or wrapping."""
    console.print(text, markup=False, highlight=False, soft_wrap=True)
