import os
import subprocess
from typing import Protocol

from rich.console import Console
from rich.markup import escape

console = Console()


class Operator(Protocol):
  """Source of operator answers. Returns the raw text typed at a prompt."""

  def ask(self, message: str) -> str: ...


class Escape(Protocol):
  """Interactive escape hatch used for manual recovery."""

  def open_shell(self) -> None: ...


class ConsoleOperator:
  def ask(self, message: str) -> str:
    return console.input(f"{escape(message)}: ")


class ShellEscape:
  """Drop the operator into an interactive shell until it exits."""

  def __init__(self, shell: str | None = None) -> None:
    self.shell: str = shell or os.environ.get("SHELL") or "/bin/bash"

  def open_shell(self) -> None:
    console.print(f"\n[bold yellow]Starting {self.shell}. Type 'exit' to return to the installer.[/]")
    try:
      _ = subprocess.run([self.shell], check=False)
    except OSError as e:
      console.print(f"\n[prompt.invalid]Could not start {self.shell}: {e}[/]")
