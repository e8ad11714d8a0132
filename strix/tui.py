from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from strix.logsink import LogSink

console = Console()

STEP_PREFIXES = {
  "Setting Up Internet": "~ ",
  "Selecting Disk": "? ",
  "Partitioning Disk": "# ",
  "Formatting Partitions": "# ",
  "Mounting Partitions": "^ ",
  "Installing Base System": "* ",
  "Generating fstab": "@ ",
  "Chroot and Configuration": "@ ",
  "Finalizing Installation": "! ",
}


def progress_bar(position: int, total: int) -> str:
  filled = "▓" * position
  empty = "░" * (total - position)
  return f"[{filled}{empty}]"


class TUI:
  """Colored status lines for the operator; every line is also written to the log."""

  def __init__(self, sink: LogSink, out: Console | None = None) -> None:
    self.sink: LogSink = sink
    self.console: Console = out or console

  def header(self, title: str) -> None:
    panel = Panel(
      Text(title, style="bold magenta"),
      border_style="magenta",
      padding=(0, 1),
      expand=False,
      box=box.SQUARE,
      title="strix",
      title_align="left",
    )
    self.console.print()
    self.console.print(panel)

  def step(self, position: int, total: int, title: str) -> None:
    prefix = STEP_PREFIXES.get(title, "")
    self.console.print()
    self.console.print(f"[bold green]>>> [{position}/{total}] {prefix}{title}[/] [dim]{progress_bar(position, total)}[/]")
    self.sink.log(f"Starting step {position}: {title}")

  def info(self, message: str) -> None:
    self.console.print(f"[blue]INFO: {escape(message)}[/]", highlight=False)
    self.sink.log(f"INFO: {message}")

  def warning(self, message: str) -> None:
    self.console.print(f"[yellow]WARNING: {escape(message)}[/]", highlight=False)
    self.sink.log(f"WARNING: {message}")

  def error(self, message: str) -> None:
    self.console.print(f"[bold red]ERROR: {escape(message)}[/]", highlight=False)
    self.sink.log(f"ERROR: {message}")

  def print(self, message: str) -> None:
    """Print a plain message to the console without logging it."""
    self.console.print(message)
