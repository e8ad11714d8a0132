"""
External command execution.

Failures are returned as values rather than raised: the runner decides
whether a non-zero exit is fatal for a step, not the command helper.
"""

import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass

from rich.markup import escape

from strix.logsink import LogSink
from strix.tui import TUI

COMMAND_NOT_EXECUTABLE = 126
COMMAND_NOT_FOUND = 127


@dataclass(frozen=True)
class CommandResult:
  command: str
  returncode: int

  @property
  def ok(self) -> bool:
    return self.returncode == 0


def format_command(argv: list[str]) -> str:
  return " ".join(shlex.quote(a) for a in argv)


class CommandRunner:
  """
  Run external tools on behalf of the installation steps.

  Non-interactive commands have stdout and stderr appended to the log file.
  Interactive commands (network wizard, partition editors, shells) keep the
  terminal. With ``output`` set, stdout is appended to that file instead and
  only stderr goes to the log.
  """

  def __init__(self, sink: LogSink, ui: TUI, dry_run: bool = False) -> None:
    self.sink: LogSink = sink
    self.ui: TUI = ui
    self.dry_run: bool = dry_run

  def run(self, argv: list[str], interactive: bool = False, output: str | None = None) -> CommandResult:
    command = format_command(argv)
    if output:
      command = f"{command} >> {output}"

    self.sink.log(f"CMD {command}")

    if self.dry_run:
      self.ui.print(f"[bold green][dim][DRY RUN] {escape(command)}[/][/]")
      return CommandResult(command, 0)

    try:
      if interactive:
        process = subprocess.run(argv, check=False)

      elif output:
        with open(output, "a") as out, open(self.sink.path, "a") as log:
          process = subprocess.run(argv, stdout=out, stderr=log, check=False)

      else:
        with open(self.sink.path, "a") as log:
          process = subprocess.run(argv, stdout=log, stderr=subprocess.STDOUT, check=False)

    except OSError as e:
      if isinstance(e, FileNotFoundError) and e.filename == argv[0]:
        self.sink.log(f"Command not found: {argv[0]}")
        return CommandResult(command, COMMAND_NOT_FOUND)

      self.sink.log(f"Command '{command}' could not be started: {e}")
      return CommandResult(command, COMMAND_NOT_EXECUTABLE)

    if process.returncode != 0:
      self.sink.log(f"Command '{command}' exited with status {process.returncode}")

    return CommandResult(command, process.returncode)

  def which(self, name: str) -> bool:
    return shutil.which(name) is not None


def write(lines: list[str], path: str, dry_run: bool, ui: TUI, mode: int | None = None) -> None:
  assert isinstance(lines, list)
  if dry_run:
    message = f"[bold green][dim][DRY RUN] Writing to {path}:[/][/]"
    ui.print(message)
    for line in lines:
      ui.print(f"[dim]{escape(line)}[/]")
    return

  open(path, "w").close()
  with open(path, "a") as f:
    for line in lines:
      print(line, file=f)

  if mode is not None:
    os.chmod(path, mode)
