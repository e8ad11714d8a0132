import io
import os
from collections.abc import Callable, Iterable
from pathlib import Path

import pytest
from rich.console import Console

from strix.commands import CommandResult, CommandRunner, format_command
from strix.context import InstallerContext
from strix.devices import DeviceResolver
from strix.logsink import LogSink
from strix.tui import TUI
from strix.types import ContextConfig
from strix.utils import load_defaults

ALWAYS = -1


class ScriptedOperator:
  """Answers prompts from a fixed script and records every prompt."""

  def __init__(self, answers: Iterable[str] = ()) -> None:
    self.answers: list[str] = list(answers)
    self.prompts: list[str] = []

  def ask(self, message: str) -> str:
    self.prompts.append(message)
    if not self.answers:
      raise AssertionError(f"unexpected prompt: {message}")
    return self.answers.pop(0)


class RecordingEscape:
  def __init__(self, action: Callable[[], None] | None = None) -> None:
    self.calls: int = 0
    self.action = action

  def open_shell(self) -> None:
    self.calls += 1
    if self.action is not None:
      self.action()


class FakeRunner(CommandRunner):
  """
  Records commands instead of running them.

  ``failures`` maps a command prefix to the number of times it should fail
  (ALWAYS for every call). Commands writing to ``output`` append a line so
  the target file exists afterwards.
  """

  def __init__(self, sink: LogSink, ui: TUI, failures: dict[str, int] | None = None, missing: Iterable[str] = ()) -> None:
    super().__init__(sink, ui)
    self.failures: dict[str, int] = dict(failures or {})
    self.missing: set[str] = set(missing)
    self.commands: list[str] = []

  def run(self, argv: list[str], interactive: bool = False, output: str | None = None) -> CommandResult:
    command = format_command(argv)
    if output:
      command = f"{command} >> {output}"

    self.commands.append(command)
    self.sink.log(f"CMD {command}")

    for prefix, remaining in self.failures.items():
      if command.startswith(prefix) and remaining != 0:
        self.failures[prefix] = remaining - 1 if remaining > 0 else ALWAYS
        return CommandResult(command, 1)

    if output:
      os.makedirs(os.path.dirname(output), exist_ok=True)
      with open(output, "a") as f:
        print(f"# {command}", file=f)

    return CommandResult(command, 0)

  def which(self, name: str) -> bool:
    return name not in self.missing


def add_devices(dev_root: Path, *names: str) -> None:
  for name in names:
    (dev_root / name).touch()


def console_output(ctx: InstallerContext) -> str:
  out = ctx.ui.console.file
  assert isinstance(out, io.StringIO)
  return out.getvalue()


def log_text(ctx: InstallerContext) -> str:
  with open(ctx.sink.path) as f:
    return f.read()


@pytest.fixture
def dev_root(tmp_path: Path) -> Path:
  path = tmp_path / "dev"
  path.mkdir()
  return path


@pytest.fixture
def make_ctx(tmp_path: Path, dev_root: Path):
  sinks: list[LogSink] = []

  def factory(
    answers: Iterable[str] = (),
    manual: bool = False,
    dry: bool = False,
    failures: dict[str, int] | None = None,
    missing: Iterable[str] = (),
    escape: RecordingEscape | None = None,
    with_escape: bool = True,
    hostname: str | None = None,
  ) -> InstallerContext:
    sink = LogSink(str(tmp_path / "strix-install.log"))
    sinks.append(sink)
    ui = TUI(sink, Console(file=io.StringIO(), width=200))
    target = tmp_path / "mnt"
    target.mkdir(exist_ok=True)

    config = ContextConfig(manual=manual, dry=dry, hostname=hostname, target=str(target))
    return InstallerContext(
      config,
      load_defaults(),
      sink=sink,
      ui=ui,
      runner=FakeRunner(sink, ui, failures, missing),
      operator=ScriptedOperator(answers),
      escape=(escape or RecordingEscape()) if with_escape else None,
      resolver=DeviceResolver(str(dev_root)),
    )

  yield factory

  for sink in sinks:
    sink.close()
