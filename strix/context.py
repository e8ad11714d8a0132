from __future__ import annotations

from strix.commands import CommandResult, CommandRunner
from strix.devices import DeviceResolver
from strix.input import Escape, Operator
from strix.logsink import LogSink
from strix.tui import TUI
from strix.types import ContextConfig, DefaultsConfig, DeviceSelection, RunMode


class InstallerContext:
  """
  Holds the state and collaborators of one installation run.

  This context object is passed to every installation step and to the
  error handler. The run mode starts from the command line and may only
  move from auto to manual; the device selection is replaced as a whole.
  """

  def __init__(
    self,
    config: ContextConfig,
    defaults: DefaultsConfig,
    *,
    sink: LogSink,
    ui: TUI,
    runner: CommandRunner,
    operator: Operator,
    escape: Escape | None,
    resolver: DeviceResolver,
  ) -> None:
    self.config: ContextConfig = config
    self.defaults: DefaultsConfig = defaults
    self.sink: LogSink = sink
    self.ui: TUI = ui
    self.runner: CommandRunner = runner
    self.operator: Operator = operator
    self.escape: Escape | None = escape
    self.resolver: DeviceResolver = resolver

    self.mode: RunMode = RunMode.MANUAL if config.manual else RunMode.AUTO
    self.selection: DeviceSelection | None = None
    self.current_step: int = 0

  @property
  def manual(self) -> bool:
    return self.mode is RunMode.MANUAL

  @property
  def dry(self) -> bool:
    """Access dry run flag from config."""
    return self.config.dry

  @property
  def target(self) -> str:
    return self.config.target

  @property
  def timezone(self) -> str:
    return self.config.timezone or self.defaults["timezone"]

  @property
  def locale(self) -> str:
    return self.config.locale or self.defaults["locale"]

  @property
  def hostname(self) -> str:
    return self.config.hostname or self.defaults["hostname"]

  def escalate(self) -> bool:
    """Switch to manual mode for the rest of the run. Returns True if the mode changed."""
    if self.mode is RunMode.MANUAL:
      return False

    self.mode = RunMode.MANUAL
    self.sink.log("Run mode switched to manual")
    return True

  def select(self, selection: DeviceSelection | None) -> None:
    self.selection = selection
    if selection is None:
      self.sink.log("Device selection cleared")
    else:
      self.sink.log(
        f"Device selection: {selection.device} (efi={selection.efi}, swap={selection.swap}, root={selection.root})"
      )

  def run(self, *argv: str, interactive: bool = False, output: str | None = None) -> CommandResult:
    return self.runner.run(list(argv), interactive=interactive, output=output)
