"""
Partitioning phase.

Partition editors are interactive and opaque: their exit status is ignored
and success is decided afterwards by checking that the three derived
partitions exist. Missing partitions lead to a recovery menu.
"""

from enum import Enum

from strix.context import InstallerContext
from strix.devices import derive_partitions
from strix.types import DeviceSelection, InstallAborted, PartitionState, StepResult

PARTITION_TOOLS = ["fdisk", "cfdisk", "parted", "skip"]


class Recovery(Enum):
  RETRY = "retry"
  SHELL = "shell"
  SKIP = "skip"
  ABORT = "abort"


RECOVERY_CHOICES: dict[str, Recovery] = {
  "r": Recovery.RETRY,
  "retry": Recovery.RETRY,
  "s": Recovery.SHELL,
  "shell": Recovery.SHELL,
  "k": Recovery.SKIP,
  "skip": Recovery.SKIP,
  "a": Recovery.ABORT,
  "abort": Recovery.ABORT,
  "exit": Recovery.ABORT,
}


def parse_recovery(choice: str) -> Recovery | None:
  return RECOVERY_CHOICES.get(choice.strip().lower())


class PartitioningPhase:
  """Drive one disk through editor, listing and verification."""

  def __init__(self, ctx: InstallerContext) -> None:
    self.ctx: InstallerContext = ctx
    self.state: PartitionState = PartitionState.NOT_PARTITIONED

  def run(self, selection: DeviceSelection) -> StepResult:
    ctx = self.ctx
    actions: list[str] = []

    open_editor = ctx.manual or bool(ctx.resolver.verify_partitions(selection))
    if not open_editor:
      ctx.ui.info(f"Existing partition layout found on {selection.device}")

    while True:
      if open_editor:
        self._show_layout(selection)
        tool = self._choose_tool()
        if tool is None:
          ctx.ui.warning("Partitioning skipped. Make sure partitions exist.")
        else:
          _ = ctx.run(tool, selection.device, interactive=True)
          self._transition(PartitionState.TOOL_INVOKED)
          actions.append(f"{tool} {selection.device}")

      ctx.ui.info("Verifying partitions...")
      listing = ctx.run("fdisk", "-l", selection.device)
      if not listing.ok:
        return StepResult.failed(
          "Failed to list partitions. Check if disk exists and partitioning was done correctly.",
          listing.command,
          actions,
        )
      actions.append(listing.command)

      if ctx.dry:
        ctx.ui.info("Skipping partition existence checks in dry run mode")
        missing = []
      else:
        missing = ctx.resolver.verify_partitions(selection)

      if not missing:
        self._transition(PartitionState.VERIFIED)
        ctx.ui.info("All partitions verified")
        return StepResult.passed(actions)

      ctx.ui.error(f"Missing partitions: {', '.join(missing)}")
      action = self._ask_recovery()

      if action is Recovery.RETRY:
        selection = derive_partitions(selection.device)
        ctx.select(selection)
        open_editor = True

      elif action is Recovery.SHELL:
        if ctx.escape is None:
          ctx.ui.warning("No shell available for manual recovery")
        else:
          ctx.escape.open_shell()
        open_editor = False

      elif action is Recovery.SKIP:
        self._transition(PartitionState.VERIFIED_WITH_WARNINGS)
        ctx.ui.warning("Partition verification skipped. Later steps may fail.")
        return StepResult.passed(actions)

      else:
        self._transition(PartitionState.FAILED)
        raise InstallAborted(f"missing partitions on {selection.device}: {', '.join(missing)}")

  def _transition(self, state: PartitionState) -> None:
    self.ctx.sink.log(f"Partitioning: {self.state.value} -> {state.value}")
    self.state = state

  def _show_layout(self, selection: DeviceSelection) -> None:
    ui = self.ctx.ui
    ui.info("Manual partitioning recommended for data safety")
    ui.info("Use fdisk or cfdisk to create:")
    ui.info(f"  - EFI partition ({selection.efi}, 512MB, FAT32)")
    ui.info(f"  - Swap partition ({selection.swap}, RAM size, SWAP)")
    ui.info(f"  - Root partition ({selection.root}, Remaining space, EXT4)")

  def _choose_tool(self) -> str | None:
    """Return the editor to run, or None when the operator skips partitioning."""
    if not self.ctx.manual:
      return self.ctx.defaults["partition_tool"]

    for i, tool in enumerate(PARTITION_TOOLS, start=1):
      self.ctx.ui.print(f" {i}. {tool}")

    while True:
      choice = self.ctx.operator.ask("Select a partitioning tool").strip()
      if choice.isdigit() and 1 <= int(choice) <= len(PARTITION_TOOLS):
        choice = PARTITION_TOOLS[int(choice) - 1]

      if choice in PARTITION_TOOLS:
        self.ctx.sink.log(f"Partitioning tool selected: {choice}")
        return None if choice == "skip" else choice

      self.ctx.ui.error("Invalid option")

  def _ask_recovery(self) -> Recovery:
    while True:
      choice = self.ctx.operator.ask("Choose an action [retry/shell/skip/abort]")
      action = parse_recovery(choice)
      if action is not None:
        self.ctx.sink.log(f"Partition recovery: {action.value}")
        return action

      self.ctx.ui.error(f"Invalid option: {choice!r}")
