"""
Block device discovery and target selection.

The installer always creates the same three partitions on the target disk:
index 1 is the EFI system partition, 2 is swap and 3 is the root filesystem.
"""

import os
import re

from strix.input import Operator
from strix.tui import TUI
from strix.types import DeviceSelection

DEV_PREFIX = "/dev"
DISKS_REGEX = re.compile(r"^(nvme\d+n\d+|sd[a-z]+|vd[a-z]+|hd[a-z]+)$")
NVME_REGEX = re.compile(r"nvme\d+n\d+$")
CONFIRMATION = "yes"


def is_nvme(device: str) -> bool:
  return bool(NVME_REGEX.search(device))


def partition_name(device: str, index: int) -> str:
  separator = "p" if is_nvme(device) else ""
  return f"{device}{separator}{index}"


def derive_partitions(device: str) -> DeviceSelection:
  """Derive the EFI, swap and root partition paths for ``device``."""
  return DeviceSelection(
    device=device,
    efi=partition_name(device, 1),
    swap=partition_name(device, 2),
    root=partition_name(device, 3),
  )


class DeviceResolver:
  """
  Discover installable disks and check partition existence.

  Device paths are always reported under /dev; ``dev_root`` is the directory
  actually inspected, so tests can point it at a scratch directory.
  """

  def __init__(self, dev_root: str = DEV_PREFIX) -> None:
    self.dev_root: str = dev_root

  def discover(self) -> list[str]:
    try:
      names = os.listdir(self.dev_root)
    except OSError:
      return []

    return [f"{DEV_PREFIX}/{name}" for name in sorted(names) if DISKS_REGEX.match(name)]

  def exists(self, path: str) -> bool:
    return os.path.exists(os.path.join(self.dev_root, os.path.basename(path)))

  def verify_partitions(self, selection: DeviceSelection) -> list[str]:
    """Return the derived partitions that do not exist, in index order."""
    return [path for _role, path in selection.partitions() if not self.exists(path)]


def choose_device(candidates: list[str], operator: Operator, ui: TUI) -> str:
  """Pick one of ``candidates``, prompting only when there is more than one."""
  if len(candidates) == 1:
    ui.info(f"Only one disk found, selecting {candidates[0]}")
    return candidates[0]

  ui.print("Disks:")
  for i, disk in enumerate(candidates, start=1):
    ui.print(f" {i}. {disk}")

  while True:
    choice = operator.ask("Choose the destination disk (enter number or path)").strip()
    if choice.isdigit() and 1 <= int(choice) <= len(candidates):
      return candidates[int(choice) - 1]

    for disk in candidates:
      if choice in (disk, os.path.basename(disk)):
        return disk

    ui.error(f"Invalid selection: {choice!r}")


def confirm_destructive(device: str, operator: Operator, ui: TUI) -> bool:
  ui.warning(f"All data on {device} will be erased.")
  answer = operator.ask(f"Type '{CONFIRMATION}' to use {device} as the installation target")
  if answer != CONFIRMATION:
    ui.info(f"Selection of {device} cancelled")
    return False

  ui.info(f"Installation target confirmed: {device}")
  return True


def resolve_target(resolver: DeviceResolver, operator: Operator, ui: TUI) -> DeviceSelection | None:
  """
  Run discovery, selection and confirmation until a target is accepted.

  Returns None when no installable disk exists. A cancelled confirmation
  starts over from discovery.
  """
  while True:
    candidates = resolver.discover()
    if not candidates:
      ui.error("No installable disk found")
      return None

    ui.info(f"Found {len(candidates)} disk(s): {', '.join(candidates)}")
    device = choose_device(candidates, operator, ui)
    if confirm_destructive(device, operator, ui):
      return derive_partitions(device)
