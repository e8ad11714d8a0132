"""
Type definitions for the Strix OS installer.

This module contains the custom types shared by the runner, the error
handler, the device resolver and the installation steps.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TypedDict


class DefaultsConfig(TypedDict):
  """Configuration defaults loaded from config.json."""

  timezone: str
  locale: str
  hostname: str
  bootloader_id: str
  ping_host: str
  partition_tool: str
  base_packages: list[str]
  minimal_packages: list[str]
  desktop_packages: list[str]
  services: list[str]
  package_manager_repository: str


class RunMode(Enum):
  """Whether the operator confirms each step before it runs."""

  AUTO = "auto"
  MANUAL = "manual"


class ErrorDecision(Enum):
  """Operator decision taken after a step failure."""

  CONTINUE = "continue"
  RETRY = "retry"
  SHELL = "shell"
  ABORT = "abort"


class PartitionState(Enum):
  NOT_PARTITIONED = "not partitioned"
  TOOL_INVOKED = "tool invoked"
  VERIFIED = "verified"
  VERIFIED_WITH_WARNINGS = "verified with warnings"
  FAILED = "failed"


@dataclass(frozen=True)
class DeviceSelection:
  """The target block device and its three fixed partitions."""

  device: str
  efi: str
  swap: str
  root: str

  def partitions(self) -> list[tuple[str, str]]:
    """Return (role, path) pairs in partition index order."""
    return [("EFI", self.efi), ("swap", self.swap), ("root", self.root)]


@dataclass
class StepResult:
  """Outcome of a single step body."""

  ok: bool
  message: str = ""
  command: str | None = None
  actions: list[str] = field(default_factory=list)

  @classmethod
  def passed(cls, actions: list[str] | None = None) -> StepResult:
    return cls(ok=True, actions=list(actions or []))

  @classmethod
  def failed(cls, message: str, command: str | None = None, actions: list[str] | None = None) -> StepResult:
    return cls(ok=False, message=message, command=command, actions=list(actions or []))


@dataclass
class ContextConfig:
  """Typed configuration object with all command line arguments."""

  debug: bool = False
  manual: bool = False
  dry: bool = False
  timezone: str | None = None
  locale: str | None = None
  hostname: str | None = None
  target: str = "/mnt"


class InstallAborted(Exception):
  """Raised when the operator aborts the installation from a recovery menu."""
