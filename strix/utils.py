import json
import os
import sys

from rich.console import Console

from strix.types import DefaultsConfig
from strix.validations import validate_defaults_json

console = Console()

BUILTIN_DEFAULTS = DefaultsConfig(
  timezone="UTC",
  locale="en_US.UTF-8",
  hostname="strixos",
  bootloader_id="STRIX",
  ping_host="archlinux.org",
  partition_tool="cfdisk",
  base_packages=["base", "linux", "linux-firmware"],
  minimal_packages=["base", "linux", "linux-firmware"],
  desktop_packages=[],
  services=["NetworkManager"],
  package_manager_repository="",
)


def get_resource_path(relative_path: str) -> str:
  """Get absolute path to a data file shipped inside the package."""
  return os.path.join(os.path.dirname(os.path.abspath(__file__)), relative_path)


def load_defaults(config_file: str | None = None) -> DefaultsConfig:
  """Load default values from config.json, falling back to built-in defaults."""
  config_file = config_file or get_resource_path("config.json")
  try:
    with open(config_file, "r") as f:
      config_data = json.load(f)
      if not isinstance(config_data, dict) or "defaults" not in config_data:
        return DefaultsConfig(**BUILTIN_DEFAULTS)

      data = validate_defaults_json(config_data["defaults"])

      # Optional keys come from the built-in defaults
      return DefaultsConfig(
        timezone=str(data["timezone"]),
        locale=str(data["locale"]),
        hostname=str(data["hostname"]),
        bootloader_id=str(data["bootloader_id"]),
        ping_host=str(data.get("ping_host", BUILTIN_DEFAULTS["ping_host"])),
        partition_tool=str(data.get("partition_tool", BUILTIN_DEFAULTS["partition_tool"])),
        base_packages=[str(pkg) for pkg in data["base_packages"]],
        minimal_packages=[str(pkg) for pkg in data["minimal_packages"]],
        desktop_packages=[str(pkg) for pkg in data.get("desktop_packages", [])],
        services=[str(svc) for svc in data.get("services", BUILTIN_DEFAULTS["services"])],
        package_manager_repository=str(data.get("package_manager_repository", "")),
      )

  except (FileNotFoundError, json.JSONDecodeError) as e:
    console.print(f"\n[bold red]Error loading config.json: {e}[/]")
    sys.exit(1)

  except (KeyError, ValueError) as e:
    console.print(f"\n[bold red]Invalid config.json format: {e}[/]")
    sys.exit(1)
