#!/usr/bin/env python3

import argparse
import os
import sys
from argparse import Namespace
from textwrap import dedent
from typing import override

from rich.console import Console

from strix.commands import CommandRunner
from strix.context import InstallerContext
from strix.devices import DeviceResolver
from strix.input import ConsoleOperator, ShellEscape
from strix.logsink import LOG_FILE, LogSink
from strix.runner import StepRunner
from strix.steps import get_install_steps
from strix.tui import TUI
from strix.types import ContextConfig
from strix.utils import load_defaults
from strix.validations import validate_cli_arguments

console = Console()

VERSION = "0.1.0"


class IndentedHelpFormatter(argparse.RawDescriptionHelpFormatter):
  def __init__(self, prog: str, **kwargs) -> None:
    super().__init__(prog, max_help_position=30, width=80, **kwargs)

  @override
  def _format_action_invocation(self, action: argparse.Action) -> str:
    options = action.option_strings
    if not options:
      return super()._format_action_invocation(action)

    parts: list[str] = []
    if len(options) == 1:
      parts.append(f"{'':4}{options[0]}")

    else:
      parts.append(f"{', '.join(options)}")

    if action.nargs != 0:
      default_metavar = self._get_default_metavar_for_optional(action)
      parts[-1] += f" {self._format_args(action, default_metavar)}"

    return parts[-1]


def _check_system_requirements() -> None:
  """Check if the system meets installation requirements."""
  if os.geteuid() != 0:
    console.print("\n[prompt.invalid]Root privileges are required. Please re-run the script as root.[/]")
    sys.exit(1)


def create_argument_parser() -> argparse.ArgumentParser:
  """Create and configure the argument parser."""
  parser = argparse.ArgumentParser(
    prog="strix-setup",
    allow_abbrev=False,
    exit_on_error=False,
    formatter_class=IndentedHelpFormatter,
    description=dedent("""
      Guided installer for Strix OS.

      Brings up the network, prepares the target disk (EFI, swap and root
      partitions), installs the base system and configures it from a
      chroot. Any failing step can be continued, retried, repaired from a
      shell or aborted.
    """),
    epilog=dedent(f"""
      Examples:
        %(prog)s                          # Unattended run, manual on first failure
        %(prog)s --manual                 # Confirm every step
        %(prog)s --debug --dry            # Preview commands with verbose logging

      Log file: {LOG_FILE}
    """),
  )

  _ = parser.add_argument(
    "--debug",
    action="store_true",
    help="echo every log message to the console",
    dest="debug",
  )

  _ = parser.add_argument(
    "--manual",
    action="store_true",
    help="confirm each step and pick the partitioning tool",
    dest="manual",
  )

  _ = parser.add_argument(
    "-d",
    "--dry",
    action="store_true",
    help="preview installation steps without executing commands or writing files",
    dest="dry",
  )

  _ = parser.add_argument(
    "-t",
    "--timezone",
    metavar="TIMEZONE",
    type=str,
    help="system timezone in Region/City format [default: from config.json]",
    dest="timezone",
  )

  _ = parser.add_argument(
    "--locale",
    metavar="LOCALE",
    type=str,
    help="system locale (e.g., en_US.UTF-8) [default: from config.json]",
    dest="locale",
  )

  _ = parser.add_argument(
    "--hostname",
    metavar="HOSTNAME",
    type=str,
    help="system hostname [default: from config.json]",
    dest="hostname",
  )

  _ = parser.add_argument("--version", action="version", version=f"strix-setup {VERSION}")

  return parser


def _create_context_config(args: Namespace) -> ContextConfig:
  """Create a typed ContextConfig from an argparse Namespace."""
  return ContextConfig(
    debug=bool(getattr(args, "debug", False)),
    manual=bool(getattr(args, "manual", False)),
    dry=bool(getattr(args, "dry", False)),
    timezone=getattr(args, "timezone", None),
    locale=getattr(args, "locale", None),
    hostname=getattr(args, "hostname", None),
  )


def _rejected_token(argv: list[str], error: argparse.ArgumentError) -> str | None:
  """Return the command-line token argparse refused, if it can be located."""
  options = (error.argument_name or "").split("/")
  for token in argv:
    if any(token == option or token.startswith(f"{option}=") for option in options if option):
      return token
  return None


def parse_arguments(argv: list[str] | None = None) -> tuple[ContextConfig, list[str]]:
  """
  Parse known options.

  Unknown options and options argparse rejects (``--debug=1``, ``--timezone``
  without a value) are removed and returned for the caller to warn about.
  """
  parser = create_argument_parser()
  remaining = list(sys.argv[1:] if argv is None else argv)
  rejected: list[str] = []

  while True:
    try:
      args, unknown = parser.parse_known_args(remaining)
      return _create_context_config(args), rejected + unknown

    except argparse.ArgumentError as e:
      token = _rejected_token(remaining, e)
      if token is None:
        raise
      remaining.remove(token)
      rejected.append(token)


def main(argv: list[str] | None = None) -> int:
  """Main entry point for the installer."""
  config, unknown = parse_arguments(argv)

  errors = validate_cli_arguments(timezone=config.timezone, locale=config.locale, hostname=config.hostname)
  if errors:
    console.print("\n[prompt.invalid]Invalid arguments provided:[/]")
    console.print("\n".join(f" • {err}" for err in errors))
    console.print("\n[yellow]Use --help for valid options[/]")
    return 1

  if not config.dry:
    _check_system_requirements()

  defaults = load_defaults()
  sink = LogSink(LOG_FILE, debug=config.debug, console=console)
  ui = TUI(sink, console)

  for option in unknown:
    ui.warning(f"Unknown option: {option}")

  ctx = InstallerContext(
    config,
    defaults,
    sink=sink,
    ui=ui,
    runner=CommandRunner(sink, ui, dry_run=config.dry),
    operator=ConsoleOperator(),
    escape=ShellEscape(),
    resolver=DeviceResolver(),
  )

  ui.header("STRIX OS INSTALLATION")
  ui.info("This script will guide you through the installation of Strix OS")
  ui.info(f"Log file: {sink.path}")
  if config.debug:
    ui.info("Debug mode: Enabled")
  if config.manual:
    ui.info("Manual mode: Enabled")
  if config.dry:
    console.print("[bold yellow]DRY RUN MODE[/] - No actual changes will be made to your system")

  try:
    return StepRunner(ctx).run(get_install_steps())
  finally:
    sink.close()


def run() -> None:
  try:
    sys.exit(main())

  except KeyboardInterrupt:
    console.print("\n[prompt.invalid]Installation interrupted. Exiting...[/]")
    sys.exit(130)

  except Exception as e:
    console.print(f"\n[prompt.invalid]Fatal error: {e}[/]")
    sys.exit(1)


if __name__ == "__main__":
  run()
