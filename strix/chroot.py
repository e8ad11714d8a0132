import os
from textwrap import dedent

from strix import arch
from strix.commands import write
from strix.context import InstallerContext

SCRIPT_NAME = "chroot_setup.sh"


def _section_header() -> str:
  return dedent("""\
    #!/bin/bash
    set -e
  """)


def _section_timezone(timezone: str) -> str:
  return 'echo "[Chroot] Setting timezone..."\n' + arch.timezone_settings(timezone)


def _section_locale(locale: str) -> str:
  return 'echo "[Chroot] Configuring locale..."\n' + arch.locale_settings(locale)


def _section_hostname(hostname: str) -> str:
  hosts = "\n".join(arch.hosts_entries(hostname))
  return dedent(f"""\
    echo "[Chroot] Setting hostname..."
    echo {hostname} > /etc/hostname

    echo "[Chroot] Configuring hosts file..."
    cat > /etc/hosts <<HOSTS
  """) + f"{hosts}\nHOSTS\n"


def _section_bootloader(bootloader_id: str) -> str:
  return 'echo "[Chroot] Installing bootloader..."\n' + arch.bootloader_config(bootloader_id)


def _section_desktop(packages: list[str], services: list[str]) -> str:
  commands = ['echo "[Chroot] Installing desktop and enabling services..."']
  if packages:
    commands.append(arch.install_packages(packages))
  if services:
    commands.append(arch.enable_services(services))
  return "\n".join(commands) + "\n"


def _section_package_manager(repository: str) -> str:
  if not repository:
    return ""

  return dedent(f"""\
    echo "[Chroot] Setting up Strix Package Manager..."
    mkdir -p /opt
    cd /opt
    git clone {repository} strix-os
    cd strix-os
    chmod +x setup.sh
    ./setup.sh
  """)


def _section_footer() -> str:
  return 'echo "[Chroot] Configuration complete!"\n'


def build_chroot_script(ctx: InstallerContext) -> str:
  parts: list[str] = [
    _section_header(),
    _section_timezone(ctx.timezone),
    _section_locale(ctx.locale),
    _section_hostname(ctx.hostname),
    _section_bootloader(ctx.defaults["bootloader_id"]),
    _section_desktop(ctx.defaults["desktop_packages"], ctx.defaults["services"]),
    _section_package_manager(ctx.defaults["package_manager_repository"]),
    _section_footer(),
  ]
  return "\n".join(part for part in parts if part)


def generate_chroot(path: str, ctx: InstallerContext) -> None:
  """Write the configuration script that runs inside the target root."""
  script = build_chroot_script(ctx)
  write(script.splitlines(), path, ctx.dry, ctx.ui, mode=0o755)
  if not ctx.dry:
    ctx.sink.log(f"Wrote chroot script {path} ({os.path.getsize(path)} bytes)")
