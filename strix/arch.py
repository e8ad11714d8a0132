"""Arch Linux specific commands and configurations"""

from textwrap import dedent


def install_base_system(target: str, packages: list[str]) -> list[str]:
  return ["pacstrap", target, *packages]


def generate_fstab(target: str) -> list[str]:
  return ["genfstab", "-U", target]


def install_packages(packages: list[str]) -> str:
  pkgs = " ".join(packages)
  return f"pacman -S --noconfirm {pkgs}"


def enable_services(services: list[str]) -> str:
  return "\n".join(f"systemctl enable {svc}" for svc in services)


def timezone_settings(timezone: str) -> str:
  return dedent(f"""\
    ln -sf /usr/share/zoneinfo/{timezone} /etc/localtime
    hwclock --systohc
  """)


def locale_settings(locale: str) -> str:
  charset = locale.split(".", 1)[1] if "." in locale else "UTF-8"
  return dedent(f"""\
    echo "{locale} {charset}" >> /etc/locale.gen
    locale-gen
    echo LANG={locale} > /etc/locale.conf
  """)


def hosts_entries(hostname: str) -> list[str]:
  return [
    "127.0.0.1 localhost",
    "::1       localhost",
    f"127.0.1.1 {hostname}.localdomain {hostname}",
  ]


def bootloader_config(bootloader_id: str) -> str:
  return dedent(f"""\
    {install_packages(["grub", "efibootmgr"])}
    grub-install --target=x86_64-efi --efi-directory=/boot/efi --bootloader-id={bootloader_id}
    grub-mkconfig -o /boot/grub/grub.cfg
  """)
