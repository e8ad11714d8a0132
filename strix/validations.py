"""
Validation functions for the Strix OS installer.

This module contains the validation functions used for command line
arguments and for the config.json defaults.
"""

import re
from typing import Any

# =============================================================================
# Validation Functions
# =============================================================================
# Functions that validate data and return boolean or list of issues


def validate_timezone(timezone: str) -> bool:
  """Validate timezone against Region/City patterns (UTC is accepted as is)."""
  if timezone == "UTC":
    return True

  if "/" not in timezone:
    return False

  parts = timezone.split("/")
  return all(part and part.replace("_", "").replace("-", "").isalpha() for part in parts)


def validate_locale(locale: str) -> bool:
  """Validate locale format - supports various glibc locale formats."""
  if not locale:
    return False

  # Allow C/POSIX locales
  if locale in ("C", "POSIX"):
    return True

  # Basic pattern: language[_territory][.encoding][@modifier]
  # Examples: en, en_US, en_US.UTF-8, en_US@euro, de_DE.ISO-8859-1@euro
  pattern = r"^[a-z]{2,3}(_[A-Z]{2})?(\.[A-Za-z0-9_-]+)?(@[A-Za-z0-9_-]+)?$"
  return bool(re.match(pattern, locale))


def validate_hostname(hostname: str) -> bool:
  """Validate hostname format according to RFC 1123."""
  if not hostname or len(hostname) > 253:
    return False

  labels = hostname.split(".")

  def is_valid_label(label: str) -> bool:
    return (
      bool(label)
      and len(label) <= 63
      and label[0].isalnum()
      and label[-1].isalnum()
      and all(c.isalnum() or c == "-" for c in label)
    )

  return all(is_valid_label(label) for label in labels)


def validate_defaults_json(data: Any) -> dict[str, Any]:
  """Validate and return defaults JSON data with proper typing."""
  if not isinstance(data, dict):
    raise ValueError("Defaults JSON must be an object")

  required_keys = {"timezone", "locale", "hostname", "bootloader_id", "base_packages", "minimal_packages"}
  missing_keys = required_keys - data.keys()
  if missing_keys:
    raise KeyError(f"Missing required keys: {sorted(missing_keys)}")

  for key in ("base_packages", "minimal_packages", "desktop_packages", "services"):
    if key in data and not isinstance(data[key], list):
      raise ValueError(f"{key} field must be a list")

  if not set(data["minimal_packages"]) <= set(data["base_packages"]):
    raise ValueError("minimal_packages must be a subset of base_packages")

  return data


def validate_cli_arguments(
  timezone: str | None = None,
  locale: str | None = None,
  hostname: str | None = None,
) -> list[str]:
  """
  Validate the command line overrides and return list of error messages.

  Returns empty list if all arguments are valid, list of error messages otherwise.
  """
  validators: list[tuple[bool, str]] = []

  if timezone is not None:
    validators.append((validate_timezone(timezone), f"Invalid timezone: {timezone} (expected format: Region/City)"))

  if locale is not None:
    validators.append(
      (validate_locale(locale), f"Invalid locale: {locale} (expected format: language[_COUNTRY][.encoding][@modifier])")
    )

  if hostname is not None:
    validators.append((validate_hostname(hostname), f"Invalid hostname: {hostname} (must follow RFC 1123 format)"))

  return [msg for valid, msg in validators if not valid]
