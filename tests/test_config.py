import json
from pathlib import Path

import pytest

from strix.utils import BUILTIN_DEFAULTS, load_defaults
from strix.validations import validate_cli_arguments, validate_hostname, validate_locale, validate_timezone


def test_packaged_defaults() -> None:
  defaults = load_defaults()
  assert defaults["timezone"] == "Asia/Kolkata"
  assert defaults["hostname"] == "strixos"
  assert defaults["bootloader_id"] == "STRIX"
  assert set(defaults["minimal_packages"]) <= set(defaults["base_packages"])


def test_missing_defaults_section_uses_builtin(tmp_path: Path) -> None:
  config = tmp_path / "config.json"
  config.write_text(json.dumps({"other": {}}))
  assert load_defaults(str(config)) == BUILTIN_DEFAULTS


def test_optional_keys_fall_back(tmp_path: Path) -> None:
  config = tmp_path / "config.json"
  config.write_text(
    json.dumps(
      {
        "defaults": {
          "timezone": "UTC",
          "locale": "C",
          "hostname": "box",
          "bootloader_id": "BOX",
          "base_packages": ["base", "linux"],
          "minimal_packages": ["base"],
        }
      }
    )
  )
  defaults = load_defaults(str(config))
  assert defaults["ping_host"] == "archlinux.org"
  assert defaults["desktop_packages"] == []
  assert defaults["package_manager_repository"] == ""


@pytest.mark.parametrize(
  "content",
  [
    "{not json",
    json.dumps({"defaults": {"timezone": "UTC"}}),
    json.dumps(
      {
        "defaults": {
          "timezone": "UTC",
          "locale": "C",
          "hostname": "box",
          "bootloader_id": "BOX",
          "base_packages": ["base"],
          "minimal_packages": ["base", "linux"],
        }
      }
    ),
  ],
)
def test_invalid_config_exits(tmp_path: Path, content: str) -> None:
  config = tmp_path / "config.json"
  config.write_text(content)
  with pytest.raises(SystemExit) as exc:
    _ = load_defaults(str(config))
  assert exc.value.code == 1


@pytest.mark.parametrize("timezone", ["Asia/Kolkata", "America/Argentina/Buenos_Aires", "UTC", "America/Port-au-Prince"])
def test_valid_timezones(timezone: str) -> None:
  assert validate_timezone(timezone)


@pytest.mark.parametrize("timezone", ["Kolkata", "Asia/", "Asia//Kolkata", "Asia/Kol kata"])
def test_invalid_timezones(timezone: str) -> None:
  assert not validate_timezone(timezone)


def test_locales() -> None:
  assert validate_locale("en_US.UTF-8")
  assert validate_locale("POSIX")
  assert not validate_locale("english")


def test_hostnames() -> None:
  assert validate_hostname("strixos")
  assert validate_hostname("lab.example")
  assert not validate_hostname("-strix")
  assert not validate_hostname("strix_os")


def test_cli_arguments_only_checks_given_values() -> None:
  assert validate_cli_arguments() == []
  errors = validate_cli_arguments(timezone="Nowhere", hostname="ok")
  assert errors == ["Invalid timezone: Nowhere (expected format: Region/City)"]
