import io

import pytest

from strix.devices import confirm_destructive
from strix.input import ConsoleOperator


def feed(monkeypatch: pytest.MonkeyPatch, text: str) -> None:
  monkeypatch.setattr("sys.stdin", io.StringIO(text))


def test_console_answers_are_not_stripped(monkeypatch: pytest.MonkeyPatch) -> None:
  feed(monkeypatch, "  yes  \n")
  assert ConsoleOperator().ask("Type 'yes'") == "  yes  "


def test_padded_yes_does_not_confirm_from_console(make_ctx, monkeypatch: pytest.MonkeyPatch) -> None:
  ctx = make_ctx()
  feed(monkeypatch, "  yes  \n")
  assert not confirm_destructive("/dev/sda", ConsoleOperator(), ctx.ui)


def test_exact_yes_confirms_from_console(make_ctx, monkeypatch: pytest.MonkeyPatch) -> None:
  ctx = make_ctx()
  feed(monkeypatch, "yes\n")
  assert confirm_destructive("/dev/sda", ConsoleOperator(), ctx.ui)


def test_prompt_brackets_are_shown(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
  feed(monkeypatch, "r\n")
  assert ConsoleOperator().ask("Choose an action [continue/retry/shell/exit]") == "r"
  assert "Choose an action [continue/retry/shell/exit]: " in capsys.readouterr().out


def test_end_of_input(monkeypatch: pytest.MonkeyPatch) -> None:
  feed(monkeypatch, "")
  with pytest.raises(EOFError):
    _ = ConsoleOperator().ask("Select a partitioning tool")
