"""
Installation log.

Every message is appended to a single text file as
``[YYYY-MM-DD HH:MM:SS] <message>``. The file is truncated when the sink is
opened and external command output is appended to the same file, so the
handler must open it in append mode.
"""

from __future__ import annotations

import logging
from collections import deque

from rich.console import Console
from rich.logging import RichHandler

LOG_FILE = "/tmp/strix-install.log"
LOGGER_NAME = "strix"


class LogSink:
  def __init__(self, path: str = LOG_FILE, debug: bool = False, console: Console | None = None) -> None:
    self.path: str = path
    self.logger: logging.Logger = logging.getLogger(LOGGER_NAME)
    self.logger.setLevel(logging.DEBUG)
    self.logger.propagate = False
    self.close()

    open(path, "w").close()
    file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
    file_handler.setFormatter(logging.Formatter(fmt="[%(asctime)s] %(message)s", datefmt="%Y-%m-%d %H:%M:%S"))
    self.logger.addHandler(file_handler)

    if debug:
      echo = RichHandler(console=console, show_time=False, show_path=False, markup=False)
      echo.setFormatter(logging.Formatter(fmt="[DEBUG] %(message)s"))
      self.logger.addHandler(echo)

  def log(self, message: str) -> None:
    self.logger.info(message)

  def tail(self, count: int = 5) -> list[str]:
    """Return the last ``count`` lines of the log file."""
    for handler in self.logger.handlers:
      handler.flush()

    with open(self.path, "r", encoding="utf-8", errors="replace") as f:
      return [line.rstrip("\n") for line in deque(f, maxlen=count)]

  def close(self) -> None:
    for handler in list(self.logger.handlers):
      self.logger.removeHandler(handler)
      handler.close()
