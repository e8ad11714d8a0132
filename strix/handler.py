"""
Recovery decisions after a failed step.

The handler is the single place where a failure turns into an operator
decision. It never raises: problems reading the log or the prompt end in
ABORT or are reported and ignored.
"""

from rich.markup import escape

from strix.context import InstallerContext
from strix.types import ErrorDecision

TAIL_LINES = 5

FULL_CHOICES: dict[str, ErrorDecision] = {
  "c": ErrorDecision.CONTINUE,
  "continue": ErrorDecision.CONTINUE,
  "r": ErrorDecision.RETRY,
  "retry": ErrorDecision.RETRY,
  "s": ErrorDecision.SHELL,
  "shell": ErrorDecision.SHELL,
  "e": ErrorDecision.ABORT,
  "exit": ErrorDecision.ABORT,
  "abort": ErrorDecision.ABORT,
}

DEGRADED_CHOICES: dict[str, ErrorDecision] = {
  "": ErrorDecision.CONTINUE,
  "continue": ErrorDecision.CONTINUE,
  "exit": ErrorDecision.ABORT,
}


def parse_decision(choice: str, full: bool = True) -> ErrorDecision:
  """Map operator input to a decision; anything unrecognized aborts."""
  choices = FULL_CHOICES if full else DEGRADED_CHOICES
  return choices.get(choice.strip().lower(), ErrorDecision.ABORT)


class ErrorHandler:
  def __init__(self, ctx: InstallerContext) -> None:
    self.ctx: InstallerContext = ctx

  @property
  def full(self) -> bool:
    """The shell option is only offered when an escape is available."""
    return self.ctx.escape is not None

  def handle(self, message: str) -> ErrorDecision:
    ui = self.ctx.ui
    ui.error(message)
    ui.error(f"Check {self.ctx.sink.path} for details")
    self._show_tail()

    if self.ctx.escalate():
      ui.info("Switching to manual mode to resolve the issue.")
    else:
      ui.info("You are in manual mode. Fix the issue and choose how to proceed.")

    if self.full:
      prompt = "Choose an action [continue/retry/shell/exit]"
    else:
      prompt = "Press Enter to continue or type 'exit' to abort"

    try:
      choice = self.ctx.operator.ask(prompt)
    except EOFError:
      choice = "exit"

    decision = parse_decision(choice, self.full)
    self.ctx.sink.log(f"Error decision: {decision.value} (input: {choice!r})")
    return decision

  def _show_tail(self) -> None:
    try:
      lines = self.ctx.sink.tail(TAIL_LINES)
    except OSError as e:
      self.ctx.ui.warning(f"Could not read {self.ctx.sink.path}: {e}")
      return

    self.ctx.ui.print(f"[dim]Last {TAIL_LINES} log lines:[/]")
    for line in lines:
      self.ctx.ui.print(f"[dim]  {escape(line)}[/]")
