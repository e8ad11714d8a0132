from collections.abc import Callable
from dataclasses import dataclass

from strix.context import InstallerContext
from strix.handler import ErrorHandler
from strix.types import ErrorDecision, InstallAborted, StepResult

EXIT_OK = 0
EXIT_ABORTED = 1


@dataclass(frozen=True)
class Step:
  """One named unit of the installation pipeline."""

  title: str
  body: Callable[[InstallerContext], StepResult]


class StepRunner:
  """
  Execute steps strictly in order with operator-driven recovery.

  A failed step is handed to the error handler; its decision either
  advances (continue), re-runs the body from scratch (retry, or shell
  followed by retry) or ends the run (abort).
  """

  def __init__(self, ctx: InstallerContext, handler: ErrorHandler | None = None) -> None:
    self.ctx: InstallerContext = ctx
    self.handler: ErrorHandler = handler or ErrorHandler(ctx)

  def run(self, steps: list[Step]) -> int:
    total = len(steps)

    for position, step in enumerate(steps, start=1):
      self.ctx.current_step = position
      self.ctx.ui.step(position, total, step.title)

      if not self._confirm():
        self.ctx.ui.info("Step skipped by user. Proceeding to next step.")
        continue

      try:
        decision = self._run_until_settled(step)
      except InstallAborted as e:
        self.ctx.sink.log(f"Step {position} aborted: {e}")
        self.ctx.ui.info("Installation aborted by user.")
        return EXIT_ABORTED

      if decision is ErrorDecision.ABORT:
        self.ctx.ui.info("Installation aborted by user.")
        return EXIT_ABORTED

    self.ctx.sink.log("All steps completed")
    return EXIT_OK

  def _confirm(self) -> bool:
    if not self.ctx.manual:
      return True

    answer = self.ctx.operator.ask("Confirm to proceed with this step? (y/n)")
    confirmed = answer.strip() == "y"
    self.ctx.sink.log(f"Step {self.ctx.current_step} confirmation: {'accepted' if confirmed else 'declined'}")
    return confirmed

  def _run_until_settled(self, step: Step) -> ErrorDecision | None:
    """Run ``step`` until it succeeds or a decision other than retry is taken."""
    while True:
      result = self._execute(step)
      if result.ok:
        self.ctx.sink.log(f"Step {self.ctx.current_step} completed: {step.title}")
        return None

      message = f"Step '{step.title}' failed: {result.message}"
      if result.command:
        message += f" (command: {result.command})"

      self.ctx.sink.log(f"Step {self.ctx.current_step} failed after: {', '.join(result.actions) or 'no actions'}")
      decision = self.handler.handle(message)

      if decision is ErrorDecision.CONTINUE:
        self.ctx.ui.warning(f"Continuing past failed step '{step.title}'")
        return decision

      if decision is ErrorDecision.ABORT:
        return decision

      if decision is ErrorDecision.SHELL:
        if self.ctx.escape is not None:
          self.ctx.escape.open_shell()
        self.ctx.sink.log("Returned from shell")

      self.ctx.ui.info(f"Retrying step '{step.title}'")

  def _execute(self, step: Step) -> StepResult:
    try:
      return step.body(self.ctx)

    except InstallAborted:
      raise

    except Exception as e:
      return StepResult.failed(f"unexpected error: {e}")
