from conftest import RecordingEscape, log_text

from strix.context import InstallerContext
from strix.runner import EXIT_ABORTED, EXIT_OK, Step, StepRunner
from strix.types import InstallAborted, RunMode, StepResult


class FlakyBody:
  """Fails a fixed number of times, then succeeds."""

  def __init__(self, failures: int = 0) -> None:
    self.failures: int = failures
    self.calls: int = 0

  def __call__(self, ctx: InstallerContext) -> StepResult:
    self.calls += 1
    if self.calls <= self.failures:
      return StepResult.failed("tool exited with status 1", "mkfs.ext4 /dev/sda3", ["mkfs.fat -F32 /dev/sda1"])
    return StepResult.passed()


def test_steps_run_in_order(make_ctx) -> None:
  ctx = make_ctx()
  order: list[str] = []

  def body(name: str):
    def run(_ctx: InstallerContext) -> StepResult:
      order.append(name)
      return StepResult.passed()

    return run

  steps = [Step("First", body("first")), Step("Second", body("second")), Step("Third", body("third"))]
  assert StepRunner(ctx).run(steps) == EXIT_OK
  assert order == ["first", "second", "third"]

  log = log_text(ctx)
  assert log.index("Starting step 1: First") < log.index("Starting step 2: Second") < log.index("Starting step 3: Third")


def test_declined_confirmation_skips_body(make_ctx) -> None:
  ctx = make_ctx(answers=["n", "y"], manual=True)
  skipped, executed = FlakyBody(), FlakyBody()

  assert StepRunner(ctx).run([Step("Skipped", skipped), Step("Executed", executed)]) == EXIT_OK
  assert skipped.calls == 0
  assert executed.calls == 1
  assert "Step skipped by user" in log_text(ctx)


def test_auto_mode_does_not_ask_for_confirmation(make_ctx) -> None:
  ctx = make_ctx()
  assert StepRunner(ctx).run([Step("Only", FlakyBody())]) == EXIT_OK
  assert ctx.operator.prompts == []


def test_retry_reruns_body_from_scratch(make_ctx) -> None:
  ctx = make_ctx(answers=["retry", "retry"])
  body = FlakyBody(failures=2)

  assert StepRunner(ctx).run([Step("Formatting", body)]) == EXIT_OK
  assert body.calls == 3
  assert ctx.mode is RunMode.MANUAL


def test_continue_treats_step_as_complete(make_ctx) -> None:
  # The failure escalates to manual mode, so the next step asks for confirmation
  ctx = make_ctx(answers=["continue", "y"])
  failing, following = FlakyBody(failures=10), FlakyBody()

  assert StepRunner(ctx).run([Step("Failing", failing), Step("Following", following)]) == EXIT_OK
  assert failing.calls == 1
  assert following.calls == 1


def test_shell_then_retry(make_ctx) -> None:
  escape = RecordingEscape()
  ctx = make_ctx(answers=["shell"], escape=escape)
  body = FlakyBody(failures=1)

  assert StepRunner(ctx).run([Step("Mounting", body)]) == EXIT_OK
  assert escape.calls == 1
  assert body.calls == 2


def test_abort_stops_the_run(make_ctx) -> None:
  ctx = make_ctx(answers=["exit"])
  failing, never = FlakyBody(failures=1), FlakyBody()

  assert StepRunner(ctx).run([Step("Failing", failing), Step("Never", never)]) == EXIT_ABORTED
  assert never.calls == 0
  assert "Starting step 2" not in log_text(ctx)


def test_unrecognized_decision_aborts(make_ctx) -> None:
  ctx = make_ctx(answers=["maybe"])
  assert StepRunner(ctx).run([Step("Failing", FlakyBody(failures=1))]) == EXIT_ABORTED


def test_failure_message_names_step_and_command(make_ctx) -> None:
  ctx = make_ctx(answers=["exit"])
  _ = StepRunner(ctx).run([Step("Formatting Partitions", FlakyBody(failures=1))])
  assert "Step 'Formatting Partitions' failed: tool exited with status 1 (command: mkfs.ext4 /dev/sda3)" in log_text(ctx)


def test_unexpected_exception_becomes_failure(make_ctx) -> None:
  ctx = make_ctx(answers=["continue"])

  def broken(_ctx: InstallerContext) -> StepResult:
    raise OSError("disk vanished")

  assert StepRunner(ctx).run([Step("Broken", broken)]) == EXIT_OK
  assert "unexpected error: disk vanished" in log_text(ctx)


def test_install_aborted_ends_run_without_prompt(make_ctx) -> None:
  ctx = make_ctx()

  def aborting(_ctx: InstallerContext) -> StepResult:
    raise InstallAborted("missing partitions")

  assert StepRunner(ctx).run([Step("Partitioning", aborting), Step("Never", FlakyBody())]) == EXIT_ABORTED
  assert ctx.operator.prompts == []
