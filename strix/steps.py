import os

from rich.markup import escape

from strix import arch
from strix.chroot import SCRIPT_NAME, generate_chroot
from strix.context import InstallerContext
from strix.devices import resolve_target
from strix.partitioning import PartitioningPhase
from strix.runner import Step
from strix.types import DeviceSelection, StepResult


def _require_selection(ctx: InstallerContext) -> DeviceSelection | None:
  """Return the active device selection, running disk selection if there is none."""
  if ctx.selection is None:
    ctx.ui.warning("No installation target selected yet")
    ctx.select(resolve_target(ctx.resolver, ctx.operator, ctx.ui))
  return ctx.selection


def step_1_setting_up_internet(ctx: InstallerContext) -> StepResult:
  ctx.ui.info("Starting network connection wizard")
  if not ctx.runner.which("iwctl"):
    ctx.ui.warning("iwctl command not found. Network setup may fail.")

  # Exit status of the wizard is irrelevant, the probe below decides
  _ = ctx.run("iwctl", interactive=True)
  ctx.sink.log("iwctl completed")

  ctx.ui.info("Testing internet connection...")
  probe = ctx.run("ping", "-c", "3", ctx.defaults["ping_host"])
  if not probe.ok:
    return StepResult.failed("Internet connection failed. Please configure the network manually.", probe.command)

  ctx.ui.info("Internet connection successful")
  return StepResult.passed([probe.command])


def step_2_selecting_disk(ctx: InstallerContext) -> StepResult:
  ctx.select(None)
  selection = resolve_target(ctx.resolver, ctx.operator, ctx.ui)
  if selection is None:
    return StepResult.failed("No installable disk found. Attach a disk and retry.")

  ctx.select(selection)
  return StepResult.passed([f"selected {selection.device}"])


def step_3_partitioning_disk(ctx: InstallerContext) -> StepResult:
  selection = _require_selection(ctx)
  if selection is None:
    return StepResult.failed("No target disk available for partitioning")

  return PartitioningPhase(ctx).run(selection)


def step_4_formatting_partitions(ctx: InstallerContext) -> StepResult:
  selection = _require_selection(ctx)
  if selection is None:
    return StepResult.failed("No target disk available for formatting")

  commands = [
    (f"Formatting EFI partition ({selection.efi})", ["mkfs.fat", "-F32", selection.efi], "Failed to format EFI partition"),
    (f"Formatting root partition ({selection.root})", ["mkfs.ext4", selection.root], "Failed to format root partition"),
    (f"Creating swap ({selection.swap})", ["mkswap", selection.swap], "Failed to create swap"),
    (f"Activating swap ({selection.swap})", ["swapon", selection.swap], "Failed to activate swap"),
  ]

  done: list[str] = []
  for description, argv, failure in commands:
    ctx.ui.info(description)
    result = ctx.run(*argv)
    if not result.ok:
      return StepResult.failed(failure, result.command, done)
    done.append(result.command)

  ctx.ui.info("All partitions formatted successfully")
  return StepResult.passed(done)


def step_5_mounting_partitions(ctx: InstallerContext) -> StepResult:
  selection = _require_selection(ctx)
  if selection is None:
    return StepResult.failed("No target disk available for mounting")

  efi_dir = f"{ctx.target}/boot/efi"
  commands = [
    (f"Mounting root partition to {ctx.target}", ["mount", selection.root, ctx.target], "Failed to mount root partition"),
    ("Creating EFI directory", ["mkdir", "-p", efi_dir], "Failed to create EFI directory"),
    ("Mounting EFI partition", ["mount", selection.efi, efi_dir], "Failed to mount EFI partition"),
  ]

  done: list[str] = []
  for description, argv, failure in commands:
    ctx.ui.info(description)
    result = ctx.run(*argv)
    if not result.ok:
      return StepResult.failed(failure, result.command, done)
    done.append(result.command)

  ctx.ui.info("All partitions mounted successfully")
  return StepResult.passed(done)


def step_6_installing_base_system(ctx: InstallerContext) -> StepResult:
  packages = ctx.defaults["base_packages"]
  minimal = ctx.defaults["minimal_packages"]

  ctx.ui.info("This may take a while depending on your internet speed...")
  result = ctx.run(*arch.install_base_system(ctx.target, packages))
  if result.ok:
    ctx.ui.info("Base system installed successfully")
    return StepResult.passed([result.command])

  ctx.ui.warning("Full package set failed to install, retrying with the minimal set")
  fallback = ctx.run(*arch.install_base_system(ctx.target, minimal))
  if not fallback.ok:
    return StepResult.failed("Failed to install base system", fallback.command)

  done = [fallback.command]
  remaining = [pkg for pkg in packages if pkg not in minimal]
  if remaining:
    extra = ctx.run(*arch.install_base_system(ctx.target, remaining))
    if extra.ok:
      done.append(extra.command)
    else:
      ctx.ui.warning(f"Could not install additional packages: {' '.join(remaining)}")

  ctx.ui.info("Base system installed with the minimal package set")
  return StepResult.passed(done)


def _drop_fstab_entries(ctx: InstallerContext, fstab: str) -> None:
  """Keep only the comment header of an fstab left behind by an earlier attempt."""
  if ctx.dry or not os.path.exists(fstab):
    return

  with open(fstab, "r") as f:
    lines = f.readlines()

  kept = [line for line in lines if not line.strip() or line.lstrip().startswith("#")]
  if len(kept) == len(lines):
    return

  ctx.ui.warning(f"Removing {len(lines) - len(kept)} existing entries from {fstab}")
  with open(fstab, "w") as f:
    f.writelines(kept)


def step_7_generating_fstab(ctx: InstallerContext) -> StepResult:
  fstab = f"{ctx.target}/etc/fstab"

  ctx.ui.info("Creating filesystem table...")
  _drop_fstab_entries(ctx, fstab)
  result = ctx.run(*arch.generate_fstab(ctx.target), output=fstab)
  if not result.ok:
    return StepResult.failed("Failed to generate fstab", result.command)

  ctx.ui.info("Verifying fstab...")
  if not ctx.dry:
    with open(fstab, "r") as f:
      ctx.ui.print(escape(f.read()))

  ctx.ui.info("fstab generated successfully")
  return StepResult.passed([result.command])


def step_8_chroot_and_configuration(ctx: InstallerContext) -> StepResult:
  ctx.ui.info("Preparing chroot environment and configuring system...")
  script = f"{ctx.target}/{SCRIPT_NAME}"
  generate_chroot(script, ctx)

  result = ctx.run("arch-chroot", ctx.target, f"/{SCRIPT_NAME}")
  if not result.ok:
    return StepResult.failed("Chroot configuration failed", result.command, [f"wrote {script}"])

  if not ctx.dry and os.path.exists(script):
    os.remove(script)

  ctx.ui.info("System configuration completed successfully")
  return StepResult.passed([f"wrote {script}", result.command])


def step_9_finalizing_installation(ctx: InstallerContext) -> StepResult:
  ctx.ui.info("Unmounting partitions...")
  done = [ctx.run("sync").command]

  unmount = ctx.run("umount", "-R", ctx.target)
  if unmount.ok:
    done.append(unmount.command)
  else:
    ctx.ui.warning("Failed to unmount partitions, but installation may still be successful")

  ctx.ui.info("Installation completed successfully!")
  ctx.ui.header("STRIX OS INSTALLATION COMPLETE")
  ctx.ui.info("You can now reboot into Strix OS")
  ctx.ui.info(f"Installation log saved to: {ctx.sink.path}")

  if not ctx.manual:
    ctx.ui.info("Type 'reboot' to start your new Strix OS")
    return StepResult.passed(done)

  if ctx.operator.ask("Would you like to reboot now? (y/n)").strip() == "y":
    ctx.ui.info("Rebooting system...")
    done.append(ctx.run("reboot").command)
  else:
    ctx.ui.info("You can reboot manually when ready by typing 'reboot'")

  return StepResult.passed(done)


INSTALL_STEPS: list[Step] = [
  Step("Setting Up Internet", step_1_setting_up_internet),
  Step("Selecting Disk", step_2_selecting_disk),
  Step("Partitioning Disk", step_3_partitioning_disk),
  Step("Formatting Partitions", step_4_formatting_partitions),
  Step("Mounting Partitions", step_5_mounting_partitions),
  Step("Installing Base System", step_6_installing_base_system),
  Step("Generating fstab", step_7_generating_fstab),
  Step("Chroot and Configuration", step_8_chroot_and_configuration),
  Step("Finalizing Installation", step_9_finalizing_installation),
]


def get_install_steps() -> list[Step]:
  """Get installation steps in execution order."""
  return list(INSTALL_STEPS)
