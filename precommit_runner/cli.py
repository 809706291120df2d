"""Click-based command line for the pre-commit runner."""

import sys
from pathlib import Path

import click

from . import __version__
from .checks.registry import build_checks
from .config import RunnerConfig, load_config
from .errors import ChecksFailedError, PreCommitError, handle_exception
from .git.hooks import SUPPORTED_HOOK_TYPES, HookInstaller
from .git.repository import Repository, find_repository_root
from .output import OutputConfig, OutputManager, format_file_list
from .runner import ProgressCallback, RunOptions, Runner
from .runner_logging import get_logger, setup_logging


def _split_list(value: str | None) -> list[str]:
    """Parse a comma-separated option value."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _fail(ctx: click.Context, error: Exception) -> None:
    """Print a formatted error and exit with its exit code."""
    obj = ctx.obj or {}
    message, exit_code = handle_exception(
        error,
        use_color=obj.get("use_color", False),
        verbose=obj.get("verbose", False),
    )
    click.echo(message, err=True)
    sys.exit(exit_code)


def _load_config(ctx: click.Context) -> RunnerConfig:
    config = load_config(Path.cwd())
    obj = ctx.obj
    setup_logging(
        level="WARNING",
        quiet=obj["quiet"],
        verbose=obj["verbose"],
        log_file=obj["log_file"],
        log_format=obj["log_format"],
        file_level=config.log_level,
    )
    output_config = OutputConfig.from_flags(
        verbose=obj["verbose"],
        quiet=obj["quiet"],
        no_color=not obj["use_color"],
        color_output=config.color_output,
    )
    obj["use_color"] = output_config.use_color
    obj["output"] = OutputManager(output_config)
    return config


def _hook_installer(config: RunnerConfig) -> HookInstaller:
    repository = Repository(find_repository_root())
    if config.hooks_path:
        hooks_dir = Path(config.hooks_path)
        if not hooks_dir.is_absolute():
            hooks_dir = repository.root / hooks_dir
    else:
        hooks_dir = repository.get_hooks_dir()
    return HookInstaller(hooks_dir)


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Show durations, files and tool output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write logs to this file",
)
@click.option(
    "--log-format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Log file format",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    log_file: Path | None,
    log_format: str,
) -> None:
    """Local pre-commit quality gate.

    Runs formatting, linting and tidiness checks on changed files,
    preferring the project's make targets over invoking tools directly.
    """
    ctx.ensure_object(dict)
    setup_logging(level="WARNING", quiet=quiet, verbose=verbose)
    ctx.obj.update(
        verbose=verbose,
        quiet=quiet,
        use_color=not no_color,
        log_file=log_file,
        log_format=log_format,
    )


@cli.command()
@click.argument("check", required=False)
@click.option("--all-files", "-a", is_flag=True, help="Run on all tracked files")
@click.option("--files", "-f", help="Comma-separated files to check")
@click.option("--skip", help="Comma-separated checks to skip")
@click.option("--only", help="Comma-separated checks to run exclusively")
@click.option(
    "--parallel",
    "-p",
    type=click.IntRange(min=0),
    default=None,
    help="Number of parallel workers (0 = one per CPU)",
)
@click.option(
    "--fail-fast/--no-fail-fast",
    default=None,
    help="Stop at the first failing check (default from configuration)",
)
@click.option("--graceful", is_flag=True, help="Skip checks whose tools are missing instead of failing")
@click.option("--show-checks", is_flag=True, help="List available checks and exit")
@click.option("--progress/--no-progress", default=True, help="Show per-check progress")
@click.pass_context
def run(
    ctx: click.Context,
    check: str | None,
    all_files: bool,
    files: str | None,
    skip: str | None,
    only: str | None,
    parallel: int | None,
    fail_fast: bool | None,
    graceful: bool,
    show_checks: bool,
    progress: bool,
) -> None:
    """Run pre-commit checks.

    By default the staged files are checked. Pass CHECK to run a single
    check.

    Examples:
        precommit-runner run
        precommit-runner run --all-files
        precommit-runner run lint
        precommit-runner run --skip lint,fumpt
        precommit-runner run --only whitespace,eof
    """
    try:
        config = _load_config(ctx)
        output: OutputManager = ctx.obj["output"]

        if not config.enabled:
            output.warning(
                "Pre-commit system is disabled in configuration "
                "(ENABLE_PRE_COMMIT_SYSTEM=false)"
            )
            return

        repo_root = find_repository_root()

        if show_checks:
            _show_checks(output, config)
            return

        repository = Repository(repo_root)
        if files:
            files_to_check = _split_list(files)
        elif all_files:
            files_to_check = repository.get_all_files()
        else:
            files_to_check = repository.get_staged_files()

        if not files_to_check:
            output.info("No files to check")
            return

        options = RunOptions(
            files=files_to_check,
            only_checks=[check] if check else _split_list(only),
            skip_checks=[] if check else _split_list(skip),
            parallel=parallel,
            fail_fast=fail_fast,
            graceful_degradation=graceful,
            progress_callback=_progress_printer(output) if progress else None,
        )

        output.debug(f"Running checks on {format_file_list(files_to_check)}")
        if graceful:
            output.debug("Graceful degradation enabled - missing tools will be skipped")

        results = Runner(config, repo_root).run(options)
        output.newline()
        output.run_results(results)
        results.raise_for_failures()

        if results.passed > 0:
            output.success("All checks passed!")
    except ChecksFailedError as e:
        get_logger().debug(f"Failed checks: {', '.join(e.failed_checks)}")
        click.echo(e.format(use_color=ctx.obj.get("use_color", False)), err=True)
        sys.exit(e.exit_code)
    except PreCommitError as e:
        _fail(ctx, e)


def _progress_printer(output: OutputManager) -> ProgressCallback:
    def report(check_name: str, status: str) -> None:
        if status == "running":
            output.progress(f"Running {check_name} check...")

    return report


def _show_checks(output: OutputManager, config: RunnerConfig) -> None:
    output.header("Available Checks")
    for check in build_checks(config):
        line = f"{check.name:<12} {check.description}"
        if config.checks.is_enabled(check.name):
            output.success(line)
        else:
            output.detail(f"{line} (disabled)")


@cli.command("checks")
@click.pass_context
def list_checks(ctx: click.Context) -> None:
    """List registered checks and whether they are enabled."""
    try:
        config = _load_config(ctx)
        _show_checks(ctx.obj["output"], config)
    except PreCommitError as e:
        _fail(ctx, e)


@cli.command()
@click.option(
    "--hook-type",
    type=click.Choice(SUPPORTED_HOOK_TYPES),
    default="pre-commit",
    show_default=True,
    help="Git hook to install",
)
@click.option("--force", is_flag=True, help="Overwrite an existing hook not managed by this tool")
@click.pass_context
def install(ctx: click.Context, hook_type: str, force: bool) -> None:
    """Install the git hook that runs the checks."""
    try:
        config = _load_config(ctx)
        output: OutputManager = ctx.obj["output"]
        installer = _hook_installer(config)

        if installer.install(hook_type, force=force):
            output.success(f"Installed {hook_type} hook at {installer.hook_path(hook_type)}")
        else:
            output.info(f"{hook_type} hook is already installed")
    except PreCommitError as e:
        _fail(ctx, e)


@cli.command()
@click.option(
    "--hook-type",
    type=click.Choice(SUPPORTED_HOOK_TYPES),
    default="pre-commit",
    show_default=True,
    help="Git hook to remove",
)
@click.pass_context
def uninstall(ctx: click.Context, hook_type: str) -> None:
    """Remove the git hook if it is managed by this tool."""
    try:
        config = _load_config(ctx)
        output: OutputManager = ctx.obj["output"]
        installer = _hook_installer(config)
        status = installer.get_status(hook_type)

        if installer.uninstall(hook_type):
            output.success(f"Removed {hook_type} hook")
        elif status.foreign:
            output.warning(
                f"{hook_type} hook at {status.path} is not managed by precommit-runner; left in place"
            )
        else:
            output.info(f"No {hook_type} hook installed")
    except PreCommitError as e:
        _fail(ctx, e)


@cli.command()
@click.option(
    "--hook-type",
    type=click.Choice(SUPPORTED_HOOK_TYPES),
    default="pre-commit",
    show_default=True,
    help="Git hook to inspect",
)
@click.pass_context
def status(ctx: click.Context, hook_type: str) -> None:
    """Show the state of the git hook."""
    try:
        config = _load_config(ctx)
        output: OutputManager = ctx.obj["output"]
        hook = _hook_installer(config).get_status(hook_type)

        output.status_line("Hook", str(hook.path))
        if hook.installed:
            output.status_line("Installed", "yes", "success")
            output.status_line(
                "Executable",
                "yes" if hook.executable else "no",
                "success" if hook.executable else "error",
            )
        elif hook.foreign:
            output.status_line("Installed", "foreign hook present", "warning")
        else:
            output.status_line("Installed", "no", "skip")
    except PreCommitError as e:
        _fail(ctx, e)


def main() -> None:
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
