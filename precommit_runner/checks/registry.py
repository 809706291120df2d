"""Check registry: name -> check instance, built once per process."""

from collections.abc import Iterator

from ..config.models import RunnerConfig
from ..runner_logging import LogCategory, get_category_logger
from .base import Check
from .builtin import EOFCheck, WhitespaceCheck
from .makewrap import FumptCheck, LintCheck, ModTidyCheck

logger = get_category_logger(LogCategory.CHECKS)


def build_checks(config: RunnerConfig) -> list[Check]:
    """Instantiate every known check with its configured timeout.

    The returned order is the reporting order.
    """
    timeouts = config.check_timeouts
    max_file_size = config.max_file_size or RunnerConfig().max_file_size
    return [
        FumptCheck(timeout=timeouts.fumpt, tool_version=config.tool_version("gofumpt")),
        LintCheck(timeout=timeouts.lint, tool_version=config.tool_version("golangci-lint")),
        ModTidyCheck(timeout=timeouts.mod_tidy),
        WhitespaceCheck(timeout=timeouts.whitespace, max_file_size=max_file_size),
        EOFCheck(timeout=timeouts.eof, max_file_size=max_file_size),
    ]


class CheckRegistry:
    """Ordered mapping of check names to check instances.

    Example:
        registry = CheckRegistry.from_config(config)
        for check in registry:
            print(check.name, check.description)
    """

    def __init__(self, checks: list[Check] | None = None):
        self._checks: dict[str, Check] = {}
        for check in checks or []:
            self.register(check)

    @classmethod
    def from_config(cls, config: RunnerConfig) -> "CheckRegistry":
        """Build a registry holding only the checks enabled in ``config``."""
        registry = cls()
        for check in build_checks(config):
            if config.checks.is_enabled(check.name):
                registry.register(check)
            else:
                logger.debug(f"Check {check.name} is disabled in config, skipping")
        return registry

    def register(self, check: Check) -> None:
        """Add a check.

        Raises:
            ValueError: A check with the same name is already registered.
        """
        if check.name in self._checks:
            raise ValueError(f"Check already registered: {check.name}")
        self._checks[check.name] = check
        logger.debug(f"Registered check: {check.name}")

    def get(self, name: str) -> Check | None:
        return self._checks.get(name)

    def names(self) -> list[str]:
        return list(self._checks)

    def __contains__(self, name: object) -> bool:
        return name in self._checks

    def __iter__(self) -> Iterator[Check]:
        return iter(list(self._checks.values()))

    def __len__(self) -> int:
        return len(self._checks)
