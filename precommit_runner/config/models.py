"""Configuration models for the pre-commit runner."""

from typing import Any

from pydantic import BaseModel, Field, validator

LOG_LEVELS = ("debug", "info", "warning", "error")


class ChecksConfig(BaseModel):
    """Per-check enable flags."""

    fumpt: bool = Field(default=True)
    lint: bool = Field(default=True)
    mod_tidy: bool = Field(default=True)
    whitespace: bool = Field(default=True)
    eof: bool = Field(default=True)

    def is_enabled(self, check_name: str) -> bool:
        """Look up a flag by check name ('mod-tidy' maps to ``mod_tidy``)."""
        return bool(getattr(self, check_name.replace("-", "_"), False))


class CheckTimeouts(BaseModel):
    """Per-check timeouts in seconds."""

    fumpt: float = Field(default=30)
    lint: float = Field(default=60)
    mod_tidy: float = Field(default=30)
    whitespace: float = Field(default=30)
    eof: float = Field(default=30)

    @validator("fumpt", "lint", "mod_tidy", "whitespace", "eof")
    def validate_timeout(cls, v: Any) -> float:
        if v <= 0:
            raise ValueError("Timeouts must be positive")
        return v

    def for_check(self, check_name: str) -> float | None:
        return getattr(self, check_name.replace("-", "_"), None)


class RunnerConfig(BaseModel):
    """Global runner configuration with validation."""

    enabled: bool = Field(default=True)
    log_level: str = Field(default="info")

    # Resource limits
    max_file_size: int = Field(default=10 * 1024 * 1024)
    timeout_seconds: float = Field(default=300)
    parallel_workers: int = Field(default=0)  # 0 = one per CPU
    fail_fast: bool = Field(default=False)

    color_output: bool = Field(default=True)
    exclude_patterns: list[str] = Field(
        default_factory=lambda: [
            "vendor/",
            "node_modules/",
            ".git/",
        ]
    )
    hooks_path: str = Field(default="")
    make_command: str = Field(default="make")

    checks: ChecksConfig = Field(default_factory=ChecksConfig)
    check_timeouts: CheckTimeouts = Field(default_factory=CheckTimeouts)
    tool_versions: dict[str, str] = Field(
        default_factory=lambda: {"gofumpt": "latest", "golangci-lint": "latest"}
    )

    @validator("log_level")
    def validate_log_level(cls, v: Any) -> str:
        level = str(v).strip().lower()
        if level not in LOG_LEVELS:
            raise ValueError(f"Log level must be one of: {', '.join(LOG_LEVELS)}")
        return level

    @validator("timeout_seconds")
    def validate_run_timeout(cls, v: Any) -> float:
        if v <= 0:
            raise ValueError("Run timeout must be positive")
        return v

    @validator("max_file_size", "parallel_workers")
    def validate_non_negative(cls, v: Any) -> int:
        if v < 0:
            raise ValueError("Limits cannot be negative")
        return v

    def tool_version(self, tool: str) -> str:
        return self.tool_versions.get(tool, "latest")
