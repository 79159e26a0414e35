"""Runtime configuration for the ECS task runner."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

RETRY_MODES = frozenset({"legacy", "standard", "adaptive"})
LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


@dataclass(slots=True)
class AwsClientSettings:
    """botocore client settings.

    ``None`` values are not passed to botocore, so the SDK defaults apply.
    """

    endpoint_url: str | None = None
    max_attempts: int | None = None
    retry_mode: str | None = None
    connect_timeout_seconds: float = 60.0
    read_timeout_seconds: float = 60.0


@dataclass(slots=True)
class WaiterSettings:
    """Overrides for the ``tasks_stopped`` waiter polling."""

    delay_seconds: int | None = None
    max_attempts: int | None = None

    def to_waiter_config(self) -> dict[str, int]:
        config: dict[str, int] = {}
        if self.delay_seconds is not None:
            config["Delay"] = self.delay_seconds
        if self.max_attempts is not None:
            config["MaxAttempts"] = self.max_attempts
        return config


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    started_by: str = "run-ecs-task"
    log_level: str = "WARNING"
    aws: AwsClientSettings = field(default_factory=AwsClientSettings)
    waiter: WaiterSettings = field(default_factory=WaiterSettings)

    @classmethod
    def from_env(cls) -> Settings:
        """Load settings from environment, falling back to SDK defaults."""

        return cls(
            started_by=os.getenv("RUN_ECS_TASK_STARTED_BY", "run-ecs-task"),
            log_level=os.getenv("RUN_ECS_TASK_LOG_LEVEL", "WARNING").strip().upper(),
            aws=AwsClientSettings(
                endpoint_url=_env_str("RUN_ECS_TASK_ENDPOINT_URL"),
                max_attempts=_env_int("RUN_ECS_TASK_MAX_ATTEMPTS"),
                retry_mode=_env_str("RUN_ECS_TASK_RETRY_MODE"),
                connect_timeout_seconds=_env_float("RUN_ECS_TASK_CONNECT_TIMEOUT_SECONDS", 60.0),
                read_timeout_seconds=_env_float("RUN_ECS_TASK_READ_TIMEOUT_SECONDS", 60.0),
            ),
            waiter=WaiterSettings(
                delay_seconds=_env_int("RUN_ECS_TASK_WAITER_DELAY_SECONDS"),
                max_attempts=_env_int("RUN_ECS_TASK_WAITER_MAX_ATTEMPTS"),
            ),
        )

    def validate(self) -> None:
        """Raise configuration error if any tunable is out of range."""

        if not self.started_by.strip():
            raise ValueError("RUN_ECS_TASK_STARTED_BY must not be empty.")
        if len(self.started_by) > 128:
            raise ValueError("RUN_ECS_TASK_STARTED_BY must be at most 128 characters.")
        if self.log_level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid RUN_ECS_TASK_LOG_LEVEL: {self.log_level!r}. "
                f"Expected one of {', '.join(sorted(LOG_LEVELS))}.",
            )
        if self.aws.max_attempts is not None and self.aws.max_attempts <= 0:
            raise ValueError("RUN_ECS_TASK_MAX_ATTEMPTS must be > 0.")
        if self.aws.retry_mode is not None and self.aws.retry_mode not in RETRY_MODES:
            raise ValueError(
                f"Invalid RUN_ECS_TASK_RETRY_MODE: {self.aws.retry_mode!r}. "
                f"Expected one of {', '.join(sorted(RETRY_MODES))}.",
            )
        if self.aws.connect_timeout_seconds <= 0:
            raise ValueError("RUN_ECS_TASK_CONNECT_TIMEOUT_SECONDS must be > 0.")
        if self.aws.read_timeout_seconds <= 0:
            raise ValueError("RUN_ECS_TASK_READ_TIMEOUT_SECONDS must be > 0.")
        if self.waiter.delay_seconds is not None and self.waiter.delay_seconds <= 0:
            raise ValueError("RUN_ECS_TASK_WAITER_DELAY_SECONDS must be > 0.")
        if self.waiter.max_attempts is not None and self.waiter.max_attempts <= 0:
            raise ValueError("RUN_ECS_TASK_WAITER_MAX_ATTEMPTS must be > 0.")


def _env_str(name: str) -> str | None:
    value = os.getenv(name, "").strip()
    return value or None


def _env_int(name: str) -> int | None:
    raw = _env_str(name)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError as error:
        raise ValueError(f"Invalid integer value for {name}: {raw!r}") from error


def _env_float(name: str, default: float) -> float:
    raw = _env_str(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError as error:
        raise ValueError(f"Invalid number value for {name}: {raw!r}") from error
