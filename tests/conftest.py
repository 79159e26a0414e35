"""Shared test fixtures."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any

import pytest

from run_ecs_task.logging_config import LOG_FORMAT

TASK_ARN = "arn:aws:ecs:us-east-1:123456789012:task/demo-cluster/0123456789abcdef"


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Drop RUN_ECS_TASK_* overrides and use dummy AWS credentials."""
    for name in list(os.environ):
        if name.startswith("RUN_ECS_TASK_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.delenv("AWS_PROFILE", raising=False)


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """Drop the stderr handler the CLI installs so it never outlives a test."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler.formatter is not None and handler.formatter._fmt == LOG_FORMAT:
            root.removeHandler(handler)
    root.setLevel(level)


class _FakeWaiter:
    def __init__(self, owner: FakeEcsClient) -> None:
        self._owner = owner

    def wait(self, **kwargs: Any) -> None:
        self._owner.calls.append(("wait", kwargs))
        if self._owner.wait_error is not None:
            raise self._owner.wait_error


@dataclass
class FakeEcsClient:
    """Stand-in for a boto3 ECS client recording every call."""

    task_arns: list[str] = field(default_factory=lambda: [TASK_ARN])
    run_failures: list[dict[str, Any]] = field(default_factory=list)
    containers: list[dict[str, Any]] = field(
        default_factory=lambda: [{"name": "app", "exitCode": 0}],
    )
    describe_failures: list[dict[str, Any]] = field(default_factory=list)
    run_error: Exception | None = None
    wait_error: Exception | None = None
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    created_for: list[tuple[str, Any]] = field(default_factory=list)

    def run_task(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("run_task", kwargs))
        if self.run_error is not None:
            raise self.run_error
        return {
            "tasks": [{"taskArn": arn} for arn in self.task_arns],
            "failures": self.run_failures,
        }

    def get_waiter(self, name: str) -> _FakeWaiter:
        assert name == "tasks_stopped"
        return _FakeWaiter(self)

    def describe_tasks(self, **kwargs: Any) -> dict[str, Any]:
        self.calls.append(("describe_tasks", kwargs))
        return {
            "tasks": [
                {"taskArn": arn, "lastStatus": "STOPPED", "containers": self.containers}
                for arn in kwargs["tasks"]
            ],
            "failures": self.describe_failures,
        }

    @property
    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


@pytest.fixture()
def fake_ecs(monkeypatch) -> FakeEcsClient:
    """Route the controller's boto3 client creation to an in-memory fake."""
    fake = FakeEcsClient()

    def _create(region, settings=None):
        fake.created_for.append((region, settings))
        return fake

    monkeypatch.setattr("run_ecs_task.controllers.create_ecs_client", _create)
    return fake

