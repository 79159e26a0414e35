"""Thin boto3 wrapper around the ECS task API."""

from __future__ import annotations

import logging
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError, WaiterError

from run_ecs_task.config import AwsClientSettings, WaiterSettings
from run_ecs_task.models import (
    DescribeTasksResult,
    LaunchFailure,
    TaskDescription,
    TaskRunRequest,
    TaskRunResult,
)

logger = logging.getLogger(__name__)


class EcsApiError(RuntimeError):
    """Any failure talking to the ECS API; terminal for the run."""


def create_ecs_client(region: str, settings: AwsClientSettings | None = None) -> Any:
    """Create a boto3 ECS client for ``region`` honoring optional retry/timeout overrides."""

    settings = settings or AwsClientSettings()
    retries: dict[str, Any] = {}
    if settings.max_attempts is not None:
        retries["max_attempts"] = settings.max_attempts
    if settings.retry_mode is not None:
        retries["mode"] = settings.retry_mode
    config = Config(
        connect_timeout=settings.connect_timeout_seconds,
        read_timeout=settings.read_timeout_seconds,
        retries=retries or None,
    )
    return boto3.client(
        "ecs",
        region_name=region,
        endpoint_url=settings.endpoint_url,
        config=config,
    )


class EcsTaskClient:
    """Issues the three ECS calls a task run needs."""

    def __init__(self, client: Any) -> None:
        self._client = client

    def run_task(self, request: TaskRunRequest) -> TaskRunResult:
        """Launch the task and return its ARNs; raise if nothing was launched."""

        logger.info(
            "RunTask cluster=%s task_definition=%s container=%s strategy=%s network=%s",
            request.cluster,
            request.task_definition,
            request.container_name,
            request.launch_type.value if request.launch_type is not None else "capacity-provider",
            "yes" if request.network is not None else "no",
        )
        try:
            response = self._client.run_task(**request.to_run_task_kwargs())
        except (ClientError, BotoCoreError) as error:
            logger.error("RunTask failed: %s", error)
            raise EcsApiError(f"RunTask failed: {error}") from error

        task_arns = tuple(task["taskArn"] for task in response.get("tasks", []))
        failures = tuple(LaunchFailure.from_api(item) for item in response.get("failures", []))
        if not task_arns:
            details = "; ".join(failure.describe() for failure in failures) or "no tasks returned"
            raise EcsApiError(f"RunTask launched no tasks: {details}")
        for failure in failures:
            logger.warning("RunTask partial failure: %s", failure.describe())
        logger.info("Launched %d task(s): %s", len(task_arns), ", ".join(task_arns))
        return TaskRunResult(task_arns=task_arns, failures=failures)

    def wait_until_stopped(
        self,
        cluster: str,
        task_arns: tuple[str, ...],
        waiter_settings: WaiterSettings | None = None,
    ) -> None:
        """Block until ECS reports every task as STOPPED."""

        waiter_config = waiter_settings.to_waiter_config() if waiter_settings else {}
        kwargs: dict[str, Any] = {"cluster": cluster, "tasks": list(task_arns)}
        if waiter_config:
            kwargs["WaiterConfig"] = waiter_config

        logger.info("Waiting for %d task(s) to stop", len(task_arns))
        try:
            self._client.get_waiter("tasks_stopped").wait(**kwargs)
        except (WaiterError, ClientError, BotoCoreError) as error:
            logger.error("Waiting for tasks failed: %s", error)
            raise EcsApiError(f"Waiting for tasks to stop failed: {error}") from error
        logger.info("All tasks stopped")

    def describe_tasks(self, cluster: str, task_arns: tuple[str, ...]) -> DescribeTasksResult:
        """Fetch stopped tasks with per-container exit codes."""

        try:
            response = self._client.describe_tasks(cluster=cluster, tasks=list(task_arns))
        except (ClientError, BotoCoreError) as error:
            logger.error("DescribeTasks failed: %s", error)
            raise EcsApiError(f"DescribeTasks failed: {error}") from error

        failures = tuple(LaunchFailure.from_api(item) for item in response.get("failures", []))
        for failure in failures:
            logger.warning("DescribeTasks failure: %s", failure.describe())
        return DescribeTasksResult(
            tasks=tuple(TaskDescription.from_api(task) for task in response.get("tasks", [])),
            failures=failures,
        )
