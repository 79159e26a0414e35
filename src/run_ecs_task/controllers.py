"""Controller for the run-task CLI command."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from run_ecs_task.config import Settings
from run_ecs_task.ecs import EcsTaskClient, create_ecs_client
from run_ecs_task.logging_config import configure_logging
from run_ecs_task.models import (
    CapacityProviderStrategyItem,
    LaunchType,
    TaskRunRequest,
    Verdict,
    build_network_configuration,
)
from run_ecs_task.verdict import describe_verdict, reduce_task_results

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RunTaskCommand:
    """CLI inputs for the run-task command."""

    cluster: str
    task_definition: str
    container_name: str
    command: tuple[str, ...]
    region: str
    launch_type: str | None = None
    capacity_provider_strategy: tuple[CapacityProviderStrategyItem, ...] = ()
    subnets: tuple[str, ...] = ()
    security_groups: tuple[str, ...] = ()
    assign_public_ip: bool | None = None


@dataclass(slots=True)
class RunTaskResult:
    """Final outcome of one task run."""

    success: bool
    task_arns: tuple[str, ...]
    verdict: Verdict


class RunTaskController:
    """Coordinates launch, wait, describe and report for one task."""

    def build_request(self, command: RunTaskCommand, settings: Settings) -> TaskRunRequest:
        return TaskRunRequest(
            cluster=command.cluster,
            task_definition=command.task_definition,
            container_name=command.container_name,
            command=command.command,
            region=command.region,
            launch_type=LaunchType(command.launch_type.upper()) if command.launch_type else None,
            capacity_provider_strategy=command.capacity_provider_strategy,
            network=build_network_configuration(
                command.subnets,
                command.security_groups,
                command.assign_public_ip,
            ),
            started_by=settings.started_by,
        )

    def run(self, command: RunTaskCommand, emit: Callable[[str], None]) -> RunTaskResult:
        """Run the task end to end, emitting output lines as each step completes.

        Raises ``ValueError`` for invalid settings/inputs and
        ``run_ecs_task.ecs.EcsApiError`` for any API failure.
        """

        settings = Settings.from_env()
        settings.validate()
        configure_logging(settings.log_level)
        request = self.build_request(command, settings)

        client = EcsTaskClient(create_ecs_client(request.region, settings.aws))
        launched = client.run_task(request)
        for task_arn in launched.task_arns:
            emit(task_arn)

        client.wait_until_stopped(request.cluster, launched.task_arns, settings.waiter)
        described = client.describe_tasks(request.cluster, launched.task_arns)

        verdict = reduce_task_results(described)
        for line in describe_verdict(verdict):
            emit(line)
        if not verdict.success:
            logger.info(
                "Task run failed: %d of %d container(s) did not exit 0",
                len(verdict.failed_containers),
                len(verdict.containers),
            )
        return RunTaskResult(
            success=verdict.success,
            task_arns=launched.task_arns,
            verdict=verdict,
        )
