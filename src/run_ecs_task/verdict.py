"""Reduce container exit codes into a single pass/fail verdict."""

from __future__ import annotations

from run_ecs_task.models import ContainerResult, DescribeTasksResult, Verdict

SUCCESS_MESSAGE = "Task executed successfully!"
FAILURE_MESSAGE = "Task FAILED!"


def reduce_task_results(result: DescribeTasksResult) -> Verdict:
    """Succeed only if every collected container exited with integer code 0.

    A container without an exit code never ran and counts as a failure, as
    does a task ECS could not describe or a run with no containers at all.
    """

    containers = tuple(
        container for task in result.tasks for container in task.containers
    )
    failed = tuple(container for container in containers if not container.succeeded)
    success = bool(containers) and not failed and not result.failures
    return Verdict(
        success=success,
        containers=containers,
        failed_containers=failed,
        missing=result.failures,
    )


def describe_verdict(verdict: Verdict) -> list[str]:
    """Render per-container lines followed by the summary line."""

    lines = [_container_line(container) for container in verdict.containers]
    lines.extend(f"Task not described: {failure.describe()}" for failure in verdict.missing)
    lines.append(SUCCESS_MESSAGE if verdict.success else FAILURE_MESSAGE)
    return lines


def _container_line(container: ContainerResult) -> str:
    exit_code = "null" if container.exit_code is None else str(container.exit_code)
    return (
        f"container={container.name} task={container.task_arn} "
        f"exit_code={exit_code} reason={container.reason or '-'}"
    )
