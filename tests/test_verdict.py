from __future__ import annotations

import allure

from run_ecs_task.models import (
    ContainerResult,
    DescribeTasksResult,
    LaunchFailure,
    TaskDescription,
)
from run_ecs_task.verdict import (
    FAILURE_MESSAGE,
    SUCCESS_MESSAGE,
    describe_verdict,
    reduce_task_results,
)

pytestmark = [
    allure.epic("Task Run"),
    allure.feature("Result Reducer"),
]


def _task(arn: str, *exit_codes: int | None) -> TaskDescription:
    return TaskDescription(
        task_arn=arn,
        last_status="STOPPED",
        stopped_reason=None,
        containers=tuple(
            ContainerResult(task_arn=arn, name=f"c{index}", exit_code=code)
            for index, code in enumerate(exit_codes)
        ),
    )


def test_all_zero_exit_codes_succeed() -> None:
    verdict = reduce_task_results(
        DescribeTasksResult(tasks=(_task("arn:1", 0, 0), _task("arn:2", 0))),
    )

    assert verdict.success is True
    assert len(verdict.containers) == 3
    assert verdict.failed_containers == ()
    assert describe_verdict(verdict)[-1] == SUCCESS_MESSAGE


def test_single_non_zero_exit_code_fails() -> None:
    verdict = reduce_task_results(
        DescribeTasksResult(tasks=(_task("arn:1", 0, 0, 0), _task("arn:2", 0, 1))),
    )

    assert verdict.success is False
    assert [container.exit_code for container in verdict.failed_containers] == [1]
    assert describe_verdict(verdict)[-1] == FAILURE_MESSAGE


def test_negative_exit_code_fails() -> None:
    verdict = reduce_task_results(DescribeTasksResult(tasks=(_task("arn:1", -1),)))

    assert verdict.success is False


def test_absent_exit_code_fails() -> None:
    verdict = reduce_task_results(DescribeTasksResult(tasks=(_task("arn:1", 0, None),)))

    assert verdict.success is False
    assert "exit_code=null" in describe_verdict(verdict)[1]


def test_no_containers_fails() -> None:
    verdict = reduce_task_results(DescribeTasksResult(tasks=(_task("arn:1"),)))

    assert verdict.success is False


def test_describe_failure_fails_even_if_other_tasks_succeeded() -> None:
    verdict = reduce_task_results(
        DescribeTasksResult(
            tasks=(_task("arn:1", 0),),
            failures=(LaunchFailure(arn="arn:2", reason="MISSING"),),
        ),
    )

    assert verdict.success is False
    lines = describe_verdict(verdict)
    assert "Task not described: arn=arn:2 reason=MISSING" in lines
    assert lines[-1] == FAILURE_MESSAGE


def test_describe_verdict_lists_each_container() -> None:
    verdict = reduce_task_results(
        DescribeTasksResult(
            tasks=(
                TaskDescription(
                    task_arn="arn:1",
                    last_status="STOPPED",
                    stopped_reason=None,
                    containers=(
                        ContainerResult(
                            task_arn="arn:1",
                            name="app",
                            exit_code=2,
                            reason="boom",
                        ),
                    ),
                ),
            ),
        ),
    )

    assert describe_verdict(verdict) == [
        "container=app task=arn:1 exit_code=2 reason=boom",
        FAILURE_MESSAGE,
    ]
