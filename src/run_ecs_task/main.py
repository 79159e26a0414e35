"""CLI entrypoint for run-ecs-task."""

from __future__ import annotations

import rich_click as click

from run_ecs_task import __version__
from run_ecs_task.controllers import RunTaskCommand, RunTaskController
from run_ecs_task.ecs import EcsApiError
from run_ecs_task.models import (
    CapacityProviderStrategyItem,
    LaunchType,
    parse_capacity_provider_strategy,
    split_tokens,
)

click.rich_click.USE_MARKDOWN = True
RUN_TASK_CONTROLLER = RunTaskController()


def _split_csv(
    _ctx: click.Context,
    _param: click.Parameter,
    value: str | None,
) -> tuple[str, ...]:
    if value is None:
        return ()
    return split_tokens(value)


def _parse_capacity_provider(
    _ctx: click.Context,
    _param: click.Parameter,
    value: str | None,
) -> tuple[CapacityProviderStrategyItem, ...]:
    if value is None:
        return ()
    try:
        return parse_capacity_provider_strategy(value)
    except ValueError as error:
        raise click.BadParameter(str(error)) from error


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-v", "--version", prog_name="run-ecs-task")
@click.option("-c", "--cluster", required=True, help="ECS cluster name or ARN.")
@click.option(
    "-d",
    "--task-definition",
    required=True,
    help="Task definition family, family:revision, or ARN.",
)
@click.option(
    "-m",
    "--command",
    "command_tokens",
    required=True,
    callback=_split_csv,
    help="Comma-separated command override, for example `sh,-c,exit 0`.",
)
@click.option(
    "-n",
    "--container-name",
    required=True,
    help="Container in the task definition whose command is overridden.",
)
@click.option("-r", "--region", required=True, help="AWS region, for example us-east-1.")
@click.option(
    "-l",
    "--launch-type",
    type=click.Choice([launch_type.value for launch_type in LaunchType], case_sensitive=False),
    default=None,
    help="Launch type. Mutually exclusive with --capacity-provider.",
)
@click.option(
    "--capacity-provider",
    "capacity_provider_strategy",
    default=None,
    callback=_parse_capacity_provider,
    help=(
        "Capacity provider strategy as a JSON array, for example "
        '`[{"capacityProvider": "FARGATE_SPOT", "weight": 1}]`. '
        "Mutually exclusive with --launch-type."
    ),
)
@click.option(
    "--subnets",
    default=None,
    callback=_split_csv,
    help="Comma-separated subnet ids. Requires --security-groups.",
)
@click.option(
    "--security-groups",
    default=None,
    callback=_split_csv,
    help="Comma-separated security group ids. Requires --subnets.",
)
@click.option(
    "--assign-public-ip/--no-assign-public-ip",
    default=None,
    help="Set assignPublicIp in the network configuration (awsvpc only).",
)
@click.pass_context
def run_ecs_task(  # noqa: PLR0913
    ctx: click.Context,
    cluster: str,
    task_definition: str,
    command_tokens: tuple[str, ...],
    container_name: str,
    region: str,
    launch_type: str | None,
    capacity_provider_strategy: tuple[CapacityProviderStrategyItem, ...],
    subnets: tuple[str, ...],
    security_groups: tuple[str, ...],
    assign_public_ip: bool | None,
) -> None:
    """Run a one-off ECS task, wait for it to stop and exit with its status.

    Exits 0 when every container exited 0, 1 otherwise.
    """

    if launch_type is not None and capacity_provider_strategy:
        raise click.UsageError("--launch-type and --capacity-provider are mutually exclusive.")
    if launch_type is None and not capacity_provider_strategy:
        raise click.UsageError("One of --launch-type or --capacity-provider is required.")

    command = RunTaskCommand(
        cluster=cluster,
        task_definition=task_definition,
        container_name=container_name,
        command=command_tokens,
        region=region,
        launch_type=launch_type,
        capacity_provider_strategy=capacity_provider_strategy,
        subnets=subnets,
        security_groups=security_groups,
        assign_public_ip=assign_public_ip,
    )
    try:
        result = RUN_TASK_CONTROLLER.run(command, emit=click.echo)
    except ValueError as error:
        raise click.UsageError(str(error)) from error
    except EcsApiError as error:
        raise click.ClickException(str(error)) from error

    if not result.success:
        ctx.exit(1)


if __name__ == "__main__":  # pragma: no cover
    run_ecs_task()
