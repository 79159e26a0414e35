"""Request and response models for one ECS task run."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

logger = logging.getLogger(__name__)

MAX_CAPACITY_PROVIDER_WEIGHT = 1_000
MAX_CAPACITY_PROVIDER_BASE = 100_000


class LaunchType(str, Enum):
    """Capacity the task is scheduled on when no capacity provider is given."""

    EC2 = "EC2"
    FARGATE = "FARGATE"


@dataclass(frozen=True, slots=True)
class CapacityProviderStrategyItem:
    """One entry of a capacity provider strategy."""

    capacity_provider: str
    weight: int | None = None
    base: int | None = None

    def to_api(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"capacityProvider": self.capacity_provider}
        if self.weight is not None:
            payload["weight"] = self.weight
        if self.base is not None:
            payload["base"] = self.base
        return payload


@dataclass(frozen=True, slots=True)
class NetworkConfiguration:
    """awsvpc network clause; only built when subnets and security groups are both set."""

    subnets: tuple[str, ...]
    security_groups: tuple[str, ...]
    assign_public_ip: bool | None = None

    def to_api(self) -> dict[str, Any]:
        awsvpc: dict[str, Any] = {
            "subnets": list(self.subnets),
            "securityGroups": list(self.security_groups),
        }
        if self.assign_public_ip is not None:
            awsvpc["assignPublicIp"] = "ENABLED" if self.assign_public_ip else "DISABLED"
        return {"awsvpcConfiguration": awsvpc}


@dataclass(frozen=True, slots=True)
class TaskRunRequest:
    """Immutable description of a single RunTask call.

    Exactly one launch strategy must be set: either ``launch_type`` or a
    non-empty ``capacity_provider_strategy``.
    """

    cluster: str
    task_definition: str
    container_name: str
    command: tuple[str, ...]
    region: str
    launch_type: LaunchType | None = None
    capacity_provider_strategy: tuple[CapacityProviderStrategyItem, ...] = ()
    network: NetworkConfiguration | None = None
    started_by: str | None = None

    def __post_init__(self) -> None:
        if self.launch_type is not None and self.capacity_provider_strategy:
            raise ValueError("Launch type and capacity provider strategy are mutually exclusive.")
        if self.launch_type is None and not self.capacity_provider_strategy:
            raise ValueError("Either a launch type or a capacity provider strategy is required.")
        for name in ("cluster", "task_definition", "container_name", "region"):
            if not getattr(self, name).strip():
                raise ValueError(f"{name.replace('_', ' ').capitalize()} must not be empty.")
        if not self.command:
            raise ValueError("Command must contain at least one token.")

    def to_run_task_kwargs(self) -> dict[str, Any]:
        """Build keyword arguments for ``ecs_client.run_task``."""

        kwargs: dict[str, Any] = {
            "cluster": self.cluster,
            "taskDefinition": self.task_definition,
            "overrides": {
                "containerOverrides": [
                    {"name": self.container_name, "command": list(self.command)},
                ],
            },
        }
        if self.launch_type is not None:
            kwargs["launchType"] = self.launch_type.value
        else:
            kwargs["capacityProviderStrategy"] = [
                item.to_api() for item in self.capacity_provider_strategy
            ]
        if self.network is not None:
            kwargs["networkConfiguration"] = self.network.to_api()
        if self.started_by:
            kwargs["startedBy"] = self.started_by
        return kwargs


@dataclass(frozen=True, slots=True)
class LaunchFailure:
    """One entry of the ``failures`` list returned by RunTask/DescribeTasks."""

    arn: str | None
    reason: str | None
    detail: str | None = None

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> LaunchFailure:
        return cls(
            arn=payload.get("arn"),
            reason=payload.get("reason"),
            detail=payload.get("detail"),
        )

    def describe(self) -> str:
        parts = [f"arn={self.arn or '-'}", f"reason={self.reason or '-'}"]
        if self.detail:
            parts.append(f"detail={self.detail}")
        return " ".join(parts)


@dataclass(frozen=True, slots=True)
class TaskRunResult:
    """Outcome of the RunTask call."""

    task_arns: tuple[str, ...]
    failures: tuple[LaunchFailure, ...] = ()


@dataclass(frozen=True, slots=True)
class ContainerResult:
    """Exit status of one container; ``exit_code`` is None if it never ran."""

    task_arn: str
    name: str
    exit_code: int | None
    reason: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.exit_code is not None and self.exit_code == 0


@dataclass(frozen=True, slots=True)
class TaskDescription:
    """Stopped task as reported by DescribeTasks."""

    task_arn: str
    last_status: str | None
    stopped_reason: str | None
    containers: tuple[ContainerResult, ...]

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> TaskDescription:
        task_arn = payload.get("taskArn", "")
        return cls(
            task_arn=task_arn,
            last_status=payload.get("lastStatus"),
            stopped_reason=payload.get("stoppedReason"),
            containers=tuple(
                ContainerResult(
                    task_arn=task_arn,
                    name=container.get("name", ""),
                    exit_code=_optional_int(container.get("exitCode")),
                    reason=container.get("reason"),
                )
                for container in payload.get("containers", [])
            ),
        )


@dataclass(frozen=True, slots=True)
class DescribeTasksResult:
    """Outcome of the DescribeTasks call."""

    tasks: tuple[TaskDescription, ...]
    failures: tuple[LaunchFailure, ...] = ()


@dataclass(frozen=True, slots=True)
class Verdict:
    """Reduced pass/fail decision over every collected container."""

    success: bool
    containers: tuple[ContainerResult, ...]
    failed_containers: tuple[ContainerResult, ...]
    missing: tuple[LaunchFailure, ...] = ()


def split_tokens(value: str) -> tuple[str, ...]:
    """Split a comma-separated CLI value, keeping order and every token as-is."""

    return tuple(value.split(","))


def parse_capacity_provider_strategy(raw: str) -> tuple[CapacityProviderStrategyItem, ...]:
    """Parse the ``--capacity-provider`` JSON array into strategy items."""

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as error:
        raise ValueError(f"Capacity provider strategy is not valid JSON: {error.msg}") from error
    if not isinstance(payload, list) or not payload:
        raise ValueError("Capacity provider strategy must be a non-empty JSON array.")

    items: list[CapacityProviderStrategyItem] = []
    for index, entry in enumerate(payload):
        if not isinstance(entry, dict):
            raise ValueError(f"Capacity provider strategy item #{index} must be an object.")
        unknown = set(entry) - {"capacityProvider", "weight", "base"}
        if unknown:
            raise ValueError(
                f"Capacity provider strategy item #{index} has unknown keys: "
                f"{', '.join(sorted(unknown))}",
            )
        provider = entry.get("capacityProvider")
        if not isinstance(provider, str) or not provider.strip():
            raise ValueError(
                f"Capacity provider strategy item #{index} requires a 'capacityProvider' string.",
            )
        items.append(
            CapacityProviderStrategyItem(
                capacity_provider=provider,
                weight=_bounded_int(entry, "weight", index, MAX_CAPACITY_PROVIDER_WEIGHT),
                base=_bounded_int(entry, "base", index, MAX_CAPACITY_PROVIDER_BASE),
            ),
        )
    return tuple(items)


def build_network_configuration(
    subnets: tuple[str, ...],
    security_groups: tuple[str, ...],
    assign_public_ip: bool | None = None,
) -> NetworkConfiguration | None:
    """Return a network clause only when both subnets and security groups are given."""

    if subnets and security_groups:
        return NetworkConfiguration(
            subnets=subnets,
            security_groups=security_groups,
            assign_public_ip=assign_public_ip,
        )
    if subnets or security_groups:
        logger.warning(
            "Network configuration skipped: both --subnets and --security-groups are required",
        )
    return None


def _bounded_int(entry: dict[str, Any], key: str, index: int, maximum: int) -> int | None:
    value = entry.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"Capacity provider strategy item #{index} '{key}' must be an integer.")
    if not 0 <= value <= maximum:
        raise ValueError(
            f"Capacity provider strategy item #{index} '{key}' must be between 0 and {maximum}.",
        )
    return value


def _optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
