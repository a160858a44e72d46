"""Schema of the LoadTest custom resource and its serialisation."""

from __future__ import annotations

import copy
import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class GroupVersion:
    """An API group together with its version."""

    group: str
    version: str

    @property
    def api_version(self) -> str:
        """The value used in the ``apiVersion`` field of resources."""
        return f"{self.group}/{self.version}" if self.group else self.version

    def __str__(self) -> str:
        return self.api_version


GROUP_VERSION = GroupVersion(group="e2etest.grpc.io", version="v1")
"""Group and version of every resource defined here."""

LOAD_TEST_KIND = "LoadTest"
LOAD_TEST_LIST_KIND = "LoadTestList"

# Reason strings reported in a load test's status.
INIT_CONTAINER_ERROR = "InitContainerError"
CONTAINER_ERROR = "ContainerError"
FAILED_SETTING_DEFAULTS_ERROR = "FailedSettingDefaults"
CONFIGURATION_ERROR = "ConfigurationError"
PODS_MISSING = "PodsMissing"
POOL_ERROR = "PoolError"
TIMEOUT_ERRORED = "TimeoutErrored"
KUBERNETES_ERROR = "KubernetesError"


def _strings(value: Any) -> list[str]:
    return [str(item) for item in value or []]


def _put(out: dict[str, Any], key: str, value: Any) -> None:
    """Store ``value`` unless it is empty, like an omitempty field."""
    if value is None or value == "" or value == [] or value == {}:
        return
    out[key] = value


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _format_time(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


@dataclass
class EnvVar:
    """An environment variable set in a container."""

    name: str
    value: str = ""
    value_from: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        _put(out, "value", self.value)
        _put(out, "valueFrom", copy.deepcopy(self.value_from))
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EnvVar:
        return cls(
            name=data.get("name", ""),
            value=data.get("value", "") or "",
            value_from=copy.deepcopy(data.get("valueFrom")),
        )


_CONTAINER_KEYS = {"name", "image", "command", "args", "env"}


@dataclass
class Container:
    """A container; fields not modelled here are kept in ``extra``."""

    name: str = ""
    image: str = ""
    command: list[str] = field(default_factory=list)
    args: list[str] = field(default_factory=list)
    env: list[EnvVar] = field(default_factory=list)
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name}
        _put(out, "image", self.image)
        _put(out, "command", list(self.command))
        _put(out, "args", list(self.args))
        _put(out, "env", [env.to_dict() for env in self.env])
        for key, value in self.extra.items():
            out.setdefault(key, copy.deepcopy(value))
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Container:
        return cls(
            name=data.get("name", "") or "",
            image=data.get("image", "") or "",
            command=_strings(data.get("command")),
            args=_strings(data.get("args")),
            env=[EnvVar.from_dict(item) for item in data.get("env") or []],
            extra={
                key: copy.deepcopy(value)
                for key, value in data.items()
                if key not in _CONTAINER_KEYS
            },
        )


@dataclass
class Clone:
    """Which repository and snapshot a component uses."""

    image: str | None = None
    repo: str | None = None
    git_ref: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.image is not None:
            out["image"] = self.image
        if self.repo is not None:
            out["repo"] = self.repo
        if self.git_ref is not None:
            out["gitRef"] = self.git_ref
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Clone:
        return cls(
            image=data.get("image"),
            repo=data.get("repo"),
            git_ref=data.get("gitRef"),
        )


@dataclass
class Build:
    """Image, command, arguments and environment used to build a component."""

    image: str | None = None
    command: list[str] = field(default_factory=list)
    args: list[str] = field(default_factory=list)
    env: list[EnvVar] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.image is not None:
            out["image"] = self.image
        _put(out, "command", list(self.command))
        _put(out, "args", list(self.args))
        _put(out, "env", [env.to_dict() for env in self.env])
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Build:
        return cls(
            image=data.get("image"),
            command=_strings(data.get("command")),
            args=_strings(data.get("args")),
            env=[EnvVar.from_dict(item) for item in data.get("env") or []],
        )


@dataclass
class _Component:
    name: str | None = None
    language: str = ""
    pool: str | None = None
    clone: Clone | None = None
    build: Build | None = None
    run: list[Container] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.name is not None:
            out["name"] = self.name
        out["language"] = self.language
        if self.pool is not None:
            out["pool"] = self.pool
        if self.clone is not None:
            out["clone"] = self.clone.to_dict()
        if self.build is not None:
            out["build"] = self.build.to_dict()
        out["run"] = [container.to_dict() for container in self.run]
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]):
        clone = data.get("clone")
        build = data.get("build")
        return cls(
            name=data.get("name"),
            language=data.get("language", "") or "",
            pool=data.get("pool"),
            clone=Clone.from_dict(clone) if clone is not None else None,
            build=Build.from_dict(build) if build is not None else None,
            run=[Container.from_dict(item) for item in data.get("run") or []],
        )


@dataclass
class Driver(_Component):
    """The component that orchestrates the servers and clients."""


@dataclass
class Server(_Component):
    """A component that receives traffic from clients."""


@dataclass
class Client(_Component):
    """A component that sends traffic to a server."""


@dataclass
class Results:
    """Where test results are stored."""

    big_query_table: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.big_query_table is not None:
            out["bigQueryTable"] = self.big_query_table
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Results:
        return cls(big_query_table=data.get("bigQueryTable"))


@dataclass
class LoadTestSpec:
    """Desired state of a load test."""

    driver: Driver | None = None
    servers: list[Server] = field(default_factory=list)
    clients: list[Client] = field(default_factory=list)
    results: Results | None = None
    scenarios_json: str = ""
    timeout_seconds: int = 0
    ttl_seconds: int = 0

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.driver is not None:
            out["driver"] = self.driver.to_dict()
        _put(out, "servers", [server.to_dict() for server in self.servers])
        _put(out, "clients", [client.to_dict() for client in self.clients])
        if self.results is not None:
            out["results"] = self.results.to_dict()
        _put(out, "scenariosJSON", self.scenarios_json)
        out["timeoutSeconds"] = self.timeout_seconds
        out["ttlSeconds"] = self.ttl_seconds
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LoadTestSpec:
        driver = data.get("driver")
        results = data.get("results")
        return cls(
            driver=Driver.from_dict(driver) if driver is not None else None,
            servers=[Server.from_dict(item) for item in data.get("servers") or []],
            clients=[Client.from_dict(item) for item in data.get("clients") or []],
            results=Results.from_dict(results) if results is not None else None,
            scenarios_json=data.get("scenariosJSON", "") or "",
            timeout_seconds=int(data.get("timeoutSeconds", 0) or 0),
            ttl_seconds=int(data.get("ttlSeconds", 0) or 0),
        )


class LoadTestState(str, enum.Enum):
    """Derived state of a load test."""

    UNKNOWN = "Unknown"
    INITIALIZING = "Initializing"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    ERRORED = "Errored"

    def is_terminated(self) -> bool:
        """Whether the test has finished, successfully or not."""
        return self in (LoadTestState.SUCCEEDED, LoadTestState.ERRORED)


@dataclass
class LoadTestStatus:
    """Observed state of a load test."""

    state: LoadTestState = LoadTestState.UNKNOWN
    reason: str = ""
    message: str = ""
    start_time: datetime | None = None
    stop_time: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"state": self.state.value}
        _put(out, "reason", self.reason)
        _put(out, "message", self.message)
        _put(out, "startTime", _format_time(self.start_time))
        _put(out, "stopTime", _format_time(self.stop_time))
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LoadTestStatus:
        state = data.get("state") or LoadTestState.UNKNOWN.value
        return cls(
            state=LoadTestState(state),
            reason=data.get("reason", "") or "",
            message=data.get("message", "") or "",
            start_time=_parse_time(data.get("startTime")),
            stop_time=_parse_time(data.get("stopTime")),
        )


_META_KEYS = {"name", "namespace", "labels", "annotations"}


@dataclass
class ObjectMeta:
    """Object metadata; fields not modelled here are kept in ``extra``."""

    name: str = ""
    namespace: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    annotations: dict[str, str] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        _put(out, "name", self.name)
        _put(out, "namespace", self.namespace)
        _put(out, "labels", dict(self.labels))
        _put(out, "annotations", dict(self.annotations))
        for key, value in self.extra.items():
            out.setdefault(key, copy.deepcopy(value))
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ObjectMeta:
        return cls(
            name=data.get("name", "") or "",
            namespace=data.get("namespace", "") or "",
            labels=dict(data.get("labels") or {}),
            annotations=dict(data.get("annotations") or {}),
            extra={
                key: copy.deepcopy(value)
                for key, value in data.items()
                if key not in _META_KEYS
            },
        )


@dataclass
class LoadTest:
    """A load test resource."""

    metadata: ObjectMeta = field(default_factory=ObjectMeta)
    spec: LoadTestSpec = field(default_factory=LoadTestSpec)
    status: LoadTestStatus = field(default_factory=LoadTestStatus)
    api_version: str = GROUP_VERSION.api_version
    kind: str = LOAD_TEST_KIND

    @property
    def name(self) -> str:
        return self.metadata.name

    @name.setter
    def name(self, value: str) -> None:
        self.metadata.name = value

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    @namespace.setter
    def namespace(self, value: str) -> None:
        self.metadata.namespace = value

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the JSON-compatible form used by the API server."""
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "metadata": self.metadata.to_dict(),
            "spec": self.spec.to_dict(),
            "status": self.status.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LoadTest:
        """Build a load test from its JSON-compatible form."""
        return cls(
            metadata=ObjectMeta.from_dict(data.get("metadata") or {}),
            spec=LoadTestSpec.from_dict(data.get("spec") or {}),
            status=LoadTestStatus.from_dict(data.get("status") or {}),
            api_version=data.get("apiVersion") or GROUP_VERSION.api_version,
            kind=data.get("kind") or LOAD_TEST_KIND,
        )

    def deep_copy(self) -> LoadTest:
        """Return an independent copy of this load test."""
        return copy.deepcopy(self)


@dataclass
class LoadTestList:
    """A list of load tests."""

    items: list[LoadTest] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    api_version: str = GROUP_VERSION.api_version
    kind: str = LOAD_TEST_LIST_KIND

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the JSON-compatible form used by the API server."""
        out: dict[str, Any] = {
            "apiVersion": self.api_version,
            "kind": self.kind,
        }
        _put(out, "metadata", copy.deepcopy(self.metadata))
        out["items"] = [item.to_dict() for item in self.items]
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LoadTestList:
        """Build a list from its JSON-compatible form."""
        return cls(
            items=[LoadTest.from_dict(item) for item in data.get("items") or []],
            metadata=copy.deepcopy(data.get("metadata") or {}),
            api_version=data.get("apiVersion") or GROUP_VERSION.api_version,
            kind=data.get("kind") or LOAD_TEST_LIST_KIND,
        )