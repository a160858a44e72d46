"""System-wide defaults and how they are applied to load tests."""

from __future__ import annotations

import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import yaml

from loadtestkit.constants import KILL_AFTER_ENV, RUN_CONTAINER_NAME
from loadtestkit.types import (
    Build,
    Client,
    Clone,
    Container,
    Driver,
    EnvVar,
    LoadTest,
    LoadTestSpec,
    Server,
)


class DefaultsError(ValueError):
    """Raised when defaults are invalid or cannot be applied."""


def _wrap(message: str, err: Exception) -> DefaultsError:
    return DefaultsError(f"{message}: {err}")


def _quote(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _get_str(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DefaultsError(f"field {key!r} must be a string, got {value!r}")
    return value


def _get_mapping(data: Mapping[str, Any], key: str) -> Mapping[str, Any] | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise DefaultsError(f"field {key!r} must be a mapping, got {value!r}")
    return value


@dataclass
class LanguageDefault:
    """A programming language with its default build and run images."""

    language: str = ""
    build_image: str = ""
    run_image: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> LanguageDefault:
        return cls(
            language=_get_str(data, "language"),
            build_image=_get_str(data, "buildImage"),
            run_image=_get_str(data, "runImage"),
        )


@dataclass
class PoolLabelMap:
    """Node label keys marking the default pools for each component role."""

    client: str = ""
    driver: str = ""
    server: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PoolLabelMap:
        return cls(
            client=_get_str(data, "client"),
            driver=_get_str(data, "driver"),
            server=_get_str(data, "server"),
        )


class ImageMap:
    """Lookup of default build and run images by language."""

    def __init__(self, languages: Iterable[LanguageDefault]) -> None:
        self._by_language = {ld.language: ld for ld in languages}

    def _lookup(self, language: str) -> LanguageDefault:
        try:
            return self._by_language[language]
        except KeyError:
            raise DefaultsError(
                f"cannot find image for language {_quote(language)}"
            ) from None

    def build_image(self, language: str) -> str:
        """Default build image for ``language``; raises if there is none."""
        return self._lookup(language).build_image

    def run_image(self, language: str) -> str:
        """Default run image for ``language``; raises if there is none."""
        return self._lookup(language).run_image


def _name_or_uuid(name: str | None) -> str:
    return name if name is not None else str(uuid.uuid4())


@dataclass
class Defaults:
    """Default settings for the system."""

    component_namespace: str = ""
    default_pool_labels: PoolLabelMap | None = None
    clone_image: str = ""
    ready_image: str = ""
    driver_image: str = ""
    languages: list[LanguageDefault] = field(default_factory=list)
    kill_after: float = 0.0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Defaults:
        """Build defaults from their YAML/JSON mapping form."""
        if not isinstance(data, Mapping):
            raise DefaultsError(f"defaults must be a mapping, got {data!r}")
        pool_labels = _get_mapping(data, "defaultPoolLabels")
        languages = data.get("languages") or []
        if not isinstance(languages, list):
            raise DefaultsError(f"field 'languages' must be a list, got {languages!r}")
        for item in languages:
            if not isinstance(item, Mapping):
                raise DefaultsError(f"language entry must be a mapping, got {item!r}")
        kill_after = data.get("killAfter")
        if kill_after is None:
            kill_after = 0.0
        if isinstance(kill_after, bool) or not isinstance(kill_after, (int, float)):
            raise DefaultsError(f"field 'killAfter' must be a number, got {kill_after!r}")
        return cls(
            component_namespace=_get_str(data, "componentNamespace"),
            default_pool_labels=(
                PoolLabelMap.from_dict(pool_labels) if pool_labels is not None else None
            ),
            clone_image=_get_str(data, "cloneImage"),
            ready_image=_get_str(data, "readyImage"),
            driver_image=_get_str(data, "driverImage"),
            languages=[LanguageDefault.from_dict(item) for item in languages],
            kill_after=float(kill_after),
        )

    @classmethod
    def from_yaml(cls, text: str) -> Defaults:
        """Parse defaults from a YAML document."""
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as err:
            raise _wrap("could not parse defaults as YAML", err) from err
        return cls.from_dict(data if data is not None else {})

    def validate(self) -> None:
        """Raise DefaultsError unless required fields are present and sane."""
        if not self.clone_image:
            raise DefaultsError("missing image for clone init container")
        if not self.ready_image:
            raise DefaultsError("missing image for ready init container")
        if not self.driver_image:
            raise DefaultsError("missing image for driver container")

        for index, ld in enumerate(self.languages):
            if not ld.language:
                raise DefaultsError(f"language (index {index}) unnamed")
            if not ld.build_image:
                raise DefaultsError(
                    f"language {_quote(ld.language)} (index {index}) "
                    "missing image for build init container"
                )
            if not ld.run_image:
                raise DefaultsError(
                    f"language {_quote(ld.language)} (index {index}) "
                    "missing image for run container"
                )

        if self.kill_after < 0:
            raise DefaultsError("killAfter must not be negative")

    def set_load_test_defaults(self, test: LoadTest) -> None:
        """Fill in fields of ``test`` that are required but missing.

        Raises DefaultsError when no viable default exists, e.g. a build
        image for a language the defaults do not know.
        """
        spec = test.spec
        images = ImageMap(self.languages)

        if not test.namespace:
            test.namespace = self.component_namespace

        try:
            self._set_driver_defaults(images, spec)
        except DefaultsError as err:
            raise _wrap("could not set defaults for driver", err) from err

        for index, server in enumerate(spec.servers):
            try:
                self._set_server_defaults(images, server)
            except DefaultsError as err:
                raise _wrap(
                    f"could not set defaults for server at index {index}", err
                ) from err

        for index, client in enumerate(spec.clients):
            try:
                self._set_client_defaults(images, client)
            except DefaultsError as err:
                raise _wrap(
                    f"could not set defaults for client at index {index}", err
                ) from err

    def _set_clone_default(self, clone: Clone | None) -> None:
        if clone is not None and clone.image is None:
            clone.image = self.clone_image

    def _set_build_default(
        self, images: ImageMap, language: str, build: Build | None
    ) -> None:
        if build is not None and build.image is None:
            try:
                build.image = images.build_image(language)
            except DefaultsError as err:
                raise _wrap("could not infer default build image", err) from err

    def _set_run_default(
        self, images: ImageMap, language: str, run: list[Container]
    ) -> None:
        # An empty list is checked against a stand-in container that is not
        # attached to the component.
        containers = run if run else [Container(name=RUN_CONTAINER_NAME)]
        first = containers[0]
        if not first.image:
            try:
                first.image = images.run_image(language)
            except DefaultsError as err:
                raise _wrap("could not infer default run image", err) from err
            first.env.append(EnvVar(name=KILL_AFTER_ENV, value=f"{self.kill_after:f}"))

    def _set_driver_defaults(self, images: ImageMap, spec: LoadTestSpec) -> None:
        if spec.driver is None:
            spec.driver = Driver()
        driver = spec.driver

        if not driver.language:
            driver.language = "cxx"
        if not driver.run:
            driver.run = [Container(name=RUN_CONTAINER_NAME)]
        if not driver.run[0].image:
            driver.run[0].image = self.driver_image

        driver.name = _name_or_uuid(driver.name)
        self._set_clone_default(driver.clone)

        try:
            self._set_build_default(images, driver.language, driver.build)
        except DefaultsError as err:
            raise _wrap(
                "failed to set defaults on instructions to build the driver", err
            ) from err

    def _set_worker_defaults(
        self, images: ImageMap, component: Server | Client | None, role: str
    ) -> None:
        if component is None:
            raise DefaultsError(f"cannot set defaults on a nil {role}")

        component.name = _name_or_uuid(component.name)
        self._set_clone_default(component.clone)

        try:
            self._set_build_default(images, component.language, component.build)
        except DefaultsError as err:
            raise _wrap(
                f"failed to set defaults on instructions to build the {role}", err
            ) from err

        try:
            self._set_run_default(images, component.language, component.run)
        except DefaultsError as err:
            raise _wrap(
                f"failed to set defaults on instructions to run the {role}", err
            ) from err

    def _set_client_defaults(self, images: ImageMap, client: Client | None) -> None:
        self._set_worker_defaults(images, client, "client")

    def _set_server_defaults(self, images: ImageMap, server: Server | None) -> None:
        self._set_worker_defaults(images, server, "server")