"""Options that control how a Pkl evaluator is created."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from . import msgapi
from .fs_reader import FsModuleReader, FsResourceReader
from .logger import NOOP_LOGGER, Logger
from .reader import (
    ModuleReader,
    ResourceReader,
    module_readers_to_message,
    resource_readers_to_message,
)
from .version import PKL_VERSION_0_26, PKL_VERSION_0_27, Semver

Option = Callable[["EvaluatorOptions"], None]


@dataclass
class Checksums:
    """Checksums of a remote package."""

    sha256: str = ""

    def to_message(self) -> msgapi.Checksums:
        return msgapi.Checksums(sha256=self.sha256)


@dataclass
class ProjectRemoteDependency:
    """A dependency on a published package."""

    package_uri: str = ""
    checksums: Checksums | None = None

    def to_message(self) -> msgapi.ProjectOrDependency:
        return msgapi.ProjectOrDependency(
            package_uri=self.package_uri,
            checksums=self.checksums.to_message() if self.checksums else None,
            type="remote",
        )


@dataclass
class ProjectLocalDependency:
    """A dependency on another project on the local file system."""

    package_uri: str = ""
    project_file_uri: str = ""
    dependencies: ProjectDependencies | None = None

    def to_message(self) -> msgapi.ProjectOrDependency:
        return msgapi.ProjectOrDependency(
            package_uri=self.package_uri,
            project_file_uri=self.project_file_uri,
            type="local",
            dependencies=(
                self.dependencies.to_message() if self.dependencies else None
            ),
        )


@dataclass
class ProjectDependencies:
    """The local and remote dependencies declared by a project."""

    local_dependencies: dict[str, ProjectLocalDependency] = field(default_factory=dict)
    remote_dependencies: dict[str, ProjectRemoteDependency] = field(
        default_factory=dict
    )

    def to_message(self) -> dict[str, msgapi.ProjectOrDependency]:
        message = {name: dep.to_message() for name, dep in self.local_dependencies.items()}
        message.update(
            (name, dep.to_message()) for name, dep in self.remote_dependencies.items()
        )
        return message


@dataclass
class Proxy:
    """HTTP proxy settings.

    ``address`` must start with ``http://`` and hold only a host and an
    optional port. ``no_proxy`` lists hosts, IP addresses or CIDR ranges that
    bypass the proxy; ``"*"`` disables proxying altogether.
    """

    address: str = ""
    no_proxy: list[str] | None = None

    def to_message(self) -> msgapi.Proxy:
        return msgapi.Proxy(address=self.address, no_proxy=self.no_proxy)


@dataclass
class Http:
    """Settings for how Pkl talks over HTTP(S).

    ``ca_certificates`` holds PEM certificates to trust; when empty, Pkl uses
    its built-in ones. When ``proxy`` is None the system proxy settings apply.
    """

    ca_certificates: bytes = b""
    proxy: Proxy | None = None

    def to_message(self) -> msgapi.Http:
        return msgapi.Http(
            ca_certificates=self.ca_certificates,
            proxy=self.proxy.to_message() if self.proxy else None,
        )


@dataclass
class ExternalReader:
    """An external command that implements a reader scheme."""

    executable: str = ""
    arguments: list[str] | None = None

    def to_message(self) -> msgapi.ExternalReaderSpec:
        return msgapi.ExternalReaderSpec(
            executable=self.executable, arguments=self.arguments
        )


def external_readers_to_message(
    readers: dict[str, ExternalReader] | None,
) -> dict[str, msgapi.ExternalReaderSpec]:
    """Describe external readers the way the wire protocol expects."""
    return {scheme: reader.to_message() for scheme, reader in (readers or {}).items()}


@dataclass
class EvaluatorOptions:
    """The set of options controlling Pkl evaluation.

    ``output_format`` selects the renderer for ``output.text``: one of
    ``json``, ``jsonnet``, ``pcf`` (default), ``plist``, ``properties``,
    ``textproto``, ``xml`` or ``yaml``. ``allowed_modules`` and
    ``allowed_resources`` are URI patterns in Java regex syntax. An empty
    ``cache_dir`` disables caching of ``package:`` modules.
    """

    properties: dict[str, str] = field(default_factory=dict)
    env: dict[str, str] = field(default_factory=dict)
    module_paths: list[str] = field(default_factory=list)
    logger: Logger | None = None
    output_format: str = ""
    allowed_modules: list[str] = field(default_factory=list)
    allowed_resources: list[str] = field(default_factory=list)
    resource_readers: list[ResourceReader] = field(default_factory=list)
    module_readers: list[ModuleReader] = field(default_factory=list)
    cache_dir: str = ""
    root_dir: str = ""
    project_base_uri: str = ""
    declared_project_dependencies: ProjectDependencies | None = None
    http: Http | None = None
    external_module_readers: dict[str, ExternalReader] = field(default_factory=dict)
    external_resource_readers: dict[str, ExternalReader] = field(default_factory=dict)

    def to_message(self) -> msgapi.CreateEvaluator:
        """Build the message that asks the server for a new evaluator."""
        return msgapi.CreateEvaluator(
            resource_readers=resource_readers_to_message(self.resource_readers),
            module_readers=module_readers_to_message(self.module_readers),
            env=self.env,
            properties=self.properties,
            module_paths=self.module_paths,
            allowed_modules=self.allowed_modules,
            allowed_resources=self.allowed_resources,
            cache_dir=self.cache_dir,
            output_format=self.output_format,
            root_dir=self.root_dir,
            project=self.project(),
            http=self.http.to_message() if self.http else None,
            external_module_readers=external_readers_to_message(
                self.external_module_readers
            ),
            external_resource_readers=external_readers_to_message(
                self.external_resource_readers
            ),
        )

    def project(self) -> msgapi.ProjectOrDependency | None:
        """Describe the project these options belong to, if any."""
        if not self.project_base_uri:
            return None
        deps = self.declared_project_dependencies
        return msgapi.ProjectOrDependency(
            project_file_uri=self.project_base_uri + "/PklProject",
            dependencies=deps.to_message() if deps else None,
        )


def build_evaluator_options(version: Semver, *args: Option) -> EvaluatorOptions:
    """Apply option functions and check them against the Pkl ``version``.

    Raises ValueError if an option needs a newer Pkl.
    """
    opts = EvaluatorOptions()
    for apply in args:
        apply(opts)
    # The module holding REPL expressions must always be allowed.
    opts.allowed_modules.append("repl:text")
    if opts.http is not None and PKL_VERSION_0_26.is_greater_than(version):
        raise ValueError("http options are not supported on Pkl versions lower than 0.26")
    if (
        opts.external_module_readers or opts.external_resource_readers
    ) and PKL_VERSION_0_27.is_greater_than(version):
        raise ValueError(
            "external reader options are not supported on Pkl versions lower than 0.27"
        )
    return opts


def with_os_env(opts: EvaluatorOptions) -> None:
    """Make the current process environment available to ``env:`` reads."""
    if opts.env is None:
        opts.env = {}
    opts.env.update(os.environ)


def with_default_allowed_resources(opts: EvaluatorOptions) -> None:
    """Allow the standard resource schemes."""
    opts.allowed_resources.extend(
        ["http:", "https:", "file:", "env:", "prop:", "modulepath:", "package:", "projectpackage:"]
    )


def with_default_allowed_modules(opts: EvaluatorOptions) -> None:
    """Allow the standard module schemes."""
    opts.allowed_modules.extend(
        ["pkl:", "repl:", "file:", "http:", "https:", "modulepath:", "package:", "projectpackage:"]
    )


def with_default_cache_dir(opts: EvaluatorOptions) -> None:
    """Use ``~/.pkl/cache`` as the cache directory.

    Raises RuntimeError if the home directory cannot be determined.
    """
    opts.cache_dir = str(Path.home() / ".pkl" / "cache")


def with_resource_reader(reader: ResourceReader) -> Option:
    """Register ``reader`` and allow its scheme for resources."""

    def apply(opts: EvaluatorOptions) -> None:
        opts.resource_readers.append(reader)
        opts.allowed_resources.append(reader.scheme + ":")

    return apply


def with_module_reader(reader: ModuleReader) -> Option:
    """Register ``reader`` and allow its scheme for modules."""

    def apply(opts: EvaluatorOptions) -> None:
        opts.module_readers.append(reader)
        opts.allowed_modules.append(reader.scheme + ":")

    return apply


def with_fs(root: str | os.PathLike[str], scheme: str) -> Option:
    """Serve modules and resources of ``scheme`` from the directory ``root``.

    Within Pkl, paths are rooted at ``/``: the file ``foo.txt`` under ``root``
    is ``scheme:/foo.txt``.
    """

    def apply(opts: EvaluatorOptions) -> None:
        with_module_reader(FsModuleReader(root, scheme))(opts)
        with_resource_reader(FsResourceReader(root, scheme))(opts)

    return apply


def with_project_evaluator_settings(project: Any) -> Option:
    """Apply the evaluator settings declared by ``project``."""

    def apply(opts: EvaluatorOptions) -> None:
        settings = project.evaluator_settings
        if settings is None:
            return
        opts.properties = dict(settings.external_properties or {})
        opts.env = dict(settings.env or {})
        if settings.allowed_modules is not None:
            opts.allowed_modules = list(settings.allowed_modules)
        if settings.allowed_resources is not None:
            opts.allowed_resources = list(settings.allowed_resources)
        if settings.no_cache:
            opts.cache_dir = ""
        else:
            opts.cache_dir = settings.module_cache_dir or ""
        opts.root_dir = settings.root_dir or ""
        if settings.http is not None:
            opts.http = Http()
            proxy = settings.http.proxy
            if proxy is not None:
                opts.http.proxy = Proxy(
                    address=proxy.address or "",
                    no_proxy=list(proxy.no_proxy) if proxy.no_proxy is not None else None,
                )
        if settings.external_module_readers is not None:
            opts.external_module_readers = {}
            for scheme, reader in settings.external_module_readers.items():
                opts.external_module_readers[scheme] = ExternalReader(
                    reader.executable, reader.arguments
                )
                if settings.allowed_modules is None:
                    opts.allowed_modules.append(scheme + ":")
        if settings.external_resource_readers is not None:
            opts.external_resource_readers = {}
            for scheme, reader in settings.external_resource_readers.items():
                opts.external_resource_readers[scheme] = ExternalReader(
                    reader.executable, reader.arguments
                )
                if settings.allowed_resources is None:
                    opts.allowed_resources.append(scheme + ":")

    return apply


def with_project_dependencies(project: Any) -> Option:
    """Resolve dependency imports against ``project``."""

    def apply(opts: EvaluatorOptions) -> None:
        opts.project_base_uri = project.project_file_uri.removesuffix("/PklProject")
        opts.declared_project_dependencies = project.dependencies()

    return apply


def with_project(project: Any) -> Option:
    """Apply both the settings and the dependencies of ``project``."""

    def apply(opts: EvaluatorOptions) -> None:
        with_project_evaluator_settings(project)(opts)
        with_project_dependencies(project)(opts)

    return apply


def with_external_module_reader(scheme: str, spec: ExternalReader) -> Option:
    """Register an external module reader command for ``scheme``."""

    def apply(opts: EvaluatorOptions) -> None:
        if opts.external_module_readers is None:
            opts.external_module_readers = {}
        opts.external_module_readers[scheme] = spec
        opts.allowed_modules.append(scheme + ":")

    return apply


def with_external_resource_reader(scheme: str, spec: ExternalReader) -> Option:
    """Register an external resource reader command for ``scheme``."""

    def apply(opts: EvaluatorOptions) -> None:
        if opts.external_resource_readers is None:
            opts.external_resource_readers = {}
        opts.external_resource_readers[scheme] = spec
        opts.allowed_resources.append(scheme + ":")

    return apply


def preconfigured_options(opts: EvaluatorOptions) -> None:
    """Apply the usual defaults: standard schemes, host env, default cache, no logging."""
    with_default_allowed_resources(opts)
    with_os_env(opts)
    with_default_allowed_modules(opts)
    with_default_cache_dir(opts)
    opts.logger = NOOP_LOGGER


def maybe_preconfigured_options(opts: EvaluatorOptions) -> None:
    """Like preconfigured_options, but only fill in what is not set yet."""
    if not opts.allowed_resources:
        with_default_allowed_resources(opts)
    if not opts.env:
        with_os_env(opts)
    if not opts.allowed_modules:
        with_default_allowed_modules(opts)
    if not opts.cache_dir:
        with_default_cache_dir(opts)
    if opts.logger is None:
        opts.logger = NOOP_LOGGER