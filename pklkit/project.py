"""Python representation of Pkl projects (``PklProject`` files)."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .debug import debug
from .options import ProjectDependencies, ProjectLocalDependency, ProjectRemoteDependency
from .schema import register_mapping
from .values import Duration, Object


@dataclass
class ProjectPackage:
    """The ``package`` section of a project: ``pkl.Project#Package``."""

    name: str = ""
    base_uri: str = ""
    version: str = ""
    package_zip_url: str = ""
    description: str = ""
    authors: list[str] = field(default_factory=list)
    website: str = ""
    documentation: str = ""
    source_code: str = ""
    source_code_url_scheme: str = ""
    license: str = ""
    license_text: str = ""
    issue_tracker: str = ""
    api_tests: list[str] = field(default_factory=list)
    exclude: list[str] = field(default_factory=list)
    uri: str = ""


@dataclass
class ProjectEvaluatorSettingsProxy:
    """Proxy settings declared by a project: ``pkl.EvaluatorSettings.Proxy``."""

    address: str | None = None
    no_proxy: list[str] | None = None


@dataclass
class ProjectEvaluatorSettingsHttp:
    """HTTP settings declared by a project: ``pkl.EvaluatorSettings.Http``."""

    proxy: ProjectEvaluatorSettingsProxy | None = None


@dataclass
class ProjectEvaluatorSettingExternalReader:
    """An external reader declared by a project."""

    executable: str = ""
    arguments: list[str] | None = None


@dataclass
class ProjectEvaluatorSettings:
    """Evaluator settings declared by a project: ``pkl.EvaluatorSettings``.

    ``allowed_modules``, ``allowed_resources`` and ``no_cache`` are None when
    the project leaves them unset.
    """

    external_properties: dict[str, str] | None = None
    env: dict[str, str] | None = None
    allowed_modules: list[str] | None = None
    allowed_resources: list[str] | None = None
    no_cache: bool | None = None
    module_path: list[str] | None = None
    timeout: Duration | None = None
    module_cache_dir: str = ""
    root_dir: str = ""
    http: ProjectEvaluatorSettingsHttp | None = None
    color: str = ""
    external_module_readers: dict[str, ProjectEvaluatorSettingExternalReader] | None = None
    external_resource_readers: dict[str, ProjectEvaluatorSettingExternalReader] | None = None


@dataclass
class Project:
    """A loaded ``pkl.Project``.

    ``raw_dependencies`` maps names to either a Project (a local dependency)
    or a ProjectRemoteDependency; use :meth:`dependencies` to read them.
    """

    project_file_uri: str = ""
    package: ProjectPackage | None = None
    evaluator_settings: ProjectEvaluatorSettings | None = None
    tests: list[str] = field(default_factory=list)
    annotations: list[Object] = field(default_factory=list)
    raw_dependencies: dict[str, Any] = field(default_factory=dict)
    _dependencies: ProjectDependencies | None = field(
        default=None, init=False, repr=False, compare=False
    )

    def dependencies(self) -> ProjectDependencies:
        """Return the project's dependencies, split into local and remote ones."""
        if self._dependencies is None:
            deps = ProjectDependencies()
            for name, dep in self.raw_dependencies.items():
                if isinstance(dep, Project):
                    deps.local_dependencies[name] = ProjectLocalDependency(
                        package_uri=dep.package.uri if dep.package else "",
                        project_file_uri=dep.project_file_uri,
                        dependencies=dep.dependencies(),
                    )
                elif isinstance(dep, ProjectRemoteDependency):
                    deps.remote_dependencies[name] = dep
                else:
                    # Most likely a hand-built Project with wrong raw dependencies.
                    debug("Invalid dependency type: %r", dep)
            self._dependencies = deps
        return self._dependencies


register_mapping("pkl.Project", Project)
register_mapping("pkl.Project#RemoteDependency", ProjectRemoteDependency)