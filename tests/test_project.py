from pklkit.options import (
    ExternalReader,
    EvaluatorOptions,
    ProjectDependencies,
    ProjectLocalDependency,
    ProjectRemoteDependency,
    with_project,
    with_project_evaluator_settings,
)
from pklkit.project import (
    Project,
    ProjectEvaluatorSettingExternalReader,
    ProjectEvaluatorSettings,
    ProjectEvaluatorSettingsHttp,
    ProjectEvaluatorSettingsProxy,
    ProjectPackage,
)
from pklkit.schema import lookup_mapping
from pklkit.values import Duration, DurationUnit

BASE = "file:///tmp/work"


def _storks() -> Project:
    return Project(
        project_file_uri=f"{BASE}/storks/PklProject",
        package=ProjectPackage(
            name="storks",
            base_uri="package://example.com/storks",
            version="0.5.0",
            package_zip_url="https://example.com/stork/0.5.0/stork-0.5.0.zip",
            uri="package://example.com/storks@0.5.0",
        ),
    )


def _hawks() -> Project:
    return Project(
        project_file_uri=f"{BASE}/hawks/PklProject",
        evaluator_settings=ProjectEvaluatorSettings(
            timeout=Duration(5, DurationUnit.MINUTE),
            no_cache=False,
            root_dir=".",
            module_cache_dir="cache/",
            env={"one": "1"},
            external_properties={"two": "2"},
            module_path=["modulepath1/", "modulepath2/"],
            allowed_modules=["foo:", "bar:"],
            allowed_resources=["baz:", "biz:"],
        ),
        tests=["test1.pkl", "test2.pkl"],
        raw_dependencies={
            "flamingos": ProjectRemoteDependency(
                package_uri="package://example.com/flamingos@0.5.0"
            ),
            "storks": _storks(),
        },
    )


def test_dependencies_split_local_and_remote():
    expected = ProjectDependencies(
        remote_dependencies={
            "flamingos": ProjectRemoteDependency(
                package_uri="package://example.com/flamingos@0.5.0"
            )
        },
        local_dependencies={
            "storks": ProjectLocalDependency(
                project_file_uri=f"{BASE}/storks/PklProject",
                package_uri="package://example.com/storks@0.5.0",
                dependencies=ProjectDependencies(
                    local_dependencies={}, remote_dependencies={}
                ),
            )
        },
    )
    assert _hawks().dependencies() == expected


def test_dependencies_are_cached():
    project = _hawks()
    first = project.dependencies()
    project.raw_dependencies.clear()
    assert project.dependencies() is first
    assert "storks" in first.local_dependencies


def test_invalid_dependency_is_ignored():
    project = Project(raw_dependencies={"bad": 42})
    deps = project.dependencies()
    assert deps.local_dependencies == {}
    assert deps.remote_dependencies == {}


def test_mappings_registered():
    assert lookup_mapping("pkl.Project") is Project
    assert lookup_mapping("pkl.Project#RemoteDependency") is ProjectRemoteDependency


def test_with_project_applies_settings_and_dependencies():
    opts = EvaluatorOptions()
    with_project(_hawks())(opts)
    assert opts.allowed_modules == ["foo:", "bar:"]
    assert opts.allowed_resources == ["baz:", "biz:"]
    assert opts.env == {"one": "1"}
    assert opts.properties == {"two": "2"}
    assert opts.cache_dir == "cache/"
    assert opts.root_dir == "."
    assert opts.project_base_uri == f"{BASE}/hawks"
    assert set(opts.declared_project_dependencies.local_dependencies) == {"storks"}


def test_proxy_settings_are_applied():
    project = Project(
        evaluator_settings=ProjectEvaluatorSettings(
            http=ProjectEvaluatorSettingsHttp(
                proxy=ProjectEvaluatorSettingsProxy(
                    address="http://localhost:80",
                    no_proxy=["127.0.0.1", "192.168.0.1/24", "example.com", "localhost:8000"],
                )
            )
        )
    )
    opts = EvaluatorOptions()
    with_project_evaluator_settings(project)(opts)
    assert opts.http.proxy.address == "http://localhost:80"
    assert opts.http.proxy.no_proxy == [
        "127.0.0.1",
        "192.168.0.1/24",
        "example.com",
        "localhost:8000",
    ]


def test_external_reader_settings_are_applied():
    project = Project(
        evaluator_settings=ProjectEvaluatorSettings(
            external_module_readers={
                "scheme1": ProjectEvaluatorSettingExternalReader(executable="reader1"),
                "scheme2": ProjectEvaluatorSettingExternalReader(
                    executable="reader2", arguments=["with", "args"]
                ),
            },
            external_resource_readers={
                "scheme3": ProjectEvaluatorSettingExternalReader(executable="reader3"),
                "scheme4": ProjectEvaluatorSettingExternalReader(
                    executable="reader4", arguments=["with", "args"]
                ),
            },
        )
    )
    opts = EvaluatorOptions()
    with_project_evaluator_settings(project)(opts)
    assert opts.external_module_readers == {
        "scheme1": ExternalReader("reader1", None),
        "scheme2": ExternalReader("reader2", ["with", "args"]),
    }
    assert opts.external_resource_readers == {
        "scheme3": ExternalReader("reader3", None),
        "scheme4": ExternalReader("reader4", ["with", "args"]),
    }
    assert opts.allowed_modules == ["scheme1:", "scheme2:"]
    assert opts.allowed_resources == ["scheme3:", "scheme4:"]