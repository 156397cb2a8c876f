"""
Unit tests for the runtime classpath builder.
"""

from pathlib import Path

import pytest

from buildpilot.compilation import TestClasspathBuilder
from buildpilot.models import (
    Dependency,
    DependencyScope,
    Library,
    Module,
    ProjectModel,
    Toolchain,
)


def _module(name, *dependencies, toolchain=None):
    return Module(name=name, toolchain=toolchain, dependencies=tuple(dependencies))


def _output_resolver(module, for_tests):
    return Path("/out") / ("test" if for_tests else "production") / module.name


@pytest.fixture
def model():
    modules = [
        _module("app", Dependency("module", "core"), Dependency("library", "junit", DependencyScope.TEST),
                Dependency("library", "servlet", DependencyScope.PROVIDED), toolchain="11"),
        _module("core", Dependency("module", "app"), Dependency("library", "guava", DependencyScope.RUNTIME),
                toolchain="11"),
    ]
    return ProjectModel(
        home=Path("/project"),
        modules={module.name: module for module in modules},
        libraries={
            "junit": Library("junit", ("/lib/junit.jar",)),
            "guava": Library("guava", ("/lib/guava.jar",)),
            "servlet": Library("servlet", ("/lib/servlet.jar",)),
        },
        toolchains={"11": Toolchain("11", Path("/jdk"), ["/jdk/lib/tools.jar", "jrt:///jdk!/java.base"])},
    )


@pytest.mark.unit
class TestClasspathBuilding:
    """Test cases for depth-first classpath enumeration."""

    def test_production_classpath(self, model):
        """Production classpaths hold runtime scopes and toolchain jars, deduplicated."""
        builder = TestClasspathBuilder(model, _output_resolver)

        classpath = builder.build(model.modules["app"], for_tests=False)

        assert classpath == [
            "/jdk/lib/tools.jar",
            "/out/production/app",
            "/out/production/core",
            "/lib/guava.jar",
        ]

    def test_test_classpath(self, model):
        """Test classpaths put test outputs first, count every scope and skip the SDK."""
        builder = TestClasspathBuilder(model, _output_resolver)

        classpath = builder.build(model.modules["app"], for_tests=True)

        assert classpath == [
            "/out/test/app",
            "/out/production/app",
            "/out/test/core",
            "/out/production/core",
            "/lib/guava.jar",
            "/lib/junit.jar",
            "/lib/servlet.jar",
        ]

    def test_cyclic_dependencies_terminate(self, model):
        """Modules depending on each other are visited once."""
        builder = TestClasspathBuilder(model, _output_resolver)

        classpath = builder.build(model.modules["core"], for_tests=False, without_sdk=True)

        assert classpath == ["/out/production/core", "/out/production/app", "/lib/guava.jar"]

    def test_unknown_dependencies_are_skipped(self):
        model = ProjectModel(
            home=Path("/project"),
            modules={"app": _module("app", Dependency("module", "ghost"), Dependency("library", "ghost-lib"))},
            libraries={},
        )
        builder = TestClasspathBuilder(model, _output_resolver)

        assert builder.build(model.modules["app"], for_tests=False) == ["/out/production/app"]

    def test_unregistered_toolchain_contributes_nothing(self):
        model = ProjectModel(
            home=Path("/project"),
            modules={"app": _module("app", toolchain="corretto-17")},
            libraries={},
        )
        builder = TestClasspathBuilder(model, _output_resolver)

        assert builder.build(model.modules["app"], for_tests=False) == ["/out/production/app"]
