"""
Pytest configuration and shared fixtures for the buildpilot test suite.

This module provides common fixtures for all test modules: an on-disk
project tree factory, build messages with a recording artifact sink and a
builder of minimal compiled class files.
"""

import struct
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def published():
    """Reports received by the artifact sink."""
    return []


@pytest.fixture
def messages(published):
    """Build messages recording published artifacts instead of printing them."""
    from buildpilot.messages import BuildMessages

    return BuildMessages(artifact_sink=published.append)


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically reset the configuration singleton after each test."""
    yield

    from buildpilot.config import clear_config_cache, set_config_path

    clear_config_cache()
    set_config_path(Path("build.toml"))


# ============================================================================
# Project Fixtures
# ============================================================================


def default_project_model() -> Dict[str, Any]:
    """A small project: a bootstrap module, a utility module and a module under test."""
    return {
        "output": "out/classes",
        "libraries": [
            {"name": "JUnit5", "roots": ["lib/junit-jupiter.jar"]},
            {"name": "JUnit5Launcher", "roots": ["lib/junit-launcher.jar"]},
            {"name": "JUnit5Vintage", "roots": ["lib/junit-vintage.jar"]},
            {"name": "guava", "roots": ["lib/guava.jar"]},
        ],
        "modules": [
            {
                "name": "tools.testsBootstrap",
                "toolchain": "11",
                "dependencies": [{"library": "JUnit5"}],
            },
            {
                "name": "intellij.platform.util",
                "toolchain": "11",
                "content_roots": ["platform/util"],
            },
            {
                "name": "intellij.foo",
                "toolchain": "11",
                "content_roots": ["foo"],
                "dependencies": [
                    {"module": "intellij.platform.util"},
                    {"library": "guava", "scope": "test"},
                ],
            },
        ],
    }


@pytest.fixture
def default_model():
    """Mutable copy of the default project model description."""
    return default_project_model()


def write_modules_xml(home: Path, renames: Optional[Dict[str, str]] = None) -> None:
    entries = "".join(
        f'      <module old-name="{old}" new-name="{new}" />\n' for old, new in (renames or {}).items()
    )
    (home / ".idea").mkdir(parents=True, exist_ok=True)
    (home / ".idea" / "modules.xml").write_text(
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<project version="4">\n'
        '  <component name="ModuleRenamingHistory">\n'
        f"{entries}"
        "  </component>\n"
        "</project>\n",
        encoding="utf-8",
    )


def write_toolchain(home: Path, name: str, modules: Sequence[str] = ("java.base", "java.sql")) -> Path:
    """Fake toolchain installation under `<home>/build/jdk/<name>`."""
    toolchain_home = home / "build" / "jdk" / name
    (toolchain_home / "lib").mkdir(parents=True)
    (toolchain_home / "lib" / "tools.jar").write_bytes(b"")
    (toolchain_home / "release").write_text(f'JAVA_VERSION="{name}"\nMODULES="{" ".join(modules)}"\n')
    return toolchain_home


@pytest.fixture
def make_project(tmp_path):
    """
    Factory creating a project home with markers, a project model, a rename
    history and the primary toolchain.
    """
    import toml

    def _make_project(
        model: Optional[Dict[str, Any]] = None,
        renames: Optional[Dict[str, str]] = None,
        name: str = "project",
        toolchains: Sequence[str] = ("11",),
    ) -> Path:
        home = tmp_path / name
        (home / "platform" / "build-scripts").mkdir(parents=True)
        (home / "bin").mkdir()
        (home / "bin" / "log.xml").write_text("<log/>")
        (home / "build.txt").write_text("233.SNAPSHOT")
        write_modules_xml(home, renames)
        with open(home / ".idea" / "project-model.toml", "w") as f:
            toml.dump(model if model is not None else default_project_model(), f)
        for toolchain in toolchains:
            write_toolchain(home, toolchain)
        return home

    return _make_project


@pytest.fixture
def context_factory(make_project, messages):
    """Factory creating a CompilationContext over a fresh project."""
    from buildpilot.compilation import CompilationContext
    from buildpilot.models import BuildOptions

    def _create(options: Optional[BuildOptions] = None, env: Optional[Dict[str, str]] = None,
                home: Optional[Path] = None, **project_kwargs):
        home = home or make_project(**project_kwargs)
        return CompilationContext.create(
            home, home, options or BuildOptions(), messages, env=env if env is not None else {}
        )

    return _create


# ============================================================================
# Class File Builder
# ============================================================================


class ClassFileBuilder:
    """Builds minimal class files: constant pool, one field and the given methods."""

    ACC_PUBLIC = 0x0001
    ACC_PRIVATE = 0x0002

    def __init__(self):
        self._entries: List[Optional[bytes]] = []
        self._indexes: Dict[Tuple[str, str], int] = {}

    def _add(self, key: Tuple[str, str], entry: bytes, slots: int = 1) -> int:
        if key not in self._indexes:
            self._entries.append(entry)
            self._indexes[key] = len(self._entries)
            for _ in range(slots - 1):
                self._entries.append(None)
        return self._indexes[key]

    def utf8(self, value: str) -> int:
        encoded = value.encode("utf-8")
        return self._add(("utf8", value), b"\x01" + struct.pack(">H", len(encoded)) + encoded)

    def class_ref(self, name: str) -> int:
        name_index = self.utf8(name)
        return self._add(("class", name), b"\x07" + struct.pack(">H", name_index))

    def long_constant(self, value: int) -> int:
        return self._add(("long", str(value)), b"\x05" + struct.pack(">q", value), slots=2)

    def _member(self, access: int, name: str, descriptor: str, annotations: Sequence[str] = ()) -> bytes:
        data = struct.pack(">HHH", access, self.utf8(name), self.utf8(descriptor))
        if not annotations:
            return data + struct.pack(">H", 0)
        body = struct.pack(">H", len(annotations))
        for annotation in annotations:
            # One element value pair: timeout = 10L
            body += struct.pack(">HH", self.utf8(annotation), 1)
            body += struct.pack(">H", self.utf8("timeout")) + b"J" + struct.pack(">H", self.long_constant(10))
        attribute = struct.pack(">HI", self.utf8("RuntimeVisibleAnnotations"), len(body)) + body
        return data + struct.pack(">H", 1) + attribute

    def build(self, class_name: str, methods: Sequence[Tuple[str, int, Sequence[str]]]) -> bytes:
        """
        Args:
            class_name: Fully qualified name, e.g. "com.acme.FooTest"
            methods: (name, access flags, annotation descriptors) triples
        """
        this_class = self.class_ref(class_name.replace(".", "/"))
        super_class = self.class_ref("java/lang/Object")
        field = self._member(self.ACC_PRIVATE, "counter", "I")
        method_data = b"".join(
            self._member(access, name, "()V", annotations) for name, access, annotations in methods
        )

        pool = b"".join(entry for entry in self._entries if entry is not None)
        return (
            struct.pack(">IHH", 0xCAFEBABE, 0, 52)
            + struct.pack(">H", len(self._entries) + 1) + pool
            + struct.pack(">HHHH", 0x0021, this_class, super_class, 0)
            + struct.pack(">H", 1) + field
            + struct.pack(">H", len(methods)) + method_data
            + struct.pack(">H", 0)
        )


@pytest.fixture
def class_file_factory():
    """Returns a function building class file bytes for a class and its methods."""

    def _build(class_name: str, methods: Sequence[Tuple[str, int, Sequence[str]]]) -> bytes:
        return ClassFileBuilder().build(class_name, methods)

    return _build


@pytest.fixture
def junit_test_annotation():
    return "Lorg/junit/Test;"
