"""
Project model data structures.

This module contains the in-memory module/library graph loaded from the
project description, the toolchain registry and the module rename map.
All of them are created once at load time and only read afterwards.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple


class DependencyScope(Enum):
    """Scope of a module dependency, as used by the runtime classpath."""
    COMPILE = "COMPILE"
    TEST = "TEST"
    RUNTIME = "RUNTIME"
    PROVIDED = "PROVIDED"

    def is_in_runtime(self, for_tests: bool) -> bool:
        """Whether a dependency with this scope is on the runtime classpath."""
        if for_tests:
            return True
        return self in (DependencyScope.COMPILE, DependencyScope.RUNTIME)


@dataclass(frozen=True)
class Dependency:
    """A dependency of a module on another module or on a library."""

    # "module" or "library"
    kind: str
    name: str
    scope: DependencyScope = DependencyScope.COMPILE

    @property
    def is_module(self) -> bool:
        return self.kind == "module"


@dataclass(frozen=True)
class Module:
    """
    A named compilation unit.

    Output directories are either explicit or inherited from the project
    output directory (`<projectOutput>/production/<name>` and
    `<projectOutput>/test/<name>`).
    """

    name: str
    toolchain: Optional[str] = None
    output: Optional[Path] = None
    test_output: Optional[Path] = None
    inherit_output: bool = True
    content_roots: Tuple[Path, ...] = ()
    dependencies: Tuple[Dependency, ...] = ()


@dataclass(frozen=True)
class Library:
    """A named set of compiled roots (jars or directories)."""

    name: str
    roots: Tuple[str, ...] = ()


@dataclass
class Toolchain:
    """
    A registered compiler/runtime installation.

    `roots` is extended while the project is loaded (release file modules)
    and read-only afterwards.
    """

    name: str
    home: Path
    roots: List[str] = field(default_factory=list)

    def add_root(self, root: str) -> bool:
        """Add a compiled root unless it is already present."""
        if root in self.roots:
            return False
        self.roots.append(root)
        return True


class ModuleRenameMap:
    """
    Immutable mapping between legacy and current module names.

    The inverse map is built from the forward map, so for every legacy name
    `old` with `new = new_name(old)`, `old_name(new)` returns `old`. When two
    legacy names were renamed to the same module the later one wins in the
    inverse direction.
    """

    def __init__(self, old_to_new: Optional[Mapping[str, str]] = None):
        self._old_to_new: Dict[str, str] = dict(old_to_new or {})
        self._new_to_old: Dict[str, str] = {new: old for old, new in self._old_to_new.items()}

    @classmethod
    def merged(cls, mappings: Sequence[Mapping[str, str]]) -> "ModuleRenameMap":
        """Merge mappings in read order; later entries override earlier ones."""
        combined: Dict[str, str] = {}
        for mapping in mappings:
            combined.update(mapping)
        return cls(combined)

    def new_name(self, old_name: str) -> Optional[str]:
        return self._old_to_new.get(old_name)

    def old_name(self, new_name: str) -> Optional[str]:
        return self._new_to_old.get(new_name)

    def __len__(self) -> int:
        return len(self._old_to_new)

    def __repr__(self) -> str:
        return f"ModuleRenameMap({self._old_to_new!r})"


@dataclass
class ProjectModel:
    """
    The loaded project: modules, libraries and registered toolchains.
    """

    home: Path
    modules: Dict[str, Module]
    libraries: Dict[str, Library]
    toolchains: Dict[str, Toolchain] = field(default_factory=dict)
    # Project output directory as declared in the project description.
    declared_output: Optional[Path] = None

    def find_module(self, name: str) -> Optional[Module]:
        return self.modules.get(name)

    def find_library(self, name: str) -> Optional[Library]:
        return self.libraries.get(name)

    def find_toolchain(self, name: str) -> Optional[Toolchain]:
        return self.toolchains.get(name)

    def referenced_toolchains(self) -> List[str]:
        """Distinct toolchain names referenced by modules, in module order."""
        names: List[str] = []
        for module in self.modules.values():
            if module.toolchain and module.toolchain not in names:
                names.append(module.toolchain)
        return names

    def unresolved_toolchain_modules(self) -> List[str]:
        """Names of modules whose toolchain is not registered."""
        return [
            module.name for module in self.modules.values()
            if module.toolchain and module.toolchain not in self.toolchains
        ]
