"""
Project model loading.

Parses the project description into the module/library graph, registers the
toolchains the modules need and reads the module renaming history of both
the project home and the community home.
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from ..config.loader import load_project_model_file
from ..constants import ProjectLayout
from ..messages import BuildMessages
from ..models.options import BuildOptions
from ..models.project import (
    Dependency,
    DependencyScope,
    Library,
    Module,
    ModuleRenameMap,
    ProjectModel,
)
from ..validation import ConfigurationError, ValidationError, validate_enum_choice
from .rename_history import load_module_rename_map
from .toolchains import resolve_toolchains

logger = logging.getLogger(__name__)


@dataclass
class LoadedProject:
    """Result of loading a project."""
    model: ProjectModel
    rename_map: ModuleRenameMap
    community_home: Path
    project_home: Path
    # Home of the primary toolchain
    jdk_home: Path


def _resolve_path(value: Any, base: Path, field_name: str) -> Path:
    if not isinstance(value, str) or not value:
        raise ConfigurationError(f"{field_name} must be a non-empty path string, got {value!r}")
    path = Path(value)
    return path if path.is_absolute() else (base / path)


def _resolve_root(root: str, base: Path) -> str:
    # URLs such as jrt:// are kept as they are
    if "://" in root or Path(root).is_absolute():
        return root
    return str(base / root)


def _parse_dependency(entry: Any, module_name: str) -> Dependency:
    if not isinstance(entry, dict):
        raise ConfigurationError(f"Dependency of module '{module_name}' must be a table, got {entry!r}")

    kinds = [kind for kind in ("module", "library") if kind in entry]
    if len(kinds) != 1:
        raise ConfigurationError(
            f"Dependency of module '{module_name}' must declare exactly one of 'module' or 'library': {entry!r}"
        )
    kind = kinds[0]

    try:
        scope = validate_enum_choice(
            entry.get("scope", DependencyScope.COMPILE.value),
            valid_choices=[scope.value for scope in DependencyScope],
            field_name=f"modules.{module_name}.dependencies.scope",
            case_sensitive=False,
        )
    except ValidationError as e:
        raise ConfigurationError(str(e)) from e

    return Dependency(kind=kind, name=str(entry[kind]), scope=DependencyScope(scope))


def _parse_module(entry: Any, project_home: Path) -> Module:
    if not isinstance(entry, dict) or not isinstance(entry.get("name"), str) or not entry["name"]:
        raise ConfigurationError(f"Module entry must be a table with a non-empty 'name': {entry!r}")
    name = entry["name"]

    output = entry.get("output")
    test_output = entry.get("test_output")
    return Module(
        name=name,
        toolchain=entry.get("toolchain"),
        output=_resolve_path(output, project_home, f"modules.{name}.output") if output is not None else None,
        test_output=(_resolve_path(test_output, project_home, f"modules.{name}.test_output")
                     if test_output is not None else None),
        inherit_output=bool(entry.get("inherit_output", True)),
        content_roots=tuple(
            _resolve_path(root, project_home, f"modules.{name}.content_roots")
            for root in entry.get("content_roots", [])
        ),
        dependencies=tuple(_parse_dependency(dep, name) for dep in entry.get("dependencies", [])),
    )


def parse_project_model(data: Dict[str, Any], project_home: Path) -> ProjectModel:
    """
    Build a ProjectModel from a parsed project description.

    Raises:
        ConfigurationError: On malformed entries or duplicate names
    """
    libraries: Dict[str, Library] = {}
    for entry in data.get("libraries", []):
        if not isinstance(entry, dict) or not entry.get("name"):
            raise ConfigurationError(f"Library entry must be a table with a non-empty 'name': {entry!r}")
        name = entry["name"]
        if name in libraries:
            raise ConfigurationError(f"Duplicate library '{name}' in the project model")
        libraries[name] = Library(
            name=name,
            roots=tuple(_resolve_root(str(root), project_home) for root in entry.get("roots", [])),
        )

    modules: Dict[str, Module] = {}
    for entry in data.get("modules", []):
        module = _parse_module(entry, project_home)
        if module.name in modules:
            raise ConfigurationError(f"Duplicate module '{module.name}' in the project model")
        modules[module.name] = module

    declared_output = data.get("output")
    return ProjectModel(
        home=project_home,
        modules=modules,
        libraries=libraries,
        declared_output=(_resolve_path(declared_output, project_home, "output")
                         if declared_output is not None else None),
    )


class ProjectModelLoader:
    """
    Loads a project and its toolchains.

    Args:
        messages: Build messages receiving warnings and fatal errors
        env: Environment used for toolchain lookup (defaults to os.environ)
    """

    def __init__(self, messages: BuildMessages, env: Optional[Mapping[str, str]] = None):
        self.messages = messages
        self.env = env if env is not None else os.environ

    def check_markers(self, community_home: Path, project_home: Path) -> None:
        """Fail unless both homes contain the expected marker files."""
        missing = [marker for marker in ProjectLayout.COMMUNITY_MARKERS
                   if not (community_home / marker).exists()]
        if missing:
            self.messages.error(
                f"communityHome ({community_home}) doesn't point to a directory containing "
                f"community sources: missing {', '.join(missing)}"
            )
        for home in (community_home, project_home):
            if not (home / ProjectLayout.MODULES_XML).is_file():
                self.messages.error(f"Incorrect project home: {home / ProjectLayout.MODULES_XML} doesn't exist")
        if not (project_home / ProjectLayout.PROJECT_MODEL).is_file():
            self.messages.error(f"Project model {project_home / ProjectLayout.PROJECT_MODEL} doesn't exist")

    def load(self, community_home: Path, project_home: Path, options: BuildOptions) -> LoadedProject:
        """
        Load the project under `project_home`.

        Raises:
            ConfigurationError: If a marker is missing, the description is
                malformed or the primary toolchain cannot be found
        """
        community_home = Path(community_home).resolve()
        project_home = Path(project_home).resolve()
        self.check_markers(community_home, project_home)

        model_file = project_home / ProjectLayout.PROJECT_MODEL
        try:
            model_data = load_project_model_file(model_file)
        except tomllib.TOMLDecodeError as e:
            self.messages.error(f"Cannot parse {model_file}: {e}", cause=e)
        model = parse_project_model(model_data, project_home)
        self.messages.info(
            f"Loaded project {project_home}: {len(model.modules)} modules, {len(model.libraries)} libraries"
        )

        jdk_home = resolve_toolchains(model, project_home, options, self.env, self.messages)

        homes: List[Path] = [project_home]
        if community_home != project_home:
            homes.append(community_home)
        rename_map = load_module_rename_map(homes)
        if len(rename_map):
            logger.debug(f"Module rename history: {len(rename_map)} entries")

        unresolved = model.unresolved_toolchain_modules()
        if unresolved:
            logger.debug(f"Modules without a registered toolchain: {', '.join(unresolved)}")

        return LoadedProject(
            model=model,
            rename_map=rename_map,
            community_home=community_home,
            project_home=project_home,
            jdk_home=jdk_home,
        )
