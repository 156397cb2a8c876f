"""
Compilation context.

The context owns the loaded project, the build paths and the validated
options. It computes module output directories and runtime classpaths and
resolves module names, redirecting legacy names through the rename history.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Union

from ..constants import ProjectLayout
from ..messages import BuildMessages
from ..models.options import BuildOptions
from ..models.project import Module, ModuleRenameMap, ProjectModel
from ..models.runtime import BuildPaths, CompilationData
from ..project.loader import LoadedProject, ProjectModelLoader
from ..session import BuildSession
from ..system.commands import DependencyInstaller
from ..system.disk import format_file_size, get_free_space
from .classpath import TestClasspathBuilder
from .option_rules import validate_options

logger = logging.getLogger(__name__)

# Computes the default build output root when the options don't set one.
OutputRootEvaluator = Callable[[LoadedProject], Union[str, Path]]

DEBUG_LOGGING_CATEGORIES_PROPERTY = "build.debug.logging.categories"
JDKS_TARGET_DIR_PROPERTY = "jdks.target.dir"


def default_output_root(project: LoadedProject) -> Path:
    return project.project_home / "out" / "build"


class CompilationContext:
    """
    State of a compilation: project, paths, options and shared compilation data.

    Use `CompilationContext.create()` for a top-level context and
    `create_copy()` for nested invocations that must not reload the project.
    """

    def __init__(
        self,
        project: LoadedProject,
        options: BuildOptions,
        messages: BuildMessages,
        output_root_evaluator: OutputRootEvaluator = default_output_root,
        env: Optional[Mapping[str, str]] = None,
        system_properties: Optional[Mapping[str, str]] = None,
    ):
        self.project = project
        self.options = options
        self.messages = messages
        self.env = env if env is not None else os.environ
        self.system_properties: Dict[str, str] = dict(system_properties or {})

        build_output_root = Path(options.output_root_path or output_root_evaluator(project))
        log_dir = Path(options.log_path) if options.log_path is not None else build_output_root / "log"
        self.paths = BuildPaths.create(
            community_home=project.community_home,
            project_home=project.project_home,
            build_output_root=build_output_root,
            jdk_home=project.jdk_home,
            log_dir=log_dir,
        )

        self.compilation_data: Optional[CompilationData] = None
        self.project_output_directory: Optional[Path] = None
        self.exported_properties: Dict[str, str] = {}
        self._classpath_builder = TestClasspathBuilder(project.model, self._output_directory)

    @classmethod
    def create(
        cls,
        community_home: Union[str, Path],
        project_home: Union[str, Path],
        options: Optional[BuildOptions] = None,
        messages: Optional[BuildMessages] = None,
        output_root_evaluator: OutputRootEvaluator = default_output_root,
        env: Optional[Mapping[str, str]] = None,
        system_properties: Optional[Mapping[str, str]] = None,
    ) -> "CompilationContext":
        """
        Load the project and prepare a top-level context for a build.

        Raises:
            ConfigurationError: If the project cannot be loaded or the
                options point to a missing project output
        """
        options = options or BuildOptions()
        messages = messages or BuildMessages()
        env = env if env is not None else os.environ

        log_free_disk_space(messages, Path(project_home), "before loading the project")
        project = ProjectModelLoader(messages, env).load(Path(community_home), Path(project_home), options)

        context = cls(project, options, messages, output_root_evaluator, env, system_properties)
        context.prepare_for_build()
        return context

    @property
    def project_model(self) -> ProjectModel:
        return self.project.model

    @property
    def rename_map(self) -> ModuleRenameMap:
        return self.project.rename_map

    @property
    def project_artifacts_dir(self) -> Path:
        return self.paths.build_output_root / ProjectLayout.PROJECT_ARTIFACTS_DIR

    def prepare_for_build(self) -> None:
        """
        Validate options, recreate the log directory and resolve outputs.

        Raises:
            ConfigurationError: If the project output directory is invalid
        """
        self.options = validate_options(self.options, self.env, self.messages)

        if self.paths.log_dir.exists():
            shutil.rmtree(self.paths.log_dir)
        self.paths.log_dir.mkdir(parents=True)

        self.compilation_data = CompilationData(
            incremental_cache_dir=self.paths.build_output_root / ".jps-build-data",
            compilation_log_file=self.paths.log_dir / "compilation.log",
            debug_log_categories=self.system_properties.get(DEBUG_LOGGING_CATEGORIES_PROPERTY, ""),
        )

        self.project_output_directory = self.resolve_output_directory()
        logger.debug(f"Project output directory: {self.project_output_directory}")

        if not self.options.use_compiled_classes_from_project_output:
            self.messages.info(f"Incremental compilation: {str(self.options.incremental_compilation).lower()}")

        self.exported_properties = self.module_output_properties()
        logger.debug(f"Exported {len(self.exported_properties)} module output properties")

    def resolve_output_directory(self) -> Path:
        """
        The directory holding compiled classes of all modules.

        Raises:
            ConfigurationError: If compiled classes from the project output
                must be used but that directory doesn't exist
        """
        if self.options.project_classes_output_directory:
            return Path(self.options.project_classes_output_directory).absolute()

        if self.options.use_compiled_classes_from_project_output:
            output_dir = self.project_model.declared_output
            if output_dir is None or not output_dir.exists():
                self.messages.error(
                    f"'use_compiled_classes_from_project_output' is enabled, but the project output "
                    f"directory {output_dir} doesn't exist"
                )
            return output_dir

        return self.paths.build_output_root / "classes"

    def get_artifact_output_path(self, artifact_name: str) -> Path:
        """Project artifacts are built into `<outputRoot>/project-artifacts/<name>`."""
        return self.project_artifacts_dir / Path(artifact_name).name

    def _output_directory(self, module: Module, for_tests: bool) -> Optional[Path]:
        if module.inherit_output:
            if self.project_output_directory is None:
                return None
            return self.project_output_directory / ("test" if for_tests else "production") / module.name
        return module.test_output if for_tests else module.output

    def get_module_output_path(self, module: Module, for_tests: bool = False) -> str:
        """
        Absolute output directory of `module`.

        Raises:
            ConfigurationError: If the module has no output directory
        """
        output = self._output_directory(module, for_tests)
        if output is None:
            self.messages.error(f"Output directory for '{module.name}' isn't set")
        return str(output.absolute())

    def get_module_tests_output_path(self, module: Module) -> str:
        return self.get_module_output_path(module, for_tests=True)

    def get_module_runtime_classpath(self, module: Module, for_tests: bool) -> List[str]:
        """Recursive runtime classpath; toolchain roots are left out for tests."""
        return self._classpath_builder.build(module, for_tests)

    def get_module_production_classpath_without_sdk(self, module: Module) -> List[str]:
        return self._classpath_builder.build(module, for_tests=False, without_sdk=True)

    def find_module(self, name: str) -> Optional[Module]:
        """
        Find a module by its current or legacy name.

        A legacy name is redirected to the current one with a warning.
        """
        actual_name = self.rename_map.new_name(name)
        if actual_name is not None:
            self.messages.warning(
                f"Old module name '{name}' is used in the build scripts; use the new name '{actual_name}' instead"
            )
        else:
            actual_name = name
        return self.project_model.find_module(actual_name)

    def find_required_module(self, name: str) -> Module:
        """
        Raises:
            ConfigurationError: If no module exists under `name` or its new name
        """
        module = self.find_module(name)
        if module is None:
            self.messages.error(f"Cannot find required module '{name}' in the project")
        return module

    def get_old_module_name(self, new_name: str) -> Optional[str]:
        return self.rename_map.old_name(new_name)

    def module_output_properties(self) -> Dict[str, str]:
        """`module.<name>.output.{main,test}` for the current and the legacy name of every module."""
        properties: Dict[str, str] = {}
        for module in self.project_model.modules.values():
            for for_tests in (True, False):
                kind = "test" if for_tests else "main"
                output = self.get_module_output_path(module, for_tests)
                for name in (module.name, self.get_old_module_name(module.name)):
                    if name is not None:
                        properties[f"module.{name}.output.{kind}"] = output
        return properties

    def setup_compilation_dependencies(self, session: BuildSession, installer: DependencyInstaller) -> None:
        """Install toolchains once per build session."""
        arguments = [installer.config.compilation_task]
        if self.options.jdks_target_dir is not None:
            arguments.append(f"-D{JDKS_TARGET_DIR_PROPERTY}={self.options.jdks_target_dir}")
        session.run_once(
            "compilation-dependencies",
            lambda: installer.run("Setting up compilation dependencies", *arguments),
        )

    def create_copy(
        self,
        messages: BuildMessages,
        options: BuildOptions,
        output_root_evaluator: OutputRootEvaluator = default_output_root,
    ) -> "CompilationContext":
        """
        A context for a nested invocation.

        The copy shares the project model, the rename map, the exported
        properties and the compilation data object with this context;
        options and messages are its own.
        """
        copy = CompilationContext(
            self.project, options, messages, output_root_evaluator, self.env, self.system_properties
        )
        copy.compilation_data = self.compilation_data
        copy.project_output_directory = self.project_output_directory
        copy.exported_properties = self.exported_properties
        return copy

    def log_free_disk_space(self, phase: str) -> None:
        log_free_disk_space(self.messages, self.paths.project_home, phase)


def log_free_disk_space(messages: BuildMessages, directory: Path, phase: str) -> None:
    try:
        free_space = get_free_space(directory)
    except OSError as e:
        messages.debug(f"Cannot determine free disk space {phase}: {e}")
        return
    messages.debug(f"Free disk space {phase}: {format_file_size(free_space)} (on disk containing {directory})")
