"""
Runtime classpath computation.

The runtime classpath of a module lists, depth first and without
duplicates, the module's own output, then the outputs and library roots of
its runtime dependencies, recursively. For a test run the test outputs are
included and all dependency scopes count.
"""

import logging
from pathlib import Path
from typing import Callable, List, Optional, Set

from ..models.project import Module, ProjectModel

logger = logging.getLogger(__name__)

# Resolves the output directory of a module, None when it has none.
OutputResolver = Callable[[Module, bool], Optional[Path]]


class TestClasspathBuilder:
    """
    Computes recursive runtime classpaths over a project model.

    Args:
        model: The loaded project model
        output_resolver: Returns a module's production (False) or test
            (True) output directory
    """

    __test__ = False

    def __init__(self, model: ProjectModel, output_resolver: OutputResolver):
        self.model = model
        self.output_resolver = output_resolver

    def build(self, module: Module, for_tests: bool, without_sdk: Optional[bool] = None) -> List[str]:
        """
        Runtime classpath of `module` as absolute path strings.

        Args:
            module: Root module
            for_tests: Include test outputs and test-only dependencies
            without_sdk: Leave out toolchain roots; defaults to `for_tests`
                so a test run never inherits the roots of the toolchains
                the tested modules compile against
        """
        if without_sdk is None:
            without_sdk = for_tests

        roots: List[str] = []
        seen_roots: Set[str] = set()
        visited: Set[str] = set()

        def add(root: str) -> None:
            if root not in seen_roots:
                seen_roots.add(root)
                roots.append(root)

        def visit(current: Module) -> None:
            if current.name in visited:
                return
            visited.add(current.name)

            if not without_sdk:
                for root in self._toolchain_roots(current):
                    add(root)

            outputs = [True, False] if for_tests else [False]
            for tests in outputs:
                output = self.output_resolver(current, tests)
                if output is not None:
                    add(str(Path(output).absolute()))

            for dependency in current.dependencies:
                if not dependency.scope.is_in_runtime(for_tests):
                    continue
                if dependency.is_module:
                    target = self.model.find_module(dependency.name)
                    if target is None:
                        logger.debug(f"Module '{current.name}' depends on unknown module '{dependency.name}'")
                        continue
                    visit(target)
                else:
                    library = self.model.find_library(dependency.name)
                    if library is None:
                        logger.debug(f"Module '{current.name}' depends on unknown library '{dependency.name}'")
                        continue
                    for root in library.roots:
                        add(root)

        visit(module)
        return roots

    def _toolchain_roots(self, module: Module) -> List[str]:
        if module.toolchain is None:
            return []
        toolchain = self.model.find_toolchain(module.toolchain)
        if toolchain is None:
            return []
        # jrt:// module roots are served by the runtime itself
        return [root for root in toolchain.roots if "://" not in root]
