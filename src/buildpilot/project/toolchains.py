"""
Toolchain (JDK) resolution and registration.

The primary toolchain is derived from the configured version number. Every
other toolchain referenced by a module is resolved by the same strategy after
stripping its vendor prefix ("corretto-11" -> "11"). A toolchain is looked up
in the toolchains directory first and then in a `JDK_<version>_x64`
environment variable.
"""

import logging
from pathlib import Path
from typing import List, Mapping, Optional

from ..constants import ProjectLayout
from ..messages import BuildMessages
from ..models.options import BuildOptions
from ..models.project import ProjectModel, Toolchain

logger = logging.getLogger(__name__)


def toolchain_name_for_version(version: int) -> str:
    """Versions below 9 use the legacy "1.N" form."""
    return f"1.{version}" if version < 9 else str(version)


def toolchain_env_var(name: str) -> str:
    """Environment variable holding a toolchain home: "1.8" -> JDK_18_x64."""
    return f"JDK_{name.replace('.', '')}_x64"


def strip_vendor_prefix(name: str) -> str:
    """Drop the text before the first "-", if any."""
    _, separator, rest = name.partition("-")
    return rest if separator else name


def resolve_toolchains_dir(project_home: Path, jdks_target_dir: Optional[str]) -> Path:
    """The configured target dir if it exists, else `<projectHome>/build/jdk`."""
    if jdks_target_dir and Path(jdks_target_dir).exists():
        return Path(jdks_target_dir)
    return Path(project_home) / ProjectLayout.DEFAULT_TOOLCHAINS_DIR


def find_toolchain_home(name: str, toolchains_dir: Path, env: Mapping[str, str]) -> Optional[Path]:
    """
    Locate an installation of toolchain `name`.

    Returns:
        The canonical home directory, or None if neither the toolchains
        directory nor the environment variable points to one
    """
    candidate = toolchains_dir / name
    if candidate.is_dir():
        # macOS bundles keep the actual home inside the bundle
        bundle_home = candidate / "Contents" / "Home"
        return (bundle_home if bundle_home.is_dir() else candidate).resolve()

    env_var = toolchain_env_var(name)
    env_value = env.get(env_var)
    if env_value:
        if Path(env_value).is_dir():
            return Path(env_value).resolve()
        logger.debug(f"{env_var} points to a missing directory: {env_value}")
    return None


def _initial_roots(home: Path) -> List[str]:
    lib_dir = home / "jre" / "lib"
    if not lib_dir.is_dir():
        lib_dir = home / "lib"
    if not lib_dir.is_dir():
        return []
    return [str(jar) for jar in sorted(lib_dir.glob("*.jar"))]


def define_toolchain(name: str, home: Path) -> Toolchain:
    toolchain = Toolchain(name=name, home=home, roots=_initial_roots(home))
    logger.info(f"'{name}' toolchain defined at {home}")
    return toolchain


def read_release_modules(home: Path) -> List[str]:
    """
    Module roots listed in the `MODULES` entry of `<home>/release`.

    Returns `jrt://<home>!/<module>` URLs; an installation without a release
    file contributes nothing.
    """
    release_file = Path(home) / "release"
    if not release_file.is_file():
        return []

    for line in release_file.read_text(encoding="utf-8", errors="replace").splitlines():
        key, separator, value = line.partition("=")
        if separator and key.strip() == "MODULES":
            modules = value.strip().strip('"').split()
            return [f"jrt://{home}!/{module}" for module in modules]
    return []


def merge_release_modules(toolchain: Toolchain) -> int:
    """Add release file modules not yet present in the toolchain roots."""
    added = 0
    for root in read_release_modules(toolchain.home):
        if toolchain.add_root(root):
            added += 1
    return added


def resolve_toolchains(
    model: ProjectModel,
    project_home: Path,
    options: BuildOptions,
    env: Mapping[str, str],
    messages: BuildMessages,
) -> Path:
    """
    Register the primary toolchain and every toolchain modules refer to.

    Returns:
        Home of the primary toolchain

    Raises:
        ConfigurationError: If the primary toolchain cannot be found
    """
    toolchains_dir = resolve_toolchains_dir(project_home, options.jdks_target_dir)
    primary_name = toolchain_name_for_version(options.toolchain_version)

    primary_home = find_toolchain_home(primary_name, toolchains_dir, env)
    if primary_home is None:
        messages.error(
            f"Cannot find JDK {primary_name}: neither {toolchains_dir / primary_name} nor "
            f"${toolchain_env_var(primary_name)} points to an installation"
        )
    model.toolchains[primary_name] = define_toolchain(primary_name, primary_home)

    for name in model.referenced_toolchains():
        if name in model.toolchains:
            continue
        home = find_toolchain_home(strip_vendor_prefix(name), toolchains_dir, env)
        if home is None:
            messages.warning(f"JDK {name} is required to compile the project but it's not found")
            continue
        model.toolchains[name] = define_toolchain(name, home)

    for toolchain in model.toolchains.values():
        added = merge_release_modules(toolchain)
        if added:
            logger.debug(f"Added {added} release modules to '{toolchain.name}'")

    return primary_home
