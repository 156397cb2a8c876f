"""
Module renaming history.

Reads the `ModuleRenamingHistory` component of `.idea/modules.xml`:

    <component name="ModuleRenamingHistory">
      <module old-name="intellij.old" new-name="intellij.new" />
    </component>
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, Sequence

from ..constants import ProjectLayout
from ..models.project import ModuleRenameMap
from ..validation import ConfigurationError

logger = logging.getLogger(__name__)


def read_rename_history(home: Path) -> Dict[str, str]:
    """
    Read the old-name -> new-name pairs declared under `home`.

    Raises:
        ConfigurationError: If `.idea/modules.xml` is missing or malformed
    """
    modules_xml = Path(home) / ProjectLayout.MODULES_XML
    if not modules_xml.is_file():
        raise ConfigurationError(f"Incorrect project home: {modules_xml} doesn't exist")

    try:
        root = ET.parse(modules_xml).getroot()
    except ET.ParseError as e:
        raise ConfigurationError(f"Cannot parse {modules_xml}: {e}") from e

    mapping: Dict[str, str] = {}
    for component in root.iter("component"):
        if component.get("name") != ProjectLayout.RENAMING_HISTORY_COMPONENT:
            continue
        for module in component.findall("module"):
            old_name = module.get("old-name")
            new_name = module.get("new-name")
            if old_name and new_name:
                mapping[old_name] = new_name

    logger.debug(f"Read {len(mapping)} module renames from {modules_xml}")
    return mapping


def load_module_rename_map(homes: Sequence[Path]) -> ModuleRenameMap:
    """
    Merge the rename history of several homes in the given order.

    Entries read later override earlier ones with the same legacy name.
    """
    return ModuleRenameMap.merged([read_rename_history(home) for home in homes])
