"""
JUnit run configuration descriptors.

Run configurations are stored one per file under `.idea/runConfigurations`:

    <component name="ProjectRunConfigurationManager">
      <configuration name="Foo Tests" type="JUnit">
        <module name="intellij.foo" />
        <option name="TEST_OBJECT" value="class" />
        <option name="MAIN_CLASS_NAME" value="com.acme.FooTest" />
        <option name="VM_PARAMETERS" value="-ea -Xmx1g" />
        ...
      </configuration>
    </component>
"""

import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional

from ..constants import ProjectLayout
from ..messages import BuildMessages
from ..models.runtime import RunConfiguration
from ..system.commands import split_jvm_options

logger = logging.getLogger(__name__)

_UNSAFE_FILE_NAME_CHARS = re.compile(r"[^A-Za-z0-9]")


def run_configuration_file_name(name: str) -> str:
    return _UNSAFE_FILE_NAME_CHARS.sub("_", name) + ".xml"


def find_run_configuration(project_home: Path, name: str, messages: BuildMessages) -> Path:
    """
    Locate the descriptor of run configuration `name`.

    Raises:
        ConfigurationError: If the descriptor does not exist
    """
    config_file = Path(project_home) / ProjectLayout.RUN_CONFIGURATIONS_DIR / run_configuration_file_name(name)
    if not config_file.is_file():
        messages.error(f"Cannot find run configurations for '{name}': {config_file} doesn't exist")
    return config_file


def _options(configuration: ET.Element) -> Dict[str, str]:
    return {
        option.get("name"): option.get("value", "")
        for option in configuration.findall("option")
        if option.get("name")
    }


def _test_class_patterns(configuration: ET.Element, options: Dict[str, str],
                         config_file: Path, messages: BuildMessages) -> List[str]:
    test_object = options.get("TEST_OBJECT")
    if test_object == "class":
        return [options.get("MAIN_CLASS_NAME", "")]
    if test_object == "package":
        return [f"{options.get('PACKAGE_NAME', '')}.*"]
    if test_object == "pattern":
        return [
            pattern.get("testClass")
            for pattern in configuration.findall("patterns/pattern")
            if pattern.get("testClass")
        ]
    messages.error(f"Run configuration {config_file}: unsupported test object '{test_object}'")
    return []


def load_run_configuration(config_file: Path, messages: BuildMessages) -> RunConfiguration:
    """
    Parse a JUnit run configuration descriptor.

    Raises:
        ConfigurationError: If the file is malformed, is not a JUnit
            configuration or uses an unsupported test object
    """
    try:
        root = ET.parse(config_file).getroot()
    except ET.ParseError as e:
        messages.error(f"Cannot parse run configuration {config_file}: {e}", cause=e)

    configuration: Optional[ET.Element] = root if root.tag == "configuration" else root.find("configuration")
    if configuration is None:
        messages.error(f"Cannot find 'configuration' tag in {config_file}")
    if configuration.get("type") != "JUnit":
        messages.error(
            f"Run configuration {config_file} is of type '{configuration.get('type')}', only JUnit is supported"
        )

    options = _options(configuration)
    module_element = configuration.find("module")
    module_name = module_element.get("name") if module_element is not None else None
    if not module_name:
        messages.error(f"Run configuration {config_file} doesn't specify a module")

    env_variables = {
        env.get("name"): env.get("value", "")
        for env in configuration.findall("envs/env")
        if env.get("name")
    }

    required_artifacts: List[str] = []
    for option in configuration.findall("method/option"):
        if option.get("name") == "BuildArtifacts":
            required_artifacts.extend(
                artifact.get("name") for artifact in option.findall("artifact") if artifact.get("name")
            )

    try:
        vm_parameters = split_jvm_options(options.get("VM_PARAMETERS", ""))
    except ValueError as e:
        messages.error(f"Run configuration {config_file} has malformed VM parameters: {e}", cause=e)

    run_configuration = RunConfiguration(
        name=configuration.get("name", config_file.stem),
        module_name=module_name,
        test_class_patterns=tuple(_test_class_patterns(configuration, options, config_file, messages)),
        vm_parameters=tuple(vm_parameters),
        env_variables=env_variables,
        required_artifacts=tuple(required_artifacts),
    )
    logger.debug(f"Loaded run configuration '{run_configuration.name}' from {config_file}")
    return run_configuration


def load_run_configurations(project_home: Path, names: List[str],
                            messages: BuildMessages) -> List[RunConfiguration]:
    """Load the named run configurations, in order."""
    return [
        load_run_configuration(find_run_configuration(project_home, name, messages), messages)
        for name in names
    ]
