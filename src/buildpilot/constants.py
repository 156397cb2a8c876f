"""
Shared constants: environment variable names, property names and defaults.

Centralizes the names that cross process or configuration boundaries so the
loader, the compilation context and the test orchestrator agree on them.
"""


class EnvVars:
    """Environment variables read by the orchestrator."""
    # Remote debugging requested by the CI server
    REMOTE_DEBUG_JVM_OPTIONS = "REMOTE_DEBUG_JVM_OPTIONS"
    REMOTE_DEBUG_TYPE = "REMOTE_DEBUG_TYPE"
    REMOTE_DEBUG_TARGET_TYPE = "REMOTE_DEBUG_TARGET_TYPE"
    REMOTE_DEBUG_TARGET_CLASS = "REMOTE_DEBUG_TARGET_CLASS"

    # CI build metadata
    BUILD_NUMBER = "BUILD_NUMBER"
    BUILD_BRANCH = "BUILD_BRANCH"
    BUILD_BRANCH_IS_DEFAULT = "BUILD_BRANCH_IS_DEFAULT"
    BUILD_CONF_NAME = "BUILD_CONF_NAME"
    BUILD_TEMP_DIR = "BUILD_TEMP_DIR"
    BUILD_CHECKOUT_DIR = "BUILD_CHECKOUT_DIR"


class SystemProperties:
    """System property names passed to the forked test runner."""
    CLASSPATH_FILE = "classpath.file"
    TEST_PATTERNS = "build.test.patterns"
    TEST_GROUPS = "build.test.groups"
    TEST_SORTER = "build.test.sorter"
    BOOTSTRAP_TESTCASES = "bootstrap.testcases"
    PERFORMANCE_TESTS_ONLY = "build.test.performance.only"
    EXCLUDE_ROOTS_FILE = "exclude.tests.roots.file"
    TEST_RUNNER = "build.test.runner"
    PROJECT_CLASSES_OUTPUT_DIRECTORY = "build.project.classes.output.directory"
    COMPILED_CLASSES_ARCHIVE = "build.compiled.classes.archive"
    COMPILED_CLASSES_ARCHIVES_METADATA = "build.compiled.classes.archives.metadata"

    # Properties with this prefix are forwarded to the child with the prefix stripped
    PASSTHROUGH_PREFIX = "pass."


class BuildSteps:
    """Identifiers accepted in BuildOptions.build_steps_to_skip."""
    CI_ARTIFACTS_PUBLICATION = "ci_artifacts_publication"


class ProjectLayout:
    """Relative locations of files inside the community and project homes."""
    COMMUNITY_MARKERS = ("platform/build-scripts", "bin/log.xml", "build.txt")
    MODULES_XML = ".idea/modules.xml"
    PROJECT_MODEL = ".idea/project-model.toml"
    RUN_CONFIGURATIONS_DIR = ".idea/runConfigurations"
    RENAMING_HISTORY_COMPONENT = "ModuleRenamingHistory"
    DEFAULT_TOOLCHAINS_DIR = "build/jdk"
    DEPENDENCIES_PROJECT_DIR = "build/dependencies"
    SNAPSHOTS_DIR = "out/snapshots"
    PROJECT_ARTIFACTS_DIR = "project-artifacts"


class SizeConstants:
    """Byte sizes used by the artifact publication policy."""
    ONE_GB = 1024 * 1024 * 1024
    EAGER_PUBLISH_THRESHOLD = 1000000
    REQUIRED_ADDITIONAL_SPACE = 6 * ONE_GB
    REQUIRED_SPACE_FOR_ARTIFACTS = 9 * ONE_GB


class TimeoutConstants:
    """Timeouts used by the process supervisor."""
    READER_JOIN_TIMEOUT = 5.0
