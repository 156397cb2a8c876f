"""
System interaction utilities.

- Command execution and the external dependency installer
- Free disk space probing
- Child process supervision with concurrent output draining
"""

# Command execution
from .commands import DependencyInstaller, run_command, split_jvm_options

# Disk space
from .disk import format_file_size, get_free_space

# Process supervision
from .process_supervisor import ProcessSupervisor, copy_stream

__all__ = [
    # Commands
    "DependencyInstaller",
    "run_command",
    "split_jvm_options",
    # Disk
    "format_file_size",
    "get_free_space",
    # Processes
    "ProcessSupervisor",
    "copy_stream",
]
