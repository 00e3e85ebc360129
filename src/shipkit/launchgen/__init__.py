from .config_loader import LAUNCH_CONFIG_FILE, ConfigLoader
from .file_finder import FileFinder, find_root, find_workspaces, glob_match
from .generator import LaunchGenerator
from .merge import merge_all, merge_configs
from .models import Group, LaunchConfig, LaunchConfiguration

__all__ = [
    "LAUNCH_CONFIG_FILE",
    "ConfigLoader",
    "FileFinder",
    "Group",
    "LaunchConfig",
    "LaunchConfiguration",
    "LaunchGenerator",
    "find_root",
    "find_workspaces",
    "glob_match",
    "merge_all",
    "merge_configs",
]
