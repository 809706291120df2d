"""Git integration: repository access and hook management."""

from .hooks import HOOK_MARKER, HookInstaller, HookStatus, hook_script
from .repository import Repository, find_repository_root, parse_file_list

__all__ = [
    "Repository",
    "find_repository_root",
    "parse_file_list",
    "HookInstaller",
    "HookStatus",
    "HOOK_MARKER",
    "hook_script",
]
