"""Checks that wrap make targets with a direct-tool fallback."""

from .base import MakeWrapCheck
from .fumpt import FumptCheck
from .lint import LintCheck
from .mod_tidy import ModTidyCheck

__all__ = ["MakeWrapCheck", "FumptCheck", "LintCheck", "ModTidyCheck"]
