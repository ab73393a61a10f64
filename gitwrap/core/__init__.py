"""Core modules for gitwrap."""

from gitwrap.core.config import ExecutionOptions
from gitwrap.core.tools.git import GitController

__all__ = ["ExecutionOptions", "GitController"]
