"""Execution options for git commands."""

import os

from pydantic import BaseModel, Field

GIT_EXECUTABLE_ENV_VAR = "GITWRAP_GIT_EXECUTABLE"


def _default_git_executable() -> str:
    return os.environ.get(GIT_EXECUTABLE_ENV_VAR) or "git"


class ExecutionOptions(BaseModel):
    """Options applied to every git invocation of a controller."""

    git_executable: str = Field(default_factory=_default_git_executable)
    env: dict[str, str] = Field(default_factory=dict, description="Extra environment variables for git")
    stdin: str | None = Field(default=None, description="Text written to git's standard input")

    def build_env(self) -> dict[str, str] | None:
        """Return the full process environment, or None to inherit it unchanged."""
        if not self.env:
            return None
        return {**os.environ, **self.env}
