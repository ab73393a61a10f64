"""Git operations for gitwrap."""

from __future__ import annotations

import os
from collections.abc import Callable
from typing import TYPE_CHECKING

from loguru import logger

from gitwrap.core.config import ExecutionOptions
from gitwrap.core.progress import CheckoutProgressParser, ProgressAdapter
from gitwrap.core.tools.subprocess import run_command, run_with_progress
from gitwrap.models.progress import CheckoutProgress

if TYPE_CHECKING:
    import subprocess
    from collections.abc import Sequence
    from pathlib import Path

    from gitwrap.core.progress import Progress

CheckoutProgressCallback = Callable[[CheckoutProgress], None]

_CHECKOUT_KIND = "checkout"


class GitController:
    """Runs git commands against a single repository."""

    def __init__(self, repo_path: Path, options: ExecutionOptions | None = None) -> None:
        """Initialize GitController with repository path and execution options."""
        self.repo_path = repo_path
        self.options = options or ExecutionOptions()

    def _command(self, args: Sequence[str]) -> list[str]:
        return [self.options.git_executable, *args]

    def execute(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        """Run a git command in the repository directory."""
        return run_command(
            self._command(args),
            cwd=self.repo_path,
            check=check,
            log_on_error=True,
            env=self.options.build_env(),
            stdin=self.options.stdin,
        )

    def checkout_branch(self, name: str, progress_callback: CheckoutProgressCallback | None = None) -> None:
        """Check out the given branch.

        Args:
            name: The branch to check out.
            progress_callback: Optional callable invoked with the progress of the
                checkout. Supplying it enables git's ``--progress`` flag. The
                callback is first invoked with a zero-progress event, before git
                has produced any output.

        Raises:
            subprocess.CalledProcessError: If git fails.

        """
        if progress_callback is None:
            logger.info(f"Checking out branch [{name}]")
            self.execute("checkout", name, "--")
            return

        title = f"Checking out branch {name}"

        def _to_event(record: Progress) -> CheckoutProgress:
            return CheckoutProgress(
                kind=_CHECKOUT_KIND,
                title=title,
                description=record.text,
                value=record.percent,
                target_branch=name,
            )

        adapter = ProgressAdapter(CheckoutProgressParser(), _to_event, progress_callback)
        progress_callback(CheckoutProgress(kind=_CHECKOUT_KIND, title=title, value=0, target_branch=name))

        logger.info(f"Checking out branch [{name}] with progress")
        run_with_progress(
            self._command(["checkout", "--progress", name, "--"]),
            adapter,
            cwd=self.repo_path,
            log_on_error=True,
            env=self.options.build_env(),
            stdin=self.options.stdin,
        )

    def checkout_paths(self, paths: Sequence[Path]) -> None:
        """Check out the given paths at HEAD."""
        self.checkout(paths, "HEAD")

    def checkout(
        self,
        paths: Sequence[Path],
        commit_sha: str | None = None,
        *,
        merge: bool = False,
        force: bool = False,
    ) -> None:
        """Revert the given files to their state at a commit.

        Args:
            paths: Absolute paths of the files to check out.
            commit_sha: The commit to take the files from. Defaults to the index.
            merge: Recreate the conflicted merge in unmerged paths (``-m``).
            force: Ignore unmerged entries instead of failing (``-f``).

        """
        args = ["checkout"]
        if commit_sha:
            args.append(commit_sha)
        if merge:
            args.append("-m")
        if force:
            args.append("-f")
        args.append("--")
        args.extend(os.path.relpath(path, self.repo_path) for path in paths)
        self.execute(*args)

    def merge(self, branch: str) -> None:
        """Merge the named branch into the current branch."""
        logger.info(f"Merging [{branch}]")
        self.execute("merge", branch)

    def current_branch(self) -> str:
        """Get the name of the checked out branch."""
        result = self.execute("rev-parse", "--abbrev-ref", "HEAD")
        branch = result.stdout.strip()
        if not branch:
            msg = "Git branch name is empty"
            raise ValueError(msg)
        return branch

    def is_clean(self) -> bool:
        """Check if git working directory is clean."""
        result = self.execute("status", "--porcelain", check=False)
        return result.returncode == 0 and not result.stdout.strip()

    def get_current_commit_sha(self) -> str:
        """Get the current commit SHA."""
        result = self.execute("rev-parse", "HEAD", check=True)
        if not result.stdout.strip():
            msg = "Git commit SHA is empty"
            raise ValueError(msg)
        return result.stdout.strip()
