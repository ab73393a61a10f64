"""CLI entry point for gitwrap."""

import subprocess
import sys
from pathlib import Path

import typer
from loguru import logger
from typer import Exit

from gitwrap.core.tools.git import GitController
from gitwrap.models.progress import CheckoutProgress
from gitwrap.ui.rich_ui import RichUI

app = typer.Typer(
    name="gitwrap",
    help="Run git checkouts and merges with live progress",
)


def _validate_path(repo_path: Path, ui: RichUI) -> None:
    """Validate that the repository path exists and is a directory."""
    if not repo_path.exists():
        ui.print_error(f"Path does not exist: {repo_path}")
        raise Exit(code=1)

    if not repo_path.is_dir():
        ui.print_error(f"Path is not a directory: {repo_path}")
        raise Exit(code=1)


def _stderr_sink(message: str) -> None:
    sys.stderr.write(message)


def _fail(ui: RichUI, action: str, error: subprocess.CalledProcessError) -> Exit:
    output = (error.stderr or error.stdout or "").strip()
    ui.print_error(f"Failed to {action}: {output or error}")
    return Exit(code=1)


@app.callback()
def configure(
    verbose: bool = typer.Option(  # noqa: FBT001
        False,  # noqa: FBT003
        "--verbose",
        "-v",
        help="Log every git command that is run",
    ),
) -> None:
    """Configure logging for all commands."""
    logger.remove()
    logger.add(_stderr_sink, level="DEBUG" if verbose else "WARNING")


@app.command()
def checkout(
    branch: str = typer.Argument(..., help="Branch to check out"),
    path: str = typer.Option(".", "--path", "-p", help="Path to the git repository"),
    show_progress: bool = typer.Option(  # noqa: FBT001
        True,  # noqa: FBT003
        "--progress/--no-progress",
        help="Show checkout progress",
    ),
) -> None:
    """Check out a branch."""
    ui = RichUI()
    repo_path = Path(path).resolve()
    _validate_path(repo_path, ui)
    git = GitController(repo_path)

    try:
        if show_progress:
            with ui.create_progress_context() as progress:
                task_id = ui.create_task(progress, f"Checking out branch {branch}")

                def _on_progress(event: CheckoutProgress) -> None:
                    ui.update_task(progress, task_id, event)

                git.checkout_branch(branch, progress_callback=_on_progress)
        else:
            git.checkout_branch(branch)
    except subprocess.CalledProcessError as e:
        raise _fail(ui, f"check out {branch}", e) from e
    except OSError as e:
        logger.exception("Failed to run git")
        ui.print_error(f"Failed to run git: {e}")
        raise Exit(code=1) from e

    ui.print_success(f"On branch: {branch}")


@app.command()
def merge(
    branch: str = typer.Argument(..., help="Branch to merge into the current branch"),
    path: str = typer.Option(".", "--path", "-p", help="Path to the git repository"),
) -> None:
    """Merge a branch into the current branch."""
    ui = RichUI()
    repo_path = Path(path).resolve()
    _validate_path(repo_path, ui)
    git = GitController(repo_path)

    try:
        git.merge(branch)
    except subprocess.CalledProcessError as e:
        raise _fail(ui, f"merge {branch}", e) from e
    except OSError as e:
        logger.exception("Failed to run git")
        ui.print_error(f"Failed to run git: {e}")
        raise Exit(code=1) from e

    ui.print_success(f"Merged {branch}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
