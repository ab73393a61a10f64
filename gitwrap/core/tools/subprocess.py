"""Shared subprocess execution utility."""

from __future__ import annotations

import codecs
import subprocess
import threading
from typing import IO, TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Generator, Mapping
    from pathlib import Path

    from gitwrap.core.progress.adapter import ProgressAdapter

_CHUNK_SIZE = 4096


def run_command(  # noqa: PLR0913
    cmd: list[str],
    *,
    cwd: Path | None = None,
    check: bool = True,
    log_on_error: bool = False,
    env: Mapping[str, str] | None = None,
    stdin: str | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a command capturing stdout and stderr.

    Args:
        cmd: Command and arguments to run.
        cwd: Working directory for the command. Defaults to the current directory.
        check: If True and the command exits non-zero, raise CalledProcessError.
        log_on_error: If True, log stderr/stdout before raising on non-zero exit.
        env: Full environment for the command. Defaults to the current environment.
        stdin: Text written to the command's standard input.

    """
    logger.debug(f"Running {cmd!r} in {cwd}")
    result = subprocess.run(  # noqa: S603
        cmd,
        cwd=cwd,
        capture_output=True,
        text=True,
        check=False,
        env=env,
        input=stdin,
    )
    if result.returncode != 0 and check:
        if log_on_error:
            output = (result.stderr or result.stdout).strip()
            logger.error(f"Command {cmd!r} failed: {output}")
        raise subprocess.CalledProcessError(result.returncode, cmd, result.stdout, result.stderr)
    return result


def _decoded_chunks(stream: IO[bytes], sink: list[str]) -> Generator[str]:
    """Yield decoded text as soon as it is available on a binary stream.

    Decoding is incremental so a multi-byte character split across two reads is
    not mangled. Every decoded chunk is also appended to ``sink``.
    """
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    while True:
        data = stream.read1(_CHUNK_SIZE)  # type: ignore[attr-defined]
        if not data:
            break
        text = decoder.decode(data)
        if text:
            sink.append(text)
            yield text
    tail = decoder.decode(b"", final=True)
    if tail:
        sink.append(tail)
        yield tail


def _drain(stream: IO[bytes], sink: list[bytes]) -> None:
    sink.append(stream.read())


def _feed(stream: IO[bytes], data: bytes) -> None:
    """Write all of ``data`` then close the stream, tolerating a process that exits early."""
    try:
        stream.write(data)
    except BrokenPipeError:
        logger.debug("Process exited before reading all of its input")
    try:
        stream.close()
    except BrokenPipeError:
        pass


def run_with_progress(  # noqa: PLR0913
    cmd: list[str],
    adapter: ProgressAdapter,
    *,
    cwd: Path | None = None,
    check: bool = True,
    log_on_error: bool = False,
    env: Mapping[str, str] | None = None,
    stdin: str | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run a command, streaming its stderr through a progress adapter.

    Stderr is read on the calling thread, so progress callbacks fire there, one
    at a time. Stdin is written and stdout drained on background threads so that no
    pipe can fill up and stall the process.

    A non-zero exit raises CalledProcessError (when ``check`` is set) even if the
    progress callback failed too. Otherwise a callback failure is re-raised
    after the process has exited.
    """
    logger.debug(f"Running {cmd!r} in {cwd} with progress reporting")
    process = subprocess.Popen(  # noqa: S603
        cmd,
        cwd=cwd,
        env=env,
        stdin=subprocess.PIPE if stdin is not None else subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )
    stdout_sink: list[bytes] = []
    stderr_sink: list[str] = []
    stdout_reader = threading.Thread(target=_drain, args=(process.stdout, stdout_sink), daemon=True)
    stdout_reader.start()

    stdin_writer: threading.Thread | None = None
    if stdin is not None and process.stdin is not None:
        stdin_writer = threading.Thread(target=_feed, args=(process.stdin, stdin.encode("utf-8")), daemon=True)
        stdin_writer.start()

    callback_error: Exception | None = None
    with process:
        try:
            adapter.consume(_decoded_chunks(process.stderr, stderr_sink))  # type: ignore[arg-type]
        except Exception as e:  # noqa: BLE001
            callback_error = e
        stdout_reader.join()
        if stdin_writer is not None:
            stdin_writer.join()
        returncode = process.wait()

    stdout = b"".join(stdout_sink).decode("utf-8", errors="replace")
    stderr = "".join(stderr_sink)
    if returncode != 0 and check:
        if log_on_error:
            output = (stderr or stdout).strip()
            logger.error(f"Command {cmd!r} failed: {output}")
        raise subprocess.CalledProcessError(returncode, cmd, stdout, stderr)
    if callback_error is not None:
        raise callback_error
    return subprocess.CompletedProcess(cmd, returncode, stdout, stderr)
