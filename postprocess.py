"""Detached post-processing of uploaded batches.

After an upload request has stored its files, an external command is run
against the batch directory. The request never waits for it: the work is
handed to FastAPI's background tasks, which run once the response has been
sent, and any failure ends up in the log only.
"""
import logging
import shlex
import subprocess
from pathlib import Path
from typing import Callable, List, Optional

from fastapi import BackgroundTasks

from config import POSTPROCESS_COMMAND, POSTPROCESS_TIMEOUT
from errors import PostProcessError

logger = logging.getLogger(__name__)


def build_command(folder: Path, command: Optional[str] = None) -> List[str]:
    """Split the configured command line and append the target folder."""
    command = POSTPROCESS_COMMAND if command is None else command
    return shlex.split(command) + [str(folder)]


def run_postprocess(folder: Path, command: Optional[str] = None, timeout: float = POSTPROCESS_TIMEOUT) -> int:
    """Run the post-processing command against ``folder`` and wait for it.

    Returns the exit code. Raises PostProcessError on a non-zero exit, a
    missing executable or a timeout.
    """
    args = build_command(folder, command)
    logger.info("Post-processing %s: %s", folder, " ".join(args))
    try:
        result = subprocess.run(args, capture_output=True, text=True, timeout=timeout, check=False)
    except subprocess.TimeoutExpired as exc:
        raise PostProcessError(f"Post-processing of {folder} timed out after {timeout:g}s") from exc
    except OSError as exc:
        raise PostProcessError(f"Cannot start post-processing command: {exc}") from exc
    if result.returncode != 0:
        raise PostProcessError(
            f"Post-processing of {folder} exited with {result.returncode}: {result.stderr.strip()}"
        )
    logger.info("Post-processing of %s finished", folder)
    return result.returncode


def detach(
    tasks: BackgroundTasks,
    action: Callable[[], object],
    log: logging.Logger = logger,
) -> None:
    """Hand ``action`` off without waiting for it; failures are only logged."""

    def runner() -> None:
        try:
            action()
        except PostProcessError as exc:
            log.error("%s", exc)
        except Exception:
            log.exception("Post-processing failed")

    tasks.add_task(runner)


class PostProcessor:
    """Schedules the configured command for a batch directory."""

    def __init__(self, command: Optional[str] = None, timeout: float = POSTPROCESS_TIMEOUT):
        self.command = POSTPROCESS_COMMAND if command is None else command
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.command.strip())

    def schedule(self, tasks: BackgroundTasks, folder: Path) -> bool:
        """Queue a run against ``folder``. False when the step is disabled."""
        if not self.enabled:
            logger.info("Post-processing disabled, skipping %s", folder)
            return False
        detach(tasks, lambda: run_postprocess(folder, self.command, self.timeout))
        return True


def get_postprocessor() -> PostProcessor:
    """FastAPI dependency for the configured post-processor."""
    return PostProcessor()
