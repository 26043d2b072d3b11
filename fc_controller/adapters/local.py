"""Run commands as local processes."""

from __future__ import annotations

import logging
import os
import subprocess
from typing import Mapping, Optional, Sequence

from fc_common.errors import CommandExecutionError

logger = logging.getLogger(__name__)


class LocalProcessRunner:
    """Thin ``subprocess.run`` wrapper raising typed errors."""

    def run(
        self,
        argv: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> str:
        """Run ``argv`` to completion and return its stdout.

        ``env`` is layered on top of the controller's own environment.
        """
        merged_env = dict(os.environ)
        if env:
            merged_env.update(env)
        context = {"argv": list(argv)}
        logger.debug("Running locally: %s", " ".join(argv))
        try:
            result = subprocess.run(
                list(argv),
                env=merged_env,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise CommandExecutionError(
                f"Command timed out after {timeout}s", context=context, cause=exc
            ) from exc
        except OSError as exc:
            raise CommandExecutionError(
                f"Command could not be started: {exc}", context=context, cause=exc
            ) from exc
        if result.returncode != 0:
            detail = result.stderr.strip() or f"exit code {result.returncode}"
            raise CommandExecutionError(
                f"Command failed: {detail}",
                context={**context, "returncode": result.returncode},
            )
        return result.stdout
