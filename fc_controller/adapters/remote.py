"""Run commands on remote hosts over SSH using Fabric."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from fabric import Connection
from invoke.exceptions import CommandTimedOut, UnexpectedExit

from fc_common.errors import CommandExecutionError

logger = logging.getLogger(__name__)


class FabricRemoteExecutor:
    """Execute a shell command line on a host, with a bounded connect timeout."""

    def __init__(
        self,
        user: Optional[str] = None,
        port: int = 22,
        key_filename: Optional[str] = None,
        connect_timeout: float = 2.0,
        command_timeout: Optional[float] = None,
    ) -> None:
        self.user = user
        self.port = port
        self.key_filename = key_filename
        self.connect_timeout = connect_timeout
        self.command_timeout = command_timeout

    def _get_connection(self, host: str) -> Connection:
        connect_kwargs: Dict[str, Any] = {"banner_timeout": self.connect_timeout}
        if self.key_filename:
            connect_kwargs["key_filename"] = str(Path(self.key_filename).expanduser())
        return Connection(
            host=host,
            user=self.user,
            port=self.port,
            connect_timeout=self.connect_timeout,
            connect_kwargs=connect_kwargs,
        )

    def run(self, host: str, command: str) -> str:
        """Run ``command`` on ``host`` and return its stdout."""
        context = {"host": host, "command": command}
        logger.debug("Running on %s: %s", host, command)
        try:
            with self._get_connection(host) as conn:
                result = conn.run(
                    command,
                    hide=True,
                    warn=False,
                    in_stream=False,
                    timeout=self.command_timeout,
                )
        except UnexpectedExit as exc:
            detail = exc.result.stderr.strip() or f"exit code {exc.result.exited}"
            raise CommandExecutionError(
                f"Remote command failed on {host}: {detail}",
                context={**context, "returncode": exc.result.exited},
                cause=exc,
            ) from exc
        except CommandTimedOut as exc:
            raise CommandExecutionError(
                f"Remote command timed out on {host}", context=context, cause=exc
            ) from exc
        except Exception as exc:
            raise CommandExecutionError(
                f"Could not reach {host}: {exc}", context=context, cause=exc
            ) from exc
        return result.stdout
