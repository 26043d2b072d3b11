"""Issue start/stop/kill to role instances, locally or over SSH."""

from __future__ import annotations

import logging
import shlex
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Protocol, Sequence

from fc_common.errors import DispatchFailure, wrap_error
from fc_controller.identity import LocalIdentity
from fc_controller.models.roles import ControlCommand, Role
from fc_controller.models.settings import ControlSettings
from fc_controller.models.topology import ServiceInstance

logger = logging.getLogger(__name__)

# Worker launches issued before waiting for the outstanding ones.
WORKER_START_BATCH = 72


class LocalRunner(Protocol):
    def run(
        self,
        argv: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> str:
        ...


class RemoteExecutor(Protocol):
    def run(self, host: str, command: str) -> str:
        ...


@dataclass(frozen=True)
class DispatchOutcome:
    """Result of one control command against one instance."""

    instance: ServiceInstance
    command: ControlCommand
    local: bool
    error: Optional[DispatchFailure] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchReport:
    """Outcomes of a batched launch plus the number of joins it took."""

    outcomes: List[DispatchOutcome] = field(default_factory=list)
    barriers: int = 0

    @property
    def failures(self) -> List[DispatchOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]


class Dispatcher:
    """Fan control commands out to instances on a thread pool.

    Every instance dispatch is a future; callers join explicitly. Failures
    are logged and reported in the outcome, never retried here.
    """

    def __init__(
        self,
        settings: ControlSettings,
        identity: LocalIdentity,
        local_runner: LocalRunner,
        remote_executor: RemoteExecutor,
        max_workers: Optional[int] = None,
    ) -> None:
        self.settings = settings
        self.identity = identity
        self.local_runner = local_runner
        self.remote_executor = remote_executor
        self._pool = ThreadPoolExecutor(
            max_workers=max_workers or WORKER_START_BATCH * settings.workers_per_host,
            thread_name_prefix="fc-dispatch",
        )

    def __enter__(self) -> "Dispatcher":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def close(self) -> None:
        self._pool.shutdown(wait=True)

    def instances(self, role: Role, host: str) -> List[ServiceInstance]:
        """Expand ``host`` into the instances of ``role`` it runs."""
        count = self.settings.workers_per_host if role.multi_instance else 1
        numbered = role.multi_instance and count > 1
        return [
            ServiceInstance(role=role, host=host, index=index, numbered=numbered)
            for index in range(1, count + 1)
        ]

    def service_argv(self, instance: ServiceInstance, command: ControlCommand) -> List[str]:
        prefix = shlex.split(self.settings.server_cmd_prefix)
        script = shlex.split(self.settings.service_script)
        return [*prefix, *script, instance.role.value, command.value]

    def remote_command_line(self, instance: ServiceInstance, command: ControlCommand) -> str:
        assignment = f"{self.settings.instance_env_var}={shlex.quote(instance.instance_env)}"
        return f"{assignment} {shlex.join(self.service_argv(instance, command))}"

    def _run_instance(self, instance: ServiceInstance, command: ControlCommand) -> DispatchOutcome:
        local = self.identity.is_local(instance.host)
        try:
            if local:
                self.local_runner.run(
                    self.service_argv(instance, command),
                    env={self.settings.instance_env_var: instance.instance_env},
                    timeout=self.settings.command_timeout,
                )
            else:
                self.remote_executor.run(
                    instance.host, self.remote_command_line(instance, command)
                )
        except Exception as exc:
            failure = wrap_error(
                DispatchFailure,
                f"Failed to {command.value} {instance.identity}: {exc}",
                context={
                    "role": instance.role.value,
                    "host": instance.host,
                    "instance": instance.index,
                    "command": command.value,
                    "local": local,
                },
                cause=exc,
            )
            logger.warning(str(failure))
            return DispatchOutcome(instance=instance, command=command, local=local, error=failure)
        logger.info(
            "%s %s (%s)",
            command.value,
            instance.identity,
            "local" if local else "remote",
        )
        return DispatchOutcome(instance=instance, command=command, local=local)

    def dispatch(
        self, role: Role, host: str, command: ControlCommand
    ) -> List[Future[DispatchOutcome]]:
        """Submit ``command`` for every instance of ``role`` on ``host``."""
        return [
            self._pool.submit(self._run_instance, instance, command)
            for instance in self.instances(role, host)
        ]

    def dispatch_many(
        self, role: Role, hosts: Iterable[str], command: ControlCommand
    ) -> List[Future[DispatchOutcome]]:
        futures: List[Future[DispatchOutcome]] = []
        for host in hosts:
            futures.extend(self.dispatch(role, host, command))
        return futures

    @staticmethod
    def join(futures: Iterable[Future[DispatchOutcome]]) -> List[DispatchOutcome]:
        """Block until every future is done and return the outcomes."""
        return [future.result() for future in futures]

    def run(
        self, role: Role, hosts: Iterable[str], command: ControlCommand
    ) -> List[DispatchOutcome]:
        """Dispatch to all ``hosts`` concurrently and join."""
        return self.join(self.dispatch_many(role, hosts, command))

    def start_workers(self, hosts: Sequence[str]) -> BatchReport:
        """Launch workers, joining after every ``WORKER_START_BATCH`` hosts."""
        report = BatchReport()
        pending: List[Future[DispatchOutcome]] = []
        for count, host in enumerate(hosts, start=1):
            pending.extend(self.dispatch(Role.WORKER, host, ControlCommand.START))
            if count % WORKER_START_BATCH == 0:
                report.outcomes.extend(self.join(pending))
                report.barriers += 1
                pending = []
        if pending:
            report.outcomes.extend(self.join(pending))
            report.barriers += 1
        return report
