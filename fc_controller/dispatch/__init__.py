"""Control-command dispatch."""

from fc_controller.dispatch.dispatcher import (
    WORKER_START_BATCH,
    BatchReport,
    DispatchOutcome,
    Dispatcher,
    LocalRunner,
    RemoteExecutor,
)

__all__ = [
    "BatchReport",
    "DispatchOutcome",
    "Dispatcher",
    "LocalRunner",
    "RemoteExecutor",
    "WORKER_START_BATCH",
]
