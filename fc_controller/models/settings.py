"""Controller settings (pydantic model with environment overrides)."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field, model_validator

from fc_common.config.env import parse_float_env, parse_int_env


class ControlSettings(BaseModel):
    """Knobs for dispatching control commands across the fleet."""

    conf_dir: Path = Field(default=Path("conf"), description="Directory holding the per-role hosts files")
    service_script: str = Field(
        default="fleet-service",
        description="Per-instance control script invoked as '<script> <role> <start|stop|kill>'",
    )
    admin_command: str = Field(default="fleet-admin", description="Administrative CLI run on the controller host")
    server_cmd_prefix: str = Field(default="", description="Prefix for service commands, e.g. 'sudo -u fleet'")
    workers_per_host: int = Field(default=1, ge=1, description="Worker instances started on each worker host")
    instance_env_var: str = Field(
        default="FC_SERVICE_INSTANCE",
        description="Environment variable carrying the worker instance index",
    )
    ssh_user: Optional[str] = Field(default=None, description="SSH user for remote dispatch")
    ssh_port: int = Field(default=22, gt=0, description="SSH port for remote dispatch")
    ssh_key: Optional[str] = Field(default=None, description="Private key used for remote dispatch")
    connect_timeout: float = Field(default=2.0, gt=0, description="SSH connect timeout in seconds")
    command_timeout: Optional[float] = Field(default=None, gt=0, description="Per-command timeout in seconds")
    admin_timeout: float = Field(default=30.0, gt=0, description="Timeout for administrative requests")
    admin_grace_seconds: float = Field(default=5.0, ge=0, description="Wait after the stop-all request")
    worker_grace_seconds: float = Field(default=10.0, ge=0, description="Wait between worker stop and kill")

    @model_validator(mode="after")
    def validate_commands(self) -> "ControlSettings":
        if not self.service_script.strip():
            raise ValueError("ControlSettings: 'service_script' must be non-empty")
        if not self.admin_command.strip():
            raise ValueError("ControlSettings: 'admin_command' must be non-empty")
        return self

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> "ControlSettings":
        """Build settings from ``FC_*`` variables; explicit overrides win."""
        env = os.environ if environ is None else environ
        values: Dict[str, Any] = {}
        for key in ("service_script", "admin_command", "server_cmd_prefix", "ssh_user", "ssh_key"):
            raw = env.get(f"FC_{key.upper()}")
            if raw is not None:
                values[key] = raw
        if env.get("FC_CONF_DIR"):
            values["conf_dir"] = Path(env["FC_CONF_DIR"])
        for key in ("workers_per_host", "ssh_port"):
            parsed = parse_int_env(env.get(f"FC_{key.upper()}"))
            if parsed is not None:
                values[key] = parsed
        for key in (
            "connect_timeout",
            "command_timeout",
            "admin_timeout",
            "admin_grace_seconds",
            "worker_grace_seconds",
        ):
            parsed_float = parse_float_env(env.get(f"FC_{key.upper()}"))
            if parsed_float is not None:
                values[key] = parsed_float
        values.update({key: val for key, val in overrides.items() if val is not None})
        return cls(**values)
