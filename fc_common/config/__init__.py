"""Configuration helpers shared across fleet-controller packages."""

from fc_common.config.env import parse_bool_env, parse_float_env, parse_int_env

__all__ = ["parse_bool_env", "parse_float_env", "parse_int_env"]
