"""
Dive parameter configuration.

Resolves the planning inputs from built-in defaults, an optional
config.yaml and command line overrides, in that order.
"""

import logging
import os

import yaml

from .planner import DiveParameters

logger = logging.getLogger(__name__)

DEFAULTS = {
    "depth_m": 18.0,
    "bottom_time_min": 10.0,
    "f_o2": 0.21,
    "p_factor": 0,
}


def default_config_path() -> str:
    return os.path.join(os.path.dirname(os.path.dirname(__file__)), "config.yaml")


def load_effective_config(
    overrides: dict = None,
    config_path: str = None,
) -> dict:
    """Load configuration from config.yaml with optional CLI overrides.

    Returns a dict with resolved settings:
        depth_m:          float
        bottom_time_min:  float
        f_o2:             float
        p_factor:         int
        config_path:      str (resolved path)
        source:           'cli' | 'config' | 'default'
    """
    if config_path is None:
        config_path = default_config_path()

    settings = dict(DEFAULTS)
    source = "default"

    if os.path.exists(config_path):
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}

        dive_cfg = config.get("dive", {}) or {}
        if dive_cfg:
            settings["depth_m"] = float(dive_cfg.get("depth_m", settings["depth_m"]))
            settings["bottom_time_min"] = float(
                dive_cfg.get("bottom_time_min", settings["bottom_time_min"])
            )
            settings["f_o2"] = float(dive_cfg.get("f_o2", settings["f_o2"]))
            settings["p_factor"] = int(dive_cfg.get("p_factor", settings["p_factor"]))
            source = "config"
    else:
        logger.debug(f"No config at {config_path}, using defaults")

    if overrides:
        applied = {k: v for k, v in overrides.items() if v is not None}
        unknown = set(applied) - set(DEFAULTS)
        if unknown:
            raise KeyError(f"Unknown config keys: {sorted(unknown)}")
        if applied:
            settings.update(applied)
            source = "cli"

    settings["config_path"] = config_path
    settings["source"] = source
    return settings


def build_parameters(config: dict) -> DiveParameters:
    """DiveParameters from a resolved config dict; validates the values."""
    return DiveParameters(
        depth_m=float(config["depth_m"]),
        bottom_time_min=float(config["bottom_time_min"]),
        f_o2=float(config["f_o2"]),
        p_factor=int(config["p_factor"]),
    )
