"""
Run configuration.

Defaults live in DEFAULT_CONFIG; a YAML file and command-line dotlist
overrides (e.g. `pricing.rule=k_double pricing.k=0.25`) are merged on top.
The merged config is in struct mode, so misspelled keys are errors.
"""

from collections.abc import Sequence
from pathlib import Path

from omegaconf import DictConfig, OmegaConf

DEFAULT_CONFIG = {
    "pricing": {
        "rule": "midpoint",  # midpoint | k_double
        "k": 0.5,
    },
    "ingest": {
        "default_timestamps": True,  # replace timestamp 0 with the current time
    },
    "logging": {
        "level": "WARNING",
    },
    "report": {
        "fills_csv": None,
    },
}


def load_config(path: str | Path | None = None, overrides: Sequence[str] = ()) -> DictConfig:
    """
    Build the run configuration.

    Args:
        path: Optional YAML file merged over the defaults
        overrides: Dotlist entries merged last

    Returns:
        Struct-mode DictConfig (unknown keys raise).
    """
    cfg = OmegaConf.create(DEFAULT_CONFIG)
    OmegaConf.set_struct(cfg, True)

    layers = []
    if path is not None:
        layers.append(OmegaConf.load(path))
    if overrides:
        layers.append(OmegaConf.from_dotlist(list(overrides)))

    return OmegaConf.merge(cfg, *layers)
