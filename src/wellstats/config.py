"""
Engine configuration loaded from configs/params.yml.

Thresholds that used to be implicit (subsampling caps, result limits)
are explicit here and passed into the engine; nothing reads environment
variables.
"""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from wellstats.io_utils import read_yaml


@dataclass(frozen=True)
class EngineConfig:
    """Parameters for polygon statistics and calendar-proximity ranking."""
    # Nearest-neighbour subsampling
    nnd_cap: int = 1500
    nnd_cap_large_input: int = 1200
    nnd_large_input_threshold: int = 4000
    # Report shaping
    top_companies_limit: int = 15
    metrics_row_limit: Optional[int] = 10000
    random_seed: Optional[int] = None
    # Calendar proximity
    proximity_default_limit: int = 10
    proximity_max_limit: int = 50
    proximity_candidate_limit: int = 5000
    
    def __post_init__(self):
        if self.nnd_cap < 2 or self.nnd_cap_large_input < 2:
            raise ValueError("nearest-neighbour caps must be at least 2")
        if self.nnd_large_input_threshold < 0:
            raise ValueError("nnd_large_input_threshold must be >= 0")
        for name in ("top_companies_limit", "proximity_default_limit",
                     "proximity_max_limit", "proximity_candidate_limit"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0")
        if self.metrics_row_limit is not None and self.metrics_row_limit < 0:
            raise ValueError("metrics_row_limit must be >= 0 or null")
    
    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# params.yml section -> {yaml key: EngineConfig field}
_PARAM_KEYS = {
    "polygon_stats": {
        "nnd_cap": "nnd_cap",
        "nnd_cap_large_input": "nnd_cap_large_input",
        "nnd_large_input_threshold": "nnd_large_input_threshold",
        "top_companies_limit": "top_companies_limit",
        "metrics_row_limit": "metrics_row_limit",
        "random_seed": "random_seed",
    },
    "calendar_proximity": {
        "default_limit": "proximity_default_limit",
        "max_limit": "proximity_max_limit",
        "candidate_limit": "proximity_candidate_limit",
    },
}


def config_from_params(params: Optional[Dict[str, Any]]) -> EngineConfig:
    """
    Build an EngineConfig from a parsed params.yml mapping.
    
    Missing sections or keys keep their defaults; unknown keys are ignored.
    """
    params = params or {}
    values = {}
    
    for section, keys in _PARAM_KEYS.items():
        section_params = params.get(section) or {}
        for yaml_key, field_name in keys.items():
            if yaml_key in section_params:
                values[field_name] = section_params[yaml_key]
    
    return EngineConfig(**values)


def load_engine_config(path: Optional[Union[str, Path]] = None) -> EngineConfig:
    """
    Load engine configuration from params.yml.
    
    Args:
        path: YAML file to read. Defaults to configs/params.yml.
    
    Returns:
        EngineConfig (defaults if the file does not exist)
    """
    if path is None:
        from wellstats.paths import PARAMS_FILE
        path = PARAMS_FILE
    
    path = Path(path)
    if not path.exists():
        return EngineConfig()
    
    return config_from_params(read_yaml(path))
