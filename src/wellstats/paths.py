"""
Canonical path resolution for the wellstats project.

Scripts and the config loader import their paths from here instead of
building relative '../' paths.
"""

from pathlib import Path
from typing import Optional

# Files whose presence marks the project root, checked in this order
ROOT_MARKERS = (".project-root", "pyproject.toml", ".git")


def find_project_root(start_path: Optional[Path] = None) -> Path:
    """
    Nearest directory at or above `start_path` holding a root marker.

    Args:
        start_path: Where to start looking. Defaults to this module's directory.

    Raises:
        FileNotFoundError: If no ancestor holds a marker
    """
    start = Path(start_path) if start_path is not None else Path(__file__).resolve().parent

    for candidate in (start, *start.parents):
        if any((candidate / marker).exists() for marker in ROOT_MARKERS):
            return candidate

    raise FileNotFoundError(
        f"No project root marker {list(ROOT_MARKERS)} found above {start}"
    )


# =============================================================================
# Canonical paths (resolved at import time)
# =============================================================================

PROJECT_ROOT = find_project_root()

CONFIG_DIR = PROJECT_ROOT / "configs"
PARAMS_FILE = CONFIG_DIR / "params.yml"

DATA_DIR = PROJECT_ROOT / "data"
RAW_DIR = DATA_DIR / "raw"
PROCESSED_DIR = DATA_DIR / "processed"

POLYGON_STATS_DIR = PROCESSED_DIR / "polygon_stats"
PROXIMITY_DIR = PROCESSED_DIR / "calendar_proximity"
METADATA_DIR = PROCESSED_DIR / "metadata"

LOGS_DIR = PROJECT_ROOT / "logs"

SRC_DIR = PROJECT_ROOT / "src"
SCRIPTS_DIR = PROJECT_ROOT / "scripts"
TESTS_DIR = PROJECT_ROOT / "tests"


def ensure_dirs_exist() -> None:
    """Create all canonical output directories if they don't exist."""
    dirs = [
        CONFIG_DIR,
        RAW_DIR,
        POLYGON_STATS_DIR, PROXIMITY_DIR, METADATA_DIR,
        LOGS_DIR,
    ]
    for d in dirs:
        d.mkdir(parents=True, exist_ok=True)

