"""
Provenance sidecars for script outputs.

Every report gets `<stem>_metadata.json` in the metadata directory with the
sha256 of each input file, a digest of the engine configuration, the git
commit (and whether the tree was dirty), library versions and the run id.
"""

import hashlib
import json
import subprocess
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from wellstats.io_utils import atomic_write_json
from wellstats.logging_utils import get_versions


CHUNK_SIZE = 1 << 16


def hash_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def hash_file(path: Union[str, Path]) -> str:
    """sha256 hex digest of a file, read in chunks."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        while chunk := f.read(CHUNK_SIZE):
            digest.update(chunk)
    return digest.hexdigest()


def hash_dict(d: Dict[str, Any]) -> str:
    """Digest of a mapping's canonical JSON (sorted keys), so key order never matters."""
    canonical = json.dumps(d, sort_keys=True, separators=(",", ":"), default=str)
    return hash_bytes(canonical.encode("utf-8"))


def _git(*args: str) -> Optional[str]:
    """stdout of a git command, or None outside a repository / without git."""
    try:
        result = subprocess.run(["git", *args], capture_output=True, text=True, timeout=5)
    except (OSError, subprocess.TimeoutExpired):
        return None
    return result.stdout.strip() if result.returncode == 0 else None


def get_git_info() -> Dict[str, Any]:
    commit = _git("rev-parse", "HEAD")
    status = _git("status", "--porcelain")
    return {
        "commit": commit,
        "dirty": None if status is None else bool(status),
    }


def fingerprint_inputs(inputs: Dict[str, str]) -> Dict[str, Dict[str, Any]]:
    """
    Path and sha256 for each named input.

    Inputs that do not exist are recorded with `hash: None, missing: True`
    rather than failing the run.
    """
    fingerprints = {}
    for name, value in inputs.items():
        path = Path(value)
        if path.is_file():
            fingerprints[name] = {"path": str(path), "hash": hash_file(path)}
        else:
            fingerprints[name] = {"path": str(path), "hash": None, "missing": True}
    return fingerprints


def sidecar_path(output_path: Union[str, Path], metadata_dir: Optional[Path] = None) -> Path:
    if metadata_dir is None:
        from wellstats.paths import METADATA_DIR
        metadata_dir = METADATA_DIR
    return Path(metadata_dir) / f"{Path(output_path).stem}_metadata.json"


def create_metadata_sidecar(
    output_path: Union[str, Path],
    inputs: Dict[str, str],
    config: Dict[str, Any],
    run_id: str,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Sidecar contents for one output file."""
    metadata = {
        "output_file": str(output_path),
        "run_id": run_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "inputs": fingerprint_inputs(inputs),
        "config_digest": hash_dict(config),
        "config": config,
        "git": get_git_info(),
        "versions": get_versions(),
    }
    if extra:
        metadata["extra"] = extra
    return metadata


def write_metadata_sidecar(
    output_path: Union[str, Path],
    inputs: Dict[str, str],
    config: Dict[str, Any],
    run_id: str,
    extra: Optional[Dict[str, Any]] = None,
    metadata_dir: Optional[Path] = None,
) -> Path:
    """
    Write the sidecar for `output_path`.

    Args:
        output_path: Report the sidecar describes
        inputs: Input name -> file path
        config: Engine configuration used for the run
        run_id: Run identifier (matches the JSONL log)
        extra: Run-specific values (seed, headline metrics)
        metadata_dir: Destination directory (default data/processed/metadata)

    Returns:
        Path of the sidecar file
    """
    path = sidecar_path(output_path, metadata_dir)
    atomic_write_json(create_metadata_sidecar(output_path, inputs, config, run_id, extra), path)
    return path

