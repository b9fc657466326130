"""
Structured run logging for the pipeline scripts.

Each run writes one JSONL file under logs/ (one object per event with
timestamp, script_name, run_id, level, message and an optional `extra`
payload) and mirrors messages to stdout.
"""

import json
import logging
import sys
import uuid
from datetime import datetime, timezone
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Any, Optional


# Distributions whose versions are recorded with every run
TRACKED_PACKAGES = ("numpy", "pandas", "geopandas", "shapely", "pyproj", "PyYAML")


def generate_run_id() -> str:
    """UTC timestamp plus a short random suffix, e.g. 20240101_120000_1a2b3c4d."""
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    return f"{stamp}_{uuid.uuid4().hex[:8]}"


def get_versions() -> dict[str, str]:
    """Interpreter and tracked library versions; uninstalled ones are left out."""
    versions = {"python": sys.version.split()[0]}
    for name in TRACKED_PACKAGES:
        try:
            versions[name.lower()] = version(name)
        except PackageNotFoundError:
            continue
    return versions


class _JSONLHandler(logging.Handler):
    """Appends one JSON object per record to a file."""

    def __init__(self, path: Path, script_name: str, run_id: str):
        super().__init__(level=logging.DEBUG)
        self.script_name = script_name
        self.run_id = run_id
        self._stream = open(path, "a", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "script_name": self.script_name,
            "run_id": self.run_id,
            "level": record.levelname,
            "message": record.getMessage(),
        }
        payload = getattr(record, "payload", None)
        if payload:
            entry["extra"] = payload

        self._stream.write(json.dumps(entry, default=str) + "\n")
        self._stream.flush()

    def close(self) -> None:
        self._stream.close()
        super().close()


class JSONLLogger:
    """
    Run logger for a pipeline script.

    Usage:
        with get_logger("01_polygon_stats") as logger:
            logger.info("Loaded wells", extra={"count": 1200})
            logger.log_metrics({"nni": 0.82, "hhi": 0.31})

    Only `message` reaches the console; `extra` goes to the JSONL file.
    """

    def __init__(
        self,
        script_name: str,
        run_id: Optional[str] = None,
        log_dir: Optional[Path] = None,
    ):
        if log_dir is None:
            from wellstats.paths import LOGS_DIR
            log_dir = LOGS_DIR

        self.script_name = script_name
        self.run_id = run_id or generate_run_id()
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.log_dir / f"{script_name}_{self.run_id}.jsonl"

        self._file_handler = _JSONLHandler(self.log_file, script_name, self.run_id)
        self._console_handler = logging.StreamHandler(sys.stdout)
        self._console_handler.setLevel(logging.INFO)
        self._console_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
        )

        self._logger = logging.getLogger(f"wellstats.{script_name}.{self.run_id}")
        self._logger.setLevel(logging.DEBUG)
        self._logger.propagate = False
        self._logger.addHandler(self._file_handler)
        self._logger.addHandler(self._console_handler)

        self._file_only(
            logging.INFO,
            "Logger initialized",
            {"log_file": str(self.log_file), "versions": get_versions()},
        )

    def _log(self, level: int, message: str, extra: Optional[dict[str, Any]] = None) -> None:
        self._logger.log(level, message, extra={"payload": extra})

    def _file_only(self, level: int, message: str, extra: dict[str, Any]) -> None:
        # Bookkeeping records are kept off the console
        record = self._logger.makeRecord(
            self._logger.name, level, __file__, 0, message, None, None,
            extra={"payload": extra},
        )
        self._file_handler.handle(record)

    def debug(self, message: str, extra: Optional[dict[str, Any]] = None) -> None:
        self._log(logging.DEBUG, message, extra)

    def info(self, message: str, extra: Optional[dict[str, Any]] = None) -> None:
        self._log(logging.INFO, message, extra)

    def warning(self, message: str, extra: Optional[dict[str, Any]] = None) -> None:
        self._log(logging.WARNING, message, extra)

    def error(self, message: str, extra: Optional[dict[str, Any]] = None) -> None:
        self._log(logging.ERROR, message, extra)

    def log_config(self, config: dict[str, Any], config_digest: Optional[str] = None) -> None:
        self._file_only(logging.INFO, "Configuration loaded",
                        {"config": config, "config_digest": config_digest})

    def log_inputs(self, inputs: dict[str, str]) -> None:
        self._file_only(logging.INFO, "Inputs registered", {"inputs": inputs})

    def log_outputs(self, outputs: dict[str, str]) -> None:
        self._file_only(logging.INFO, "Outputs registered", {"outputs": outputs})

    def log_metrics(self, metrics: dict[str, Any]) -> None:
        self._file_only(logging.INFO, "Metrics recorded", {"metrics": metrics})

    def close(self) -> None:
        self._file_only(logging.INFO, "Logger closing", {"run_id": self.run_id})
        for handler in (self._file_handler, self._console_handler):
            self._logger.removeHandler(handler)
            handler.close()

    def __enter__(self) -> "JSONLLogger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if exc_type is not None:
            self.error(f"Exception occurred: {exc_type.__name__}: {exc_val}")
        self.close()


def get_logger(
    script_name: str,
    run_id: Optional[str] = None,
    log_dir: Optional[Path] = None,
) -> JSONLLogger:
    """JSONLLogger for `script_name`, writing under `log_dir` (default logs/)."""
    return JSONLLogger(script_name=script_name, run_id=run_id, log_dir=log_dir)
