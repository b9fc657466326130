"""
File I/O for the pipeline scripts.

Reports go through a temp file in the destination directory and are moved
into place only once fully written. Readers cover the run parameters
(YAML), reports (JSON), the wells layer and query polygons (GeoJSON).
"""

import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Optional, TextIO, Union

import geopandas as gpd
import yaml


PathLike = Union[str, Path]


@contextmanager
def atomic_write(
    target_path: PathLike,
    mode: str = "w",
    suffix: Optional[str] = None,
) -> Iterator[TextIO]:
    """
    Yield a handle on a sibling temp file; replace `target_path` on success.

    On any exception the temp file is removed and the target left as it was.
    """
    target = Path(target_path)
    target.parent.mkdir(parents=True, exist_ok=True)

    handle = tempfile.NamedTemporaryFile(
        mode=mode,
        dir=target.parent,
        prefix=f".{target.stem}_",
        suffix=suffix or target.suffix or ".tmp",
        encoding=None if "b" in mode else "utf-8",
        delete=False,
    )
    temp = Path(handle.name)

    try:
        with handle:
            yield handle
        os.replace(temp, target)
    except BaseException:
        temp.unlink(missing_ok=True)
        raise


def atomic_write_json(data: Any, target_path: PathLike, **kwargs) -> None:
    """Write `data` as indented JSON; non-serialisable values fall back to str()."""
    kwargs.setdefault("indent", 2)
    kwargs.setdefault("default", str)

    with atomic_write(target_path, suffix=".json") as f:
        json.dump(data, f, **kwargs)
        f.write("\n")


def read_yaml(path: PathLike) -> dict:
    """Parsed YAML mapping; an empty file reads as {}."""
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def read_json(path: PathLike) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def read_layer(path: PathLike, **kwargs) -> gpd.GeoDataFrame:
    """
    Read a vector layer.

    GeoParquet (.parquet) goes through read_parquet, everything else
    (GeoJSON, GeoPackage, Shapefile) through read_file.

    Raises:
        FileNotFoundError: If the path does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Layer not found: {path}")

    if path.suffix.lower() == ".parquet":
        return gpd.read_parquet(path, **kwargs)
    return gpd.read_file(path, **kwargs)


def read_polygon_coordinates(path: PathLike) -> List[Any]:
    """
    Coordinates of a GeoJSON Polygon.

    Accepts a bare Polygon geometry, a Feature, or a FeatureCollection
    (first feature used).

    Raises:
        ValueError: If no Polygon geometry is found
    """
    data = read_json(path)

    if data.get("type") == "FeatureCollection":
        features = data.get("features") or []
        if not features:
            raise ValueError(f"No features in polygon file: {path}")
        data = features[0]
    if data.get("type") == "Feature":
        data = data.get("geometry") or {}
    if data.get("type") != "Polygon":
        raise ValueError(f"Expected a Polygon geometry in {path}, got {data.get('type')}")

    return data.get("coordinates") or []
