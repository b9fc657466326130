#!/usr/bin/env python3
"""
01_polygon_stats.py

Compute polygon statistics for the wells inside a user-drawn polygon.

- Read the wells layer (EPSG:4326) and a polygon (GeoJSON Polygon/Feature)
- Normalise the outer ring (clamp, close, reject < 3 points)
- Select wells covered by the ring (stand-in for the store's $geoWithin)
- Tallies, status-date summary, area, density, NND/NNI, HHI

Outputs:
- data/processed/polygon_stats/polygon_stats_<run_id>.json
- data/processed/metadata/polygon_stats_<run_id>_metadata.json (provenance sidecar)
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import numpy as np

from wellstats.config import config_from_params
from wellstats.hashing import write_metadata_sidecar
from wellstats.io_utils import atomic_write_json, read_layer, read_polygon_coordinates, read_yaml
from wellstats.logging_utils import get_logger
from wellstats.paths import PARAMS_FILE, POLYGON_STATS_DIR, PROJECT_ROOT, ensure_dirs_exist
from wellstats.rings import ring_from_polygon_coordinates
from wellstats.selection import gdf_to_records, records_within_ring
from wellstats.summary import summarize_polygon


# =============================================================================
# Inputs
# =============================================================================

def resolve_path(value: str) -> Path:
    """Config paths are relative to the project root."""
    path = Path(value)
    return path if path.is_absolute() else PROJECT_ROOT / path


def load_polygon(path: Path, logger) -> List[Any]:
    coordinates = read_polygon_coordinates(path)
    logger.info(f"Loaded polygon from {path} ({len(coordinates[0]) if coordinates else 0} outer vertices)")
    return coordinates


def load_wells(path: Path, logger):
    gdf = read_layer(path)
    logger.info(f"Loaded {len(gdf):,} wells from {path}")
    return gdf


# =============================================================================
# Main
# =============================================================================

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Polygon statistics for wells")
    parser.add_argument("--wells", help="Wells layer (GeoJSON, GeoParquet, GPKG)")
    parser.add_argument("--polygon", help="Polygon GeoJSON")
    parser.add_argument("--seed", type=int, default=None, help="Seed for NND subsampling")
    parser.add_argument("--output", help="Report path (default under data/processed/polygon_stats)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> Dict[str, Any]:
    """Main entry point."""
    args = parse_args(argv)
    ensure_dirs_exist()
    
    with get_logger("01_polygon_stats") as logger:
        logger.info("Starting 01_polygon_stats.py")
        
        params = read_yaml(PARAMS_FILE) if PARAMS_FILE.exists() else {}
        config = config_from_params(params)
        logger.log_config(config.to_dict())
        
        inputs_config = params.get("inputs", {})
        wells_path = resolve_path(args.wells or inputs_config["wells"])
        polygon_path = resolve_path(args.polygon or inputs_config["polygon"])
        logger.log_inputs({"wells": str(wells_path), "polygon": str(polygon_path)})
        
        seed = args.seed if args.seed is not None else config.random_seed
        
        try:
            coordinates = load_polygon(polygon_path, logger)
            ring = ring_from_polygon_coordinates(coordinates)
            logger.info(f"Normalised ring: {len(ring)} points (closed)")
            
            wells = load_wells(wells_path, logger)
            inside = records_within_ring(wells, ring)
            logger.info(f"Wells inside polygon: {len(inside):,} / {len(wells):,}")
            
            records = gdf_to_records(inside)
            report = summarize_polygon(
                records,
                ring,
                config=config,
                rng=np.random.default_rng(seed),
            ).to_dict()
            
            output_path = (
                Path(args.output) if args.output
                else POLYGON_STATS_DIR / f"polygon_stats_{logger.run_id}.json"
            )
            atomic_write_json(report, output_path)
            logger.info(f"Wrote: {output_path}")
            logger.log_outputs({"polygon_stats": str(output_path)})
            
            metrics = {
                key: report[key]
                for key in (
                    "count", "area_m2", "wells_with_coords", "mean_nnd_m",
                    "expected_mean_nnd_m", "nni", "nnd_used_n", "nnd_capped", "hhi",
                )
            }
            logger.log_metrics(metrics)
            
            write_metadata_sidecar(
                output_path=output_path,
                inputs={"wells": str(wells_path), "polygon": str(polygon_path)},
                config=config.to_dict(),
                run_id=logger.run_id,
                extra={"seed": seed, **metrics},
            )
            
            logger.info("=" * 70)
            logger.info("Polygon Statistics Summary:")
            logger.info(f"  Wells: {report['count']:,} ({report['wells_with_coords']:,} with coordinates)")
            logger.info(f"  Area: {report['area_m2'] / 1e6:,.3f} km²")
            if report["nni"] is not None:
                logger.info(f"  Mean NND: {report['mean_nnd_m']:,.1f} m, NNI={report['nni']:.3f}")
            if report["hhi"] is not None:
                logger.info(f"  HHI (companies): {report['hhi']:.3f}")
            logger.info("=" * 70)
            
            logger.info("SUCCESS: Computed polygon statistics")
            return report
            
        except Exception as e:
            logger.error(f"FAILED: {e}")
            raise


if __name__ == "__main__":
    main(sys.argv[1:])
