#!/usr/bin/env python3
"""
02_closest_status_date.py

Find wells whose status date falls closest to a given month/day, ignoring
the year and wrapping around the year end.

- Read the wells layer
- Keep wells with a string status_date, up to calendar_proximity.candidate_limit
- Rank by circular day distance, truncate to --limit (clamped to max_limit)

Outputs:
- data/processed/calendar_proximity/closest_<MM>_<DD>_<run_id>.json
- data/processed/metadata/closest_<MM>_<DD>_<run_id>_metadata.json
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from wellstats.calendar_proximity import rank_by_calendar_proximity, resolve_limit
from wellstats.config import config_from_params
from wellstats.hashing import write_metadata_sidecar
from wellstats.io_utils import atomic_write_json, read_layer, read_yaml
from wellstats.logging_utils import get_logger
from wellstats.paths import PARAMS_FILE, PROJECT_ROOT, PROXIMITY_DIR, ensure_dirs_exist
from wellstats.selection import gdf_to_records


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Wells closest to a calendar day")
    parser.add_argument("--month", type=int, required=True, help="Target month (1-12)")
    parser.add_argument("--day", type=int, required=True, help="Target day of month")
    parser.add_argument("--limit", type=int, default=None, help="Maximum results")
    parser.add_argument("--wells", help="Wells layer (GeoJSON, GeoParquet, GPKG)")
    parser.add_argument("--output", help="Output path")
    return parser.parse_args(argv)


def select_candidates(records: List[Dict[str, Any]], candidate_limit: int, logger) -> List[Dict[str, Any]]:
    """Records with a string status_date, in layer order, up to the limit."""
    dated = [r for r in records if isinstance(r.get("status_date"), str)]
    logger.info(f"Wells with a status_date: {len(dated):,} / {len(records):,}")
    
    if len(dated) > candidate_limit:
        logger.warning(f"Truncating candidates to {candidate_limit:,}")
        dated = dated[:candidate_limit]
    return dated


def main(argv: Optional[List[str]] = None) -> Dict[str, Any]:
    """Main entry point."""
    args = parse_args(argv)
    ensure_dirs_exist()
    
    with get_logger("02_closest_status_date") as logger:
        logger.info("Starting 02_closest_status_date.py")
        
        params = read_yaml(PARAMS_FILE) if PARAMS_FILE.exists() else {}
        config = config_from_params(params)
        logger.log_config(config.to_dict())
        
        wells_value = args.wells or params.get("inputs", {})["wells"]
        wells_path = Path(wells_value)
        if not wells_path.is_absolute():
            wells_path = PROJECT_ROOT / wells_path
        logger.log_inputs({"wells": str(wells_path)})
        
        try:
            limit = resolve_limit(args.limit, config)
            logger.info(f"Target {args.month:02d}-{args.day:02d}, limit {limit}")
            
            wells = read_layer(wells_path)
            logger.info(f"Loaded {len(wells):,} wells from {wells_path}")
            
            candidates = select_candidates(gdf_to_records(wells), config.proximity_candidate_limit, logger)
            ranked = rank_by_calendar_proximity(candidates, args.month, args.day, limit=limit, config=config)
            
            result = {
                "month": args.month,
                "day": args.day,
                "count": len(ranked),
                "results": [r.to_dict() for r in ranked],
            }
            
            output_path = (
                Path(args.output) if args.output
                else PROXIMITY_DIR / f"closest_{args.month:02d}_{args.day:02d}_{logger.run_id}.json"
            )
            atomic_write_json(result, output_path)
            logger.info(f"Wrote: {output_path} ({len(ranked)} wells)")
            logger.log_outputs({"closest_status_date": str(output_path)})
            
            distances = [r.distance_days for r in ranked]
            metrics = {
                "candidates": len(candidates),
                "returned": len(ranked),
                "min_distance_days": min(distances) if distances else None,
                "max_distance_days": max(distances) if distances else None,
            }
            logger.log_metrics(metrics)
            
            write_metadata_sidecar(
                output_path=output_path,
                inputs={"wells": str(wells_path)},
                config=config.to_dict(),
                run_id=logger.run_id,
                extra={"month": args.month, "day": args.day, "limit": limit, **metrics},
            )
            
            logger.info("SUCCESS: Ranked wells by calendar proximity")
            return result
            
        except Exception as e:
            logger.error(f"FAILED: {e}")
            raise


if __name__ == "__main__":
    main(sys.argv[1:])
