import json
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Dict

from journey_analytics.__version__ import __version__
from journey_analytics.utils.logger import get_logger

log = get_logger("run-metadata")


def create_run_metadata(
    input_files: List[str],
    config: Dict,
    output_dir: Path,
    status: str = "completed",
    errors: List[str] | None = None,
    reports: List[str] | None = None,
):
    """
    Create a run.json metadata file describing a CLI run.
    """

    metadata = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": __version__,
        "status": status,
        "input_files": input_files,
        "reports": reports or [],
        "errors": errors or [],
        "config_summary": sorted(k for k in config.keys() if k != "engine"),
    }

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    metadata_path = output_dir / "run.json"

    with open(metadata_path, "w", encoding="utf-8") as f:
        json.dump(metadata, f, indent=2)

    log.info("Run metadata written: %s", metadata_path)
    return metadata_path
