from .config import Config, cfg
from .ingest import Snapshot, build_snapshot, snapshot_from_json
from .main import run_analysis

__all__ = [
    "Config",
    "cfg",
    "Snapshot",
    "build_snapshot",
    "snapshot_from_json",
    "run_analysis",
]
