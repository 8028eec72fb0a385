"""
triple_tracker/utils/config.py
Load env vars and the analysis parameter JSON file.
"""
import json
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()

ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = Path(os.getenv("TRIPLES_CONFIG_DIR", str(ROOT / "config")))
ANALYSIS_CONFIG_FILE = "analysis_params.json"

# ── Input table columns ───────────────────────────────────────────
COL_DATE: str = os.getenv("COL_DATE", "תאריך")
COL_DRAW: str = os.getenv("COL_DRAW", "הגרלה")
SUIT_COLUMNS: list[str] = [
    c.strip() for c in os.getenv("COL_SUITS", "תלתן,יהלום,לב,עלה").split(",") if c.strip()
]
REQUIRED_COLUMNS: list[str] = [COL_DATE, COL_DRAW, *SUIT_COLUMNS]

# ── Analysis defaults ─────────────────────────────────────────────
DEFAULT_ANALYSIS_PARAMS: dict[str, Any] = {
    "windows": [100, 200, 400, 800, 20000],
    "overlay_windows": [100, 200, 400],
    "classified_windows": [200, 400],
    "cluster_max_gap": 18,
    "long_gap_threshold": 100,
    "recent_events": 30,
    "rate_tolerance": 0.1,
}

_analysis_config_cache: dict[str, Any] = {}


def get_analysis_config() -> dict[str, Any]:
    """Load and cache analysis params, falling back to defaults per key."""
    if _analysis_config_cache:
        return _analysis_config_cache

    config = dict(DEFAULT_ANALYSIS_PARAMS)
    path = CONFIG_DIR / ANALYSIS_CONFIG_FILE
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            loaded = json.load(f)
        config.update({k: v for k, v in loaded.items() if k in DEFAULT_ANALYSIS_PARAMS})

    env_gap = os.getenv("CLUSTER_MAX_GAP")
    if env_gap:
        config["cluster_max_gap"] = int(env_gap)

    _analysis_config_cache.update(config)
    return _analysis_config_cache
