"""Internal API routers — /config and /analyze endpoints.

No business logic. Parses the request, delegates to the pipeline and
returns plain serialised data.
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException

from openrange.config import AnalysisConfig, Config
from openrange.data.loader import bars_from_records
from openrange.pipeline import run_analysis

logger = logging.getLogger("openrange")
router = APIRouter()

# ── Shared state (set during app startup) ────────────────────────────────

_config: Optional[Config] = None


def configure_routers(config: Optional[Config] = None) -> None:
    """Inject the application configuration.

    Args:
        config: Loaded ``Config``.  ``None`` resets to built-in defaults.
    """
    global _config  # noqa: PLW0603
    _config = config


def _default_timezone() -> str:
    return _config.timezone if _config else "America/New_York"


def _analysis_config() -> AnalysisConfig:
    return _config.analysis if _config else AnalysisConfig()


@router.get("/config")
async def get_config():
    """Return the active timezone and analysis settings."""
    return {
        "timezone": _default_timezone(),
        "analysis": _analysis_config().to_dict(),
    }


@router.post("/analyze")
async def post_analyze(body: dict):
    """Run the full pipeline on the posted bars.

    Body: ``{"timezone": "America/New_York", "bars": [{time, open, high,
    low, close, volume?}, ...]}``.  ``timezone`` defaults to the configured
    one.
    """
    raw_bars = body.get("bars")
    if not isinstance(raw_bars, list):
        raise HTTPException(status_code=422, detail="'bars' must be a list")
    if not all(isinstance(b, dict) for b in raw_bars):
        raise HTTPException(status_code=422, detail="each bar must be an object")

    tz = body.get("timezone") or _default_timezone()
    try:
        bars = bars_from_records(raw_bars)
        result = run_analysis(bars, tz, _analysis_config())
    except ValueError as exc:
        logger.warning("Rejected /analyze request: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    return result.to_dict()
