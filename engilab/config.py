"""Configuration for engilab read from environment variables."""

import os
from pathlib import Path

# Logging settings
LOG_LEVEL = os.getenv("ENGILAB_LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("ENGILAB_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

# Progress persistence
PROGRESS_PATH = Path(os.getenv("ENGILAB_PROGRESS_PATH", Path.home() / ".engilab" / "progress.json"))

# Mass-spring-damper settings
SHM_TIME_STEP = float(os.getenv("ENGILAB_SHM_TIME_STEP", str(1.0 / 120.0)))
SHM_MAX_SUBSTEPS = int(os.getenv("ENGILAB_SHM_MAX_SUBSTEPS", "2000"))
SHM_HISTORY = int(os.getenv("ENGILAB_SHM_HISTORY", "1200"))

# RLC settings
RLC_SUBDIVISIONS = int(os.getenv("ENGILAB_RLC_SUBDIVISIONS", "600"))

# Sort playback delays in seconds
SORT_MIN_DELAY = float(os.getenv("ENGILAB_SORT_MIN_DELAY", "0.06"))
SORT_MAX_DELAY = float(os.getenv("ENGILAB_SORT_MAX_DELAY", "0.8"))

__all__ = [
    "LOG_LEVEL",
    "LOG_FORMAT",
    "PROGRESS_PATH",
    "SHM_TIME_STEP",
    "SHM_MAX_SUBSTEPS",
    "SHM_HISTORY",
    "RLC_SUBDIVISIONS",
    "SORT_MIN_DELAY",
    "SORT_MAX_DELAY",
]
