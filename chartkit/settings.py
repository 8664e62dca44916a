"""
Environment settings for chartkit.

Values come from the process environment (optionally a .env file) with
defaults suited to running the dashboard from the repository root.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

# Repository root (chartkit/settings.py -> repo)
PROJECT_ROOT = Path(__file__).parent.parent

DATA_DIR: str = os.getenv("CHARTKIT_DATA_DIR", str(PROJECT_ROOT / "data"))
LOG_LEVEL: str = os.getenv("CHARTKIT_LOG_LEVEL", "INFO")
FPS: int = int(os.getenv("CHARTKIT_FPS", "60"))

# Data files backing each chart on the dashboard
BAR_SOURCE = "Ex5_TV_energy_55inchtv_byScreenType.csv"
DONUT_SOURCE = "Ex5_TV_energy_Allsizes_byScreenType.csv"
LINE_SOURCE = "Ex5_ARE_Spot_Prices.csv"
SCATTER_SOURCE = "Ex5_TV_energy.csv"


def data_source(name: str) -> str:
    """Resolve a data file name against DATA_DIR. URLs pass through untouched."""
    if name.startswith(("http://", "https://")):
        return name
    return str(Path(DATA_DIR) / name)
