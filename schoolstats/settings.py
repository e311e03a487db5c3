from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple


DATA_DIR = Path(__file__).resolve().parents[1]
FILE_GLOB = "*.json"

TOTAL_LABEL = "合計"
MALE_LABEL = "男"
FEMALE_LABEL = "女"
YEAR_SUFFIX = "年度"


@dataclass(frozen=True)
class DashboardSettings:
    page_size_choices: Tuple[int, ...] = (10, 25, 50, 100)
    default_page_size: int = 25
    percent_decimals: int = 1
    chart_height: int = 260


DEFAULT_SETTINGS = DashboardSettings()
