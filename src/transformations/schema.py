"""
Column schema of the WHO life-expectancy dataset (Kaggle "Life Expectancy
Data.csv") and of the World Happiness Report table.

The raw headers are inconsistent ("Life expectancy ", " BMI ",
" HIV/AIDS", " thinness  1-19 years"); every loader runs them through
`standardize_columns` so the rest of the code only sees snake_case names.
"""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

import pandas as pd

LIFE_EXPECTANCY_COLUMNS: List[str] = [
    "country",
    "year",
    "status",
    "life_expectancy",
    "adult_mortality",
    "infant_deaths",
    "alcohol",
    "percentage_expenditure",
    "hepatitis_b",
    "measles",
    "bmi",
    "under_five_deaths",
    "polio",
    "total_expenditure",
    "diphtheria",
    "hiv_aids",
    "gdp",
    "population",
    "thinness_1_19_years",
    "thinness_5_9_years",
    "income_composition_of_resources",
    "schooling",
]

TEXT_COLUMNS = ("country", "status", "region")
REQUIRED_COLUMNS = ("country", "year", "status")

STATUS_DEVELOPED = "Developed"
STATUS_DEVELOPING = "Developing"

# Names that the generic normalization does not produce on its own.
COLUMN_RENAMES: Dict[str, str] = {
    "life_expectancy_years": "life_expectancy",
    "thinness_10_19_years": "thinness_1_19_years",
    "economy_gdp_per_capita": "economy",
}

_NON_WORD = re.compile(r"[^a-z0-9_]+")
_UNDERSCORES = re.compile(r"_+")


def normalize_column_name(name: Any) -> str:
    """
    "Life expectancy " -> "life_expectancy", " HIV/AIDS" -> "hiv_aids",
    "Economy (GDP per Capita)" -> "economy".
    """
    s = str(name).strip().lower()
    s = s.replace("/", "_").replace("-", "_")
    s = re.sub(r"\s+", "_", s)
    s = _NON_WORD.sub("", s)
    s = _UNDERSCORES.sub("_", s).strip("_")
    return COLUMN_RENAMES.get(s, s)


def standardize_columns(df: pd.DataFrame) -> pd.DataFrame:
    out = df.copy()
    out.columns = [normalize_column_name(c) for c in df.columns]
    return out


@dataclass
class LifeExpectancyRecord:
    """One country-year row of the cleaned dataset."""

    country: str
    year: int
    status: str
    life_expectancy: Optional[float]
    income_resources: Optional[float]
    gdp: Optional[float]
    adult_mortality: Optional[float]
    infant_deaths: Optional[float]
    schooling: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class HappinessRecord:
    country: str
    region: Optional[str]
    happiness_rank: Optional[float]
    happiness_score: Optional[float]
    standard_error: Optional[float]
    economy: Optional[float]
    health_life_expectancy: Optional[float]


def _text(value: Any) -> str:
    if value is None or pd.isna(value):
        return ""
    return str(value)


def _optional_float(value: Any) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


def life_expectancy_records(df: pd.DataFrame) -> List[LifeExpectancyRecord]:
    records: List[LifeExpectancyRecord] = []
    for row in df.to_dict(orient="records"):
        records.append(
            LifeExpectancyRecord(
                country=str(row["country"]),
                year=int(row["year"]),
                status=_text(row.get("status")),
                life_expectancy=_optional_float(row.get("life_expectancy")),
                income_resources=_optional_float(row.get("income_composition_of_resources")),
                gdp=_optional_float(row.get("gdp")),
                adult_mortality=_optional_float(row.get("adult_mortality")),
                infant_deaths=_optional_float(row.get("infant_deaths")),
                schooling=_optional_float(row.get("schooling")),
            )
        )
    return records


def happiness_records(df: pd.DataFrame) -> List[HappinessRecord]:
    return [
        HappinessRecord(
            country=str(row["country"]),
            region=_text(row.get("region")) or None,
            happiness_rank=_optional_float(row.get("happiness_rank")),
            happiness_score=_optional_float(row.get("happiness_score")),
            standard_error=_optional_float(row.get("standard_error")),
            economy=_optional_float(row.get("economy")),
            health_life_expectancy=_optional_float(row.get("health_life_expectancy")),
        )
        for row in df.to_dict(orient="records")
    ]


__all__ = [
    "LIFE_EXPECTANCY_COLUMNS",
    "TEXT_COLUMNS",
    "REQUIRED_COLUMNS",
    "STATUS_DEVELOPED",
    "STATUS_DEVELOPING",
    "LifeExpectancyRecord",
    "HappinessRecord",
    "normalize_column_name",
    "standardize_columns",
    "life_expectancy_records",
    "happiness_records",
]
