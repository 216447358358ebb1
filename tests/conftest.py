"""
Shared fixtures: a small dataset in the raw Kaggle layout (stray spaces
in headers, blank cells) and an isolated metadata store.
"""

import os

os.environ.setdefault("MPLBACKEND", "Agg")

import pandas as pd
import pytest

RAW_HEADER = [
    "Country",
    "Year",
    "Status",
    "Life expectancy ",
    "Adult Mortality",
    "infant deaths",
    "Alcohol",
    "percentage expenditure",
    "Hepatitis B",
    "Measles ",
    " BMI ",
    "under-five deaths ",
    "Polio",
    "Total expenditure",
    "Diphtheria ",
    " HIV/AIDS",
    "GDP",
    "Population",
    " thinness  1-19 years",
    " thinness 5-9 years",
    "Income composition of resources",
    "Schooling",
]

# country, status, year -> (life expectancy, adult mortality, infant deaths,
#                           gdp, population, income composition, schooling)
RAW_VALUES = [
    ("Japan", "Developed", 2013, (83.0, 50, 2, 38000.0, 127.0e6, 0.90, 15.2)),
    ("Japan", "Developed", 2014, (83.5, 52, 2, 36000.0, 127.1e6, 0.90, 15.3)),
    ("Japan", "Developed", 2015, (84.0, 55, 1, 34000.0, 127.2e6, 0.91, 15.3)),
    ("France", "Developed", 2013, (82.0, 60, 3, 42000.0, 66.0e6, 0.88, 16.0)),
    ("France", "Developed", 2014, (82.3, 61, 3, 43000.0, 66.3e6, 0.89, 16.1)),
    ("France", "Developed", 2015, (82.5, 62, 3, 36000.0, 66.6e6, 0.89, 16.2)),
    ("Chad", "Developing", 2013, (51.0, 350, 45, 900.0, 13.0e6, 0.39, 7.0)),
    ("Chad", "Developing", 2014, (52.0, 340, 44, None, 13.5e6, 0.40, 7.2)),
    ("Chad", "Developing", 2015, (None, 330, None, 780.0, None, None, None)),
    ("Peru", "Developing", 2013, (74.0, 120, 9, 6600.0, 30.0e6, 0.73, 13.5)),
    ("Peru", "Developing", 2014, (74.5, 118, 9, 6500.0, 30.5e6, 0.74, 13.6)),
    ("Peru", "Developing", 2015, (75.0, 115, 8, 6000.0, 31.0e6, 0.74, 13.8)),
]


def _cell(value):
    return "" if value is None else str(value)


def build_raw_rows():
    rows = []
    for i, (country, status, year, values) in enumerate(RAW_VALUES):
        le, adult, infant, gdp, pop, income, school = values
        developed = status == "Developed"
        rows.append(
            [
                country,
                year,
                status,
                _cell(le),
                _cell(adult),
                _cell(infant),
                10.5 if developed else 1.5,            # alcohol
                round(100.0 + 7 * i, 1),               # percentage expenditure
                95 if developed else 60 + i,           # hepatitis B
                0 if developed else 100 * i,           # measles
                25.0 if developed else 20.0 + i / 10,  # BMI
                2 if developed else 50 - i,            # under-five deaths
                98 if developed else 70 + i,           # polio
                10.0 if developed else 5.0,            # total expenditure
                97 if developed else 65 + i,           # diphtheria
                0.1 if developed else 1.0 + i / 10,    # HIV/AIDS
                _cell(gdp),
                _cell(pop),
                1.0 if developed else 8.0,             # thinness 1-19
                1.0 if developed else 8.5,             # thinness 5-9
                _cell(income),
                _cell(school),
            ]
        )
    return rows


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("METADATA_LOCAL_FILE", str(tmp_path / "runs.json"))
    for name in (
        "PIPELINE_S3_BUCKET",
        "PIPELINE_S3_BASE_PREFIX",
        "GRAPH_SIMILARITY_THRESHOLD",
        "GRAPH_TOP_K",
        "PIPELINE_OUTPUT_ROOT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def raw_csv(tmp_path):
    path = tmp_path / "Life Expectancy Data.csv"
    pd.DataFrame(build_raw_rows(), columns=RAW_HEADER).to_csv(path, index=False)
    return path


@pytest.fixture
def raw_df(raw_csv):
    from transformations import load_raw_dataset

    return load_raw_dataset(raw_csv)


@pytest.fixture
def cleaned_df(raw_csv):
    from transformations import clean_dataset

    return clean_dataset(raw_csv)


@pytest.fixture
def happiness_csv(tmp_path):
    path = tmp_path / "2015.csv"
    path.write_text(
        "Country,Region,Happiness Rank,Happiness Score,Standard Error,"
        "Economy (GDP per Capita),Health (Life Expectancy)\n"
        "Switzerland,Western Europe,1,7.587,0.03411,1.39651,0.94143\n"
        "Japan,Eastern Asia,46,5.987,0.03581,1.27074,0.99111\n"
        "Chad,Sub-Saharan Africa,149,3.667,0.0383,0.34193,0.1501\n",
        encoding="utf-8",
    )
    return path
