"""
Transformations layer
----------------------

Modules that turn the RAW life-expectancy CSV into the typed, cleaned
PROCESSED dataset used by the analysis layer.
"""

from .schema import (  # noqa: F401
    LIFE_EXPECTANCY_COLUMNS,
    STATUS_DEVELOPED,
    STATUS_DEVELOPING,
    HappinessRecord,
    LifeExpectancyRecord,
    normalize_column_name,
    standardize_columns,
)
from .life_expectancy_processed import (  # noqa: F401
    CLEANED_CSV_NAME,
    CLEANING_DEFAULTS,
    PROCESSED_BASE_PREFIX,
    PROCESSED_OUTPUT_DIR,
    clean_dataset,
    fill_missing_values,
    load_cleaned_dataset,
    load_numeric_matrix,
    load_raw_dataset,
    process_life_expectancy_raw_file,
    save_cleaned_dataset,
    to_records,
)

__all__ = [
    "LIFE_EXPECTANCY_COLUMNS",
    "STATUS_DEVELOPED",
    "STATUS_DEVELOPING",
    "HappinessRecord",
    "LifeExpectancyRecord",
    "normalize_column_name",
    "standardize_columns",
    "CLEANED_CSV_NAME",
    "CLEANING_DEFAULTS",
    "PROCESSED_BASE_PREFIX",
    "PROCESSED_OUTPUT_DIR",
    "clean_dataset",
    "fill_missing_values",
    "load_cleaned_dataset",
    "load_numeric_matrix",
    "load_raw_dataset",
    "process_life_expectancy_raw_file",
    "save_cleaned_dataset",
    "to_records",
]
