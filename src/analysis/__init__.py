"""
Analysis layer
--------------

Analytical outputs generated from the cleaned life-expectancy dataset:

- descriptive statistics and distribution plots
- per-year rankings and Developed vs Developing comparisons
- correlation matrix, heatmap and summary
- supplementary happiness-rank statistics
"""

from .figures import ANALYSIS_OUTPUT_DIR  # noqa: F401
from .descriptive_statistics import (  # noqa: F401
    DescriptiveStats,
    describe_series,
    run_eda,
    summarize_life_expectancy_and_gdp,
)
from .yearly_trends import (  # noqa: F401
    average_life_expectancy_by_status,
    run_yearly_analysis,
    status_averages_by_year,
    top_countries_by_year,
)
from .correlation_analysis import (  # noqa: F401
    build_correlation_summary,
    correlation_matrix,
    pearson_correlation,
    run_correlation_analysis,
)
from .happiness import run_happiness_analysis  # noqa: F401

__all__ = [
    "ANALYSIS_OUTPUT_DIR",
    "DescriptiveStats",
    "describe_series",
    "run_eda",
    "summarize_life_expectancy_and_gdp",
    "average_life_expectancy_by_status",
    "run_yearly_analysis",
    "status_averages_by_year",
    "top_countries_by_year",
    "build_correlation_summary",
    "correlation_matrix",
    "pearson_correlation",
    "run_correlation_analysis",
    "run_happiness_analysis",
]
