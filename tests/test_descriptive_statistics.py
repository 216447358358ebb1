import math

import pandas as pd
import pytest

from analysis.descriptive_statistics import (
    GDP_LINE_PLOT_NAME,
    MORTALITY_HISTOGRAM_NAME,
    build_gdp_line_plot,
    build_mortality_histograms,
    describe_series,
    run_eda,
    summarize_life_expectancy_and_gdp,
)


class TestDescribeSeries:
    def test_sample_statistics(self):
        stats = describe_series([1.0, 2.0, 3.0, 4.0])

        assert stats.count == 4
        assert stats.mean == pytest.approx(2.5)
        assert stats.median == pytest.approx(2.5)
        assert stats.variance == pytest.approx(5.0 / 3.0)
        assert stats.std_dev == pytest.approx(math.sqrt(5.0 / 3.0))
        assert (stats.minimum, stats.maximum) == (1.0, 4.0)

    def test_missing_and_text_values_are_ignored(self):
        stats = describe_series([1, None, "n/a", 3, float("nan")])
        assert stats.count == 2
        assert stats.mean == pytest.approx(2.0)

    def test_single_value_has_undefined_spread(self):
        stats = describe_series([5.0])
        assert stats.mean == 5.0
        assert math.isnan(stats.std_dev)
        assert math.isnan(stats.variance)

    def test_empty_input(self):
        stats = describe_series([])
        assert stats.count == 0
        assert math.isnan(stats.mean)

    def test_format_lines(self):
        lines = describe_series([1.0, 3.0]).format_lines()
        assert lines[0] == "Mean: 2.00"
        assert lines[1] == "Median: 2.00"
        assert lines[3] == "Variance: 2.00"


def test_summary_over_cleaned_dataset(cleaned_df):
    stats = summarize_life_expectancy_and_gdp(cleaned_df)

    assert stats["life_expectancy"].count == 12
    assert stats["life_expectancy"].mean == pytest.approx(888.8 / 12)
    assert stats["gdp"].minimum == 780.0
    assert stats["gdp"].maximum == 43000.0


def test_figures_written(cleaned_df, tmp_path):
    gdp_plot = build_gdp_line_plot(cleaned_df, output_dir=tmp_path)
    histograms = build_mortality_histograms(cleaned_df, output_dir=tmp_path)

    assert gdp_plot == tmp_path / GDP_LINE_PLOT_NAME
    assert histograms == tmp_path / MORTALITY_HISTOGRAM_NAME
    assert gdp_plot.stat().st_size > 0
    assert histograms.stat().st_size > 0


def test_gdp_plot_skipped_without_data(tmp_path):
    df = pd.DataFrame({"country": ["Peru"], "gdp": [float("nan")]})
    assert build_gdp_line_plot(df, output_dir=tmp_path) is None
    assert not (tmp_path / GDP_LINE_PLOT_NAME).exists()


def test_run_eda_prints_statistics(cleaned_df, tmp_path, capsys):
    result = run_eda(cleaned_df, output_dir=tmp_path)

    assert len(result["figures"]) == 2
    out = capsys.readouterr().out
    assert "Life Expectancy Statistics:" in out
    assert "GDP per Country Statistics:" in out
