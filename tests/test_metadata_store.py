import os

import pytest

from adapters import InMemoryMetadataAdapter, LocalMetadataAdapter
from metadata import (
    METADATA_LOCAL_FILE_ENV,
    RUN_STATUS_FAILED,
    RUN_STATUS_RUNNING,
    RUN_STATUS_SUCCESS,
    end_run,
    get_all_checkpoints,
    get_last_run,
    list_runs,
    load_checkpoint,
    reset_local_store,
    save_checkpoint,
    start_run,
)


def test_run_lifecycle():
    run_id = start_run("life_expectancy_cleaning")
    assert get_last_run()["status"] == RUN_STATUS_RUNNING

    record = end_run(run_id, status=RUN_STATUS_SUCCESS, rows_processed=2938, last_checkpoint="raw/x.csv")

    assert record["status"] == RUN_STATUS_SUCCESS
    assert record["rows_processed"] == 2938
    assert record["end_ts"] is not None
    assert get_last_run("life_expectancy_cleaning")["last_checkpoint"] == "raw/x.csv"


def test_runs_filtered_by_scope():
    start_run("life_expectancy_raw")
    start_run("similarity_graph")
    start_run("similarity_graph")

    assert len(list_runs()) == 3
    assert len(list_runs("similarity_graph")) == 2
    assert get_last_run("unknown") is None


def test_end_unknown_run_raises():
    with pytest.raises(KeyError):
        end_run("does-not-exist")


def test_checkpoints_and_reset():
    save_checkpoint("life_expectancy_raw_sha1", "abc")
    start_run("life_expectancy_raw")

    assert load_checkpoint("life_expectancy_raw_sha1") == "abc"
    assert load_checkpoint("missing", "fallback") == "fallback"
    assert get_all_checkpoints() == {"life_expectancy_raw_sha1": "abc"}

    assert reset_local_store() == (1, 1)
    assert list_runs() == []
    assert get_all_checkpoints() == {}


def test_corrupted_file_raises(tmp_path):
    path = tmp_path / "runs.json"
    assert os.environ[METADATA_LOCAL_FILE_ENV] == str(path)
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(RuntimeError, match="corrupted"):
        list_runs()


def test_non_object_file_raises(tmp_path):
    (tmp_path / "runs.json").write_text("[]", encoding="utf-8")
    with pytest.raises(RuntimeError, match="invalid format"):
        start_run("life_expectancy_raw")


def test_local_adapter_persists_to_json(tmp_path):
    meta = LocalMetadataAdapter()
    run_id = meta.start_run("similarity_graph")
    meta.end_run(run_id, status=RUN_STATUS_FAILED, error_message="boom")
    meta.save_checkpoint("k", "v")

    assert (tmp_path / "runs.json").is_file()
    assert meta.list_runs("similarity_graph")[0]["error_message"] == "boom"
    assert meta.load_checkpoint("k") == "v"


class TestInMemoryMetadataAdapter:
    def test_nothing_written_to_disk(self, tmp_path):
        meta = InMemoryMetadataAdapter()
        run_id = meta.start_run("life_expectancy_raw")
        meta.end_run(run_id, rows_processed=3)

        assert not (tmp_path / "runs.json").exists()
        assert meta.list_runs()[0]["rows_processed"] == 3

    def test_unknown_run_raises(self):
        with pytest.raises(KeyError):
            InMemoryMetadataAdapter().end_run("nope")

    def test_checkpoint_default(self):
        meta = InMemoryMetadataAdapter()
        assert meta.load_checkpoint("x", 5) == 5
        meta.save_checkpoint("x", 1)
        assert meta.load_checkpoint("x", 5) == 1
