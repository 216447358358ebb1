import pytest
import requests

import common.retry as retry
from env_loader import env_float, env_int, env_str, load_dotenv_if_present


class FakeResponse:
    def __init__(self, status_code=200, content=b"", headers=None):
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


def _scripted_get(monkeypatch, outcomes):
    calls = []

    def fake_get(url, params=None, headers=None, timeout=None):
        calls.append(url)
        outcome = outcomes[len(calls) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    monkeypatch.setattr(retry.requests, "get", fake_get)
    return calls


class TestHttpGetWithRetries:
    def test_retries_on_status_then_succeeds(self, monkeypatch):
        calls = _scripted_get(monkeypatch, [FakeResponse(503), FakeResponse(200, b"ok")])
        sleeps = []

        resp = retry.http_get_with_retries("https://x", sleep=sleeps.append)

        assert resp.content == b"ok"
        assert len(calls) == 2
        assert len(sleeps) == 1

    def test_retry_after_header_is_honoured(self, monkeypatch):
        _scripted_get(
            monkeypatch,
            [FakeResponse(429, headers={"Retry-After": "2"}), FakeResponse(200)],
        )
        sleeps = []

        retry.http_get_with_retries("https://x", sleep=sleeps.append)

        assert sleeps == [2.0]

    def test_connection_errors_exhaust_attempts(self, monkeypatch):
        calls = _scripted_get(monkeypatch, [requests.ConnectionError("down")] * 3)
        sleeps = []

        with pytest.raises(requests.ConnectionError):
            retry.http_get_with_retries("https://x", max_attempts=3, sleep=sleeps.append)

        assert len(calls) == 3
        assert len(sleeps) == 2

    def test_last_bad_response_is_returned(self, monkeypatch):
        _scripted_get(monkeypatch, [FakeResponse(500), FakeResponse(500)])

        resp = retry.http_get_with_retries("https://x", max_attempts=2, sleep=lambda s: None)

        assert resp.status_code == 500

    def test_download_bytes_raises_on_http_error(self, monkeypatch):
        _scripted_get(monkeypatch, [FakeResponse(404)])
        with pytest.raises(requests.HTTPError):
            retry.download_bytes("https://x", sleep=lambda s: None)


class TestEnvLoader:
    def test_dotenv_does_not_override(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# comment\n"
            "GRAPH_TOP_K=7\n"
            "LIFE_EXPECTANCY_SOURCE=\"data/life.csv\"\n"
            "PIPELINE_OUTPUT_ROOT=from-file\n",
            encoding="utf-8",
        )
        # registered with monkeypatch so values loaded from the file are undone
        for name in ("GRAPH_TOP_K", "LIFE_EXPECTANCY_SOURCE"):
            monkeypatch.setenv(name, "placeholder")
            monkeypatch.delenv(name)
        monkeypatch.setenv("PIPELINE_OUTPUT_ROOT", "from-env")

        load_dotenv_if_present(str(env_file))

        assert env_int("GRAPH_TOP_K", 5) == 7
        assert env_str("LIFE_EXPECTANCY_SOURCE") == "data/life.csv"
        assert env_str("PIPELINE_OUTPUT_ROOT") == "from-env"

    def test_invalid_numbers_fall_back(self, monkeypatch):
        monkeypatch.setenv("GRAPH_SIMILARITY_THRESHOLD", "high")
        monkeypatch.setenv("GRAPH_TOP_K", " ")

        assert env_float("GRAPH_SIMILARITY_THRESHOLD", 0.8) == 0.8
        assert env_int("GRAPH_TOP_K", 5) == 5
        assert env_str("GRAPH_TOP_K", "d") == "d"
