import io

import pandas as pd
import pytest

from adapters import LocalStorageAdapter, S3StorageAdapter


class TestLocalStorageAdapter:
    def test_raw_roundtrip_creates_parents(self, tmp_path):
        storage = LocalStorageAdapter(tmp_path)
        location = storage.write_raw("raw/life_expectancy/a.csv", b"x,y\n1,2\n")

        assert location == str(tmp_path / "raw" / "life_expectancy" / "a.csv")
        assert storage.read_raw("raw/life_expectancy/a.csv") == b"x,y\n1,2\n"
        assert storage.exists("raw/life_expectancy/a.csv")
        assert not storage.exists("raw/life_expectancy")

    def test_list_keys_is_sorted_and_relative(self, tmp_path):
        storage = LocalStorageAdapter(tmp_path)
        storage.write_raw("processed/b/2.txt", b"2")
        storage.write_raw("processed/a/1.txt", b"1")
        storage.write_raw("other/3.txt", b"3")

        assert storage.list_keys("processed") == ["processed/a/1.txt", "processed/b/2.txt"]
        assert storage.list_keys("missing") == []

    def test_parquet_and_csv_roundtrip(self, tmp_path):
        storage = LocalStorageAdapter(tmp_path)
        df = pd.DataFrame({"country": ["Peru", "Chad"], "life_expectancy": [74.0, 51.0]})

        storage.write_parquet(df, "t/data.parquet")
        storage.write_csv(df, "t/data.csv")

        pd.testing.assert_frame_equal(storage.read_parquet("t/data.parquet"), df)
        pd.testing.assert_frame_equal(storage.read_csv("t/data.csv"), df)


class _FakeBody:
    def __init__(self, content):
        self._content = content

    def read(self):
        return self._content


class _FakePaginator:
    def __init__(self, objects):
        self._objects = objects

    def paginate(self, Bucket, Prefix):
        keys = sorted(k for k in self._objects if k.startswith(Prefix))
        # two pages to exercise pagination
        yield {"Contents": [{"Key": k} for k in keys[:1]]}
        yield {"Contents": [{"Key": k} for k in keys[1:]]}


class FakeS3Client:
    def __init__(self):
        self.objects = {}

    def put_object(self, Bucket, Key, Body):
        self.objects[Key] = Body

    def get_object(self, Bucket, Key):
        return {"Body": _FakeBody(self.objects[Key])}

    def get_paginator(self, name):
        assert name == "list_objects_v2"
        return _FakePaginator(self.objects)

    def list_objects_v2(self, Bucket, Prefix, MaxKeys):
        keys = sorted(k for k in self.objects if k.startswith(Prefix))[:MaxKeys]
        return {"Contents": [{"Key": k} for k in keys]} if keys else {}


class TestS3StorageAdapter:
    @pytest.fixture
    def client(self):
        return FakeS3Client()

    def test_keys_are_placed_under_base_prefix(self, client):
        storage = S3StorageAdapter("bucket", base_prefix="/life/", boto3_client=client)

        location = storage.write_raw("raw/a.csv", b"abc")

        assert location == "s3://bucket/life/raw/a.csv"
        assert client.objects == {"life/raw/a.csv": b"abc"}
        assert storage.read_raw("raw/a.csv") == b"abc"

    def test_list_keys_strips_base_prefix(self, client):
        storage = S3StorageAdapter("bucket", base_prefix="life", boto3_client=client)
        storage.write_raw("processed/b.parquet", b"2")
        storage.write_raw("processed/a.parquet", b"1")
        storage.write_raw("raw/c.csv", b"3")

        assert storage.list_keys("processed") == ["processed/a.parquet", "processed/b.parquet"]

    def test_exists_requires_exact_key(self, client):
        storage = S3StorageAdapter("bucket", boto3_client=client)
        storage.write_raw("raw/a.csv.bak", b"x")

        assert not storage.exists("raw/a.csv")
        storage.write_raw("raw/a.csv", b"x")
        assert storage.exists("raw/a.csv")

    def test_dataframe_helpers_use_buffers(self, client):
        storage = S3StorageAdapter("bucket", boto3_client=client)
        df = pd.DataFrame({"year": [2013, 2014], "gdp": [900.0, 5000.0]})

        storage.write_parquet(df, "p/data.parquet")
        storage.write_csv(df, "p/data.csv")

        pd.testing.assert_frame_equal(storage.read_parquet("p/data.parquet"), df)
        assert pd.read_csv(io.BytesIO(client.objects["p/data.csv"]))["gdp"].tolist() == [900.0, 5000.0]
