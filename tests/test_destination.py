"""Tests for BucketDestination and PartitionWriter."""

import logging
from datetime import datetime, timezone

import pytest

from conftest import RecordingFactory, RecordingStore, decode_partition
from xray_archiver.dto import TimeWindow
from xray_archiver.errors import StorageError
from xray_archiver.storage.destination import BucketDestination, PartitionWriter
from xray_archiver.storage.partition import open_partition

WINDOW = TimeWindow(
    datetime(2019, 1, 19, 3, tzinfo=timezone.utc),
    datetime(2019, 1, 19, 4, tzinfo=timezone.utc),
)


class TestBucketDestination:
    """Tests for region resolution."""

    def test_parses_bucket_and_base_path(self, store_factory):
        dest = BucketDestination("s3://xray-history/base/uri/", store_factory)
        assert dest.bucket == "xray-history"
        assert dest.base_path == "base/uri"

    def test_looks_up_the_bucket_region(self, store, store_factory):
        dest = BucketDestination("s3://xray-history/base/uri", store_factory)
        assert dest.region == "hi-story-3"
        assert store.lookups == ["xray-history"]
        assert store_factory.regions == [None, "hi-story-3"]

    @pytest.mark.parametrize("location", ["", None])
    def test_empty_location_means_default_region(self, location):
        factory = RecordingFactory(RecordingStore(location=location))
        dest = BucketDestination("s3://xray-history/base", factory)
        assert dest.region == "us-east-1"
        assert factory.regions == [None, "us-east-1"]

    def test_custom_default_region(self):
        factory = RecordingFactory(RecordingStore(location=""))
        dest = BucketDestination("s3://xray-history/base", factory, default_region="eu-west-1")
        assert dest.region == "eu-west-1"

    def test_region_is_resolved_once(self, store, store_factory):
        dest = BucketDestination("s3://xray-history/base/uri", store_factory)
        for _ in range(5):
            assert dest.region == "hi-story-3"
            assert dest.store is store
        assert store.lookups == ["xray-history"]

    def test_logs_the_detected_region(self, store_factory, logger, caplog):
        caplog.set_level(logging.DEBUG, logger=logger.name)
        dest = BucketDestination("s3://xray-history/base/uri", store_factory, logger=logger)
        dest.region
        assert "Detected region of bucket xray-history as hi-story-3" in caplog.messages

    def test_lookup_failure_becomes_storage_error(self):
        def factory(region):
            raise RuntimeError("no credentials")

        dest = BucketDestination("s3://xray-history/base", factory)
        with pytest.raises(StorageError):
            dest.region


class TestPartitionWriter:
    """Tests for PartitionWriter.store."""

    def _stored(self, writer, staging_dir, records, artifact="summary"):
        with open_partition(artifact, WINDOW, staging_dir=str(staging_dir)) as stream:
            for r in records:
                stream.write_record(r)
            stream.close()
            return writer.store(stream, WINDOW)

    def test_uploads_to_the_derived_key(self, store, store_factory, staging_dir):
        writer = PartitionWriter(BucketDestination("s3://xray-history/base/uri", store_factory))

        key = self._stored(writer, staging_dir, [{"id": "1"}, {"id": "2"}])

        assert key == "base/uri/summary/hi-story-3/2019/01/19/03/summary-2019011903.json.gz"
        assert decode_partition(store.objects[("xray-history", key)]) == [{"id": "1"}, {"id": "2"}]

    def test_key_region_override(self, store, store_factory, staging_dir):
        dest = BucketDestination("s3://xray-history/base/uri", store_factory)
        writer = PartitionWriter(dest, key_region="us-stubbed-1")

        key = self._stored(writer, staging_dir, [{"id": "g"}], artifact="segment")

        assert key == "base/uri/segment/us-stubbed-1/2019/01/19/03/segment-2019011903.json.gz"
        assert store_factory.regions == [None, "hi-story-3"]

    def test_logs_count_window_and_destination(self, store_factory, staging_dir, logger, caplog):
        caplog.set_level(logging.DEBUG, logger=logger.name)
        writer = PartitionWriter(BucketDestination("s3://xray-history/base/uri", store_factory), logger=logger)

        self._stored(writer, staging_dir, [{"id": "1"}, {"id": "2"}])

        url = "s3://xray-history/base/uri/summary/hi-story-3/2019/01/19/03/summary-2019011903.json.gz"
        assert f"Storing 2 trace summaries for 2019-01-19T03:00:00Z/P1H to {url}" in caplog.messages
        assert f"Stored trace summaries to {url}" in caplog.messages

    def test_upload_failure_becomes_storage_error(self, staging_dir):
        class FailingStore(RecordingStore):
            def put_object(self, bucket, key, body):
                raise OSError("connection reset")

        writer = PartitionWriter(BucketDestination("s3://xray-history/base", RecordingFactory(FailingStore())))

        with pytest.raises(StorageError) as exc_info:
            self._stored(writer, staging_dir, [{"id": "g"}], artifact="segment")

        assert exc_info.value.window == WINDOW
        assert exc_info.value.artifact == "segment"
        assert isinstance(exc_info.value.__cause__, OSError)
