"""Pytest configuration and fixtures."""

import gzip
import json
import logging
from datetime import datetime, timedelta, timezone

import pytest
import zstandard

from xray_archiver.config import ArchiverConfig
from xray_archiver.dto import TraceSegments


class FakeTraceSource:
    """In-memory tracing service: summaries keyed by window start, segments by trace id."""

    def __init__(self, summaries=None, segments=None, page_size=3):
        self.summaries = summaries or {}
        self.segments = segments or {}
        self.page_size = page_size
        self.summary_calls = []
        self.segment_calls = []

    def fetch_summaries(self, start, end):
        self.summary_calls.append((start, end))
        items = list(self.summaries.get(start, []))
        pages = [items[i:i + self.page_size] for i in range(0, len(items), self.page_size)]
        return iter(pages)

    def fetch_segments(self, trace_ids):
        self.segment_calls.append(list(trace_ids))
        return [
            TraceSegments(trace_id=t, documents=[json.dumps(s) for s in self.segments.get(t, [])])
            for t in trace_ids
        ]


class RecordingStore:
    """Object store that keeps uploaded bodies in memory."""

    def __init__(self, location="hi-story-3"):
        self.location = location
        self.lookups = []
        self.objects = {}

    def locate_bucket(self, bucket):
        self.lookups.append(bucket)
        return self.location

    def put_object(self, bucket, key, body):
        self.objects[(bucket, key)] = body.read()


class RecordingFactory:
    """Store factory that records the regions it was asked for."""

    def __init__(self, store):
        self.store = store
        self.regions = []

    def __call__(self, region):
        self.regions.append(region)
        return self.store


def decode_partition(data, compression="gzip"):
    """Decompress a stored partition into its JSON records."""
    if compression == "gzip":
        raw = gzip.decompress(data)
    else:
        raw = zstandard.ZstdDecompressor().decompressobj().decompress(data)
    return [json.loads(line) for line in raw.decode("utf-8").splitlines() if line]


def make_trace_summary(trace_id):
    return {"id": trace_id, "duration": 1.5, "entry_point": {"name": "something"}}


def make_empty_trace_summary(trace_id):
    return {"id": trace_id}


@pytest.fixture
def now():
    """19:20:21 at UTC-9, i.e. 04:20:21 UTC on the next day."""
    return datetime(2019, 1, 18, 19, 20, 21, tzinfo=timezone(timedelta(hours=-9)))


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def trace_summaries():
    return {
        datetime(2019, 1, 19, 3, tzinfo=timezone.utc): [make_trace_summary(i) for i in ["11", "10", "9", "8"]],
        datetime(2019, 1, 19, 2, tzinfo=timezone.utc): [make_trace_summary(i) for i in ["7", "6"]],
        datetime(2019, 1, 19, 1, tzinfo=timezone.utc): [make_trace_summary(i) for i in ["5", "4", "3", "2", "1", "0"]],
    }


@pytest.fixture
def trace_segments():
    return {
        "0": [{"id": "a", "trace_id": "0"}],
        "1": [{"id": "b", "trace_id": "1"}],
        "2": [{"id": "c", "trace_id": "2"}],
        "3": [{"id": "d", "trace_id": "3"}],
        "4": [{"id": "e", "trace_id": "4"}],
        "5": [{"id": "f", "trace_id": "5"}],
        "6": [{"id": "g", "trace_id": "6"}],
        "7": [{"id": "h", "trace_id": "7"}, {"id": "i", "trace_id": "7"}, {"id": "j", "trace_id": "7"}],
        "8": [{"id": "k", "trace_id": "8"}],
        "9": [{"id": "l", "trace_id": "9"}, {"id": "m", "trace_id": "9"}],
        "10": [{"id": "n", "trace_id": "10"}, {"id": "o", "trace_id": "10"}, {"id": "p", "trace_id": "10"}],
        "11": [{"id": "q", "trace_id": "11"}],
    }


@pytest.fixture
def source(trace_summaries, trace_segments):
    return FakeTraceSource(trace_summaries, trace_segments)


@pytest.fixture
def store():
    return RecordingStore()


@pytest.fixture
def store_factory(store):
    return RecordingFactory(store)


@pytest.fixture
def staging_dir(tmp_path):
    d = tmp_path / "staging"
    d.mkdir()
    return d


@pytest.fixture
def config(staging_dir):
    return ArchiverConfig(
        history_base_uri="s3://xray-history/base/uri",
        window_count=3,
        staging_dir=str(staging_dir),
    )


@pytest.fixture
def logger():
    test_logger = logging.getLogger("xray_archiver_tests")
    test_logger.propagate = True
    test_logger.setLevel(logging.DEBUG)
    return test_logger
