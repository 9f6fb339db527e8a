"""
xray_archiver: hourly archiving of AWS X-Ray traces to S3.

Public API (stable):
- ArchiverConfig          (configuration)
- TraceCollector          (orchestrates a run)
- handler                 (scheduled-function entry point)
- TraceSourcePort         (tracing-service adapter interface)
- ObjectStorePort         (object storage adapter interface)
- XRayTraceSource, S3ObjectStore, s3_store_factory (boto3 adapters)
- BucketDestination, PartitionWriter
- flatten_segment, plan_windows, BatchAccumulator
- DTOs: TimeWindow, TraceSegments, WindowReport
- Errors: ArchiverError, FetchError, MalformedDocumentError, StorageError, ConfigError
"""

from __future__ import annotations

# Configuration
from .config import ArchiverConfig

# Orchestration
from .orchestration.runner import TraceCollector
from .lambda_handler import handler

# Ports
from .ports import ObjectStoreFactory, ObjectStorePort, TraceSourcePort

# Adapters
from .intake.xray_source import XRayTraceSource
from .storage.s3_store import S3ObjectStore, s3_store_factory
from .storage.destination import BucketDestination, PartitionWriter

# Core steps
from .pipeline.batching import MAX_BATCH_SIZE, BatchAccumulator
from .pipeline.flatten import SegmentFlattener, flatten_segment
from .pipeline.summaries import SummaryFetcher, is_empty_summary
from .pipeline.windowing import hour_floor, plan_windows

# DTOs
from .dto import TimeWindow, TraceSegments, WindowReport

# Errors
from .errors import (
    ArchiverError,
    ConfigError,
    FetchError,
    MalformedDocumentError,
    StorageError,
)

__all__ = [
    "ArchiverConfig",
    "TraceCollector",
    "handler",
    "ObjectStoreFactory",
    "ObjectStorePort",
    "TraceSourcePort",
    "XRayTraceSource",
    "S3ObjectStore",
    "s3_store_factory",
    "BucketDestination",
    "PartitionWriter",
    "MAX_BATCH_SIZE",
    "BatchAccumulator",
    "SegmentFlattener",
    "flatten_segment",
    "SummaryFetcher",
    "is_empty_summary",
    "hour_floor",
    "plan_windows",
    "TimeWindow",
    "TraceSegments",
    "WindowReport",
    "ArchiverError",
    "ConfigError",
    "FetchError",
    "MalformedDocumentError",
    "StorageError",
]
