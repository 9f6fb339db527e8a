"""
Scheduled-function entry point.

Intended to run once an hour (e.g. as a Lambda function on a schedule);
configuration comes from the environment, see ArchiverConfig.from_env.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

import boto3

from .config import ArchiverConfig
from .errors import ArchiverError
from .intake.xray_source import XRayTraceSource
from .logging_setup import init_logging
from .orchestration.runner import TraceCollector
from .storage.destination import BucketDestination
from .storage.s3_store import s3_store_factory


def build_collector(
    config: ArchiverConfig,
    session: Optional[boto3.session.Session] = None,
    logger: Optional[logging.Logger] = None,
) -> TraceCollector:
    """Wire the boto3 adapters and the collection engine together."""
    logger = logger or init_logging(config.log_level)
    session = session or boto3.session.Session()

    source = XRayTraceSource(session.client("xray"))
    logger.debug("Archiving traces from X-Ray in %s", source.region)

    destination = BucketDestination(
        config.history_base_uri,
        s3_store_factory(session),
        default_region=config.default_region,
        logger=logger,
    )
    return TraceCollector(source=source, destination=destination, config=config, logger=logger)


def handler(event: Any = None, context: Any = None) -> None:
    """Archive the last WINDOW_SIZE full hours of traces."""
    logger = init_logging(os.environ.get("LOG_LEVEL", "INFO"))
    try:
        config = ArchiverConfig.from_env()
        build_collector(config, logger=logger).collect_traces()
    except ArchiverError:
        logger.exception("Trace archiving failed")
        raise
    return None
