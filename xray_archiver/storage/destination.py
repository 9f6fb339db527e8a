"""
Partition destination: bucket, region and upload.

The archive bucket's region is looked up once, the first time a partition is
stored, and reused for the rest of the run together with a store bound to
that region. Unless `key_region` is given, the bucket region is also the
region component of object keys.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlsplit

from ..dto import ARTIFACT_PLURALS, TimeWindow
from ..errors import ArchiverError, StorageError
from ..ports import ObjectStoreFactory, ObjectStorePort
from .partition import EXTENSIONS, PartitionStream, partition_key

DEFAULT_REGION = "us-east-1"

_log = logging.getLogger(__name__)


class BucketDestination:
    """
    Archive location (s3://bucket/base/path) with a lazily resolved region.

    Parameters
    ----------
    base_uri : str
        Archive base location.
    store_factory : ObjectStoreFactory
        Builds a store for a region; called with None for the region lookup.
    default_region : str
        Used when the bucket location lookup returns nothing.
    """

    def __init__(
        self,
        base_uri: str,
        store_factory: ObjectStoreFactory,
        *,
        default_region: str = DEFAULT_REGION,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        parts = urlsplit(base_uri)
        self.bucket = parts.netloc
        self.base_path = parts.path.strip("/")
        self._factory = store_factory
        self._default_region = default_region
        self._logger = logger or _log
        self._region: Optional[str] = None
        self._store: Optional[ObjectStorePort] = None

    @property
    def region(self) -> str:
        """The bucket's region, looked up on first access."""
        if self._region is None:
            self._resolve()
        return self._region  # type: ignore[return-value]

    @property
    def store(self) -> ObjectStorePort:
        """A store bound to the bucket's region."""
        if self._store is None:
            self._resolve()
        return self._store  # type: ignore[return-value]

    def _resolve(self) -> None:
        try:
            location = self._factory(None).locate_bucket(self.bucket)
        except ArchiverError:
            raise
        except Exception as e:
            raise StorageError(f"Could not look up the region of bucket {self.bucket}: {e}") from e

        region = location or self._default_region
        self._logger.debug("Detected region of bucket %s as %s", self.bucket, region)
        self._store = self._factory(region)
        self._region = region

    def url(self, key: str) -> str:
        return f"s3://{self.bucket}/{key}"


class PartitionWriter:
    """
    Uploads closed partitions to their deterministic keys.

    Parameters
    ----------
    destination : BucketDestination
        Run-scoped destination; owns the cached region.
    key_region : str, optional
        Region component for keys; the bucket's region when None.
    """

    def __init__(
        self,
        destination: BucketDestination,
        *,
        key_region: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._destination = destination
        self._key_region = key_region
        self._logger = logger or _log

    def key_for(self, stream: PartitionStream) -> str:
        region = self._key_region or self._destination.region
        return partition_key(
            self._destination.base_path,
            stream.artifact,
            region,
            stream.window.start,
            EXTENSIONS[stream.compression],
        )

    def store(self, stream: PartitionStream, window: TimeWindow) -> str:
        """
        Upload a closed partition and return its key.

        Raises StorageError (with window and artifact) if the region lookup
        or the upload fails.
        """
        plural = ARTIFACT_PLURALS[stream.artifact]
        try:
            key = self.key_for(stream)
            url = self._destination.url(key)
            self._logger.debug("Storing %d trace %s for %s to %s", stream.count, plural, window.label, url)
            with stream.open_for_upload() as body:
                self._destination.store.put_object(self._destination.bucket, key, body)
        except ArchiverError as e:
            e.annotate(window=window, artifact=stream.artifact)
            raise
        except Exception as e:
            raise StorageError(
                f"Could not store trace {plural}: {e}", window=window, artifact=stream.artifact
            ) from e
        self._logger.info("Stored trace %s to %s", plural, url)
        return key
