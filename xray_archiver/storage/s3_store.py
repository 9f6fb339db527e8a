"""
S3-backed ObjectStore adapter.

`s3_store_factory` plays the role of a client class: called with None it
returns a store on the session's default region (enough for the bucket
location lookup), called with a region it returns a store bound to it.
"""

from __future__ import annotations

from typing import IO, Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..errors import StorageError
from ..ports import ObjectStoreFactory, ObjectStorePort


class S3ObjectStore(ObjectStorePort):
    def __init__(self, client: Any) -> None:
        self._client = client

    def locate_bucket(self, bucket: str) -> Optional[str]:
        """Return the bucket's LocationConstraint (None/empty for us-east-1)."""
        try:
            resp = self._client.get_bucket_location(Bucket=bucket)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"GetBucketLocation failed for bucket {bucket}: {e}") from e
        return resp.get("LocationConstraint")

    def put_object(self, bucket: str, key: str, body: IO[bytes]) -> None:
        try:
            self._client.put_object(Bucket=bucket, Key=key, Body=body)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"PutObject failed for s3://{bucket}/{key}: {e}") from e


def s3_store_factory(session: Optional[boto3.session.Session] = None) -> ObjectStoreFactory:
    """Return a factory building S3ObjectStore instances per region."""
    session = session or boto3.session.Session()

    def factory(region: Optional[str]) -> ObjectStorePort:
        return S3ObjectStore(session.client("s3", region_name=region))

    return factory
