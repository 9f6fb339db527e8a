"""
Compressed partition staging.

Each window produces two partitions (summaries and segments). Records are
appended to a local staging file as newline-delimited JSON through a gzip or
zstd writer, so a window never has to fit in memory. The staging file is
removed when the `open_partition` context exits, whether the window was
stored or the run failed.
"""

from __future__ import annotations

import gzip
import json
import os
import tempfile
from contextlib import contextmanager
from datetime import date, datetime
from typing import IO, Any, Generator, Literal, Mapping, Optional

import zstandard  # type: ignore

from ..dto import Artifact, TimeWindow

Compression = Literal["gzip", "zstd"]

EXTENSIONS = {
    "gzip": ".json.gz",
    "zstd": ".json.zst",
}


def _json_default(value: Any) -> Any:
    # boto3 hands back datetimes for timestamp members.
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_record(record: Mapping[str, Any]) -> bytes:
    """Serialize one record as a single UTF-8 JSON line."""
    return (json.dumps(record, default=_json_default, ensure_ascii=False) + "\n").encode("utf-8")


class PartitionStream:
    """
    Line writer over one compressed staging file.

    Attributes
    ----------
    artifact : "summary" | "segment"
    window : TimeWindow
    path : str
        Staging file location.
    count : int
        Records written so far.
    """

    def __init__(self, artifact: Artifact, window: TimeWindow, path: str, compression: Compression = "gzip") -> None:
        self.artifact = artifact
        self.window = window
        self.path = path
        self.compression = compression
        self.count = 0
        self._closed = False

        if compression == "gzip":
            self._raw: Optional[IO[bytes]] = None
            self._fh: IO[bytes] = gzip.open(path, "wb")
        elif compression == "zstd":
            self._raw = open(path, "wb")
            self._fh = zstandard.ZstdCompressor().stream_writer(self._raw, closefd=False)
        else:
            raise ValueError(f"unsupported compression {compression!r}")

    @property
    def closed(self) -> bool:
        return self._closed

    def write_record(self, record: Mapping[str, Any]) -> None:
        """Append one record as a JSON line."""
        if self._closed:
            raise ValueError(f"{self.artifact} partition for {self.window.label} is already closed")
        self._fh.write(encode_record(record))
        self.count += 1

    def close(self) -> None:
        """Finish the compressed stream; safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._fh.close()
        finally:
            if self._raw is not None:
                self._raw.close()

    def open_for_upload(self) -> IO[bytes]:
        """Open the finished staging file for reading."""
        if not self._closed:
            raise ValueError(f"{self.artifact} partition for {self.window.label} must be closed before upload")
        return open(self.path, "rb")


@contextmanager
def open_partition(
    artifact: Artifact,
    window: TimeWindow,
    *,
    compression: Compression = "gzip",
    staging_dir: Optional[str] = None,
) -> Generator[PartitionStream, None, None]:
    """
    Context manager yielding a PartitionStream backed by a fresh staging file.

    The stream is closed and the staging file deleted on exit.
    """
    fd, path = tempfile.mkstemp(
        prefix=window.start.strftime(f"{artifact}-%Y%m%d%H-"),
        suffix=EXTENSIONS[compression],
        dir=staging_dir,
    )
    os.close(fd)
    try:
        stream = PartitionStream(artifact, window, path, compression)
        try:
            yield stream
        finally:
            stream.close()
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass


def partition_key(base_path: str, artifact: str, region: str, window_start: datetime, extension: str) -> str:
    """
    Object key of one partition:
      <base>/<artifact>/<region>/YYYY/MM/DD/HH/<artifact>-YYYYMMDDHH<extension>

    An empty base path yields a key without a leading slash.
    """
    leaf = window_start.strftime(f"%Y/%m/%d/%H/{artifact}-%Y%m%d%H{extension}")
    parts = [base_path.strip("/"), artifact, region, leaf]
    return "/".join(p for p in parts if p)
