"""
Segment document decoding.

X-Ray returns every segment as a JSON string. Decoding is the only check
made here: the archiver does not validate segment schemas, it only needs an
object whose `subsegments` (when present) is a list of objects.
"""

from __future__ import annotations

import json
from typing import Any

from ..dto import SegmentNode
from ..errors import MalformedDocumentError


def parse_document(raw: str | bytes) -> SegmentNode:
    """
    Decode one segment document.

    Raises MalformedDocumentError if `raw` is not valid JSON or does not
    decode to an object.
    """
    try:
        document: Any = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedDocumentError(f"Segment document is not valid JSON: {e}", artifact="segment") from e

    if not isinstance(document, dict):
        raise MalformedDocumentError(
            f"Segment document must be a JSON object, got {type(document).__name__}",
            artifact="segment",
        )
    return document
