"""
Segment tree flattening.

X-Ray nests subsegments inside their parent segment to arbitrary depth. The
archive stores one record per node instead:

- the top-level node gets type "segment";
- every nested node gets type "subsegment", the root's trace_id, its
  immediate parent's id (parent_id) and the full ancestor chain, root first
  (parent_ids);
- a node's `subsegments` field is replaced by its immediate children's ids.

Trees are walked with an explicit stack, so depth is bounded only by memory.
Records come out in post-order: descendants before their ancestor, siblings
in document order.
"""

from __future__ import annotations

from typing import Iterator, List, Optional, Sequence, Tuple

from ..dto import FlatRecord, SegmentNode, TimeWindow, TraceSegments
from ..errors import ArchiverError, FetchError, MalformedDocumentError
from ..intake.documents import parse_document
from ..ports import TraceSourcePort
from ..storage.partition import PartitionStream
from .batching import MAX_BATCH_SIZE

# (node, ancestor ids root-first, children already pushed)
_Frame = Tuple[SegmentNode, List[str], bool]


def flatten_segment(document: SegmentNode, trace_id: Optional[str] = None) -> Iterator[FlatRecord]:
    """
    Yield one flat record per node of the segment tree rooted at `document`.

    Parameters
    ----------
    document : dict
        A decoded top-level segment document.
    trace_id : str, optional
        Fallback trace id for subsegments when the root does not carry one.
    """
    trace_id = document.get("trace_id", trace_id)
    stack: List[_Frame] = [(document, [], False)]

    while stack:
        node, parent_ids, expanded = stack.pop()
        children = _children(node)
        if children and not expanded:
            stack.append((node, parent_ids, True))
            child_parent_ids = parent_ids + [node.get("id")]
            for child in reversed(children):
                stack.append((child, child_parent_ids, False))
            continue
        yield _flat_record(node, parent_ids, trace_id)


def _children(node: SegmentNode) -> List[SegmentNode]:
    children = node.get("subsegments")
    if children is None:
        return []
    if not isinstance(children, list) or not all(isinstance(c, dict) for c in children):
        raise MalformedDocumentError(
            f"Segment {node.get('id')!r} has a 'subsegments' field that is not a list of objects",
            artifact="segment",
        )
    return children


def _flat_record(node: SegmentNode, parent_ids: List[str], trace_id: Optional[str]) -> FlatRecord:
    record = dict(node)
    if parent_ids:
        if trace_id is not None:
            record["trace_id"] = trace_id
        record["parent_id"] = parent_ids[-1]
        record["parent_ids"] = list(parent_ids)
        record["type"] = "subsegment"
    else:
        record["type"] = "segment"
    if node.get("subsegments") is not None:
        record["subsegments"] = [child.get("id") for child in node["subsegments"]]
    else:
        record.pop("subsegments", None)
    return record


class SegmentFlattener:
    """
    Retrieves the segments of one batch of traces and writes them, flattened,
    to the segment partition.
    """

    def __init__(self, source: TraceSourcePort) -> None:
        self._source = source

    def process_batch(self, trace_ids: Sequence[str], stream: PartitionStream, window: TimeWindow) -> int:
        """
        Flatten every segment of every trace in the batch into `stream`.

        Returns the number of records written (segments plus all nested
        subsegments).
        """
        if len(trace_ids) > MAX_BATCH_SIZE:
            raise ValueError(f"at most {MAX_BATCH_SIZE} trace ids per batch, got {len(trace_ids)}")

        count = 0
        for trace in self._traces(trace_ids, window):
            for raw in trace.documents:
                try:
                    document = parse_document(raw)
                    for record in flatten_segment(document, trace_id=trace.trace_id):
                        stream.write_record(record)
                        count += 1
                except MalformedDocumentError as e:
                    e.annotate(window=window, artifact="segment")
                    raise
        return count

    def _traces(self, trace_ids: Sequence[str], window: TimeWindow) -> Iterator[TraceSegments]:
        try:
            for trace in self._source.fetch_segments(list(trace_ids)):
                yield trace
        except ArchiverError as e:
            e.annotate(window=window, artifact="segment")
            raise
        except Exception as e:
            raise FetchError(
                f"Could not load segments for traces {', '.join(trace_ids)}: {e}",
                window=window,
                artifact="segment",
            ) from e
