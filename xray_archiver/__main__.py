"""
Command-line entry point: `python -m xray_archiver`.

Environment variables provide defaults (see ArchiverConfig.from_env);
flags override them.
"""

from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from .config import ArchiverConfig
from .errors import ArchiverError
from .lambda_handler import build_collector


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="xray_archiver", description="Archive X-Ray traces to S3, one hour at a time.")
    p.add_argument("--base-uri", dest="history_base_uri", help="s3://bucket/base/path (env HISTORY_BASE_URI)")
    p.add_argument("--windows", dest="window_count", type=int, help="number of full hours to archive (env WINDOW_SIZE)")
    p.add_argument("--compression", choices=("gzip", "zstd"), help="partition codec (env COMPRESSION)")
    p.add_argument("--staging-dir", dest="staging_dir", help="directory for staging files (env STAGING_DIR)")
    p.add_argument("--key-region", dest="key_region", help="region written into object keys (env KEY_REGION)")
    p.add_argument("--log-level", dest="log_level", help="DEBUG, INFO, ... (env LOG_LEVEL)")
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        config = ArchiverConfig.from_env(**vars(args))
    except ArchiverError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    collector = build_collector(config)
    try:
        reports = collector.collect_traces()
    except ArchiverError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    for r in reports:
        print(
            f"{r.window.label}: {r.accepted} summaries ({r.skipped} skipped) -> {r.summary_key}; "
            f"{r.segments} segments -> {r.segment_key}"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())
