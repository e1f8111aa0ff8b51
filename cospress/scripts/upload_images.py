#!/usr/bin/env python3
"""
Upload local images to Tencent COS and print their CDN URLs.

Files are content-addressed, so re-running on the same files only issues
HEAD requests.

Usage:
    uv run python -m cospress.scripts.upload_images \
        --env ~/notes/.env \
        --workers 4 \
        ./figures/plot.png ./figures/diagram.svg
"""

from __future__ import annotations

import argparse
from concurrent.futures import ThreadPoolExecutor
import logging
from pathlib import Path
import sys

from cospress.core.config import get_settings, load_cos_config
from cospress.core.errors import ApiError
from cospress.services.cos import CosService, UploadResult
from cospress.services.digest import extension_from_filename


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Upload images to Tencent COS",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("files", nargs="+", help="Image files to upload")
    parser.add_argument(
        "--env",
        default=None,
        help="Path to .env file with TENCENT_SECRET_ID, TENCENT_SECRET_KEY, COS_BUCKET, COS_REGION",
    )
    parser.add_argument("--workers", type=int, default=1, help="Parallel uploads (default: 1)")
    parser.add_argument("--verbose", action="store_true", help="Log probe/upload details")
    return parser.parse_args()


def upload_file(path: Path, env_path: str) -> UploadResult:
    data = path.read_bytes()
    # Each upload resolves its own config and service; nothing is shared.
    service = CosService(load_cos_config(env_path))
    return service.upload(data, extension_from_filename(path.name))


def main() -> int:
    args = parse_args()
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    env_path = args.env or get_settings().cos_env_path
    paths = [Path(f).expanduser().resolve() for f in args.files]
    for path in paths:
        if not path.is_file():
            print(f"Error: not a file: {path}", file=sys.stderr)
            return 1

    failures = 0
    with ThreadPoolExecutor(max_workers=max(1, args.workers)) as pool:
        futures = [(path, pool.submit(upload_file, path, env_path)) for path in paths]
        for path, future in futures:
            try:
                result = future.result()
            except ApiError as e:
                failures += 1
                print(f"{path.name}: failed [{e.code}] {e.message}", file=sys.stderr)
                continue
            except OSError as e:
                failures += 1
                print(f"{path.name}: failed to read: {e}", file=sys.stderr)
                continue
            status = "uploaded" if result.uploaded else "exists"
            print(f"{path.name} -> {result.url} ({status})")

    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
