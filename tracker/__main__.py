"""
Run the progress tracker server.
"""

from __future__ import annotations

import argparse
import logging

import uvicorn

from tracker.config import get_settings

logger = logging.getLogger(__name__)


def main() -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Progress tracker server")
    parser.add_argument(
        "--host",
        type=str,
        default=settings.host,
        help="Interface to bind",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=settings.port,
        help="Port to listen on",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart on code changes (development only)",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    if settings.storage_backend == "file":
        location = settings.data_dir
    elif settings.storage_backend == "sql":
        location = "database" if settings.database_url else "memory (no database url)"
    elif settings.storage_backend == "s3":
        location = settings.s3_bucket or "memory (no bucket)"
    else:
        location = "memory"

    logger.info("Progress tracker running on http://%s:%d", args.host, args.port)
    logger.info("API prefix: %s", settings.api_prefix)
    logger.info("Storage: %s (%s)", settings.storage_backend, location)
    if settings.static_dir:
        logger.info("Serving static files from %s", settings.static_dir)

    uvicorn.run("tracker.app:app", host=args.host, port=args.port, reload=args.reload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
