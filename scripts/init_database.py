#!/usr/bin/env python3
# flake8: noqa: E402
"""
Database Initialization

Connects to MongoDB, reconciles collections, indexes and reference data,
then closes the connection.

Usage:
    python scripts/init_database.py [--uri URI] [--drop] [--quiet]

Exit status is 0 when every part of the database initialized, 1 otherwise.
"""

from dotenv import load_dotenv

load_dotenv()

import argparse
import sys

from loguru import logger

from mongo_bootstrap.config import config
from mongo_bootstrap.lib.database import ConnectionManager
from mongo_bootstrap.lib.initializer import initialize_sync
from mongo_bootstrap.lib.log import configure_logging


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        "--uri", default=None, help="MongoDB URI (defaults to MONGODB_URL)"
    )
    parser.add_argument(
        "--drop",
        action="store_true",
        help="Drop every collection when done (clean start)",
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Do not log connection errors"
    )
    args = parser.parse_args(argv)

    configure_logging()
    db = ConnectionManager()
    if not db.connect(args.uri or config.mongodb_url, args.drop, args.quiet):
        return 1

    try:
        ok = initialize_sync(db)
    finally:
        db.close()

    if ok:
        logger.info("Database initialization complete")
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
