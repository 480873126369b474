"""Console smoke test: look one user up by field and print its user name.

    python -m mongocrud --collection Users --field UserName --value admin
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from .config import get_settings
from .models.user import UserRecord
from .repositories import DocumentRepository, NotFoundRepositoryError, StoreUnavailableError


def _parse_args(argv: Optional[Sequence[str]]) -> argparse.Namespace:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="mongocrud", description=__doc__.splitlines()[0])
    parser.add_argument("--uri", default=settings.mongo_uri, help="MongoDB connection string")
    parser.add_argument("--db", default=settings.mongo_db, help="database name")
    parser.add_argument("--collection", default="Users")
    parser.add_argument("--field", default="UserName")
    parser.add_argument("--value", default="admin")
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    with DocumentRepository(args.uri, args.db, UserRecord) as repo:
        try:
            record = repo.load_one_by_field(args.collection, args.field, args.value)
        except (NotFoundRepositoryError, StoreUnavailableError) as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
    print(record.user_name)
    return 0


if __name__ == "__main__":
    sys.exit(main())
