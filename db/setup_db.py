# db/setup_db.py
"""
Create the users/airlines/reviews tables, optionally seed sample airlines and
report on the store.

    python -m db.setup_db --seed --check
"""
from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from infra.config import get_settings
from infra.store import Store


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Prepare the airline reviews database.")
    parser.add_argument("--db", default=None, help="SQLite file (default: REVIEWS_DB_PATH)")
    parser.add_argument("--seed", action="store_true", help="add sample airlines when none exist")
    parser.add_argument("--check", action="store_true", help="print row counts and duplicate airline names")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    store = Store(args.db or get_settings().db_path)
    store.ensure_schema()
    print(f"✅ tables ready in {store.db_path}")

    if args.seed:
        added = store.seed_sample_airlines()
        print(f"Seeded {added} airline(s)." if added else "Airlines already present; nothing seeded.")

    if args.check:
        report = store.check()
        for table, count in report["counts"].items():
            print(f"- {table}: {count} row(s)")
        dupes = report["duplicate_airline_names"]
        if dupes:
            print("⚠️ Airline names duplicated (case-insensitive):")
            for d in dupes:
                print(f"- \"{d['name']}\" appears {d['count']} times")
            return 1
        print("No duplicate airline names.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
