"""
Seed script for the Participium report store (in-memory or Firestore).

Usage:
  - Dry run (default): python scripts/seed_db.py
  - Apply to configured DB: python scripts/seed_db.py --apply
  - Use a specific seed file: python scripts/seed_db.py --apply --file demo/participium.json
  - Force in-memory stores even if Firebase is configured: python scripts/seed_db.py --apply --force-mock

Behavior:
  - Loads `participium.json` from the working directory unless --file is given.
  - Builds the stores via ServiceRegistry (in-memory or Firestore depending on settings).
  - Reports go through the lifecycle engine, so the transition rules and the
    comment guard apply to seeded data as well.

NOTE: When applying to real Firestore, ensure `FIREBASE_CREDENTIALS_PATH` is set and `USE_MOCK_DB=false` in `.env`.
"""

import argparse
import os
import sys

from participium.core.logging_config import configure_logging
from participium.core.settings import settings
from participium.services.registry import ServiceRegistry
from participium.services.seeding import Seeder, describe_seed, load_seed


def main(argv=None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--apply", action="store_true", help="Write seed to the DB instead of dry-run")
    parser.add_argument("--force-mock", action="store_true", help="Force in-memory stores even if Firebase is configured")
    parser.add_argument("--file", default=os.path.join(os.getcwd(), "participium.json"), help="Seed file path")
    args = parser.parse_args(argv)

    configure_logging(settings)

    if not os.path.exists(args.file):
        print(f"Seed file not found: {args.file}")
        return 1

    seed = load_seed(args.file)

    if not args.apply:
        for line in describe_seed(seed):
            print(f"Preparing: {line}")
        print("Dry run complete. Re-run with --apply to write to DB.")
        return 0

    config = settings.model_copy(update={"USE_MOCK_DB": True}) if args.force_mock else settings
    if args.force_mock:
        print("Forcing in-memory stores for this run.")

    summary = Seeder(ServiceRegistry(config)).apply(seed)
    print(f"Seeding completed: {summary.officers} officers, {summary.reports} reports, {summary.comments} comments.")
    for failure in summary.failures:
        print(f"Failed: {failure}")
    return 0 if summary.success else 2


if __name__ == "__main__":
    sys.exit(main())
