#!/usr/bin/env python3
"""Create the database and load a profile from a YAML file."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import yaml

from meapi.config import get_settings
from meapi.db.database import Database
from meapi.db.profile_repo import ProfileRepository
from meapi.errors import ProfileError
from meapi.models.profile import CreateProfileInput


def load_profile_file(path: Path) -> CreateProfileInput:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    return CreateProfileInput.from_payload(data)


def seed(db_path: Path, seed_file: Path, keep: bool = False) -> int:
    """Rebuild the database at ``db_path`` and create the profile.  Returns its id."""
    if db_path.exists() and not keep:
        db_path.unlink()
        print(f"Removed existing database: {db_path}")

    db = Database(path=db_path)
    db.init()
    print(f"Database schema created at: {db.path}")

    data = load_profile_file(seed_file)
    profile_id = ProfileRepository(db).create_profile(data)
    print(f"Profile inserted with ID: {profile_id}")
    print(f"  {len(data.skills)} skills, {len(data.projects)} projects, "
          f"{len(data.work)} work experiences, links: {'yes' if data.links else 'no'}")
    return profile_id


def main(argv: Optional[list[str]] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Seed the profile database")
    parser.add_argument("--db-path", type=str, help="Override database path")
    parser.add_argument("--seed-file", type=str, help="YAML file with the profile definition")
    parser.add_argument("--keep", action="store_true", help="Do not delete an existing database")
    args = parser.parse_args(argv)

    db_path = Path(args.db_path) if args.db_path else settings.DATABASE_PATH
    seed_file = Path(args.seed_file) if args.seed_file else settings.SEED_FILE

    try:
        seed(db_path, seed_file, keep=args.keep)
    except ProfileError as e:
        print(f"Error seeding database: {e.message}", file=sys.stderr)
        return 1

    print("Database seeded successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
