"""Tests for the seed script."""

from __future__ import annotations

import shutil
import tempfile
import unittest
from pathlib import Path

from meapi.db.database import Database
from meapi.db.profile_repo import ProfileRepository
from scripts.seed_db import load_profile_file, main, seed

SAMPLE_FILE = Path(__file__).resolve().parents[1] / "data" / "sample_profile.yaml"


class TestSeedScript(unittest.TestCase):
    def setUp(self):
        self.tmp_dir = Path(tempfile.mkdtemp(prefix="meapi-test-"))
        self.db_path = self.tmp_dir / "profile.db"

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def test_sample_file_parses(self):
        data = load_profile_file(SAMPLE_FILE)
        self.assertEqual(data.name, "John Doe")
        self.assertEqual(len(data.skills), 10)
        self.assertEqual(len(data.projects), 3)
        self.assertEqual(len(data.work), 2)
        self.assertIsNotNone(data.links)

    def test_seed_creates_profile(self):
        self.assertEqual(seed(self.db_path, SAMPLE_FILE), 1)
        view = ProfileRepository(Database(path=self.db_path)).get_profile()
        self.assertEqual(view.email, "john.doe@example.com")
        self.assertIn("Weather Dashboard", [p.title for p in view.projects])

    def test_reseed_replaces_database(self):
        seed(self.db_path, SAMPLE_FILE)
        code = main(["--db-path", str(self.db_path), "--seed-file", str(SAMPLE_FILE)])
        self.assertEqual(code, 0)
        self.assertEqual(Database(path=self.db_path).fetchone("SELECT COUNT(*) AS n FROM profile")["n"], 1)

    def test_keep_refuses_second_profile(self):
        seed(self.db_path, SAMPLE_FILE)
        code = main(["--db-path", str(self.db_path), "--seed-file", str(SAMPLE_FILE), "--keep"])
        self.assertEqual(code, 1)


if __name__ == "__main__":
    unittest.main()
