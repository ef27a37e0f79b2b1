"""Unit tests for the profile aggregate repository.

Covers create/read/update of the whole aggregate, the single-profile rule,
replace semantics for collections, coalesce semantics for scalar columns,
and rollback of half-done writes.
"""

from __future__ import annotations

import shutil
import sqlite3
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from meapi.db.database import Database
from meapi.db.profile_repo import ProfileRepository
from meapi.errors import ConflictError, NotFoundError, StorageError, ValidationError
from meapi.models.profile import (
    CreateProfileInput,
    LinkSet,
    Project,
    UpdateProfileInput,
    WorkEntry,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _make_db() -> Database:
    tmp_dir = Path(tempfile.mkdtemp(prefix="meapi-test-"))
    db = Database(path=tmp_dir / "profile.db")
    db.init()
    return db


def _sample_input(**overrides) -> CreateProfileInput:
    defaults = dict(
        name="Alice Chen",
        email="alice@example.com",
        education="BSc Computer Science",
        skills=["Python", "SQL", "Docker"],
        projects=[
            Project(title="Weather Dashboard", description="Forecasts with charts", link="https://ex.com/w"),
            Project(title="Task Manager", description="Full-stack todo app"),
        ],
        work=[
            WorkEntry(company="Tech Startup Inc.", position="Backend Intern",
                      duration="2023", description="Built REST APIs"),
        ],
        links=LinkSet(github="https://github.com/alice", linkedin="https://linkedin.com/in/alice"),
    )
    defaults.update(overrides)
    return CreateProfileInput(**defaults)


def _count(db: Database, table: str) -> int:
    return db.fetchone(f"SELECT COUNT(*) AS n FROM {table}")["n"]


class _RepoTestCase(unittest.TestCase):
    def setUp(self):
        self.db = _make_db()
        self.repo = ProfileRepository(self.db)

    def tearDown(self):
        shutil.rmtree(self.db.path.parent, ignore_errors=True)


# ===========================================================================
# 1. Read
# ===========================================================================

class TestGetProfile(_RepoTestCase):
    def test_missing_profile_raises_not_found(self):
        with self.assertRaises(NotFoundError):
            self.repo.get_profile()
        self.assertFalse(self.repo.exists())

    def test_repeated_reads_are_identical(self):
        self.repo.create_profile(_sample_input())
        self.assertEqual(self.repo.get_profile().to_dict(), self.repo.get_profile().to_dict())

    def test_aggregate_shape(self):
        self.repo.create_profile(_sample_input())
        data = self.repo.get_profile().to_dict()
        self.assertEqual(
            set(data), {"name", "email", "education", "skills", "projects", "work", "links"}
        )
        self.assertEqual(data["skills"], ["Python", "SQL", "Docker"])
        self.assertEqual(
            data["projects"][0],
            {"id": 1, "title": "Weather Dashboard", "description": "Forecasts with charts",
             "link": "https://ex.com/w"},
        )
        self.assertEqual(data["work"][0]["company"], "Tech Startup Inc.")
        self.assertEqual(data["links"]["portfolio"], "")

    def test_links_default_to_empty_object(self):
        self.repo.create_profile(_sample_input(links=None))
        view = self.repo.get_profile()
        self.assertIsNone(view.links)
        self.assertEqual(view.to_dict()["links"], {})

    def test_sub_collection_reads(self):
        self.repo.create_profile(_sample_input())
        self.assertEqual(self.repo.get_skills(), ["Python", "SQL", "Docker"])
        self.assertEqual([p.title for p in self.repo.get_projects()],
                         ["Weather Dashboard", "Task Manager"])
        self.assertEqual(self.repo.get_work()[0].position, "Backend Intern")
        self.assertEqual(self.repo.get_links().github, "https://github.com/alice")

    def test_sub_collection_read_without_profile(self):
        with self.assertRaises(NotFoundError):
            self.repo.get_skills()


# ===========================================================================
# 2. Create
# ===========================================================================

class TestCreateProfile(_RepoTestCase):
    def test_create_then_read(self):
        profile_id = self.repo.create_profile(
            CreateProfileInput(name="A", email="a@x.com", skills=["x", "y"])
        )
        self.assertEqual(profile_id, 1)
        view = self.repo.get_profile()
        self.assertEqual(view.name, "A")
        self.assertEqual(view.email, "a@x.com")
        self.assertEqual(sorted(view.skills), ["x", "y"])
        self.assertEqual(view.education, "")
        self.assertEqual(view.projects, [])
        self.assertEqual(view.work, [])

    def test_missing_name_or_email(self):
        for bad in (
            CreateProfileInput(email="a@x.com"),
            CreateProfileInput(name="A"),
            CreateProfileInput(name="", email="a@x.com"),
            CreateProfileInput(name="A", email=""),
        ):
            with self.assertRaises(ValidationError):
                self.repo.create_profile(bad)
        self.assertEqual(_count(self.db, "profile"), 0)

    def test_project_without_title_rejected(self):
        with self.assertRaises(ValidationError):
            self.repo.create_profile(_sample_input(projects=[Project(title="")]))
        self.assertEqual(_count(self.db, "profile"), 0)

    def test_second_create_conflicts(self):
        self.repo.create_profile(_sample_input())
        with self.assertRaises(ConflictError):
            self.repo.create_profile(_sample_input(name="Bob", email="bob@example.com"))
        self.assertEqual(_count(self.db, "profile"), 1)
        self.assertEqual(self.repo.get_profile().name, "Alice Chen")

    def test_duplicate_skills_kept(self):
        self.repo.create_profile(_sample_input(skills=["Go", "Go"]))
        self.assertEqual(self.repo.get_profile().skills, ["Go", "Go"])

    def test_optional_text_defaults_to_empty_string(self):
        self.repo.create_profile(_sample_input(
            projects=[Project(title="Bare")],
            work=[WorkEntry(company="Acme", position="Dev")],
            links=LinkSet(github="g"),
        ))
        row = self.db.fetchone("SELECT description, link FROM projects")
        self.assertEqual(row, {"description": "", "link": ""})
        row = self.db.fetchone("SELECT duration, description FROM work")
        self.assertEqual(row, {"duration": "", "description": ""})
        row = self.db.fetchone("SELECT linkedin, portfolio FROM links")
        self.assertEqual(row, {"linkedin": "", "portfolio": ""})

    def test_from_payload(self):
        data = CreateProfileInput.from_payload({
            "name": "A",
            "email": "a@x.com",
            "projects": [{"title": "T"}],
            "work": [{"company": "C", "position": "P"}],
            "links": {"github": "g"},
        })
        self.repo.create_profile(data)
        view = self.repo.get_profile()
        self.assertEqual(view.projects[0].title, "T")
        self.assertEqual(view.work[0].company, "C")
        self.assertEqual(view.links.github, "g")


class TestCreateAtomicity(_RepoTestCase):
    def test_failed_child_insert_rolls_back_profile(self):
        with self.assertRaises(StorageError):
            self.repo.create_profile(_sample_input(skills=["ok", None]))
        for table in ("profile", "skills", "projects", "work", "links"):
            self.assertEqual(_count(self.db, table), 0, table)

    def test_io_failure_mid_create_rolls_back(self):
        with patch.object(
            ProfileRepository, "_insert_work", side_effect=sqlite3.OperationalError("disk I/O error")
        ):
            with self.assertRaises(StorageError):
                self.repo.create_profile(_sample_input())
        self.assertEqual(_count(self.db, "profile"), 0)
        self.assertFalse(self.repo.exists())


# ===========================================================================
# 3. Update
# ===========================================================================

class TestUpdateProfile(_RepoTestCase):
    def setUp(self):
        super().setUp()
        self.repo.create_profile(_sample_input(skills=["a", "b"]))

    def test_update_without_profile(self):
        empty = ProfileRepository(_make_db())
        try:
            with self.assertRaises(NotFoundError):
                empty.update_profile(UpdateProfileInput(name="X"))
        finally:
            shutil.rmtree(empty._db.path.parent, ignore_errors=True)

    def test_skills_replaced_not_merged(self):
        self.repo.update_profile(UpdateProfileInput(skills=["c"]))
        self.assertEqual(self.repo.get_profile().skills, ["c"])
        self.repo.update_profile(UpdateProfileInput())
        self.assertEqual(self.repo.get_profile().skills, ["c"])

    def test_empty_collection_clears(self):
        self.repo.update_profile(UpdateProfileInput(skills=[], projects=[], work=[]))
        view = self.repo.get_profile()
        self.assertEqual((view.skills, view.projects, view.work), ([], [], []))
        self.assertIsNotNone(view.links)

    def test_coalesce_keeps_unsupplied_columns(self):
        self.repo.update_profile(UpdateProfileInput(education="Y"))
        view = self.repo.get_profile()
        self.assertEqual(view.education, "Y")
        self.assertEqual(view.name, "Alice Chen")
        self.assertEqual(view.email, "alice@example.com")

    def test_empty_education_is_a_value(self):
        self.repo.update_profile(UpdateProfileInput(education=""))
        self.assertEqual(self.repo.get_profile().education, "")

    def test_empty_name_rejected(self):
        with self.assertRaises(ValidationError):
            self.repo.update_profile(UpdateProfileInput(name=""))
        self.assertEqual(self.repo.get_profile().name, "Alice Chen")

    def test_updated_at_bumped_only_for_profile_columns(self):
        before = self.repo.get_profile().profile.updated_at
        with patch("meapi.db.profile_repo._utcnow", return_value="2030-01-01T00:00:00.000Z"):
            self.repo.update_profile(UpdateProfileInput(skills=["z"]))
            self.assertEqual(self.repo.get_profile().profile.updated_at, before)
            self.repo.update_profile(UpdateProfileInput(name="Alice B. Chen"))
        self.assertEqual(self.repo.get_profile().profile.updated_at, "2030-01-01T00:00:00.000Z")

    def test_untouched_tables_survive(self):
        before = self.repo.get_profile()
        self.repo.update_profile(UpdateProfileInput(projects=[Project(title="New")]))
        after = self.repo.get_profile()
        self.assertEqual([p.title for p in after.projects], ["New"])
        self.assertEqual(after.skills, before.skills)
        self.assertEqual(after.work, before.work)
        self.assertEqual(after.links, before.links)

    def test_links_replaced(self):
        self.repo.update_profile(UpdateProfileInput(links=LinkSet(portfolio="https://me.dev")))
        links = self.repo.get_profile().links
        self.assertEqual(links, LinkSet(github="", linkedin="", portfolio="https://me.dev"))
        self.assertEqual(_count(self.db, "links"), 1)

    def test_links_added_when_absent(self):
        self.repo.update_profile(UpdateProfileInput(links=LinkSet(github="g")))
        self.repo.update_profile(UpdateProfileInput(links=LinkSet(github="h")))
        self.assertEqual(self.repo.get_links().github, "h")

    def test_failed_replace_keeps_old_collection(self):
        with self.assertRaises(StorageError):
            self.repo.update_profile(UpdateProfileInput(name="Changed", skills=["c", None]))
        view = self.repo.get_profile()
        self.assertEqual(view.skills, ["a", "b"])
        self.assertEqual(view.name, "Alice Chen")

    def test_from_payload_distinguishes_absent_from_empty(self):
        data = UpdateProfileInput.from_payload({"skills": [], "education": ""})
        self.assertEqual(data.skills, [])
        self.assertIsNone(data.projects)
        self.assertEqual(data.supplied_fields(), ["education", "skills"])
        self.repo.update_profile(data)
        view = self.repo.get_profile()
        self.assertEqual(view.skills, [])
        self.assertEqual(len(view.projects), 2)


if __name__ == "__main__":
    unittest.main()
