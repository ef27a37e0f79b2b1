"""Repository for the profile aggregate — the ``profile`` row and its four child tables.

Writes are whole-aggregate: create inserts everything in one transaction,
update merges scalar columns and replaces every supplied child collection.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from meapi.db.database import Database, Session
from meapi.errors import ConflictError, NotFoundError, ValidationError
from meapi.models.profile import (
    CreateProfileInput,
    LinkSet,
    Profile,
    ProfileView,
    Project,
    UpdateProfileInput,
    WorkEntry,
)

logger = logging.getLogger(__name__)


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _check_projects(projects: Optional[list[Project]]) -> None:
    for project in projects or []:
        if not project.title:
            raise ValidationError("Project title is required")


class ProfileRepository:
    """Aggregate repository for the single personal profile."""

    def __init__(self, db: Database):
        self._db = db

    # -- Read ------------------------------------------------------------------

    def get_profile(self) -> ProfileView:
        """Load the whole aggregate.  Raises NotFoundError if no profile exists."""
        with self._db.snapshot() as session:
            return self.load(session)

    def load(self, session: Session) -> ProfileView:
        row = session.fetchone("SELECT * FROM profile ORDER BY id LIMIT 1")
        if row is None:
            raise NotFoundError("Profile not found")
        profile = Profile.from_row(row)
        return ProfileView(
            profile=profile,
            skills=self._skills(session, profile.id),
            projects=self._projects(session, profile.id),
            work=self._work(session, profile.id),
            links=self._links(session, profile.id),
        )

    def exists(self) -> bool:
        with self._db.snapshot() as session:
            return self._profile_id(session) is not None

    def get_skills(self) -> list[str]:
        with self._db.snapshot() as session:
            return self._skills(session, self._require_id(session))

    def get_projects(self) -> list[Project]:
        with self._db.snapshot() as session:
            return self._projects(session, self._require_id(session))

    def get_work(self) -> list[WorkEntry]:
        with self._db.snapshot() as session:
            return self._work(session, self._require_id(session))

    def get_links(self) -> Optional[LinkSet]:
        with self._db.snapshot() as session:
            return self._links(session, self._require_id(session))

    # -- Create ----------------------------------------------------------------

    def create_profile(self, data: CreateProfileInput) -> int:
        """Insert the profile and all supplied children.  Returns the new profile id."""
        if not data.name or not data.email:
            raise ValidationError("Name and email are required")
        _check_projects(data.projects)

        with self._db.transaction() as session:
            if self._profile_id(session) is not None:
                raise ConflictError("Profile already exists. Use PUT to update.")
            profile_id = session.insert(
                "INSERT INTO profile (name, email, education) VALUES (?, ?, ?)",
                (data.name, data.email, data.education or ""),
            )
            self._insert_skills(session, profile_id, data.skills)
            self._insert_projects(session, profile_id, data.projects)
            self._insert_work(session, profile_id, data.work)
            if data.links is not None:
                self._insert_links(session, profile_id, data.links)

        logger.info(
            f"Created profile {profile_id} ({data.email}): {len(data.skills)} skills, "
            f"{len(data.projects)} projects, {len(data.work)} work entries"
        )
        return profile_id

    # -- Update ----------------------------------------------------------------

    def update_profile(self, data: UpdateProfileInput) -> None:
        """
        Coalesce the scalar columns and replace each supplied collection.
        Tables the input does not mention are left untouched.
        """
        if data.name == "" or data.email == "":
            raise ValidationError("Name and email cannot be empty")
        _check_projects(data.projects)

        with self._db.transaction() as session:
            profile_id = self._profile_id(session)
            if profile_id is None:
                raise NotFoundError("Profile not found. Use POST to create.")

            if data.touches_profile_row:
                session.execute(
                    """UPDATE profile
                       SET name = COALESCE(?, name),
                           email = COALESCE(?, email),
                           education = COALESCE(?, education),
                           updated_at = ?
                       WHERE id = ?""",
                    (data.name, data.email, data.education, _utcnow(), profile_id),
                )
            if data.skills is not None:
                session.execute("DELETE FROM skills WHERE profile_id = ?", (profile_id,))
                self._insert_skills(session, profile_id, data.skills)
            if data.projects is not None:
                session.execute("DELETE FROM projects WHERE profile_id = ?", (profile_id,))
                self._insert_projects(session, profile_id, data.projects)
            if data.work is not None:
                session.execute("DELETE FROM work WHERE profile_id = ?", (profile_id,))
                self._insert_work(session, profile_id, data.work)
            if data.links is not None:
                session.execute("DELETE FROM links WHERE profile_id = ?", (profile_id,))
                self._insert_links(session, profile_id, data.links)

        logger.info(f"Updated profile {profile_id}: {', '.join(data.supplied_fields()) or 'no changes'}")

    # -- Row helpers -----------------------------------------------------------

    @staticmethod
    def _profile_id(session: Session) -> Optional[int]:
        row = session.fetchone("SELECT id FROM profile ORDER BY id LIMIT 1")
        return row["id"] if row else None

    def _require_id(self, session: Session) -> int:
        profile_id = self._profile_id(session)
        if profile_id is None:
            raise NotFoundError("Profile not found")
        return profile_id

    @staticmethod
    def _skills(session: Session, profile_id: int) -> list[str]:
        rows = session.fetchall(
            "SELECT skill_name FROM skills WHERE profile_id = ? ORDER BY id", (profile_id,)
        )
        return [r["skill_name"] for r in rows]

    @staticmethod
    def _projects(session: Session, profile_id: int) -> list[Project]:
        rows = session.fetchall(
            """SELECT id, title, description, link, created_at
               FROM projects WHERE profile_id = ? ORDER BY id""",
            (profile_id,),
        )
        return [Project.from_row(r) for r in rows]

    @staticmethod
    def _work(session: Session, profile_id: int) -> list[WorkEntry]:
        rows = session.fetchall(
            """SELECT company, position, duration, description
               FROM work WHERE profile_id = ? ORDER BY id""",
            (profile_id,),
        )
        return [WorkEntry.from_row(r) for r in rows]

    @staticmethod
    def _links(session: Session, profile_id: int) -> Optional[LinkSet]:
        row = session.fetchone(
            "SELECT github, linkedin, portfolio FROM links WHERE profile_id = ?", (profile_id,)
        )
        return LinkSet.from_row(row) if row else None

    @staticmethod
    def _insert_skills(session: Session, profile_id: int, skills: list[str]) -> None:
        session.executemany(
            "INSERT INTO skills (profile_id, skill_name) VALUES (?, ?)",
            [(profile_id, skill) for skill in skills],
        )

    @staticmethod
    def _insert_projects(session: Session, profile_id: int, projects: list[Project]) -> None:
        session.executemany(
            "INSERT INTO projects (profile_id, title, description, link) VALUES (?, ?, ?, ?)",
            [(profile_id, p.title, p.description or "", p.link or "") for p in projects],
        )

    @staticmethod
    def _insert_work(session: Session, profile_id: int, work: list[WorkEntry]) -> None:
        session.executemany(
            """INSERT INTO work (profile_id, company, position, duration, description)
               VALUES (?, ?, ?, ?, ?)""",
            [
                (profile_id, w.company or "", w.position or "", w.duration or "", w.description or "")
                for w in work
            ],
        )

    @staticmethod
    def _insert_links(session: Session, profile_id: int, links: LinkSet) -> None:
        session.execute(
            "INSERT INTO links (profile_id, github, linkedin, portfolio) VALUES (?, ?, ?, ?)",
            (profile_id, links.github or "", links.linkedin or "", links.portfolio or ""),
        )
