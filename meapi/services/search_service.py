"""Search service — substring queries across the profile and its children.

Matching uses SQL ``LIKE '%term%'``.  The term is not escaped, so ``%`` and
``_`` in a query act as wildcards.  SQLite's LIKE is case-insensitive for
ASCII letters.
"""

from __future__ import annotations

import logging
from typing import Optional

from meapi.db.database import Database
from meapi.errors import ValidationError
from meapi.models.profile import Profile, Project, SearchResults, WorkEntry

logger = logging.getLogger(__name__)


def _pattern(query: str) -> str:
    return f"%{query}%"


class SearchService:
    """Read-only queries over the store.  Each call reads one consistent snapshot."""

    def __init__(self, db: Database):
        self._db = db

    def list_projects(self, query: Optional[str] = None) -> list[Project]:
        """All projects, newest first; filtered on title/description when ``query`` is given."""
        sql = "SELECT id, title, description, link, created_at FROM projects"
        params: tuple = ()
        if query:
            sql += " WHERE title LIKE ? OR description LIKE ?"
            params = (_pattern(query), _pattern(query))
        sql += " ORDER BY created_at DESC, id DESC"
        return [Project.from_row(r) for r in self._db.fetchall(sql, params)]

    def list_skills(self) -> list[str]:
        rows = self._db.fetchall("SELECT DISTINCT skill_name FROM skills ORDER BY skill_name")
        return [r["skill_name"] for r in rows]

    def global_search(self, query: Optional[str]) -> SearchResults:
        if not query:
            raise ValidationError('Search query parameter "q" is required')
        term = _pattern(query)

        with self._db.snapshot() as session:
            profiles = session.fetchall(
                """SELECT id, name, email, education FROM profile
                   WHERE name LIKE ? OR email LIKE ? OR education LIKE ?""",
                (term, term, term),
            )
            skills = session.fetchall(
                "SELECT DISTINCT skill_name FROM skills WHERE skill_name LIKE ?", (term,)
            )
            projects = session.fetchall(
                """SELECT id, title, description, link, created_at FROM projects
                   WHERE title LIKE ? OR description LIKE ?""",
                (term, term),
            )
            work = session.fetchall(
                """SELECT company, position, duration, description FROM work
                   WHERE company LIKE ? OR position LIKE ? OR description LIKE ?""",
                (term, term, term),
            )

        results = SearchResults(
            profile=[Profile.from_row(r) for r in profiles],
            skills=[r["skill_name"] for r in skills],
            projects=[Project.from_row(r) for r in projects],
            work=[WorkEntry.from_row(r) for r in work],
        )
        logger.debug(f"Search {query!r}: {'no matches' if results.is_empty else 'matched'}")
        return results
