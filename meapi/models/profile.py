"""Profile aggregate domain model — records, write inputs, and search results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


def _text(value: Any) -> str:
    """Textual columns default to empty string, never NULL."""
    return "" if value is None else str(value)


@dataclass
class Project:
    title: str
    description: str = ""
    link: str = ""
    id: Optional[int] = None
    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "link": self.link,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Project":
        return cls(
            id=row.get("id"),
            title=row["title"],
            description=_text(row.get("description")),
            link=_text(row.get("link")),
            created_at=_text(row.get("created_at")),
        )

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Project":
        return cls(
            title=_text(payload.get("title")),
            description=_text(payload.get("description")),
            link=_text(payload.get("link")),
        )


@dataclass
class WorkEntry:
    company: str
    position: str
    duration: str = ""
    description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "company": self.company,
            "position": self.position,
            "duration": self.duration,
            "description": self.description,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "WorkEntry":
        return cls(
            company=_text(row.get("company")),
            position=_text(row.get("position")),
            duration=_text(row.get("duration")),
            description=_text(row.get("description")),
        )

    from_payload = from_row


@dataclass
class LinkSet:
    github: str = ""
    linkedin: str = ""
    portfolio: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"github": self.github, "linkedin": self.linkedin, "portfolio": self.portfolio}

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "LinkSet":
        return cls(
            github=_text(row.get("github")),
            linkedin=_text(row.get("linkedin")),
            portfolio=_text(row.get("portfolio")),
        )

    from_payload = from_row


@dataclass
class Profile:
    """The identity row.  At most one exists."""

    name: str
    email: str
    education: str = ""
    id: Optional[int] = None
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "email": self.email, "education": self.education}

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Profile":
        return cls(
            id=row.get("id"),
            name=row["name"],
            email=row["email"],
            education=_text(row.get("education")),
            created_at=_text(row.get("created_at")),
            updated_at=_text(row.get("updated_at")),
        )


@dataclass
class ProfileView:
    """The whole aggregate as served by ``GET /profile``."""

    profile: Profile
    skills: list[str] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    work: list[WorkEntry] = field(default_factory=list)
    links: Optional[LinkSet] = None

    @property
    def name(self) -> str:
        return self.profile.name

    @property
    def email(self) -> str:
        return self.profile.email

    @property
    def education(self) -> str:
        return self.profile.education

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.profile.to_dict(),
            "skills": list(self.skills),
            "projects": [p.to_dict() for p in self.projects],
            "work": [w.to_dict() for w in self.work],
            "links": self.links.to_dict() if self.links else {},
        }


# -- Write inputs --------------------------------------------------------------


def _projects(raw: Optional[list[Any]]) -> Optional[list[Project]]:
    if raw is None:
        return None
    return [p if isinstance(p, Project) else Project.from_payload(p) for p in raw]


def _work(raw: Optional[list[Any]]) -> Optional[list[WorkEntry]]:
    if raw is None:
        return None
    return [w if isinstance(w, WorkEntry) else WorkEntry.from_payload(w) for w in raw]


def _links(raw: Any) -> Optional[LinkSet]:
    if raw is None or isinstance(raw, LinkSet):
        return raw
    return LinkSet.from_payload(raw)


@dataclass
class CreateProfileInput:
    name: Optional[str] = None
    email: Optional[str] = None
    education: Optional[str] = None
    skills: list[str] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    work: list[WorkEntry] = field(default_factory=list)
    links: Optional[LinkSet] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CreateProfileInput":
        return cls(
            name=payload.get("name"),
            email=payload.get("email"),
            education=payload.get("education"),
            skills=list(payload.get("skills") or []),
            projects=_projects(payload.get("projects")) or [],
            work=_work(payload.get("work")) or [],
            links=_links(payload.get("links")),
        )


@dataclass
class UpdateProfileInput:
    """
    Partial update.  ``None`` means "not supplied": scalar columns keep their
    value and collections are left alone.  A supplied collection, even an
    empty one, replaces the stored collection entirely.
    """

    name: Optional[str] = None
    email: Optional[str] = None
    education: Optional[str] = None
    skills: Optional[list[str]] = None
    projects: Optional[list[Project]] = None
    work: Optional[list[WorkEntry]] = None
    links: Optional[LinkSet] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "UpdateProfileInput":
        skills = payload.get("skills")
        return cls(
            name=payload.get("name"),
            email=payload.get("email"),
            education=payload.get("education"),
            skills=list(skills) if skills is not None else None,
            projects=_projects(payload.get("projects")),
            work=_work(payload.get("work")),
            links=_links(payload.get("links")),
        )

    @property
    def touches_profile_row(self) -> bool:
        return any(v is not None for v in (self.name, self.email, self.education))

    def supplied_fields(self) -> list[str]:
        names = ("name", "email", "education", "skills", "projects", "work", "links")
        return [n for n in names if getattr(self, n) is not None]


# -- Search --------------------------------------------------------------------


@dataclass
class SearchResults:
    profile: list[Profile] = field(default_factory=list)
    skills: list[str] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    work: list[WorkEntry] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.profile or self.skills or self.projects or self.work)

    def to_dict(self) -> dict[str, Any]:
        return {
            "profile": [p.to_dict() for p in self.profile],
            "skills": list(self.skills),
            "projects": [p.to_dict() for p in self.projects],
            "work": [w.to_dict() for w in self.work],
        }
