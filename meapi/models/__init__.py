"""Domain models for the profile aggregate."""

from meapi.models.profile import (
    CreateProfileInput,
    LinkSet,
    Profile,
    ProfileView,
    Project,
    SearchResults,
    UpdateProfileInput,
    WorkEntry,
)

__all__ = [
    "CreateProfileInput",
    "LinkSet",
    "Profile",
    "ProfileView",
    "Project",
    "SearchResults",
    "UpdateProfileInput",
    "WorkEntry",
]
