"""FastAPI web server for Me-API Playground."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from meapi.config import get_settings
from meapi.db.database import Database
from meapi.db.profile_repo import ProfileRepository
from meapi.errors import (
    ConflictError,
    NotFoundError,
    ProfileError,
    StorageError,
    ValidationError,
)
from meapi.models.profile import CreateProfileInput, UpdateProfileInput
from meapi.services.search_service import SearchService

logger = logging.getLogger(__name__)

# Existing clients expect 400 when a profile already exists.
_STATUS_BY_ERROR: dict[type[ProfileError], int] = {
    ValidationError: 400,
    ConflictError: 400,
    NotFoundError: 404,
    StorageError: 500,
}


# Request Models
class ProjectIn(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    link: Optional[str] = None


class WorkIn(BaseModel):
    company: Optional[str] = None
    position: Optional[str] = None
    duration: Optional[str] = None
    description: Optional[str] = None


class LinksIn(BaseModel):
    github: Optional[str] = None
    linkedin: Optional[str] = None
    portfolio: Optional[str] = None


class ProfilePayload(BaseModel):
    """Body of POST and PUT /profile.  Unset fields stay absent."""
    name: Optional[str] = None
    email: Optional[str] = None
    education: Optional[str] = None
    skills: Optional[list[str]] = None
    projects: Optional[list[ProjectIn]] = None
    work: Optional[list[WorkIn]] = None
    links: Optional[LinksIn] = None


# API Routes
router = APIRouter(prefix="/api")


def _repo(request: Request) -> ProfileRepository:
    return request.app.state.profile_repo


def _search(request: Request) -> SearchService:
    return request.app.state.search_service


@router.get("/profile")
def get_profile(request: Request) -> dict[str, Any]:
    """Get the complete profile aggregate."""
    return _repo(request).get_profile().to_dict()


@router.post("/profile", status_code=201)
def create_profile(payload: ProfilePayload, request: Request) -> dict[str, Any]:
    """Create the profile with all its children."""
    data = CreateProfileInput.from_payload(payload.model_dump(exclude_unset=True))
    profile_id = _repo(request).create_profile(data)
    return {"message": "Profile created successfully", "profileId": profile_id}


@router.put("/profile")
def update_profile(payload: ProfilePayload, request: Request) -> dict[str, Any]:
    """Merge profile fields and replace any supplied collection."""
    data = UpdateProfileInput.from_payload(payload.model_dump(exclude_unset=True))
    _repo(request).update_profile(data)
    return {"message": "Profile updated successfully"}


@router.get("/skills")
def list_skills(request: Request) -> list[str]:
    return _search(request).list_skills()


@router.get("/projects")
def list_projects(request: Request, q: Optional[str] = None) -> list[dict[str, Any]]:
    """All projects, newest first, optionally filtered by ``q``."""
    return [p.to_dict() for p in _search(request).list_projects(q)]


@router.get("/search")
def search(request: Request, q: Optional[str] = None) -> dict[str, Any]:
    """Search profile, skills, projects and work for ``q``."""
    return _search(request).global_search(q).to_dict()


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "OK", "message": "API is healthy"}


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ProfileError)
    async def profile_error_handler(request: Request, exc: ProfileError):
        status = _STATUS_BY_ERROR.get(type(exc), 500)
        if status >= 500:
            return JSONResponse(status_code=status, content={"error": "Internal server error"})
        logger.info(f"{request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=status, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.info(f"{request.method} {request.url.path}: invalid request {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(status_code=404, content={"error": "Endpoint not found"})
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(db: Optional[Database] = None) -> FastAPI:
    """Build the application.  ``db`` overrides the configured database (tests)."""
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = db or Database(path=settings.DATABASE_PATH)
        if not database.path.exists():
            logger.warning(
                f"Database not found at {database.path}; starting empty. "
                "Run scripts/seed_db.py to load a sample profile."
            )
        database.init()

        app.state.db = database
        app.state.profile_repo = ProfileRepository(database)
        app.state.search_service = SearchService(database)
        logger.info(f"Server started - DB: {database.path}")
        yield
        logger.info("Server shutting down")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Personal profile API: profile, skills, projects, work and links",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} -> {response.status_code}")
        return response

    @app.get("/")
    async def root() -> dict[str, Any]:
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "version": settings.APP_VERSION,
            "endpoints": {
                "profile": {
                    "GET /api/profile": "Get complete profile",
                    "POST /api/profile": "Create new profile",
                    "PUT /api/profile": "Update profile",
                },
                "queries": {
                    "GET /api/skills": "Get all skills",
                    "GET /api/projects?q=search": "Search projects",
                    "GET /api/search?q=search": "Global search",
                },
                "health": {"GET /api/health": "Health check"},
            },
        }

    app.include_router(router)
    _register_exception_handlers(app)
    return app


app = create_app()
