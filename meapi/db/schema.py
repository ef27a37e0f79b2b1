"""Database schema DDL — the profile aggregate's five tables."""

# ``profile.id`` is pinned to 1: the store holds at most one profile row.
SCHEMA_DDL = """
PRAGMA foreign_keys = ON;

-- ==========================================================================
-- Profile (aggregate root)
-- ==========================================================================
CREATE TABLE IF NOT EXISTS profile (
    id          INTEGER PRIMARY KEY CHECK (id = 1),
    name        TEXT NOT NULL CHECK (name <> ''),
    email       TEXT NOT NULL CHECK (email <> ''),
    education   TEXT DEFAULT '',
    created_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ','now')),
    updated_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ','now'))
);

-- ==========================================================================
-- Skills
-- ==========================================================================
CREATE TABLE IF NOT EXISTS skills (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    profile_id  INTEGER NOT NULL REFERENCES profile(id) ON DELETE CASCADE,
    skill_name  TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_skills_profile ON skills(profile_id);
CREATE INDEX IF NOT EXISTS idx_skills_name ON skills(skill_name);

-- ==========================================================================
-- Projects
-- ==========================================================================
CREATE TABLE IF NOT EXISTS projects (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    profile_id  INTEGER NOT NULL REFERENCES profile(id) ON DELETE CASCADE,
    title       TEXT NOT NULL,
    description TEXT DEFAULT '',
    link        TEXT DEFAULT '',
    created_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ','now'))
);

CREATE INDEX IF NOT EXISTS idx_projects_profile ON projects(profile_id);
CREATE INDEX IF NOT EXISTS idx_projects_created ON projects(created_at);

-- ==========================================================================
-- Work history
-- ==========================================================================
CREATE TABLE IF NOT EXISTS work (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    profile_id  INTEGER NOT NULL REFERENCES profile(id) ON DELETE CASCADE,
    company     TEXT NOT NULL,
    position    TEXT NOT NULL,
    duration    TEXT DEFAULT '',
    description TEXT DEFAULT ''
);

CREATE INDEX IF NOT EXISTS idx_work_profile ON work(profile_id);

-- ==========================================================================
-- External links (0..1 per profile)
-- ==========================================================================
CREATE TABLE IF NOT EXISTS links (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    profile_id  INTEGER NOT NULL UNIQUE REFERENCES profile(id) ON DELETE CASCADE,
    github      TEXT DEFAULT '',
    linkedin    TEXT DEFAULT '',
    portfolio   TEXT DEFAULT ''
);
"""

TABLES = ("profile", "skills", "projects", "work", "links")
