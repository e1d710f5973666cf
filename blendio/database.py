"""Opening the launcher's SQLite database and preparing its tables."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path

import platformdirs

APP_IDENTIFIER = "com.bakalaurs.blendio-tauri"
DATABASE_FILE_NAME = "test.db"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS blender_repo_paths (
    id TEXT PRIMARY KEY NOT NULL,
    repo_directory_path TEXT NOT NULL,
    is_default BOOLEAN NOT NULL DEFAULT 0,
    created TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    modified TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    accessed TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS installed_blender_versions (
    id TEXT PRIMARY KEY NOT NULL,
    version TEXT NOT NULL,
    variant_type TEXT NOT NULL,
    download_url TEXT,
    is_default BOOLEAN NOT NULL DEFAULT 0,
    installation_directory_path TEXT NOT NULL,
    executable_file_path TEXT NOT NULL UNIQUE,
    created TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    modified TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    accessed TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS launch_arguments (
    id TEXT PRIMARY KEY NOT NULL,
    is_default BOOLEAN NOT NULL DEFAULT 0,
    argument_string TEXT NOT NULL,
    last_used_project_file_id TEXT,
    last_used_python_script_id TEXT,
    created TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    modified TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    accessed TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS project_files (
    id TEXT PRIMARY KEY NOT NULL,
    file_path TEXT NOT NULL UNIQUE,
    file_name TEXT NOT NULL,
    associated_series_json TEXT NOT NULL DEFAULT '[]',
    last_used_blender_version_id TEXT,
    created TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    modified TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    accessed TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);
CREATE TABLE IF NOT EXISTS python_scripts (
    id TEXT PRIMARY KEY NOT NULL,
    script_file_path TEXT NOT NULL UNIQUE,
    created TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    modified TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
    accessed TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""


@dataclass
class AppState:
    """Shared state handed to every command: the open database connection."""

    connection: sqlite3.Connection

    def close(self) -> None:
        """Close the database connection."""
        self.connection.close()

    def __enter__(self) -> "AppState":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def default_data_dir() -> Path:
    """Return the per-user directory where the launcher keeps its data."""
    return Path(platformdirs.user_data_dir(roaming=True)) / APP_IDENTIFIER


def default_database_path() -> Path:
    """Return the default location of the launcher database."""
    return default_data_dir() / DATABASE_FILE_NAME


def establish_connection(database_path: str | Path) -> sqlite3.Connection:
    """Open a connection to the SQLite database at ``database_path``."""
    return sqlite3.connect(str(database_path))


def initialize_schema(connection: sqlite3.Connection) -> None:
    """Create the launcher tables if they do not exist yet."""
    connection.executescript(_SCHEMA)
    connection.commit()


def open_app_state(database_path: str | Path | None = None) -> AppState:
    """Open (creating if needed) the database and return the application state."""
    path = Path(database_path) if database_path is not None else default_database_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch(exist_ok=True)
    connection = establish_connection(path)
    initialize_schema(connection)
    return AppState(connection)