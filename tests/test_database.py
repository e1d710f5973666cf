import sqlite3

import pytest

from blendio.database import (
    AppState,
    default_data_dir,
    default_database_path,
    establish_connection,
    initialize_schema,
    open_app_state,
)

TABLES = {
    "blender_repo_paths",
    "installed_blender_versions",
    "launch_arguments",
    "project_files",
    "python_scripts",
}


def _tables(connection):
    rows = connection.execute(
        "SELECT name FROM sqlite_master WHERE type = 'table'"
    ).fetchall()
    return {row[0] for row in rows}


def test_initialize_schema_creates_tables():
    connection = establish_connection(":memory:")
    initialize_schema(connection)
    assert _tables(connection) >= TABLES


def test_initialize_schema_is_idempotent():
    connection = establish_connection(":memory:")
    initialize_schema(connection)
    initialize_schema(connection)
    assert _tables(connection) >= TABLES


def test_default_paths():
    assert default_data_dir().name == "com.bakalaurs.blendio-tauri"
    path = default_database_path()
    assert path.name == "test.db"
    assert path.parent == default_data_dir()


def test_open_app_state_creates_file(tmp_path):
    target = tmp_path / "nested" / "dir" / "test.db"
    state = open_app_state(target)
    try:
        assert target.exists()
        assert _tables(state.connection) >= TABLES
    finally:
        state.close()


def test_open_app_state_persists_data(tmp_path):
    target = tmp_path / "app.db"
    with open_app_state(target) as state:
        state.connection.execute(
            "INSERT INTO python_scripts (id, script_file_path) VALUES (?, ?)",
            ("a", "/scripts/a.py"),
        )
        state.connection.commit()
    with open_app_state(target) as state:
        rows = state.connection.execute(
            "SELECT script_file_path FROM python_scripts"
        ).fetchall()
    assert rows == [("/scripts/a.py",)]


def test_close_disables_connection():
    state = AppState(establish_connection(":memory:"))
    state.close()
    with pytest.raises(sqlite3.ProgrammingError):
        state.connection.execute("SELECT 1")