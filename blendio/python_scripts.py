"""Commands for recently used Python script files."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .database import AppState
from .models import CommandError, PythonScript, new_id, now_rfc3339
from .repositories import PythonScriptRepository


@contextmanager
def _database_errors() -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        raise CommandError(str(exc)) from exc


def insert_python_script(state: AppState, file_path: str | Path) -> PythonScript:
    """Remember a script file, refreshing an existing record for the same path."""
    path = str(file_path)
    repository = PythonScriptRepository(state.connection)
    with _database_errors():
        existing = repository.fetch(None, None, path)
        if existing:
            entry = existing[0]
            entry.accessed = now_rfc3339()
            entry.modified = now_rfc3339()
            repository.update(entry)
            return entry
        entry = PythonScript(id=new_id(), script_file_path=path)
        repository.insert(entry)
    return entry


def fetch_python_scripts(
    state: AppState,
    id: str | None = None,
    limit: int | None = None,
    script_file_path: str | None = None,
) -> list[PythonScript]:
    """Return remembered scripts, most recently accessed first."""
    repository = PythonScriptRepository(state.connection)
    with _database_errors():
        results = repository.fetch(id, limit, script_file_path)
    return sorted(results, key=lambda entry: entry.accessed, reverse=True)


def delete_python_script(state: AppState, id: str) -> None:
    """Forget a remembered script."""
    with _database_errors():
        PythonScriptRepository(state.connection).delete(id)