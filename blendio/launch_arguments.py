"""Commands for saved Blender launch arguments."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from typing import Iterable, Iterator

from .database import AppState
from .models import CommandError, LaunchArgument, new_id, now_rfc3339
from .repositories import LaunchArgumentRepository, PythonScriptRepository

PYTHON_FLAG = "--python"


@contextmanager
def _database_errors() -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        raise CommandError(str(exc)) from exc


def insert_launch_argument(
    state: AppState,
    argument_string: str,
    project_file_id: str | None = None,
    python_script_id: str | None = None,
) -> str:
    """Save an argument string, reusing an identical saved one, and return its id."""
    repository = LaunchArgumentRepository(state.connection)
    with _database_errors():
        existing = repository.fetch(None, None, argument_string)
        if existing:
            entry = existing[0]
            entry.accessed = now_rfc3339()
            entry.modified = now_rfc3339()
            repository.update(entry)
            return entry.id
        entry = LaunchArgument(
            id=new_id(),
            is_default=False,
            argument_string=argument_string,
            last_used_project_file_id=project_file_id,
            last_used_python_script_id=python_script_id,
        )
        repository.insert(entry)
    return entry.id


def update_launch_argument(state: AppState, id: str, is_default: bool) -> None:
    """Toggle the default flag.

    ``is_default`` is the entry's current state: when true the entry stops being
    the default, otherwise it becomes the only default.
    """
    repository = LaunchArgumentRepository(state.connection)
    with _database_errors():
        results = repository.fetch(id, None, None)
        if not results:
            raise CommandError(f"no launch argument with id {id}")
        entry = results[0]
        if is_default:
            entry.is_default = False
            repository.update(entry)
            return
        for other in repository.fetch(None, None, None):
            new_default = other.id == id
            if other.is_default != new_default:
                other.is_default = new_default
                repository.update(other)


def fetch_launch_arguments(
    state: AppState,
    id: str | None = None,
    limit: int | None = None,
    argument_string: str | None = None,
) -> list[LaunchArgument]:
    """Return saved launch arguments, most recently accessed first."""
    repository = LaunchArgumentRepository(state.connection)
    with _database_errors():
        results = repository.fetch(id, limit, argument_string)
    return sorted(results, key=lambda entry: entry.accessed, reverse=True)


def delete_launch_argument(state: AppState, id: str) -> None:
    """Delete a saved launch argument."""
    with _database_errors():
        LaunchArgumentRepository(state.connection).delete(id)


def resolve_launch_arguments(
    state: AppState,
    launch_arguments_id: str | None = None,
    python_script_id: str | None = None,
    initial: Iterable[str] = (),
) -> list[str]:
    """Build the command-line arguments from a saved argument string and script.

    Both referenced records are touched so that they count as recently used.
    """
    arguments = list(initial)
    with _database_errors():
        if launch_arguments_id is not None:
            repository = LaunchArgumentRepository(state.connection)
            entries = repository.fetch(launch_arguments_id, None, None)
            if not entries:
                raise CommandError(f"no launch argument with id {launch_arguments_id}")
            entry = entries[0]
            repository.update(entry)
            arguments.extend(entry.argument_string.split())
        if python_script_id is not None:
            scripts = PythonScriptRepository(state.connection)
            entries = scripts.fetch(python_script_id, None, None)
            if not entries:
                raise CommandError(f"no python script with id {python_script_id}")
            script = entries[0]
            scripts.update(script)
            if PYTHON_FLAG not in arguments:
                arguments.append(PYTHON_FLAG)
            arguments.append(script.script_file_path)
    return arguments