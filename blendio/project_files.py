"""Commands for .blend project files: recording, refreshing, opening and archiving."""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import platformdirs

from . import filesystem
from .database import AppState
from .launch_arguments import resolve_launch_arguments
from .models import CommandError, ProjectFile, new_id
from .repositories import InstalledBlenderVersionRepository, ProjectFileRepository

IMPORT_BPY = "import bpy"
SAVE_AS_MAINFILE = "bpy.ops.wm.save_as_mainfile(filepath=blend_file_path)"
BLEND_EXTENSION = ".blend"
RECENT_FILES_NAME = "recent-files.txt"


@contextmanager
def _database_errors() -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        raise CommandError(str(exc)) from exc


def _dump_series(series: list[str]) -> str:
    return json.dumps(series, separators=(",", ":"), ensure_ascii=False)


def _fetch_one(repository: ProjectFileRepository, id: str | None) -> ProjectFile:
    with _database_errors():
        results = repository.fetch(id, None, None)
    if not results:
        raise CommandError(f"no project file with id {id}")
    return results[0]


def insert_blend_file(state: AppState, file_path: str | Path) -> ProjectFile:
    """Record a .blend file and return the record offered to the database.

    Nothing is stored when a record with the same path already exists.
    """
    name = Path(file_path).name
    if not str(file_path) or not name:
        raise CommandError(f"{file_path} has no file name")
    entry = ProjectFile(
        id=new_id(),
        file_path=str(file_path),
        file_name=name,
        associated_series_json=_dump_series([]),
        last_used_blender_version_id=None,
    )
    with _database_errors():
        ProjectFileRepository(state.connection).insert(entry)
    return entry


def update_blend_file(
    state: AppState,
    id: str,
    associated_series: str | None = None,
    last_used_blender_version_id: str | None = None,
) -> None:
    """Add a Blender series to a project file and/or set its last used version."""
    repository = ProjectFileRepository(state.connection)
    entry = _fetch_one(repository, id)
    if associated_series is not None:
        try:
            series = json.loads(entry.associated_series_json)
        except ValueError:
            series = []
        if not isinstance(series, list):
            series = []
        if associated_series not in series:
            series.append(associated_series)
            entry.associated_series_json = _dump_series(series)
    if last_used_blender_version_id is not None:
        entry.last_used_blender_version_id = last_used_blender_version_id
    with _database_errors():
        repository.update(entry)


def _blender_config_directory(config_directory: str | Path | None) -> Path:
    base = (
        Path(config_directory)
        if config_directory is not None
        else Path(platformdirs.user_config_dir(roaming=True))
    )
    return base / "Blender Foundation" / "Blender"


def _refresh_series(
    repository: ProjectFileRepository, series_name: str, recent_files: Path
) -> None:
    try:
        content = recent_files.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CommandError(f"Failed to read {recent_files}") from exc
    kept: list[str] = []
    for line in content.splitlines():
        raw = line.strip()
        with _database_errors():
            existing = repository.fetch(None, None, raw)
        if not raw or not Path(raw).exists():
            if existing:
                with _database_errors():
                    repository.delete(existing[0].id)
            continue
        kept.append(raw)
        if not existing:
            name = Path(raw).name
            if not name:
                raise CommandError(f"{raw} has no file name")
            entry = ProjectFile(
                id=new_id(),
                file_path=raw,
                file_name=name,
                associated_series_json=_dump_series([series_name]),
                last_used_blender_version_id=None,
            )
            with _database_errors():
                repository.insert(entry)
            continue
        entry = existing[0]
        try:
            series = json.loads(entry.associated_series_json)
        except ValueError as exc:
            raise CommandError(f"invalid series list for {raw}") from exc
        if not isinstance(series, list):
            raise CommandError(f"invalid series list for {raw}")
        if series_name not in series:
            series.append(series_name)
            series.sort()
            entry.associated_series_json = _dump_series(series)
            with _database_errors():
                repository.update(entry)
    try:
        recent_files.write_text("".join(f"{path}\n" for path in kept), encoding="utf-8")
    except OSError as exc:
        raise CommandError(f"Failed to write {recent_files}") from exc


def insert_and_refresh_blend_files(
    state: AppState, config_directory: str | Path | None = None
) -> None:
    """Synchronise project files with Blender's recent-files lists.

    Every series directory under ``<config>/Blender Foundation/Blender`` is
    scanned. Files that no longer exist are forgotten and dropped from the list,
    the others are recorded or tagged with the series name.
    """
    repository = ProjectFileRepository(state.connection)
    blender_directory = _blender_config_directory(config_directory)
    try:
        series_directories = sorted(blender_directory.iterdir())
    except OSError as exc:
        raise CommandError(f"Failed to read {blender_directory}") from exc
    for series_directory in series_directories:
        recent_files = series_directory / "config" / RECENT_FILES_NAME
        if not recent_files.exists():
            continue
        _refresh_series(repository, series_directory.name, recent_files)


def fetch_blend_files(
    state: AppState,
    id: str | None = None,
    limit: int | None = None,
    file_path: str | None = None,
) -> list[ProjectFile]:
    """Return recorded project files, optionally filtered."""
    with _database_errors():
        return ProjectFileRepository(state.connection).fetch(id, limit, file_path)


def delete_blend_file(state: AppState, id: str | None) -> None:
    """Delete a project file from disk and forget it."""
    if id is None:
        raise CommandError("no project file id given")
    repository = ProjectFileRepository(state.connection)
    entry = _fetch_one(repository, id)
    filesystem.delete_file(entry.file_path)
    with _database_errors():
        repository.delete(id)


def open_blend_file(
    state: AppState,
    id: str,
    installed_blender_version_id: str,
    launch_arguments_id: str | None = None,
    python_script_id: str | None = None,
) -> None:
    """Open a project file in an installed Blender with saved arguments and script."""
    projects = ProjectFileRepository(state.connection)
    project = _fetch_one(projects, id)
    project.last_used_blender_version_id = installed_blender_version_id
    versions = InstalledBlenderVersionRepository(state.connection)
    with _database_errors():
        projects.update(project)
        results = versions.fetch(installed_blender_version_id, None, None)
        if not results:
            raise CommandError(
                f"no installed Blender version with id {installed_blender_version_id}"
            )
        version = results[0]
        versions.update(version)
    arguments = resolve_launch_arguments(
        state, launch_arguments_id, python_script_id, [project.file_path]
    )
    filesystem.launch_executable(version.executable_file_path, arguments)


def build_new_project_expression(file_path: str | Path) -> str:
    """Return the Python code that makes Blender save an empty scene to ``file_path``."""
    return f'\n{IMPORT_BPY}\nblend_file_path=r"{file_path}"\n{SAVE_AS_MAINFILE}\n'


def create_new_project_file(
    state: AppState,
    installed_blender_version_id: str,
    directory_path: str | Path,
    file_name: str,
) -> ProjectFile:
    """Have Blender create a new .blend file in ``directory_path`` and record it."""
    if not str(directory_path):
        raise CommandError("no directory given")
    if not file_name.endswith(BLEND_EXTENSION):
        file_name = f"{file_name}{BLEND_EXTENSION}"
    full_file_path = Path(directory_path) / file_name
    expression = build_new_project_expression(full_file_path)
    with _database_errors():
        results = InstalledBlenderVersionRepository(state.connection).fetch(
            installed_blender_version_id, None, None
        )
    if not results:
        raise CommandError(
            f"no installed Blender version with id {installed_blender_version_id}"
        )
    filesystem.launch_executable(
        results[0].executable_file_path,
        ["--background", "--python-expr", expression],
    )
    return insert_blend_file(state, full_file_path)


def reveal_project_file_in_local_file_system(state: AppState, id: str | None) -> None:
    """Show the directory holding a project file in the system file manager."""
    entry = _fetch_one(ProjectFileRepository(state.connection), id)
    filesystem.open_in_file_explorer(entry.file_path)


def create_project_file_archive_file(state: AppState, id: str | None) -> Path:
    """Zip a project file beside itself, reveal the archive and return its path."""
    entry = _fetch_one(ProjectFileRepository(state.connection), id)
    archive_path = filesystem.archive_file(entry.file_path)
    filesystem.open_in_file_explorer(archive_path)
    return archive_path