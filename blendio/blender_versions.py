"""Commands for installed and downloadable Blender versions and their install locations."""

from __future__ import annotations

import re
import sqlite3
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator

import requests

from . import filesystem
from .database import AppState
from .launch_arguments import resolve_launch_arguments
from .models import (
    BlenderRepoPath,
    CommandError,
    DownloadableBlenderVersion,
    InstalledBlenderVersion,
    new_id,
)
from .repositories import BlenderRepoPathRepository, InstalledBlenderVersionRepository

DOWNLOAD_URL = "https://ftp.nluug.nl/pub/graphics/blender/release/"
DAILY_BUILDS_URL = "https://builder.blender.org/download/daily/"
DAILY_BUILDS_PARAMS = {"format": "json", "v": "2"}
LTS_VERSIONS = ("2.83", "2.93", "3.3", "3.6", "4.2")
LAUNCHER_FILE_NAME = "blender-launcher.exe"
REQUEST_TIMEOUT = 30

_VERSION_DIRECTORY = re.compile(
    r"blender-(?P<version>\d+\.\d+(?:\.\d+)?)-(?P<variant>[^\-+]+)"
)

# platform name -> (platform, architecture, file extension) of the matching builds
_PLATFORM_FILTERS = {
    "windows": ("windows", "amd64", "zip"),
    "macos": ("darwin", "arm64", "dmg"),
    "linux": ("linux", "x86_64", "xz"),
}


@contextmanager
def _database_errors() -> Iterator[None]:
    try:
        yield
    except sqlite3.Error as exc:
        raise CommandError(str(exc)) from exc


def _current_platform() -> str:
    if sys.platform == "win32":
        return "windows"
    if sys.platform == "darwin":
        return "macos"
    return "linux"


def parse_version_directory_name(dir_name: str) -> tuple[str, str]:
    """Extract ``(version, variant)`` from a directory name such as
    ``blender-4.2.0-stable+...``; both are empty when the name does not match."""
    match = _VERSION_DIRECTORY.search(dir_name)
    if match is None:
        return "", ""
    return match.group("version"), match.group("variant")


def insert_installed_blender_version(
    state: AppState, executable_file_path: str | Path
) -> InstalledBlenderVersion:
    """Record a Blender executable, deriving version details from its directory name."""
    executable = Path(executable_file_path)
    parent = executable.parent
    if not str(executable_file_path) or parent == executable or not parent.name:
        raise CommandError(f"{executable_file_path} has no installation directory")
    version, variant_type = parse_version_directory_name(parent.name)
    entry = InstalledBlenderVersion(
        id=new_id(),
        version=version,
        variant_type=variant_type,
        download_url=None,
        is_default=False,
        installation_directory_path=str(parent),
        executable_file_path=str(executable),
    )
    with _database_errors():
        InstalledBlenderVersionRepository(state.connection).insert(entry)
    return entry


def insert_and_refresh_installed_blender_versions(state: AppState) -> None:
    """Scan every install location and record Blender builds not yet known."""
    with _database_errors():
        repo_paths = BlenderRepoPathRepository(state.connection).fetch(None, None)
    versions = InstalledBlenderVersionRepository(state.connection)
    for repo_path in repo_paths:
        try:
            children = sorted(Path(repo_path.repo_directory_path).iterdir())
        except OSError as exc:
            raise CommandError(
                f"Failed to read {repo_path.repo_directory_path}"
            ) from exc
        for child in children:
            if not child.is_dir():
                continue
            launcher = child / LAUNCHER_FILE_NAME
            if not launcher.exists():
                continue
            with _database_errors():
                if versions.fetch(None, None, str(launcher)):
                    continue
            insert_installed_blender_version(state, launcher)


def update_installed_blender_version(state: AppState, id: str, is_default: bool) -> None:
    """Toggle the default flag.

    ``is_default`` is the entry's current state: when true the entry stops being
    the default, otherwise it becomes the only default.
    """
    repository = InstalledBlenderVersionRepository(state.connection)
    with _database_errors():
        results = repository.fetch(id, None, None)
        if not results:
            raise CommandError(f"no installed Blender version with id {id}")
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


def fetch_installed_blender_versions(
    state: AppState,
    id: str | None = None,
    limit: int | None = None,
    executable_file_path: str | None = None,
) -> list[InstalledBlenderVersion]:
    """Return installed Blender versions, optionally filtered."""
    with _database_errors():
        return InstalledBlenderVersionRepository(state.connection).fetch(
            id, limit, executable_file_path
        )


def uninstall_and_delete_installed_blender_version_data(
    state: AppState, id: str | None = None
) -> None:
    """Delete an installed version's directory and its record."""
    repository = InstalledBlenderVersionRepository(state.connection)
    with _database_errors():
        results = repository.fetch(id, None, None)
    if not results:
        raise CommandError(f"no installed Blender version with id {id}")
    entry = results[0]
    filesystem.delete_directory(entry.installation_directory_path)
    with _database_errors():
        repository.delete(entry.id)


def launch_blender_version_with_launch_args(
    state: AppState,
    id: str | None = None,
    launch_arguments_id: str | None = None,
    python_script_id: str | None = None,
) -> None:
    """Run an installed Blender with a saved argument string and Python script."""
    repository = InstalledBlenderVersionRepository(state.connection)
    with _database_errors():
        results = repository.fetch(id, None, None)
        if not results:
            raise CommandError(f"no installed Blender version with id {id}")
        instance = results[0]
        repository.update(instance)
    arguments = resolve_launch_arguments(state, launch_arguments_id, python_script_id)
    filesystem.launch_executable(instance.executable_file_path, arguments)


def filter_downloadable_versions(
    versions: Iterable[DownloadableBlenderVersion], platform_name: str | None = None
) -> list[DownloadableBlenderVersion]:
    """Keep the 64-bit builds meant for the given platform (default: this one)."""
    name = platform_name or _current_platform()
    try:
        platform, architecture, extension = _PLATFORM_FILTERS[name]
    except KeyError:
        raise CommandError(f"unsupported platform {name}") from None
    return [
        version
        for version in versions
        if version.bitness == 64
        and version.platform == platform
        and version.architecture == architecture
        and version.file_extension == extension
    ]


def get_downloadable_blender_version_data(
    platform_name: str | None = None,
) -> list[DownloadableBlenderVersion]:
    """Download the list of daily builds and keep those for the platform."""
    try:
        response = requests.get(
            DAILY_BUILDS_URL, params=DAILY_BUILDS_PARAMS, timeout=REQUEST_TIMEOUT
        )
        payload: Any = response.json()
    except (requests.RequestException, ValueError) as exc:
        raise CommandError(str(exc)) from exc
    if not isinstance(payload, list):
        raise CommandError("expected a JSON array of builds")
    try:
        versions = [DownloadableBlenderVersion.from_dict(item) for item in payload]
    except ValueError as exc:
        raise CommandError(str(exc)) from exc
    return filter_downloadable_versions(versions, platform_name)


def download_and_install_blender_version(
    state: AppState,
    archive_file_path: str | Path,
    downloadable_blender_version: DownloadableBlenderVersion,
) -> InstalledBlenderVersion:
    """Unpack a downloaded build archive, remove it and record the installation."""
    entry = InstalledBlenderVersion(
        id=new_id(),
        version=downloadable_blender_version.version,
        variant_type=downloadable_blender_version.release_cycle,
        download_url=downloadable_blender_version.url,
        is_default=False,
    )
    installation_directory = filesystem.extract_archive(archive_file_path)
    entry.installation_directory_path = str(installation_directory)
    entry.executable_file_path = str(installation_directory / LAUNCHER_FILE_NAME)
    filesystem.delete_file(archive_file_path)
    with _database_errors():
        InstalledBlenderVersionRepository(state.connection).insert(entry)
    return entry


def insert_blender_version_installation_location(
    state: AppState, repo_directory_path: str | Path
) -> None:
    """Remember a directory holding Blender installations, ignoring duplicates."""
    path = str(repo_directory_path)
    if not path:
        raise CommandError("no directory given")
    repository = BlenderRepoPathRepository(state.connection)
    with _database_errors():
        if any(item.repo_directory_path == path for item in repository.fetch(None, None)):
            return
        repository.insert(BlenderRepoPath(id=new_id(), repo_directory_path=path))


def update_blender_version_installation_location(
    state: AppState, id: str, is_default: bool
) -> None:
    """Toggle the default flag of an install location, as for installed versions."""
    repository = BlenderRepoPathRepository(state.connection)
    with _database_errors():
        results = repository.fetch(id, None)
        if not results:
            raise CommandError(f"no installation location with id {id}")
        entry = results[0]
        if is_default:
            entry.is_default = False
            repository.update(entry)
            return
        for other in repository.fetch(None, None):
            new_default = other.id == id
            if other.is_default != new_default:
                other.is_default = new_default
                repository.update(other)


def fetch_blender_version_installation_locations(
    state: AppState, id: str | None = None, limit: int | None = None
) -> list[BlenderRepoPath]:
    """Return the remembered install locations."""
    with _database_errors():
        return BlenderRepoPathRepository(state.connection).fetch(id, limit)


def delete_blender_version_installation_location(state: AppState, id: str) -> None:
    """Forget an install location and every installed version recorded beneath it."""
    locations = BlenderRepoPathRepository(state.connection)
    versions = InstalledBlenderVersionRepository(state.connection)
    with _database_errors():
        results = locations.fetch(id, None)
        if not results:
            raise CommandError(f"no installation location with id {id}")
        location = results[0]
        for version in versions.fetch(None, None, None):
            if version.installation_directory_path.startswith(location.repo_directory_path):
                versions.delete(version.id)
        locations.delete(id)