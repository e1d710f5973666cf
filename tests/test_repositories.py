import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from blendio.database import establish_connection, initialize_schema
from blendio.models import (
    BlenderRepoPath,
    InstalledBlenderVersion,
    LaunchArgument,
    ProjectFile,
    PythonScript,
)
from blendio.repositories import (
    BlenderRepoPathRepository,
    InstalledBlenderVersionRepository,
    LaunchArgumentRepository,
    ProjectFileRepository,
    PythonScriptRepository,
)


@pytest.fixture
def connection():
    conn = establish_connection(":memory:")
    initialize_schema(conn)
    yield conn
    conn.close()


def _installed(path, version="4.2.0"):
    return InstalledBlenderVersion(
        version=version,
        variant_type="stable",
        installation_directory_path="/opt/blender",
        executable_file_path=path,
    )


def test_repo_path_insert_and_fetch_by_id(connection):
    repo = BlenderRepoPathRepository(connection)
    entry = BlenderRepoPath(repo_directory_path="/opt/versions", is_default=True)
    repo.insert(entry)
    fetched = repo.fetch(entry.id)
    assert len(fetched) == 1
    assert fetched[0].id == entry.id
    assert fetched[0].repo_directory_path == "/opt/versions"
    assert fetched[0].is_default is True


def test_repo_path_fetch_limit_and_all(connection):
    repo = BlenderRepoPathRepository(connection)
    for name in ("/a", "/b", "/c"):
        repo.insert(BlenderRepoPath(repo_directory_path=name))
    assert len(repo.fetch(limit=2)) == 2
    assert [e.repo_directory_path for e in repo.fetch()] == ["/a", "/b", "/c"]


def test_repo_path_update_and_delete(connection):
    repo = BlenderRepoPathRepository(connection)
    entry = BlenderRepoPath(repo_directory_path="/old")
    repo.insert(entry)
    entry.repo_directory_path = "/new"
    entry.is_default = True
    repo.update(entry)
    (updated,) = repo.fetch(entry.id)
    assert (updated.repo_directory_path, updated.is_default) == ("/new", True)
    datetime.fromisoformat(updated.modified)
    repo.delete(entry.id)
    assert repo.fetch(entry.id) == []


def test_installed_conflict_does_nothing(connection):
    repo = InstalledBlenderVersionRepository(connection)
    first = _installed("/opt/blender/blender-launcher.exe")
    repo.insert(first)
    repo.insert(_installed("/opt/blender/blender-launcher.exe", version="9.9"))
    rows = repo.fetch()
    assert [row.id for row in rows] == [first.id]
    assert rows[0].version == "4.2.0"


def test_installed_fetch_by_executable_path(connection):
    repo = InstalledBlenderVersionRepository(connection)
    repo.insert(_installed("/x/one"))
    second = _installed("/x/two")
    repo.insert(second)
    found = repo.fetch(executable_file_path="/x/two")
    assert [row.id for row in found] == [second.id]
    assert repo.fetch(executable_file_path="/missing") == []


def test_installed_id_takes_precedence(connection):
    repo = InstalledBlenderVersionRepository(connection)
    first = _installed("/x/one")
    repo.insert(first)
    repo.insert(_installed("/x/two"))
    found = repo.fetch(first.id, 5, "/x/two")
    assert [row.id for row in found] == [first.id]


def test_installed_update_round_trip(connection):
    repo = InstalledBlenderVersionRepository(connection)
    entry = _installed("/x/one")
    repo.insert(entry)
    entry.download_url = "https://example.com/b.zip"
    entry.is_default = True
    repo.update(entry)
    (fetched,) = repo.fetch(entry.id)
    assert fetched.download_url == "https://example.com/b.zip"
    assert fetched.is_default is True
    assert fetched.download_url is not None and fetched.executable_file_path == "/x/one"


def test_launch_argument_crud(connection):
    repo = LaunchArgumentRepository(connection)
    entry = LaunchArgument(argument_string="--background --factory-startup")
    repo.insert(entry)
    (fetched,) = repo.fetch(argument_string="--background --factory-startup")
    assert fetched.id == entry.id
    assert fetched.is_default is False
    entry.last_used_python_script_id = "script-id"
    repo.update(entry)
    assert repo.fetch(entry.id)[0].last_used_python_script_id == "script-id"
    repo.delete(entry.id)
    assert repo.fetch() == []


def test_project_file_crud(connection):
    repo = ProjectFileRepository(connection)
    entry = ProjectFile(
        file_path="/projects/scene.blend",
        file_name="scene.blend",
        associated_series_json='["4.2"]',
    )
    repo.insert(entry)
    repo.insert(ProjectFile(file_path="/projects/scene.blend", file_name="dup"))
    rows = repo.fetch(file_path="/projects/scene.blend")
    assert [row.file_name for row in rows] == ["scene.blend"]
    entry.last_used_blender_version_id = "version-id"
    repo.update(entry)
    assert repo.fetch(entry.id)[0].last_used_blender_version_id == "version-id"
    repo.delete(entry.id)
    assert repo.fetch() == []


def test_python_script_crud(connection):
    repo = PythonScriptRepository(connection)
    entry = PythonScript(script_file_path="/scripts/run.py")
    repo.insert(entry)
    repo.insert(PythonScript(script_file_path="/scripts/run.py"))
    assert [row.id for row in repo.fetch()] == [entry.id]
    entry.script_file_path = "/scripts/other.py"
    repo.update(entry)
    assert repo.fetch(script_file_path="/scripts/other.py")[0].id == entry.id
    repo.delete(entry.id)
    assert repo.fetch(entry.id) == []


def test_insert_timestamps_come_from_database(connection):
    repo = PythonScriptRepository(connection)
    entry = PythonScript(script_file_path="/scripts/t.py", created="ignored")
    repo.insert(entry)
    (fetched,) = repo.fetch(entry.id)
    created = datetime.fromisoformat(fetched.created).replace(tzinfo=None)
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    assert abs(now - created) < timedelta(days=1)


def test_errors_propagate_on_closed_connection():
    conn = establish_connection(":memory:")
    initialize_schema(conn)
    repo = LaunchArgumentRepository(conn)
    conn.close()
    with pytest.raises(sqlite3.ProgrammingError):
        repo.fetch()