import pytest

from blendio.database import open_app_state
from blendio.launch_arguments import (
    delete_launch_argument,
    fetch_launch_arguments,
    insert_launch_argument,
    resolve_launch_arguments,
    update_launch_argument,
)
from blendio.models import CommandError, PythonScript
from blendio.repositories import PythonScriptRepository


@pytest.fixture
def state(tmp_path):
    app_state = open_app_state(tmp_path / "data" / "app.db")
    yield app_state
    app_state.close()


def test_insert_and_fetch(state):
    arg_id = insert_launch_argument(state, "--factory-startup", "pf-1", "ps-1")
    results = fetch_launch_arguments(state, arg_id)
    assert len(results) == 1
    entry = results[0]
    assert entry.argument_string == "--factory-startup"
    assert entry.last_used_project_file_id == "pf-1"
    assert entry.last_used_python_script_id == "ps-1"
    assert entry.is_default is False


def test_insert_same_string_reuses_entry(state):
    first = insert_launch_argument(state, "-b -noaudio")
    second = insert_launch_argument(state, "-b -noaudio")
    assert first == second
    assert len(fetch_launch_arguments(state)) == 1


def test_fetch_by_argument_string(state):
    insert_launch_argument(state, "-a")
    wanted = insert_launch_argument(state, "-b")
    results = fetch_launch_arguments(state, argument_string="-b")
    assert [entry.id for entry in results] == [wanted]


def test_fetch_sorted_by_accessed_descending(state):
    old = insert_launch_argument(state, "-old")
    new = insert_launch_argument(state, "-new")
    with state.connection:
        state.connection.execute(
            "UPDATE launch_arguments SET accessed = ? WHERE id = ?",
            ("2020-01-01 00:00:00", old),
        )
        state.connection.execute(
            "UPDATE launch_arguments SET accessed = ? WHERE id = ?",
            ("2024-01-01 00:00:00", new),
        )
    assert [entry.id for entry in fetch_launch_arguments(state)] == [new, old]


def test_update_makes_single_default(state):
    a = insert_launch_argument(state, "-a")
    b = insert_launch_argument(state, "-b")
    update_launch_argument(state, a, False)
    defaults = {entry.id: entry.is_default for entry in fetch_launch_arguments(state)}
    assert defaults == {a: True, b: False}
    update_launch_argument(state, b, False)
    defaults = {entry.id: entry.is_default for entry in fetch_launch_arguments(state)}
    assert defaults == {a: False, b: True}


def test_update_true_clears_default(state):
    a = insert_launch_argument(state, "-a")
    update_launch_argument(state, a, False)
    update_launch_argument(state, a, True)
    assert fetch_launch_arguments(state, a)[0].is_default is False


def test_update_missing_raises(state):
    with pytest.raises(CommandError):
        update_launch_argument(state, "missing", False)


def test_delete(state):
    a = insert_launch_argument(state, "-a")
    delete_launch_argument(state, a)
    assert fetch_launch_arguments(state) == []


def test_resolve_with_arguments_and_script(state):
    arg_id = insert_launch_argument(state, "  --factory-startup   -noaudio ")
    script = PythonScript(script_file_path="/scripts/setup.py")
    PythonScriptRepository(state.connection).insert(script)
    result = resolve_launch_arguments(state, arg_id, script.id, ["/work/scene.blend"])
    assert result == [
        "/work/scene.blend",
        "--factory-startup",
        "-noaudio",
        "--python",
        "/scripts/setup.py",
    ]


def test_resolve_with_existing_python_flag(state):
    arg_id = insert_launch_argument(state, "--python /scripts/a.py")
    script = PythonScript(script_file_path="/scripts/b.py")
    PythonScriptRepository(state.connection).insert(script)
    result = resolve_launch_arguments(state, arg_id, script.id)
    assert result == ["--python", "/scripts/a.py", "/scripts/b.py"]


def test_resolve_without_ids_returns_initial(state):
    assert resolve_launch_arguments(state, None, None, ["x"]) == ["x"]


def test_resolve_missing_argument_raises(state):
    with pytest.raises(CommandError):
        resolve_launch_arguments(state, "missing", None)


def test_resolve_missing_script_raises(state):
    with pytest.raises(CommandError):
        resolve_launch_arguments(state, None, "missing")