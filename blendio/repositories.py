"""Data access for each table of the launcher database."""

from __future__ import annotations

import sqlite3
from typing import Any, Generic, TypeVar

from .models import (
    BlenderRepoPath,
    InstalledBlenderVersion,
    LaunchArgument,
    ProjectFile,
    PythonScript,
)

T = TypeVar("T")


class _Repository(Generic[T]):
    table: str = ""
    model: type = object
    insert_columns: tuple[str, ...] = ()
    update_columns: tuple[str, ...] = ()
    conflict_column: str | None = None
    filter_column: str | None = None

    def __init__(self, connection: sqlite3.Connection) -> None:
        self.connection = connection

    def _insert(self, entry: T) -> None:
        columns = ", ".join(self.insert_columns)
        placeholders = ", ".join("?" for _ in self.insert_columns)
        sql = f"INSERT INTO {self.table} ({columns}) VALUES ({placeholders})"
        if self.conflict_column:
            sql += f" ON CONFLICT({self.conflict_column}) DO NOTHING"
        with self.connection:
            self.connection.execute(
                sql, [getattr(entry, name) for name in self.insert_columns]
            )

    def _fetch(self, id: str | None, limit: int | None, filter_value: Any = None) -> list[T]:
        base = f"SELECT * FROM {self.table}"
        if id is not None:
            cursor = self.connection.execute(f"{base} WHERE id = ?", (id,))
        elif limit is not None:
            cursor = self.connection.execute(f"{base} LIMIT ?", (limit,))
        elif filter_value is not None and self.filter_column:
            cursor = self.connection.execute(
                f"{base} WHERE {self.filter_column} = ?", (filter_value,)
            )
        else:
            cursor = self.connection.execute(base)
        names = [description[0] for description in cursor.description]
        return [self._from_row(dict(zip(names, row))) for row in cursor.fetchall()]

    def _from_row(self, row: dict[str, Any]) -> T:
        if "is_default" in row:
            row["is_default"] = bool(row["is_default"])
        return self.model(**row)

    def _update(self, entry: T) -> None:
        assignments = ", ".join(f"{name} = ?" for name in self.update_columns)
        sql = (
            f"UPDATE {self.table} SET {assignments}, "
            "modified = CURRENT_TIMESTAMP, accessed = CURRENT_TIMESTAMP WHERE id = ?"
        )
        values = [getattr(entry, name) for name in self.update_columns]
        with self.connection:
            self.connection.execute(sql, [*values, entry.id])

    def _delete(self, id: str) -> None:
        with self.connection:
            self.connection.execute(f"DELETE FROM {self.table} WHERE id = ?", (id,))


class BlenderRepoPathRepository(_Repository[BlenderRepoPath]):
    """Stores the directories that hold Blender installations."""

    table = "blender_repo_paths"
    model = BlenderRepoPath
    insert_columns = ("id", "repo_directory_path", "is_default")
    update_columns = ("repo_directory_path", "is_default")

    def insert(self, entry: BlenderRepoPath) -> None:
        self._insert(entry)

    def fetch(self, id: str | None = None, limit: int | None = None) -> list[BlenderRepoPath]:
        return self._fetch(id, limit)

    def update(self, entry: BlenderRepoPath) -> None:
        self._update(entry)

    def delete(self, id: str) -> None:
        self._delete(id)


class InstalledBlenderVersionRepository(_Repository[InstalledBlenderVersion]):
    """Stores installed Blender versions, unique by executable path."""

    table = "installed_blender_versions"
    model = InstalledBlenderVersion
    insert_columns = (
        "id",
        "version",
        "variant_type",
        "download_url",
        "is_default",
        "installation_directory_path",
        "executable_file_path",
    )
    update_columns = insert_columns[1:]
    conflict_column = "executable_file_path"
    filter_column = "executable_file_path"

    def insert(self, entry: InstalledBlenderVersion) -> None:
        self._insert(entry)

    def fetch(
        self,
        id: str | None = None,
        limit: int | None = None,
        executable_file_path: str | None = None,
    ) -> list[InstalledBlenderVersion]:
        return self._fetch(id, limit, executable_file_path)

    def update(self, entry: InstalledBlenderVersion) -> None:
        self._update(entry)

    def delete(self, id: str) -> None:
        self._delete(id)


class LaunchArgumentRepository(_Repository[LaunchArgument]):
    """Stores saved launch argument strings."""

    table = "launch_arguments"
    model = LaunchArgument
    insert_columns = (
        "id",
        "is_default",
        "argument_string",
        "last_used_project_file_id",
        "last_used_python_script_id",
    )
    update_columns = insert_columns[1:]
    filter_column = "argument_string"

    def insert(self, entry: LaunchArgument) -> None:
        self._insert(entry)

    def fetch(
        self,
        id: str | None = None,
        limit: int | None = None,
        argument_string: str | None = None,
    ) -> list[LaunchArgument]:
        return self._fetch(id, limit, argument_string)

    def update(self, entry: LaunchArgument) -> None:
        self._update(entry)

    def delete(self, id: str) -> None:
        self._delete(id)


class ProjectFileRepository(_Repository[ProjectFile]):
    """Stores known project files, unique by path."""

    table = "project_files"
    model = ProjectFile
    insert_columns = (
        "id",
        "file_path",
        "file_name",
        "associated_series_json",
        "last_used_blender_version_id",
    )
    update_columns = insert_columns[1:]
    conflict_column = "file_path"
    filter_column = "file_path"

    def insert(self, entry: ProjectFile) -> None:
        self._insert(entry)

    def fetch(
        self,
        id: str | None = None,
        limit: int | None = None,
        file_path: str | None = None,
    ) -> list[ProjectFile]:
        return self._fetch(id, limit, file_path)

    def update(self, entry: ProjectFile) -> None:
        self._update(entry)

    def delete(self, id: str) -> None:
        self._delete(id)


class PythonScriptRepository(_Repository[PythonScript]):
    """Stores recently used Python scripts, unique by path."""

    table = "python_scripts"
    model = PythonScript
    insert_columns = ("id", "script_file_path")
    update_columns = ("script_file_path",)
    conflict_column = "script_file_path"
    filter_column = "script_file_path"

    def insert(self, entry: PythonScript) -> None:
        self._insert(entry)

    def fetch(
        self,
        id: str | None = None,
        limit: int | None = None,
        script_file_path: str | None = None,
    ) -> list[PythonScript]:
        return self._fetch(id, limit, script_file_path)

    def update(self, entry: PythonScript) -> None:
        self._update(entry)

    def delete(self, id: str) -> None:
        self._delete(id)