"""Records stored by the launcher and the error type its commands raise."""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Mapping


class CommandError(Exception):
    """Raised when a launcher command cannot complete."""


def now_rfc3339() -> str:
    """Return the current UTC time as an RFC 3339 timestamp."""
    return datetime.now(timezone.utc).isoformat()


def new_id() -> str:
    """Return a fresh random (version 4) UUID as a string."""
    return str(uuid.uuid4())


@dataclass
class BlenderRepoPath:
    """A directory in which Blender versions are installed."""

    id: str = field(default_factory=new_id)
    repo_directory_path: str = ""
    is_default: bool = False
    created: str = field(default_factory=now_rfc3339)
    modified: str = field(default_factory=now_rfc3339)
    accessed: str = field(default_factory=now_rfc3339)


@dataclass
class DownloadableBlenderVersion:
    """A build offered by the Blender download server."""

    url: str = ""
    app: str = ""
    version: str = ""
    risk_id: str = ""
    branch: str = ""
    patch: str | None = None
    hash: str = ""
    platform: str = ""
    architecture: str = ""
    bitness: int = 0
    file_mtime: int = 0
    file_name: str = ""
    file_size: int = 0
    file_extension: str = ""
    release_cycle: str = ""
    checksum: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DownloadableBlenderVersion":
        """Build a record from decoded JSON, rejecting missing or mistyped fields."""
        if not isinstance(data, Mapping):
            raise ValueError("expected a JSON object")
        values: dict[str, Any] = {}
        for item in fields(cls):
            name = item.name
            if name == "patch":
                value = data.get(name)
                if value is not None and not isinstance(value, str):
                    raise ValueError(f"invalid type for field `{name}`")
                values[name] = value
                continue
            if name not in data:
                raise ValueError(f"missing field `{name}`")
            value = data[name]
            if name in ("bitness", "file_mtime", "file_size"):
                if isinstance(value, bool) or not isinstance(value, int):
                    raise ValueError(f"invalid type for field `{name}`")
            elif not isinstance(value, str):
                raise ValueError(f"invalid type for field `{name}`")
            values[name] = value
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        """Return the record as a JSON-ready dictionary."""
        return asdict(self)


@dataclass
class InstalledBlenderVersion:
    """A Blender build installed on this machine."""

    id: str = field(default_factory=new_id)
    version: str = ""
    variant_type: str = ""
    download_url: str | None = None
    is_default: bool = False
    installation_directory_path: str = ""
    executable_file_path: str = ""
    created: str = field(default_factory=now_rfc3339)
    modified: str = field(default_factory=now_rfc3339)
    accessed: str = field(default_factory=now_rfc3339)


@dataclass
class LaunchArgument:
    """A saved command-line argument string for launching Blender."""

    id: str = field(default_factory=new_id)
    is_default: bool = False
    argument_string: str = ""
    last_used_project_file_id: str | None = None
    last_used_python_script_id: str | None = None
    created: str = field(default_factory=now_rfc3339)
    modified: str = field(default_factory=now_rfc3339)
    accessed: str = field(default_factory=now_rfc3339)


@dataclass
class ProjectFile:
    """A known .blend project file."""

    id: str = field(default_factory=new_id)
    file_path: str = ""
    file_name: str = ""
    associated_series_json: str = "[]"
    last_used_blender_version_id: str | None = None
    created: str = field(default_factory=now_rfc3339)
    modified: str = field(default_factory=now_rfc3339)
    accessed: str = field(default_factory=now_rfc3339)


@dataclass
class PythonScript:
    """A recently used Python script file."""

    id: str = field(default_factory=new_id)
    script_file_path: str = ""
    created: str = field(default_factory=now_rfc3339)
    modified: str = field(default_factory=now_rfc3339)
    accessed: str = field(default_factory=now_rfc3339)