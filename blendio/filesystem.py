"""File system helpers: archives, deletion and launching programs."""

from __future__ import annotations

import shutil
import subprocess
import sys
import zipfile
from pathlib import Path
from typing import Iterable

from .models import CommandError


def extract_archive(archive_file_path: str | Path) -> Path:
    """Unpack a zip archive next to itself and return the expected top directory.

    The entries are written into the archive's parent directory; the returned
    path is that directory joined with the archive's stem.
    """
    path = Path(archive_file_path)
    try:
        archive = zipfile.ZipFile(path)
    except (OSError, zipfile.BadZipFile) as exc:
        raise CommandError(f"Failed to open archive {path}") from exc
    with archive:
        if not path.name:
            raise CommandError("Invalid archive file name")
        extract_dir = path.parent
        for info in archive.infolist():
            outpath = extract_dir / info.filename
            if info.filename.endswith("/"):
                try:
                    outpath.mkdir(parents=True, exist_ok=True)
                except OSError as exc:
                    raise CommandError("Failed to create directory") from exc
                continue
            try:
                outpath.parent.mkdir(parents=True, exist_ok=True)
            except OSError:
                pass
            try:
                outfile = outpath.open("wb")
            except OSError as exc:
                raise CommandError("Failed to create output file") from exc
            with outfile:
                try:
                    with archive.open(info) as source:
                        shutil.copyfileobj(source, outfile)
                except (OSError, zipfile.BadZipFile) as exc:
                    raise CommandError("Failed to copy file contents") from exc
    return extract_dir / path.stem


def delete_file(file_path: str | Path) -> None:
    """Remove a single file."""
    try:
        Path(file_path).unlink()
    except OSError as exc:
        raise CommandError(f"Failed to delete file {file_path}") from exc


def delete_directory(directory_path: str | Path) -> None:
    """Remove a directory together with everything inside it."""
    try:
        shutil.rmtree(directory_path)
    except OSError as exc:
        raise CommandError(f"Failed to delete directory {directory_path}") from exc


def launch_executable(
    executable_file_path: str | Path, args: Iterable[str] | None = None
) -> subprocess.CompletedProcess:
    """Run a program with the given arguments and wait for it to exit."""
    command = [str(executable_file_path), *(args or [])]
    try:
        return subprocess.run(command, capture_output=True, check=False)
    except OSError as exc:
        raise CommandError(f"Failed to launch {executable_file_path}") from exc


def open_in_file_explorer(file_path: str | Path) -> None:
    """Open the directory containing ``file_path`` in the system file manager."""
    path = Path(file_path)
    if not str(file_path) or path.parent == path:
        raise CommandError(f"{file_path} has no parent directory")
    if sys.platform == "win32":
        opener = "explorer"
    elif sys.platform == "darwin":
        opener = "open"
    else:
        opener = "xdg-open"
    try:
        subprocess.Popen([opener, str(path.parent)])
    except OSError as exc:
        raise CommandError(f"Failed to open {path.parent}") from exc


def archive_file(file_path: str | Path) -> Path:
    """Store a file uncompressed in a zip archive beside it and return its path."""
    path = Path(file_path)
    if not path.name:
        raise CommandError(f"{file_path} has no file name")
    zip_path = path.with_suffix(".zip")
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise CommandError(f"Failed to read {path}") from exc
    try:
        with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_STORED) as archive:
            archive.writestr(path.name, data)
    except OSError as exc:
        raise CommandError(f"Failed to write {zip_path}") from exc
    return zip_path