# blendio

blendio keeps a local catalogue of Blender installations, `.blend` project
files, launch-argument presets and Python scripts in an SQLite database. It
can start Blender with the options you saved. You use it as a Python library.

## Installation

```
pip install blendio
```

To run the tests, install the test extra:

```
pip install "blendio[test]"
pytest
```

## Concepts

The records are dataclasses in `blendio.models`:

- `BlenderRepoPath`: an installation location, which is a directory that holds
  unpacked Blender builds.
- `InstalledBlenderVersion`: a Blender build and the path of its launcher
  executable.
- `ProjectFile`: a `.blend` file. It carries a JSON list of the Blender
  configuration series it was found under.
- `LaunchArgument`: a saved command-line string that is passed to Blender.
- `PythonScript`: a script that Blender runs through `--python`.
- `DownloadableBlenderVersion`: one entry of the daily-build listing.

Each command raises `blendio.models.CommandError` when it fails.

## Storage

`blendio.database.open_app_state(path=None)` creates the database file if it
does not exist and creates the tables. It then returns an `AppState` that
holds the connection and can be used as a context manager. With no path it
uses `default_database_path()`, which is `test.db` inside
`default_data_dir()`, a per-user data directory named
`com.bakalaurs.blendio-tauri`. The repository classes in
`blendio.repositories` give plain insert, fetch, update and delete access to
each table.

## Usage

```python
from blendio.database import open_app_state
from blendio import blender_versions, project_files, launch_arguments, python_scripts

with open_app_state() as state:
    # Register a directory of Blender builds and scan it for launchers.
    blender_versions.insert_blender_version_installation_location(state, "/opt/blender")
    blender_versions.insert_and_refresh_installed_blender_versions(state)
    versions = blender_versions.fetch_installed_blender_versions(state)

    # Save a launch-argument preset and a startup script.
    arg_id = launch_arguments.insert_launch_argument(state, "--factory-startup")
    script = python_scripts.insert_python_script(state, "/home/me/scripts/setup.py")

    # Create a new project with a chosen Blender version, then open it.
    project_files.create_new_project_file(state, versions[0].id, "/home/me/projects", "scene")
    project = project_files.fetch_blend_files(
        state, file_path="/home/me/projects/scene.blend"
    )[0]
    project_files.open_blend_file(state, project.id, versions[0].id, arg_id, script.id)
```

### Blender versions (`blendio.blender_versions`)

- `insert_and_refresh_installed_blender_versions` looks at every subdirectory
  of each installation location. It records any `blender-launcher.exe` it finds
  that is not in the catalogue yet. The version and variant are read from
  directory names such as `blender-4.2.0-stable+...` by
  `parse_version_directory_name`.
- `get_downloadable_blender_version_data(platform_name=None)` fetches the list
  of daily builds. It keeps the 64-bit builds for `"windows"`, `"macos"` or
  `"linux"`, or for the current platform when no name is given. The filtering
  itself is `filter_downloadable_versions`.
- `download_and_install_blender_version` unpacks a zip archive that is already
  on disk into the archive's directory and deletes the archive. It then records
  the installation.
- `uninstall_and_delete_installed_blender_version_data` deletes the
  installation directory and its record.
- `delete_blender_version_installation_location` removes a location. It also
  removes the record of every installed version whose directory lies beneath
  that location. No files are deleted.
- `update_installed_blender_version(state, id, is_default)` and
  `update_blender_version_installation_location` take the entry's *current*
  default flag. When that flag is true, the entry stops being the default.
  Otherwise the entry becomes the only default.

### Project files (`blendio.project_files`)

- `insert_and_refresh_blend_files(state, config_directory=None)` reads
  `Blender Foundation/Blender/<series>/config/recent-files.txt` under the
  user configuration directory. Files that still exist are recorded or tagged
  with the series name. Files that are gone are forgotten. Each
  `recent-files.txt` is then rewritten so that it lists only the files that
  exist.
- `update_blend_file` adds a series name or sets the last used Blender version.
- `delete_blend_file` deletes the file from disk and forgets it.
- `create_project_file_archive_file` stores the file, without compression, in
  a `.zip` beside it. It then opens the containing directory in the system file
  manager.
- `reveal_project_file_in_local_file_system` opens the file's directory in the
  system file manager.

### Launch arguments and scripts

`fetch_launch_arguments` and `fetch_python_scripts` return the most recently
accessed entries first. When an argument string or a script path is inserted
again, the existing entry is refreshed and no duplicate is added.
`launch_arguments.resolve_launch_arguments` splits a saved argument string on
whitespace and appends `--python <script>`. If the arguments already contain
`--python`, only the script path is appended.

`blendio.filesystem` holds the helpers underneath: `extract_archive`,
`archive_file`, `delete_file`, `delete_directory`, `launch_executable` (runs a
program and waits for it to exit) and `open_in_file_explorer`.

## What blendio does not do

- It has no graphical interface and no command-line program. Folder and file
  pickers are not included, so every path is passed in by the caller.
- It does not download build archives. It lists the available builds and
  installs from an archive that is already on disk.
- It looks only for `blender-launcher.exe` as the Blender executable. Builds
  without that file are not found by the scan.