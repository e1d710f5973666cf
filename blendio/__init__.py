"""Catalogue and launcher for Blender installations, project files, launch arguments and scripts."""

__version__ = "0.1.0"