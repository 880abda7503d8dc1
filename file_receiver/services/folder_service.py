"""Folder listing for a project directory."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List

from ..core.host_model import FolderDescriptor

logger = logging.getLogger(__name__)

ROOT_FOLDER_NAME = "Project Root"
EXCLUDED_FOLDERS = {"bin", "obj", "packages", "node_modules"}


def is_excluded_folder(name: str) -> bool:
    return name.startswith(".") or name.lower() in EXCLUDED_FOLDERS


def list_project_folders(project_dir: Path) -> List[FolderDescriptor]:
    """Return the project root followed by every folder beneath it.

    Build output, package caches and hidden folders are skipped along with
    everything under them.
    """

    root = Path(project_dir)
    folders: List[FolderDescriptor] = [FolderDescriptor(name=ROOT_FOLDER_NAME, path="", full_path=str(root))]

    def _on_error(exc: OSError) -> None:
        logger.warning("Error reading project folders: %s", exc)

    for current, dirnames, _ in os.walk(root, onerror=_on_error):
        dirnames[:] = sorted(d for d in dirnames if not is_excluded_folder(d))
        for dirname in dirnames:
            full_path = Path(current) / dirname
            relative = full_path.relative_to(root).as_posix()
            folders.append(FolderDescriptor(name=dirname, path=relative, full_path=str(full_path)))
    return folders
