"""Parsing and writing of files delivered by the browser extension."""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..core.content import decode_content, looks_like_base64

logger = logging.getLogger(__name__)

_DRIVE_RE = re.compile(r"^[A-Za-z]:")


class PayloadError(ValueError):
    """The request body is missing or is not a usable file payload."""


class FolderPathError(ValueError):
    """A relative path tried to leave the project directory."""


class IncomingFilePayload(BaseModel):
    fileName: str = Field(..., description="Name of the file to create.")
    content: str = Field(..., description="File content, plain text or base64.")
    folderPath: Optional[str] = Field(None, description="Folder relative to the project root.")
    projectDirectory: Optional[str] = Field(None, description="Directory of the target project.")

    @field_validator("fileName")
    @classmethod
    def _file_name_required(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("fileName is required")
        return value.strip()

    @field_validator("folderPath", "projectDirectory")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()

    def decoded_content(self) -> bytes:
        return decode_content(self.content)


def parse_payload(body: bytes) -> IncomingFilePayload:
    if not body or not body.strip():
        raise PayloadError("Empty request body")
    logger.info("Received file data, content length: %d", len(body))
    try:
        raw = json.loads(body.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.info("Error parsing file data: %s", exc)
        raise PayloadError("Invalid file data format") from exc
    if not isinstance(raw, dict):
        raise PayloadError("Invalid file data format")
    try:
        payload = IncomingFilePayload.model_validate(raw)
    except ValidationError as exc:
        logger.info(
            "Failed to parse JSON - fileName: %s, content: %s",
            raw.get("fileName") or "null",
            "present" if isinstance(raw.get("content"), str) else "null",
        )
        raise PayloadError("Invalid file data format") from exc

    message = f"Successfully parsed file: {payload.fileName}"
    if payload.folderPath:
        message += f" in folder: {payload.folderPath}"
    if payload.projectDirectory:
        message += f" for project: {payload.projectDirectory}"
    logger.info(message)
    if looks_like_base64(payload.content):
        logger.info("Content appears to be base64 encoded, decoding...")
    return payload


def _is_rooted(value: str) -> bool:
    return (
        PurePosixPath(value).is_absolute()
        or PureWindowsPath(value).is_absolute()
        or value.startswith(("\\", "/"))
        or bool(_DRIVE_RE.match(value))
    )


def check_relative_path(value: str) -> str:
    """Reject paths that contain ``..`` or are absolute; return it ``/``-separated."""
    normalised = value.replace("\\", "/")
    if ".." in normalised or _is_rooted(value):
        raise FolderPathError(f"Invalid folder path detected: {value}")
    return normalised.strip("/")


def resolve_target_path(project_dir: Path, file_name: str, folder_path: Optional[str] = None) -> Path:
    name = check_relative_path(file_name)
    if not name:
        raise FolderPathError(f"Invalid file name: {file_name}")
    if folder_path:
        folder = check_relative_path(folder_path)
        logger.info("Creating file in specified folder: %s", folder)
        return Path(project_dir).joinpath(*folder.split("/"), *name.split("/"))
    logger.info("Creating file in project root")
    return Path(project_dir).joinpath(*name.split("/"))


def write_file(target: Path, data: bytes) -> Path:
    """Write ``data`` to ``target``, creating parent folders as needed.

    Concurrent writers to the same path are not coordinated; the last one wins.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    return target
