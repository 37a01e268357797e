"""
Attachment router: classifies uploaded parts by step and form field name.

All checks run before anything touches the database or disk, so a single bad
file rejects the whole request.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

from services.errors import FileRejected

DOCUMENT_TYPES = {".pdf", ".jpg", ".jpeg", ".png"}
IMAGE_TYPES = {".jpg", ".jpeg", ".png"}

ALLOWED_EXTENSIONS: dict[int, set[str]] = {
    0: DOCUMENT_TYPES,  # firm registration documents
    1: IMAGE_TYPES,  # personnel photos
    3: DOCUMENT_TYPES,  # experience certificates
    5: DOCUMENT_TYPES | {".doc", ".docx"},  # final attachments
}

DOCUMENT_CATEGORIES: dict[int, str] = {
    0: "FIRM_DETAILS",
    1: "PERSONNEL_DETAILS",
    3: "EXPERIENCE",
    5: "FINAL_ATTACHMENTS",
}

READ_CHUNK_SIZE = 1024 * 1024

PHOTO_FIELD = re.compile(r"^personnel\[(\d+)\]\[photo\]$")
PERSONNEL_FIELD = re.compile(r"^personnel\[(\d+)\]")


class Upload(Protocol):
    """The parts of starlette's UploadFile the router relies on."""
    filename: Optional[str]
    content_type: Optional[str]

    async def read(self, size: int = -1) -> bytes: ...


@dataclass
class AcceptedFile:
    field_name: str
    original_name: str
    content: bytes
    content_type: Optional[str] = None
    personnel_index: Optional[int] = None
    is_photo: bool = False

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class RoutedFiles:
    step: int
    category: Optional[str] = None
    groups: dict[str, list[AcceptedFile]] = field(default_factory=dict)

    def __bool__(self) -> bool:
        return bool(self.groups)

    @property
    def count(self) -> int:
        return sum(len(files) for files in self.groups.values())

    def photos(self) -> dict[int, AcceptedFile]:
        """Personnel photos keyed by roster index."""
        return {
            f.personnel_index: f
            for files in self.groups.values()
            for f in files
            if f.is_photo and f.personnel_index is not None
        }

    def documents(self) -> list[AcceptedFile]:
        """Everything persisted as a generic attachment row."""
        return [f for files in self.groups.values() for f in files if not f.is_photo]

    def document_type(self, accepted: AcceptedFile) -> str:
        return f"{self.category}_{accepted.field_name}"


def accepts_uploads(step: int) -> bool:
    return step in ALLOWED_EXTENSIONS


async def _read_limited(upload: Upload, limit: int) -> bytes:
    """Read an upload in chunks, failing as soon as it grows past `limit` bytes."""
    chunks = []
    total = 0
    while chunk := await upload.read(READ_CHUNK_SIZE):
        total += len(chunk)
        if total > limit:
            raise FileRejected(
                f"File {upload.filename} exceeds the {limit // (1024 * 1024)}MB limit"
            )
        chunks.append(chunk)
    return b"".join(chunks)


async def route_uploads(
    step: int,
    uploads: Sequence[tuple[str, Upload]],
    *,
    max_file_bytes: int,
    max_files: int,
    roster_size: Optional[int] = None,
) -> RoutedFiles:
    """
    Check every uploaded part against the step's rules and group accepted files by field name.
    roster_size is the number of personnel entries submitted with a personnel-step request.
    """
    routed = RoutedFiles(step=step, category=DOCUMENT_CATEGORIES.get(step))
    if not uploads:
        return routed
    if not accepts_uploads(step):
        raise FileRejected(f"Step {step} does not accept file uploads")
    if len(uploads) > max_files:
        raise FileRejected(f"Too many files: {len(uploads)} uploaded, at most {max_files} allowed")

    allowed = ALLOWED_EXTENSIONS[step]
    photo_indexes: set[int] = set()
    for field_name, upload in uploads:
        original_name = upload.filename or ""
        ext = Path(original_name).suffix.lower()
        if ext not in allowed:
            raise FileRejected(f"File type {ext or '(none)'} not allowed for step {step}")
        content = await _read_limited(upload, max_file_bytes)

        accepted = AcceptedFile(
            field_name=field_name,
            original_name=original_name,
            content=content,
            content_type=upload.content_type,
        )
        if step == 1:
            photo = PHOTO_FIELD.match(field_name)
            person = photo or PERSONNEL_FIELD.match(field_name)
            if person:
                index = int(person.group(1))
                if roster_size is None or index >= roster_size:
                    raise FileRejected(f"{field_name} does not match a submitted personnel entry")
                accepted.personnel_index = index
            if photo:
                if accepted.personnel_index in photo_indexes:
                    raise FileRejected(f"Only one photo allowed for {field_name}")
                photo_indexes.add(accepted.personnel_index)
                accepted.is_photo = True

        routed.groups.setdefault(field_name, []).append(accepted)
    return routed
