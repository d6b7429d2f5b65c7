"""Multipart upload extraction and size/type validation, shared by video and thumbnail routes."""
import os
from dataclasses import dataclass
from typing import BinaryIO

from starlette.datastructures import FormData, UploadFile

from tubely.errors import BadRequestError

# Headroom for multipart boundaries and part headers on top of the file itself
MULTIPART_OVERHEAD = 64 * 1024
CHUNK_SIZE = 1024 * 1024  # 1 MB


def normalize_content_type(content_type: str | None) -> str:
    return (content_type or "").split(";")[0].strip().lower()


@dataclass
class UploadArtifact:
    filename: str | None
    content_type: str
    size: int
    file: BinaryIO


def _file_size(upload: UploadFile) -> int:
    if upload.size is not None:
        return upload.size
    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


def artifact_from_form(form: FormData, field: str) -> UploadArtifact:
    """The form must carry exactly one file under field."""
    values = form.getlist(field)
    if len(values) != 1 or not isinstance(values[0], UploadFile):
        raise BadRequestError(f"Expected a single file in form field '{field}'")
    upload = values[0]
    return UploadArtifact(
        filename=upload.filename,
        content_type=normalize_content_type(upload.content_type),
        size=_file_size(upload),
        file=upload.file,
    )


def check_declared_length(content_length: str | None, max_bytes: int) -> None:
    """
    Reject oversized bodies from the Content-Length header before the form is parsed.
    Chunked uploads are not accepted: a body without a declared length is refused.
    """
    if not content_length:
        raise BadRequestError("Content-Length header is required")
    try:
        declared = int(content_length)
    except ValueError:
        raise BadRequestError("Invalid Content-Length header")
    if declared > max_bytes + MULTIPART_OVERHEAD:
        raise BadRequestError("Upload exceeds size limit")


def validate_artifact(artifact: UploadArtifact, allowed_types, max_bytes: int) -> None:
    if artifact.size > max_bytes:
        raise BadRequestError(f"File exceeds upload size limit of {max_bytes} bytes")
    if artifact.content_type not in allowed_types:
        allowed = ", ".join(sorted(allowed_types))
        raise BadRequestError(f"Invalid file type {artifact.content_type or 'unknown'!r}; allowed: {allowed}")
