"""
Record editing: build and patch records from user input.

Everything here is a pure transformation except the *_files helpers,
which only read image files before handing off to apply_image().
Image failures return None ("no change applied") instead of raising.
"""

import asyncio
import base64
import dataclasses
import logging
from pathlib import Path
from typing import Optional, Union

from .errors import RecordValidationError
from .types import Record, normalize_id

logger = logging.getLogger(__name__)

# Magic-byte prefixes for the image formats browsers embed inline
_IMAGE_SIGNATURES: list[tuple[bytes, str]] = [
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
]

REQUIRED_FIELDS = ("id", "title", "artist", "image_url")


def sniff_mime_type(data: bytes) -> str:
    """Best-effort MIME type from leading bytes."""
    for signature, mime in _IMAGE_SIGNATURES:
        if data.startswith(signature):
            return mime
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    return "application/octet-stream"


def encode_data_uri(data: bytes) -> Optional[str]:
    """Encode bytes as a ``data:`` URI, or None if there is nothing to encode."""
    if not isinstance(data, (bytes, bytearray)) or not data:
        return None
    payload = base64.b64encode(bytes(data)).decode("ascii")
    return f"data:{sniff_mime_type(data)};base64,{payload}"


def apply_metadata(record: Record, id: Union[str, int], year: Optional[Union[int, str]]) -> Record:
    """Copy of the record with id and year replaced."""
    return dataclasses.replace(record, id=normalize_id(id), year=year)


def apply_image(
    record: Record,
    image_bytes: bytes,
    thumbnail_bytes: Optional[bytes] = None,
) -> Optional[Record]:
    """
    Copy of the record with its image (and thumbnail) embedded as data URIs.

    Without a thumbnail the image itself is reused.

    Returns:
        The updated record, or None if either payload could not be encoded
    """
    image_uri = encode_data_uri(image_bytes)
    thumb_uri = encode_data_uri(thumbnail_bytes) if thumbnail_bytes is not None else image_uri
    if not image_uri or not thumb_uri:
        logger.error("Failed to encode image for record %s", record.id)
        return None

    logger.info("Image for record %s was updated", record.id)
    return dataclasses.replace(record, image_url=image_uri, thumbnail_url=thumb_uri)


async def apply_image_files(
    record: Record,
    image_path: Path,
    thumbnail_path: Optional[Path] = None,
) -> Optional[Record]:
    """Read image files without blocking the event loop, then apply_image()."""
    try:
        image_bytes = await asyncio.to_thread(Path(image_path).read_bytes)
        thumbnail_bytes = (
            await asyncio.to_thread(Path(thumbnail_path).read_bytes)
            if thumbnail_path is not None else None
        )
    except OSError as e:
        logger.error("Failed to read image file: %s", e)
        return None
    return apply_image(record, image_bytes, thumbnail_bytes)


def create_record(
    id: Union[str, int],
    year: Optional[Union[int, str]],
    image_bytes: bytes,
    thumbnail_bytes: Optional[bytes] = None,
) -> Optional[Record]:
    """New record from an id, a year and an image; None if the image fails."""
    return apply_image(Record(id=id, year=year), image_bytes, thumbnail_bytes)


def build_record(
    id: Optional[Union[str, int]],
    title: Optional[str],
    artist: Optional[str],
    image_url: Optional[str],
    *,
    year: Optional[Union[int, str]] = None,
    medium: Optional[str] = None,
    description: Optional[str] = None,
) -> Record:
    """
    Build a full record from form input.

    Raises:
        RecordValidationError: if id, title, artist or image_url is blank
    """
    values = {"id": id, "title": title, "artist": artist, "image_url": image_url}
    missing = [name for name in REQUIRED_FIELDS if _blank(values[name])]
    if missing:
        raise RecordValidationError(missing)

    return Record(
        id=id,
        title=title.strip(),
        artist=artist.strip(),
        year=year if not _blank(year) else None,
        medium=(medium or "").strip(),
        description=(description or "").strip(),
        image_url=image_url.strip(),
        thumbnail_url=image_url.strip(),
    )


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())
