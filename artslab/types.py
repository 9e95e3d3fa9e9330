"""
Data types for the art gallery store.
"""

import re
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional, Union


class Partition(str, Enum):
    """The two independently stored record collections."""
    USER = "user"      # operator-entered, authoritative
    CACHE = "cache"    # remote-sourced, disposable


def as_partition(partition: Union[Partition, str]) -> Partition:
    """Coerce a partition name to a Partition, raising ValueError if unknown."""
    if isinstance(partition, Partition):
        return partition
    try:
        return Partition(partition)
    except ValueError:
        names = ", ".join(p.value for p in Partition)
        raise ValueError(f"Unknown partition {partition!r} (expected one of: {names})") from None


# ---------------------------------------------------------------------------
# Identifiers
# ---------------------------------------------------------------------------

def normalize_id(id: Any) -> str:
    """Convert an identifier to its canonical string form.

    Remote ids arrive as integers, user ids as strings; both must compare
    equal when they print the same.  Integral floats lose their ``.0``.

    Raises ValueError for missing or blank ids.
    """
    if id is None or isinstance(id, bool):
        raise ValueError(f"Invalid record ID: {id!r}")
    if isinstance(id, float) and id.is_integer():
        id = int(id)
    text = str(id).strip()
    if not text:
        raise ValueError("Record ID must not be empty")
    return text


# ---------------------------------------------------------------------------
# Query tokenization
# ---------------------------------------------------------------------------

# "..." and '...' runs are one token each, otherwise split on whitespace
_TOKEN_RE = re.compile(r'"([^"]+)"|\'([^\']+)\'|\S+')


def tokenize_query(text: str) -> list[str]:
    """Split query text into tokens, keeping quotes around quoted phrases.

    >>> tokenize_query('starry "night sky"')
    ['starry', '"night sky"']
    """
    tokens = []
    for match in _TOKEN_RE.finditer(text or ""):
        double, single = match.group(1), match.group(2)
        if double is not None:
            tokens.append(f'"{double}"')
        elif single is not None:
            tokens.append(f"'{single}'")
        else:
            tokens.append(match.group(0))
    return tokens


def query_terms(text: str) -> list[str]:
    """Case-folded match terms for local search (quotes removed)."""
    terms = []
    for match in _TOKEN_RE.finditer(text or ""):
        term = match.group(1) or match.group(2) or match.group(0)
        term = term.strip().casefold()
        if term:
            terms.append(term)
    return terms


# ---------------------------------------------------------------------------
# Record
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Record:
    """
    A single catalog entry.

    Records are immutable snapshots; edits produce a new Record via
    ``dataclasses.replace`` and are stored by full replacement.

    Attributes:
        id: Canonical identifier (see normalize_id)
        title, artist, medium, description: Free text, searchable
        year: Release or accession year, number or free-form string
        image_url, thumbnail_url: Image references (URLs or data URIs)
        additional_image_urls: Extra image references
    """
    id: str
    title: str = ""
    artist: str = ""
    year: Optional[Union[int, str]] = None
    medium: str = ""
    description: str = ""
    image_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    additional_image_urls: list[str] = field(default_factory=list)

    def __post_init__(self):
        object.__setattr__(self, "id", normalize_id(self.id))

    @property
    def haystack(self) -> str:
        """Case-folded text searched by local queries."""
        return " ".join([self.title or "", self.artist or "", self.description or ""]).casefold()

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-ready dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Record":
        """Build a Record from stored JSON.

        Unknown keys are ignored.  ``desc`` is accepted for description
        (older gallery data used it).

        Raises ValueError if the data has no usable id.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Record data must be an object, got {type(data).__name__}")
        if data.get("id") is None:
            raise ValueError("Record data has no id")

        extra = data.get("additional_image_urls") or []
        if isinstance(extra, str):
            extra = [extra]

        return cls(
            id=data["id"],
            title=_text(data.get("title")),
            artist=_text(data.get("artist")),
            year=data.get("year"),
            medium=_text(data.get("medium")),
            description=_text(data.get("description", data.get("desc"))),
            image_url=data.get("image_url") or None,
            thumbnail_url=data.get("thumbnail_url") or None,
            additional_image_urls=[str(u) for u in extra if u],
        )

    def __str__(self) -> str:
        year = f" ({self.year})" if self.year not in (None, "") else ""
        artist = f" - {self.artist}" if self.artist else ""
        return f"{self.id}: {self.title or '(untitled)'}{artist}{year}"


def _text(value: Any) -> str:
    return "" if value is None else str(value)
