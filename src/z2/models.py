"""Defines classes for representing notes and tags.

Fields that may be absent are ``Optional``; ``None`` means the value is absent, while an empty string is a
present (if uninteresting) value.
"""

from dataclasses import dataclass, field
from operator import attrgetter
from typing import List, Optional


@dataclass
class Tag:
    """A named label that can be attached to any number of notes."""

    name: str
    """Unique among all tags. Tags are looked up by exact name."""

    id: Optional[int] = None
    """Assigned by the store when the tag is first saved."""

    def as_json(self) -> dict:
        """Returns a dict representing the instance, suitable for serializing as json."""
        return {'id': self.id, 'name': self.name}


@dataclass
class Note:
    """A note with optional title, summary and body, and any number of tags.

    A note without a body is representable, though not very useful; the CLI always supplies one.
    """

    title: Optional[str] = None

    summary: Optional[str] = None

    body: Optional[str] = None

    tags: List[Tag] = field(default_factory=list)
    """Tags for the note. Order is not significant."""

    id: Optional[int] = None
    """Assigned by the store when the note is saved."""

    def tag_names(self) -> List[str]:
        """Returns the distinct names of the note's tags, sorted."""
        return sorted({t.name for t in self.tags})

    def as_json(self) -> dict:
        """Returns a dict representing the instance, suitable for serializing as json."""
        return {
            'id': self.id,
            'title': self.title,
            'summary': self.summary,
            'body': self.body,
            'tags': [t.as_json() for t in sorted(self.tags, key=attrgetter('name'))]
        }
