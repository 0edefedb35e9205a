"""Typed header values as produced by :class:`~mail_enrich.parser.MimeParser`.

``HeaderValue`` is a closed union.  Consumers dispatch with ``match`` and end
with ``assert_never`` so a new variant shows up in the type checker at every
site that has to handle it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TypeAlias


@dataclass(frozen=True)
class Address:
    """A single address record: optional display name plus address string."""

    name: str | None
    address: str | None


@dataclass(frozen=True)
class AddressList:
    addresses: tuple[Address, ...]


@dataclass(frozen=True)
class Text:
    text: str


@dataclass(frozen=True)
class TextList:
    items: tuple[str, ...]


@dataclass(frozen=True)
class DateTime:
    """A date already resolved to seconds since the epoch."""

    timestamp: int


@dataclass(frozen=True)
class ContentType:
    """A ``type/subtype`` pair with named attributes (``filename``, ``charset``...).

    Content-Disposition values share this shape: ``ctype`` holds the
    disposition (``attachment``, ``inline``) and ``subtype`` is ``None``.
    """

    ctype: str
    subtype: str | None = None
    attributes: dict[str, str] = field(default_factory=dict)

    def attribute(self, name: str) -> str | None:
        return self.attributes.get(name)


@dataclass(frozen=True)
class Group:
    name: str | None
    addresses: tuple[Address, ...]


@dataclass(frozen=True)
class GroupList:
    groups: tuple[Group, ...]


@dataclass(frozen=True)
class Empty:
    pass


HeaderValue: TypeAlias = (
    Address | AddressList | Text | TextList | DateTime | ContentType | Group | GroupList | Empty
)


@dataclass(frozen=True)
class Header:
    """One header of a parsed message or part, in source order."""

    name: str
    value: HeaderValue

    def is_named(self, name: str) -> bool:
        return self.name.lower() == name.lower()
