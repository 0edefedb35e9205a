"""MIME parser — turns raw RFC 822 bytes into a :class:`ParsedMessage`
with typed header values, text/HTML bodies and attachment parts.
"""

from __future__ import annotations

import email
import email.headerregistry
import email.message
import email.policy
import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import UTC
from typing import TypeAlias, cast

from .headers import (
    Address,
    AddressList,
    ContentType,
    DateTime,
    Empty,
    Group,
    GroupList,
    Header,
    HeaderValue,
    Text,
    TextList,
)

_MESSAGE_ID_RE = re.compile(r"<[^<>]*>")

# Headers whose value is a list of message ids
_MESSAGE_ID_LIST_HEADERS = frozenset({"references", "in-reply-to"})

_BODY_TYPES = frozenset({"text/plain", "text/html"})


@dataclass(frozen=True)
class BinaryPayload:
    data: bytes


@dataclass(frozen=True)
class TextPayload:
    text: str


@dataclass(frozen=True)
class NestedMessagePayload:
    """An attached ``message/*`` or ``multipart/*`` part, kept unparsed."""

    message: email.message.EmailMessage


Payload: TypeAlias = BinaryPayload | TextPayload | NestedMessagePayload


@dataclass
class AttachmentPart:
    """A single attachment: its own headers plus a typed payload."""

    headers: list[Header]
    payload: Payload


@dataclass
class ParsedMessage:
    """Structured, read-only view of a fully parsed email."""

    headers: list[Header]
    text_bodies: list[str] = field(default_factory=list)
    html_bodies: list[str] = field(default_factory=list)
    attachments: list[AttachmentPart] = field(default_factory=list)

    def header(self, name: str) -> Header | None:
        """Return the first header called *name* (case-insensitive)."""
        for header in self.headers:
            if header.is_named(name):
                return header
        return None

    def body_text(self, index: int = 0) -> str | None:
        if index < len(self.text_bodies):
            return self.text_bodies[index]
        return None

    @property
    def message_id(self) -> str | None:
        return self._text_value("Message-ID")

    @property
    def subject(self) -> str | None:
        return self._text_value("Subject")

    @property
    def from_(self) -> HeaderValue:
        header = self.header("From")
        return header.value if header is not None else Empty()

    def _text_value(self, name: str) -> str | None:
        header = self.header(name)
        if header is None:
            return None
        match header.value:
            case Text(text=text):
                return text.strip() or None
            case TextList(items=items):
                return items[0]
            case _:
                return None


class MimeParser:
    """Stateless parser: raw RFC 822 bytes → ParsedMessage."""

    def parse(self, raw_bytes: bytes) -> ParsedMessage:
        msg = cast(
            email.message.EmailMessage,
            email.message_from_bytes(raw_bytes, policy=email.policy.default),
        )

        text_bodies: list[str] = []
        html_bodies: list[str] = []
        attachments: list[AttachmentPart] = []

        if not msg.is_multipart():
            self._collect_body(msg, text_bodies, html_bodies)
        else:
            for part in _iter_leaves(msg):
                if _is_attachment(part):
                    attachments.append(
                        AttachmentPart(headers=parse_headers(part), payload=_payload(part))
                    )
                else:
                    self._collect_body(part, text_bodies, html_bodies)

        return ParsedMessage(
            headers=parse_headers(msg),
            text_bodies=text_bodies,
            html_bodies=html_bodies,
            attachments=attachments,
        )

    def _collect_body(
        self,
        part: email.message.EmailMessage,
        text_bodies: list[str],
        html_bodies: list[str],
    ) -> None:
        content_type = part.get_content_type()
        if content_type not in _BODY_TYPES:
            return
        payload = _get_content(part)
        if not isinstance(payload, str):
            return
        if content_type == "text/plain":
            text_bodies.append(payload)
        else:
            html_bodies.append(payload)


def parse_headers(part: email.message.EmailMessage) -> list[Header]:
    """Convert every header of *part* into a typed :class:`Header`, in order."""
    return [Header(name=name, value=parse_header_value(name, value)) for name, value in part.items()]


def parse_header_value(name: str, value: object) -> HeaderValue:
    """Classify one header object produced by ``email.policy.default``."""
    if not str(value).strip():
        return Empty()

    if isinstance(value, email.headerregistry.AddressHeader):
        return _address_value(value)

    if isinstance(value, email.headerregistry.DateHeader):
        if value.datetime is None:
            return Text(str(value))
        dt = value.datetime
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return DateTime(int(dt.timestamp()))

    if isinstance(value, email.headerregistry.ContentTypeHeader):
        return ContentType(value.maintype, value.subtype, dict(value.params))

    if isinstance(value, email.headerregistry.ContentDispositionHeader):
        return ContentType(value.content_disposition or "", None, dict(value.params))

    text = str(value)
    lowered = name.lower()
    if lowered == "keywords":
        items = [item.strip() for item in text.split(",") if item.strip()]
        return TextList(tuple(items)) if len(items) > 1 else Text(text)
    if lowered in _MESSAGE_ID_LIST_HEADERS:
        ids = _MESSAGE_ID_RE.findall(text)
        return TextList(tuple(ids)) if len(ids) > 1 else Text(text)

    return Text(text)


def _address_value(value: email.headerregistry.AddressHeader) -> HeaderValue:
    groups = value.groups
    if any(group.display_name is not None for group in groups):
        converted = tuple(
            Group(group.display_name, tuple(_address(a) for a in group.addresses))
            for group in groups
        )
        return converted[0] if len(converted) == 1 else GroupList(converted)

    addresses = tuple(_address(a) for a in value.addresses)
    if not addresses:
        return Empty()
    if len(addresses) == 1:
        return addresses[0]
    return AddressList(addresses)


def _address(address: email.headerregistry.Address) -> Address:
    return Address(
        name=address.display_name or None,
        address=address.addr_spec or None,
    )


def _iter_leaves(part: email.message.EmailMessage) -> Iterator[email.message.EmailMessage]:
    """Yield non-container parts in document order.

    Only ``multipart/*`` containers are descended into; an attached
    ``message/rfc822`` is yielded as a leaf.
    """
    if part.get_content_maintype() != "multipart":
        yield part
        return
    for subpart in part.iter_parts():
        yield from _iter_leaves(subpart)


def _is_attachment(part: email.message.EmailMessage) -> bool:
    if part.get_content_disposition() == "attachment":
        return True
    if part.get_filename():
        return True
    return part.get_content_type() not in _BODY_TYPES


def _payload(part: email.message.EmailMessage) -> Payload:
    maintype = part.get_content_maintype()
    if maintype in ("message", "multipart"):
        return NestedMessagePayload(part)
    content = _get_content(part)
    if isinstance(content, str):
        return TextPayload(content)
    if isinstance(content, bytes):
        return BinaryPayload(content)
    return NestedMessagePayload(part)


def _get_content(part: email.message.EmailMessage) -> object:
    """``get_content()``, decoding text with an unknown charset as UTF-8."""
    try:
        return part.get_content()
    except LookupError:
        payload = part.get_payload(decode=True) or b""
        return payload.decode("utf-8", errors="replace")
