"""Message builder: accumulates the rebuilt message and serializes it
with the stdlib ``email`` package.
"""

from __future__ import annotations

import email.headerregistry
import email.utils
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from email.message import EmailMessage
from email.policy import EmailPolicy
from typing import TypeAlias

_LINE_BREAK_RE = re.compile(r"[ \t]*[\r\n]+[ \t]*")

_DEFAULT_CONTENT_TYPE = ("application", "octet-stream")


class _RebuildPolicy(EmailPolicy):
    """EmailPolicy that keeps duplicate headers and folds embedded newlines.

    Copied headers may repeat (``Received``, or a duplicated ``Subject``) and
    flattened text lists may contain line breaks, which the default policy
    rejects.
    """

    def header_max_count(self, name):
        return None

    def header_store_parse(self, name, value):
        if isinstance(value, str) and not hasattr(value, "name"):
            value = _LINE_BREAK_RE.sub(" ", value).strip()
        return super().header_store_parse(name, value)


POLICY = _RebuildPolicy()
SMTP_POLICY = POLICY.clone(linesep="\r\n")


@dataclass(frozen=True)
class BuilderAddress:
    name: str | None
    address: str

    def to_email_address(self) -> email.headerregistry.Address:
        return email.headerregistry.Address(display_name=self.name or "", addr_spec=self.address)


@dataclass(frozen=True)
class AddressField:
    address: BuilderAddress


@dataclass(frozen=True)
class AddressListField:
    addresses: tuple[BuilderAddress, ...]


@dataclass(frozen=True)
class TextField:
    text: str


@dataclass(frozen=True)
class DateField:
    timestamp: int


@dataclass(frozen=True)
class ContentTypeField:
    value: str


HeaderField: TypeAlias = AddressField | AddressListField | TextField | DateField | ContentTypeField


@dataclass(frozen=True)
class AttachmentAssignment:
    content_type: str
    filename: str
    payload: bytes | str


@dataclass
class MessageBuilder:
    """Write accumulator for the message under construction."""

    text_body: str = ""
    html_body: str | None = None
    headers: list[tuple[str, HeaderField]] = field(default_factory=list)
    attachments: list[AttachmentAssignment] = field(default_factory=list)

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------

    def set_text_body(self, text: str) -> None:
        self.text_body = text

    def set_html_body(self, html: str) -> None:
        self.html_body = html

    def header(self, name: str, value: HeaderField) -> None:
        self.headers.append((name, value))

    def binary_attachment(self, content_type: str, filename: str, data: bytes) -> None:
        self.attachments.append(AttachmentAssignment(content_type, filename, bytes(data)))

    def text_attachment(self, content_type: str, filename: str, text: str) -> None:
        self.attachments.append(AttachmentAssignment(content_type, filename, text))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_email_message(self) -> EmailMessage:
        """Build an :class:`EmailMessage` from the accumulated assignments.

        Headers go in first so ``set_content`` can regenerate the MIME
        framing headers, then bodies and attachments.  A
        :class:`ContentTypeField` is applied last and keeps the generated
        parameters (boundary, charset).
        """
        msg = EmailMessage(policy=POLICY)
        content_types: list[str] = []

        for name, value in self.headers:
            if isinstance(value, ContentTypeField):
                content_types.append(value.value)
                continue
            msg[name] = _header_value(value)

        msg.set_content(self.text_body)
        if self.html_body is not None:
            msg.add_alternative(self.html_body, subtype="html")

        for attachment in self.attachments:
            _add_attachment(msg, attachment)

        for content_type in content_types:
            if "/" in content_type:
                msg.set_type(content_type)
            else:
                msg.replace_header("Content-Type", content_type)

        return msg

    def write_to_bytes(self) -> bytes:
        """Serialize with CRLF line endings, as expected by IMAP APPEND."""
        return self.to_email_message().as_bytes(policy=SMTP_POLICY)

    def write_to_string(self) -> str:
        return self.to_email_message().as_string()


def _header_value(value: HeaderField) -> object:
    match value:
        case AddressField(address=address):
            return address.to_email_address()
        case AddressListField(addresses=addresses):
            return [a.to_email_address() for a in addresses]
        case TextField(text=text):
            return text
        case DateField(timestamp=timestamp):
            return email.utils.format_datetime(datetime.fromtimestamp(timestamp, UTC))
        case ContentTypeField(value=content_type):
            return content_type


def _add_attachment(msg: EmailMessage, attachment: AttachmentAssignment) -> None:
    maintype, subtype = _split_content_type(attachment.content_type)
    filename = attachment.filename or None
    payload = attachment.payload

    if isinstance(payload, str):
        if maintype == "text":
            msg.add_attachment(payload, subtype=subtype, filename=filename)
            return
        payload = payload.encode("utf-8")

    msg.add_attachment(payload, maintype=maintype, subtype=subtype, filename=filename)


def _split_content_type(content_type: str) -> tuple[str, str]:
    maintype, _, subtype = content_type.partition("/")
    if not maintype or not subtype:
        return _DEFAULT_CONTENT_TYPE
    return maintype.lower(), subtype.lower()
