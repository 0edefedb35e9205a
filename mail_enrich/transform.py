"""Header and attachment copying from a :class:`ParsedMessage` into a
:class:`MessageBuilder`.
"""

from __future__ import annotations

from typing import assert_never

import structlog

from .builder import (
    AddressField,
    AddressListField,
    BuilderAddress,
    ContentTypeField,
    DateField,
    HeaderField,
    MessageBuilder,
    TextField,
)
from .errors import MissingAddressError, UnsupportedHeaderError
from .headers import (
    Address,
    AddressList,
    ContentType,
    DateTime,
    Empty,
    Group,
    GroupList,
    Header,
    Text,
    TextList,
)
from .parser import AttachmentPart, BinaryPayload, NestedMessagePayload, ParsedMessage, TextPayload
from .render import text_body

logger = structlog.get_logger()

DEFAULT_TEXT_LIST_SEPARATOR = "\t\n"


def transform_address(address: Address) -> BuilderAddress:
    """Copy one address record; the address string is required."""
    if address.address is None:
        raise MissingAddressError(address.name)
    return BuilderAddress(name=address.name, address=address.address)


def transform_header(
    header: Header,
    *,
    regenerate_content_type: bool = False,
    text_list_separator: str = DEFAULT_TEXT_LIST_SEPARATOR,
) -> HeaderField | None:
    """Map one parsed header to at most one builder assignment.

    ``Content-Type`` is dropped unless *regenerate_content_type* is set,
    since the serializer derives it from the bodies and attachments.
    """
    value = header.value
    match value:
        case Address():
            return AddressField(transform_address(value))
        case AddressList(addresses=addresses):
            return AddressListField(tuple(transform_address(a) for a in addresses))
        case Text(text=text):
            return TextField(text)
        case TextList(items=items):
            return TextField(text_list_separator.join(items))
        case DateTime(timestamp=timestamp):
            return DateField(timestamp)
        case ContentType(ctype=ctype, subtype=subtype):
            # Content-Disposition parses to the same variant and is never copied
            if not (regenerate_content_type and header.is_named("Content-Type")):
                return None
            return ContentTypeField(_join_content_type(ctype, subtype))
        case Group():
            raise UnsupportedHeaderError(header.name, "Group")
        case GroupList():
            raise UnsupportedHeaderError(header.name, "GroupList")
        case Empty():
            raise UnsupportedHeaderError(header.name, "Empty")
        case _:
            assert_never(value)


def copy_headers(
    dest: MessageBuilder,
    source: ParsedMessage,
    *,
    regenerate_content_type: bool = False,
    text_list_separator: str = DEFAULT_TEXT_LIST_SEPARATOR,
) -> None:
    """Apply :func:`transform_header` to every header, in source order.

    Every header is transformed before any is assigned, so an unsupported
    header leaves *dest* untouched.
    """
    fields = [
        (
            header.name,
            transform_header(
                header,
                regenerate_content_type=regenerate_content_type,
                text_list_separator=text_list_separator,
            ),
        )
        for header in source.headers
    ]
    copied = 0
    for name, field in fields:
        if field is not None:
            dest.header(name, field)
            copied += 1
    logger.debug("headers_copied", copied=copied, total=len(source.headers))


def get_file_name(attachment: AttachmentPart) -> str:
    """Filename from the part's Content-Disposition, or ``""``."""
    result = ""
    for header in attachment.headers:
        if header.is_named("Content-Disposition") and isinstance(header.value, ContentType):
            result = header.value.attribute("filename") or ""
    return result


def get_content_type(attachment: AttachmentPart) -> str:
    """``type`` or ``type/subtype`` from the part's Content-Type, or ``""``."""
    result = ""
    for header in attachment.headers:
        if header.is_named("Content-Type") and isinstance(header.value, ContentType):
            result = _join_content_type(header.value.ctype, header.value.subtype)
    return result


def copy_attachments(dest: MessageBuilder, source: ParsedMessage) -> None:
    """Re-attach binary and text payloads; nested messages are skipped."""
    for attachment in source.attachments:
        content_type = get_content_type(attachment)
        file_name = get_file_name(attachment)

        match attachment.payload:
            case BinaryPayload(data=data):
                dest.binary_attachment(content_type, file_name, data)
            case TextPayload(text=text):
                dest.text_attachment(content_type, file_name, text)
            case NestedMessagePayload():
                logger.debug(
                    "attachment_skipped",
                    content_type=content_type,
                    filename=file_name,
                )


def build_from_parsed(
    message: ParsedMessage,
    *,
    regenerate_content_type: bool = False,
    text_list_separator: str = DEFAULT_TEXT_LIST_SEPARATOR,
) -> MessageBuilder:
    """Rebuild *message*: text body, then headers, then attachments."""
    builder = MessageBuilder()
    builder.set_text_body(text_body(message))
    copy_headers(
        builder,
        message,
        regenerate_content_type=regenerate_content_type,
        text_list_separator=text_list_separator,
    )
    copy_attachments(builder, message)
    return builder


def _join_content_type(ctype: str, subtype: str | None) -> str:
    if subtype:
        return f"{ctype}/{subtype}"
    return ctype
