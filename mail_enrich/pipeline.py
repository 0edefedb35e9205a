"""Pipeline orchestration: rebuild, optionally render HTML, deliver, serialize."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import structlog

from .config import ImapConfig
from .headers import Address
from .imap_client import ImapClient
from .parser import ParsedMessage
from .render import get_pixel_element, text_body_as_html
from .transform import DEFAULT_TEXT_LIST_SEPARATOR, build_from_parsed

logger = structlog.get_logger()

Deliver = Callable[[ImapConfig, bytes], None]


@dataclass
class EnrichOptions:
    """What the default reconstruction mode should do."""

    generate_html: bool = False
    pixel_base_url: str | None = None
    imap: ImapConfig | None = None
    regenerate_content_type: bool = False
    text_list_separator: str = DEFAULT_TEXT_LIST_SEPARATOR


def deliver_to_imap(config: ImapConfig, raw_bytes: bytes) -> None:
    with ImapClient(config) as client:
        client.append(raw_bytes)


def enrich(
    message: ParsedMessage,
    options: EnrichOptions,
    *,
    deliver: Deliver = deliver_to_imap,
) -> str:
    """Rebuild *message* and return it serialized.

    When ``options.imap`` is set the message is appended to the mail store
    first, with the HTML body but without the tracking pixel.  Any failure
    raises before a result is returned.
    """
    builder = build_from_parsed(
        message,
        regenerate_content_type=options.regenerate_content_type,
        text_list_separator=options.text_list_separator,
    )

    append = None
    if options.pixel_base_url is not None:
        append = get_pixel_element(options.pixel_base_url, message)

    if options.imap is not None:
        if options.generate_html:
            builder.set_html_body(text_body_as_html(message))
        deliver(options.imap, builder.write_to_bytes())

    if options.generate_html:
        builder.set_html_body(text_body_as_html(message, append))

    logger.info(
        "message_enriched",
        headers=len(builder.headers),
        attachments=len(builder.attachments),
        html=builder.html_body is not None,
        delivered=options.imap is not None,
    )
    return builder.write_to_string()


# ----------------------------------------------------------------------
# Query modes
# ----------------------------------------------------------------------


def get_message_id(message: ParsedMessage) -> str:
    return message.message_id or ""


def get_subject(message: ParsedMessage) -> str:
    return message.subject or ""


def get_from_email(message: ParsedMessage) -> str:
    """Address string of a single-address From header, else ``""``."""
    from_ = message.from_
    if isinstance(from_, Address):
        return from_.address or ""
    return ""


def html_preview(message: ParsedMessage) -> str:
    return text_body_as_html(message)
