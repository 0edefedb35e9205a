"""mail-enrich — rebuild an email, optionally render its text body as HTML,
add an open-tracking pixel and store the result on an IMAP server.
"""

from .builder import MessageBuilder
from .config import EnrichConfig, ImapConfig
from .errors import (
    DeliveryConfigError,
    DeliveryError,
    EnrichError,
    MissingAddressError,
    MissingInputError,
    MissingMessageIdError,
    MissingTextBodyError,
    UnsupportedHeaderError,
)
from .imap_client import ImapClient
from .parser import AttachmentPart, MimeParser, ParsedMessage
from .pipeline import EnrichOptions, enrich
from .render import get_pixel_element, render_html, text_body_as_html
from .transform import build_from_parsed, copy_attachments, copy_headers, transform_header

__all__ = [
    "AttachmentPart",
    "DeliveryConfigError",
    "DeliveryError",
    "EnrichConfig",
    "EnrichError",
    "EnrichOptions",
    "ImapClient",
    "ImapConfig",
    "MessageBuilder",
    "MimeParser",
    "MissingAddressError",
    "MissingInputError",
    "MissingMessageIdError",
    "MissingTextBodyError",
    "ParsedMessage",
    "UnsupportedHeaderError",
    "build_from_parsed",
    "copy_attachments",
    "copy_headers",
    "enrich",
    "get_pixel_element",
    "render_html",
    "text_body_as_html",
    "transform_header",
]
