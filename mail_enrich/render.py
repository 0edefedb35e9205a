"""Text body → HTML rendering and tracking pixel construction."""

from __future__ import annotations

import base64
import html

import markdown

from .errors import MissingMessageIdError, MissingTextBodyError
from .parser import ParsedMessage

GENERATOR = "mail-enrich/0.1"


def text_body(message: ParsedMessage) -> str:
    """The first text body of *message*."""
    body = message.body_text(0)
    if body is None:
        raise MissingTextBodyError()
    return body


def pre_markdown(text: str) -> str:
    """Append two spaces to every line so markdown keeps the line breaks."""
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    result = []
    for line in lines:
        result.append(line.removesuffix("\r") + "  \n")
    return "".join(result)


def render_html(text: str, append: str | None = None) -> str:
    """Render plain *text* as a complete HTML document.

    *append* is inserted after the rendered body (e.g. a tracking pixel).
    """
    html_body = markdown.markdown(pre_markdown(text))
    body_append = append or ""

    return f"""<html>
<head>
<meta http-equiv="Content-Type" content="text/html charset=UTF-8" />
<meta name="generator" content="{GENERATOR}" />
<style>
  code {{ margin-left: 20px; background: #ddd; display: inline-block; padding: 10px 16px; font-family: monospace; }}
  blockquote {{ white-space: normal; border-left: 10px solid #ddd; margin-left: 0; padding-left: 10px }}
</style>
</head>
<body>
{html_body}
{body_append}
</body>
</html>
"""


def text_body_as_html(message: ParsedMessage, append: str | None = None) -> str:
    return render_html(text_body(message), append)


def encode_message_id(message_id: str) -> str:
    """URL-safe base64 of the raw identifier, without padding."""
    return base64.urlsafe_b64encode(message_id.encode("utf-8")).decode("ascii").rstrip("=")


def pixel_url(tracking_url: str, message_id: str) -> str:
    return f"{tracking_url}/image/{encode_message_id(message_id)}.gif"


def get_pixel_element(tracking_url: str, message: ParsedMessage) -> str:
    """``<img>`` fragment pointing at the open-tracking image for *message*."""
    message_id = message.message_id
    if message_id is None:
        raise MissingMessageIdError()
    src = html.escape(pixel_url(tracking_url, message_id), quote=True)
    return f'<img src="{src}" alt="Open pixel" style="border: 0px; width: 0px; max-width: 1px;" />'
