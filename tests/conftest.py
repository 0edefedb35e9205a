"""Shared test fixtures for the mail-enrich test suite."""

from __future__ import annotations

from email import encoders
from email.mime.application import MIMEApplication
from email.mime.base import MIMEBase
from email.mime.message import MIMEMessage
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import pytest

from mail_enrich.config import ImapConfig
from mail_enrich.parser import MimeParser, ParsedMessage


@pytest.fixture
def imap_config() -> ImapConfig:
    return ImapConfig(
        host="imap.test.com",
        port=993,
        use_ssl=True,
        username="testuser",
        password="testpass",
        mailbox="Sent",
    )


# ------------------------------------------------------------------
# Sample EML builders
# ------------------------------------------------------------------


def _build_plain_email(
    *,
    subject: str = "Test Subject",
    from_addr: str = "sender@example.com",
    to_addr: str = "recipient@example.com",
    body: str = "Hello, World!",
    message_id: str | None = "<test-001@example.com>",
    cc: str | None = None,
    extra_headers: list[tuple[str, str]] | None = None,
) -> bytes:
    """Build a simple plain-text email as raw bytes."""
    msg = MIMEText(body, "plain")
    msg["Subject"] = subject
    msg["From"] = from_addr
    msg["To"] = to_addr
    if message_id is not None:
        msg["Message-ID"] = message_id
    msg["Date"] = "Sun, 01 Jun 2025 12:00:00 +0000"
    if cc:
        msg["Cc"] = cc
    for name, value in extra_headers or []:
        msg[name] = value
    return msg.as_bytes()


def _build_html_email(*, body_html: str = "<p>Hello</p>") -> bytes:
    msg = MIMEText(body_html, "html")
    msg["Subject"] = "HTML Email"
    msg["From"] = "sender@example.com"
    msg["To"] = "recipient@example.com"
    msg["Message-ID"] = "<html-001@example.com>"
    msg["Date"] = "Sun, 01 Jun 2025 12:00:00 +0000"
    return msg.as_bytes()


def _build_multipart_email(
    *,
    body_text: str = "Plain body",
    body_html: str = "<p>HTML body</p>",
    attachments: list[tuple[str, str, bytes]] | None = None,
    nested: bytes | None = None,
) -> bytes:
    """Build a multipart email with text, HTML, and optional attachments."""
    msg = MIMEMultipart("mixed")
    msg["Subject"] = "Multipart Email"
    msg["From"] = "Sender Name <sender@example.com>"
    msg["To"] = "recipient@example.com, other@example.com"
    msg["Message-ID"] = "<multi-001@example.com>"
    msg["Date"] = "Sun, 01 Jun 2025 12:00:00 +0000"

    # Text + HTML alternative
    alt = MIMEMultipart("alternative")
    alt.attach(MIMEText(body_text, "plain"))
    alt.attach(MIMEText(body_html, "html"))
    msg.attach(alt)

    # Attachments
    for filename, content_type, payload in attachments or []:
        maintype, subtype = content_type.split("/", 1)
        part = MIMEBase(maintype, subtype)
        part.set_payload(payload)
        encoders.encode_base64(part)
        part.add_header("Content-Disposition", "attachment", filename=filename)
        msg.attach(part)

    if nested is not None:
        from email import message_from_bytes

        msg.attach(MIMEMessage(message_from_bytes(nested)))

    return msg.as_bytes()


def _build_unnamed_attachment_email(payload: bytes = b"\x00\x01\x02binary") -> bytes:
    """Multipart email whose attachment carries no Content-Disposition."""
    msg = MIMEMultipart("mixed")
    msg["Subject"] = "Unnamed"
    msg["From"] = "sender@example.com"
    msg["To"] = "recipient@example.com"
    msg["Message-ID"] = "<unnamed-001@example.com>"
    msg.attach(MIMEText("See attached", "plain"))
    msg.attach(MIMEApplication(payload, "octet-stream"))
    return msg.as_bytes()


def parse(raw: bytes) -> ParsedMessage:
    return MimeParser().parse(raw)


@pytest.fixture
def plain_eml_bytes() -> bytes:
    return _build_plain_email()


@pytest.fixture
def html_eml_bytes() -> bytes:
    return _build_html_email()


@pytest.fixture
def multipart_eml_bytes() -> bytes:
    return _build_multipart_email(
        attachments=[
            ("report.pdf", "application/pdf", b"%PDF-1.4 fake pdf content"),
            ("data.csv", "text/csv", b"col1,col2\na,b\n"),
        ],
    )


@pytest.fixture
def example_eml_bytes() -> bytes:
    """The reference scenario: text body, one text attachment."""
    msg = MIMEMultipart("mixed")
    msg["Subject"] = "Hello"
    msg["From"] = "Alice <alice@example.com>"
    msg["To"] = "bob@example.com"
    msg["Message-ID"] = "<abc123@example.com>"
    msg["Date"] = "Sun, 01 Jun 2025 12:00:00 +0000"
    msg.attach(MIMEText("line one\nline two", "plain"))
    note = MIMEText("hi", "plain")
    note.add_header("Content-Disposition", "attachment", filename="note.txt")
    msg.attach(note)
    return msg.as_bytes()


@pytest.fixture
def plain_message(plain_eml_bytes: bytes) -> ParsedMessage:
    return parse(plain_eml_bytes)


@pytest.fixture
def multipart_message(multipart_eml_bytes: bytes) -> ParsedMessage:
    return parse(multipart_eml_bytes)


@pytest.fixture
def example_message(example_eml_bytes: bytes) -> ParsedMessage:
    return parse(example_eml_bytes)
