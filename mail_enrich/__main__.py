"""Entry point for the enrich tool.

Usage::

    mail-enrich message.eml --generate-html --add-pixel https://t.example
    mail-enrich - --get-message-id < message.eml
    python -m mail_enrich message.eml --put-on-imap Sent --server imap.example.com \\
        --port 993 --user me --password secret
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import structlog
from pydantic import ValidationError

from .config import EnrichConfig, ImapConfig
from .errors import DeliveryConfigError, EnrichError
from .logging import setup_logging
from .parser import MimeParser
from .pipeline import (
    EnrichOptions,
    enrich,
    get_from_email,
    get_message_id,
    get_subject,
    html_preview,
)

logger = structlog.get_logger()


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mail-enrich",
        description="Email enrich tool for mutt",
    )
    parser.add_argument("file", metavar="FILE", help="path to email file (use '-' for stdin)")
    parser.add_argument("--get-message-id", action="store_true", help="Prints message id of given mail")
    parser.add_argument("--get-subject", action="store_true", help="Prints subject of given mail")
    parser.add_argument("--get-from-email", action="store_true", help="Prints from email of given mail")
    parser.add_argument(
        "--html-preview",
        action="store_true",
        help="Generate html from markdown in text body and prints it",
    )
    parser.add_argument(
        "--generate-html",
        action="store_true",
        help="Generate html body from markdown in text body",
    )
    parser.add_argument("--add-pixel", metavar="BASE_URL", help="Add tracking pixel to html body")
    parser.add_argument("--put-on-imap", metavar="MAILBOX", help="Put email on IMAP server")
    parser.add_argument("--server", help="IMAP server hostname")
    parser.add_argument("--port", type=int, help="IMAP server port")
    parser.add_argument("--user", help="IMAP user name")
    parser.add_argument("--password", help="IMAP password")
    parser.add_argument(
        "--regenerate-content-type",
        action="store_true",
        default=None,
        help="Copy the original Content-Type onto the rebuilt message",
    )
    parser.add_argument("--log-level", help="Log level (default from MAIL_ENRICH_LOG_LEVEL)")
    parser.add_argument("--log-json", action="store_true", default=None, help="Emit JSON log lines")
    return parser


def read_input(file: str) -> bytes:
    if file == "-":
        return sys.stdin.buffer.read()
    return Path(file).read_bytes()


def imap_config_from_args(args: argparse.Namespace) -> ImapConfig | None:
    """Merge delivery flags over ``IMAP_*`` environment variables.

    Returns ``None`` when delivery was not requested.
    """
    given = {
        key: value
        for key, value in (
            ("host", args.server),
            ("port", args.port),
            ("username", args.user),
            ("password", args.password),
        )
        if value is not None
    }
    if args.put_on_imap is None:
        if given:
            raise DeliveryConfigError("--server, --port, --user and --password require --put-on-imap")
        return None

    try:
        return ImapConfig(mailbox=args.put_on_imap, **given)
    except ValidationError as exc:
        missing = ", ".join(str(error["loc"][0]) for error in exc.errors() if error["loc"])
        raise DeliveryConfigError(f"Missing arguments for put-on-imap: {missing}") from exc


def run(args: argparse.Namespace, config: EnrichConfig) -> str:
    """Execute the selected mode and return what should be printed."""
    imap = imap_config_from_args(args)
    message = MimeParser().parse(read_input(args.file))

    if args.get_message_id:
        return get_message_id(message)
    if args.get_subject:
        return get_subject(message)
    if args.get_from_email:
        return get_from_email(message)
    if args.html_preview:
        return html_preview(message)

    regenerate = args.regenerate_content_type
    options = EnrichOptions(
        generate_html=args.generate_html,
        pixel_base_url=args.add_pixel,
        imap=imap,
        regenerate_content_type=config.regenerate_content_type if regenerate is None else regenerate,
        text_list_separator=config.text_list_separator,
    )
    return enrich(message, options)


def main(argv: list[str] | None = None) -> None:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    if args.add_pixel is not None and not args.generate_html:
        parser.error("--add-pixel requires --generate-html")

    config = EnrichConfig()
    setup_logging(
        json=config.log_json if args.log_json is None else args.log_json,
        level=args.log_level or config.log_level,
    )

    try:
        output = run(args, config)
    except (EnrichError, OSError) as exc:
        logger.debug("enrich_failed", exc_info=True)
        print(f"mail-enrich: {exc}", file=sys.stderr)
        sys.exit(1)

    print(output)


if __name__ == "__main__":
    main()
