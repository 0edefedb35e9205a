"""IMAP client wrapping stdlib imaplib for appending rebuilt messages."""

from __future__ import annotations

import imaplib
import time

import structlog

from .config import ImapConfig
from .errors import DeliveryError

logger = structlog.get_logger()


class ImapClient:
    """Blocking IMAP client used to store a single message.

    Usable as a context manager::

        with ImapClient(config) as client:
            client.append(raw_bytes)
    """

    def __init__(self, config: ImapConfig) -> None:
        self._config = config
        self._conn: imaplib.IMAP4_SSL | imaplib.IMAP4 | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def connect(self) -> None:
        """Connect and login."""
        try:
            if self._config.use_ssl:
                self._conn = imaplib.IMAP4_SSL(self._config.host, self._config.port)
            else:
                self._conn = imaplib.IMAP4(self._config.host, self._config.port)
            self._conn.login(self._config.username, self._config.password.get_secret_value())
        except (imaplib.IMAP4.error, OSError) as exc:
            self._conn = None
            raise DeliveryError(f"IMAP connection to {self._config.host} failed: {exc}") from exc
        logger.info("imap_connected", host=self._config.host, port=self._config.port)

    def disconnect(self) -> None:
        """Logout; errors while closing are ignored."""
        if self._conn is None:
            return
        try:
            self._conn.logout()
        except (imaplib.IMAP4.error, OSError):
            pass
        self._conn = None
        logger.info("imap_disconnected")

    def __enter__(self) -> ImapClient:
        self.connect()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.disconnect()

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def append(self, raw_bytes: bytes, mailbox: str | None = None) -> None:
        """Append *raw_bytes* to *mailbox* (default: configured) flagged ``\\Seen``."""
        assert self._conn is not None, "Not connected"
        target = mailbox or self._config.mailbox
        try:
            status, data = self._conn.append(
                _quote_mailbox(target),
                r"(\Seen)",
                imaplib.Time2Internaldate(time.time()),
                raw_bytes,
            )
        except (imaplib.IMAP4.error, OSError) as exc:
            raise DeliveryError(f"IMAP append to {target!r} failed: {exc}") from exc
        if status != "OK":
            raise DeliveryError(f"IMAP append to {target!r} rejected: {data!r}")
        logger.info("imap_append_complete", mailbox=target, size=len(raw_bytes))


def _quote_mailbox(name: str) -> str:
    """Quote a mailbox name; imaplib sends it unquoted otherwise."""
    return '"' + name.replace("\\", "\\\\").replace('"', '\\"') + '"'
