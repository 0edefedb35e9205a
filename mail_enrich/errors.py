"""Exception hierarchy for message reconstruction and delivery."""

from __future__ import annotations


class EnrichError(Exception):
    """Base class for every fatal condition raised by mail_enrich."""


class MissingInputError(EnrichError):
    """A value required by the requested operation is absent."""


class MissingTextBodyError(MissingInputError):
    def __init__(self) -> None:
        super().__init__("Message has no text body")


class MissingMessageIdError(MissingInputError):
    def __init__(self) -> None:
        super().__init__("Message has no Message-ID header")


class MissingAddressError(MissingInputError):
    """An address record reached the transformer without an address string."""

    def __init__(self, name: str | None = None) -> None:
        self.name = name
        super().__init__(f"Address record has no address (display name: {name!r})")


class UnsupportedHeaderError(EnrichError):
    """The header value variant cannot be represented in the rebuilt message."""

    def __init__(self, header_name: str, variant: str) -> None:
        self.header_name = header_name
        self.variant = variant
        super().__init__(f"{variant} not implemented (header {header_name!r})")


class DeliveryConfigError(EnrichError):
    """Delivery was requested with an incomplete set of parameters."""


class DeliveryError(EnrichError):
    """Connecting, logging in or appending to the mail store failed."""
