"""
LNURL-pay Client

Composes AddressResolver and InvoiceRequester into the full
Lightning Address -> BOLT11 invoice pipeline.
"""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from .address_resolver import AddressResolver, LightningAddress, PayMetadata
from .config import HttpSettings
from .exceptions import LnurlError
from .invoice_requester import InvoiceRequester, sats_to_msat
from .transport import build_http_client

logger = logging.getLogger("ln-address-mcp.lnurl")


@dataclass
class InvoiceResult:
    """Outcome of an invoice request: an invoice or a typed error."""

    success: bool
    bolt11: str | None = None
    error: LnurlError | None = None
    amount_sats: int | None = None
    metadata: PayMetadata | None = None

    @classmethod
    def succeeded(
        cls, bolt11: str, amount_sats: int | None = None, metadata: PayMetadata | None = None
    ) -> "InvoiceResult":
        return cls(success=True, bolt11=bolt11, amount_sats=amount_sats, metadata=metadata)

    @classmethod
    def failed(cls, error: LnurlError, metadata: PayMetadata | None = None) -> "InvoiceResult":
        return cls(success=False, error=error, metadata=metadata)

    @property
    def reason(self) -> str | None:
        """Human-readable failure reason."""
        return str(self.error) if self.error else None

    @property
    def kind(self) -> str | None:
        return self.error.kind if self.error else None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        if not self.success:
            result: dict[str, Any] = {
                "success": False,
                "error": self.reason,
                "details": self.error.to_dict() if self.error else None,
            }
        else:
            result = {
                "success": True,
                "invoice": self.bolt11,
                "amountSats": self.amount_sats,
            }
        if self.metadata is not None:
            result["recipient"] = {
                "minSendableSats": self.metadata.min_sendable_sats,
                "maxSendableSats": self.metadata.max_sendable_sats,
                "description": self.metadata.description,
            }
        return result


class LnurlPayClient:
    """
    Lightning Address client.

    Each call opens its own httpx.AsyncClient, so concurrent calls share
    no state.

    Usage:
        client = LnurlPayClient()
        result = await client.create_invoice("alice@wallet.com", 1000)
        if result.success:
            print(result.bolt11)
    """

    def __init__(self, settings: HttpSettings | None = None, **httpx_kwargs: Any) -> None:
        """
        Args:
            settings: HTTP settings (timeout, user agent). Defaults to HttpSettings()
            **httpx_kwargs: Additional kwargs passed to httpx.AsyncClient
        """
        self._settings = settings or HttpSettings()
        self._httpx_kwargs = httpx_kwargs

    def _build_client(self) -> httpx.AsyncClient:
        return build_http_client(self._settings, **self._httpx_kwargs)

    async def resolve(self, address: str) -> PayMetadata:
        """
        Resolve a Lightning Address to its pay metadata.

        Raises:
            ResolutionError: See AddressResolver.resolve
        """
        lightning_address = LightningAddress.parse(address)
        async with self._build_client() as client:
            return await AddressResolver(client).resolve(lightning_address)

    async def create_invoice(
        self, address: str, amount_sats: int, comment: str | None = None
    ) -> InvoiceResult:
        """
        Create a BOLT11 invoice for amount_sats payable to address.

        Never raises LnurlError: every pipeline failure is returned as
        InvoiceResult.failed. Address and amount are validated before any
        network call.

        Args:
            address: Lightning Address, e.g. "alice@wallet.com"
            amount_sats: Amount in satoshis
            comment: Optional payer comment

        Returns:
            InvoiceResult
        """
        metadata: PayMetadata | None = None
        try:
            lightning_address = LightningAddress.parse(address)
            sats_to_msat(amount_sats)

            async with self._build_client() as client:
                metadata = await AddressResolver(client).resolve(lightning_address)
                bolt11 = await InvoiceRequester(client).request(metadata, amount_sats, comment)

        except LnurlError as e:
            logger.warning(f"Invoice request for {address!r} failed ({e.kind}): {e}")
            return InvoiceResult.failed(e, metadata=metadata)

        logger.info(f"Created invoice for {amount_sats} sats to {lightning_address}")
        return InvoiceResult.succeeded(bolt11, amount_sats=amount_sats, metadata=metadata)
