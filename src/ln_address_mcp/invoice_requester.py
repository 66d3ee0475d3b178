"""
Invoice Requester

Second step of LNURL-pay: ask the recipient's callback for a BOLT11 invoice
for a specific amount.
"""

import logging
import uuid
from typing import Callable
from urllib.parse import urlencode

import httpx

from .address_resolver import MAX_MSAT, PayMetadata
from .exceptions import (
    AmountOutOfRangeError,
    EmptyInvoiceError,
    InvalidAmountError,
    RemoteRejectedError,
    UnreachableCallbackError,
)
from .transport import get_once

logger = logging.getLogger("ln-address-mcp.requester")

MSAT_PER_SAT = 1000


def sats_to_msat(amount_sats: int) -> int:
    """
    Convert a satoshi amount to millisatoshis.

    Raises:
        InvalidAmountError: If the amount is not a positive integer, or the
            result does not fit a signed 64-bit integer
    """
    if isinstance(amount_sats, bool) or not isinstance(amount_sats, int):
        raise InvalidAmountError(amount_sats, "amount must be a whole number of satoshis")
    if amount_sats <= 0:
        raise InvalidAmountError(amount_sats, "amount must be positive")
    if amount_sats > MAX_MSAT // MSAT_PER_SAT:
        raise InvalidAmountError(amount_sats, "amount overflows the millisatoshi range")
    return amount_sats * MSAT_PER_SAT


def build_callback_url(
    callback_url: str, amount_msat: int, nonce: str, comment: str | None = None
) -> str:
    """
    Append amount, nonce and optional comment to the callback URL.

    The nonce only keeps caches from serving an earlier invoice; servers are
    free to ignore it.
    """
    params = [("amount", str(amount_msat)), ("nonce", nonce)]
    if comment:
        params.append(("comment", comment))
    query = urlencode(params)

    if "?" not in callback_url:
        separator = "?"
    elif callback_url.endswith(("?", "&")):
        separator = ""
    else:
        separator = "&"

    return f"{callback_url}{separator}{query}"


def _new_nonce() -> str:
    return str(uuid.uuid4())


class InvoiceRequester:
    """Requests invoices from LNURL-pay callbacks."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        nonce_factory: Callable[[], str] = _new_nonce,
    ) -> None:
        """
        Args:
            http_client: Client used for the single callback GET
            nonce_factory: Produces a fresh nonce per request
        """
        self._http_client = http_client
        self._nonce_factory = nonce_factory

    async def request(
        self,
        metadata: PayMetadata,
        amount_sats: int,
        comment: str | None = None,
    ) -> str:
        """
        Request a BOLT11 invoice for amount_sats.

        The amount is validated before any network call. The callback is
        attempted exactly once. The returned invoice is not validated.

        Args:
            metadata: Pay metadata from AddressResolver
            amount_sats: Amount in satoshis
            comment: Optional payer comment (LUD-12), sent only when the
                recipient allows comments

        Returns:
            BOLT11 invoice string

        Raises:
            InvalidAmountError: Non-positive or overflowing amount
            AmountOutOfRangeError: Outside minSendable..maxSendable
            UnreachableCallbackError: Non-2xx, timeout or transport failure
            RemoteRejectedError: Callback returned status ERROR
            EmptyInvoiceError: Callback returned no invoice
        """
        amount_msat = sats_to_msat(amount_sats)

        if not metadata.min_sendable_msat <= amount_msat <= metadata.max_sendable_msat:
            raise AmountOutOfRangeError(
                metadata.min_sendable_msat, metadata.max_sendable_msat, amount_msat
            )

        url = build_callback_url(
            metadata.callback_url,
            amount_msat,
            self._nonce_factory(),
            self._prepare_comment(metadata, comment),
        )
        logger.info(f"Requesting invoice for {amount_sats} sats")

        response = await get_once(self._http_client, url, UnreachableCallbackError)

        try:
            body = response.json()
        except ValueError as e:
            raise EmptyInvoiceError("callback returned malformed JSON") from e

        if not isinstance(body, dict):
            raise EmptyInvoiceError("callback response is not a JSON object")

        if body.get("status") == "ERROR":
            reason = body.get("reason")
            raise RemoteRejectedError(reason if isinstance(reason, str) else str(reason or ""))

        invoice = body.get("pr")
        if not isinstance(invoice, str) or not invoice:
            raise EmptyInvoiceError()

        return invoice

    @staticmethod
    def _prepare_comment(metadata: PayMetadata, comment: str | None) -> str | None:
        if comment is None:
            return None
        comment = str(comment)
        if not comment:
            return None
        if metadata.comment_allowed <= 0:
            logger.warning("Recipient does not accept comments; dropping comment")
            return None
        if len(comment) > metadata.comment_allowed:
            logger.info(f"Truncating comment to {metadata.comment_allowed} characters")
            return comment[: metadata.comment_allowed]
        return comment
