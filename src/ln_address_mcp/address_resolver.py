"""
Address Resolver

Turns a Lightning Address (user@domain) into validated LNURL-pay metadata
by querying the domain's well-known lnurlp endpoint.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit

import httpx

from .exceptions import (
    InvalidPayResponseError,
    MalformedAddressError,
    UnreachableEndpointError,
)
from .transport import get_once

logger = logging.getLogger("ln-address-mcp.resolver")

PAY_REQUEST_TAG = "payRequest"

# Sendable bounds and converted amounts must fit a signed 64-bit integer.
MAX_MSAT = 2**63 - 1


@dataclass(frozen=True)
class LightningAddress:
    """A parsed user@domain Lightning Address."""

    local_part: str
    domain: str

    @classmethod
    def parse(cls, address: str) -> "LightningAddress":
        """
        Parse a Lightning Address.

        Args:
            address: Address in email format, e.g. "alice@wallet.com"

        Returns:
            Parsed LightningAddress

        Raises:
            MalformedAddressError: Unless the address splits into exactly two
                non-empty parts on '@' and the domain is a dotted, encodable host
        """
        if not isinstance(address, str):
            raise MalformedAddressError(repr(address), "address must be a string")

        parts = address.split("@")
        if len(parts) != 2:
            raise MalformedAddressError(
                address, "expected exactly one '@' (format: user@domain.com)"
            )

        local_part, domain = parts
        if not local_part or not domain:
            raise MalformedAddressError(address, "user and domain must both be non-empty")

        if "." not in domain:
            raise MalformedAddressError(address, f"domain {domain!r} is not a DNS name")

        parsed = cls(local_part=local_part, domain=domain)
        try:
            httpx.URL(parsed.discovery_url).host
        except (httpx.InvalidURL, UnicodeError) as e:
            raise MalformedAddressError(
                address, f"domain {domain!r} is not a valid host: {e}"
            ) from e

        return parsed

    @property
    def discovery_url(self) -> str:
        """LUD-16 well-known URL. Parts are used verbatim."""
        return f"https://{self.domain}/.well-known/lnurlp/{self.local_part}"

    def __str__(self) -> str:
        return f"{self.local_part}@{self.domain}"


def _check_callback_url(callback: str) -> None:
    try:
        url = httpx.URL(callback)
        host = url.host
        urlsplit(callback).hostname
    except (httpx.InvalidURL, ValueError) as e:
        raise InvalidPayResponseError(f"callback {callback!r} is not a valid URL") from e

    if url.scheme not in ("http", "https") or not host:
        raise InvalidPayResponseError(
            f"callback {callback!r} is not an http(s) URL with a host"
        )


def _read_msat(data: dict[str, Any], key: str) -> int:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPayResponseError(f"'{key}' must be an integer, got {value!r}")
    if value < 0:
        raise InvalidPayResponseError(f"'{key}' must not be negative, got {value}")
    if value > MAX_MSAT:
        raise InvalidPayResponseError(f"'{key}' exceeds the millisatoshi range")
    return value


@dataclass(frozen=True)
class PayMetadata:
    """LNURL-pay metadata returned by the discovery endpoint."""

    callback_url: str
    min_sendable_msat: int
    max_sendable_msat: int
    metadata_json: str = ""
    tag: str = PAY_REQUEST_TAG
    comment_allowed: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> "PayMetadata":
        """
        Validate and build PayMetadata from a decoded discovery response.

        Raises:
            InvalidPayResponseError: If the document is not a well-formed
                payRequest with 0 <= minSendable <= maxSendable
        """
        if not isinstance(data, dict):
            raise InvalidPayResponseError("response is not a JSON object")

        tag = data.get("tag")
        if tag != PAY_REQUEST_TAG:
            raise InvalidPayResponseError(
                f"expected tag '{PAY_REQUEST_TAG}', got {tag!r}"
            )

        callback = data.get("callback")
        if not isinstance(callback, str) or not callback:
            raise InvalidPayResponseError("missing callback URL")
        _check_callback_url(callback)

        min_sendable = _read_msat(data, "minSendable")
        max_sendable = _read_msat(data, "maxSendable")
        if min_sendable > max_sendable:
            raise InvalidPayResponseError(
                f"minSendable ({min_sendable}) is greater than maxSendable ({max_sendable})"
            )

        metadata = data.get("metadata", "")
        if not isinstance(metadata, str):
            raise InvalidPayResponseError("'metadata' must be a JSON-encoded string")

        # Optional capability flag, absent on most providers
        comment_allowed = data.get("commentAllowed", 0)
        if isinstance(comment_allowed, bool) or not isinstance(comment_allowed, int):
            comment_allowed = 0

        return cls(
            callback_url=callback,
            min_sendable_msat=min_sendable,
            max_sendable_msat=max_sendable,
            metadata_json=metadata,
            tag=tag,
            comment_allowed=max(comment_allowed, 0),
        )

    @property
    def description(self) -> str | None:
        """The text/plain entry of the metadata pairs, if any."""
        try:
            entries = json.loads(self.metadata_json)
        except ValueError:
            return None

        if not isinstance(entries, list):
            return None

        for entry in entries:
            if (
                isinstance(entry, list)
                and len(entry) >= 2
                and entry[0] == "text/plain"
                and isinstance(entry[1], str)
            ):
                return entry[1]
        return None

    @property
    def min_sendable_sats(self) -> int:
        """Smallest whole-satoshi amount the recipient accepts."""
        return -(-self.min_sendable_msat // 1000)

    @property
    def max_sendable_sats(self) -> int:
        """Largest whole-satoshi amount the recipient accepts."""
        return self.max_sendable_msat // 1000

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "callback": self.callback_url,
            "minSendable": self.min_sendable_msat,
            "maxSendable": self.max_sendable_msat,
            "minSendableSats": self.min_sendable_sats,
            "maxSendableSats": self.max_sendable_sats,
            "description": self.description,
            "commentAllowed": self.comment_allowed,
            "tag": self.tag,
        }


class AddressResolver:
    """Resolves Lightning Addresses to PayMetadata."""

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        """
        Args:
            http_client: Client used for the single discovery GET
        """
        self._http_client = http_client

    async def resolve(self, address: "str | LightningAddress") -> PayMetadata:
        """
        Resolve a Lightning Address.

        Malformed addresses are rejected before any network call. The
        discovery request is attempted exactly once.

        Args:
            address: "user@domain.com" or an already parsed LightningAddress

        Returns:
            Validated PayMetadata

        Raises:
            MalformedAddressError: Address is not user@domain.tld
            UnreachableEndpointError: Non-2xx, timeout or transport failure
            InvalidPayResponseError: Body is not a valid payRequest
        """
        if not isinstance(address, LightningAddress):
            address = LightningAddress.parse(address)

        url = address.discovery_url
        logger.info(f"Resolving {address} via {url}")

        response = await get_once(self._http_client, url, UnreachableEndpointError)

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidPayResponseError(f"malformed JSON from {url}") from e

        metadata = PayMetadata.from_dict(data)
        logger.debug(
            f"Resolved {address}: {metadata.min_sendable_msat}-"
            f"{metadata.max_sendable_msat} msat"
        )
        return metadata
