"""
Resolve Address Tool

Look up a Lightning Address's LNURL-pay limits without requesting an invoice.
"""

import json
import logging
from typing import TYPE_CHECKING

import httpx

from ..exceptions import LnurlError

if TYPE_CHECKING:
    from ..lnurl_client import LnurlPayClient

logger = logging.getLogger("ln-address-mcp.tools.resolve_address")


async def resolve_lightning_address(
    address: str,
    client: "LnurlPayClient | None" = None,
) -> str:
    """
    Resolve a Lightning Address to its payment limits and description.

    Args:
        address: Lightning Address in email format
        client: LnurlPayClient used for the discovery request

    Returns:
        JSON with sendable range, description and comment length
    """
    if not address or not isinstance(address, str):
        return json.dumps({
            "success": False,
            "error": "Lightning Address is required (format: user@domain.com)",
        })

    if not client:
        return json.dumps({
            "success": False,
            "error": "LNURL client not configured",
        })

    try:
        metadata = await client.resolve(address)
    except LnurlError as e:
        return json.dumps({
            "success": False,
            "error": str(e),
            "details": e.to_dict(),
        })
    except Exception as e:
        logger.exception("Error resolving Lightning Address")
        return json.dumps({"success": False, "error": str(e)})

    return json.dumps({
        "success": True,
        "address": address,
        "callbackHost": httpx.URL(metadata.callback_url).host,
        "minSendableSats": metadata.min_sendable_sats,
        "maxSendableSats": metadata.max_sendable_sats,
        "description": metadata.description,
        "commentAllowed": metadata.comment_allowed,
    }, indent=2)
