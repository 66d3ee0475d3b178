"""
Create Invoice Tool

Create a BOLT11 invoice from a Lightning Address via LNURL-pay.
"""

import json
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..lnurl_client import LnurlPayClient

logger = logging.getLogger("ln-address-mcp.tools.create_invoice")


async def create_invoice(
    address: str,
    amount_sats: int,
    comment: str | None = None,
    client: "LnurlPayClient | None" = None,
) -> str:
    """
    Create a Lightning invoice payable to a Lightning Address.

    Args:
        address: Lightning Address in email format (e.g. alice@wallet.com)
        amount_sats: Amount in satoshis, within the recipient's limits
        comment: Optional comment for the recipient, if they accept one
        client: LnurlPayClient used for the discovery and callback requests

    Returns:
        JSON with the BOLT11 invoice or a typed error
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

    # JSON clients sometimes send whole numbers as floats
    if isinstance(amount_sats, float) and amount_sats.is_integer():
        amount_sats = int(amount_sats)

    try:
        result = await client.create_invoice(
            address, amount_sats, comment=comment or None
        )
        return json.dumps(result.to_dict(), indent=2)

    except Exception as e:
        logger.exception("Error creating invoice")
        return json.dumps({
            "success": False,
            "error": str(e),
        })
