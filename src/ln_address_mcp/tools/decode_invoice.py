"""
Decode Invoice Tool

Read network and amount from a BOLT11 invoice prefix.
"""

import json

from ..bolt11 import decode

NOT_DECODED_NOTE = (
    "Only network and amount are read from the invoice prefix. Payment hash, "
    "payee, description, expiry and routing hints are not decoded, and the "
    "checksum and signature are not verified."
)


async def decode_invoice(invoice: str) -> str:
    """
    Decode a BOLT11 invoice for inspection.

    Args:
        invoice: BOLT11 invoice string

    Returns:
        JSON with network and amount, or the reason decoding failed
    """
    result = decode(invoice)
    response = result.to_dict()
    if result.success:
        response["note"] = NOT_DECODED_NOTE
    return json.dumps(response, indent=2)
