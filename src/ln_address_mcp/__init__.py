"""
ln-address MCP Server

An MCP server that turns Lightning Addresses into BOLT11 invoices via
LNURL-pay and inspects BOLT11 invoices for AI agents.

Available tools:
- create_invoice - Create an invoice payable to a Lightning Address
- decode_invoice - Read network and amount from a BOLT11 invoice
- resolve_lightning_address - Look up a Lightning Address's limits
"""

__version__ = "0.1.0"

from .address_resolver import AddressResolver, LightningAddress, PayMetadata
from .bolt11 import (
    AmountStatus,
    AmountUnit,
    DecodedAmount,
    DecodedInvoice,
    DecodeErrorKind,
    DecodeResult,
    NetworkTag,
    decode,
)
from .config import (
    ConfigurationService,
    HttpSettings,
    ServerConfiguration,
    get_config_service,
    get_configuration,
)
from .exceptions import (
    AmountOutOfRangeError,
    EmptyInvoiceError,
    InvalidAmountError,
    InvalidPayResponseError,
    LnurlError,
    MalformedAddressError,
    RemoteRejectedError,
    RequestError,
    ResolutionError,
    UnreachableCallbackError,
    UnreachableEndpointError,
)
from .invoice_requester import InvoiceRequester, build_callback_url, sats_to_msat
from .lnurl_client import InvoiceResult, LnurlPayClient
from .server import LnAddressServer, main

__all__ = [
    # Server
    "LnAddressServer",
    "main",
    # LNURL-pay
    "LnurlPayClient",
    "InvoiceResult",
    "AddressResolver",
    "LightningAddress",
    "PayMetadata",
    "InvoiceRequester",
    "build_callback_url",
    "sats_to_msat",
    # BOLT11
    "decode",
    "DecodeResult",
    "DecodedInvoice",
    "DecodedAmount",
    "DecodeErrorKind",
    "AmountStatus",
    "AmountUnit",
    "NetworkTag",
    # Configuration
    "ConfigurationService",
    "HttpSettings",
    "ServerConfiguration",
    "get_config_service",
    "get_configuration",
    # Exceptions
    "LnurlError",
    "ResolutionError",
    "RequestError",
    "MalformedAddressError",
    "UnreachableEndpointError",
    "InvalidPayResponseError",
    "InvalidAmountError",
    "AmountOutOfRangeError",
    "UnreachableCallbackError",
    "RemoteRejectedError",
    "EmptyInvoiceError",
]
