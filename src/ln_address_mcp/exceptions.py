"""LNURL-pay exceptions.

Every failure of the address-to-invoice pipeline is one of these. Each carries
a stable ``kind`` string and the structured fields a caller needs to decide
what to do next (status code, bounds, server-supplied reason).
"""


class LnurlError(Exception):
    """Base exception for ln-address-mcp."""

    kind = "lnurl_error"

    def to_dict(self) -> dict:
        """Structured form for tool responses."""
        return {"kind": self.kind, "message": str(self)}


class ResolutionError(LnurlError):
    """Lightning Address could not be resolved to pay metadata."""


class RequestError(LnurlError):
    """Invoice could not be obtained from the pay callback."""


class MalformedAddressError(ResolutionError):
    """Address is not of the form user@domain.tld."""

    kind = "malformed_address"

    def __init__(self, address: str, reason: str):
        self.address = address
        self.reason = reason
        super().__init__(f"Invalid Lightning Address {address!r}: {reason}")


class UnreachableEndpointError(ResolutionError):
    """Discovery endpoint failed (non-2xx, timeout, DNS, TLS)."""

    kind = "unreachable_endpoint"

    def __init__(self, url: str, status_code: int | None = None, cause: str | None = None):
        self.url = url
        self.status_code = status_code
        self.cause = cause
        detail = f"status {status_code}" if status_code is not None else cause
        super().__init__(f"Failed to resolve Lightning Address via {url}: {detail}")

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "statusCode": self.status_code,
            "cause": self.cause,
        }


class InvalidPayResponseError(ResolutionError):
    """Discovery endpoint returned something that is not a valid payRequest."""

    kind = "invalid_pay_response"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Invalid LNURL pay response: {reason}")


class InvalidAmountError(RequestError):
    """Requested amount is not a positive satoshi value that fits in msat."""

    kind = "invalid_amount"

    def __init__(self, amount_sats: object, reason: str):
        self.amount_sats = amount_sats
        self.reason = reason
        super().__init__(f"Invalid amount {amount_sats!r}: {reason}")


class AmountOutOfRangeError(RequestError):
    """Amount falls outside the recipient's sendable bounds (all in msat)."""

    kind = "amount_out_of_range"

    def __init__(self, min_msat: int, max_msat: int, requested_msat: int):
        self.min_msat = min_msat
        self.max_msat = max_msat
        self.requested_msat = requested_msat
        super().__init__(
            f"Amount {requested_msat // 1000} sats is outside allowed range "
            f"({-(-min_msat // 1000)}-{max_msat // 1000} sats)"
        )

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "minSendableMsat": self.min_msat,
            "maxSendableMsat": self.max_msat,
            "requestedMsat": self.requested_msat,
        }


class UnreachableCallbackError(RequestError):
    """Pay callback failed (non-2xx, timeout, transport error)."""

    kind = "unreachable_callback"

    def __init__(self, url: str, status_code: int | None = None, cause: str | None = None):
        self.url = url
        self.status_code = status_code
        self.cause = cause
        detail = f"status {status_code}" if status_code is not None else cause
        super().__init__(f"Failed to create invoice: {detail}")

    def to_dict(self) -> dict:
        return {
            **super().to_dict(),
            "statusCode": self.status_code,
            "cause": self.cause,
        }


class RemoteRejectedError(RequestError):
    """Callback answered with status ERROR."""

    kind = "remote_rejected"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Recipient rejected the invoice request: {reason}")

    def to_dict(self) -> dict:
        return {**super().to_dict(), "reason": self.reason}


class EmptyInvoiceError(RequestError):
    """Callback answered without an invoice."""

    kind = "empty_invoice"

    def __init__(self, detail: str = "callback response has no 'pr' field"):
        self.detail = detail
        super().__init__(f"No invoice received: {detail}")
