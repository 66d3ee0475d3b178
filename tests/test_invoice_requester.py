"""
Tests for Invoice Requester
"""

from dataclasses import replace

import httpx
import pytest

from ln_address_mcp.address_resolver import PayMetadata
from ln_address_mcp.exceptions import (
    AmountOutOfRangeError,
    EmptyInvoiceError,
    InvalidAmountError,
    RemoteRejectedError,
    UnreachableCallbackError,
)
from ln_address_mcp.invoice_requester import (
    InvoiceRequester,
    build_callback_url,
    sats_to_msat,
)

from .conftest import CALLBACK_URL, INVOICE, PAY_RESPONSE

INT64_MAX = 2**63 - 1


@pytest.fixture
def metadata() -> PayMetadata:
    # 1000-5000 msat, i.e. 1-5 sats
    return PayMetadata.from_dict(PAY_RESPONSE)


class TestSatsToMsat:
    """Tests for the satoshi to millisatoshi conversion."""

    def test_converts(self):
        """Test satoshis are converted to millisatoshis."""
        assert sats_to_msat(3) == 3000

    @pytest.mark.parametrize("amount", [0, -1, -1000])
    def test_non_positive_rejected(self, amount):
        """Test zero and negative amounts are rejected."""
        with pytest.raises(InvalidAmountError, match="positive"):
            sats_to_msat(amount)

    def test_overflow_rejected(self):
        """Test an amount whose msat value overflows int64 is rejected."""
        with pytest.raises(InvalidAmountError, match="overflow"):
            sats_to_msat(INT64_MAX)

    def test_largest_convertible_amount(self):
        """Test the largest amount that still fits int64 converts exactly."""
        assert sats_to_msat(INT64_MAX // 1000) == (INT64_MAX // 1000) * 1000

    @pytest.mark.parametrize("amount", [True, 1.5, "1000", None])
    def test_non_integer_rejected(self, amount):
        """Test booleans, floats, strings and None are rejected."""
        with pytest.raises(InvalidAmountError):
            sats_to_msat(amount)


class TestBuildCallbackUrl:
    """Tests for callback URL construction."""

    def test_appends_with_question_mark(self):
        """Test a bare callback gets a new query string."""
        url = build_callback_url("https://x.com/cb", 3000, "abc")

        assert url == "https://x.com/cb?amount=3000&nonce=abc"

    def test_appends_with_ampersand_when_query_present(self):
        """Test an existing query string is extended with '&'."""
        url = build_callback_url("https://x.com/cb?user=alice", 3000, "abc")

        assert url == "https://x.com/cb?user=alice&amount=3000&nonce=abc"

    def test_trailing_question_mark(self):
        """Test a callback ending in '?' gets no extra separator."""
        url = build_callback_url("https://x.com/cb?", 3000, "abc")

        assert url == "https://x.com/cb?amount=3000&nonce=abc"

    def test_comment_is_url_encoded(self):
        """Test the comment is form-encoded into the query."""
        url = build_callback_url("https://x.com/cb", 3000, "abc", "thanks & bye")

        assert url == "https://x.com/cb?amount=3000&nonce=abc&comment=thanks+%26+bye"


class TestInvoiceRequester:
    """Tests for InvoiceRequester.request."""

    @pytest.mark.asyncio
    async def test_returns_invoice(self, lnurl_transport, metadata):
        """Test the callback's 'pr' field is returned."""
        async with httpx.AsyncClient(transport=lnurl_transport) as client:
            invoice = await InvoiceRequester(client).request(metadata, 3)

        assert invoice == INVOICE
        assert len(lnurl_transport.callback_requests) == 1
        params = lnurl_transport.callback_requests[0].url.params
        assert params["amount"] == "3000"
        assert params["nonce"]

    @pytest.mark.asyncio
    async def test_uses_nonce_factory(self, lnurl_transport, metadata):
        """Test the injected nonce factory supplies the nonce."""
        async with httpx.AsyncClient(transport=lnurl_transport) as client:
            requester = InvoiceRequester(client, nonce_factory=lambda: "fixed-nonce")
            await requester.request(metadata, 3)

        assert str(lnurl_transport.requests[0].url) == (
            f"{CALLBACK_URL}?amount=3000&nonce=fixed-nonce"
        )

    @pytest.mark.asyncio
    async def test_fresh_nonce_per_request(self, lnurl_transport, metadata):
        """Test every request carries a different nonce."""
        async with httpx.AsyncClient(transport=lnurl_transport) as client:
            requester = InvoiceRequester(client)
            await requester.request(metadata, 3)
            await requester.request(metadata, 3)

        first, second = (r.url.params["nonce"] for r in lnurl_transport.callback_requests)
        assert first != second

    @pytest.mark.asyncio
    async def test_existing_query_string_preserved(self, lnurl_transport, metadata):
        """Test parameters already on the callback survive."""
        metadata = replace(metadata, callback_url=f"{CALLBACK_URL}?user=alice")

        async with httpx.AsyncClient(transport=lnurl_transport) as client:
            await InvoiceRequester(client).request(metadata, 3)

        params = lnurl_transport.callback_requests[0].url.params
        assert params["user"] == "alice"
        assert params["amount"] == "3000"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [1, 5])
    async def test_bounds_are_inclusive(self, lnurl_transport, metadata, amount):
        """Test amounts exactly at minSendable and maxSendable are accepted."""
        async with httpx.AsyncClient(transport=lnurl_transport) as client:
            invoice = await InvoiceRequester(client).request(metadata, amount)

        assert invoice == INVOICE

    @pytest.mark.asyncio
    async def test_below_minimum(self, lnurl_transport, metadata):
        """Test an amount below minSendable fails before any request."""
        metadata = replace(metadata, min_sendable_msat=2000)

        async with httpx.AsyncClient(transport=lnurl_transport) as client:
            with pytest.raises(AmountOutOfRangeError) as exc_info:
                await InvoiceRequester(client).request(metadata, 1)

        error = exc_info.value
        assert (error.min_msat, error.max_msat, error.requested_msat) == (2000, 5000, 1000)
        assert "2-5 sats" in str(error)
        assert lnurl_transport.requests == []

    @pytest.mark.asyncio
    async def test_above_maximum(self, lnurl_transport, metadata):
        """Test an amount above maxSendable fails before any request."""
        async with httpx.AsyncClient(transport=lnurl_transport) as client:
            with pytest.raises(AmountOutOfRangeError) as exc_info:
                await InvoiceRequester(client).request(metadata, 6)

        assert exc_info.value.requested_msat == 6000
        assert lnurl_transport.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [0, -3, INT64_MAX])
    async def test_invalid_amount_makes_no_request(self, lnurl_transport, metadata, amount):
        """Test invalid amounts fail before any request."""
        async with httpx.AsyncClient(transport=lnurl_transport) as client:
            with pytest.raises(InvalidAmountError):
                await InvoiceRequester(client).request(metadata, amount)

        assert lnurl_transport.requests == []

    @pytest.mark.asyncio
    async def test_remote_error_reason_verbatim(self, make_transport, metadata):
        """Test a status ERROR reason is passed through unchanged."""
        transport = make_transport(
            callback_response={"status": "ERROR", "reason": "Amount too small, 10 sats min"}
        )

        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(RemoteRejectedError) as exc_info:
                await InvoiceRequester(client).request(metadata, 3)

        assert exc_info.value.reason == "Amount too small, 10 sats min"

    @pytest.mark.asyncio
    async def test_error_status_wins_over_invoice(self, make_transport, metadata):
        """Test status ERROR is honoured even when 'pr' is present."""
        transport = make_transport(
            callback_response={"status": "ERROR", "reason": "nope", "pr": INVOICE}
        )

        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(RemoteRejectedError):
                await InvoiceRequester(client).request(metadata, 3)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"pr": ""}, {"pr": None}, {"status": "OK"}])
    async def test_missing_invoice(self, make_transport, metadata, body):
        """Test a response without a usable 'pr' is an empty invoice."""
        transport = make_transport(callback_response=body)

        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(EmptyInvoiceError):
                await InvoiceRequester(client).request(metadata, 3)

    @pytest.mark.asyncio
    async def test_malformed_callback_json(self, make_transport, metadata):
        """Test a non-JSON callback body is an empty invoice."""
        transport = make_transport(callback_response="oops")

        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(EmptyInvoiceError, match="malformed JSON"):
                await InvoiceRequester(client).request(metadata, 3)

    @pytest.mark.asyncio
    async def test_invoice_not_validated(self, make_transport, metadata):
        """Test the returned invoice is not checked for BOLT11 structure."""
        transport = make_transport(callback_response={"pr": "definitely-not-bolt11"})

        async with httpx.AsyncClient(transport=transport) as client:
            invoice = await InvoiceRequester(client).request(metadata, 3)

        assert invoice == "definitely-not-bolt11"

    @pytest.mark.asyncio
    async def test_callback_non_2xx(self, make_transport, metadata):
        """Test a 500 from the callback is reported with its status code."""
        transport = make_transport(callback_status=500, callback_response={"error": "boom"})

        async with httpx.AsyncClient(transport=transport) as client:
            with pytest.raises(UnreachableCallbackError) as exc_info:
                await InvoiceRequester(client).request(metadata, 3)

        assert exc_info.value.status_code == 500
        assert len(transport.callback_requests) == 1

    @pytest.mark.asyncio
    async def test_callback_timeout(self, timeout_transport, metadata):
        """Test a callback timeout is reported once and never retried."""
        async with httpx.AsyncClient(transport=timeout_transport) as client:
            with pytest.raises(UnreachableCallbackError) as exc_info:
                await InvoiceRequester(client).request(metadata, 3)

        assert exc_info.value.cause == "timeout"
        assert timeout_transport.request_count == 1


class TestComments:
    """Tests for LUD-12 payer comments."""

    @pytest.mark.asyncio
    async def test_comment_sent_when_allowed(self, lnurl_transport, metadata):
        """Test a comment is forwarded when the recipient accepts one."""
        async with httpx.AsyncClient(transport=lnurl_transport) as client:
            await InvoiceRequester(client).request(metadata, 3, comment="thanks")

        assert lnurl_transport.callback_requests[0].url.params["comment"] == "thanks"

    @pytest.mark.asyncio
    async def test_comment_truncated_to_allowed_length(self, lnurl_transport, metadata):
        """Test a long comment is cut to commentAllowed characters."""
        async with httpx.AsyncClient(transport=lnurl_transport) as client:
            await InvoiceRequester(client).request(metadata, 3, comment="x" * 50)

        assert lnurl_transport.callback_requests[0].url.params["comment"] == "x" * 10

    @pytest.mark.asyncio
    async def test_comment_dropped_when_not_allowed(self, lnurl_transport, metadata):
        """Test a comment is dropped when the recipient accepts none."""
        metadata = replace(metadata, comment_allowed=0)

        async with httpx.AsyncClient(transport=lnurl_transport) as client:
            await InvoiceRequester(client).request(metadata, 3, comment="thanks")

        assert "comment" not in lnurl_transport.callback_requests[0].url.params

    @pytest.mark.asyncio
    async def test_non_string_comment_coerced(self, lnurl_transport, metadata):
        """Test a numeric comment is sent as text instead of failing."""
        async with httpx.AsyncClient(transport=lnurl_transport) as client:
            await InvoiceRequester(client).request(metadata, 3, comment=12345678901234)  # type: ignore[arg-type]

        assert lnurl_transport.callback_requests[0].url.params["comment"] == "1234567890"
