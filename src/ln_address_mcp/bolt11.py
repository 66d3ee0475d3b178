"""Heuristic BOLT11 decoding.

Reads the human-readable part of a BOLT11 invoice to recover the network and
the amount in satoshis. No external Lightning libraries required.

BOLT11 format: ln{bc|tb|bcrt|...}{amount}{multiplier}1{data}

Only the prefix is read. The bech32 data section (payment hash, payee,
description, routing hints, expiry) is NOT decoded, and no checksum or
signature is verified.
"""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum

# Sanity floor: checksum and signature alone make real invoices much longer.
MIN_INVOICE_LENGTH = 100

_INT64_MAX = 2**63 - 1
_INT64_MAX_DIGITS = len(str(_INT64_MAX))

# bech32 data never contains "1", so the last one ends the human-readable part
_SEPARATOR = "1"


class NetworkTag(Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"
    REGTEST = "regtest"
    UNKNOWN = "unknown"


# Longest prefix first: "lnbcrt" also starts with "lnbc".
_NETWORK_PREFIXES: tuple[tuple[str, NetworkTag], ...] = (
    ("lnbcrt", NetworkTag.REGTEST),
    ("lnbc", NetworkTag.MAINNET),
    ("lntbs", NetworkTag.TESTNET),  # signet
    ("lntb", NetworkTag.TESTNET),
)


class AmountUnit(Enum):
    MILLI = "milli"
    MICRO = "micro"
    NANO = "nano"
    PICO = "pico"
    NONE = "none"


class AmountStatus(Enum):
    SPECIFIED = "specified"
    UNSPECIFIED = "unspecified"  # "any amount" invoice
    UNPARSEABLE = "unparseable"
    OVERFLOW = "overflow"


class DecodeErrorKind(Enum):
    EMPTY_INPUT = "empty_input"
    BAD_PREFIX = "bad_prefix"
    TOO_SHORT = "too_short"


# unit character -> (unit, multiplier, divisor) to satoshis
# m truncates: sub-satoshi remainders are dropped.
_UNIT_CONVERSIONS: dict[str, tuple[AmountUnit, int, int]] = {
    "m": (AmountUnit.MILLI, 1, 1000),
    "u": (AmountUnit.MICRO, 100, 1),
    "n": (AmountUnit.NANO, 100_000, 1),
    "p": (AmountUnit.PICO, 100_000_000, 1),
}


@dataclass(frozen=True)
class DecodedAmount:
    """Amount read from the human-readable part."""

    value_sats: int | None
    unit: AmountUnit = AmountUnit.NONE
    status: AmountStatus = AmountStatus.UNSPECIFIED

    @classmethod
    def unspecified(cls) -> DecodedAmount:
        return cls(value_sats=None)

    @classmethod
    def unparseable(cls, unit: AmountUnit = AmountUnit.NONE) -> DecodedAmount:
        return cls(value_sats=None, unit=unit, status=AmountStatus.UNPARSEABLE)

    @classmethod
    def overflow(cls, unit: AmountUnit = AmountUnit.NONE) -> DecodedAmount:
        return cls(value_sats=None, unit=unit, status=AmountStatus.OVERFLOW)

    def to_dict(self) -> dict:
        return {
            "valueSats": self.value_sats,
            "unit": self.unit.value,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class DecodedInvoice:
    """Network and amount recovered from an invoice prefix."""

    network: NetworkTag
    amount: DecodedAmount
    human_readable_part: str

    def to_dict(self) -> dict:
        return {
            "network": self.network.value,
            "amount": self.amount.to_dict(),
            "humanReadablePart": self.human_readable_part,
        }


@dataclass(frozen=True)
class DecodeResult:
    """Result of decode(): a DecodedInvoice or a DecodeErrorKind."""

    success: bool
    invoice: DecodedInvoice | None = None
    error: DecodeErrorKind | None = None
    error_message: str | None = None

    @classmethod
    def succeeded(cls, invoice: DecodedInvoice) -> DecodeResult:
        return cls(success=True, invoice=invoice)

    @classmethod
    def failed(cls, error: DecodeErrorKind, message: str) -> DecodeResult:
        return cls(success=False, error=error, error_message=message)

    def to_dict(self) -> dict:
        if self.success and self.invoice is not None:
            return {"success": True, **self.invoice.to_dict()}
        return {
            "success": False,
            "error": self.error_message,
            "kind": self.error.value if self.error else None,
        }


def detect_network(invoice: str) -> tuple[NetworkTag, str]:
    """Return the network tag and the matched prefix (case-insensitive)."""
    lowered = invoice.lower()
    for prefix, network in _NETWORK_PREFIXES:
        if lowered.startswith(prefix):
            return network, prefix
    return NetworkTag.UNKNOWN, "ln"


def parse_amount(section: str) -> DecodedAmount:
    """
    Parse the amount section of the human-readable part.

    Args:
        section: Text between the network prefix and the separator,
            e.g. "2500u" for "lnbc2500u1..."

    Returns:
        DecodedAmount. No leading digits means "any amount"; digits without a
        recognised unit are unparseable; values past int64 are overflow.
    """
    number_end = 0
    while number_end < len(section) and section[number_end] in string.digits:
        number_end += 1

    if number_end == 0:
        return DecodedAmount.unspecified()

    # A value needs a unit
    if number_end == len(section):
        return DecodedAmount.unparseable()

    conversion = _UNIT_CONVERSIONS.get(section[number_end])
    if conversion is None or number_end + 1 != len(section):
        return DecodedAmount.unparseable()

    unit, multiplier, divisor = conversion
    digits = section[:number_end].lstrip("0") or "0"
    if len(digits) > _INT64_MAX_DIGITS:
        return DecodedAmount.overflow(unit)

    value = int(digits)
    if value > _INT64_MAX or value > _INT64_MAX // multiplier:
        return DecodedAmount.overflow(unit)

    return DecodedAmount(
        value_sats=value * multiplier // divisor,
        unit=unit,
        status=AmountStatus.SPECIFIED,
    )


def decode(invoice: str) -> DecodeResult:
    """Decode network and amount from a BOLT11 invoice string.

    Pure function: the same input always yields the same result.

    Args:
        invoice: A BOLT11-encoded Lightning invoice (e.g., "lnbc10u1p...").

    Returns:
        DecodeResult. Fails only on empty input, a missing "ln" prefix or an
        input shorter than MIN_INVOICE_LENGTH. Amount problems are reported on
        the decoded amount while the network is still returned.
    """
    if not isinstance(invoice, str) or not invoice.strip():
        return DecodeResult.failed(DecodeErrorKind.EMPTY_INPUT, "Invoice is empty")

    text = invoice.strip().lower()
    if not text.startswith("ln"):
        return DecodeResult.failed(
            DecodeErrorKind.BAD_PREFIX, "Invoice must start with 'ln'"
        )

    if len(text) < MIN_INVOICE_LENGTH:
        return DecodeResult.failed(
            DecodeErrorKind.TOO_SHORT,
            f"Invoice is {len(text)} characters; expected at least {MIN_INVOICE_LENGTH}",
        )

    network, prefix = detect_network(text)

    separator = text.rfind(_SEPARATOR)
    hrp = text[:separator] if separator >= len(prefix) else text

    prefix_end = len(prefix)
    if network is NetworkTag.UNKNOWN:
        # Unknown currency codes are letters: skip them to reach the amount
        while prefix_end < len(hrp) and hrp[prefix_end] in string.ascii_lowercase:
            prefix_end += 1

    return DecodeResult.succeeded(
        DecodedInvoice(
            network=network,
            amount=parse_amount(hrp[prefix_end:]),
            human_readable_part=hrp,
        )
    )
