"""Static to dynamic QRIS payload transforms."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

from .crc import verify_crc
from .tlv import ADDITIONAL_DATA_TAG, Composite, EmvTree, Leaf, build_emv, lookup, parse_emv

POINT_OF_INITIATION_TAG = "01"
AMOUNT_TAG = "54"
REFERENCE_SUBTAG = "01"

STATIC_QR = "11"
DYNAMIC_QR = "12"

Amount = Union[int, float, Decimal]


@dataclass(frozen=True)
class EncodedPayload:
    payload: str
    crc: str


@dataclass(frozen=True)
class PayloadSummary:
    point_of_initiation: str | None
    merchant_name: str | None
    merchant_city: str | None
    currency: str | None
    amount: str | None
    reference: str | None
    crc_valid: bool

    @property
    def is_dynamic(self) -> bool:
        return self.point_of_initiation == DYNAMIC_QR


def format_amount(amount: Amount) -> str:
    """Format with two decimals, dropping a literal ``.00`` suffix (10 -> "10", 10.5 -> "10.50")."""

    # Decimal(float) is exact, so only true binary ties round up
    text = f"{Decimal(amount).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP):f}"
    if text.endswith(".00"):
        return text[:-3]
    return text


def _additional_data(tree: EmvTree) -> Composite:
    node = tree.get(ADDITIONAL_DATA_TAG)
    if not isinstance(node, Composite):
        node = Composite()
        tree[ADDITIONAL_DATA_TAG] = node
    return node


def make_dynamic(base_payload: str, amount: Amount, reference: str | None = None) -> str:
    """Turn a static merchant payload into a dynamic one carrying ``amount``.

    The source payload is parsed leniently, so garbage input still yields a
    well-formed (if meaningless) payload rather than an error.
    """

    tree = parse_emv(base_payload)
    tree[POINT_OF_INITIATION_TAG] = Leaf(DYNAMIC_QR)
    tree[AMOUNT_TAG] = Leaf(format_amount(amount))
    if reference:
        _additional_data(tree).children[REFERENCE_SUBTAG] = Leaf(reference)
    return build_emv(tree)


def encode_dynamic(base_payload: str, amount: Amount, reference: str | None = None) -> EncodedPayload:
    payload = make_dynamic(base_payload, amount, reference)
    return EncodedPayload(payload=payload, crc=payload[-4:])


def make_static(payload: str) -> str:
    """Reverse of :func:`make_dynamic`: mark the payload static and drop the amount."""

    tree = parse_emv(payload)
    tree[POINT_OF_INITIATION_TAG] = Leaf(STATIC_QR)
    tree.pop(AMOUNT_TAG, None)
    return build_emv(tree)


def describe_payload(payload: str) -> PayloadSummary:
    tree = parse_emv(payload)
    return PayloadSummary(
        point_of_initiation=lookup(tree, POINT_OF_INITIATION_TAG),
        merchant_name=lookup(tree, "59"),
        merchant_city=lookup(tree, "60"),
        currency=lookup(tree, "53"),
        amount=lookup(tree, AMOUNT_TAG),
        reference=lookup(tree, ADDITIONAL_DATA_TAG, REFERENCE_SUBTAG),
        crc_valid=verify_crc(payload),
    )
