"""EMV QR (EMVCo / QRIS) Tag-Length-Value tree codec.

A payload is a flat run of ``tag(2) + length(2 digits) + value`` fields.
Tag 62 and tags 26-51 carry nested fields of the same shape; every other
tag is an opaque string. Tag 63 holds the CRC and always comes last.
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from .crc import CRC_HEADER, checksum
from .services.errors import (
    err_bad_payload,
    err_field_too_long,
    err_invalid_tag,
    err_malformed_length,
    err_trailing_data,
    err_truncated_value,
    err_unsupported_character,
)

logger = logging.getLogger("qrisgen.tlv")

CRC_TAG = "63"
ADDITIONAL_DATA_TAG = "62"
MERCHANT_ACCOUNT_RANGE = (26, 51)
MAX_VALUE_LENGTH = 99

_TAG_RE = re.compile(r"[0-9A-Za-z]{2}")
_LENGTH_RE = re.compile(r"[0-9]{2}")


@dataclass(frozen=True, slots=True)
class Leaf:
    value: str


@dataclass(slots=True)
class Composite:
    children: EmvTree = field(default_factory=dict)


EmvNode = Union[Leaf, Composite]
EmvTree = dict[str, EmvNode]


@dataclass(frozen=True)
class TLVItem:
    tag: str
    value: str

    def serialize(self) -> str:
        length = f"{len(self.value):02d}"
        return f"{self.tag}{length}{self.value}"


def build_tlv(items: Iterable[TLVItem]) -> str:
    """Serialize iterable of TLV items into EMV string."""

    return "".join(item.serialize() for item in items)


def is_valid_tag(tag: object) -> bool:
    return isinstance(tag, str) and _TAG_RE.fullmatch(tag) is not None


def is_composite_tag(tag: str) -> bool:
    """Return True for tags whose value is a nested TLV sequence (62 and 26-51)."""

    if tag == ADDITIONAL_DATA_TAG:
        return True
    if tag.isascii() and tag.isdigit():
        low, high = MERCHANT_ACCOUNT_RANGE
        return low <= int(tag) <= high
    return False


def parse_emv(payload: str, *, strict: bool = False) -> EmvTree:
    """Parse an EMV QR payload into a tag tree.

    Lenient by default: parsing stops at the first field whose tag or length
    is malformed and returns what was read so far. With ``strict=True`` a
    malformed length, a truncated value or leftover characters raise an
    :class:`~qrisgen.services.errors.EmvCodecError` instead.
    """

    tree: EmvTree = {}
    idx = 0
    total = len(payload)
    while idx + 4 <= total and _TAG_RE.fullmatch(payload, idx, idx + 2):
        tag = payload[idx : idx + 2]
        raw_length = payload[idx + 2 : idx + 4]
        if not _LENGTH_RE.fullmatch(raw_length):
            if strict:
                raise err_malformed_length(tag, raw_length, idx + 2)
            logger.debug("non-numeric length, parsing stopped", extra={"tag": tag, "offset": idx + 2})
            return tree

        length = int(raw_length)
        value_start = idx + 4
        value_end = value_start + length
        if value_end > total and strict:
            raise err_truncated_value(tag, length, total - value_start)
        value = payload[value_start:value_end]

        if is_composite_tag(tag):
            tree[tag] = Composite(parse_emv(value, strict=strict))
        else:
            tree[tag] = Leaf(value)

        idx = value_end
        if tag == CRC_TAG:
            break

    if idx < total:
        if strict:
            raise err_trailing_data(idx, payload[idx:])
        logger.debug("trailing data ignored", extra={"offset": idx, "remaining": total - idx})
    return tree


def build_value(node: EmvNode, path: str = "") -> str:
    """Serialize a node's value without its own tag/length header."""

    if isinstance(node, Leaf):
        # lengths count characters, which only matches UTF-16 units inside the BMP
        if any(ord(ch) > 0xFFFF for ch in node.value):
            raise err_unsupported_character(path or "value")
        return node.value
    if isinstance(node, Composite):
        return build_tlv(_iter_items(node.children, path))
    raise TypeError(f"Unsupported EMV node {type(node).__name__}")


def build_emv(tree: EmvTree) -> str:
    """Serialize a tag tree into a full payload with a freshly computed Tag 63 CRC.

    Tags are emitted in ascending ordinal order at every level; any Tag 63
    present in ``tree`` is ignored.
    """

    fields = {tag: node for tag, node in tree.items() if tag != CRC_TAG}
    payload_no_crc = build_tlv(_iter_items(fields, ""))
    return f"{payload_no_crc}{CRC_HEADER}{checksum(payload_no_crc)}"


def _iter_items(tree: EmvTree, parent: str) -> Iterator[TLVItem]:
    for tag in tree:
        if not is_valid_tag(tag):
            raise err_invalid_tag(tag)
    for tag in sorted(tree):
        path = f"{parent}.{tag}" if parent else tag
        value = build_value(tree[tag], path)
        if len(value) > MAX_VALUE_LENGTH:
            raise err_field_too_long(path, len(value))
        yield TLVItem(tag=tag, value=value)


def lookup(tree: EmvTree, *path: str) -> str | None:
    """Return the leaf value at ``path`` (e.g. ``"62", "01"``), or None."""

    node: EmvNode = Composite(tree)
    for tag in path:
        if not isinstance(node, Composite) or tag not in node.children:
            return None
        node = node.children[tag]
    if isinstance(node, Leaf):
        return node.value
    return None


def tree_to_dict(tree: EmvTree) -> dict[str, Any]:
    """Convert a tag tree into plain nested dicts of strings (JSON friendly)."""

    plain: dict[str, Any] = {}
    for tag, node in tree.items():
        if isinstance(node, Leaf):
            plain[tag] = node.value
        elif isinstance(node, Composite):
            plain[tag] = tree_to_dict(node.children)
        else:
            raise TypeError(f"Unsupported EMV node {type(node).__name__}")
    return plain


def tree_from_dict(mapping: Mapping[str, Any], _parent: str = "") -> EmvTree:
    """Inverse of :func:`tree_to_dict`; strings become leaves, mappings composites."""

    tree: EmvTree = {}
    for tag, value in mapping.items():
        if not is_valid_tag(tag):
            raise err_invalid_tag(tag)
        path = f"{_parent}.{tag}" if _parent else tag
        if isinstance(value, str):
            tree[tag] = Leaf(value)
        elif isinstance(value, Mapping):
            tree[tag] = Composite(tree_from_dict(value, path))
        else:
            raise err_bad_payload(f"Value of tag {path} must be a string or an object")
    return tree
