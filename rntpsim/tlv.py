"""Link-protocol TLV-TYPE numbers, field declarations and TLV block coding."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

HEADER1_MIN = 81
HEADER1_MAX = 99
HEADER3_MIN = 800
HEADER3_MAX = 959


class TlvError(ValueError):
    """Raised when a TLV element cannot be encoded or decoded."""


class LpType(IntEnum):
    """TLV-TYPE numbers of the link protocol."""

    LP_PACKET = 100
    FRAGMENT = 80
    SEQUENCE = 81
    FRAG_INDEX = 82
    FRAG_COUNT = 83
    HOP_COUNT_TAG = 84
    GEO_TAG = 85
    GEO_TAG_POS = 85
    PIT_TOKEN = 98
    NACK = 800
    NACK_REASON = 801
    NEXT_HOP_FACE_ID = 816
    INCOMING_FACE_ID = 817
    CACHE_POLICY = 820
    CACHE_POLICY_TYPE = 821
    CONGESTION_MARK = 832
    ACK = 836
    TX_SEQUENCE = 840
    NON_DISCOVERY = 844
    PREFIX_ANNOUNCEMENT = 848
    LLTC_PATH_ID = 849
    LLTC_TRANSIENT = 850
    LLTC_CONSUMER_ID = 851
    LLTC_SNR = 852


class TagId(IntEnum):
    """Identifiers of the packet tags that mirror link-protocol fields."""

    INCOMING_FACE_ID = 10
    NEXT_HOP_FACE_ID = 11
    CACHE_POLICY = 12
    CONGESTION_MARK = 13
    NON_DISCOVERY = 14
    PREFIX_ANNOUNCEMENT = 15
    HOP_COUNT = 0x60000000
    LLTC_PATH_ID = 0x60000001
    LLTC_TRANSIENT = 0x60000002
    LLTC_CONSUMER_ID = 0x60000003
    LLTC_SNR = 0x60000004


class FieldLocation(Enum):
    """Where a field sits inside an LpPacket."""

    HEADER = "header"
    FRAGMENT = "fragment"


@dataclass(frozen=True)
class FieldDecl:
    """Declaration of one link-protocol field."""

    name: str
    tlv_type: LpType
    value_kind: str
    location: FieldLocation = FieldLocation.HEADER
    repeatable: bool = False
    tag: Optional[TagId] = None


_FIELDS = (
    FieldDecl("Fragment", LpType.FRAGMENT, "bytes", FieldLocation.FRAGMENT),
    FieldDecl("Sequence", LpType.SEQUENCE, "sequence"),
    FieldDecl("FragIndex", LpType.FRAG_INDEX, "uint64"),
    FieldDecl("FragCount", LpType.FRAG_COUNT, "uint64"),
    FieldDecl("PitToken", LpType.PIT_TOKEN, "bytes"),
    FieldDecl("Nack", LpType.NACK, "nack-header"),
    FieldDecl("NextHopFaceId", LpType.NEXT_HOP_FACE_ID, "uint64", tag=TagId.NEXT_HOP_FACE_ID),
    FieldDecl("IncomingFaceId", LpType.INCOMING_FACE_ID, "uint64", tag=TagId.INCOMING_FACE_ID),
    FieldDecl("CachePolicy", LpType.CACHE_POLICY, "cache-policy", tag=TagId.CACHE_POLICY),
    FieldDecl("CongestionMark", LpType.CONGESTION_MARK, "uint64", tag=TagId.CONGESTION_MARK),
    FieldDecl("Ack", LpType.ACK, "sequence", repeatable=True),
    FieldDecl("TxSequence", LpType.TX_SEQUENCE, "sequence"),
    FieldDecl("NonDiscovery", LpType.NON_DISCOVERY, "empty", tag=TagId.NON_DISCOVERY),
    FieldDecl(
        "PrefixAnnouncement",
        LpType.PREFIX_ANNOUNCEMENT,
        "prefix-announcement",
        tag=TagId.PREFIX_ANNOUNCEMENT,
    ),
    FieldDecl("HopCountTag", LpType.HOP_COUNT_TAG, "uint16", tag=TagId.HOP_COUNT),
    FieldDecl("GeoTag", LpType.GEO_TAG, "geo-tag"),
    FieldDecl("LltcPathId", LpType.LLTC_PATH_ID, "uint64", tag=TagId.LLTC_PATH_ID),
    FieldDecl("LltcTransient", LpType.LLTC_TRANSIENT, "uint64", tag=TagId.LLTC_TRANSIENT),
    FieldDecl("LltcConsumerId", LpType.LLTC_CONSUMER_ID, "uint64", tag=TagId.LLTC_CONSUMER_ID),
    FieldDecl("LltcSnr", LpType.LLTC_SNR, "snr-rssi", tag=TagId.LLTC_SNR),
)

_FIELDS_BY_TYPE = {field.tlv_type: field for field in _FIELDS}

_VAR_FORMS = (
    (0xFD, 0xFFFF, ">H"),
    (0xFE, 0xFFFFFFFF, ">I"),
    (0xFF, 0xFFFFFFFFFFFFFFFF, ">Q"),
)
_VAR_FORM_BY_MARKER = {marker: fmt for marker, _, fmt in _VAR_FORMS}


def is_header_field(tlv_type: int) -> bool:
    """Tell whether a TLV-TYPE lies in one of the header field ranges."""
    return HEADER1_MIN <= tlv_type <= HEADER1_MAX or HEADER3_MIN <= tlv_type <= HEADER3_MAX


def field_for_type(tlv_type: int) -> FieldDecl:
    """Return the field declared for a TLV-TYPE; raise KeyError if none is."""
    try:
        return _FIELDS_BY_TYPE[tlv_type]
    except KeyError:
        raise KeyError(f"no link-protocol field has TLV-TYPE {tlv_type}") from None


def encode_var_number(value: int) -> bytes:
    """Encode a non-negative integer as a TLV variable-length number."""
    if value < 0:
        raise TlvError(f"cannot encode negative number {value}")
    if value < 0xFD:
        return bytes([value])
    for marker, limit, fmt in _VAR_FORMS:
        if value <= limit:
            return bytes([marker]) + struct.pack(fmt, value)
    raise TlvError(f"number {value} does not fit in 64 bits")


def decode_var_number(buf: bytes, offset: int = 0) -> tuple[int, int]:
    """Decode a variable-length number; return it with the offset after it."""
    if offset >= len(buf):
        raise TlvError("buffer ends before a variable-length number")
    first = buf[offset]
    if first < 0xFD:
        return first, offset + 1
    fmt = _VAR_FORM_BY_MARKER[first]
    size = struct.calcsize(fmt)
    end = offset + 1 + size
    if end > len(buf):
        raise TlvError("buffer ends inside a variable-length number")
    (value,) = struct.unpack(fmt, bytes(buf[offset + 1 : end]))
    return value, end


def encode_block(tlv_type: int, value: bytes = b"") -> bytes:
    """Encode one TLV element from its type and value."""
    payload = bytes(value)
    return encode_var_number(tlv_type) + encode_var_number(len(payload)) + payload


def decode_block(buf: bytes, offset: int = 0) -> tuple[int, bytes, int]:
    """Decode one TLV element; return its type, value and the offset after it."""
    tlv_type, offset = decode_var_number(buf, offset)
    length, offset = decode_var_number(buf, offset)
    end = offset + length
    if end > len(buf):
        raise TlvError(
            f"TLV-LENGTH {length} exceeds the {len(buf) - offset} octets that remain"
        )
    return tlv_type, bytes(buf[offset:end]), end


def parse_blocks(buf: bytes) -> list[tuple[int, bytes]]:
    """Split a buffer into consecutive TLV elements as (type, value) pairs."""
    blocks = []
    offset = 0
    while offset < len(buf):
        tlv_type, value, offset = decode_block(buf, offset)
        blocks.append((tlv_type, value))
    return blocks