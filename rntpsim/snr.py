"""Signal quality tags: the radio-side SNR tag and its link-protocol form."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import ClassVar

from rntpsim.tlv import LpType, TagId, TlvError, decode_block, encode_block, parse_blocks

_RAW_PAIR = struct.Struct("<dd")
_WIRE_DOUBLE = struct.Struct(">d")


@dataclass
class SnrTag:
    """SNR and RSSI of the last packet received on a radio."""

    snr: float = 0.0
    rssi: float = 0.0

    SERIALIZED_SIZE: ClassVar[int] = _RAW_PAIR.size

    def serialize(self) -> bytes:
        """Pack the SNR and RSSI as two raw doubles."""
        return _RAW_PAIR.pack(self.snr, self.rssi)

    @classmethod
    def deserialize(cls, data: bytes) -> "SnrTag":
        """Read a tag packed by serialize()."""
        if len(data) != cls.SERIALIZED_SIZE:
            raise TlvError(
                f"SNR tag needs {cls.SERIALIZED_SIZE} octets, got {len(data)}"
            )
        snr, rssi = _RAW_PAIR.unpack(bytes(data))
        return cls(snr, rssi)

    def __str__(self) -> str:
        return f"Snr={self.snr:g}, RSSI={self.rssi:g}"


def _read_double(value: bytes) -> float:
    if len(value) != _WIRE_DOUBLE.size:
        raise TlvError("Invalid length for double (must be 8)")
    return _WIRE_DOUBLE.unpack(value)[0]


@dataclass
class LltcSnrTag:
    """SNR and RSSI carried in an LltcSnr link-protocol header field."""

    snr: float = 0.0
    rssi: float = 0.0

    TYPE_ID: ClassVar[TagId] = TagId.LLTC_SNR

    def wire_encode(self) -> bytes:
        """Encode as an LltcSnr element holding the SNR and then the RSSI."""
        inner = b"".join(
            encode_block(LpType.LLTC_SNR, _WIRE_DOUBLE.pack(v)) for v in (self.snr, self.rssi)
        )
        return encode_block(LpType.LLTC_SNR, inner)

    @classmethod
    def wire_decode(cls, wire: bytes) -> "LltcSnrTag":
        """Decode an element produced by wire_encode()."""
        tlv_type, value, end = decode_block(wire)
        if tlv_type != LpType.LLTC_SNR:
            raise TlvError("expecting LltcSnrTag block")
        if end != len(wire):
            raise TlvError("trailing octets after LltcSnrTag block")
        elements = parse_blocks(value)
        if len(elements) < 2 or any(t != LpType.LLTC_SNR for t, _ in elements[:2]):
            raise TlvError("Unexpected input while decoding LltcSnrTag")
        return cls(_read_double(elements[0][1]), _read_double(elements[1][1]))