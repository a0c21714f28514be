import pytest

from rntpsim.tlv import (
    FieldLocation,
    LpType,
    TagId,
    TlvError,
    decode_block,
    decode_var_number,
    encode_block,
    encode_var_number,
    field_for_type,
    is_header_field,
    parse_blocks,
)

DECLARED_FIELD_TYPES = [
    LpType.FRAGMENT,
    LpType.SEQUENCE,
    LpType.FRAG_INDEX,
    LpType.FRAG_COUNT,
    LpType.PIT_TOKEN,
    LpType.NACK,
    LpType.NEXT_HOP_FACE_ID,
    LpType.INCOMING_FACE_ID,
    LpType.CACHE_POLICY,
    LpType.CONGESTION_MARK,
    LpType.ACK,
    LpType.TX_SEQUENCE,
    LpType.NON_DISCOVERY,
    LpType.PREFIX_ANNOUNCEMENT,
    LpType.HOP_COUNT_TAG,
    LpType.GEO_TAG,
    LpType.LLTC_PATH_ID,
    LpType.LLTC_TRANSIENT,
    LpType.LLTC_CONSUMER_ID,
    LpType.LLTC_SNR,
]


@pytest.mark.parametrize(
    "value", [0, 1, 252, 253, 0xFFFF, 0x10000, 0xFFFFFFFF, 0x100000000, 2**64 - 1]
)
def test_var_number_round_trip(value):
    encoded = encode_var_number(value)
    decoded, end = decode_var_number(encoded)
    assert decoded == value
    assert end == len(encoded)


def test_var_number_three_octet_form():
    assert encode_var_number(253) == b"\xfd\x00\xfd"


def test_var_number_grows_with_value():
    sizes = [len(encode_var_number(v)) for v in (252, 253, 0x10000, 0x100000000)]
    assert sizes == sorted(sizes)
    assert len(set(sizes)) == 4


def test_var_number_rejects_negative():
    with pytest.raises(TlvError):
        encode_var_number(-1)


def test_var_number_rejects_too_large():
    with pytest.raises(TlvError):
        encode_var_number(2**64)


def test_decode_var_number_truncated():
    encoded = encode_var_number(0x10000)
    with pytest.raises(TlvError):
        decode_var_number(encoded[:-1])


def test_decode_var_number_empty():
    with pytest.raises(TlvError):
        decode_var_number(b"")


def test_decode_var_number_at_offset():
    buf = b"\x07" + encode_var_number(LpType.LLTC_SNR)
    value, end = decode_var_number(buf, 1)
    assert value == LpType.LLTC_SNR
    assert end == len(buf)


def test_encode_block_fragment_bytes():
    assert encode_block(LpType.FRAGMENT, b"ab") == b"\x50\x02ab"


def test_block_round_trip_at_offset():
    prefix = b"junk"
    block = encode_block(LpType.LLTC_CONSUMER_ID, b"hello")
    tlv_type, value, end = decode_block(prefix + block, len(prefix))
    assert tlv_type == LpType.LLTC_CONSUMER_ID
    assert value == b"hello"
    assert end == len(prefix) + len(block)


def test_decode_block_length_overflow():
    block = encode_block(LpType.NACK, b"payload")
    with pytest.raises(TlvError):
        decode_block(block[:-2])


def test_parse_blocks_splits_sequence():
    items = [(LpType.SEQUENCE, b"\x01"), (LpType.NACK, b""), (LpType.LLTC_SNR, b"xyz")]
    buf = b"".join(encode_block(t, v) for t, v in items)
    assert parse_blocks(buf) == [(int(t), v) for t, v in items]


def test_parse_blocks_empty():
    assert parse_blocks(b"") == []


def test_parse_blocks_truncated():
    buf = encode_block(LpType.SEQUENCE, b"abc") + encode_block(LpType.ACK, b"def")
    with pytest.raises(TlvError):
        parse_blocks(buf[:-1])


@pytest.mark.parametrize(
    "tlv_type, expected",
    [
        (HEADER := 81, True),
        (99, True),
        (800, True),
        (959, True),
        (80, False),
        (100, False),
        (799, False),
        (960, False),
    ],
)
def test_is_header_field_ranges(tlv_type, expected):
    assert is_header_field(tlv_type) is expected


@pytest.mark.parametrize("tlv_type", DECLARED_FIELD_TYPES)
def test_declared_fields_sit_where_their_type_says(tlv_type):
    field = field_for_type(tlv_type)
    assert field.tlv_type == tlv_type
    if field.location is FieldLocation.HEADER:
        assert is_header_field(tlv_type)
    else:
        assert not is_header_field(tlv_type)


def test_fragment_field_location():
    assert field_for_type(LpType.FRAGMENT).location is FieldLocation.FRAGMENT


def test_only_ack_is_repeatable():
    repeatable = [t for t in DECLARED_FIELD_TYPES if field_for_type(t).repeatable]
    assert repeatable == [LpType.ACK]


@pytest.mark.parametrize(
    "tlv_type, tag",
    [
        (LpType.LLTC_PATH_ID, TagId.LLTC_PATH_ID),
        (LpType.LLTC_TRANSIENT, TagId.LLTC_TRANSIENT),
        (LpType.LLTC_CONSUMER_ID, TagId.LLTC_CONSUMER_ID),
        (LpType.LLTC_SNR, TagId.LLTC_SNR),
        (LpType.CONGESTION_MARK, TagId.CONGESTION_MARK),
        (LpType.HOP_COUNT_TAG, TagId.HOP_COUNT),
    ],
)
def test_field_tags(tlv_type, tag):
    assert field_for_type(tlv_type).tag is tag


def test_field_for_unknown_type():
    with pytest.raises(KeyError):
        field_for_type(LpType.LP_PACKET)