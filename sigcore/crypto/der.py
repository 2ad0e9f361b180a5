"""Minimal ASN.1 DER codec: INTEGER, SEQUENCE and BIT STRING.

Only the subset needed for RSA SubjectPublicKeyInfo construction and
ECDSA-Sig-Value conversion is implemented. Decoding works on byte slices
with explicit bounds checks and raises DecodingFailedError on any
malformed or truncated input.
"""

from sigcore.core.errors import DecodingFailedError

INTEGER_TAG = 0x02
BIT_STRING_TAG = 0x03
SEQUENCE_TAG = 0x30

# SEQUENCE { OID 1.2.840.113549.1.1.1 (rsaEncryption), NULL }
RSA_ALGORITHM_IDENTIFIER = bytes.fromhex("300d06092a864886f70d0101010500")

_MAX_LENGTH_OCTETS = 4


def encode_length(length: int) -> bytes:
    """Encode a DER length in short or long form."""
    if length < 0:
        raise ValueError("DER length must be non-negative")
    if length < 0x80:
        return bytes([length])
    octets = length.to_bytes((length.bit_length() + 7) // 8, byteorder="big")
    return bytes([0x80 | len(octets)]) + octets


def encode_sequence(payload: bytes, tag: int = SEQUENCE_TAG) -> bytes:
    """Wrap payload in a tag-length-value record (SEQUENCE by default)."""
    return bytes([tag]) + encode_length(len(payload)) + payload


def encode_integer(data: bytes) -> bytes:
    """Encode big-endian unsigned bytes as a DER INTEGER.

    Leading zero bytes in the input are kept as-is. A single 0x00 is
    prepended when the first byte has its high bit set so the value is
    not read back as negative.
    """
    if not data:
        raise DecodingFailedError("INTEGER content must not be empty.")
    if data[0] >= 0x80:
        data = b"\x00" + data
    return encode_sequence(data, tag=INTEGER_TAG)


def encode_bit_string(payload: bytes, unused_bits: int = 0) -> bytes:
    """Encode payload as a DER BIT STRING."""
    return encode_sequence(bytes([unused_bits]) + payload, tag=BIT_STRING_TAG)


def read_length(buf: bytes, offset: int) -> tuple[int, int]:
    """Read a DER length at offset; return (length, content_offset)."""
    if offset >= len(buf):
        raise DecodingFailedError("Truncated DER length.")
    first = buf[offset]
    if first < 0x80:
        return first, offset + 1

    count = first & 0x7F
    if count == 0 or count > _MAX_LENGTH_OCTETS:
        raise DecodingFailedError("Unsupported DER length encoding.")
    end = offset + 1 + count
    if end > len(buf):
        raise DecodingFailedError("Truncated DER length.")
    octets = buf[offset + 1 : end]
    length = int.from_bytes(octets, byteorder="big")
    if octets[0] == 0 or length < 0x80:
        raise DecodingFailedError("Non-minimal DER length encoding.")
    return length, end


def read_tlv(buf: bytes, offset: int, expected_tag: int) -> tuple[bytes, int]:
    """Read one TLV record with the expected tag; return (content, next_offset)."""
    if offset >= len(buf):
        raise DecodingFailedError("Truncated DER record.")
    if buf[offset] != expected_tag:
        raise DecodingFailedError(
            f"Expected DER tag 0x{expected_tag:02x}, found 0x{buf[offset]:02x}."
        )
    length, start = read_length(buf, offset + 1)
    end = start + length
    if end > len(buf):
        raise DecodingFailedError("Truncated DER record.")
    return buf[start:end], end


def decode_integer(der: bytes) -> bytes:
    """Decode a standalone DER INTEGER, removing only the sign pad."""
    content, end = read_tlv(der, 0, INTEGER_TAG)
    if end != len(der):
        raise DecodingFailedError("Trailing data after DER INTEGER.")
    return _strip_sign_pad(content)


def decode_sequence_of_two_integers(der: bytes, width: int = 32) -> tuple[bytes, bytes]:
    """Decode SEQUENCE { INTEGER, INTEGER } into two fixed-width values."""
    body, end = read_tlv(der, 0, SEQUENCE_TAG)
    if end != len(der):
        raise DecodingFailedError("Trailing data after DER SEQUENCE.")
    first, offset = read_tlv(body, 0, INTEGER_TAG)
    second, offset = read_tlv(body, offset, INTEGER_TAG)
    if offset != len(body):
        raise DecodingFailedError("Unexpected data inside DER SEQUENCE.")
    return _to_fixed_width(first, width), _to_fixed_width(second, width)


def _strip_sign_pad(content: bytes) -> bytes:
    if not content:
        raise DecodingFailedError("Empty DER INTEGER.")
    if len(content) > 1 and content[0] == 0x00 and content[1] >= 0x80:
        return content[1:]
    return content


def _to_fixed_width(content: bytes, width: int) -> bytes:
    if not content:
        raise DecodingFailedError("Empty DER INTEGER.")
    if content[0] >= 0x80:
        raise DecodingFailedError("Negative DER INTEGER.")
    if len(content) == width + 1 and content[0] == 0x00:
        content = content[1:]
    if len(content) > width:
        raise DecodingFailedError(f"DER INTEGER wider than {width} bytes.")
    return content.rjust(width, b"\x00")
