"""
Big-endian integer helpers used by the frame decoder and command encoder.

All NSQ wire integers are network byte order. The decode functions read from
an offset into any bytes-like object, so callers can pull fields straight out
of a larger receive buffer without slicing it first.
"""

import struct


BE16_FORMAT = ">H"
BE32_FORMAT = ">i"
BE64_FORMAT = ">q"
UBE32_FORMAT = ">I"

_be16 = struct.Struct(BE16_FORMAT)
_be32 = struct.Struct(BE32_FORMAT)
_be64 = struct.Struct(BE64_FORMAT)
_ube32 = struct.Struct(UBE32_FORMAT)


def encode_be16(n: int) -> bytes:
    """ Return an unsigned 16 bit integer as 2 big-endian bytes """
    return _be16.pack(n)


def encode_be32(n: int) -> bytes:
    """ Return an unsigned 32 bit integer as 4 big-endian bytes.

    This is the length prefix written in front of IDENTIFY, PUB, MPUB and
    AUTH bodies.
    """
    return _ube32.pack(n)


def encode_be64(n: int) -> bytes:
    """ Return a signed 64 bit integer as 8 big-endian bytes """
    return _be64.pack(n)


def decode_be16(data, offset: int = 0) -> int:
    """ Read an unsigned 16 bit integer from ``data`` at ``offset`` """
    return _be16.unpack_from(data, offset)[0]


def decode_be32(data, offset: int = 0) -> int:
    """ Read a signed 32 bit integer from ``data`` at ``offset`` """
    return _be32.unpack_from(data, offset)[0]


def decode_be64(data, offset: int = 0) -> int:
    """ Read a signed 64 bit integer from ``data`` at ``offset`` """
    return _be64.unpack_from(data, offset)[0]
