"""
Predicates shared by the command builders.

None of these raise. They answer whether a value can be put on the wire and
leave it to the caller to decide what to do about it.
"""

import math
import numbers
import re


NAME_MAX_LENGTH = 64
MESSAGE_ID_LENGTH = 16

NAME_PATTERN = re.compile(r"[A-Za-z0-9_.-]+(?:#ephemeral)?")
MESSAGE_ID_PATTERN = re.compile(r"[0-9A-Fa-f]{16}")


def is_integer(value) -> bool:
    """ Return True if value is a finite number without a fractional part.

    Booleans are rejected even though ``bool`` subclasses ``int``; a flag is
    never an acceptable count.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    if isinstance(value, numbers.Integral):
        return True
    return math.isfinite(value) and value == math.floor(value)


def is_unsigned_integer(value) -> bool:
    """ Return True if value is an integer greater than or equal to zero """
    return is_integer(value) and value >= 0


def is_valid_name(name) -> bool:
    """ Return True if name is a valid topic or channel name.

    A name is 1 to 64 characters from ``[A-Za-z0-9_.-]``, optionally followed
    by a ``#ephemeral`` suffix (which counts towards the 64).
    """
    if not isinstance(name, str):
        return False
    if not 0 < len(name) <= NAME_MAX_LENGTH:
        return False
    return NAME_PATTERN.fullmatch(name) is not None


def is_valid_message_id(message_id) -> bool:
    """ Return True if message_id is 16 hexadecimal characters.

    Text and bytes-like values are both accepted, since a message id taken
    from a decoded frame is raw bytes.
    """
    if isinstance(message_id, (bytes, bytearray, memoryview)):
        try:
            message_id = bytes(message_id).decode("ascii")
        except UnicodeDecodeError:
            return False
    if not isinstance(message_id, str) or len(message_id) != MESSAGE_ID_LENGTH:
        return False
    return MESSAGE_ID_PATTERN.fullmatch(message_id) is not None
