"""
Builders for the commands a client sends to the NSQ daemon.

Every builder validates its arguments before producing anything and returns
a :class:`Command`, which holds the bytes to write and the response keyword
the client should expect back (or ``None`` when the daemon does not reply).
Invalid arguments raise :class:`~nsqwire.errors.InvalidArgument`.

Commands are an ASCII line terminated by a newline. IDENTIFY, PUB, MPUB and
AUTH follow the line with a body prefixed by its size as a big-endian uint32.
"""

import logging

from collections import namedtuple
from typing import Any, Dict, Mapping, Optional, Sequence, Union

from nsqwire import config
from nsqwire.byteorder import encode_be32
from nsqwire.errors import InvalidArgument
from nsqwire.validators import (
    is_integer,
    is_unsigned_integer,
    is_valid_message_id,
    is_valid_name,
)


logger = logging.getLogger(__name__)


EXPECT_OK = "OK"
EXPECT_IDENTIFY_JSON = "IDENT_JSON"
EXPECT_CLOSE_WAIT = "CLOSE_WAIT"
EXPECT_AUTH_JSON = "AUTH_JSON"

NEWLINE = b"\n"

BytesLike = Union[bytes, bytearray, memoryview]


_command = namedtuple("Command", ("data", "expect"), defaults=(None,))


class Command(_command):
    """ An encoded command.

    Unpacks as ``data, expect = command``.
    """

    __slots__ = ()


def _is_bytes(value) -> bool:
    return isinstance(value, (bytes, bytearray, memoryview))


def _is_bool(value) -> bool:
    return isinstance(value, bool)


def _is_string(value) -> bool:
    return isinstance(value, str)


def _render_bool(value: bool) -> str:
    return "true" if value else "false"


def _render_integer(value) -> str:
    return str(int(value))


def _render_string(value: str) -> str:
    return value


# type name, type check, renderer
_BOOL = ("bool", _is_bool, _render_bool)
_INTEGER = ("integer", is_integer, _render_integer)
_STRING = ("string", _is_string, _render_string)


option = namedtuple("option", ("name", "kind", "default", "check"))


# The order of this table is the order of the keys in the IDENTIFY body.
# A callable default is resolved each time identify is called.
IDENTIFY_OPTIONS = (
    # an identifier used to disambiguate this client
    option("client_id", _BOOL, False, None),
    option("hostname", _STRING, config.hostname, None),
    # ask the daemon to reply with a JSON document of negotiated features
    option("feature_negotiation", _BOOL, False, None),
    # milliseconds between heartbeats, -1 disables
    option("heartbeat_interval", _INTEGER, 0, lambda v: v in (0, -1) or v >= 1000),
    # bytes the daemon buffers before writing to this client, -1 disables
    option("output_buffer_size", _INTEGER, 0, lambda v: v in (0, -1) or v >= 64),
    # milliseconds before buffered data is flushed, -1 disables
    option("output_buffer_timeout", _INTEGER, 0, lambda v: v in (0, -1) or v >= 1),
    option("tls_v1", _BOOL, False, None),
    option("snappy", _BOOL, False, None),
    option("deflate", _BOOL, False, None),
    option("deflate_level", _INTEGER, 1, lambda v: v >= 1),
    # percentage of messages delivered to this connection, 0 disables
    option("sample_rate", _INTEGER, 0, lambda v: 0 <= v <= 99),
    option("user_agent", _STRING, config.user_agent, None),
    # server side message timeout in milliseconds, 0 uses the daemon's
    option("msg_timeout", _INTEGER, 0, lambda v: v == 0 or v >= 1000),
)

IDENTIFY_OPTION_NAMES = frozenset(opt.name for opt in IDENTIFY_OPTIONS)


def _check_name(value, what: str) -> bytes:
    if not is_valid_name(value):
        raise InvalidArgument(f"invalid {what} name: {value!r}")
    return value.encode("ascii")


def _check_message_id(message_id) -> bytes:
    if not is_valid_message_id(message_id):
        raise InvalidArgument(
            f"message_id must be a 16 character hex string, got {message_id!r}"
        )
    if isinstance(message_id, str):
        return message_id.encode("ascii")
    return bytes(message_id)


def _check_unsigned(value, what: str) -> bytes:
    if not is_unsigned_integer(value):
        raise InvalidArgument(f"{what} must be an unsigned integer, got {value!r}")
    return str(int(value)).encode("ascii")


def _sized(body: BytesLike) -> bytes:
    body = bytes(body)
    return encode_be32(len(body)) + body


def identify(options: Optional[Mapping[str, Any]] = None, **kwargs) -> Command:
    """ Build an IDENTIFY command.

    IDENTIFY updates the client's metadata on the daemon and negotiates
    features. It is sent once, directly after the protocol magic.

    :param options: A mapping of option name to value. Any option that is
      missing (or ``None``) is sent with its default value. See
      ``IDENTIFY_OPTIONS`` for the supported names.

    Keywords:
      Options may also be passed as keyword arguments. These take precedence
      over the same names in ``options``.

    :returns: A Command that expects ``IDENT_JSON`` when feature negotiation
      was requested and ``OK`` otherwise.

    Raises:
        InvalidArgument: If an option has the wrong type or is out of range.
    """
    supplied = {}  # type: Dict[str, Any]
    if options is not None:
        if not isinstance(options, Mapping):
            raise InvalidArgument(
                f"identify options must be a mapping, got {type(options)}"
            )
        supplied.update(options)
    supplied.update(kwargs)

    unknown = set(supplied) - IDENTIFY_OPTION_NAMES
    if unknown:
        logger.debug(
            f"Ignoring unknown identify options: {sorted(map(repr, unknown))}"
        )

    fields = []
    values = {}
    for opt in IDENTIFY_OPTIONS:
        type_name, type_check, render = opt.kind
        value = supplied.get(opt.name)
        if value is None:
            value = opt.default() if callable(opt.default) else opt.default
        elif not type_check(value):
            raise InvalidArgument(f"identify.{opt.name} must be {type_name}")
        elif opt.check is not None and not opt.check(value):
            raise InvalidArgument(f"identify.{opt.name} invalid range of value")

        values[opt.name] = value
        fields.append(f"{opt.name}:{render(value)}")

    body = ("{" + ",".join(fields) + "}").encode("utf-8")
    data = b"IDENTIFY" + NEWLINE + _sized(body)
    expect = EXPECT_IDENTIFY_JSON if values["feature_negotiation"] else EXPECT_OK

    logger.debug(f"Encoded IDENTIFY command with {len(data)} bytes")
    return Command(data, expect)


def subscribe(topic: str, channel: str) -> Command:
    """ Build a SUB command to subscribe to a topic/channel """
    data = b"SUB %s %s\n" % (
        _check_name(topic, "topic"),
        _check_name(channel, "channel"),
    )
    return Command(data, EXPECT_OK)


def publish(topic: str, message: BytesLike) -> Command:
    """ Build a PUB command to publish a message to a topic.

    :param topic: The topic to publish to.

    :param message: A bytes object containing the message payload.
    """
    name = _check_name(topic, "topic")
    if not _is_bytes(message):
        raise InvalidArgument(f"message must be bytes, got {type(message)}")

    data = b"PUB " + name + NEWLINE + _sized(message)
    logger.debug(f"Encoded PUB command with {len(data)} bytes")
    return Command(data, EXPECT_OK)


def multi_publish(
    topic: str, *messages: Union[BytesLike, Sequence[BytesLike]]
) -> Command:
    """ Build an MPUB command to atomically publish several messages to a topic.

    The messages can be passed individually or as a single list or tuple::

        multi_publish("events", b"a", b"b")
        multi_publish("events", [b"a", b"b"])

    Raises:
        InvalidArgument: If the topic is invalid, no messages are supplied or
          a message is not bytes. The error names the index of the offending
          message.
    """
    name = _check_name(topic, "topic")

    if len(messages) == 1 and isinstance(messages[0], (list, tuple)):
        messages = tuple(messages[0])

    if not messages:
        raise InvalidArgument("multi_publish requires at least one message")

    parts = []
    for index, message in enumerate(messages):
        if not _is_bytes(message):
            raise InvalidArgument(
                f"message #{index} must be bytes, got {type(message)}"
            )
        parts.append(_sized(message))

    body = b"".join(parts)
    count = len(messages)
    data = (
        b"MPUB "
        + name
        + NEWLINE
        + encode_be32(4 * count + len(body))
        + encode_be32(count)
        + body
    )
    logger.debug(f"Encoded MPUB command with {count} messages in {len(data)} bytes")
    return Command(data, EXPECT_OK)


def ready(count: int) -> Command:
    """ Build a RDY command indicating the client can receive count messages """
    return Command(b"RDY " + _check_unsigned(count, "count") + NEWLINE)


def finish(message_id: Union[str, BytesLike]) -> Command:
    """ Build a FIN command marking a message as successfully processed """
    return Command(b"FIN " + _check_message_id(message_id) + NEWLINE)


def requeue(message_id: Union[str, BytesLike], timeout_ms: int = 0) -> Command:
    """ Build a REQ command to re-queue a message that failed to process.

    :param message_id: The id of the in-flight message.

    :param timeout_ms: How long the daemon should defer redelivery, in
      milliseconds. Zero requeues immediately.
    """
    data = b"REQ %s %s\n" % (
        _check_message_id(message_id),
        _check_unsigned(timeout_ms, "timeout_ms"),
    )
    return Command(data)


def touch(message_id: Union[str, BytesLike]) -> Command:
    """ Build a TOUCH command to reset the timeout of an in-flight message """
    return Command(b"TOUCH " + _check_message_id(message_id) + NEWLINE)


def close() -> Command:
    """ Build a CLS command to cleanly close the connection """
    return Command(b"CLS\n", EXPECT_CLOSE_WAIT)


def no_op() -> Command:
    return Command(b"NOP\n")


def auth(secret: BytesLike) -> Command:
    """ Build an AUTH command.

    :param secret: A bytes object holding the secret to authenticate with.

    :returns: A Command that expects ``AUTH_JSON``, a JSON document
      describing the identity and permissions granted.
    """
    if not _is_bytes(secret):
        raise InvalidArgument(f"secret must be bytes, got {type(secret)}")

    data = b"AUTH" + NEWLINE + _sized(secret)
    logger.debug(f"Encoded AUTH command with {len(data)} bytes")
    return Command(data, EXPECT_AUTH_JSON)
