"""
The NSQ daemon delimits the data it sends to a client into frames. A frame
header consists of a size field and a frame type field. The size field holds
the number of bytes that follow it, which includes the frame type field.

.. code-block:: console

    +-------------------------------+----------------------+
    |             header            |  body                |
    +-------------------------------+----------------------+
    |  Size          |  Frame_Type  |  DATA ....           |
    |  int32         |  int32       |                      |
    +----------------+--------------+----------------------+

Response and error frames carry a textual payload in the body. The body of a
message frame starts with a fixed header describing the delivered message.

.. code-block:: console

    +--------------+------------+--------------+-----------------+
    |  Timestamp   |  Attempts  |  Message_Id  |  DATA ....      |
    |  int64 (ns)  |  uint16    |  16 bytes    |                 |
    +--------------+------------+--------------+-----------------+

The decoder looks at most at one frame per call and never raises for bad
input. The caller is told whether the buffer holds a complete frame, needs
more bytes, or is corrupt, and decides what to do with the connection.
"""

import enum
import logging

from collections import namedtuple
from typing import Optional

from nsqwire import config
from nsqwire.byteorder import decode_be16, decode_be32, decode_be64


logger = logging.getLogger(__name__)


SIZE_FIELD_SIZE = 4
FRAME_TYPE_SIZE = 4
FRAME_HEADER_SIZE = SIZE_FIELD_SIZE + FRAME_TYPE_SIZE

MESSAGE_ID_SIZE = 16
# frame type + timestamp + attempts + message id
MESSAGE_HEADER_SIZE = FRAME_TYPE_SIZE + 8 + 2 + MESSAGE_ID_SIZE

HEARTBEAT = b"_heartbeat_"


class FrameType(enum.IntEnum):
    INVALID = -2
    PARTIAL = -1
    RESPONSE = 0
    ERROR = 1
    MESSAGE = 2


_message = namedtuple("Message", ("timestamp_ns", "attempts", "message_id", "body"))


class Message(_message):
    """ A message delivered by the daemon in a message frame.

    ``message_id`` and ``body`` are views into the buffer the frame was
    decoded from unless the owning frame has been detached.
    """

    __slots__ = ()

    @property
    def id(self) -> Optional[str]:
        """ Return the message id as text, as expected by FIN, REQ and TOUCH.

        nsqd always sends ids as ASCII hex. None is returned for an id that
        is not ASCII, since no command could refer to it.
        """
        try:
            return bytes(self.message_id).decode("ascii")
        except UnicodeDecodeError:
            return None

    def detach(self) -> "Message":
        """ Return a copy of this message that owns its byte fields """
        return self._replace(message_id=bytes(self.message_id), body=bytes(self.body))


_frame = namedtuple(
    "Frame", ("kind", "size_hint", "payload", "message"), defaults=(None, None)
)


class Frame(_frame):
    """ The outcome of decoding the start of a buffer.

    When ``kind`` is PARTIAL ``size_hint`` is the number of extra bytes that
    are needed before another attempt can succeed. For every other kind it is
    the number of bytes the frame occupies at the start of the buffer, so the
    caller can advance past it.

    ``payload`` is set for RESPONSE and ERROR frames and ``message`` is set
    for MESSAGE frames. Both reference the caller's buffer rather than copying
    it. The buffer must not be modified while they are in use; call
    :meth:`detach` to obtain a frame that is safe to keep.
    """

    __slots__ = ()

    @property
    def is_heartbeat(self) -> bool:
        """ Return True if this is a heartbeat the client must answer with NOP """
        return self.kind == FrameType.RESPONSE and self.payload == HEARTBEAT

    def detach(self) -> "Frame":
        """ Return a copy of this frame that does not reference the input buffer """
        if self.payload is not None:
            return self._replace(payload=bytes(self.payload))
        if self.message is not None:
            return self._replace(message=self.message.detach())
        return self


def decode_frame(data, max_frame_size: int = None) -> Frame:
    """ Decode the first frame in a buffer.

    :param data: A bytes-like object holding data received from the daemon.
      It may contain less than a frame, exactly one frame or several frames.
      Only the first is decoded.

    :param max_frame_size: The largest size field value that will be
      accepted. A frame that declares more is reported as INVALID instead of
      waiting for data that should never arrive. Defaults to
      :func:`nsqwire.config.max_frame_size`.

    :returns: A :class:`Frame`. Its ``kind`` is PARTIAL when more bytes are
      needed and INVALID when the buffer can not hold a valid frame.

    Raises:
        ValueError: If ``max_frame_size``, or the ``NSQWIRE_MAX_FRAME_SIZE``
          setting used in its place, is not a valid limit. This reports a
          configuration error, never a problem with ``data``.
    """
    limit = config.max_frame_size(max_frame_size)
    view = memoryview(data).cast("B")
    length = len(view)

    if length < SIZE_FIELD_SIZE:
        return Frame(FrameType.PARTIAL, SIZE_FIELD_SIZE - length)

    payload_length = decode_be32(view)

    if payload_length < FRAME_TYPE_SIZE:
        logger.debug(f"Frame size ({payload_length}) is too small for a frame type")
        return Frame(FrameType.INVALID, SIZE_FIELD_SIZE + max(payload_length, 0))

    if payload_length > limit:
        logger.debug(
            f"Frame size ({payload_length}) exceeds maximum frame size ({limit})"
        )
        return Frame(FrameType.INVALID, SIZE_FIELD_SIZE + payload_length)

    available = length - SIZE_FIELD_SIZE
    if available < payload_length:
        return Frame(FrameType.PARTIAL, payload_length - available)

    end = SIZE_FIELD_SIZE + payload_length
    frame_type = decode_be32(view, SIZE_FIELD_SIZE)

    if frame_type in (FrameType.RESPONSE, FrameType.ERROR):
        return Frame(FrameType(frame_type), end, payload=view[FRAME_HEADER_SIZE:end])

    if frame_type == FrameType.MESSAGE:
        if payload_length < MESSAGE_HEADER_SIZE:
            logger.debug(
                f"Message frame size ({payload_length}) is smaller than a "
                f"message header ({MESSAGE_HEADER_SIZE})"
            )
            return Frame(FrameType.INVALID, end)

        body_start = SIZE_FIELD_SIZE + MESSAGE_HEADER_SIZE
        message = Message(
            timestamp_ns=decode_be64(view, 8),
            attempts=decode_be16(view, 16),
            message_id=view[18:body_start],
            body=view[body_start:end],
        )
        return Frame(FrameType.MESSAGE, end, message=message)

    logger.debug(f"Unknown frame type {frame_type}")
    return Frame(FrameType.INVALID, end)
