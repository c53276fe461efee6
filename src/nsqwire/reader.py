import enum
import logging

from typing import List

from nsqwire import config
from nsqwire.errors import FrameError
from nsqwire.frame import SIZE_FIELD_SIZE, Frame, FrameType, decode_frame


logger = logging.getLogger(__name__)


class ReaderStates(enum.Enum):
    READING = 0
    FAILED = 1


class FrameReader(object):
    """
    Accumulates bytes received from the daemon and extracts complete frames.

    The reader does no I/O. A transport passes it whatever it reads from the
    connection and gets back the frames that are now complete. Any trailing
    partial frame stays buffered until the next call.

    .. code-block:: python

        reader = FrameReader()
        for frame in reader.feed(sock.recv(4096)):
            if frame.is_heartbeat:
                sock.sendall(commands.no_op().data)

    Frames returned by the reader own their data, the buffer they were decoded
    from is reused.

    A reader is bound to a single connection and is not thread safe.
    """

    def __init__(self, max_frame_size: int = None):
        """
        :param max_frame_size: The largest frame size that will be accepted.
          Defaults to :func:`nsqwire.config.max_frame_size`.

        Raises:
            ValueError: If the limit, or the environment setting it falls
              back to, is not a valid frame size.
        """
        self._max_frame_size = config.max_frame_size(max_frame_size)
        self._buffer = bytearray()
        self._needed = SIZE_FIELD_SIZE
        self._state = ReaderStates.READING

    @property
    def buffered(self) -> int:
        """ Return the number of bytes held that are not yet part of a frame """
        return len(self._buffer)

    @property
    def needed(self) -> int:
        """ Return the number of bytes required before the next frame completes """
        return self._needed

    @property
    def failed(self) -> bool:
        return self._state == ReaderStates.FAILED

    def reset(self):
        """ Discard buffered data and clear any failure """
        self._buffer = bytearray()
        self._needed = SIZE_FIELD_SIZE
        self._state = ReaderStates.READING

    def feed(self, data) -> List[Frame]:
        """ Process some bytes received from the transport.

        Upon receiving some bytes they are added to the buffer and then every
        complete frame in the buffer is extracted.

        This method supports the worst case scenario of receiving a single
        byte at a time, however, a more likely scenario is receiving one or
        more frames at once.

        :param data: a bytes-like object, or an iterable of ints.

        :returns: A list of the frames completed by this data. The list is
          empty when more bytes are needed.

        Raises:
            FrameError: If the stream holds a frame that can not be decoded.
              The buffer is discarded and the reader refuses further data
              until :meth:`reset` is called.
        """
        if self._state == ReaderStates.FAILED:
            raise FrameError("Reader has failed, reset it before feeding more data")

        received = len(self._buffer)
        self._buffer.extend(data)
        received = len(self._buffer) - received

        # Not enough bytes to complete the pending frame yet.
        if received < self._needed:
            self._needed -= received
            return []

        frames = []
        offset = 0
        with memoryview(self._buffer) as view:
            while True:
                frame = decode_frame(view[offset:], self._max_frame_size)

                if frame.kind == FrameType.PARTIAL:
                    self._needed = frame.size_hint
                    break

                if frame.kind == FrameType.INVALID:
                    logger.error(
                        f"Invalid frame in stream at offset {offset}, "
                        f"discarding {len(self._buffer)} buffered bytes."
                    )
                    self._state = ReaderStates.FAILED
                    break

                logger.debug(
                    f"Decoded {frame.kind.name} frame of {frame.size_hint} bytes"
                )
                frames.append(frame.detach())
                offset += frame.size_hint

        # The view must be released before the buffer can be resized.
        if self._state == ReaderStates.FAILED:
            self._buffer = bytearray()
            self._needed = SIZE_FIELD_SIZE
            raise FrameError("Invalid frame received", frame=frame)

        del self._buffer[:offset]

        return frames
