""" This module contains the exceptions raised by nsqwire. """


class NsqWireError(Exception):
    """ Base class for all nsqwire errors """


class InvalidArgument(NsqWireError, ValueError):
    """
    Raised by a command builder when it is passed an argument it can not
    encode. No bytes are produced when this is raised.
    """


class FrameError(NsqWireError):
    """
    Raised by a :class:`~nsqwire.reader.FrameReader` when the stream it is
    reading contains a frame that can not be decoded.
    """

    def __init__(self, message: str, frame=None) -> None:
        super().__init__(message)
        self.frame = frame
