__version__ = "0.1.0"

from nsqwire.commands import (
    Command,
    auth,
    close,
    finish,
    identify,
    multi_publish,
    no_op,
    publish,
    ready,
    requeue,
    subscribe,
    touch,
)
from nsqwire.errors import FrameError, InvalidArgument, NsqWireError
from nsqwire.frame import Frame, FrameType, Message, decode_frame
from nsqwire.reader import FrameReader
