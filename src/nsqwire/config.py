"""
Library defaults that can be overridden from the environment.

Values are looked up each time they are needed so that a process can adjust
them (e.g. in tests) without reloading the module.
"""

import os

from nsqwire import __version__


DEFAULT_MAX_FRAME_SIZE = 16 * 1024 * 1024
DEFAULT_HOSTNAME = "localhost"
DEFAULT_USER_AGENT = f"nsqwire/{__version__}"

# A frame size field is a signed int32 so nothing larger can ever be valid.
MAX_FRAME_SIZE_LIMIT = 2 ** 31 - 1


def max_frame_size(value: int = None) -> int:
    """ Return the largest payload length the frame decoder will accept.

    :param value: An explicit limit. If not supplied the environment is
      inspected for ``NSQWIRE_MAX_FRAME_SIZE`` and then the default value
      of 16 MiB is used.

    Raises:
        ValueError: If the limit is not a positive integer or exceeds what a
          frame size field can represent.
    """
    if value is None:
        env_value = os.getenv("NSQWIRE_MAX_FRAME_SIZE")
        if env_value is None:
            return DEFAULT_MAX_FRAME_SIZE
        try:
            value = int(env_value)
        except ValueError:
            raise ValueError(
                f"NSQWIRE_MAX_FRAME_SIZE must be an integer, got {env_value!r}"
            ) from None

    if value < 1 or value > MAX_FRAME_SIZE_LIMIT:
        raise ValueError(
            f"max frame size must be in range 1..{MAX_FRAME_SIZE_LIMIT}, got {value}"
        )
    return value


def hostname() -> str:
    """ Return the default hostname sent in an IDENTIFY command """
    return os.getenv("NSQWIRE_HOSTNAME", DEFAULT_HOSTNAME)


def user_agent() -> str:
    """ Return the default user agent sent in an IDENTIFY command """
    return os.getenv("NSQWIRE_USER_AGENT", DEFAULT_USER_AGENT)
