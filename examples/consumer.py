"""
Consume messages from an nsqd instance using asyncio streams.

This example owns the connection and uses nsqwire to build commands and to
extract frames from the data it reads.
"""
import asyncio
import logging

import nsqwire
from nsqwire import FrameType


PROTOCOL_MAGIC = b"  V2"


async def consume(host: str, port: int, topic: str, channel: str) -> None:
    reader, writer = await asyncio.open_connection(host, port)
    frames = nsqwire.FrameReader()

    writer.write(PROTOCOL_MAGIC)
    writer.write(nsqwire.identify(heartbeat_interval=30000).data)
    writer.write(nsqwire.subscribe(topic, channel).data)
    writer.write(nsqwire.ready(10).data)
    await writer.drain()

    try:
        while True:
            data = await reader.read(4096)
            if not data:
                print("Connection closed by nsqd")
                break

            for frame in frames.feed(data):
                if frame.is_heartbeat:
                    writer.write(nsqwire.no_op().data)
                elif frame.kind == FrameType.MESSAGE:
                    message = frame.message
                    print(
                        f"Received message {message.id} "
                        f"(attempt {message.attempts}): {message.body!r}"
                    )
                    writer.write(nsqwire.finish(message.id).data)
                elif frame.kind == FrameType.ERROR:
                    print(f"Error from nsqd: {frame.payload.decode()}")
                else:
                    print(f"Response from nsqd: {frame.payload.decode()}")
            await writer.drain()
    finally:
        writer.close()


if __name__ == "__main__":

    import argparse

    parser = argparse.ArgumentParser(description="NSQ Consumer Example")
    parser.add_argument(
        "--host",
        metavar="<host>",
        type=str,
        default="localhost",
        help="The host nsqd is running on",
    )
    parser.add_argument(
        "--port",
        metavar="<port>",
        type=int,
        default=4150,
        help="The TCP port nsqd is listening on",
    )
    parser.add_argument("--topic", type=str, default="test", help="Topic name")
    parser.add_argument(
        "--channel", type=str, default="example#ephemeral", help="Channel name"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["debug", "info", "error"],
        default="error",
        help="Logging level. Default is 'error'.",
    )

    args = parser.parse_args()

    logging.basicConfig(
        format="%(asctime)s.%(msecs)03.0f [%(levelname)s] [%(name)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        level=getattr(logging, args.log_level.upper()),
    )

    asyncio.run(consume(args.host, args.port, args.topic, args.channel))
