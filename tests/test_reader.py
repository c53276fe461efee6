import logging
import struct
import unittest
import unittest.mock

from nsqwire.errors import FrameError
from nsqwire.frame import FrameType, decode_frame
from nsqwire.reader import FrameReader


def create_frame(frame_type: int, body: bytes) -> bytes:
    return struct.pack(">ii", len(body) + 4, frame_type) + body


def create_message_frame(body: bytes, message_id: bytes = b"0123456789abcdef"):
    header = struct.pack(">qH", 1, 1) + message_id
    return create_frame(FrameType.MESSAGE, header + body)


class FrameReaderTestCase(unittest.TestCase):
    def test_initial_state(self):
        reader = FrameReader()
        self.assertEqual(reader.buffered, 0)
        self.assertEqual(reader.needed, 4)
        self.assertFalse(reader.failed)
        self.assertEqual(reader.feed(b""), [])

    def test_frame_received_in_worst_case_delivery_scenario(self):
        reader = FrameReader()
        data = create_message_frame(b"Hello World")

        frames = []
        # Send the test frame 1 byte at a time
        for b in data:
            frames.extend(reader.feed([b]))

        self.assertEqual(len(frames), 1)
        self.assertEqual(frames[0].kind, FrameType.MESSAGE)
        self.assertEqual(frames[0].message.body, b"Hello World")
        self.assertEqual(reader.buffered, 0)
        self.assertEqual(reader.needed, 4)

    def test_multiple_frames_in_one_read(self):
        reader = FrameReader()
        data = (
            create_frame(FrameType.RESPONSE, b"OK")
            + create_frame(FrameType.RESPONSE, b"_heartbeat_")
            + create_message_frame(b"payload")
        )

        frames = reader.feed(data)
        self.assertEqual(
            [f.kind for f in frames],
            [FrameType.RESPONSE, FrameType.RESPONSE, FrameType.MESSAGE],
        )
        self.assertEqual(frames[0].payload, b"OK")
        self.assertTrue(frames[1].is_heartbeat)
        self.assertEqual(frames[2].message.body, b"payload")
        self.assertEqual(reader.buffered, 0)

    def test_trailing_partial_frame_is_kept(self):
        reader = FrameReader()
        first = create_frame(FrameType.RESPONSE, b"OK")
        second = create_frame(FrameType.ERROR, b"E_INVALID")

        frames = reader.feed(first + second[:6])
        self.assertEqual(len(frames), 1)
        self.assertEqual(reader.buffered, 6)
        self.assertEqual(reader.needed, len(second) - 6)

        frames = reader.feed(second[6:])
        self.assertEqual(len(frames), 1)
        self.assertEqual(frames[0].kind, FrameType.ERROR)
        self.assertEqual(frames[0].payload, b"E_INVALID")

    def test_returned_frames_own_their_data(self):
        reader = FrameReader()
        frames = reader.feed(create_frame(FrameType.RESPONSE, b"OK"))
        reader.feed(create_frame(FrameType.RESPONSE, b"XX"))
        self.assertIsInstance(frames[0].payload, bytes)
        self.assertEqual(frames[0].payload, b"OK")

    def test_invalid_frame_fails_the_reader(self):
        reader = FrameReader()
        data = create_frame(FrameType.RESPONSE, b"OK") + create_frame(42, b"junk")

        with self.assertLogs("nsqwire.reader", level=logging.ERROR) as log:
            with self.assertRaises(FrameError) as cm:
                reader.feed(data)
        self.assertIn("Invalid frame", log.output[0])
        self.assertEqual(cm.exception.frame.kind, FrameType.INVALID)
        self.assertTrue(reader.failed)
        self.assertEqual(reader.buffered, 0)

        with self.assertRaises(FrameError):
            reader.feed(create_frame(FrameType.RESPONSE, b"OK"))

        reader.reset()
        self.assertFalse(reader.failed)
        frames = reader.feed(create_frame(FrameType.RESPONSE, b"OK"))
        self.assertEqual(len(frames), 1)

    def test_oversized_frame_fails_the_reader(self):
        reader = FrameReader(max_frame_size=16)
        with self.assertLogs("nsqwire.reader", level=logging.ERROR):
            with self.assertRaises(FrameError):
                reader.feed(struct.pack(">i", 17))

    def test_large_frame_is_decoded_once_complete(self):
        reader = FrameReader()
        data = create_frame(FrameType.RESPONSE, b"x" * (1024 * 1024))

        frames = []
        with unittest.mock.patch(
            "nsqwire.reader.decode_frame", wraps=decode_frame
        ) as mock_decode:
            for start in range(0, len(data), 4096):
                frames.extend(reader.feed(data[start : start + 4096]))

        # Once to learn the frame size, once for the frame, once for the
        # empty remainder.
        self.assertEqual(mock_decode.call_count, 3)
        self.assertEqual(len(frames), 1)
        self.assertEqual(len(frames[0].payload), 1024 * 1024)
        self.assertEqual(reader.buffered, 0)

    def test_needed_counts_down_between_reads(self):
        reader = FrameReader()
        data = create_frame(FrameType.RESPONSE, b"Hello World")

        reader.feed(data[:2])
        self.assertEqual(reader.needed, 2)

        reader.feed(data[2:8])
        self.assertEqual(reader.needed, len(data) - 8)

        reader.feed(data[8:10])
        self.assertEqual(reader.needed, len(data) - 10)

        frames = reader.feed(data[10:])
        self.assertEqual(frames[0].payload, b"Hello World")
        self.assertEqual(reader.needed, 4)

    def test_invalid_limit_is_rejected_on_creation(self):
        with self.assertRaises(ValueError):
            FrameReader(max_frame_size=0)

        with unittest.mock.patch.dict("os.environ", {"NSQWIRE_MAX_FRAME_SIZE": "big"}):
            with self.assertRaises(ValueError):
                FrameReader()


if __name__ == "__main__":
    unittest.main()
