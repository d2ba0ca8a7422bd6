"""
Tests for the frame publisher mailbox.
"""

import threading

from conftest import make_frame
from facetrack.publisher import FramePublisher


def test_take_empty():
    assert FramePublisher().take() is None


def test_latest_frame_wins():
    publisher = FramePublisher()
    first, second = make_frame(value=1), make_frame(value=2)

    publisher.publish(first)
    publisher.publish(second)

    assert publisher.take() is second
    assert publisher.take() is None
    assert publisher.dropped_count == 1


def test_publish_from_another_thread():
    publisher = FramePublisher()
    frame = make_frame()

    worker = threading.Thread(target=publisher.publish, args=(frame,))
    worker.start()
    worker.join()

    assert publisher.take() is frame
