"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all test modules.
"""

import socket
import threading

import numpy as np
import pytest

from src.grading.types import RasterImage

INK = (229, 231, 235, 255)


def make_raster(mask, color=INK):
    """Paint a boolean mask onto a transparent RGBA canvas."""
    mask = np.asarray(mask, dtype=bool)
    canvas = np.zeros(mask.shape + (4,), dtype=np.uint8)
    canvas[mask] = color
    return RasterImage.from_array(canvas)


def square_mask(canvas_size, x, y, side):
    mask = np.zeros((canvas_size, canvas_size), dtype=bool)
    mask[y : y + side, x : x + side] = True
    return mask


@pytest.fixture
def raster_factory():
    """Fixture returning the mask -> RasterImage helper."""
    return make_raster


@pytest.fixture
def blank_raster():
    """Fixture providing a fully transparent 100x100 raster."""
    return make_raster(np.zeros((100, 100), dtype=bool))


@pytest.fixture
def square_raster():
    """Fixture providing a 10x10 ink square at (5, 5) on a 100x100 canvas."""
    return make_raster(square_mask(100, 5, 5, 10))


@pytest.fixture
def half_filled_pair():
    """
    Two 32x32 glyphs sharing one bounding box on 40x40 canvases.

    Both have a full top row; the first fills the left half, the second the
    right half. At grid 64 every source pixel becomes a 2x2 block, so the
    IoU is 32 / (528 + 528 - 32) = 1 / 32.
    """
    left = np.zeros((40, 40), dtype=bool)
    right = np.zeros((40, 40), dtype=bool)
    left[4:36, 4:20] = True
    right[4:36, 20:36] = True
    left[4, 4:36] = True
    right[4, 4:36] = True
    return make_raster(left), make_raster(right)


@pytest.fixture
def square_factory():
    """Fixture returning the square mask helper."""
    return square_mask


@pytest.fixture
def garbage_http_server():
    """
    Fixture providing the URL of a local server that answers every
    connection with a line that is not an HTTP status line.
    """
    server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    server.bind(("127.0.0.1", 0))
    server.listen(5)
    server.settimeout(5)
    port = server.getsockname()[1]

    def serve():
        while True:
            try:
                conn, _ = server.accept()
            except OSError:
                return
            with conn:
                conn.settimeout(1)
                try:
                    conn.recv(65536)
                    conn.sendall(b"garbage not http\r\n\r\n")
                except OSError:
                    pass

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{port}/exec"
    server.close()
    thread.join(timeout=5)
