"""
Frame and Packing Tests
=======================

Buffer invariants, bitmap packing, and capture-region extraction.
"""

import asyncio
import base64

import numpy as np
import pytest

from antimirror.models.capture import CaptureRegion
from antimirror.models.quantization import BayerConfig
from antimirror.observability import PreviewSurface
from antimirror.quantization import pack_bitmap, pack_rgba, quantize
from antimirror.stream import ArrayFrameSource, BinaryFrame, Frame, extract_region
from antimirror.stream.capture import CaptureError, crop_region


class TestFrame:
    """Tests for the RGBA frame buffer."""

    def test_from_bytes(self):
        buffer = bytes(range(24))
        frame = Frame.from_bytes(3, 2, buffer)
        assert frame.data.shape == (2, 3, 4)
        assert frame.to_bytes() == buffer

    def test_buffer_length_mismatch(self):
        with pytest.raises(ValueError):
            Frame.from_bytes(3, 2, bytes(23))

    def test_shape_mismatch(self):
        with pytest.raises(ValueError):
            Frame(width=4, height=4, data=np.zeros((4, 4, 3), dtype=np.uint8))

    def test_non_positive_dimensions(self):
        with pytest.raises(ValueError):
            Frame(width=0, height=4, data=np.zeros((4, 0, 4), dtype=np.uint8))

    def test_repr_is_compact(self):
        assert repr(Frame.filled(400, 240, (0, 0, 0, 255))) == "Frame(width=400, height=240)"


class TestBinaryFrame:
    """Tests for the quantized buffer."""

    def test_rejects_values_above_one(self):
        with pytest.raises(ValueError):
            BinaryFrame(width=2, height=1, pixels=np.array([[0, 255]], dtype=np.uint8))

    def test_from_levels(self):
        binary = BinaryFrame.from_levels(np.array([[0, 255], [255, 0]], dtype=np.uint8))
        assert binary.pixels.tolist() == [[0, 1], [1, 0]]

    def test_to_rgba(self):
        binary = BinaryFrame.from_levels(np.array([[0, 255]], dtype=np.uint8))
        rgba = binary.to_rgba()
        assert rgba.data[0, 0].tolist() == [0, 0, 0, 255]
        assert rgba.data[0, 1].tolist() == [255, 255, 255, 255]


class TestPacker:
    """Tests for the indexed bitmap packing."""

    def test_length_and_values(self, random_frame):
        payload = pack_bitmap(quantize(random_frame, BayerConfig(threshold=128)))
        assert len(payload) == random_frame.width * random_frame.height
        assert set(payload) <= {0, 1}

    def test_row_major_order(self):
        binary = BinaryFrame(
            width=3,
            height=2,
            pixels=np.array([[1, 0, 0], [0, 1, 1]], dtype=np.uint8),
        )
        assert pack_bitmap(binary) == bytes([1, 0, 0, 0, 1, 1])

    def test_pack_rgba_reads_red_channel(self):
        rgba = np.zeros((1, 3, 4), dtype=np.uint8)
        rgba[0, 1, 0] = 255
        rgba[0, 2, 0] = 7
        assert pack_rgba(Frame.from_rgba(rgba)) == bytes([0, 1, 1])

    def test_pack_rgba_agrees_with_pack_bitmap(self, random_frame):
        binary = quantize(random_frame, BayerConfig(threshold=90))
        assert pack_rgba(binary.to_rgba()) == pack_bitmap(binary)


class TestCapture:
    """Tests for crop-and-scale of the capture region."""

    def test_crop_inside_source(self, source_image):
        cropped = crop_region(source_image, CaptureRegion(x=10, y=5, w=8, h=4))
        assert np.all(cropped[..., :3] == 255)

    def test_crop_past_source_edge_is_transparent(self, source_image):
        cropped = crop_region(source_image, CaptureRegion(x=36, y=28, w=8, h=4))
        assert cropped.shape == (4, 8, 4)
        assert np.all(cropped[2:, :] == 0)
        assert np.all(cropped[:, 4:] == 0)

    def test_region_fully_outside_source(self, source_image):
        cropped = crop_region(source_image, CaptureRegion(x=100, y=100, w=5, h=5))
        assert not cropped.any()

    def test_nearest_neighbour_upscale(self):
        image = np.zeros((2, 2, 4), dtype=np.uint8)
        image[0, 0] = (255, 255, 255, 255)
        frame = extract_region(image, CaptureRegion(x=0, y=0, w=2, h=2), 4, 4)
        assert frame.data[..., 0].tolist() == [
            [255, 255, 0, 0],
            [255, 255, 0, 0],
            [0, 0, 0, 0],
            [0, 0, 0, 0],
        ]

    def test_rgb_source_gains_opaque_alpha(self):
        image = np.full((3, 3, 3), 50, dtype=np.uint8)
        frame = extract_region(image, CaptureRegion(x=0, y=0, w=3, h=3), 3, 3)
        assert np.all(frame.data[..., 3] == 255)
        assert np.all(frame.data[..., :3] == 50)

    def test_rejects_non_uint8(self):
        with pytest.raises(CaptureError):
            extract_region(
                np.zeros((2, 2, 4), dtype=np.float32),
                CaptureRegion(x=0, y=0, w=2, h=2),
                2,
                2,
            )

    def test_region_parse(self):
        assert CaptureRegion.parse("1, 2, 30, 40").as_tuple() == (1, 2, 30, 40)
        with pytest.raises(ValueError):
            CaptureRegion.parse("1,2,3")


class TestArrayFrameSource:
    """Tests for the in-memory source."""

    def test_read_latest_until_ended(self, source_image):
        async def scenario():
            source = ArrayFrameSource()
            assert await source.read_frame() is None
            source.push(source_image)
            first = await source.read_frame()
            second = await source.read_frame()
            source.end()
            after = await source.read_frame()
            return source, first, second, after

        source, first, second, after = asyncio.run(scenario())
        assert first is source_image and second is source_image
        assert after is None
        assert not source.is_active
        assert source.reads == 2


class TestPreviewSurface:
    """Tests for the local preview surface."""

    def test_snapshot_before_draw(self):
        assert PreviewSurface(4, 2).snapshot_png() is None

    def test_snapshot_png(self):
        surface = PreviewSurface(4, 2)
        binary = BinaryFrame.from_levels(np.array([[0, 1, 0, 1], [1, 0, 1, 0]], dtype=np.uint8))
        surface.draw(binary.to_rgba())

        png = surface.snapshot_png()
        assert png.startswith(b"\x89PNG")
        assert base64.b64decode(surface.snapshot_b64()) == png
        assert surface.frames_drawn == 1

    def test_size_mismatch(self):
        surface = PreviewSurface(4, 2)
        with pytest.raises(ValueError):
            surface.draw(Frame.filled(3, 2, (0, 0, 0, 255)))
