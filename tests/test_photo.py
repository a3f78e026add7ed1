"""
Test Suite: Photo decoding and display handle
"""

import io

import pytest
from PIL import Image

from conftest import make_jpeg2000
from midni_qr.protocols.core import ImageDecodeError
from midni_qr.protocols.photo import (
    DecodedRaster,
    Jpeg2000Codec,
    RenderableImage,
    decode_photo,
    synthesize_rgba,
)


class TestCodec:
    """Test codec JPEG2000 (Pillow)"""

    def test_decode_rgb(self, jp2_photo):
        raster = Jpeg2000Codec().decode(jp2_photo)
        assert (raster.width, raster.height) == (48, 64)
        assert raster.component_count == 3
        assert all(len(c) == 48 * 64 for c in raster.components)

    def test_decode_grayscale(self):
        raster = Jpeg2000Codec().decode(make_jpeg2000(mode="L", color=90))
        assert raster.component_count == 1

    def test_garbage(self):
        with pytest.raises(ImageDecodeError):
            Jpeg2000Codec().decode(b"not a jpeg2000 stream")

    def test_empty(self):
        with pytest.raises(ImageDecodeError):
            Jpeg2000Codec().decode(b"")

    def test_other_formats_rejected(self):
        buffer = io.BytesIO()
        Image.new("RGB", (4, 4), (10, 20, 30)).save(buffer, format="PNG")
        with pytest.raises(ImageDecodeError):
            Jpeg2000Codec().decode(buffer.getvalue())

    def test_sixteen_bit_samples_scaled(self):
        buffer = io.BytesIO()
        Image.new("I;16", (4, 4), 4096).save(buffer, format="JPEG2000")
        raster = Jpeg2000Codec().decode(buffer.getvalue())
        assert raster.component_count == 1
        assert raster.components[0] == bytes([16]) * 16


class TestRgbaSynthesis:
    """Test sintesi RGBA"""

    def test_single_component_fills_green_and_blue(self):
        raster = DecodedRaster(width=2, height=1, component_count=1, components=(b"\x10\x20",))
        image = synthesize_rgba(raster)
        assert image.mode == "RGBA"
        assert image.getpixel((0, 0)) == (0x10, 0x10, 0x10, 255)
        assert image.getpixel((1, 0)) == (0x20, 0x20, 0x20, 255)

    def test_three_components(self):
        raster = DecodedRaster(width=1, height=1, component_count=3, components=(b"\x01", b"\x02", b"\x03"))
        assert synthesize_rgba(raster).getpixel((0, 0)) == (1, 2, 3, 255)


class TestRenderableImage:
    """Test handle di visualizzazione (risorsa con rilascio esplicito)"""

    def test_release(self, tmp_path):
        handle = RenderableImage(b"PNGDATA", directory=tmp_path)
        path = handle.path
        assert path.read_bytes() == b"PNGDATA"
        assert handle.uri.startswith("file://")

        handle.release()
        assert handle.released
        assert not path.exists()
        with pytest.raises(RuntimeError):
            handle.path

        # Idempotente
        handle.release()

    def test_context_manager(self, tmp_path):
        with RenderableImage(b"X", directory=tmp_path) as handle:
            path = handle.path
            assert path.exists()
        assert not path.exists()


class TestDecodePhoto:
    """Test decodifica completa della foto"""

    def test_png_and_base64(self, jp2_photo, tmp_path):
        photo = decode_photo(jp2_photo, temp_dir=tmp_path)
        try:
            assert photo.mime_type == "image/png"
            with Image.open(io.BytesIO(photo.image_bytes)) as png:
                assert png.format == "PNG"
                assert png.mode == "RGBA"
                assert png.size == (48, 64)
                red, green, blue, alpha = png.getpixel((0, 0))
                assert abs(red - 200) <= 2 and abs(green - 120) <= 2 and abs(blue - 40) <= 2
                assert alpha == 255
            assert photo.base64
            assert photo.handle.path.parent == tmp_path
        finally:
            photo.release()
        assert photo.handle.released

    def test_undecodable(self):
        with pytest.raises(ImageDecodeError):
            decode_photo(b"\x00\x00\x00\x0cjP  broken")
