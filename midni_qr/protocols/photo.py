"""
MiDNI QR Photo Decoding

The holder photo (field 0x50) is a JPEG2000 stream. Decoding goes through an
image codec that yields per-component sample buffers; the buffers are merged
into an RGBA raster (missing green/blue fall back to the first component),
encoded as PNG and exposed both as base64 text and as a display handle.

The display handle is a scoped resource backed by a temporary file. Callers
release it with release() or by using it as a context manager; nothing
releases it automatically.

Author: MiDNI QR Project
Date: October 2026
"""

import base64
import io
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image, UnidentifiedImageError

from midni_qr.config import QR_CONSTANTS

from .core.errors import ImageDecodeError


@dataclass(frozen=True)
class DecodedRaster:
    """Codec output: one 8-bit sample buffer per component, row-major."""

    width: int
    height: int
    component_count: int
    components: Tuple[bytes, ...]


class Jpeg2000Codec:
    """JPEG2000 decoder backed by Pillow's OpenJPEG plugin."""

    def decode(self, jp2_bytes: bytes) -> DecodedRaster:
        """
        Decode a JPEG2000 stream into component buffers.

        Raises:
            ImageDecodeError: If the stream cannot be decoded
        """
        if not jp2_bytes:
            raise ImageDecodeError("Empty JPEG2000 stream")

        try:
            with Image.open(io.BytesIO(jp2_bytes), formats=["JPEG2000"]) as image:
                image.load()
                if image.mode in ("I;16", "I;16B", "I"):
                    # OpenJPEG allarga i campioni a 16 bit
                    image = image.convert("I").point(lambda v: v * (1 / 256)).convert("L")
                elif image.mode not in ("L", "LA", "RGB", "RGBA"):
                    image = image.convert("L" if len(image.getbands()) == 1 else "RGB")
                bands = image.split()
                width, height = image.size
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise ImageDecodeError(f"Cannot decode JPEG2000 photo: {e}") from e

        return DecodedRaster(
            width=width,
            height=height,
            component_count=len(bands),
            components=tuple(band.tobytes() for band in bands),
        )


def synthesize_rgba(raster: DecodedRaster) -> Image.Image:
    """Build an opaque RGBA image from codec components."""
    size = (raster.width, raster.height)
    red = Image.frombytes("L", size, raster.components[0])
    green = Image.frombytes("L", size, raster.components[1]) if raster.component_count > 1 else red
    blue = Image.frombytes("L", size, raster.components[2]) if raster.component_count > 2 else red
    alpha = Image.new("L", size, 255)
    return Image.merge("RGBA", (red, green, blue, alpha))


def encode_image(image: Image.Image, image_format: str = QR_CONSTANTS.PHOTO_FORMAT) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=image_format)
    return buffer.getvalue()


class RenderableImage:
    """
    Opaque display handle for an encoded image.

    Backed by a temporary file so that any consumer able to open a path or a
    file:// URI can render it. The file exists until release() is called.
    """

    def __init__(
        self,
        content: bytes,
        mime_type: str = QR_CONSTANTS.PHOTO_MIME_TYPE,
        suffix: str = QR_CONSTANTS.PHOTO_SUFFIX,
        directory: Optional[Path] = None,
    ):
        fd, path = tempfile.mkstemp(prefix="midni_photo_", suffix=suffix, dir=directory)
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        self._path = Path(path)
        self.mime_type = mime_type
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    @property
    def path(self) -> Path:
        if self._released:
            raise RuntimeError("Display handle already released")
        return self._path

    @property
    def uri(self) -> str:
        return self.path.resolve().as_uri()

    def release(self) -> None:
        """Delete the backing file. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        self._path.unlink(missing_ok=True)

    def __enter__(self) -> "RenderableImage":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def __repr__(self) -> str:
        state = "released" if self._released else str(self._path)
        return f"RenderableImage({self.mime_type}, {state})"


@dataclass
class DecodedPhoto:
    """Holder photo: encoded raster plus its transient display handle."""

    width: int
    height: int
    component_count: int
    image_bytes: bytes
    handle: RenderableImage
    mime_type: str = QR_CONSTANTS.PHOTO_MIME_TYPE

    @property
    def base64(self) -> str:
        return base64.b64encode(self.image_bytes).decode("ascii")

    def release(self) -> None:
        self.handle.release()


def decode_photo(
    jp2_bytes: bytes,
    codec: Optional[Jpeg2000Codec] = None,
    temp_dir: Optional[Path] = None,
) -> DecodedPhoto:
    """
    Decode the JPEG2000 photo into a displayable PNG with a display handle.

    Raises:
        ImageDecodeError: If the codec cannot decode the stream
    """
    codec = codec or Jpeg2000Codec()
    raster = codec.decode(jp2_bytes)

    try:
        image_bytes = encode_image(synthesize_rgba(raster))
    except ValueError as e:
        raise ImageDecodeError(f"Photo components do not match {raster.width}x{raster.height}") from e

    return DecodedPhoto(
        width=raster.width,
        height=raster.height,
        component_count=raster.component_count,
        image_bytes=image_bytes,
        handle=RenderableImage(image_bytes, directory=temp_dir),
    )
