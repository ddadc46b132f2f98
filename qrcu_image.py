"""
QRCU Image — file to pixel buffer adapter
==========================================

Turns an encoded image (GIF, PNG, JPEG, ... anything Pillow opens) into the
raw RGBA raster the QR decoder scans. Accepted inputs:

  - file objects (anything with ``read()``; async ``read()`` is awaited)
  - bytes / bytearray / memoryview holding the encoded image
  - filesystem paths (``os.PathLike``)

Every failure surfaces as a CONVERTING QRCodeError.
"""

import io
import os
import asyncio
import inspect
import logging
from pathlib import Path
from typing import Any

from PIL import Image

from qrcu_types import QRCodeError, ErrorKind, QRDecodeImageData, describe_error

logger = logging.getLogger(__name__)

BINARY_TYPES = (bytes, bytearray, memoryview)


def is_file_like(value: Any) -> bool:
    """True for inputs that must be converted before decoding."""
    if isinstance(value, BINARY_TYPES) or isinstance(value, os.PathLike):
        return True
    return callable(getattr(value, 'read', None))


async def convert_file_to_image_data(file: Any) -> QRDecodeImageData:
    """
    Read ``file`` fully and decode it into an RGBA pixel buffer.

    Returns:
        QRDecodeImageData with a flat, row-major RGBA ``bytes`` buffer.

    Raises:
        QRCodeError(CONVERTING) if reading or decoding fails.
    """
    try:
        raw = await read_file_bytes(file)
        image_data = await asyncio.to_thread(decode_image_bytes, raw)
    except Exception as e:
        raise QRCodeError(
            ErrorKind.CONVERTING,
            f"Convert file to image data failed: {describe_error(e)}",
        ) from e

    logger.debug("Converted %d byte image to %dx%d RGBA",
                 len(raw), image_data.width, image_data.height)
    return image_data


async def read_file_bytes(file: Any) -> bytes:
    """Full byte content of a file object, raw buffer or path."""
    if isinstance(file, BINARY_TYPES):
        return bytes(file)
    if isinstance(file, os.PathLike):
        return await asyncio.to_thread(Path(file).read_bytes)

    read = file.read
    if inspect.iscoroutinefunction(read):
        content = await read()
    else:
        content = await asyncio.to_thread(read)

    if isinstance(content, str):
        raise TypeError("File must be opened in binary mode")
    return bytes(content)


def decode_image_bytes(raw: bytes) -> QRDecodeImageData:
    """Decode an image file's bytes, forcing an alpha channel."""
    with Image.open(io.BytesIO(raw)) as img:
        rgba = img.convert('RGBA')
    return QRDecodeImageData(width=rgba.width, height=rgba.height, data=rgba.tobytes())
