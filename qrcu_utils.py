"""
QRCodeUtils — QR code encode/decode façade
===========================================

Two coroutines, ``encode`` and ``decode``, wrapping the QR codec and the
image decoder behind one validated contract:

  encode: validate text -> merge options -> dispatch output format
  decode: [convert file] -> validate image data -> scan -> result

Every caller-visible failure is a QRCodeError with kind VALIDATION,
PROCESSING or CONVERTING.

Usage:
    result = asyncio.run(encode("Hello, World!", {'as': 'svg'}))
    result.data   # '<?xml ...'
    result.type   # 'string'

    decoded = asyncio.run(decode(open("qrcode.gif", "rb")))
    decoded.data  # 'Hello, World!'
"""

import asyncio
import logging
import numbers
from decimal import Decimal
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Mapping, Optional, Union

from qrcu_types import (
    DEFAULT_OPTIONS, AS_TYPES_MAP, ENCODE_KINDS, DEFAULT_ENCODE_KIND,
    ErrorKind, QRCodeError, QRDecodeImageData, QREncodeResult, QRDecodeResult,
    describe_error, image_field,
)
from qrcu_codec import encode_qr, decode_qr
from qrcu_image import is_file_like, convert_file_to_image_data

__version__ = "1.0.0"
__all__ = [
    'encode', 'decode',
    'combine_options', 'validate_text', 'validate_image_data',
    'dispatch_format', 'translate_errors',
    'QRCodeError', 'ErrorKind',
    'QRDecodeImageData', 'QREncodeResult', 'QRDecodeResult',
    'DEFAULT_OPTIONS', 'AS_TYPES_MAP',
]

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════
# VALIDATION
# ═══════════════════════════════════════════════════════════════

def validate_text(text: Any) -> None:
    """Accept only a non-empty str."""
    if not text or not isinstance(text, str):
        raise QRCodeError(ErrorKind.VALIDATION, 'Invalid text. Expected non-empty string')


def validate_image_data(image_data: Any) -> None:
    """
    Check the shape of decoder input: presence, then type, then fields.

    Only the shape is checked. Whether ``data`` really holds
    width * height pixels is left to the decoder.
    """
    if not _is_present(image_data):
        raise QRCodeError(ErrorKind.VALIDATION, 'No image data provided')
    if isinstance(image_data, (str, int, float, bool)):
        raise QRCodeError(
            ErrorKind.VALIDATION,
            f"Invalid image data type. Expected QRDecodeImageData, got {type(image_data).__name__}",
        )
    width = image_field(image_data, 'width')
    height = image_field(image_data, 'height')
    data = image_field(image_data, 'data')
    if not (_is_number(width) and _is_number(height) and _is_present(data)):
        raise QRCodeError(
            ErrorKind.VALIDATION,
            'Invalid image data structure. Expected object with width, height, and data properties',
        )


def _is_number(value: Any) -> bool:
    return isinstance(value, (numbers.Real, Decimal)) and not isinstance(value, bool)


def _is_present(value: Any) -> bool:
    # Containers count as present even when empty; scalars by truthiness.
    if value is None:
        return False
    if isinstance(value, (str, int, float, bool)):
        return bool(value)
    return True


# ═══════════════════════════════════════════════════════════════
# OPTIONS & DISPATCH
# ═══════════════════════════════════════════════════════════════

def combine_options(options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Defaults overlaid with ``options``. Returns a new dict."""
    return {**DEFAULT_OPTIONS, **(options or {})}


async def dispatch_format(text: str, options: Mapping[str, Any]) -> QREncodeResult:
    """
    Encode ``text`` in the representation named by ``options['as']``.

    The encode branch and the declared type are resolved separately:
    an ``as`` outside the encode branches encodes as gif, and an ``as``
    missing from AS_TYPES_MAP is tagged with the gif type.
    """
    codec_options = dict(options)
    output_as = codec_options.pop('as', None)
    if not isinstance(output_as, str):
        output_as = None

    kind = output_as if output_as in ENCODE_KINDS else DEFAULT_ENCODE_KIND
    logger.debug("Encoding %d chars (as=%r, branch=%s)", len(text), output_as, kind)
    data = await asyncio.to_thread(encode_qr, text, kind, codec_options)

    output_type = output_as if output_as and output_as in AS_TYPES_MAP else DEFAULT_ENCODE_KIND
    return QREncodeResult(data=data, type=AS_TYPES_MAP[output_type])


# ═══════════════════════════════════════════════════════════════
# ERROR TRANSLATION
# ═══════════════════════════════════════════════════════════════

@contextmanager
def translate_errors(prefix: str) -> Iterator[None]:
    """
    Give every failure inside the block a kind.

    QRCodeError passes through untouched; anything else becomes
    PROCESSING with message "<prefix>: <original message>".
    """
    try:
        yield
    except QRCodeError:
        raise
    except Exception as e:
        raise QRCodeError(ErrorKind.PROCESSING, f"{prefix}: {describe_error(e)}") from e


# ═══════════════════════════════════════════════════════════════
# PUBLIC API
# ═══════════════════════════════════════════════════════════════

async def encode(text: str, options: Optional[Mapping[str, Any]] = None) -> QREncodeResult:
    """
    Encode text to a QR code.

    Args:
        text: Non-empty text to encode.
        options: ``as`` (gif|svg|ascii|raw), ecc, encoding, version, mask,
            border, scale, optimize. Merged over DEFAULT_OPTIONS.

    Returns:
        QREncodeResult with the symbol and its declared type.

    Raises:
        QRCodeError: VALIDATION for bad text, PROCESSING otherwise.
    """
    with translate_errors('Encode failed'):
        validate_text(text)
        return await dispatch_format(text, combine_options(options))


async def decode(image_data: Union[QRDecodeImageData, Mapping[str, Any], Any]) -> QRDecodeResult:
    """
    Decode a QR code from raw image data or an image file.

    Args:
        image_data: QRDecodeImageData (or a mapping / object with width,
            height and data), or a file object, encoded image bytes or path.

    Returns:
        QRDecodeResult with the decoded text.

    Raises:
        QRCodeError: CONVERTING if the file can't be read as an image,
            VALIDATION for malformed image data, PROCESSING if no QR code
            is found or the decoder fails.
    """
    with translate_errors('Decode failed'):
        if is_file_like(image_data):
            image_data = await convert_file_to_image_data(image_data)
        validate_image_data(image_data)
        decoded = await asyncio.to_thread(decode_qr, image_data)
        if not decoded:
            raise QRCodeError(ErrorKind.PROCESSING, 'No QR code found in image')
        return QRDecodeResult(data=decoded)
