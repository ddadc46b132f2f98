"""
QRCU Codec — QR symbol encode/decode backends
==============================================

Thin bindings between the QRCodeUtils façade and the libraries that
actually build and read QR symbols:

  - encode: ``qrcode`` builds the symbol; Pillow renders GIF bytes,
    ``qrcode.image.svg`` renders SVG, ``print_ascii`` renders text,
    ``get_matrix`` gives the raw module grid.
  - decode: Pillow rebuilds an image from a flat pixel buffer and
    ``pyzbar`` scans it.

Nothing here validates caller input or translates errors. Library errors
propagate as-is; the façade wraps them.
"""

import io
import logging
from typing import Any, Dict, Mapping, Optional

import qrcode
import qrcode.constants
import qrcode.util
from qrcode.image.svg import SvgPathImage
from PIL import Image

from qrcu_types import (
    CODEC_OPTION_KEYS, ECC_LEVELS, ECC_ALIASES, ENCODING_MODES,
    EncodedData, image_field,
)

logger = logging.getLogger(__name__)


ECC_CONSTANTS = {
    'low':      qrcode.constants.ERROR_CORRECT_L,
    'medium':   qrcode.constants.ERROR_CORRECT_M,
    'quartile': qrcode.constants.ERROR_CORRECT_Q,
    'high':     qrcode.constants.ERROR_CORRECT_H,
}

ENCODING_CONSTANTS = {
    'numeric':      qrcode.util.MODE_NUMBER,
    'alphanumeric': qrcode.util.MODE_ALPHA_NUM,
    'byte':         qrcode.util.MODE_8BIT_BYTE,
}

# Channel count -> Pillow mode for flat pixel buffers
PIXEL_MODES = {1: 'L', 3: 'RGB', 4: 'RGBA'}

# Charsets zbar falls back to for byte-mode payloads without ECI
ZBAR_GUESSED_CHARSETS = ('shift_jis', 'cp932', 'latin-1')


# ═══════════════════════════════════════════════════════════════
# ENCODE
# ═══════════════════════════════════════════════════════════════

def encode_qr(text: str, kind: str, options: Optional[Mapping[str, Any]] = None) -> EncodedData:
    """
    Encode ``text`` as a QR symbol in the representation named by ``kind``.

    Args:
        text: Payload to encode.
        kind: One of 'gif', 'svg', 'ascii', 'raw'.
        options: Codec options (ecc, encoding, version, mask, border,
            scale, optimize). Unrecognized keys are ignored.

    Returns:
        GIF bytes, SVG markup, ASCII art, or a list of boolean rows.
    """
    options = dict(options or {})
    ignored = sorted(str(k) for k in options if k not in CODEC_OPTION_KEYS)
    if ignored:
        logger.debug("Ignoring codec options: %s", ', '.join(ignored))

    qr = _build_qr(text, options)

    if kind == 'gif':
        img = qr.make_image(fill_color="black", back_color="white")
        buf = io.BytesIO()
        img.save(buf, format='GIF')
        return buf.getvalue()
    elif kind == 'svg':
        img = qr.make_image(image_factory=SvgPathImage)
        buf = io.BytesIO()
        img.save(buf)
        return buf.getvalue().decode('utf-8')
    elif kind == 'ascii':
        buf = io.StringIO()
        qr.print_ascii(out=buf)
        return buf.getvalue()
    elif kind == 'raw':
        return [[bool(cell) for cell in row] for row in qr.get_matrix()]
    else:
        raise ValueError(f"Unsupported output kind: {kind!r}")


def _build_qr(text: str, options: Dict[str, Any]) -> qrcode.QRCode:
    """Create and lay out a QRCode from façade options."""
    kwargs: Dict[str, Any] = {
        'error_correction': _ecc_constant(options.get('ecc')),
    }
    version = options.get('version')
    if version is not None:
        kwargs['version'] = int(version)
    if options.get('mask') is not None:
        kwargs['mask_pattern'] = int(options['mask'])
    if options.get('border') is not None:
        kwargs['border'] = int(options['border'])
    if options.get('scale') is not None:
        kwargs['box_size'] = int(options['scale'])

    qr = qrcode.QRCode(**kwargs)

    encoding = options.get('encoding')
    if encoding is not None:
        qr.add_data(qrcode.util.QRData(text, mode=_encoding_constant(encoding)))
    else:
        optimize = options.get('optimize')
        qr.add_data(text, optimize=20 if optimize is None or optimize else 0)

    # A fixed version must hold the data as-is
    qr.make(fit=version is None)
    return qr


def _ecc_constant(level: Any) -> int:
    if level is None:
        return ECC_CONSTANTS['medium']
    name = ECC_ALIASES.get(str(level), str(level).lower())
    if name not in ECC_CONSTANTS:
        raise ValueError(
            f"Invalid error correction level: {level!r}. Expected one of {', '.join(ECC_LEVELS)}"
        )
    return ECC_CONSTANTS[name]


def _encoding_constant(encoding: Any) -> int:
    name = str(encoding).lower()
    if name not in ENCODING_CONSTANTS:
        raise ValueError(
            f"Invalid encoding: {encoding!r}. Expected one of {', '.join(ENCODING_MODES)}"
        )
    return ENCODING_CONSTANTS[name]


# ═══════════════════════════════════════════════════════════════
# DECODE
# ═══════════════════════════════════════════════════════════════

def decode_qr(image_data: Any) -> Optional[str]:
    """
    Scan a raw pixel buffer for a QR symbol.

    ``image_data`` is anything exposing width/height/data, either as
    attributes or mapping keys. The channel count (1, 3 or 4) is inferred
    from the buffer length.

    Returns the first symbol's text, or None when nothing was found.
    """
    from pyzbar.pyzbar import decode as zbar_decode, ZBarSymbol

    img = pixels_to_image(
        image_field(image_data, 'width'),
        image_field(image_data, 'height'),
        image_field(image_data, 'data'),
    )
    results = zbar_decode(img, symbols=[ZBarSymbol.QRCODE])
    if not results:
        return None
    return undo_charset_guess(results[0].data.decode('utf-8'))


def undo_charset_guess(text: str) -> str:
    """
    Recover UTF-8 payloads that zbar transcoded from a guessed charset.

    Byte-mode symbols carry no charset (``qrcode`` writes no ECI header),
    so zbar may read UTF-8 bytes as Shift-JIS or Latin-1 and hand back the
    wrong characters re-encoded as UTF-8. Text is kept as-is unless
    re-encoding it in one of those charsets yields different, valid UTF-8.
    """
    for charset in ZBAR_GUESSED_CHARSETS:
        try:
            original = text.encode(charset).decode('utf-8')
        except UnicodeError:
            continue
        if original != text:
            logger.debug("Payload was read as %s, restored UTF-8", charset)
            return original
    return text


def pixels_to_image(width: Any, height: Any, data: Any) -> Image.Image:
    """Rebuild a Pillow image from a flat row-major pixel buffer."""
    width, height = int(width), int(height)
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")

    raw = bytes(data)
    channels, remainder = divmod(len(raw), width * height)
    if remainder or channels not in PIXEL_MODES:
        raise ValueError(
            f"Pixel data length {len(raw)} does not match {width}x{height} "
            f"with 1, 3 or 4 channels"
        )
    return Image.frombytes(PIXEL_MODES[channels], (width, height), raw)
