"""
QRCU Types & Constants — QRCodeUtils
=====================================

Foundational constants, result types and the error class shared by the
QRCodeUtils encode/decode façade. This module has ZERO external
dependencies beyond the Python standard library.

Covers:
  - Default encode options (immutable)
  - Output type table: ``as`` identifier -> result payload kind
  - ErrorKind + QRCodeError (one error class, explicit kind)
  - QRDecodeImageData / QREncodeResult / QRDecodeResult
"""

from enum import Enum
from types import MappingProxyType
from dataclasses import dataclass
from typing import Any, List, Mapping, Sequence, Union

# ═══════════════════════════════════════════════════════════════
# OPTIONS
# ═══════════════════════════════════════════════════════════════

# Baseline merged under every caller's options. Read-only.
DEFAULT_OPTIONS: Mapping[str, Any] = MappingProxyType({
    'as': 'gif',
    'scale': 8,
})

# Option keys understood by the codec adapter (``as`` never reaches it)
CODEC_OPTION_KEYS = ('ecc', 'encoding', 'version', 'mask', 'border', 'scale', 'optimize')


# ═══════════════════════════════════════════════════════════════
# OUTPUT TYPES
# ═══════════════════════════════════════════════════════════════

TYPE_STRING = 'string'
TYPE_BOOLEAN_MATRIX = 'boolean-matrix'
TYPE_BYTE_BUFFER = 'byte-buffer'

# ``as`` identifier -> declared payload kind. Fixed at import time.
AS_TYPES_MAP: Mapping[str, str] = MappingProxyType({
    'ascii': TYPE_STRING,
    'term':  TYPE_STRING,
    'svg':   TYPE_STRING,
    'raw':   TYPE_BOOLEAN_MATRIX,
    'gif':   TYPE_BYTE_BUFFER,
})

# Identifiers that select an encode branch. ``term`` is table-only.
ENCODE_KINDS = frozenset(('gif', 'svg', 'ascii', 'raw'))
DEFAULT_ENCODE_KIND = 'gif'


# ═══════════════════════════════════════════════════════════════
# CODEC PARAMETER NAMES
# ═══════════════════════════════════════════════════════════════

ECC_LEVELS = ('low', 'medium', 'quartile', 'high')
ECC_ALIASES = {'L': 'low', 'M': 'medium', 'Q': 'quartile', 'H': 'high'}

ENCODING_MODES = ('numeric', 'alphanumeric', 'byte')


# ═══════════════════════════════════════════════════════════════
# ERRORS
# ═══════════════════════════════════════════════════════════════

class ErrorKind(str, Enum):
    """Where a failure came from. The value is the public error code."""
    VALIDATION = 'VALIDATION_ERROR'    # caller input rejected
    PROCESSING = 'PROCESSING_ERROR'    # codec failed or found nothing
    CONVERTING = 'CONVERTING_ERROR'    # file -> pixel buffer failed


class QRCodeError(Exception):
    """
    The only error raised by QRCodeUtils.

    Callers discriminate on ``kind``; ``code`` is the kind's string value.
    Instances are created at the point of failure and never modified.
    """

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = ErrorKind(kind)
        self.message = message

    @property
    def code(self) -> str:
        return self.kind.value

    def __repr__(self) -> str:
        return f"QRCodeError({self.kind.name}, {self.message!r})"


def describe_error(exc: BaseException) -> str:
    """Message text of an arbitrary exception, never empty."""
    return str(exc) or 'Unknown error'


# ═══════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ═══════════════════════════════════════════════════════════════

PixelData = Union[bytes, bytearray, memoryview, Sequence[int]]
EncodedData = Union[bytes, str, List[List[bool]]]


@dataclass(frozen=True)
class QRDecodeImageData:
    """
    Raw raster handed to the QR decoder.

    ``data`` is a flat, row-major pixel buffer. Its length is expected to be
    width * height * channels, but only the decoder enforces that.
    """
    width: int
    height: int
    data: PixelData


def image_field(image_data: Any, name: str) -> Any:
    """Read width/height/data from a mapping or an attribute-bearing object."""
    if isinstance(image_data, Mapping):
        return image_data.get(name)
    return getattr(image_data, name, None)


@dataclass(frozen=True)
class QREncodeResult:
    """Encoded symbol plus the declared payload kind from AS_TYPES_MAP."""
    data: EncodedData
    type: str


@dataclass(frozen=True)
class QRDecodeResult:
    data: str
