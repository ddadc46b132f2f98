"""
QRCodeUtils — Constants & Error Tests
======================================

Covers:
  1. DEFAULT_OPTIONS values and immutability
  2. AS_TYPES_MAP coverage, payload kinds and immutability
  3. ErrorKind / QRCodeError contract
  4. Image field access on mappings and objects

Run: pytest test_qrcu_types.py
"""

import sys
from types import SimpleNamespace

import pytest

from qrcu_types import (
    DEFAULT_OPTIONS, AS_TYPES_MAP, ENCODE_KINDS, DEFAULT_ENCODE_KIND,
    TYPE_STRING, TYPE_BOOLEAN_MATRIX, TYPE_BYTE_BUFFER,
    ErrorKind, QRCodeError, QRDecodeImageData, QREncodeResult, QRDecodeResult,
    describe_error, image_field,
)


# ═══════════════════════════════════════════════════════════════
# DEFAULT OPTIONS
# ═══════════════════════════════════════════════════════════════

def test_default_options_values():
    """Defaults are gif output at scale 8 and nothing else."""
    assert dict(DEFAULT_OPTIONS) == {'as': 'gif', 'scale': 8}


def test_default_format_has_output_type():
    assert DEFAULT_OPTIONS['as'] in AS_TYPES_MAP
    assert DEFAULT_OPTIONS['as'] in ENCODE_KINDS


def test_default_options_reject_assignment():
    """Item assignment fails and leaves the baseline intact."""
    with pytest.raises(TypeError):
        DEFAULT_OPTIONS['scale'] = 999
    with pytest.raises(TypeError):
        DEFAULT_OPTIONS['as'] = 'modified'
    with pytest.raises(TypeError):
        del DEFAULT_OPTIONS['as']

    assert DEFAULT_OPTIONS['as'] == 'gif'
    assert DEFAULT_OPTIONS['scale'] == 8


# ═══════════════════════════════════════════════════════════════
# OUTPUT TYPE TABLE
# ═══════════════════════════════════════════════════════════════

def test_as_types_map_entries():
    assert dict(AS_TYPES_MAP) == {
        'ascii': 'string',
        'term': 'string',
        'svg': 'string',
        'raw': 'boolean-matrix',
        'gif': 'byte-buffer',
    }


def test_every_encode_kind_has_output_type():
    """Each dispatchable identifier must be tagged."""
    for kind in ENCODE_KINDS:
        assert kind in AS_TYPES_MAP, f"Missing output type: {kind}"
    assert DEFAULT_ENCODE_KIND in AS_TYPES_MAP


def test_term_is_table_only():
    assert 'term' in AS_TYPES_MAP
    assert 'term' not in ENCODE_KINDS


def test_output_type_names_are_consistent():
    valid = {TYPE_STRING, TYPE_BOOLEAN_MATRIX, TYPE_BYTE_BUFFER}
    for key, value in AS_TYPES_MAP.items():
        assert value in valid, f"Invalid type name {value!r} for {key!r}"


def test_as_types_map_rejects_assignment():
    original = dict(AS_TYPES_MAP)
    for key in list(AS_TYPES_MAP):
        with pytest.raises(TypeError):
            AS_TYPES_MAP[key] = 'modified'
    with pytest.raises(TypeError):
        AS_TYPES_MAP['png'] = TYPE_BYTE_BUFFER
    assert dict(AS_TYPES_MAP) == original


# ═══════════════════════════════════════════════════════════════
# ERRORS
# ═══════════════════════════════════════════════════════════════

def test_error_kind_codes():
    assert ErrorKind.VALIDATION.value == 'VALIDATION_ERROR'
    assert ErrorKind.PROCESSING.value == 'PROCESSING_ERROR'
    assert ErrorKind.CONVERTING.value == 'CONVERTING_ERROR'
    assert ErrorKind('PROCESSING_ERROR') is ErrorKind.PROCESSING


@pytest.mark.parametrize('kind', list(ErrorKind))
def test_error_carries_kind_and_message(kind):
    error = QRCodeError(kind, 'Something went wrong')

    assert isinstance(error, Exception)
    assert error.kind is kind
    assert error.code == kind.value
    assert error.message == 'Something went wrong'
    assert str(error) == 'Something went wrong'


def test_error_kind_accepts_code_string():
    error = QRCodeError('CONVERTING_ERROR', 'bad file')
    assert error.kind is ErrorKind.CONVERTING


def test_error_kind_rejects_unknown_code():
    with pytest.raises(ValueError):
        QRCodeError('NOPE', 'x')


def test_error_repr():
    error = QRCodeError(ErrorKind.VALIDATION, 'No image data provided')
    assert repr(error) == "QRCodeError(VALIDATION, 'No image data provided')"


def test_error_can_be_raised_and_caught_by_kind():
    with pytest.raises(QRCodeError) as excinfo:
        raise QRCodeError(ErrorKind.PROCESSING, 'No QR code found in image')
    assert excinfo.value.kind is ErrorKind.PROCESSING


def test_describe_error():
    assert describe_error(ValueError('boom')) == 'boom'
    assert describe_error(RuntimeError()) == 'Unknown error'


# ═══════════════════════════════════════════════════════════════
# DATA STRUCTURES
# ═══════════════════════════════════════════════════════════════

def test_image_field_on_mapping_and_object():
    as_dict = {'width': 2, 'height': 3, 'data': b'\x00' * 6}
    as_obj = SimpleNamespace(width=2, height=3, data=b'\x00' * 6)
    as_dataclass = QRDecodeImageData(width=2, height=3, data=b'\x00' * 6)

    for source in (as_dict, as_obj, as_dataclass):
        assert image_field(source, 'width') == 2
        assert image_field(source, 'height') == 3
        assert image_field(source, 'data') == b'\x00' * 6
        assert image_field(source, 'missing') is None


def test_results_are_frozen():
    result = QREncodeResult(data=b'GIF89a', type=TYPE_BYTE_BUFFER)
    with pytest.raises(AttributeError):
        result.type = TYPE_STRING

    decoded = QRDecodeResult(data='hello')
    assert decoded.data == 'hello'


if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
