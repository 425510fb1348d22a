# Python Substrate Runtime Codec Library
#
# Copyright 2018-2024 Stichting Polkascan (Polkascan Foundation).
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
from scalecodec.base import ScaleBytes, RuntimeConfigurationObject
from scalecodec.exceptions import InvalidScaleTypeValueException, RemainingScaleBytesNotEmptyException
from scalecodec.types import Compact, Bool, String, U8, U16, U32, U64, U128, U256, I8, I16, I32, I64, I128, I256

from runtimecodec.exceptions import NotEnoughInput, InvalidCompactEncoding, InvalidBoolean, InvalidChar, \
    InvalidUtf8
from runtimecodec.scale.registry import INTEGER_BITS
from runtimecodec.utils.math import ceil_div

runtime_config = RuntimeConfigurationObject()

SCALE_INTEGERS = {
    'u8': U8, 'u16': U16, 'u32': U32, 'u64': U64, 'u128': U128, 'u256': U256,
    'i8': I8, 'i16': I16, 'i32': I32, 'i64': I64, 'i128': I128, 'i256': I256
}


def remaining_length(data: ScaleBytes) -> int:
    return data.length - data.offset


def read_bytes(data: ScaleBytes, length: int) -> bytes:
    """
    Consumes exactly `length` bytes from the cursor
    """
    if remaining_length(data) < length:
        raise NotEnoughInput(length, remaining_length(data), data.offset)
    return bytes(data.get_next_bytes(length))


def process_scale_type(scale_type_class, data: ScaleBytes, min_length: int = 1):
    """
    Decodes one scalecodec type at the cursor of `data` and returns the decoded object

    scalecodec reads past the end of the stream without complaint, so `min_length` bytes are required up front and
    any overrun is reported as `NotEnoughInput`.
    """
    offset = data.offset

    if remaining_length(data) < min_length:
        raise NotEnoughInput(min_length, remaining_length(data), offset)

    scale_obj = scale_type_class(data=data, runtime_config=runtime_config)

    try:
        scale_obj.decode(check_remaining=False)
    except RemainingScaleBytesNotEmptyException:
        raise NotEnoughInput(data.offset - offset, data.length - offset, offset)

    return scale_obj


def decode_compact(data: ScaleBytes, strict: bool = False) -> int:
    offset = data.offset
    compact = process_scale_type(Compact, data)

    # Only the canonical (shortest) form is accepted in strict mode
    if strict and bytes(compact.get_used_bytes()) != encode_compact(compact.value):
        raise InvalidCompactEncoding(f'non-canonical encoding of {compact.value}', offset)

    return compact.value


def encode_compact(value: int) -> bytes:
    if value < 0:
        raise ValueError('Compact value must be unsigned')

    return bytes(Compact(runtime_config=runtime_config).encode(value).data)


def decode_primitive(data: ScaleBytes, kind: str, strict: bool = False):
    offset = data.offset

    if kind == 'bool':
        if remaining_length(data) < 1:
            raise NotEnoughInput(1, 0, offset)
        try:
            return process_scale_type(Bool, data).value
        except InvalidScaleTypeValueException:
            raise InvalidBoolean(data.data[offset])

    if kind == 'char':
        code_point = process_scale_type(U32, data, 4).value
        if code_point > 0x10FFFF or 0xD800 <= code_point <= 0xDFFF:
            raise InvalidChar(code_point)
        return chr(code_point)

    if kind == 'str':
        scale_obj = process_scale_type(String, data)
        raw = bytes(scale_obj.value_object)
        payload_offset = data.offset - len(raw)

        if strict and payload_offset - offset != len(encode_compact(len(raw))):
            raise InvalidCompactEncoding(f'non-canonical length prefix for {len(raw)}', offset)

        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError as e:
            raise InvalidUtf8(payload_offset, e.reason)

    return process_scale_type(SCALE_INTEGERS[kind], data, INTEGER_BITS[kind] // 8).value


def encode_primitive(value, kind: str) -> bytes:
    if kind == 'bool':
        scale_obj = Bool(runtime_config=runtime_config)
        return bytes(scale_obj.encode(bool(value)).data)

    if kind == 'char':
        return encode_primitive(ord(value), 'u32')

    if kind == 'str':
        # Passed as bytes, a str starting with '0x' would be taken for hex
        scale_obj = String(runtime_config=runtime_config)
        return bytes(scale_obj.encode(value.encode('utf-8')).data)

    return bytes(SCALE_INTEGERS[kind](runtime_config=runtime_config).encode(value).data)


def _reverse_bits(word: int, width: int) -> int:
    return int(format(word, f'0{width}b')[::-1], 2)


def decode_bits(data: ScaleBytes, store_bits: int, order: str, strict: bool = False) -> tuple:
    """
    Returns (bits, length) where bit `i` of the int `bits` is element `i` of the sequence
    """
    length = decode_compact(data, strict=strict)
    word_count = ceil_div(length, store_bits)
    word_bytes = store_bits // 8

    if remaining_length(data) < word_count * word_bytes:
        raise NotEnoughInput(word_count * word_bytes, remaining_length(data), data.offset)

    word_type = SCALE_INTEGERS[f'u{store_bits}']

    bits = 0
    for word_position in range(word_count):
        word = process_scale_type(word_type, data, word_bytes).value
        if order == 'Msb0':
            word = _reverse_bits(word, store_bits)
        bits |= word << (word_position * store_bits)

    # Padding bits of the last store word are ignored
    return bits & ((1 << length) - 1), length


def encode_bits(bits: int, length: int, store_bits: int, order: str) -> bytes:
    word_type = SCALE_INTEGERS[f'u{store_bits}']
    word_mask = (1 << store_bits) - 1

    output = bytearray(encode_compact(length))

    for word_position in range(ceil_div(length, store_bits)):
        word = (bits >> (word_position * store_bits)) & word_mask
        if order == 'Msb0':
            word = _reverse_bits(word, store_bits)
        output += word_type(runtime_config=runtime_config).encode(word).data

    return bytes(output)
