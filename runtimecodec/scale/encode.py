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
import logging

from runtimecodec.config import CodecConfig, DEFAULT_CONFIG
from runtimecodec.exceptions import ShapeMismatch, WrongLength, MissingField, VariantNameNotFound, \
    ValueOutOfRange, EncodeDepthExceeded
from runtimecodec.scale.primitives import encode_compact, encode_primitive, encode_bits
from runtimecodec.scale.registry import PortableRegistry, PRIMITIVE, COMPACT, BIT_SEQUENCE, COMPOSITE, VARIANT, \
    SEQUENCE, ARRAY, TUPLE, INTEGER_BITS, COMPACT_UNIT, fields_are_named
from runtimecodec.scale.serialize import deserialize_value
from runtimecodec.scale.value import Value, Primitive, Composite, Variant, Sequence, BitSequence
from runtimecodec.utils.math import integer_bounds

logger = logging.getLogger(__name__)


def _positional_items(value: Value):
    if isinstance(value, Sequence):
        return value.items
    if isinstance(value, Composite) and not value.is_named:
        return value.values


def _field_children(value: Value, fields, type_id: int) -> list:
    """
    Pairs the values of a composite (or variant payload) with the registry types of its fields
    """
    if len(fields) == 1:
        field = fields[0]
        if isinstance(value, Composite) and len(value) == 1 and \
                (not value.is_named or not field.name or value.names[0] == field.name):
            return [(value.values[0], field.type)]
        # Single-field wrapper given its bare inner value
        return [(value, field.type)]

    if fields_are_named(fields):
        if not isinstance(value, Composite) or not value.is_named:
            raise ShapeMismatch(type_id, 'named composite', value)
        if len(value) != len(fields):
            raise WrongLength(type_id, len(fields), len(value))

        children = []
        for field in fields:
            field_value = value.get(field.name)
            if field_value is None:
                raise MissingField(type_id, field.name)
            children.append((field_value, field.type))
        return children

    items = _positional_items(value)
    if items is None:
        raise ShapeMismatch(type_id, 'unnamed composite', value)

    if len(items) != len(fields):
        raise WrongLength(type_id, len(fields), len(items))

    return [(item, field.type) for item, field in zip(items, fields)]


def _encode_integer(value: Value, kind: str, type_id: int) -> int:
    if not isinstance(value, Primitive) or value.category != 'int':
        raise ShapeMismatch(type_id, kind, value)

    min_value, max_value = integer_bounds(INTEGER_BITS[kind], kind[0] == 'i')
    if not min_value <= value.value <= max_value:
        raise ValueOutOfRange(type_id, kind, value.value)

    return value.value


class Encoder:
    """
    Writes values to an output buffer guided by registry types. Nested values are processed from an explicit
    stack in pre-order, so output is appended strictly left to right.
    """

    def __init__(self, registry: PortableRegistry, config: CodecConfig = None):
        self.registry = registry
        self.config = config or DEFAULT_CONFIG

    def encode_into(self, value: Value, type_id: int, output: bytearray):
        stack = [(value, type_id, 0)]

        while stack:
            value, type_id, depth = stack.pop()

            if depth > self.config.max_depth:
                raise EncodeDepthExceeded(self.config.max_depth, type_id)

            type_def = self.registry.get_type_def(type_id)

            if type_def.kind == PRIMITIVE:
                output += self.encode_primitive(value, type_def.primitive, type_id)
            elif type_def.kind == COMPACT:
                output += self.encode_compact(value, type_id)
            elif type_def.kind == BIT_SEQUENCE:
                output += self.encode_bit_sequence(value, type_id)
            else:
                children = self.open_container(value, type_id, type_def, output)
                for child in reversed(children):
                    stack.append((child[0], child[1], depth + 1))

    def encode(self, value: Value, type_id: int) -> bytes:
        output = bytearray()
        self.encode_into(value, type_id, output)
        return bytes(output)

    def encode_primitive(self, value: Value, kind: str, type_id: int) -> bytes:
        if kind in INTEGER_BITS:
            return encode_primitive(_encode_integer(value, kind, type_id), kind)

        if not isinstance(value, Primitive) or value.category != kind:
            raise ShapeMismatch(type_id, kind, value)

        if kind == 'char' and (type(value.value) is not str or len(value.value) != 1):
            raise ShapeMismatch(type_id, kind, value)

        return encode_primitive(value.value, kind)

    def encode_compact(self, value: Value, type_id: int) -> bytes:
        kind, wrappers = self.registry.get_compact_target(type_id)

        for _ in wrappers:
            if isinstance(value, Composite):
                if len(value) != 1:
                    raise WrongLength(type_id, 1, len(value))
                value = value.values[0]

        if kind == COMPACT_UNIT:
            if _positional_items(value) != []:
                raise ShapeMismatch(type_id, 'unit', value)
            return b''

        return encode_compact(_encode_integer(value, kind, type_id))

    def encode_bit_sequence(self, value: Value, type_id: int) -> bytes:
        store_bits, order = self.registry.get_bit_sequence_format(type_id)

        if isinstance(value, Sequence):
            if not all(isinstance(item, Primitive) and item.category == 'bool' for item in value.items):
                raise ShapeMismatch(type_id, 'bit sequence', value)
            value = BitSequence.from_bools(item.value for item in value.items)

        if not isinstance(value, BitSequence):
            raise ShapeMismatch(type_id, 'bit sequence', value)

        return encode_bits(value.bits, value.length, store_bits, order)

    def open_container(self, value: Value, type_id: int, type_def, output: bytearray) -> list:
        """
        Writes any prefix of the container (length or variant index) and returns its (value, type id) children
        """
        if type_def.kind == COMPOSITE:
            return _field_children(value, type_def.fields, type_id)

        if type_def.kind == VARIANT:
            if not isinstance(value, Variant):
                raise ShapeMismatch(type_id, 'variant', value)

            variant = type_def.get_variant_by_name(value.name)
            if variant is None:
                raise VariantNameNotFound(value.name, type_id)

            output.append(variant.index)

            if len(variant.fields) == 0:
                if len(value.fields) != 0:
                    raise WrongLength(type_id, 0, len(value.fields))
                return []

            return _field_children(value.fields, variant.fields, type_id)

        if type_def.kind in (SEQUENCE, ARRAY):
            items = _positional_items(value)
            if items is None:
                raise ShapeMismatch(type_id, type_def.kind, value)

            if type_def.kind == SEQUENCE:
                output += encode_compact(len(items))
            elif len(items) != type_def.len:
                raise WrongLength(type_id, type_def.len, len(items))

            return [(item, type_def.type) for item in items]

        if type_def.kind == TUPLE:
            items = _positional_items(value)
            if items is None:
                if len(type_def.types) == 1:
                    return [(value, type_def.types[0])]
                raise ShapeMismatch(type_id, 'tuple', value)

            if len(items) != len(type_def.types):
                if len(type_def.types) == 1:
                    return [(value, type_def.types[0])]
                raise WrongLength(type_id, len(type_def.types), len(items))

            return list(zip(items, type_def.types))

        raise NotImplementedError(f'Encoding of {type_def.kind} not implemented')


def encode_value(value: Value, type_id: int, registry: PortableRegistry, config: CodecConfig = None) -> bytes:
    return Encoder(registry, config).encode(value, type_id)


def encode_value_into(value: Value, type_id: int, registry: PortableRegistry, output: bytearray,
                      config: CodecConfig = None):
    """
    Appends the encoding of `value` to `output`. On error `output` is truncated back to its original length
    """
    start = len(output)
    try:
        Encoder(registry, config).encode_into(value, type_id, output)
    except Exception:
        del output[start:]
        raise


def encode(value, type_id: int, registry, config: CodecConfig = None) -> bytes:
    """
    Encodes `value` as registry type `type_id`

    Parameters
    ----------
    value: Value, or plain Python data which is converted first
    type_id: id of the registry type
    registry: PortableRegistry or MetadataCatalog to resolve the type in
    config: optional CodecConfig

    Returns
    -------
    bytes
    """
    registry = getattr(registry, 'registry', registry)

    if not isinstance(value, Value):
        value = deserialize_value(value, type_id, registry, config)

    return encode_value(value, type_id, registry, config)
