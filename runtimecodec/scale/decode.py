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
from typing import Union

from scalecodec.base import ScaleBytes

from runtimecodec.config import CodecConfig, DEFAULT_CONFIG
from runtimecodec.exceptions import NotEnoughInput, RemainingBytesNotEmpty, VariantIndexNotFound, \
    MaxDepthExceeded, InvalidCompactEncoding, SequenceLengthExceeded
from runtimecodec.scale.primitives import decode_compact, decode_primitive, decode_bits, remaining_length, \
    read_bytes
from runtimecodec.scale.registry import PortableRegistry, PRIMITIVE, COMPACT, BIT_SEQUENCE, COMPOSITE, VARIANT, \
    SEQUENCE, ARRAY, TUPLE, INTEGER_BITS, COMPACT_UNIT
from runtimecodec.scale.value import Value, Primitive, Composite, Variant, Sequence, BitSequence
from runtimecodec.utils import to_scale_bytes

logger = logging.getLogger(__name__)


class _Frame:
    """
    Partially decoded container on the work stack
    """
    __slots__ = ('kind', 'type_ids', 'element_type_id', 'count', 'names', 'items', 'variant')

    def __init__(self, kind, count, type_ids=None, element_type_id=None, names=None, variant=None):
        self.kind = kind
        self.count = count
        self.type_ids = type_ids
        self.element_type_id = element_type_id
        self.names = names
        self.variant = variant
        self.items = []

    def next_type_id(self):
        position = len(self.items)
        if position >= self.count:
            return None
        if self.element_type_id is not None:
            return self.element_type_id
        return self.type_ids[position]

    def finish(self) -> Value:
        if self.kind == COMPOSITE:
            return Composite(self.items, names=self.names)
        if self.kind == VARIANT:
            return Variant(self.variant.name, Composite(self.items, names=self.names), index=self.variant.index)
        return Sequence(self.items, kind=self.kind)


def _field_names(fields):
    if len(fields) > 0 and all(f.name for f in fields):
        return [f.name for f in fields]


def _open_frame(data: ScaleBytes, type_id: int, type_def, registry: PortableRegistry, config: CodecConfig) -> _Frame:
    if type_def.kind == COMPOSITE:
        return _Frame(
            COMPOSITE, len(type_def.fields), type_ids=[f.type for f in type_def.fields],
            names=_field_names(type_def.fields)
        )

    if type_def.kind == VARIANT:
        index = read_bytes(data, 1)[0]
        variant = type_def.get_variant_by_index(index)
        if variant is None:
            raise VariantIndexNotFound(index, type_id)
        return _Frame(
            VARIANT, len(variant.fields), type_ids=[f.type for f in variant.fields],
            names=_field_names(variant.fields), variant=variant
        )

    if type_def.kind == SEQUENCE:
        offset = data.offset
        count = decode_compact(data, strict=config.strict_compact)
        element_size = registry.min_encoded_size(type_def.type)
        if element_size == 0 and count > config.max_zero_size_length:
            raise SequenceLengthExceeded(count, config.max_zero_size_length, type_id)
        needed = count * element_size
        if needed > remaining_length(data):
            # Length prefix cannot be backed by the remaining input
            raise NotEnoughInput(needed, remaining_length(data), offset)
        return _Frame(SEQUENCE, count, element_type_id=type_def.type)

    if type_def.kind == ARRAY:
        return _Frame(ARRAY, type_def.len, element_type_id=type_def.type)

    if type_def.kind == TUPLE:
        return _Frame(TUPLE, len(type_def.types), type_ids=list(type_def.types))

    raise NotImplementedError(f'Decoding of {type_def.kind} not implemented')


def _decode_leaf(data: ScaleBytes, type_id: int, type_def, registry: PortableRegistry, config: CodecConfig) -> Value:
    if type_def.kind == PRIMITIVE:
        return Primitive(decode_primitive(data, type_def.primitive, strict=config.strict_compact), type_def.primitive)

    if type_def.kind == COMPACT:
        kind, wrappers = registry.get_compact_target(type_id)
        if kind == COMPACT_UNIT:
            value = Sequence(kind=TUPLE)
        else:
            offset = data.offset
            value = Primitive(decode_compact(data, strict=config.strict_compact), kind)
            if value.value >> INTEGER_BITS[kind]:
                raise InvalidCompactEncoding(f'value exceeds {kind}', offset)
        for name in reversed(wrappers):
            value = Composite([value], names=[name] if name else None)
        return value

    store_bits, order = registry.get_bit_sequence_format(type_id)
    bits, length = decode_bits(data, store_bits, order, strict=config.strict_compact)
    return BitSequence(bits, length)


def decode_value(data: ScaleBytes, type_id: int, registry: PortableRegistry, config: CodecConfig = None) -> Value:
    """
    Decodes one value of `type_id` starting at the cursor of `data`, leaving the cursor after the consumed bytes.

    Nesting is walked with an explicit stack of partially built containers, bounded by `config.max_depth`.
    """
    config = config or DEFAULT_CONFIG
    stack = []
    current_type_id = type_id

    while True:
        if len(stack) > config.max_depth:
            raise MaxDepthExceeded(config.max_depth, current_type_id)

        type_def = registry.get_type_def(current_type_id)

        if type_def.kind in (PRIMITIVE, COMPACT, BIT_SEQUENCE):
            value = _decode_leaf(data, current_type_id, type_def, registry, config)
        else:
            frame = _open_frame(data, current_type_id, type_def, registry, config)
            next_type_id = frame.next_type_id()
            if next_type_id is not None:
                stack.append(frame)
                current_type_id = next_type_id
                continue
            value = frame.finish()

        # Hand the completed value to its parents until one of them needs another child
        while stack:
            parent = stack[-1]
            parent.items.append(value)
            next_type_id = parent.next_type_id()
            if next_type_id is not None:
                current_type_id = next_type_id
                break
            stack.pop()
            value = parent.finish()
        else:
            return value


def decode(data: Union[ScaleBytes, bytes, bytearray, str], type_id: int, registry,
           config: CodecConfig = None, check_remaining: bool = True) -> Value:
    """
    Decodes `data` as a value of registry type `type_id`

    Parameters
    ----------
    data: bytes, hex string or ScaleBytes
    type_id: id of the registry type
    registry: PortableRegistry or MetadataCatalog to resolve the type in
    config: optional CodecConfig
    check_remaining: raise RemainingBytesNotEmpty when the input is not fully consumed

    Returns
    -------
    Value
    """
    registry = getattr(registry, 'registry', registry)
    data = to_scale_bytes(data)
    value = decode_value(data, type_id, registry, config)

    if check_remaining and remaining_length(data) > 0:
        raise RemainingBytesNotEmpty(remaining_length(data))

    return value
