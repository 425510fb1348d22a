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
from typing import Any

from runtimecodec.config import CodecConfig, DEFAULT_CONFIG
from runtimecodec.exceptions import ShapeMismatch, WrongLength, MissingField, VariantNameNotFound, \
    EncodeDepthExceeded
from runtimecodec.scale.registry import PortableRegistry, RegistryType, PRIMITIVE, COMPACT, BIT_SEQUENCE, \
    COMPOSITE, VARIANT, SEQUENCE, ARRAY, TUPLE, INTEGER_BITS, COMPACT_UNIT, fields_are_named
from runtimecodec.scale.value import Value, Primitive, Composite, Variant, Sequence, BitSequence
from runtimecodec.utils import hex_to_bytes
from runtimecodec.utils.ss58 import ss58_to_public_key, is_ss58_address


def is_option(registry_type: RegistryType) -> bool:
    return registry_type.path == ('Option',) and registry_type.type_def.kind == VARIANT


def is_byte_type(registry: PortableRegistry, si_type_id: int) -> bool:
    type_def = registry.get_type_def(si_type_id)
    return type_def.kind == PRIMITIVE and type_def.primitive == 'u8'


def serialize_value(value: Value, type_id: int, registry: PortableRegistry) -> Any:
    """
    Converts a decoded value to plain Python data, the same form `deserialize_value` accepts:

    * named composites become dicts, unnamed composites lists; a single unnamed field is unwrapped
    * variants become their name, or `{name: payload}` when they carry fields
    * `Option` becomes None or its inner value
    * byte sequences and byte arrays become '0x' prefixed hex strings
    * bit sequences become lists of bools
    """
    registry_type = registry.get_registry_type(type_id)
    type_def = registry_type.type_def

    if type_def.kind == PRIMITIVE:
        return value.value

    if type_def.kind == COMPACT:
        while isinstance(value, Composite):
            value = value.values[0]
        if isinstance(value, Sequence):
            return None
        return value.value

    if type_def.kind == BIT_SEQUENCE:
        return value.to_bools()

    if type_def.kind == COMPOSITE:
        return _serialize_fields(value, type_def.fields, registry)

    if type_def.kind == VARIANT:
        variant = type_def.get_variant_by_name(value.name)
        if is_option(registry_type):
            if value.name == 'None':
                return None
            return _serialize_fields(value.fields, variant.fields, registry)

        if len(variant.fields) == 0:
            return value.name
        return {value.name: _serialize_fields(value.fields, variant.fields, registry)}

    if type_def.kind in (SEQUENCE, ARRAY):
        if is_byte_type(registry, type_def.type):
            return '0x' + value.to_bytes().hex()
        return [serialize_value(item, type_def.type, registry) for item in value.items]

    if type_def.kind == TUPLE:
        if len(type_def.types) == 1:
            return serialize_value(value.items[0], type_def.types[0], registry)
        return [serialize_value(item, item_type, registry) for item, item_type in zip(value.items, type_def.types)]

    raise NotImplementedError(f'Serializing {type_def.kind} not implemented')


def _serialize_fields(value: Composite, fields, registry: PortableRegistry):
    if fields_are_named(fields):
        return {field.name: serialize_value(value[field.name], field.type, registry) for field in fields}

    if len(fields) == 1:
        return serialize_value(value.values[0], fields[0].type, registry)

    return [serialize_value(item, field.type, registry) for item, field in zip(value.values, fields)]


class Deserializer:
    """
    Builds typed values from plain Python data. Besides the output of `serialize_value` it accepts bytes for
    byte sequences and SS58 addresses for 32 byte account ids.
    """

    def __init__(self, registry: PortableRegistry, config: CodecConfig = None):
        self.registry = registry
        self.config = config or DEFAULT_CONFIG

    def deserialize(self, obj: Any, type_id: int, depth: int = 0) -> Value:
        if isinstance(obj, Value):
            return obj

        if depth > self.config.max_depth:
            raise EncodeDepthExceeded(self.config.max_depth, type_id)

        registry_type = self.registry.get_registry_type(type_id)
        type_def = registry_type.type_def

        if type_def.kind == PRIMITIVE:
            return self.deserialize_primitive(obj, type_def.primitive, type_id)

        if type_def.kind == COMPACT:
            kind, wrappers = self.registry.get_compact_target(type_id)
            while type(obj) in (dict, list, tuple) and len(obj) == 1:
                obj = list(obj.values())[0] if type(obj) is dict else obj[0]
            if kind == COMPACT_UNIT:
                if obj not in (None, (), [], {}):
                    raise ShapeMismatch(type_id, 'unit', obj)
                value = Sequence(kind=TUPLE)
            else:
                value = self.deserialize_primitive(obj, kind, type_id)
            for name in reversed(wrappers):
                value = Composite([value], names=[name] if name else None)
            return value

        if type_def.kind == BIT_SEQUENCE:
            if type(obj) is str and obj[0:2] == '0b':
                obj = [c == '1' for c in obj[2:]]
            if type(obj) not in (list, tuple):
                raise ShapeMismatch(type_id, 'list of bools', obj)
            return BitSequence.from_bools(bool(b) for b in obj)

        if type_def.kind == COMPOSITE:
            return self.deserialize_fields(obj, type_def.fields, type_id, depth)

        if type_def.kind == VARIANT:
            return self.deserialize_variant(obj, registry_type, depth)

        if type_def.kind in (SEQUENCE, ARRAY):
            return self.deserialize_sequence(obj, type_def, type_id, depth)

        if type_def.kind == TUPLE:
            if len(type_def.types) == 1:
                return Sequence([self.deserialize(obj, type_def.types[0], depth + 1)], kind=TUPLE)
            if type(obj) not in (list, tuple):
                raise ShapeMismatch(type_id, 'tuple', obj)
            if len(obj) != len(type_def.types):
                raise WrongLength(type_id, len(type_def.types), len(obj))
            return Sequence(
                [self.deserialize(item, item_type, depth + 1) for item, item_type in zip(obj, type_def.types)],
                kind=TUPLE
            )

        raise NotImplementedError(f'Deserializing {type_def.kind} not implemented')

    def deserialize_primitive(self, obj: Any, kind: str, type_id: int) -> Primitive:
        if kind == 'bool':
            if type(obj) is not bool:
                raise ShapeMismatch(type_id, kind, obj)
        elif kind == 'char':
            if type(obj) is not str or len(obj) != 1:
                raise ShapeMismatch(type_id, kind, obj)
        elif kind == 'str':
            if type(obj) is not str:
                raise ShapeMismatch(type_id, kind, obj)
        elif kind in INTEGER_BITS:
            if type(obj) is str and obj[0:2] == '0x':
                obj = int(obj, 16)
            if type(obj) is not int:
                raise ShapeMismatch(type_id, kind, obj)
        return Primitive(obj, kind)

    def deserialize_fields(self, obj: Any, fields, type_id: int, depth: int) -> Composite:
        if fields_are_named(fields):
            if type(obj) is not dict:
                if len(fields) == 1:
                    return Composite.named([(fields[0].name, self.deserialize(obj, fields[0].type, depth + 1))])
                raise ShapeMismatch(type_id, 'dict', obj)

            if len(obj) != len(fields):
                for field in fields:
                    if field.name not in obj:
                        raise MissingField(type_id, field.name)
                raise WrongLength(type_id, len(fields), len(obj))

            values = []
            for field in fields:
                if field.name not in obj:
                    raise MissingField(type_id, field.name)
                values.append((field.name, self.deserialize(obj[field.name], field.type, depth + 1)))
            return Composite.named(values)

        if len(fields) == 1:
            return Composite.unnamed([self.deserialize(obj, fields[0].type, depth + 1)])

        if obj is None and len(fields) == 0:
            return Composite()

        if type(obj) not in (list, tuple):
            raise ShapeMismatch(type_id, 'list', obj)

        if len(obj) != len(fields):
            raise WrongLength(type_id, len(fields), len(obj))

        return Composite.unnamed(
            [self.deserialize(item, field.type, depth + 1) for item, field in zip(obj, fields)]
        )

    def deserialize_variant(self, obj: Any, registry_type: RegistryType, depth: int) -> Variant:
        type_def = registry_type.type_def
        type_id = registry_type.id

        if is_option(registry_type):
            if obj is None:
                return Variant('None', index=0)
            some = type_def.get_variant_by_name('Some')
            return Variant('Some', self.deserialize_fields(obj, some.fields, type_id, depth), index=some.index)

        if registry_type.name == 'MultiAddress' and type(obj) in (str, int, bytes):
            # Plain account ids and indices are accepted for the address enum
            if type(obj) is int:
                obj = {'Index': obj}
            else:
                obj = {'Id': obj}

        if type(obj) is str:
            name, payload = obj, None
        elif type(obj) is dict and len(obj) == 1:
            name, payload = list(obj.items())[0]
        else:
            raise ShapeMismatch(type_id, 'variant name or {name: payload}', obj)

        variant = type_def.get_variant_by_name(name)
        if variant is None:
            raise VariantNameNotFound(name, type_id)

        if len(variant.fields) == 0:
            if payload not in (None, (), [], {}):
                raise WrongLength(type_id, 0, 1)
            return Variant(variant.name, index=variant.index)

        if payload is None and type(obj) is str:
            raise ShapeMismatch(type_id, f'payload for variant "{name}"', obj)

        return Variant(
            variant.name, self.deserialize_fields(payload, variant.fields, type_id, depth), index=variant.index
        )

    def deserialize_sequence(self, obj: Any, type_def, type_id: int, depth: int) -> Sequence:
        kind = type_def.kind

        if is_byte_type(self.registry, type_def.type):
            if type(obj) is str:
                if obj[0:2] == '0x':
                    obj = hex_to_bytes(obj)
                elif kind == ARRAY and type_def.len == 32 and is_ss58_address(obj):
                    obj = ss58_to_public_key(obj)
                else:
                    # Plain text for a byte sequence
                    obj = obj.encode('utf-8')
            if isinstance(obj, (bytes, bytearray)):
                if kind == ARRAY and len(obj) != type_def.len:
                    raise WrongLength(type_id, type_def.len, len(obj))
                return Sequence.from_bytes(obj, kind=kind)

        if type(obj) not in (list, tuple):
            raise ShapeMismatch(type_id, kind, obj)

        if kind == ARRAY and len(obj) != type_def.len:
            raise WrongLength(type_id, type_def.len, len(obj))

        return Sequence([self.deserialize(item, type_def.type, depth + 1) for item in obj], kind=kind)


def deserialize_value(obj: Any, type_id: int, registry: PortableRegistry, config: CodecConfig = None) -> Value:
    """
    Converts plain Python data into a Value of registry type `type_id`

    Parameters
    ----------
    obj: dicts, lists, ints, bools, strings, bytes or already constructed Values
    type_id: id of the registry type
    registry: PortableRegistry to resolve the type in
    config: optional CodecConfig

    Returns
    -------
    Value
    """
    return Deserializer(registry, config).deserialize(obj, type_id)
