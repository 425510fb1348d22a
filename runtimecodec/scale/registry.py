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
from typing import Optional, List, Iterable, Tuple

from runtimecodec.exceptions import TypeNotFound, MissingType, InvalidTypeDef

logger = logging.getLogger(__name__)

PRIMITIVE = 'primitive'
COMPOSITE = 'composite'
VARIANT = 'variant'
SEQUENCE = 'sequence'
ARRAY = 'array'
TUPLE = 'tuple'
COMPACT = 'compact'
BIT_SEQUENCE = 'bitsequence'

INTEGER_BITS = {
    'u8': 8, 'u16': 16, 'u32': 32, 'u64': 64, 'u128': 128, 'u256': 256,
    'i8': 8, 'i16': 16, 'i32': 32, 'i64': 64, 'i128': 128, 'i256': 256
}

PRIMITIVE_KINDS = ('bool', 'char', 'str') + tuple(INTEGER_BITS.keys())

# Compact target of the unit type
COMPACT_UNIT = 'unit'

BIT_STORE_KINDS = {'u8': 8, 'u16': 16, 'u32': 32, 'u64': 64}
BIT_ORDERS = ('Lsb0', 'Msb0')


class SiField:

    __slots__ = ('name', 'type', 'type_name', 'docs')

    def __init__(self, name: Optional[str], type: int, type_name: Optional[str] = None, docs: Iterable[str] = ()):
        self.name = name
        self.type = type
        self.type_name = type_name
        self.docs = tuple(docs)

    def __repr__(self):
        return f'<SiField {self.name}: {self.type}>'


class SiVariant:

    __slots__ = ('name', 'index', 'fields', 'docs')

    def __init__(self, name: str, index: int, fields: Iterable[SiField] = (), docs: Iterable[str] = ()):
        self.name = name
        self.index = index
        self.fields = tuple(fields)
        self.docs = tuple(docs)

    @property
    def is_named(self) -> bool:
        return fields_are_named(self.fields)

    def __repr__(self):
        return f'<SiVariant {self.name} ({self.index})>'


def fields_are_named(fields) -> bool:
    return len(fields) > 0 and all(f.name for f in fields)


class TypeDef:
    """
    Shape of a registry type. Subclasses are distinguished by their `kind` tag, which is what the decode and
    encode engines dispatch on.
    """
    kind = None

    def referenced_type_ids(self) -> List[int]:
        return []

    def embedded_type_ids(self) -> List[int]:
        """
        Type ids that are laid out inline without any indirection; a cycle over these can never terminate
        """
        return []


class TypeDefPrimitive(TypeDef):
    kind = PRIMITIVE

    def __init__(self, primitive: str):
        if primitive == 'U8':
            primitive = 'u8'
        if primitive not in PRIMITIVE_KINDS:
            raise ValueError(f'Primitive type "{primitive}" not found')
        self.primitive = primitive

    def __repr__(self):
        return f'<TypeDefPrimitive {self.primitive}>'


class TypeDefComposite(TypeDef):
    kind = COMPOSITE

    def __init__(self, fields: Iterable[SiField]):
        self.fields = tuple(fields)

    @property
    def is_named(self) -> bool:
        return fields_are_named(self.fields)

    def referenced_type_ids(self):
        return [f.type for f in self.fields]

    def embedded_type_ids(self):
        return [f.type for f in self.fields]


class TypeDefVariant(TypeDef):
    kind = VARIANT

    def __init__(self, variants: Iterable[SiVariant]):
        self.variants = tuple(variants)
        self.__by_index = {v.index: v for v in self.variants}
        self.__by_name = {v.name: v for v in self.variants}

    def get_variant_by_index(self, index: int) -> Optional[SiVariant]:
        return self.__by_index.get(index)

    def get_variant_by_name(self, name: str) -> Optional[SiVariant]:
        return self.__by_name.get(name)

    def referenced_type_ids(self):
        return [f.type for v in self.variants for f in v.fields]


class TypeDefSequence(TypeDef):
    kind = SEQUENCE

    def __init__(self, type: int):
        self.type = type

    def referenced_type_ids(self):
        return [self.type]


class TypeDefArray(TypeDef):
    kind = ARRAY

    def __init__(self, len: int, type: int):
        self.len = len
        self.type = type

    def referenced_type_ids(self):
        return [self.type]

    def embedded_type_ids(self):
        return [self.type] if self.len > 0 else []


class TypeDefTuple(TypeDef):
    kind = TUPLE

    def __init__(self, types: Iterable[int]):
        self.types = tuple(types)

    def referenced_type_ids(self):
        return list(self.types)

    def embedded_type_ids(self):
        return list(self.types)


class TypeDefCompact(TypeDef):
    kind = COMPACT

    def __init__(self, type: int):
        self.type = type

    def referenced_type_ids(self):
        return [self.type]

    def embedded_type_ids(self):
        return [self.type]


class TypeDefBitSequence(TypeDef):
    kind = BIT_SEQUENCE

    def __init__(self, bit_store_type: int, bit_order_type: int):
        self.bit_store_type = bit_store_type
        self.bit_order_type = bit_order_type

    def referenced_type_ids(self):
        return [self.bit_store_type, self.bit_order_type]


def _fields_from_document(fields: list) -> List[SiField]:
    return [
        SiField(name=f.get('name'), type=f['type'], type_name=f.get('typeName'), docs=f.get('docs') or ())
        for f in fields
    ]


def type_def_from_document(type_def: dict) -> TypeDef:
    """
    Creates a `TypeDef` from its document form, e.g. `{'array': {'len': 32, 'type': 2}}`
    """
    if 'primitive' in type_def:
        return TypeDefPrimitive(type_def['primitive'])
    elif 'composite' in type_def:
        return TypeDefComposite(_fields_from_document(type_def['composite']['fields']))
    elif 'variant' in type_def:
        return TypeDefVariant([
            SiVariant(
                name=v['name'], index=v['index'], fields=_fields_from_document(v.get('fields') or []),
                docs=v.get('docs') or ()
            ) for v in type_def['variant']['variants']
        ])
    elif 'sequence' in type_def:
        return TypeDefSequence(type_def['sequence']['type'])
    elif 'array' in type_def:
        return TypeDefArray(type_def['array']['len'], type_def['array']['type'])
    elif 'tuple' in type_def:
        return TypeDefTuple(type_def['tuple'])
    elif 'compact' in type_def:
        return TypeDefCompact(type_def['compact']['type'])
    elif 'bitsequence' in type_def:
        return TypeDefBitSequence(type_def['bitsequence']['bit_store_type'], type_def['bitsequence']['bit_order_type'])
    else:
        raise NotImplementedError(f"RegistryTypeDef {type_def} not implemented")


class RegistryType:

    __slots__ = ('id', 'path', 'params', 'type_def', 'docs')

    def __init__(self, id: int, type_def: TypeDef, path: Iterable[str] = (), params: Iterable[tuple] = (),
                 docs: Iterable[str] = ()):
        self.id = id
        self.type_def = type_def
        self.path = tuple(path)
        # (name, Optional[type id]) pairs
        self.params = tuple(params)
        self.docs = tuple(docs)

    @property
    def name(self) -> Optional[str]:
        if self.path:
            return self.path[-1]

    def __repr__(self):
        return f'<RegistryType {self.id} {"::".join(self.path) or self.type_def.kind}>'


class PortableRegistry:
    """
    Immutable arena of registry types addressed by integer id. All references between types are validated at
    construction, so any id reachable from a registered type is guaranteed to resolve.
    """

    def __init__(self, types: Iterable[RegistryType]):
        self.__types = {}
        for registry_type in types:
            if registry_type.id in self.__types:
                raise InvalidTypeDef(registry_type.id, 'duplicate type id')
            self.__types[registry_type.id] = registry_type

        self.__path_lookup = {}
        for registry_type in self.__types.values():
            if registry_type.path:
                self.__path_lookup.setdefault('::'.join(registry_type.path).lower(), registry_type.id)

        self.__min_size = {}
        self.__compact_targets = {}
        self.__bit_formats = {}

        self.__check_references()
        self.__check_embedding()
        self.__check_compacts()
        self.__check_bit_sequences()

        logger.debug(f'Created PortableRegistry with {len(self.__types)} types')

    @classmethod
    def from_document(cls, types: list) -> 'PortableRegistry':
        """
        Creates a registry from the document form of a metadata type list

        Parameters
        ----------
        types: list of `{'id': 0, 'type': {'path': [...], 'params': [...], 'def': {...}, 'docs': [...]}}`

        Returns
        -------
        PortableRegistry
        """
        registry_types = []
        for portable_type in types:
            registry_type = portable_type['type']
            registry_types.append(RegistryType(
                id=portable_type['id'],
                type_def=type_def_from_document(registry_type['def']),
                path=registry_type.get('path') or (),
                params=[(p['name'], p.get('type')) for p in registry_type.get('params') or ()],
                docs=registry_type.get('docs') or ()
            ))
        return cls(registry_types)

    def __len__(self):
        return len(self.__types)

    def __iter__(self):
        return iter(self.__types.values())

    def __contains__(self, si_type_id):
        return si_type_id in self.__types

    def get_registry_type(self, si_type_id: int) -> RegistryType:
        try:
            return self.__types[si_type_id]
        except (KeyError, TypeError):
            raise TypeNotFound(si_type_id)

    def get_type_def(self, si_type_id: int) -> TypeDef:
        return self.get_registry_type(si_type_id).type_def

    def get_si_type_id(self, path: str) -> int:
        si_type_id = self.find_si_type_id(path)

        if si_type_id is None:
            raise TypeNotFound(path)

        return si_type_id

    def find_si_type_id(self, path) -> Optional[int]:
        if type(path) in (list, tuple):
            path = '::'.join(path)
        return self.__path_lookup.get(path.lower())

    def find_by_name(self, name: str) -> List[int]:
        """
        Ids of all types whose last path segment equals `name`
        """
        return [t.id for t in self.__types.values() if t.path and t.path[-1] == name]

    def min_encoded_size(self, si_type_id: int) -> int:
        """
        Lower bound of bytes any value of this type occupies on the wire
        """
        self.get_registry_type(si_type_id)
        return self.__min_size[si_type_id]

    def get_compact_target(self, si_type_id: int) -> Tuple[str, tuple]:
        """
        For a compact type, the unsigned integer kind that is encoded together with the chain of single-field
        composites wrapping it, outermost first. Each wrapper is the field name or None
        """
        try:
            return self.__compact_targets[si_type_id]
        except KeyError:
            raise TypeNotFound(si_type_id)

    def get_bit_sequence_format(self, si_type_id: int) -> Tuple[int, str]:
        """
        For a bit sequence type, the bit width of the store word and the bit order ('Lsb0' or 'Msb0')
        """
        try:
            return self.__bit_formats[si_type_id]
        except KeyError:
            raise TypeNotFound(si_type_id)

    def __check_references(self):
        for registry_type in self.__types.values():
            referenced = registry_type.type_def.referenced_type_ids()
            referenced += [p_type for _, p_type in registry_type.params if p_type is not None]
            for si_type_id in referenced:
                if si_type_id not in self.__types:
                    raise MissingType(si_type_id, referenced_by=registry_type.id)

    def __check_embedding(self):
        # Iterative post-order walk over inline edges: detects direct self-embedding and computes minimal sizes
        in_progress = set()

        for root_id in self.__types:
            if root_id in self.__min_size:
                continue

            stack = [(root_id, False)]
            while stack:
                si_type_id, children_done = stack.pop()

                if si_type_id in self.__min_size:
                    continue

                type_def = self.__types[si_type_id].type_def

                if children_done:
                    in_progress.discard(si_type_id)
                    self.__min_size[si_type_id] = self.__own_min_size(type_def)
                    continue

                if si_type_id in in_progress:
                    raise InvalidTypeDef(si_type_id, 'type embeds itself without indirection')

                in_progress.add(si_type_id)
                stack.append((si_type_id, True))
                for child_id in type_def.embedded_type_ids():
                    if child_id in in_progress:
                        raise InvalidTypeDef(child_id, 'type embeds itself without indirection')
                    if child_id not in self.__min_size:
                        stack.append((child_id, False))

    def __own_min_size(self, type_def: TypeDef) -> int:
        if type_def.kind == PRIMITIVE:
            if type_def.primitive == 'bool':
                return 1
            if type_def.primitive == 'char':
                return 4
            if type_def.primitive == 'str':
                return 1
            return INTEGER_BITS[type_def.primitive] // 8
        elif type_def.kind in (COMPOSITE, TUPLE):
            return sum(self.__min_size[t] for t in type_def.embedded_type_ids())
        elif type_def.kind == ARRAY:
            return type_def.len * self.__min_size[type_def.type] if type_def.len > 0 else 0
        elif type_def.kind == VARIANT:
            return 1 if type_def.variants else 0
        elif type_def.kind == COMPACT:
            return 1 if self.__min_size[type_def.type] > 0 else 0
        # Sequences and bit sequences start with at least their length prefix
        return 1

    def __check_compacts(self):
        for registry_type in self.__types.values():
            if registry_type.type_def.kind != COMPACT:
                continue

            wrappers = []
            inner = self.__types[registry_type.type_def.type]
            while inner.type_def.kind == COMPOSITE and len(inner.type_def.fields) == 1:
                wrappers.append(inner.type_def.fields[0].name)
                inner = self.__types[inner.type_def.fields[0].type]

            if inner.type_def.kind in (TUPLE, COMPOSITE) and not inner.type_def.embedded_type_ids():
                # Compact<()> occupies no bytes
                self.__compact_targets[registry_type.id] = (COMPACT_UNIT, tuple(wrappers))
                continue

            if inner.type_def.kind != PRIMITIVE or inner.type_def.primitive[0] != 'u':
                raise InvalidTypeDef(registry_type.id, 'compact must wrap an unsigned integer')

            self.__compact_targets[registry_type.id] = (inner.type_def.primitive, tuple(wrappers))

    def __check_bit_sequences(self):
        for registry_type in self.__types.values():
            type_def = registry_type.type_def
            if type_def.kind != BIT_SEQUENCE:
                continue

            store_def = self.__types[type_def.bit_store_type].type_def
            if store_def.kind != PRIMITIVE or store_def.primitive not in BIT_STORE_KINDS:
                raise InvalidTypeDef(registry_type.id, 'bit store type must be u8, u16, u32 or u64')

            order_name = self.__types[type_def.bit_order_type].name
            if order_name not in BIT_ORDERS:
                raise InvalidTypeDef(registry_type.id, f'bit order type "{order_name}" not supported')

            self.__bit_formats[registry_type.id] = (BIT_STORE_KINDS[store_def.primitive], order_name)
