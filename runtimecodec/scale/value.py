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
from typing import Optional, Iterable, Union

from runtimecodec.scale.registry import INTEGER_BITS


class Value:
    """
    Decoded form of any SCALE value. Values carry no type id, the registry type used to decode one is needed
    again to encode it.
    """
    __slots__ = ()

    def __ne__(self, other):
        return not self == other


class Primitive(Value):
    """
    Scalar value. `kind` is one of the registry primitive kinds; integers of different widths compare equal
    when their numeric value is equal, but a bool, a char, a str and an int never compare equal.
    """
    __slots__ = ('kind', 'value')

    def __init__(self, value: Union[bool, int, str], kind: str = None):
        if kind is None:
            if type(value) is bool:
                kind = 'bool'
            elif type(value) is int:
                kind = 'u128' if value >= 0 else 'i128'
            elif type(value) is str:
                kind = 'str'
            else:
                raise TypeError(f'Cannot infer primitive kind for {value!r}')

        self.kind = kind
        self.value = value

    @classmethod
    def char(cls, value: str) -> 'Primitive':
        if type(value) is not str or len(value) != 1:
            raise ValueError('char must be a string of length 1')
        return cls(value, 'char')

    @property
    def category(self) -> str:
        if self.kind in INTEGER_BITS:
            return 'int'
        return self.kind

    def __eq__(self, other):
        if not isinstance(other, Primitive):
            return NotImplemented
        return self.category == other.category and self.value == other.value

    def __hash__(self):
        return hash((self.category, self.value))

    def __repr__(self):
        return f'<Primitive {self.kind} {self.value!r}>'


class Composite(Value):
    """
    Ordered fields, either all named or all unnamed
    """
    __slots__ = ('names', 'values')

    def __init__(self, values: Iterable[Value] = (), names: Optional[Iterable[str]] = None):
        self.values = list(values)
        self.names = list(names) if names is not None else None

        if self.names is not None and len(self.names) != len(self.values):
            raise ValueError('Number of names does not match number of values')

    @classmethod
    def named(cls, fields) -> 'Composite':
        """
        Create a named composite from a dict or a list of (name, value) pairs
        """
        if isinstance(fields, dict):
            fields = fields.items()
        fields = list(fields)
        return cls(values=[v for _, v in fields], names=[n for n, _ in fields])

    @classmethod
    def unnamed(cls, values: Iterable[Value]) -> 'Composite':
        return cls(values=values)

    @property
    def is_named(self) -> bool:
        return self.names is not None and len(self.names) > 0

    def get(self, name: str, default=None):
        if self.names is None:
            return default
        try:
            return self.values[self.names.index(name)]
        except ValueError:
            return default

    def items(self):
        if self.names is None:
            return list(enumerate(self.values))
        return list(zip(self.names, self.values))

    def __getitem__(self, key):
        if type(key) is str:
            if self.names is None or key not in self.names:
                raise KeyError(key)
            return self.values[self.names.index(key)]
        return self.values[key]

    def __len__(self):
        return len(self.values)

    def __iter__(self):
        return iter(self.values)

    def __eq__(self, other):
        if not isinstance(other, Composite):
            return NotImplemented
        if len(self.values) == 0 and len(other.values) == 0:
            return True
        return self.is_named == other.is_named and self.names == other.names and self.values == other.values

    __hash__ = None

    def __repr__(self):
        if self.is_named:
            return '<Composite {' + ', '.join(f'{n}: {v!r}' for n, v in zip(self.names, self.values)) + '}>'
        return f'<Composite {self.values!r}>'


class Variant(Value):
    """
    One alternative of an enumeration. `index` is filled in by the decoder; when constructing a value for
    encoding it may be omitted as the index is looked up by name.
    """
    __slots__ = ('name', 'index', 'fields')

    def __init__(self, name: str, fields: Composite = None, index: int = None):
        self.name = name
        self.index = index
        self.fields = fields if fields is not None else Composite()

    def __eq__(self, other):
        if not isinstance(other, Variant):
            return NotImplemented
        if self.index is not None and other.index is not None and self.index != other.index:
            return False
        return self.name == other.name and self.fields == other.fields

    __hash__ = None

    def __repr__(self):
        if len(self.fields) == 0:
            return f'<Variant {self.name}>'
        return f'<Variant {self.name} {self.fields!r}>'


class Sequence(Value):
    """
    Ordered items of a sequence, a fixed size array or a tuple, told apart by `kind`
    """
    __slots__ = ('items', 'kind')

    def __init__(self, items: Iterable[Value] = (), kind: str = 'sequence'):
        self.items = list(items)
        self.kind = kind

    @classmethod
    def from_bytes(cls, data: bytes, kind: str = 'sequence') -> 'Sequence':
        return cls([Primitive(b, 'u8') for b in data], kind=kind)

    def to_bytes(self) -> bytes:
        return bytes(item.value for item in self.items)

    def __getitem__(self, key):
        return self.items[key]

    def __len__(self):
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __eq__(self, other):
        if not isinstance(other, Sequence):
            return NotImplemented
        return self.items == other.items

    __hash__ = None

    def __repr__(self):
        return f'<Sequence {self.kind} {self.items!r}>'


class BitSequence(Value):
    """
    Sequence of bits; bit `i` of `bits` is element `i`, independent of the wire bit order
    """
    __slots__ = ('bits', 'length')

    def __init__(self, bits: int = 0, length: int = 0):
        if length < 0 or bits < 0 or bits >> length:
            raise ValueError('bits do not fit in length')
        self.bits = bits
        self.length = length

    @classmethod
    def from_bools(cls, values: Iterable[bool]) -> 'BitSequence':
        bits = 0
        length = 0
        for position, value in enumerate(values):
            if value:
                bits |= 1 << position
            length = position + 1
        return cls(bits, length)

    def to_bools(self) -> list:
        return [bool(self.bits >> i & 1) for i in range(self.length)]

    def __getitem__(self, position: int) -> bool:
        if position < 0:
            position += self.length
        if not 0 <= position < self.length:
            raise IndexError('bit index out of range')
        return bool(self.bits >> position & 1)

    def __len__(self):
        return self.length

    def __iter__(self):
        return iter(self.to_bools())

    def __eq__(self, other):
        if not isinstance(other, BitSequence):
            return NotImplemented
        return self.length == other.length and self.bits == other.bits

    def __hash__(self):
        return hash((self.bits, self.length))

    def __repr__(self):
        return '<BitSequence ' + ''.join('1' if b else '0' for b in self.to_bools()) + '>'
