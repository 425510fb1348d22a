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

from runtimecodec.constants import DISPATCH_ERROR_VARIANTS, TOKEN_ERROR_VARIANTS, ARITHMETIC_ERROR_VARIANTS, \
    TRANSACTIONAL_ERROR_VARIANTS
from runtimecodec.exceptions import NotEnoughInput, RemainingBytesNotEmpty, DecodeError
from runtimecodec.scale.catalog import MetadataCatalog
from runtimecodec.scale.decode import decode
from runtimecodec.scale.value import Variant, Composite, Sequence, Primitive
from runtimecodec.utils import hex_to_bytes

logger = logging.getLogger(__name__)

NESTED_ERROR_VARIANTS = {
    'Token': TOKEN_ERROR_VARIANTS,
    'Arithmetic': ARITHMETIC_ERROR_VARIANTS,
    'Transactional': TRANSACTIONAL_ERROR_VARIANTS
}


class DispatchErrorDetails:

    @property
    def value(self) -> dict:
        raise NotImplementedError()

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self.value == other.value

    def __hash__(self):
        return hash(repr(self.value))

    def __repr__(self):
        return f'<{self.__class__.__name__} {self.value}>'


class ModuleError(DispatchErrorDetails):
    """
    Error raised by a pallet, resolved to its name and documentation
    """

    def __init__(self, pallet: str, error: str, docs, pallet_index: int, error_bytes: bytes):
        self.pallet = pallet
        self.error = error
        self.docs = tuple(docs)
        self.pallet_index = pallet_index
        self.error_bytes = bytes(error_bytes)

    @property
    def error_index(self) -> int:
        return self.error_bytes[0]

    @property
    def description(self) -> str:
        return ' '.join(self.docs).strip()

    @property
    def value(self) -> dict:
        return {
            'type': 'Module', 'pallet': self.pallet, 'name': self.error, 'docs': list(self.docs),
            'pallet_index': self.pallet_index, 'error_index': self.error_index
        }


class ErrorNotFound(DispatchErrorDetails):
    """
    Module error whose pallet or error index is not in the catalog
    """

    def __init__(self, module: int, index: int):
        self.module = module
        self.index = index

    @property
    def value(self) -> dict:
        return {'type': 'ErrorNotFound', 'module': self.module, 'index': self.index}


class SimpleDispatchError(DispatchErrorDetails):
    """
    Dispatch error category without further detail, e.g. `BadOrigin`
    """

    def __init__(self, name: str):
        self.name = name

    @property
    def value(self) -> dict:
        return {'type': self.name}


class NestedDispatchError(DispatchErrorDetails):
    """
    `Token`, `Arithmetic` or `Transactional` dispatch error with the name of the inner variant
    """

    def __init__(self, category: str, name: str):
        self.category = category
        self.name = name

    @property
    def value(self) -> dict:
        return {'type': self.category, 'name': self.name}


class OtherDispatchError(DispatchErrorDetails):
    """
    Dispatch error that could not be decoded, the raw bytes are retained
    """

    def __init__(self, raw: bytes, message: str = None):
        self.raw = bytes(raw)
        self.message = message

    @property
    def value(self) -> dict:
        return {'type': 'Other', 'raw': f'0x{self.raw.hex()}', 'message': self.message}


def decode_module_error(catalog: MetadataCatalog, raw: bytes) -> DispatchErrorDetails:
    """
    Resolves a module error payload: a pallet index byte followed by either the legacy single error byte or
    the current 4 byte error array of which the first byte is the error index
    """
    if len(raw) < 2:
        raise NotEnoughInput(2, len(raw), 0)

    if len(raw) > 5:
        raise RemainingBytesNotEmpty(len(raw) - 5)

    pallet_index = raw[0]
    error_bytes = raw[1:5] if len(raw) >= 5 else raw[1:]

    module_error = catalog.get_module_error(pallet_index, error_bytes[0])

    if module_error is None:
        return ErrorNotFound(pallet_index, error_bytes[0])

    pallet, error = module_error

    return ModuleError(
        pallet=pallet.name, error=error.name, docs=error.docs, pallet_index=pallet_index, error_bytes=error_bytes
    )


def _module_payload(fields: Composite) -> bytes:
    # ModuleError { index: u8, error: [u8; 4] } or the legacy { index: u8, error: u8 }
    while len(fields) == 1 and isinstance(fields.values[0], Composite):
        fields = fields.values[0]

    payload = bytearray()
    for item in fields.values:
        if isinstance(item, Sequence):
            payload += item.to_bytes()
        elif isinstance(item, Primitive):
            payload.append(item.value)
        else:
            raise ValueError(f'Unexpected module error field {item!r}')
    return bytes(payload)


def _from_registry(catalog: MetadataCatalog, raw: bytes) -> DispatchErrorDetails:
    value = decode(raw, catalog.dispatch_error_type, catalog.registry, check_remaining=False)

    if value.name == 'Module':
        return decode_module_error(catalog, _module_payload(value.fields))

    if len(value.fields) == 1 and isinstance(value.fields.values[0], Variant):
        return NestedDispatchError(value.name, value.fields.values[0].name)

    return SimpleDispatchError(value.name)


def _from_builtin_variants(catalog: MetadataCatalog, raw: bytes) -> DispatchErrorDetails:
    if raw[0] >= len(DISPATCH_ERROR_VARIANTS):
        raise ValueError(f'Unknown DispatchError variant {raw[0]}')

    name = DISPATCH_ERROR_VARIANTS[raw[0]]

    if name == 'Module':
        return decode_module_error(catalog, raw[1:])

    if name in NESTED_ERROR_VARIANTS:
        if len(raw) < 2 or raw[1] >= len(NESTED_ERROR_VARIANTS[name]):
            raise ValueError(f'Unknown {name} error variant')
        return NestedDispatchError(name, NESTED_ERROR_VARIANTS[name][raw[1]])

    return SimpleDispatchError(name)


def decode_dispatch_error(catalog: MetadataCatalog, raw: Union[bytes, bytearray, str], tagged: bool = False) \
        -> DispatchErrorDetails:
    """
    Decodes the error reported for a failed dispatch

    Parameters
    ----------
    catalog: MetadataCatalog of the runtime that produced the error
    raw: by default the module error payload `[pallet_index, error_index, ...]`; with `tagged=True` a complete
    `sp_runtime::DispatchError` starting with its variant byte
    tagged: see `raw`

    Returns
    -------
    ModuleError, ErrorNotFound, SimpleDispatchError, NestedDispatchError or OtherDispatchError
    """
    raw = hex_to_bytes(raw)

    if not tagged:
        return decode_module_error(catalog, raw)

    if len(raw) == 0:
        raise NotEnoughInput(1, 0, 0)

    try:
        if catalog.dispatch_error_type is not None:
            return _from_registry(catalog, raw)
        return _from_builtin_variants(catalog, raw)
    except (DecodeError, ValueError) as e:
        logger.warning(f'Could not decode dispatch error 0x{raw.hex()}: {e}')
        return OtherDispatchError(raw, str(e))
