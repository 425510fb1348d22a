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
from types import MappingProxyType
from typing import Optional, List, Tuple

from runtimecodec.constants import DISPATCH_ERROR_PATH
from runtimecodec.exceptions import MetadataMismatch, MissingType, PalletNameNotFound, PalletIndexNotFound, \
    CallNotFound, ConstantNotFound, StorageFunctionNotFound, RuntimeApiNotFound
from runtimecodec.scale.decode import decode
from runtimecodec.scale.registry import PortableRegistry, SiField, VARIANT
from runtimecodec.utils import hex_to_bytes

logger = logging.getLogger(__name__)


class CallMetadata:

    def __init__(self, name: str, index: int, fields: Tuple[SiField, ...], docs=()):
        self.name = name
        self.index = index
        self.fields = tuple(fields)
        self.docs = tuple(docs)

    @property
    def args(self) -> List[Tuple[str, int]]:
        return [(field.name, field.type) for field in self.fields]

    def __repr__(self):
        return f'<CallMetadata {self.name} ({self.index})>'


class EventMetadata:

    def __init__(self, name: str, index: int, fields: Tuple[SiField, ...], docs=()):
        self.name = name
        self.index = index
        self.fields = tuple(fields)
        self.docs = tuple(docs)

    @property
    def args(self) -> List[Tuple[Optional[str], int]]:
        return [(field.name, field.type) for field in self.fields]

    def __repr__(self):
        return f'<EventMetadata {self.name} ({self.index})>'


class ErrorMetadata:

    def __init__(self, name: str, index: int, docs=()):
        self.name = name
        self.index = index
        self.docs = tuple(docs)

    @property
    def description(self) -> str:
        return ' '.join(self.docs).strip()

    def __repr__(self):
        return f'<ErrorMetadata {self.name} ({self.index})>'


class ConstantMetadata:

    def __init__(self, name: str, type: int, value: bytes, docs=()):
        self.name = name
        self.type = type
        self.value = value
        self.docs = tuple(docs)

    def __repr__(self):
        return f'<ConstantMetadata {self.name}>'


class StorageEntryMetadata:
    """
    Storage entry of a pallet; `type` is either `{'Plain': type_id}` or
    `{'Map': {'hashers': [...], 'key': type_id, 'value': type_id}}`
    """

    def __init__(self, name: str, modifier: str, type: dict, default: bytes, docs=()):
        self.name = name
        self.modifier = modifier
        self.type = type
        self.default = default
        self.docs = tuple(docs)

    @property
    def is_map(self) -> bool:
        return 'Map' in self.type

    def get_value_type_id(self) -> int:
        if 'Plain' in self.type:
            return self.type['Plain']
        return self.type['Map']['value']

    def get_key_type_id(self) -> Optional[int]:
        if self.is_map:
            return self.type['Map']['key']

    def get_param_hashers(self) -> List[str]:
        if self.is_map:
            return list(self.type['Map']['hashers'])
        return []

    def get_params_type_ids(self, registry: PortableRegistry) -> List[int]:
        """
        Type ids of the individual key parameters; maps with more than one hasher use a tuple key type
        """
        if not self.is_map:
            return []

        key_type_id = self.type['Map']['key']
        hashers = self.type['Map']['hashers']

        if len(hashers) == 1:
            return [key_type_id]

        key_type_def = registry.get_type_def(key_type_id)
        if key_type_def.kind != 'tuple' or len(key_type_def.types) != len(hashers):
            raise MetadataMismatch(
                f'Storage entry "{self.name}" has {len(hashers)} hashers but key type {key_type_id} does not match',
                type_id=key_type_id
            )
        return list(key_type_def.types)

    def __repr__(self):
        return f'<StorageEntryMetadata {self.name}>'


class PalletMetadata:

    def __init__(self, name: str, index: int, docs=(), storage_prefix: Optional[str] = None,
                 call_type: Optional[int] = None, event_type: Optional[int] = None,
                 error_type: Optional[int] = None, calls=(), events=(), errors=(), constants=(), storage=()):
        self.name = name
        self.index = index
        self.docs = tuple(docs)
        self.storage_prefix = storage_prefix
        self.call_type = call_type
        self.event_type = event_type
        self.error_type = error_type

        self.calls = MappingProxyType({call.name: call for call in calls})
        self.events = MappingProxyType({event.name: event for event in events})
        self.errors = MappingProxyType({error.name: error for error in errors})
        self.constants = MappingProxyType({constant.name: constant for constant in constants})
        self.storage = MappingProxyType({entry.name: entry for entry in storage})

        self.__calls_by_index = {call.index: call for call in calls}
        self.__events_by_index = {event.index: event for event in events}
        self.__errors_by_index = {error.index: error for error in errors}

    def get_call(self, name: str) -> CallMetadata:
        if name not in self.calls:
            raise CallNotFound(self.name, name)
        return self.calls[name]

    def get_call_by_index(self, index: int) -> Optional[CallMetadata]:
        return self.__calls_by_index.get(index)

    def get_event_by_index(self, index: int) -> Optional[EventMetadata]:
        return self.__events_by_index.get(index)

    def get_error_by_index(self, index: int) -> Optional[ErrorMetadata]:
        return self.__errors_by_index.get(index)

    def get_constant(self, name: str) -> ConstantMetadata:
        if name not in self.constants:
            raise ConstantNotFound(self.name, name)
        return self.constants[name]

    def get_storage_function(self, name: str) -> StorageEntryMetadata:
        if name not in self.storage:
            raise StorageFunctionNotFound(self.name, name)
        return self.storage[name]

    def __repr__(self):
        return f'<PalletMetadata {self.name} ({self.index})>'


class RuntimeApiMethodMetadata:

    def __init__(self, name: str, inputs: List[Tuple[str, int]], output: int, docs=()):
        self.name = name
        self.inputs = tuple(inputs)
        self.output = output
        self.docs = tuple(docs)

    def __repr__(self):
        return f'<RuntimeApiMethodMetadata {self.name}>'


class RuntimeApiMetadata:

    def __init__(self, name: str, methods: List[RuntimeApiMethodMetadata], docs=()):
        self.name = name
        self.methods = MappingProxyType({method.name: method for method in methods})
        self.docs = tuple(docs)

    def get_method(self, name: str) -> RuntimeApiMethodMetadata:
        if name not in self.methods:
            raise RuntimeApiNotFound(f'{self.name}_{name}')
        return self.methods[name]

    def __repr__(self):
        return f'<RuntimeApiMetadata {self.name}>'


class SignedExtensionMetadata:

    def __init__(self, identifier: str, type: int, additional_signed: int):
        self.identifier = identifier
        self.type = type
        self.additional_signed = additional_signed

    def __repr__(self):
        return f'<SignedExtensionMetadata {self.identifier}>'


class ExtrinsicMetadata:

    def __init__(self, version: int, address_type: int, call_type: int, signature_type: int, extra_type: int,
                 signed_extensions: List[SignedExtensionMetadata] = ()):
        self.version = version
        self.address_type = address_type
        self.call_type = call_type
        self.signature_type = signature_type
        self.extra_type = extra_type
        self.signed_extensions = tuple(signed_extensions)


class MetadataCatalog:
    """
    Everything known about a runtime from its metadata: the type registry plus pallets, extrinsic format,
    runtime APIs, outer enums and custom values. A catalog is never modified after construction, a runtime
    upgrade produces a new one.
    """

    def __init__(self, registry: PortableRegistry, pallets: List[PalletMetadata], extrinsic: ExtrinsicMetadata,
                 runtime_type: int, apis: List[RuntimeApiMetadata] = (), outer_enums: dict = None,
                 custom: dict = None, metadata_version: int = 15):
        self.registry = registry
        self.pallets = tuple(pallets)
        self.extrinsic = extrinsic
        self.runtime_type = runtime_type
        self.apis = MappingProxyType({api.name: api for api in apis})
        self.outer_enums = MappingProxyType(dict(outer_enums or {}))
        self.custom = MappingProxyType(dict(custom or {}))
        self.metadata_version = metadata_version
        self.dispatch_error_type = registry.find_si_type_id(DISPATCH_ERROR_PATH)

        self.__pallets_by_name = {pallet.name: pallet for pallet in self.pallets}
        self.__pallets_by_index = {pallet.index: pallet for pallet in self.pallets}

    @classmethod
    def create_from_document(cls, document: dict, metadata_version: int = 15) -> 'MetadataCatalog':
        """
        Builds a catalog from a V15 metadata document, as produced by `decode_metadata` and the migrations

        Parameters
        ----------
        document: V15 metadata body
        metadata_version: version of the original blob, before migration

        Returns
        -------
        MetadataCatalog
        """
        registry = PortableRegistry.from_document(document['types'])

        def check_type(si_type_id, referenced_by):
            if si_type_id not in registry:
                raise MissingType(si_type_id, referenced_by=referenced_by)
            return si_type_id

        pallets = [cls.__create_pallet(registry, pallet, check_type) for pallet in document['pallets']]

        extrinsic_doc = document['extrinsic']
        extrinsic = ExtrinsicMetadata(
            version=extrinsic_doc['version'],
            address_type=check_type(extrinsic_doc['address_type'], 'extrinsic'),
            call_type=check_type(extrinsic_doc['call_type'], 'extrinsic'),
            signature_type=check_type(extrinsic_doc['signature_type'], 'extrinsic'),
            extra_type=check_type(extrinsic_doc['extra_type'], 'extrinsic'),
            signed_extensions=[
                SignedExtensionMetadata(
                    identifier=se['identifier'],
                    type=check_type(se['ty'], se['identifier']),
                    additional_signed=check_type(se['additional_signed'], se['identifier'])
                ) for se in extrinsic_doc['signed_extensions']
            ]
        )

        apis = [
            RuntimeApiMetadata(
                name=api['name'],
                methods=[
                    RuntimeApiMethodMetadata(
                        name=method['name'],
                        inputs=[(i['name'], check_type(i['type'], f"{api['name']}_{method['name']}"))
                                for i in method['inputs']],
                        output=check_type(method['output'], f"{api['name']}_{method['name']}"),
                        docs=method['docs']
                    ) for method in api['methods']
                ],
                docs=api['docs']
            ) for api in document['apis']
        ]

        outer_enums = {
            name: check_type(document['outer_enums'][f'{name}_type'], 'outer_enums')
            for name in ('call', 'event', 'error')
        }

        custom = {
            name: (check_type(item['ty'], name), hex_to_bytes(item['value']))
            for name, item in document['custom']['map']
        }

        return cls(
            registry=registry,
            pallets=pallets,
            extrinsic=extrinsic,
            runtime_type=check_type(document['runtime_type'], 'runtime'),
            apis=apis,
            outer_enums=outer_enums,
            custom=custom,
            metadata_version=metadata_version
        )

    @staticmethod
    def __variants_of(registry: PortableRegistry, type_id: int, pallet_name: str, kind: str):
        type_def = registry.get_type_def(type_id)
        if type_def.kind != VARIANT:
            raise MetadataMismatch(f'{kind} type of pallet "{pallet_name}" is not a variant', type_id=type_id)
        return type_def.variants

    @classmethod
    def __create_pallet(cls, registry: PortableRegistry, pallet: dict, check_type) -> PalletMetadata:
        name = pallet['name']

        calls = []
        call_type = None
        if pallet['calls'] is not None:
            call_type = check_type(pallet['calls']['ty'], name)
            calls = [
                CallMetadata(v.name, v.index, v.fields, v.docs)
                for v in cls.__variants_of(registry, call_type, name, 'Call')
            ]

        events = []
        event_type = None
        if pallet['event'] is not None:
            event_type = check_type(pallet['event']['ty'], name)
            events = [
                EventMetadata(v.name, v.index, v.fields, v.docs)
                for v in cls.__variants_of(registry, event_type, name, 'Event')
            ]

        errors = []
        error_type = None
        if pallet['error'] is not None:
            error_type = check_type(pallet['error']['ty'], name)
            errors = [
                ErrorMetadata(v.name, v.index, v.docs)
                for v in cls.__variants_of(registry, error_type, name, 'Error')
            ]

        constants = [
            ConstantMetadata(
                name=c['name'], type=check_type(c['type'], name), value=hex_to_bytes(c['value']),
                docs=c['documentation']
            ) for c in pallet['constants']
        ]

        storage = []
        storage_prefix = None
        if pallet['storage'] is not None:
            storage_prefix = pallet['storage']['prefix']
            for entry in pallet['storage']['entries']:
                entry_type = entry['type']
                if 'Plain' in entry_type:
                    check_type(entry_type['Plain'], name)
                else:
                    check_type(entry_type['Map']['key'], name)
                    check_type(entry_type['Map']['value'], name)
                storage.append(StorageEntryMetadata(
                    name=entry['name'], modifier=entry['modifier'], type=entry_type,
                    default=hex_to_bytes(entry['default']), docs=entry['documentation']
                ))

        return PalletMetadata(
            name=name, index=pallet['index'], docs=pallet.get('docs') or (), storage_prefix=storage_prefix,
            call_type=call_type, event_type=event_type, error_type=error_type, calls=calls, events=events,
            errors=errors, constants=constants, storage=storage
        )

    def get_metadata_pallet(self, name: str) -> PalletMetadata:
        try:
            return self.__pallets_by_name[name]
        except KeyError:
            raise PalletNameNotFound(name)

    def get_pallet_by_index(self, index: int) -> PalletMetadata:
        try:
            return self.__pallets_by_index[index]
        except KeyError:
            raise PalletIndexNotFound(index)

    def get_module_error(self, module_index: int, error_index: int) -> Optional[Tuple[PalletMetadata, ErrorMetadata]]:
        pallet = self.__pallets_by_index.get(module_index)
        if pallet is None:
            return None
        error = pallet.get_error_by_index(error_index)
        if error is None:
            return None
        return pallet, error

    def get_api(self, name: str) -> RuntimeApiMetadata:
        if name not in self.apis:
            raise RuntimeApiNotFound(name)
        return self.apis[name]

    def get_signed_extensions(self) -> dict:
        return {se.identifier: se for se in self.extrinsic.signed_extensions}

    def get_constant(self, pallet_name: str, constant_name: str) -> ConstantMetadata:
        return self.get_metadata_pallet(pallet_name).get_constant(constant_name)

    def get_storage_function(self, pallet_name: str, storage_name: str) -> StorageEntryMetadata:
        return self.get_metadata_pallet(pallet_name).get_storage_function(storage_name)

    def __repr__(self):
        return f'<MetadataCatalog V{self.metadata_version} pallets={len(self.pallets)} types={len(self.registry)}>'


def get_constant(catalog: MetadataCatalog, pallet_name: str, constant_name: str, config=None):
    """
    Decodes the value of a pallet constant

    Parameters
    ----------
    catalog: MetadataCatalog of the runtime
    pallet_name: name of the pallet, e.g. "System"
    constant_name: name of the constant, e.g. "SS58Prefix"
    config: optional CodecConfig

    Returns
    -------
    Value
    """
    constant = catalog.get_constant(pallet_name, constant_name)
    return decode(constant.value, constant.type, catalog.registry, config=config)
