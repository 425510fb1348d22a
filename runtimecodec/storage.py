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
from typing import Optional, Union

from runtimecodec.config import CodecConfig
from runtimecodec.exceptions import ArityMismatch
from runtimecodec.scale.catalog import MetadataCatalog, StorageEntryMetadata
from runtimecodec.scale.decode import decode
from runtimecodec.scale.encode import Encoder
from runtimecodec.scale.serialize import Deserializer
from runtimecodec.scale.value import Value
from runtimecodec.utils import hex_to_bytes
from runtimecodec.utils.hasher import xxh128, get_hasher

logger = logging.getLogger(__name__)


class StorageKey:
    """
    A StorageKey instance is a representation of a single state entry.

    Substrate uses a simple key-value data store implemented as a database-backed, modified Merkle tree.
    The key is `twox128(pallet prefix) ++ twox128(storage name) ++ hasher(param)...`
    """

    def __init__(self, pallet: str, storage_function: str, params: list, data: bytes,
                 value_type_id: int, metadata: StorageEntryMetadata):
        self.pallet = pallet
        self.storage_function = storage_function
        self.params = params
        self.data = data
        self.value_type_id = value_type_id
        self.metadata = metadata

    @classmethod
    def create_from_storage_function(cls, pallet: str, storage_function: str, params: Optional[list],
                                     catalog: MetadataCatalog, config: CodecConfig = None) -> 'StorageKey':
        """
        Create a StorageKey instance providing storage function details

        Parameters
        ----------
        pallet: name of pallet
        storage_function: name of storage function
        params: Optional list of parameters in case of a Mapped storage function
        catalog: MetadataCatalog of the runtime
        config: optional CodecConfig

        Returns
        -------
        StorageKey
        """
        if params is None:
            params = []

        pallet_metadata = catalog.get_metadata_pallet(pallet)
        storage_item = pallet_metadata.get_storage_function(storage_function)

        param_type_ids = storage_item.get_params_type_ids(catalog.registry)
        hashers = storage_item.get_param_hashers()

        # Partial keys are allowed to iterate over map entries
        if len(params) > len(param_type_ids):
            raise ArityMismatch(f'{pallet}.{storage_function}', len(param_type_ids), len(params))

        deserializer = Deserializer(catalog.registry, config)
        encoder = Encoder(catalog.registry, config)

        data = xxh128(pallet_metadata.storage_prefix.encode()) + xxh128(storage_function.encode())

        for param, type_id, hasher in zip(params, param_type_ids, hashers):
            if type(param) is bytes:
                param_data = param
            else:
                param_data = encoder.encode(deserializer.deserialize(param, type_id), type_id)
            data += get_hasher(hasher)(param_data)

        return cls(
            pallet=pallet, storage_function=storage_function, params=params, data=data,
            value_type_id=storage_item.get_value_type_id(), metadata=storage_item
        )

    def to_hex(self) -> str:
        return f'0x{self.data.hex()}'

    def __repr__(self):
        if self.pallet and self.storage_function:
            return f'<StorageKey(pallet={self.pallet}, storage_function={self.storage_function}, params={self.params})>'
        return super().__repr__()


def create_storage_key(catalog: MetadataCatalog, pallet: str, storage_function: str, params: Optional[list] = None,
                       config: CodecConfig = None) -> StorageKey:
    return StorageKey.create_from_storage_function(pallet, storage_function, params, catalog, config=config)


def decode_storage_value(catalog: MetadataCatalog, pallet: str, storage_function: str,
                         data: Union[bytes, str, None], config: CodecConfig = None) -> Optional[Value]:
    """
    Decodes the stored value of a storage function. When nothing is stored, an `Optional` entry yields None
    and a `Default` entry its decoded default bytes.

    Parameters
    ----------
    catalog: MetadataCatalog of the runtime
    pallet: name of pallet
    storage_function: name of storage function
    data: raw storage value or None when the key is absent
    config: optional CodecConfig

    Returns
    -------
    Value or None
    """
    storage_item = catalog.get_storage_function(pallet, storage_function)

    if data is None:
        if storage_item.modifier == 'Optional':
            return None
        data = storage_item.default
        logger.debug(f'No value stored for {pallet}.{storage_function}, using default')

    return decode(hex_to_bytes(data), storage_item.get_value_type_id(), catalog.registry, config=config)
