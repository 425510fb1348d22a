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
import threading
from typing import Optional, Union, Callable

from scalecodec.base import ScaleBytes

from .config import CodecConfig, DEFAULT_CONFIG
from .constants import RPC_GET_METADATA, RPC_GET_RUNTIME_VERSION, RPC_SUBSCRIBE_RUNTIME_VERSION, \
    RPC_UNSUBSCRIBE_RUNTIME_VERSION
from .exceptions import SubstrateRequestException, ConfigurationError
from .interfaces import Transport
from .scale.catalog import MetadataCatalog, get_constant
from .scale.decode import decode
from .scale.dispatch_error import decode_dispatch_error, DispatchErrorDetails
from .scale.encode import encode
from .scale.events import decode_event, EventDetails
from .scale.extrinsic import compose_call, decode_call, GenericCall
from .scale.metadata import build_catalog
from .scale.serialize import serialize_value
from .storage import StorageKey, decode_storage_value

__all__ = ['RuntimeInterface']

logger = logging.getLogger(__name__)


class RuntimeInterface:

    def __init__(self, transport: Transport = None, config: CodecConfig = None, cache_metadata: bool = True):
        """
        Holds the metadata catalog of the runtime a node currently runs and replaces it on runtime upgrades

        Parameters
        ----------
        transport: Optional Transport used to retrieve runtime versions and metadata from a node
        config: CodecConfig passed to all decode and encode operations
        cache_metadata: Keep built catalogs per spec version, so switching back to a runtime does not rebuild it
        """
        if config is not None and not isinstance(config, CodecConfig):
            raise ConfigurationError('config must be a CodecConfig instance')

        self.transport = transport
        self.config = config or DEFAULT_CONFIG
        self.cache_metadata = cache_metadata

        self.runtime_version = None
        self.transaction_version = None

        self.__catalog = None
        self.__catalog_lock = threading.Lock()
        self.__metadata_cache = {}

    @staticmethod
    def debug_message(message: str):
        """
        Submits a message to the debug logger

        Parameters
        ----------
        message: str Debug message

        Returns
        -------

        """
        logger.debug(message)

    @property
    def catalog(self) -> Optional[MetadataCatalog]:
        return self.__catalog

    @property
    def metadata(self) -> Optional[MetadataCatalog]:
        return self.__catalog

    def swap_catalog(self, catalog: MetadataCatalog, expected: MetadataCatalog = None,
                     spec_version: int = None) -> bool:
        """
        Atomically replaces the current catalog. When `expected` is given the swap only happens if the current
        catalog is still that instance

        Parameters
        ----------
        catalog: the new MetadataCatalog
        expected: Optional catalog that must currently be installed
        spec_version: spec version of the runtime the catalog describes, None when unknown

        Returns
        -------
        bool: True if the catalog was installed
        """
        with self.__catalog_lock:
            if expected is not None and self.__catalog is not expected:
                self.debug_message('Catalog swap skipped, catalog was replaced concurrently')
                return False

            self.__catalog = catalog
            self.runtime_version = spec_version

        self.debug_message(f'Swapped metadata catalog to spec version {spec_version}')
        return True

    def load_metadata(self, metadata: Union[bytes, str, ScaleBytes], spec_version: int = None) -> MetadataCatalog:
        """
        Builds a catalog from a raw metadata blob and makes it the current catalog

        Parameters
        ----------
        metadata: raw metadata as bytes, hex string or ScaleBytes
        spec_version: Optional spec version; catalogs are cached per spec version

        Returns
        -------
        MetadataCatalog
        """
        catalog = None
        if spec_version is not None:
            catalog = self.__metadata_cache.get(spec_version)

        if catalog is not None:
            self.debug_message(f'Retrieved metadata for {spec_version} from memory')
        else:
            catalog = build_catalog(metadata)

            if spec_version is not None and self.cache_metadata:
                self.__metadata_cache[spec_version] = catalog

        self.swap_catalog(catalog, spec_version=spec_version)

        return catalog

    def rpc_request(self, method: str, params: list) -> dict:
        if self.transport is None:
            raise ConfigurationError('No transport configured')

        self.debug_message(f'RPC request "{method}"')

        response = self.transport.request(method, params)

        if 'error' in response:
            raise SubstrateRequestException(response['error'])

        return response

    def get_block_runtime_version(self, block_hash: str = None) -> dict:
        response = self.rpc_request(RPC_GET_RUNTIME_VERSION, [block_hash])
        return response.get('result')

    def get_block_metadata(self, block_hash: str = None) -> str:
        response = self.rpc_request(RPC_GET_METADATA, [block_hash])

        if response.get('result') is None:
            raise SubstrateRequestException(f"No metadata for block '{block_hash}'")

        return response['result']

    def init_runtime(self, block_hash: str = None) -> MetadataCatalog:
        """
        Makes sure the catalog matches the runtime of given block, or the chain tip when omitted. Catalogs are
        cached per spec version, so metadata is only retrieved from the node for unknown runtimes.

        Parameters
        ----------
        block_hash: Optional block hash

        Returns
        -------
        MetadataCatalog
        """
        runtime_info = self.get_block_runtime_version(block_hash=block_hash)

        if runtime_info is None:
            raise SubstrateRequestException(f"No runtime information for block '{block_hash}'")

        spec_version = runtime_info.get('specVersion')
        self.transaction_version = runtime_info.get('transactionVersion')

        # Check if runtime state already set to current block
        if spec_version == self.runtime_version and self.__catalog is not None:
            return self.__catalog

        if spec_version in self.__metadata_cache:
            self.debug_message(f'Retrieved metadata for {spec_version} from memory')
            catalog = self.__metadata_cache[spec_version]
            self.swap_catalog(catalog, spec_version=spec_version)
            return catalog

        metadata = self.get_block_metadata(block_hash=block_hash)
        self.debug_message(f'Retrieved metadata for {spec_version} from Substrate node')

        return self.load_metadata(metadata, spec_version=spec_version)

    def subscribe_runtime_upgrades(self, subscription_handler: Callable = None):
        """
        Follows runtime version notifications of the node and swaps in a new catalog when the spec version
        changes. `subscription_handler(catalog, spec_version, update_nr)` is called after each notification,
        the subscription ends when it returns anything other than None.

        Parameters
        ----------
        subscription_handler: Optional callback

        Returns
        -------
        The value returned by `subscription_handler`
        """
        if self.transport is None:
            raise ConfigurationError('No transport configured')

        def result_handler(message, update_nr, subscription_id):
            runtime_info = message.get('params', {}).get('result') or message.get('result')

            if type(runtime_info) is dict and 'specVersion' in runtime_info:
                spec_version = runtime_info['specVersion']

                if spec_version != self.runtime_version:
                    self.debug_message(f'Runtime upgrade detected to spec version {spec_version}')
                    current = self.__catalog
                    catalog = self.__metadata_cache.get(spec_version)
                    if catalog is None:
                        catalog = build_catalog(self.get_block_metadata())
                        if self.cache_metadata:
                            self.__metadata_cache[spec_version] = catalog
                    self.transaction_version = runtime_info.get('transactionVersion')
                    self.swap_catalog(catalog, expected=current, spec_version=spec_version)

            if callable(subscription_handler):
                return subscription_handler(self.__catalog, self.runtime_version, update_nr)

        return self.transport.subscribe(
            RPC_SUBSCRIBE_RUNTIME_VERSION, [], RPC_UNSUBSCRIBE_RUNTIME_VERSION, result_handler
        )

    def __get_catalog(self) -> MetadataCatalog:
        catalog = self.__catalog
        if catalog is None:
            if self.transport is None:
                raise ConfigurationError('No metadata loaded')
            catalog = self.init_runtime()
        return catalog

    def __resolve_type_id(self, catalog: MetadataCatalog, type_string: Union[int, str]) -> int:
        if type(type_string) is int:
            return type_string
        return catalog.registry.get_si_type_id(type_string)

    def compose_call(self, call_module: str, call_function: str, call_params: dict = None) -> GenericCall:
        """
        Composes a call payload which can be used in an extrinsic.

        Parameters
        ----------
        call_module: Name of the runtime module e.g. Balances
        call_function: Name of the call function e.g. transfer
        call_params: This is a dict containing the params of the call. e.g.
        `{'dest': 'EaG2CRhJWPb7qmdcJvy3LiWdh26Jreu9Dx6R1rXxPmYXoDk', 'value': 1000000000000}`

        Returns
        -------
        GenericCall
        """
        return compose_call(self.__get_catalog(), call_module, call_function, call_params, config=self.config)

    def decode_call(self, data: Union[bytes, str]) -> GenericCall:
        return decode_call(self.__get_catalog(), data, config=self.config)

    def decode_scale(self, type_string: Union[int, str], scale_bytes: Union[bytes, str, ScaleBytes],
                     return_scale_obj: bool = False):
        """
        Helper function to decode arbitrary SCALE-bytes (e.g. 0x02000000) according to given registry type id or
        path (e.g. "sp_runtime::DispatchError")

        Parameters
        ----------
        type_string: type id or `::` separated type path
        scale_bytes
        return_scale_obj: if True the Value itself is returned, otherwise the serialized value

        Returns
        -------

        """
        catalog = self.__get_catalog()
        type_id = self.__resolve_type_id(catalog, type_string)

        value = decode(scale_bytes, type_id, catalog.registry, config=self.config)

        if return_scale_obj:
            return value
        return serialize_value(value, type_id, catalog.registry)

    def encode_scale(self, type_string: Union[int, str], value) -> bytes:
        """
        Helper function to encode arbitrary data into SCALE-bytes for given registry type id or path

        Parameters
        ----------
        type_string: type id or `::` separated type path
        value: Value or plain Python data

        Returns
        -------
        bytes
        """
        catalog = self.__get_catalog()
        type_id = self.__resolve_type_id(catalog, type_string)

        return encode(value, type_id, catalog.registry, config=self.config)

    def get_constant(self, module_name: str, constant_name: str):
        """
        Returns the decoded value of given constant

        Parameters
        ----------
        module_name: Name of the module to query
        constant_name: Name of the constant to query

        Returns
        -------
        Value
        """
        return get_constant(self.__get_catalog(), module_name, constant_name, config=self.config)

    def create_storage_key(self, pallet: str, storage_function: str, params: Optional[list] = None) -> StorageKey:
        """
        Create a `StorageKey` instance providing storage function details.

        Parameters
        ----------
        pallet: name of pallet
        storage_function: name of storage function
        params: Optional list of parameters in case of a Mapped storage function

        Returns
        -------
        StorageKey
        """
        return StorageKey.create_from_storage_function(
            pallet, storage_function, params, catalog=self.__get_catalog(), config=self.config
        )

    def decode_storage_value(self, pallet: str, storage_function: str, data: Union[bytes, str, None]):
        return decode_storage_value(self.__get_catalog(), pallet, storage_function, data, config=self.config)

    def decode_event(self, data: Union[bytes, str]) -> EventDetails:
        return decode_event(self.__get_catalog(), data, config=self.config)

    def decode_dispatch_error(self, data: Union[bytes, str], tagged: bool = False) -> DispatchErrorDetails:
        return decode_dispatch_error(self.__get_catalog(), data, tagged=tagged)
