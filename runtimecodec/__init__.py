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

from .base import RuntimeInterface
from .config import CodecConfig
from .exceptions import *
from .interfaces import Transport, Signer
from .scale.catalog import MetadataCatalog, get_constant
from .scale.decode import decode, decode_value
from .scale.dispatch_error import decode_dispatch_error, ModuleError, ErrorNotFound, SimpleDispatchError, \
    NestedDispatchError, OtherDispatchError
from .scale.encode import encode, encode_value, encode_value_into
from .scale.events import decode_event, EventDetails
from .scale.extrinsic import resolve_call, compose_call, decode_call, GenericCall
from .scale.metadata import build_catalog, decode_metadata, encode_metadata
from .scale.migrations import migrate_to_latest
from .scale.migrations.v14_to_v15 import v14_to_v15
from .scale.registry import PortableRegistry
from .scale.serialize import serialize_value, deserialize_value
from .scale.value import Value, Primitive, Composite, Variant, Sequence, BitSequence
from .storage import StorageKey, create_storage_key, decode_storage_value
