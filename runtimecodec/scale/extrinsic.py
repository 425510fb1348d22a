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
from hashlib import blake2b
from typing import Union, Sequence as TypingSequence

from scalecodec.base import ScaleBytes

from runtimecodec.config import CodecConfig
from runtimecodec.exceptions import ArityMismatch, CallNotFound, MissingField, RemainingBytesNotEmpty
from runtimecodec.scale.catalog import MetadataCatalog
from runtimecodec.scale.decode import decode_value
from runtimecodec.scale.encode import Encoder
from runtimecodec.scale.primitives import read_bytes, remaining_length
from runtimecodec.scale.serialize import Deserializer, serialize_value
from runtimecodec.utils import to_scale_bytes

logger = logging.getLogger(__name__)


class GenericCall:
    """
    Encoded call together with the names it was resolved from
    """

    def __init__(self, pallet_name: str, call_name: str, pallet_index: int, call_index: int, call_args: dict,
                 data: bytes):
        self.pallet_name = pallet_name
        self.call_name = call_name
        self.pallet_index = pallet_index
        self.call_index = call_index
        self.call_args = call_args
        self.data = data

    @property
    def call_hash(self):
        return f'0x{blake2b(self.data, digest_size=32).digest().hex()}'

    @property
    def call_index_hex(self) -> str:
        return f'0x{self.pallet_index:02x}{self.call_index:02x}'

    @property
    def value(self) -> dict:
        return {
            'call_index': self.call_index_hex,
            'call_module': self.pallet_name,
            'call_function': self.call_name,
            'call_args': self.call_args
        }

    def __repr__(self):
        return f'<GenericCall {self.pallet_name}.{self.call_name} {self.data.hex()}>'


def resolve_call(catalog: MetadataCatalog, pallet_name: str, call_name: str, args: TypingSequence = (),
                 config: CodecConfig = None) -> bytes:
    """
    Encodes a call by name: pallet index byte, call index byte and the arguments in declared order

    Parameters
    ----------
    catalog: MetadataCatalog of the target runtime
    pallet_name: name of the pallet, e.g. "Balances"
    call_name: name of the call, e.g. "transfer"
    args: ordered arguments, either Values or plain Python data
    config: optional CodecConfig

    Returns
    -------
    bytes
    """
    pallet = catalog.get_metadata_pallet(pallet_name)

    if pallet.call_type is None:
        raise CallNotFound(pallet_name, call_name)

    call = pallet.get_call(call_name)

    if len(args) != len(call.fields):
        raise ArityMismatch(f'{pallet_name}.{call_name}', len(call.fields), len(args))

    deserializer = Deserializer(catalog.registry, config)
    encoder = Encoder(catalog.registry, config)

    data = bytearray([pallet.index, call.index])
    for arg, field in zip(args, call.fields):
        encoder.encode_into(deserializer.deserialize(arg, field.type), field.type, data)

    return bytes(data)


def compose_call(catalog: MetadataCatalog, call_module: str, call_function: str, call_params: dict = None,
                 config: CodecConfig = None) -> GenericCall:
    """
    Composes a call from named parameters

    Parameters
    ----------
    catalog: MetadataCatalog of the target runtime
    call_module: Name of the runtime module e.g. Balances
    call_function: Name of the call function e.g. transfer
    call_params: This is a dict containing the params of the call. e.g.
    `{'dest': 'EaG2CRhJWPb7qmdcJvy3LiWdh26Jreu9Dx6R1rXxPmYXoDk', 'value': 1000000000000}`
    config: optional CodecConfig

    Returns
    -------
    GenericCall
    """
    if call_params is None:
        call_params = {}

    pallet = catalog.get_metadata_pallet(call_module)
    call = pallet.get_call(call_function)

    args = []
    for position, field in enumerate(call.fields):
        name = field.name or str(position)
        if name not in call_params:
            raise MissingField(field.type, name)
        args.append(call_params[name])

    if len(call_params) != len(call.fields):
        raise ArityMismatch(f'{call_module}.{call_function}', len(call.fields), len(call_params))

    data = resolve_call(catalog, call_module, call_function, args, config=config)

    return decode_call(catalog, data, config=config)


def decode_call(catalog: MetadataCatalog, data: Union[ScaleBytes, bytes, str], config: CodecConfig = None,
                check_remaining: bool = True) -> GenericCall:
    """
    Decodes an encoded call back to its pallet, call and arguments

    Parameters
    ----------
    catalog: MetadataCatalog of the runtime the call was created for
    data: encoded call
    config: optional CodecConfig
    check_remaining: raise RemainingBytesNotEmpty when bytes are left after the call

    Returns
    -------
    GenericCall
    """
    data = to_scale_bytes(data)
    start = data.offset

    pallet_index, call_index = read_bytes(data, 2)

    pallet = catalog.get_pallet_by_index(pallet_index)
    call = pallet.get_call_by_index(call_index)
    if call is None:
        raise CallNotFound(pallet.name, call_index)

    call_args = {}
    for position, field in enumerate(call.fields):
        value = decode_value(data, field.type, catalog.registry, config)
        call_args[field.name or str(position)] = serialize_value(value, field.type, catalog.registry)

    if check_remaining and remaining_length(data) > 0:
        raise RemainingBytesNotEmpty(remaining_length(data))

    return GenericCall(
        pallet_name=pallet.name,
        call_name=call.name,
        pallet_index=pallet_index,
        call_index=call_index,
        call_args=call_args,
        data=bytes(data.data[start:data.offset])
    )
