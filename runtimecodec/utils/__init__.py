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
from typing import Union

from scalecodec.base import ScaleBytes


def to_scale_bytes(data: Union[str, bytes, bytearray, ScaleBytes]) -> ScaleBytes:
    """
    Wraps raw input in a `ScaleBytes` cursor positioned at its start. Existing cursors are returned as-is so
    callers can continue reading where a previous decode stopped.
    """
    if isinstance(data, ScaleBytes):
        return data

    if type(data) is str:
        if data[0:2] != '0x':
            raise ValueError('Hex string must start with "0x"')
        return ScaleBytes(bytearray.fromhex(data[2:]))

    if isinstance(data, (bytes, bytearray, memoryview)):
        return ScaleBytes(bytearray(data))

    raise TypeError(f'Cannot read SCALE data from {type(data).__name__}')


def hex_to_bytes(data: Union[str, bytes, bytearray]) -> bytes:
    if type(data) is str:
        if data[0:2] == '0x':
            data = data[2:]
        return bytes.fromhex(data)
    return bytes(data)
