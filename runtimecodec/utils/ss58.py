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

""" SS58 is a simple address format designed for Substrate based chains.
    Encoding/decoding according to specification on
    https://github.com/paritytech/substrate/wiki/External-Address-Format-(SS58)

"""
from typing import Optional

from scalecodec.utils.ss58 import ss58_decode, ss58_encode, is_valid_ss58_address


def ss58_to_public_key(address: str, valid_ss58_format: Optional[int] = None) -> bytes:
    """
    Returns the raw account id bytes for given SS58 address
    """
    return bytes.fromhex(ss58_decode(address, valid_ss58_format=valid_ss58_format))


def public_key_to_ss58(public_key: bytes, ss58_format: int = 42) -> str:
    return ss58_encode(bytes(public_key), ss58_format=ss58_format)


def is_ss58_address(value) -> bool:
    return type(value) is str and value[0:2] != '0x' and is_valid_ss58_address(value)
