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

""" Helper functions used to calculate keys for Substrate storage items
"""

from hashlib import blake2b
import xxhash


def blake2_256(data: bytes) -> bytes:
    """
    Calculates a 32 bytes Blake2b hash for provided data, used for call hashes and storage keys
    """
    return blake2b(data, digest_size=32).digest()


def blake2_128(data: bytes) -> bytes:
    return blake2b(data, digest_size=16).digest()


def blake2_128_concat(data: bytes) -> bytes:
    """
    Calculates a 16 bytes Blake2b hash for provided data, concatenated with data so the original key can be
    recovered from the storage key
    """
    return blake2b(data, digest_size=16).digest() + data


def _twox(data: bytes, rounds: int) -> bytes:
    # Each round is a little-endian xxh64 with seed equal to the round number
    return b''.join(
        xxhash.xxh64(data, seed=seed).intdigest().to_bytes(8, byteorder='little') for seed in range(rounds)
    )


def xxh64(data: bytes) -> bytes:
    return _twox(data, 1)


def xxh128(data: bytes) -> bytes:
    """
    Calculates 2 concatenated xxh64 hashes for provided data, used as prefix for pallet and storage names
    """
    return _twox(data, 2)


def twox_256(data: bytes) -> bytes:
    return _twox(data, 4)


def two_x64_concat(data: bytes) -> bytes:
    return _twox(data, 1) + data


def identity(data: bytes) -> bytes:
    return data


STORAGE_HASHERS = {
    'Blake2_128': blake2_128,
    'Blake2_256': blake2_256,
    'Blake2_128Concat': blake2_128_concat,
    'Twox128': xxh128,
    'Twox256': twox_256,
    'Twox64Concat': two_x64_concat,
    'Identity': identity
}


def get_hasher(name: str):
    try:
        return STORAGE_HASHERS[name]
    except KeyError:
        raise ValueError(f'Unsupported hash type "{name}"')


def concat_hash_len(key_hasher: str) -> int:
    """
    Number of hash bytes that precede the concatenated key for given hasher, used to recover keys from storage keys
    """
    if key_hasher == "Blake2_128Concat":
        return 16
    elif key_hasher == "Twox64Concat":
        return 8
    elif key_hasher == "Identity":
        return 0
    else:
        raise ValueError('Unsupported hash type')
