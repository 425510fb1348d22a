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
from scalecodec.exceptions import InvalidScaleTypeValueException, RemainingScaleBytesNotEmptyException


class SubstrateRequestException(Exception):
    pass


class ConfigurationError(Exception):
    pass


# Metadata construction and lookup

class MetadataError(Exception):
    pass


class InvalidMetadataPrefix(MetadataError):

    def __init__(self, prefix: bytes):
        self.prefix = bytes(prefix)
        super().__init__(f'Invalid metadata prefix 0x{self.prefix.hex()}')


class InvalidVersion(MetadataError):

    def __init__(self, version):
        self.version = version
        super().__init__(f'Metadata version {version} not supported')


class MissingType(MetadataError):

    def __init__(self, type_id: int, referenced_by=None):
        self.type_id = type_id
        self.referenced_by = referenced_by
        message = f'Type {type_id} is missing from the type registry'
        if referenced_by is not None:
            message += f' (referenced by {referenced_by})'
        super().__init__(message)


class InvalidTypeDef(MetadataError):

    def __init__(self, type_id: int, reason: str):
        self.type_id = type_id
        self.reason = reason
        super().__init__(f'Invalid definition for type {type_id}: {reason}')


class MetadataMismatch(MetadataError):

    def __init__(self, message: str, type_id: int = None):
        self.type_id = type_id
        super().__init__(message)


class PalletNameNotFound(MetadataError):

    def __init__(self, name: str):
        self.name = name
        super().__init__(f'Pallet "{name}" not found')


class PalletIndexNotFound(MetadataError):

    def __init__(self, index: int):
        self.index = index
        super().__init__(f'Pallet for index "{index}" not found')


class CallNotFound(MetadataError):

    def __init__(self, pallet_name: str, call_name):
        self.pallet_name = pallet_name
        self.call_name = call_name
        super().__init__(f'Call "{pallet_name}.{call_name}" not found')


class EventNotFound(MetadataError):

    def __init__(self, pallet_index: int, event_index: int):
        self.pallet_index = pallet_index
        self.event_index = event_index
        super().__init__(f'Event ({pallet_index}, {event_index}) not found')


class ConstantNotFound(MetadataError):

    def __init__(self, pallet_name: str, constant_name: str):
        self.pallet_name = pallet_name
        self.constant_name = constant_name
        super().__init__(f'Constant "{pallet_name}.{constant_name}" not found')


class StorageFunctionNotFound(MetadataError):

    def __init__(self, pallet_name: str, storage_name: str):
        self.pallet_name = pallet_name
        self.storage_name = storage_name
        super().__init__(f'Storage function "{pallet_name}.{storage_name}" not found')


class RuntimeApiNotFound(MetadataError):

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Runtime Api '{name}' not found")


# Decoding

class DecodeError(InvalidScaleTypeValueException):
    pass


class NotEnoughInput(DecodeError):

    def __init__(self, needed: int, remaining: int, offset: int):
        self.needed = needed
        self.remaining = remaining
        self.offset = offset
        super().__init__(f'Not enough input at offset {offset}: needed {needed} bytes, {remaining} remaining')


class RemainingBytesNotEmpty(DecodeError, RemainingScaleBytesNotEmptyException):

    def __init__(self, remaining: int):
        self.remaining = remaining
        super().__init__(f'Decoding finished with {remaining} bytes left')


class VariantIndexNotFound(DecodeError):

    def __init__(self, index: int, type_id: int):
        self.index = index
        self.type_id = type_id
        super().__init__(f'Variant index {index} not found in type {type_id}')


class InvalidBoolean(DecodeError):

    def __init__(self, byte: int):
        self.byte = byte
        super().__init__(f'Invalid boolean byte 0x{byte:02x}')


class InvalidChar(DecodeError):

    def __init__(self, code_point: int):
        self.code_point = code_point
        super().__init__(f'Invalid char code point 0x{code_point:x}')


class InvalidUtf8(DecodeError):

    def __init__(self, offset: int, reason: str):
        self.offset = offset
        self.reason = reason
        super().__init__(f'Invalid UTF-8 string at offset {offset}: {reason}')


class InvalidCompactEncoding(DecodeError):

    def __init__(self, reason: str, offset: int = None):
        self.reason = reason
        self.offset = offset
        super().__init__(f'Invalid compact encoding at offset {offset}: {reason}')


class MaxDepthExceeded(DecodeError):

    def __init__(self, max_depth: int, type_id: int):
        self.max_depth = max_depth
        self.type_id = type_id
        super().__init__(f'Type nesting exceeds maximum depth of {max_depth} at type {type_id}')


class SequenceLengthExceeded(DecodeError):

    def __init__(self, length: int, limit: int, type_id: int):
        self.length = length
        self.limit = limit
        self.type_id = type_id
        super().__init__(f'Sequence of {length} zero-size elements of type {type_id} exceeds limit of {limit}')


# Encoding

class EncodeError(ValueError):
    pass


class ShapeMismatch(EncodeError):

    def __init__(self, type_id: int, expected: str, actual):
        self.type_id = type_id
        self.expected = expected
        self.actual = actual
        super().__init__(f'Type {type_id} expects {expected}, got {actual!r}')


class WrongLength(EncodeError):

    def __init__(self, type_id: int, expected: int, actual: int):
        self.type_id = type_id
        self.expected = expected
        self.actual = actual
        super().__init__(f'Type {type_id} expects {expected} items, got {actual}')


class MissingField(EncodeError):

    def __init__(self, type_id: int, field_name: str):
        self.type_id = type_id
        self.field_name = field_name
        super().__init__(f'Field "{field_name}" missing for type {type_id}')


class VariantNameNotFound(EncodeError):

    def __init__(self, name: str, type_id: int):
        self.name = name
        self.type_id = type_id
        super().__init__(f'Variant "{name}" not found in type {type_id}')


class ValueOutOfRange(EncodeError):

    def __init__(self, type_id: int, kind: str, value):
        self.type_id = type_id
        self.kind = kind
        self.value = value
        super().__init__(f'Value {value!r} out of range for {kind} (type {type_id})')


class ArityMismatch(EncodeError):

    def __init__(self, name: str, expected: int, actual: int):
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(f'"{name}" requires {expected} parameters, {actual} given')


class EncodeDepthExceeded(EncodeError):

    def __init__(self, max_depth: int, type_id: int):
        self.max_depth = max_depth
        self.type_id = type_id
        super().__init__(f'Value nesting exceeds maximum depth of {max_depth} at type {type_id}')


class TypeNotFound(DecodeError, EncodeError):

    def __init__(self, type_id):
        self.type_id = type_id
        if type(type_id) is str:
            super().__init__(f"RegistryType not found with path '{type_id}'")
        else:
            super().__init__(f'RegistryType not found with id {type_id}')
