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

# First 4 bytes of every metadata blob, b"meta"
META_RESERVED = b'meta'

SUPPORTED_METADATA_VERSIONS = (14, 15)
LATEST_METADATA_VERSION = 15

# Deepest nesting of registry types the engines will walk
MAX_TYPE_DEPTH = 256

# Longest sequence of zero-size elements (e.g. Vec<()>) the decoder accepts
MAX_ZERO_SIZE_SEQUENCE_LENGTH = 4096

DISPATCH_ERROR_PATH = ['sp_runtime', 'DispatchError']

# sp_runtime::DispatchError variant order, used when the registry lacks the type
DISPATCH_ERROR_VARIANTS = (
    'Other', 'CannotLookup', 'BadOrigin', 'Module', 'ConsumerRemaining', 'NoProviders', 'TooManyConsumers',
    'Token', 'Arithmetic', 'Transactional', 'Exhausted', 'Corruption', 'Unavailable', 'RootNotAllowed'
)
TOKEN_ERROR_VARIANTS = (
    'FundsUnavailable', 'OnlyProvider', 'BelowMinimum', 'CannotCreate', 'UnknownAsset', 'Frozen', 'Unsupported',
    'CannotCreateHold', 'NotExpendable', 'Blocked'
)
ARITHMETIC_ERROR_VARIANTS = ('Underflow', 'Overflow', 'DivisionByZero')
TRANSACTIONAL_ERROR_VARIANTS = ('LimitReached', 'NoLayer')

RPC_GET_METADATA = 'state_getMetadata'
RPC_GET_RUNTIME_VERSION = 'state_getRuntimeVersion'
RPC_SUBSCRIBE_RUNTIME_VERSION = 'state_subscribeRuntimeVersion'
RPC_UNSUBSCRIBE_RUNTIME_VERSION = 'state_unsubscribeRuntimeVersion'
