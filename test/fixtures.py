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

""" Metadata fixtures for a small dev runtime with the System, Utility and Balances pallets
"""
from runtimecodec.scale.metadata import encode_metadata
from runtimecodec.scale.registry import RegistryType, SiVariant, SiField, TypeDefVariant, TypeDefSequence, \
    PRIMITIVE, COMPOSITE, VARIANT, SEQUENCE, ARRAY, TUPLE, COMPACT, BIT_SEQUENCE
from test.schema import SchemaBuilder

ALICE_PUBLIC_KEY = 'd43593c715fdd31c61141abd04a99fd6822c8558854ccde39a5684e7a56da27d'
ALICE_ADDRESS = '5GrwvaEF5zXb26Fz9rcQpDWS57CtERHpNehXCPcNoHGKutQY'
BOB_PUBLIC_KEY = '8eaf04151687736326c9fea17e25fc5287613693c912909cb226aa4794f26a48'
BOB_ADDRESS = '5FHneW46xGXgs5mUiveU4sbTyGBzmstUspZC92UhjJM694ty'

# Hand-written V15 blob with a single u8 type and no pallets
LITERAL_V15_METADATA = '0x' + ''.join([
    '6d657461', '0f',
    '04', '00', '00', '00', '0503', '00',  # types: id 0, no path or params, primitive u8, no docs
    '00',  # pallets
    '04', '00', '00', '00', '00', '00',  # extrinsic: version 4, address, call, signature and extra type 0
    '00',  # runtime type
    '00',  # apis
    '00', '00', '00',  # outer enums
    '00'  # custom
])


def _fields_document(fields) -> list:
    return [{'name': f.name, 'type': f.type, 'typeName': f.type_name, 'docs': list(f.docs)} for f in fields]


def _type_def_document(type_def) -> dict:
    if type_def.kind == PRIMITIVE:
        return {'primitive': type_def.primitive}
    if type_def.kind == COMPOSITE:
        return {'composite': {'fields': _fields_document(type_def.fields)}}
    if type_def.kind == VARIANT:
        return {'variant': {'variants': [
            {'name': v.name, 'fields': _fields_document(v.fields), 'index': v.index, 'docs': list(v.docs)}
            for v in type_def.variants
        ]}}
    if type_def.kind == SEQUENCE:
        return {'sequence': {'type': type_def.type}}
    if type_def.kind == ARRAY:
        return {'array': {'len': type_def.len, 'type': type_def.type}}
    if type_def.kind == TUPLE:
        return {'tuple': list(type_def.types)}
    if type_def.kind == COMPACT:
        return {'compact': {'type': type_def.type}}
    if type_def.kind == BIT_SEQUENCE:
        return {'bitsequence': {'bit_store_type': type_def.bit_store_type, 'bit_order_type': type_def.bit_order_type}}


def types_document(schema: SchemaBuilder) -> list:
    """
    Portable registry of a schema in metadata document form
    """
    return [
        {
            'id': registry_type.id,
            'type': {
                'path': list(registry_type.path),
                'params': [{'name': name, 'type': si_type_id} for name, si_type_id in registry_type.params],
                'def': _type_def_document(registry_type.type_def),
                'docs': list(registry_type.docs)
            }
        } for registry_type in schema.types
    ]


def error_enum(schema: SchemaBuilder, path: list, errors: list) -> int:
    """
    Pallet error enum from (name, docs) pairs, indexed in given order
    """
    return schema.add(
        TypeDefVariant([SiVariant(name, index, docs=docs) for index, (name, docs) in enumerate(errors)]), path=path
    )


class DevRuntime:
    """
    Type ids of the dev runtime, see `build_dev_runtime`
    """
    pass


def build_dev_runtime():
    """
    Declares the types of the dev runtime and returns (schema, ids)
    """
    schema = SchemaBuilder()
    t = DevRuntime()

    t.bool = schema.primitive('bool')
    t.u8 = schema.primitive('u8')
    t.u16 = schema.primitive('u16')
    t.u32 = schema.primitive('u32')
    t.u64 = schema.primitive('u64')
    t.u128 = schema.primitive('u128')
    t.str = schema.primitive('str')

    t.bytes = schema.vec(t.u8)
    t.array4 = schema.array(t.u8, 4)
    t.array20 = schema.array(t.u8, 20)
    t.array32 = schema.array(t.u8, 32)
    t.array64 = schema.array(t.u8, 64)
    t.array65 = schema.array(t.u8, 65)
    t.unit = schema.tuple()
    t.compact_u32 = schema.compact(t.u32)
    t.compact_u128 = schema.compact(t.u128)
    t.compact_unit = schema.compact(t.unit)

    t.account_id = schema.named(['sp_core', 'crypto', 'AccountId32'], {None: t.array32})
    t.h256 = schema.named(['primitive_types', 'H256'], {None: t.array32})
    t.multi_address = schema.indexed_enum(['sp_runtime', 'multiaddress', 'MultiAddress'], [
        ('Id', 0, [t.account_id]),
        ('Index', 1, [t.compact_unit]),
        ('Raw', 2, [t.bytes]),
        ('Address32', 3, [t.array32]),
        ('Address20', 4, [t.array20])
    ])
    t.multi_signature = schema.enum(
        ['sp_runtime', 'MultiSignature'], Ed25519=t.array64, Sr25519=t.array64, Ecdsa=t.array65
    )

    t.account_data = schema.named(['pallet_balances', 'types', 'AccountData'], {
        'free': t.u128, 'reserved': t.u128, 'frozen': t.u128, 'flags': t.u128
    })
    t.account_info = schema.named(['frame_system', 'AccountInfo'], {
        'nonce': t.u32, 'consumers': t.u32, 'providers': t.u32, 'sufficients': t.u32, 'data': t.account_data
    }, params=[('Nonce', t.u32), ('AccountData', t.account_data)])

    t.module_error = schema.named(['sp_runtime', 'ModuleError'], {'index': t.u8, 'error': t.array4})
    t.token_error = schema.enum(
        ['sp_runtime', 'TokenError'], FundsUnavailable=None, OnlyProvider=None, BelowMinimum=None,
        CannotCreate=None, UnknownAsset=None, Frozen=None, Unsupported=None, CannotCreateHold=None,
        NotExpendable=None, Blocked=None
    )
    t.arithmetic_error = schema.enum(
        ['sp_arithmetic', 'ArithmeticError'], Underflow=None, Overflow=None, DivisionByZero=None
    )
    t.transactional_error = schema.enum(['sp_runtime', 'TransactionalError'], LimitReached=None, NoLayer=None)
    t.dispatch_error = schema.enum(
        ['sp_runtime', 'DispatchError'], Other=None, CannotLookup=None, BadOrigin=None, Module=t.module_error,
        ConsumerRemaining=None, NoProviders=None, TooManyConsumers=None, Token=t.token_error,
        Arithmetic=t.arithmetic_error, Transactional=t.transactional_error, Exhausted=None, Corruption=None,
        Unavailable=None, RootNotAllowed=None
    )

    # RuntimeCall is referenced by Utility.batch before it can be declared
    t.runtime_call = schema.add(TypeDefVariant([]), path=['node_runtime', 'RuntimeCall'])
    t.calls = schema.vec(t.runtime_call)

    t.system_call = schema.enum(
        ['frame_system', 'pallet', 'Call'], remark={'remark': t.bytes}, set_heap_pages={'pages': t.u64}
    )
    t.utility_call = schema.enum(['pallet_utility', 'pallet', 'Call'], batch={'calls': t.calls})
    t.balances_call = schema.indexed_enum(['pallet_balances', 'pallet', 'Call'], [
        ('transfer', 0, {'dest': t.multi_address, 'value': t.compact_u128}),
        ('set_balance', 1, {'who': t.multi_address, 'new_free': t.compact_u128, 'new_reserved': t.compact_u128}),
        ('transfer_keep_alive', 3, {'dest': t.multi_address, 'value': t.compact_u128})
    ])
    schema.types[t.runtime_call] = RegistryType(t.runtime_call, TypeDefVariant([
        SiVariant('System', 0, [SiField(None, t.system_call)]),
        SiVariant('Utility', 1, [SiField(None, t.utility_call)]),
        SiVariant('Balances', 5, [SiField(None, t.balances_call)])
    ]), path=['node_runtime', 'RuntimeCall'])

    t.system_event = schema.enum(
        ['frame_system', 'pallet', 'Event'], ExtrinsicFailed={'dispatch_error': t.dispatch_error},
        NewAccount={'account': t.account_id}, KilledAccount={'account': t.account_id},
        Remarked={'sender': t.account_id, 'hash': t.h256}
    )
    t.utility_event = schema.enum(
        ['pallet_utility', 'pallet', 'Event'], BatchInterrupted={'index': t.u32, 'error': t.dispatch_error},
        BatchCompleted=None
    )
    t.balances_event = schema.enum(
        ['pallet_balances', 'pallet', 'Event'], Endowed={'account': t.account_id, 'free_balance': t.u128},
        DustLost={'account': t.account_id, 'amount': t.u128},
        Transfer={'from': t.account_id, 'to': t.account_id, 'amount': t.u128}
    )
    t.runtime_event = schema.indexed_enum(['node_runtime', 'RuntimeEvent'], [
        ('System', 0, [t.system_event]),
        ('Utility', 1, [t.utility_event]),
        ('Balances', 5, [t.balances_event])
    ])

    t.system_error = error_enum(schema, ['frame_system', 'pallet', 'Error'], [
        ('InvalidSpecName', ['The name of specification does not match between the current runtime', 'and the new runtime.']),
        ('SpecVersionNeedsToIncrease', ['The specification version is not allowed to decrease between the current runtime', 'and the new runtime.']),
        ('FailedToExtractRuntimeVersion', ['Failed to extract the runtime version from the new runtime.']),
        ('NonDefaultComposite', ['Suicide called when the account has non-default composite data.'])
    ])
    t.utility_error = error_enum(schema, ['pallet_utility', 'pallet', 'Error'], [
        ('TooManyCalls', ['Too many calls batched.'])
    ])
    t.balances_error = error_enum(schema, ['pallet_balances', 'pallet', 'Error'], [
        ('VestingBalance', ['Vesting balance too high to send value.']),
        ('LiquidityRestrictions', ['Account liquidity restrictions prevent withdrawal.']),
        ('InsufficientBalance', ['Balance too low to send value.']),
        ('ExistentialDeposit', ['Value too low to create account due to existential deposit.'])
    ])

    t.storage_key_tuple = schema.tuple(t.account_id, t.u32)

    t.check_spec_version = schema.named(['frame_system', 'extensions', 'check_spec_version', 'CheckSpecVersion'], {})
    t.check_nonce = schema.named(['frame_system', 'extensions', 'check_nonce', 'CheckNonce'], {None: t.compact_u32})
    t.charge_transaction_payment = schema.named(
        ['pallet_transaction_payment', 'ChargeTransactionPayment'], {None: t.compact_u128}
    )
    t.extra = schema.tuple(t.check_spec_version, t.check_nonce, t.charge_transaction_payment)
    t.unchecked_extrinsic = schema.add(
        TypeDefSequence(t.u8), path=['sp_runtime', 'generic', 'unchecked_extrinsic', 'UncheckedExtrinsic'],
        params=[
            ('Address', t.multi_address), ('Call', t.runtime_call), ('Signature', t.multi_signature),
            ('Extra', t.extra)
        ]
    )

    t.runtime = schema.named(['node_runtime', 'Runtime'], {})

    return schema, t


def _storage_entry(name: str, modifier: str, entry_type: dict, default: str, docs=()) -> dict:
    return {'name': name, 'modifier': modifier, 'type': entry_type, 'default': default, 'documentation': list(docs)}


def dev_runtime_v14_document(schema: SchemaBuilder, t: DevRuntime) -> dict:
    """
    V14 metadata body of the dev runtime in document form
    """
    system = {
        'name': 'System',
        'storage': {
            'prefix': 'System',
            'entries': [
                _storage_entry('Account', 'Default', {'Map': {
                    'hashers': ['Blake2_128Concat'], 'key': t.account_id, 'value': t.account_info
                }}, '0x' + '00' * 80, [' The full account information for a particular account ID.']),
                _storage_entry('Number', 'Default', {'Plain': t.u32}, '0x00000000', [' The current block number being processed.']),
                _storage_entry('BlockHash', 'Default', {'Map': {
                    'hashers': ['Twox64Concat'], 'key': t.u32, 'value': t.h256
                }}, '0x' + '00' * 32, [' Map of block numbers to block hashes.'])
            ]
        },
        'calls': {'ty': t.system_call},
        'event': {'ty': t.system_event},
        'constants': [
            {'name': 'SS58Prefix', 'type': t.u16, 'value': '0x2a00', 'documentation': [' The designated SS58 prefix of this chain.']}
        ],
        'error': {'ty': t.system_error},
        'index': 0
    }
    utility = {
        'name': 'Utility',
        'storage': None,
        'calls': {'ty': t.utility_call},
        'event': {'ty': t.utility_event},
        'constants': [],
        'error': {'ty': t.utility_error},
        'index': 1
    }
    balances = {
        'name': 'Balances',
        'storage': {
            'prefix': 'Balances',
            'entries': [
                _storage_entry('TotalIssuance', 'Default', {'Plain': t.u128}, '0x' + '00' * 16, [' The total units issued in the system.']),
                _storage_entry('Approvals', 'Optional', {'Map': {
                    'hashers': ['Blake2_128Concat', 'Twox64Concat'], 'key': t.storage_key_tuple, 'value': t.u128
                }}, '0x00')
            ]
        },
        'calls': {'ty': t.balances_call},
        'event': {'ty': t.balances_event},
        'constants': [
            {'name': 'ExistentialDeposit', 'type': t.u128, 'value': '0xf4010000000000000000000000000000', 'documentation': [' The minimum amount required to keep an account open.']}
        ],
        'error': {'ty': t.balances_error},
        'index': 5
    }

    return {
        'types': types_document(schema),
        'pallets': [system, utility, balances],
        'extrinsic': {
            'ty': t.unchecked_extrinsic,
            'version': 4,
            'signed_extensions': [
                {'identifier': 'CheckSpecVersion', 'ty': t.check_spec_version, 'additional_signed': t.u32},
                {'identifier': 'CheckNonce', 'ty': t.check_nonce, 'additional_signed': t.unit},
                {'identifier': 'ChargeTransactionPayment', 'ty': t.charge_transaction_payment, 'additional_signed': t.unit}
            ]
        },
        'runtime_type': t.runtime
    }


def dev_runtime_metadata() -> bytes:
    """
    Encoded V14 metadata blob of the dev runtime
    """
    schema, t = build_dev_runtime()
    return encode_metadata({'V14': dev_runtime_v14_document(schema, t)})
