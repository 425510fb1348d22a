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
import unittest
from hashlib import blake2b

from runtimecodec.exceptions import ArityMismatch, CallNotFound, PalletNameNotFound, PalletIndexNotFound, \
    MissingField, RemainingBytesNotEmpty, VariantNameNotFound
from runtimecodec.scale.extrinsic import resolve_call, compose_call, decode_call
from runtimecodec.scale.metadata import build_catalog
from runtimecodec.scale.value import Variant, Composite, Sequence, Primitive
from test.fixtures import dev_runtime_metadata, ALICE_PUBLIC_KEY, ALICE_ADDRESS

TRANSFER_CALL = bytes.fromhex('0500' + '00' + ALICE_PUBLIC_KEY + 'e5c0')


class ResolveCallTestCase(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.catalog = build_catalog(dev_runtime_metadata())

    def test_transfer(self):
        self.assertEqual(TRANSFER_CALL, resolve_call(self.catalog, 'Balances', 'transfer', [ALICE_ADDRESS, 12345]))

    def test_dest_forms(self):
        for dest in ('0x' + ALICE_PUBLIC_KEY, {'Id': ALICE_ADDRESS}, bytes.fromhex(ALICE_PUBLIC_KEY)):
            self.assertEqual(
                TRANSFER_CALL, resolve_call(self.catalog, 'Balances', 'transfer', [dest, 12345]), msg=repr(dest)
            )

    def test_value_arguments(self):
        dest = Variant('Id', Composite.unnamed([Sequence.from_bytes(bytes.fromhex(ALICE_PUBLIC_KEY), kind='array')]))

        self.assertEqual(
            TRANSFER_CALL, resolve_call(self.catalog, 'Balances', 'transfer', [dest, Primitive(12345)])
        )

    def test_declared_call_index(self):
        data = resolve_call(self.catalog, 'Balances', 'transfer_keep_alive', [ALICE_ADDRESS, 12345])
        self.assertEqual('0503', data[0:2].hex())

    def test_index_dest(self):
        data = resolve_call(self.catalog, 'Balances', 'transfer', [{'Index': None}, 12345])
        self.assertEqual('050001e5c0', data.hex())

    def test_remark(self):
        self.assertEqual('0000081234', resolve_call(self.catalog, 'System', 'remark', ['0x1234']).hex())

    def test_batch(self):
        data = resolve_call(self.catalog, 'Utility', 'batch', [[
            {'Balances': {'transfer': {'dest': ALICE_ADDRESS, 'value': 12345}}}
        ]])

        self.assertEqual(bytes.fromhex('0100' + '04') + TRANSFER_CALL, data)

    def test_arity_mismatch(self):
        with self.assertRaises(ArityMismatch) as cm:
            resolve_call(self.catalog, 'Balances', 'transfer', [ALICE_ADDRESS])

        self.assertEqual(2, cm.exception.expected)
        self.assertEqual(1, cm.exception.actual)

    def test_call_not_found(self):
        with self.assertRaises(CallNotFound):
            resolve_call(self.catalog, 'Balances', 'transfer_all', [])

    def test_pallet_not_found(self):
        with self.assertRaises(PalletNameNotFound):
            resolve_call(self.catalog, 'Staking', 'bond', [])

    def test_unknown_variant_in_argument(self):
        with self.assertRaises(VariantNameNotFound):
            resolve_call(self.catalog, 'Balances', 'transfer', [{'Address64': '0x00'}, 12345])


class ComposeCallTestCase(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.catalog = build_catalog(dev_runtime_metadata())

    def test_compose_call(self):
        call = compose_call(
            self.catalog, call_module='Balances', call_function='transfer',
            call_params={'dest': ALICE_ADDRESS, 'value': 12345}
        )

        self.assertEqual(TRANSFER_CALL, call.data)
        self.assertEqual({'dest': {'Id': '0x' + ALICE_PUBLIC_KEY}, 'value': 12345}, call.call_args)
        self.assertEqual('0x0500', call.call_index_hex)
        self.assertEqual('Balances', call.value['call_module'])
        self.assertEqual('transfer', call.value['call_function'])

    def test_call_hash(self):
        call = compose_call(self.catalog, 'Balances', 'transfer', {'dest': ALICE_ADDRESS, 'value': 12345})

        self.assertEqual(f'0x{blake2b(TRANSFER_CALL, digest_size=32).digest().hex()}', call.call_hash)

    def test_missing_param(self):
        with self.assertRaises(MissingField) as cm:
            compose_call(self.catalog, 'Balances', 'transfer', {'dest': ALICE_ADDRESS})

        self.assertEqual('value', cm.exception.field_name)

    def test_unexpected_param(self):
        with self.assertRaises(ArityMismatch):
            compose_call(self.catalog, 'Balances', 'transfer', {'dest': ALICE_ADDRESS, 'value': 1, 'keep_alive': True})


class DecodeCallTestCase(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.catalog = build_catalog(dev_runtime_metadata())

    def test_decode_transfer(self):
        call = decode_call(self.catalog, '0x' + TRANSFER_CALL.hex())

        self.assertEqual('Balances', call.pallet_name)
        self.assertEqual('transfer', call.call_name)
        self.assertEqual({'dest': {'Id': '0x' + ALICE_PUBLIC_KEY}, 'value': 12345}, call.call_args)

    def test_decode_batch(self):
        call = decode_call(self.catalog, bytes.fromhex('0100' + '04') + TRANSFER_CALL)

        self.assertEqual('batch', call.call_name)
        self.assertEqual(
            {'calls': [{'Balances': {'transfer': {'dest': {'Id': '0x' + ALICE_PUBLIC_KEY}, 'value': 12345}}}]},
            call.call_args
        )

    def test_remaining_bytes(self):
        with self.assertRaises(RemainingBytesNotEmpty):
            decode_call(self.catalog, TRANSFER_CALL + b'\x00')

        call = decode_call(self.catalog, TRANSFER_CALL + b'\x00', check_remaining=False)
        self.assertEqual(TRANSFER_CALL, call.data)

    def test_unknown_indices(self):
        with self.assertRaises(CallNotFound):
            decode_call(self.catalog, '0x0502')

        with self.assertRaises(PalletIndexNotFound):
            decode_call(self.catalog, '0x0900')


if __name__ == '__main__':
    unittest.main()
