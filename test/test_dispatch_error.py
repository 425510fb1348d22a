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

from runtimecodec.exceptions import NotEnoughInput, RemainingBytesNotEmpty
from runtimecodec.scale.dispatch_error import decode_dispatch_error, ModuleError, ErrorNotFound, \
    SimpleDispatchError, NestedDispatchError, OtherDispatchError
from runtimecodec.scale.metadata import build_catalog
from test.fixtures import dev_runtime_metadata, LITERAL_V15_METADATA


class ModuleErrorTestCase(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.catalog = build_catalog(dev_runtime_metadata())

    def test_module_error(self):
        error = decode_dispatch_error(self.catalog, bytes([5, 2]))

        self.assertIsInstance(error, ModuleError)
        self.assertEqual('Balances', error.pallet)
        self.assertEqual('InsufficientBalance', error.error)
        self.assertEqual(('Balance too low to send value.',), error.docs)
        self.assertEqual('Balance too low to send value.', error.description)
        self.assertEqual(5, error.pallet_index)
        self.assertEqual(2, error.error_index)
        self.assertEqual(b'\x02', error.error_bytes)

    def test_module_error_with_error_array(self):
        error = decode_dispatch_error(self.catalog, bytes([5, 2, 0, 0, 0]))

        self.assertEqual('InsufficientBalance', error.error)
        self.assertEqual(bytes([2, 0, 0, 0]), error.error_bytes)
        self.assertEqual(
            {'type': 'Module', 'pallet': 'Balances', 'name': 'InsufficientBalance',
             'docs': ['Balance too low to send value.'], 'pallet_index': 5, 'error_index': 2},
            error.value
        )

    def test_hex_input(self):
        self.assertEqual(decode_dispatch_error(self.catalog, bytes([5, 2])), decode_dispatch_error(self.catalog, '0x0502'))

    def test_error_not_found(self):
        self.assertEqual(ErrorNotFound(99, 0), decode_dispatch_error(self.catalog, bytes([99, 0])))
        self.assertEqual(ErrorNotFound(5, 99), decode_dispatch_error(self.catalog, bytes([5, 99])))

    def test_not_enough_input(self):
        with self.assertRaises(NotEnoughInput):
            decode_dispatch_error(self.catalog, bytes([5]))

        with self.assertRaises(NotEnoughInput):
            decode_dispatch_error(self.catalog, b'')

    def test_trailing_bytes(self):
        with self.assertRaises(RemainingBytesNotEmpty) as cm:
            decode_dispatch_error(self.catalog, bytes([5, 2, 0, 0, 0, 7]))

        self.assertEqual(1, cm.exception.remaining)


class TaggedDispatchErrorTestCase(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.catalog = build_catalog(dev_runtime_metadata())

    def test_module(self):
        error = decode_dispatch_error(self.catalog, '0x030502000000', tagged=True)

        self.assertIsInstance(error, ModuleError)
        self.assertEqual('InsufficientBalance', error.error)
        self.assertEqual(bytes([2, 0, 0, 0]), error.error_bytes)

    def test_simple(self):
        self.assertEqual(SimpleDispatchError('BadOrigin'), decode_dispatch_error(self.catalog, '0x02', tagged=True))
        self.assertEqual(SimpleDispatchError('Other'), decode_dispatch_error(self.catalog, '0x00', tagged=True))

    def test_nested(self):
        self.assertEqual(
            NestedDispatchError('Token', 'OnlyProvider'), decode_dispatch_error(self.catalog, '0x0701', tagged=True)
        )
        self.assertEqual(
            NestedDispatchError('Arithmetic', 'Overflow'), decode_dispatch_error(self.catalog, '0x0801', tagged=True)
        )

    def test_unknown_variant(self):
        with self.assertLogs('runtimecodec.scale.dispatch_error', level='WARNING'):
            error = decode_dispatch_error(self.catalog, '0x63', tagged=True)

        self.assertIsInstance(error, OtherDispatchError)
        self.assertEqual(b'\x63', error.raw)

    def test_truncated(self):
        with self.assertLogs('runtimecodec.scale.dispatch_error', level='WARNING'):
            error = decode_dispatch_error(self.catalog, '0x0305', tagged=True)

        self.assertIsInstance(error, OtherDispatchError)
        self.assertEqual('0x0305', error.value['raw'])

    def test_empty(self):
        with self.assertRaises(NotEnoughInput):
            decode_dispatch_error(self.catalog, b'', tagged=True)


class BuiltinDispatchErrorTestCase(unittest.TestCase):
    """
    Runtime without `sp_runtime::DispatchError` in its registry
    """

    @classmethod
    def setUpClass(cls):
        cls.catalog = build_catalog(LITERAL_V15_METADATA)

    def test_nested(self):
        self.assertEqual(
            NestedDispatchError('Transactional', 'NoLayer'), decode_dispatch_error(self.catalog, '0x0901', tagged=True)
        )

    def test_simple(self):
        self.assertEqual(SimpleDispatchError('Exhausted'), decode_dispatch_error(self.catalog, '0x0a', tagged=True))

    def test_module_without_pallets(self):
        self.assertEqual(ErrorNotFound(5, 2), decode_dispatch_error(self.catalog, '0x030502000000', tagged=True))

    def test_unknown_variant(self):
        with self.assertLogs('runtimecodec.scale.dispatch_error', level='WARNING'):
            error = decode_dispatch_error(self.catalog, '0x20', tagged=True)

        self.assertIsInstance(error, OtherDispatchError)

    def test_unknown_nested_variant(self):
        with self.assertLogs('runtimecodec.scale.dispatch_error', level='WARNING'):
            error = decode_dispatch_error(self.catalog, '0x0809', tagged=True)

        self.assertIsInstance(error, OtherDispatchError)


if __name__ == '__main__':
    unittest.main()
