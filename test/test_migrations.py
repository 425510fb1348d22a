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
import copy
import unittest

from runtimecodec.exceptions import InvalidVersion, MetadataMismatch
from runtimecodec.scale.migrations import migrate_to_latest
from runtimecodec.scale.migrations.v14_to_v15 import v14_to_v15
from test.fixtures import build_dev_runtime, dev_runtime_v14_document


class V14ToV15TestCase(unittest.TestCase):

    def setUp(self):
        self.schema, self.t = build_dev_runtime()
        self.document = dev_runtime_v14_document(self.schema, self.t)

    def find_type(self, document, si_type_id):
        return [t['type'] for t in document['types'] if t['id'] == si_type_id][0]

    def test_extrinsic(self):
        extrinsic = v14_to_v15(self.document)['extrinsic']

        self.assertEqual(4, extrinsic['version'])
        self.assertEqual(self.t.multi_address, extrinsic['address_type'])
        self.assertEqual(self.t.runtime_call, extrinsic['call_type'])
        self.assertEqual(self.t.multi_signature, extrinsic['signature_type'])
        self.assertEqual(self.t.extra, extrinsic['extra_type'])
        self.assertEqual(self.document['extrinsic']['signed_extensions'], extrinsic['signed_extensions'])

    def test_added_fields(self):
        metadata = v14_to_v15(self.document)

        self.assertEqual([], metadata['apis'])
        self.assertEqual({'map': []}, metadata['custom'])
        self.assertEqual([[], [], []], [pallet['docs'] for pallet in metadata['pallets']])
        self.assertEqual(self.t.runtime, metadata['runtime_type'])

    def test_outer_enums(self):
        metadata = v14_to_v15(self.document)
        outer_enums = metadata['outer_enums']

        self.assertEqual(self.t.runtime_call, outer_enums['call_type'])
        self.assertEqual(self.t.runtime_event, outer_enums['event_type'])
        self.assertEqual(len(self.schema.types), outer_enums['error_type'])
        self.assertEqual(len(self.schema.types) + 1, len(metadata['types']))

    def test_synthesized_runtime_error(self):
        metadata = v14_to_v15(self.document)
        runtime_error = self.find_type(metadata, metadata['outer_enums']['error_type'])

        self.assertEqual(['RuntimeError'], runtime_error['path'])

        variants = runtime_error['def']['variant']['variants']
        self.assertEqual(
            [('System', 0, self.t.system_error), ('Utility', 1, self.t.utility_error),
             ('Balances', 5, self.t.balances_error)],
            [(v['name'], v['index'], v['fields'][0]['type']) for v in variants]
        )

    def test_input_not_modified(self):
        original = copy.deepcopy(self.document)
        v14_to_v15(self.document)

        self.assertEqual(original, self.document)

    def test_missing_signature_param(self):
        extrinsic_type = self.find_type(self.document, self.t.unchecked_extrinsic)
        extrinsic_type['params'] = [p for p in extrinsic_type['params'] if p['name'] != 'Signature']

        with self.assertRaises(MetadataMismatch) as cm:
            v14_to_v15(self.document)

        self.assertEqual(self.t.unchecked_extrinsic, cm.exception.type_id)

    def test_missing_extra_param(self):
        extrinsic_type = self.find_type(self.document, self.t.unchecked_extrinsic)
        extrinsic_type['params'] = [p for p in extrinsic_type['params'] if p['name'] != 'Extra']

        metadata = v14_to_v15(self.document)
        extra_type_id = metadata['extrinsic']['extra_type']

        self.assertEqual(len(self.schema.types), extra_type_id)
        self.assertEqual(
            {'tuple': [self.t.check_spec_version, self.t.check_nonce, self.t.charge_transaction_payment]},
            self.find_type(metadata, extra_type_id)['def']
        )

    def test_missing_runtime_event(self):
        event_type = self.find_type(self.document, self.t.runtime_event)
        event_type['path'] = ['node_runtime', 'Event']

        metadata = v14_to_v15(self.document)
        event_type_id = metadata['outer_enums']['event_type']

        self.assertNotEqual(self.t.runtime_event, event_type_id)

        variants = self.find_type(metadata, event_type_id)['def']['variant']['variants']
        self.assertEqual(
            [('System', 0, self.t.system_event), ('Utility', 1, self.t.utility_event),
             ('Balances', 5, self.t.balances_event)],
            [(v['name'], v['index'], v['fields'][0]['type']) for v in variants]
        )


class MigrateToLatestTestCase(unittest.TestCase):

    def test_v14(self):
        schema, t = build_dev_runtime()
        document = migrate_to_latest({'V14': dev_runtime_v14_document(schema, t)})

        self.assertEqual(['V15'], list(document.keys()))
        self.assertEqual(t.runtime_call, document['V15']['outer_enums']['call_type'])

    def test_v15_is_returned_unchanged(self):
        document = {'V15': {'types': []}}
        self.assertIs(document, migrate_to_latest(document))

    def test_unsupported_version(self):
        with self.assertRaises(InvalidVersion) as cm:
            migrate_to_latest({'V13': {}})

        self.assertEqual('V13', cm.exception.version)

        with self.assertRaises(InvalidVersion):
            migrate_to_latest({'V14': {}, 'V15': {}})


if __name__ == '__main__':
    unittest.main()
