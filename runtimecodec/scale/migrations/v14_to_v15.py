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
import logging

from runtimecodec.exceptions import MetadataMismatch

logger = logging.getLogger(__name__)


def _find_type(types: list, si_type_id: int) -> dict:
    for portable_type in types:
        if portable_type['id'] == si_type_id:
            return portable_type['type']
    raise MetadataMismatch(f'Type {si_type_id} not found in type registry', type_id=si_type_id)


def _type_param(types: list, si_type_id: int, name: str):
    for param in _find_type(types, si_type_id).get('params') or []:
        if param['name'] == name:
            return param.get('type')


def _new_type(types: list, type_def: dict, path: list = None) -> int:
    si_type_id = max([t['id'] for t in types], default=-1) + 1
    types.append({
        'id': si_type_id,
        'type': {'path': path or [], 'params': [], 'def': type_def, 'docs': []}
    })
    return si_type_id


def _pallet_enum(types: list, pallets: list, key: str, path: list) -> int:
    # One variant per pallet that declares the given type, indexed like the pallet
    variants = []
    for pallet in pallets:
        if pallet.get(key) is not None:
            variants.append({
                'name': pallet['name'],
                'fields': [{'name': None, 'type': pallet[key]['ty'], 'typeName': None, 'docs': []}],
                'index': pallet['index'],
                'docs': []
            })
    return _new_type(types, {'variant': {'variants': variants}}, path=path)


def v14_to_v15(metadata: dict) -> dict:
    """
    Migrates the body of a V14 metadata document to the V15 layout. The input is left untouched.

    Parameters
    ----------
    metadata: V14 metadata body with `types`, `pallets`, `extrinsic` and `runtime_type`

    Returns
    -------
    V15 metadata body
    """
    types = copy.deepcopy(metadata['types'])
    pallets = [dict(copy.deepcopy(pallet), docs=[]) for pallet in metadata['pallets']]
    extrinsic = metadata['extrinsic']

    extrinsic_type_id = extrinsic['ty']

    param_types = {}
    for name in ('Address', 'Call', 'Signature'):
        param_types[name] = _type_param(types, extrinsic_type_id, name)
        if param_types[name] is None:
            raise MetadataMismatch(
                f'Extrinsic type has no "{name}" parameter', type_id=extrinsic_type_id
            )

    extra_type_id = _type_param(types, extrinsic_type_id, 'Extra')
    if extra_type_id is None:
        extra_type_id = _new_type(types, {'tuple': [se['ty'] for se in extrinsic['signed_extensions']]})

    event_type_id = None
    for portable_type in types:
        path = portable_type['type'].get('path') or []
        if path and path[-1] == 'RuntimeEvent':
            event_type_id = portable_type['id']
            break

    if event_type_id is None:
        event_type_id = _pallet_enum(types, pallets, 'event', ['RuntimeEvent'])

    error_type_id = _pallet_enum(types, pallets, 'error', ['RuntimeError'])

    logger.debug(f'Migrated metadata V14 to V15, {len(types) - len(metadata["types"])} types synthesized')

    return {
        'types': types,
        'pallets': pallets,
        'extrinsic': {
            'version': extrinsic['version'],
            'address_type': param_types['Address'],
            'call_type': param_types['Call'],
            'signature_type': param_types['Signature'],
            'extra_type': extra_type_id,
            'signed_extensions': copy.deepcopy(extrinsic['signed_extensions'])
        },
        'runtime_type': metadata['runtime_type'],
        'apis': [],
        'outer_enums': {
            'call_type': param_types['Call'],
            'event_type': event_type_id,
            'error_type': error_type_id
        },
        'custom': {'map': []}
    }
