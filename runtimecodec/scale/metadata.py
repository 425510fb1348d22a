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
from typing import Union, Tuple

from scalecodec.base import ScaleBytes, RuntimeConfigurationObject
from scalecodec.exceptions import InvalidScaleTypeValueException, RemainingScaleBytesNotEmptyException
from scalecodec.type_registry import load_type_registry_preset

from runtimecodec.constants import META_RESERVED, SUPPORTED_METADATA_VERSIONS
from runtimecodec.exceptions import InvalidMetadataPrefix, InvalidVersion, NotEnoughInput, MetadataMismatch, \
    RemainingBytesNotEmpty
from runtimecodec.scale.catalog import MetadataCatalog
from runtimecodec.scale.migrations import migrate_to_latest
from runtimecodec.scale.primitives import read_bytes, remaining_length
from runtimecodec.utils import to_scale_bytes

logger = logging.getLogger(__name__)

# Additions to the scalecodec core preset. Byte blobs are kept as '0x' hex strings and the portable registry
# as a plain list of types.
METADATA_TYPES = {
    'Bytes': 'HexBytes',
    'PortableRegistry': 'Vec<PortableType>',
    'PalletMetadataV15': {
        'type': 'struct',
        'base_class': 'ScaleInfoPalletMetadata',
        'type_mapping': [
            ['name', 'Text'],
            ['storage', 'Option<StorageMetadataV14>'],
            ['calls', 'Option<PalletCallMetadataV14>'],
            ['event', 'Option<PalletEventMetadataV14>'],
            ['constants', 'Vec<PalletConstantMetadataV14>'],
            ['error', 'Option<PalletErrorMetadataV14>'],
            ['index', 'u8'],
            ['docs', 'Vec<Text>']
        ]
    },
    'ExtrinsicMetadataV15': {
        'type': 'struct',
        'type_mapping': [
            ['version', 'u8'],
            ['address_type', 'SiLookupTypeId'],
            ['call_type', 'SiLookupTypeId'],
            ['signature_type', 'SiLookupTypeId'],
            ['extra_type', 'SiLookupTypeId'],
            ['signed_extensions', 'Vec<SignedExtensionMetadataV14>']
        ]
    },
    'OuterEnums15': {
        'type': 'struct',
        'type_mapping': [
            ['call_type', 'SiLookupTypeId'],
            ['event_type', 'SiLookupTypeId'],
            ['error_type', 'SiLookupTypeId']
        ]
    },
    'CustomValueMetadata15': {
        'type': 'struct',
        'type_mapping': [
            ['ty', 'SiLookupTypeId'],
            ['value', 'Bytes']
        ]
    },
    'CustomMetadata15': {
        'type': 'struct',
        'type_mapping': [
            ['map', 'BTreeMap<Text, CustomValueMetadata15>']
        ]
    },
    'RuntimeApiMethodParamMetadataV15': {
        'type': 'struct',
        'type_mapping': [
            ['name', 'Text'],
            ['type', 'SiLookupTypeId']
        ]
    },
    'RuntimeApiMethodMetadataV15': {
        'type': 'struct',
        'type_mapping': [
            ['name', 'Text'],
            ['inputs', 'Vec<RuntimeApiMethodParamMetadataV15>'],
            ['output', 'SiLookupTypeId'],
            ['docs', 'Vec<Text>']
        ]
    },
    'RuntimeApiMetadataV15': {
        'type': 'struct',
        'type_mapping': [
            ['name', 'Text'],
            ['methods', 'Vec<RuntimeApiMethodMetadataV15>'],
            ['docs', 'Vec<Text>']
        ]
    },
    'MetadataV15': {
        'type': 'struct',
        'type_mapping': [
            ['types', 'PortableRegistry'],
            ['pallets', 'Vec<PalletMetadataV15>'],
            ['extrinsic', 'ExtrinsicMetadataV15'],
            ['runtime_type', 'SiLookupTypeId'],
            ['apis', 'Vec<RuntimeApiMetadataV15>'],
            ['outer_enums', 'OuterEnums15'],
            ['custom', 'CustomMetadata15']
        ]
    }
}

_runtime_config = None


def get_runtime_config() -> RuntimeConfigurationObject:
    """
    Returns the scalecodec runtime configuration used for metadata blobs: the core type registry preset extended
    with the V15 metadata structures
    """
    global _runtime_config

    if _runtime_config is None:
        core_preset = load_type_registry_preset(name="core")

        metadata_all = copy.deepcopy(core_preset['types']['MetadataAll'])
        metadata_all['type_mapping'].append(['V15', 'MetadataV15'])

        runtime_config = RuntimeConfigurationObject()
        runtime_config.update_type_registry(core_preset)
        runtime_config.update_type_registry({'types': dict(METADATA_TYPES, MetadataAll=metadata_all)})

        _runtime_config = runtime_config

    return _runtime_config


def decode_metadata(data: Union[ScaleBytes, bytes, str]) -> Tuple[int, dict]:
    """
    Decodes a `RuntimeMetadataPrefixed` blob into its version number and plain document form

    Parameters
    ----------
    data: raw metadata as bytes, hex string or ScaleBytes

    Returns
    -------
    (version, document) tuple
    """
    data = to_scale_bytes(data)
    offset = data.offset

    if remaining_length(data) < len(META_RESERVED) + 1:
        raise NotEnoughInput(len(META_RESERVED) + 1, remaining_length(data), offset)

    prefix = read_bytes(data, len(META_RESERVED))
    if prefix != META_RESERVED:
        raise InvalidMetadataPrefix(prefix)

    version = read_bytes(data, 1)[0]
    if version not in SUPPORTED_METADATA_VERSIONS:
        raise InvalidVersion(version)

    data.offset = offset
    metadata_obj = get_runtime_config().create_scale_object('MetadataVersioned', data=data)

    try:
        metadata_obj.decode(check_remaining=False)
    except (InvalidScaleTypeValueException, RemainingScaleBytesNotEmptyException, ValueError) as e:
        if data.offset >= data.length:
            raise NotEnoughInput(data.offset - offset, data.length - offset, offset)
        raise MetadataMismatch(f'Invalid V{version} metadata at offset {data.offset}: {e}')

    if remaining_length(data) > 0:
        raise RemainingBytesNotEmpty(remaining_length(data))

    return version, metadata_obj.value[1][f'V{version}']


def encode_metadata(document: dict) -> bytes:
    """
    Encodes a metadata document of the form `{'V14': {...}}` or `{'V15': {...}}` to a prefixed metadata blob

    Parameters
    ----------
    document: dict with a single version key

    Returns
    -------
    bytes
    """
    (version_key, body), = document.items()
    version = int(version_key.lstrip('Vv'))

    if version not in SUPPORTED_METADATA_VERSIONS:
        raise InvalidVersion(version)

    metadata_obj = get_runtime_config().create_scale_object('MetadataVersioned')

    try:
        # scalecodec adds default keys to the dicts it encodes
        data = metadata_obj.encode((f'0x{META_RESERVED.hex()}', {f'V{version}': copy.deepcopy(body)}))
    except (ValueError, KeyError, TypeError) as e:
        raise MetadataMismatch(f'Cannot encode V{version} metadata: {e}')

    return bytes(data.data)


def build_catalog(data: Union[ScaleBytes, bytes, str]) -> MetadataCatalog:
    """
    Decodes a metadata blob, migrates it to the latest version and builds a `MetadataCatalog`

    Parameters
    ----------
    data: raw metadata as bytes, hex string or ScaleBytes

    Returns
    -------
    MetadataCatalog
    """
    version, body = decode_metadata(data)

    document = migrate_to_latest({f'V{version}': body})

    catalog = MetadataCatalog.create_from_document(document['V15'], metadata_version=version)

    logger.debug(
        f'Built metadata catalog V{version}: {len(catalog.pallets)} pallets, {len(catalog.registry)} types'
    )

    return catalog
