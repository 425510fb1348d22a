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
from runtimecodec.exceptions import InvalidVersion
from runtimecodec.scale.migrations.v14_to_v15 import v14_to_v15


def migrate_to_latest(document: dict) -> dict:
    """
    Brings a versioned metadata document (`{'V14': {...}}` or `{'V15': {...}}`) to V15. A V15 document is
    returned as the same object.
    """
    if len(document) != 1:
        raise InvalidVersion(list(document.keys()))

    (version_key, body), = document.items()

    if version_key == 'V15':
        return document

    if version_key == 'V14':
        return {'V15': v14_to_v15(body)}

    raise InvalidVersion(version_key)
