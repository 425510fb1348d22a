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
from typing import Union

from scalecodec.base import ScaleBytes

from runtimecodec.config import CodecConfig
from runtimecodec.exceptions import EventNotFound, RemainingBytesNotEmpty
from runtimecodec.scale.catalog import MetadataCatalog
from runtimecodec.scale.decode import decode_value
from runtimecodec.scale.primitives import read_bytes, remaining_length
from runtimecodec.scale.serialize import serialize_value
from runtimecodec.utils import to_scale_bytes


class EventDetails:

    def __init__(self, pallet_name: str, pallet_index: int, name: str, index: int, fields: list, docs=()):
        self.pallet_name = pallet_name
        self.pallet_index = pallet_index
        self.name = name
        self.index = index
        # (name or None, type id, Value) per event field
        self.fields = fields
        self.docs = tuple(docs)

    @property
    def event_name(self):
        return self.name

    @property
    def attributes(self):
        return [value for _, _, value in self.fields]

    def serialize(self, catalog: MetadataCatalog) -> dict:
        attributes = [serialize_value(value, type_id, catalog.registry) for _, type_id, value in self.fields]
        if all(name for name, _, _ in self.fields) and self.fields:
            attributes = {name: attr for (name, _, _), attr in zip(self.fields, attributes)}
        return {
            'module_id': self.pallet_name,
            'event_id': self.name,
            'attributes': attributes
        }

    def __repr__(self):
        return f'<EventDetails {self.pallet_name}.{self.name}>'


def decode_event(catalog: MetadataCatalog, data: Union[ScaleBytes, bytes, str], config: CodecConfig = None,
                 check_remaining: bool = True) -> EventDetails:
    """
    Decodes a runtime event: pallet index byte, event index byte and the event fields

    Parameters
    ----------
    catalog: MetadataCatalog of the runtime that emitted the event
    data: encoded event
    config: optional CodecConfig
    check_remaining: raise RemainingBytesNotEmpty when bytes are left after the event

    Returns
    -------
    EventDetails
    """
    data = to_scale_bytes(data)

    pallet_index, event_index = read_bytes(data, 2)

    pallet = None
    for candidate in catalog.pallets:
        if candidate.index == pallet_index:
            pallet = candidate
            break

    event = pallet.get_event_by_index(event_index) if pallet is not None else None

    if event is None:
        raise EventNotFound(pallet_index, event_index)

    fields = []
    for field in event.fields:
        fields.append((field.name, field.type, decode_value(data, field.type, catalog.registry, config)))

    if check_remaining and remaining_length(data) > 0:
        raise RemainingBytesNotEmpty(remaining_length(data))

    return EventDetails(
        pallet_name=pallet.name, pallet_index=pallet_index, name=event.name, index=event_index, fields=fields,
        docs=event.docs
    )
