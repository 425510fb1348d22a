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
from abc import ABC, abstractmethod
from typing import Callable, Optional

__all__ = ['Transport', 'Signer']


class Transport(ABC):
    """
    Connection to a Substrate node, supplied by the application. Responses are JSON-RPC response dicts
    containing either a `result` or an `error` key.
    """

    @abstractmethod
    def request(self, method: str, params: list) -> dict:
        pass

    @abstractmethod
    def subscribe(self, method: str, params: list, unsubscribe_method: str,
                  result_handler: Callable[[dict, int, str], Optional[object]]):
        """
        Subscribes with `method` and passes every notification to `result_handler(message, update_nr,
        subscription_id)` until it returns a value other than None, then unsubscribes with `unsubscribe_method`
        and returns that value
        """
        pass


class Signer(ABC):
    """
    Holder of a key pair, supplied by the application
    """

    @abstractmethod
    def sign(self, payload: bytes) -> bytes:
        pass

    @abstractmethod
    def public_key(self) -> bytes:
        pass
