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
from .constants import MAX_TYPE_DEPTH, MAX_ZERO_SIZE_SEQUENCE_LENGTH
from .exceptions import ConfigurationError


class CodecConfig:

    def __init__(self, strict_compact: bool = False, max_depth: int = MAX_TYPE_DEPTH,
                 max_zero_size_length: int = MAX_ZERO_SIZE_SEQUENCE_LENGTH):
        """
        Settings shared by the decode and encode engines

        Parameters
        ----------
        strict_compact: Reject compact integers that are not in their minimal size class. Non-minimal encodings are
        accepted by default and canonicalize on re-encode
        max_depth: Deepest type nesting that will be walked before giving up
        max_zero_size_length: Longest decoded sequence whose elements occupy no bytes, such as `Vec<()>`. The
        length prefix of such a sequence is not bounded by the remaining input
        """
        if type(max_depth) is not int or max_depth < 1:
            raise ConfigurationError('max_depth must be a positive int')

        if type(max_zero_size_length) is not int or max_zero_size_length < 0:
            raise ConfigurationError('max_zero_size_length must be a non-negative int')

        self.strict_compact = bool(strict_compact)
        self.max_depth = max_depth
        self.max_zero_size_length = max_zero_size_length

    def __repr__(self):
        return f'<CodecConfig strict_compact={self.strict_compact} max_depth={self.max_depth} ' \
               f'max_zero_size_length={self.max_zero_size_length}>'


DEFAULT_CONFIG = CodecConfig()
