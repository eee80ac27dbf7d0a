# Copyright (c) Yugabyte, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may not use this file except
# in compliance with the License. You may obtain a copy of the License at
#
# http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software distributed under the License
# is distributed on an "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express
# or implied. See the License for the specific language governing permissions and limitations
# under the License.
#

import shlex

from typing import Any, List


def normalize_cmd_arg(arg: Any) -> Any:
    # Auto-convert ints to strings, but don't convert anything else.
    if isinstance(arg, int):
        return str(arg)
    return arg


def normalize_cmd_args(args: List[Any]) -> List[str]:
    """
    >>> normalize_cmd_args(['make', '-j', 8])
    ['make', '-j', '8']
    """
    return [normalize_cmd_arg(arg) for arg in args]


def shlex_join(args: List[str], one_arg_per_line: bool = False) -> str:
    """
    >>> shlex_join(['curl', '-o', 'clang 11.tar.xz'])
    "curl -o 'clang 11.tar.xz'"
    """
    quoted_args = [shlex.quote(arg) for arg in args]
    if one_arg_per_line:
        return ' \\\n  '.join(quoted_args)
    return ' '.join(quoted_args)


def one_per_line_indented(items: List[str], num_spaces: int = 4) -> str:
    """
    >>> print(one_per_line_indented(['a', 'b']))
        a
        b
    """
    return '\n'.join(' ' * num_spaces + item for item in items)
