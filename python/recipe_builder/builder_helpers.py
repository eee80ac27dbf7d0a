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

import re

from typing import List, Optional

from recipe_builder.string_util import one_per_line_indented
from recipe_builder.util import which_executable


CMAKE_VAR_RE = re.compile(r'^(-D[A-Z_]+)=(.*)$')


g_is_ninja_available: Optional[bool] = None


def is_ninja_available() -> bool:
    global g_is_ninja_available
    if g_is_ninja_available is None:
        g_is_ninja_available = bool(which_executable('ninja'))
    return g_is_ninja_available


def format_cmake_args_for_log(args: List[str]) -> str:
    """
    Formats CMake arguments one per line, splitting multi-word variable values over several
    lines.

    >>> print(format_cmake_args_for_log(['cmake', '-DCMAKE_CXX_FLAGS=-fPIC -O2', '-Wno-dev']))
        cmake
        -DCMAKE_CXX_FLAGS="-fPIC
                           -O2"
        -Wno-dev
    """
    lines = []
    for arg in args:
        match = CMAKE_VAR_RE.match(arg)
        if match:
            cmake_var_name = match.group(1)
            cmake_var_value = match.group(2)
            cmake_var_value_parts = cmake_var_value.split()
            if len(cmake_var_value_parts) > 1:
                lines.append('%s="%s' % (cmake_var_name, cmake_var_value_parts[0]))
                current_indent = ' ' * (len(cmake_var_name) + 2)
                for cmake_var_value_part in cmake_var_value_parts[1:-1]:
                    lines.append(current_indent + cmake_var_value_part)
                lines.append('%s%s"' % (current_indent, cmake_var_value_parts[-1]))
                continue

        lines.append(arg)

    return one_per_line_indented(lines)
