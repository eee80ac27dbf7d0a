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

# Everything a recipe module needs, to be imported with "import *".

import os

from typing import List

from recipe_builder.build_backend import (
    BuildBackend,
    CMakeBackend,
    ConfigureMakeBackend,
)
from recipe_builder.build_config import BuildConfig
from recipe_builder.custom_logging import log
from recipe_builder.package import Package
from recipe_builder.util import mkdir_p, write_file

from recipes import AuxiliaryArchive

__all__ = [
    'os',
    'List',
    'AuxiliaryArchive',
    'BuildBackend',
    'BuildConfig',
    'CMakeBackend',
    'ConfigureMakeBackend',
    'Package',
    'log',
    'mkdir_p',
    'write_file',
]
