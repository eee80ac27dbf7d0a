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

import importlib
import os

from typing import Any, Dict, List, TYPE_CHECKING

from recipe_builder.archive_spec import ArchiveSpec
from recipe_builder.util import DEFAULT_DIGEST_TYPE

if TYPE_CHECKING:
    from recipe_builder.package import Package


class AuxiliaryArchive:
    """
    An additional source archive unpacked inside the source directory of a package, e.g. the
    clang sources that go into llvm/tools/clang.
    """

    def __init__(
            self,
            name: str,
            version: str,
            url_pattern: str,
            digest: str,
            parent_dir_name: str,
            dir_name: str,
            digest_type: str = DEFAULT_DIGEST_TYPE) -> None:
        self.name = name
        self.version = version
        self.download_url = url_pattern.format(version)
        self.digest = digest
        self.digest_type = digest_type
        # Relative to the package source directory.
        self.parent_dir_name = parent_dir_name
        self.dir_name = dir_name

    def get_archive_spec(self, src_path: str) -> ArchiveSpec:
        return ArchiveSpec(
            source_url=self.download_url,
            expected_digest=self.digest,
            extract_dir=os.path.join(src_path, self.parent_dir_name),
            target_subdir_name=self.dir_name,
            digest_type=self.digest_type)


# In build order.
RECIPE_MODULE_NAMES = [
    'stunnel',
    'ccache',
    'llvm',
]


def get_recipe_module(module_name: str) -> Any:
    return importlib.import_module('recipes.' + module_name)


def get_package_by_module_name(module_name: str) -> 'Package':
    recipe_module = get_recipe_module(module_name)
    candidate_classes: List[Any] = []
    for field_name in dir(recipe_module):
        field_value = getattr(recipe_module, field_name)
        if isinstance(field_value, type):
            class_name = field_value.__name__
            if (class_name != 'Package' and class_name.endswith('Package') and
                    field_value.__module__ == recipe_module.__name__):
                candidate_classes.append(field_value)

    if not candidate_classes:
        raise ValueError(
            "Could not find a ...Package class in recipe module %s" % module_name)

    if len(candidate_classes) > 1:
        raise ValueError("Found too many classes with names ending with Package in module "
                         "%s: %s" % (module_name, sorted(
                             [cl.__name__ for cl in candidate_classes])))
    return candidate_classes[0]()


def get_all_packages() -> List['Package']:
    packages = [get_package_by_module_name(module_name) for module_name in RECIPE_MODULE_NAMES]
    packages_by_name: Dict[str, 'Package'] = {}
    for package in packages:
        if package.name in packages_by_name:
            raise ValueError("Duplicate package: %s" % package.name)
        packages_by_name[package.name] = package
    return packages
