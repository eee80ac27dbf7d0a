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

import os

from typing import List, TYPE_CHECKING

from recipe_builder.custom_logging import heading, log
from recipe_builder.util import remove_path, mkdir_p

if TYPE_CHECKING:
    from recipe_builder.package import Package


class FileSystemLayout:
    root_dir: str
    download_dir: str
    src_dir: str
    build_dir: str

    # Staging root for DESTDIR-style installs.
    dest_dir: str

    def __init__(self, root_dir: str) -> None:
        self.root_dir = os.path.abspath(root_dir)
        self.download_dir = os.path.join(self.root_dir, 'download')
        self.src_dir = os.path.join(self.root_dir, 'src')
        self.build_dir = os.path.join(self.root_dir, 'build')
        self.dest_dir = os.path.join(self.root_dir, 'dest')

    def prepare_out_dirs(self) -> None:
        for dir_path in [self.download_dir, self.src_dir, self.build_dir, self.dest_dir]:
            mkdir_p(dir_path)

    def get_source_path(self, package: 'Package') -> str:
        return os.path.join(self.src_dir, package.get_source_dir_basename())

    def get_build_path(self, package: 'Package') -> str:
        return os.path.join(self.build_dir, package.get_source_dir_basename())

    def get_archive_path(self, package: 'Package') -> str:
        return os.path.join(self.download_dir, package.get_source_archive_file_name())

    def remove_path_for_package(self, package: 'Package', path: str, description: str) -> None:
        full_description = f"{description} for package {package.name}"
        if os.path.exists(path):
            log(f"Removing {full_description} at {path}")
            remove_path(path)
        else:
            log(f"Could not find {full_description} at {path}, nothing to remove")

    def clean(self, selected_packages: List['Package'], clean_downloads: bool) -> None:
        heading('Clean')

        for package in selected_packages:
            self.remove_path_for_package(
                package, self.get_build_path(package), description="build directory")
            self.remove_path_for_package(
                package, self.get_source_path(package), description="source")
            if clean_downloads:
                self.remove_path_for_package(
                    package, self.get_archive_path(package), description="downloaded archive")
