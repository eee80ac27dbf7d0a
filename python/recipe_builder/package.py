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

from typing import List, Optional, TYPE_CHECKING

from recipe_builder.archive_handling import get_archive_file_name_from_url
from recipe_builder.archive_spec import ArchiveSpec
from recipe_builder.build_backend import BuildBackend
from recipe_builder.build_config import BuildConfig
from recipe_builder.util import DEFAULT_DIGEST_TYPE

if TYPE_CHECKING:
    from recipes import AuxiliaryArchive


class Package:
    """
    Base class for recipes. A recipe declares its metadata in the constructor and overrides
    create_build_backend() to describe how to build it. Dependency names are informational only.
    """

    name: str
    version: str
    download_url: str
    source_digest: str
    source_digest_type: str
    description: str
    homepage: Optional[str]
    license: Optional[str]
    dependencies: List[str]
    build_dependencies: List[str]
    auxiliary_archives: List['AuxiliaryArchive']

    def __init__(
            self,
            name: str,
            version: str,
            url_pattern: str,
            source_digest: str,
            source_digest_type: str = DEFAULT_DIGEST_TYPE,
            description: str = '',
            homepage: Optional[str] = None,
            license: Optional[str] = None) -> None:
        self.name = name
        self.version = version
        self.download_url = url_pattern.format(version)
        self.source_digest = source_digest
        self.source_digest_type = source_digest_type
        self.description = description
        self.homepage = homepage
        self.license = license
        self.dependencies = []
        self.build_dependencies = []
        self.auxiliary_archives = []

    def __repr__(self) -> str:
        return '%s(%s %s)' % (self.__class__.__name__, self.name, self.version)

    def get_source_dir_basename(self) -> str:
        return '%s-%s' % (self.name, self.version)

    def get_source_archive_file_name(self) -> str:
        return get_archive_file_name_from_url(self.download_url)

    def get_source_archive_spec(self, src_parent_dir: str) -> ArchiveSpec:
        return ArchiveSpec(
            source_url=self.download_url,
            expected_digest=self.source_digest,
            extract_dir=src_parent_dir,
            target_subdir_name=self.get_source_dir_basename(),
            digest_type=self.source_digest_type)

    def get_auxiliary_archive_specs(self, src_path: str) -> List[ArchiveSpec]:
        """
        Archives to unpack inside the package source directory after the main source archive.
        """
        return [
            aux_archive.get_archive_spec(src_path) for aux_archive in self.auxiliary_archives
        ]

    def create_build_backend(
            self,
            config: BuildConfig,
            src_path: str,
            build_path: str) -> BuildBackend:
        raise NotImplementedError()

    def get_postinstall_messages(self, config: BuildConfig) -> List[str]:
        return []
