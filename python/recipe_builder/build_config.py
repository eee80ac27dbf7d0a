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

import multiprocessing
import os

from typing import Optional

from recipe_builder.arch import get_target_triple
from recipe_builder.file_system_layout import FileSystemLayout


DEFAULT_PREFIX = '/usr/local'


class BuildConfig:
    """
    Settings shared by the download manager, the builder and the build backends. Constructed once
    by the command-line driver (or by tests) and passed down explicitly; nothing below the driver
    consults environment variables.
    """

    fs_layout: FileSystemLayout

    # Final installation prefix, e.g. /usr/local. Files are staged under fs_layout.dest_dir.
    prefix: str
    target_arch: str

    # Disables TLS certificate validation for downloads. Off unless explicitly requested.
    insecure_tls: bool

    # Continue partially downloaded archives from their current size instead of starting over.
    resume_downloads: bool

    make_parallelism: int
    download_extract_only: bool

    def __init__(
            self,
            fs_layout: FileSystemLayout,
            target_arch: str,
            prefix: str = DEFAULT_PREFIX,
            insecure_tls: bool = False,
            resume_downloads: bool = True,
            make_parallelism: Optional[int] = None,
            download_extract_only: bool = False) -> None:
        self.fs_layout = fs_layout
        self.target_arch = target_arch
        self.prefix = prefix
        self.insecure_tls = insecure_tls
        self.resume_downloads = resume_downloads
        self.make_parallelism = make_parallelism or multiprocessing.cpu_count()
        self.download_extract_only = download_extract_only

    @property
    def download_dir(self) -> str:
        return self.fs_layout.download_dir

    @property
    def target_triple(self) -> str:
        return get_target_triple(self.target_arch)

    @property
    def lib_prefix(self) -> str:
        lib_dir_name = 'lib64' if self.target_arch == 'x86_64' else 'lib'
        return os.path.join(self.prefix, lib_dir_name)

    @property
    def dest_dir(self) -> str:
        return self.fs_layout.dest_dir
