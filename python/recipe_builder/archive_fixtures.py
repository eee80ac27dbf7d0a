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

"""
Helpers for creating small source archives and build configurations in unit tests.
"""

import io
import os
import shutil
import tarfile

from typing import Dict, List, Optional

from recipe_builder.build_config import BuildConfig
from recipe_builder.download_manager import NetworkError
from recipe_builder.file_system_layout import FileSystemLayout
from recipe_builder.util import compute_file_digest


def create_tar_archive(
        archive_path: str,
        top_dir_name: Optional[str],
        files: Dict[str, str]) -> str:
    """
    Creates a .tar.gz or .tar.xz archive (chosen by the file name) with the given files (relative
    path -> contents) under a single top-level directory, or at the top level if top_dir_name is
    None. Returns the SHA-256 digest of the archive.
    """
    mode = 'w:xz' if archive_path.endswith('.tar.xz') else 'w:gz'
    with tarfile.open(archive_path, mode) as archive:
        for rel_path, contents in sorted(files.items()):
            data = contents.encode('utf-8')
            member_path = rel_path if top_dir_name is None else top_dir_name + '/' + rel_path
            tar_info = tarfile.TarInfo(member_path)
            tar_info.size = len(data)
            tar_info.mode = 0o644
            archive.addfile(tar_info, io.BytesIO(data))
    return compute_file_digest(archive_path, 'sha256')


def create_test_config(root_dir: str, **kwargs: bool) -> BuildConfig:
    return BuildConfig(
        fs_layout=FileSystemLayout(root_dir),
        target_arch='x86_64',
        prefix='/usr/local',
        make_parallelism=2,
        **kwargs)


class FakeFetcher:
    """
    Stands in for the network transfer: "downloads" URLs by copying local files. With
    resume=True an existing local file is continued from its current size, the way
    curl --continue-at - does.
    """

    url_to_local_path: Dict[str, str]
    fetched_urls: List[str]

    def __init__(self, url_to_local_path: Dict[str, str], resume: bool = False) -> None:
        self.url_to_local_path = url_to_local_path
        self.resume = resume
        self.fetched_urls = []

    def __call__(self, url: str, file_path: str) -> None:
        self.fetched_urls.append(url)
        if url not in self.url_to_local_path:
            raise NetworkError("Could not resolve host for %s" % url)
        source_path = self.url_to_local_path[url]
        if not (self.resume and os.path.exists(file_path)):
            shutil.copyfile(source_path, file_path)
            return
        with open(source_path, 'rb') as source_file:
            source_file.seek(os.path.getsize(file_path))
            remaining_data = source_file.read()
        with open(file_path, 'ab') as output_file:
            output_file.write(remaining_data)


def list_dir_names(dir_path: str) -> List[str]:
    return sorted(os.listdir(dir_path)) if os.path.isdir(dir_path) else []
