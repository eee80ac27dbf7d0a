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

import os

from typing import List, Tuple
from urllib.parse import urlparse


TAR_EXTRACT = ['tar', '--no-same-owner', '-xf']
# -o -- force overwriting existing files
ZIP_EXTRACT = ['unzip', '-q', '-o']

ARCHIVE_TYPES = {
    '.tar.bz2': TAR_EXTRACT,
    '.tar.gz': TAR_EXTRACT,
    '.tar.xz': TAR_EXTRACT,
    '.tgz': TAR_EXTRACT,
    '.zip': ZIP_EXTRACT,
}


def split_archive_file_name(archive_file_name: str) -> Tuple[str, str]:
    """
    Split the extension from the archive name. This is different from os.path.splitext because e.g.
    '.tar.gz' is considered an indivisible extension, while os.path.splitext would only consider
    '.gz' an extension.

    >>> split_archive_file_name('clang-11.0.0.src.tar.xz')
    ('clang-11.0.0.src', '.tar.xz')
    >>> split_archive_file_name('stunnel-5.41.tar.gz')
    ('stunnel-5.41', '.tar.gz')
    >>> split_archive_file_name('my.archive.zip')
    ('my.archive', '.zip')
    >>> split_archive_file_name('somefile')
    ('somefile', '')
    """
    for archive_extension in ARCHIVE_TYPES:
        if archive_file_name.endswith(archive_extension):
            return (archive_file_name[:-len(archive_extension)],
                    archive_file_name[-len(archive_extension):])

    return os.path.splitext(archive_file_name)


def get_archive_file_name_from_url(url: str) -> str:
    """
    Returns the local file name for an archive downloaded from the given URL: the last component
    of the URL path. Query strings and fragments are ignored.

    >>> get_archive_file_name_from_url(
    ...     'https://github.com/llvm/llvm-project/releases/download/llvmorg-11.0.0/'
    ...     'lld-11.0.0.src.tar.xz')
    'lld-11.0.0.src.tar.xz'
    >>> get_archive_file_name_from_url('https://example.com/dl/foo-1.0.tar.gz?mirror=eu#top')
    'foo-1.0.tar.gz'
    >>> get_archive_file_name_from_url('https://example.com/')
    Traceback (most recent call last):
    ValueError: Could not determine archive file name from URL: https://example.com/
    """
    file_name = os.path.basename(urlparse(url).path)
    if not file_name:
        raise ValueError("Could not determine archive file name from URL: %s" % url)
    return file_name


def get_archive_extension(archive_file_name: str) -> str:
    """
    >>> get_archive_extension('/tmp/download/ccache-4.1.tar.xz')
    '.tar.xz'
    >>> get_archive_extension('ccache-4.1.rar')
    Traceback (most recent call last):
    ValueError: Unknown archive type for: ccache-4.1.rar
    """
    for ext in ARCHIVE_TYPES:
        if archive_file_name.endswith(ext):
            return ext
    raise ValueError("Unknown archive type for: %s" % archive_file_name)


def get_extract_cmd(archive_path: str) -> List[str]:
    """
    Returns the command line that extracts the given archive into the current directory.

    >>> get_extract_cmd('/tmp/download/polly-11.0.0.src.tar.xz')
    ['tar', '--no-same-owner', '-xf', '/tmp/download/polly-11.0.0.src.tar.xz']
    >>> get_extract_cmd('gmock-1.7.0.zip')
    ['unzip', '-q', '-o', 'gmock-1.7.0.zip']
    """
    return ARCHIVE_TYPES[get_archive_extension(archive_path)] + [archive_path]
