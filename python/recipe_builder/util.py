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

import datetime
import hashlib
import os
import pathlib
import random
import shutil

from typing import Optional, Any, Dict


# Hex digest lengths of the supported digest types.
DIGEST_HEX_LENGTHS: Dict[str, int] = {
    'sha1': 40,
    'sha256': 64,
}

DEFAULT_DIGEST_TYPE = 'sha256'


def compute_file_hash(hash: Any, filename: str, block_size: int = 65536) -> str:
    """
    Compute the hash sum of a file by updating the existing hash object.
    """
    with open(filename, "rb") as f:
        for block in iter(lambda: f.read(block_size), b""):
            hash.update(block)
    return hash.hexdigest()


def compute_file_digest(path: str, digest_type: str = DEFAULT_DIGEST_TYPE) -> str:
    if digest_type not in DIGEST_HEX_LENGTHS:
        raise ValueError("Unsupported digest type: %s" % digest_type)
    return compute_file_hash(hashlib.new(digest_type), path)


def remove_path(path: str) -> None:
    if os.path.islink(path):
        # Remove the link even if the path it is pointing to does not exist.
        os.unlink(path)
    if not os.path.exists(path):
        return
    if os.path.isdir(path):
        assert path != '/'
        shutil.rmtree(path)
    else:
        os.remove(path)


def mkdir_p(path: str) -> None:
    pathlib.Path(path).mkdir(parents=True, exist_ok=True)


def which_executable(cmd_name: str) -> Optional[str]:
    result = shutil.which(cmd_name)
    if result is None:
        return result
    assert isinstance(result, str)
    return result


def which_must_exist(cmd_name: str) -> str:
    result = which_executable(cmd_name)
    if result is None:
        raise IOError("Executable not found: %s. PATH: %s" % (cmd_name, os.getenv('PATH')))
    return result


def read_file(file_path: str) -> str:
    with open(file_path) as input_file:
        return input_file.read()


def write_file(file_path: str, data: str) -> None:
    with open(file_path, 'w') as output_file:
        output_file.write(data)


def get_seconds_timestamp_for_file_name() -> str:
    """
    Returns the current timestamp at a second-level granularity in a format suitable for inclusion
    in file and directory names.
    """
    return datetime.datetime.now().strftime('%Y-%m-%dT%H_%M_%S')


def get_random_suffix_for_file_name() -> str:
    """
    Returns a random 9-digit integer.

    >>> len(get_random_suffix_for_file_name())
    9
    """
    return str(random.randint(10 ** 8, 10 ** 9 - 1))


def get_temporal_randomized_file_name_suffix() -> str:
    return "%s-%s" % (
        get_seconds_timestamp_for_file_name(),
        get_random_suffix_for_file_name()
    )


def get_staged_path(dest_dir: str, install_path: str) -> str:
    """
    Returns the location of an absolute installation path inside a staging root directory.

    >>> get_staged_path('/tmp/dest', '/usr/local/bin')
    '/tmp/dest/usr/local/bin'
    """
    return os.path.join(dest_dir, os.path.relpath(install_path, '/'))
