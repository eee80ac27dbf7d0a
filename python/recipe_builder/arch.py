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

import platform

from sys_detection import is_macos
from typing import Optional


MACOS_CPU_ARCHITECTURES = ['x86_64', 'arm64']

# Architecture names used by recipes, keyed by the names platform.machine() may report.
ARCH_ALIASES = {
    'amd64': 'x86_64',
    'arm64': 'aarch64',
    'armv8l': 'armv7l',
    'i386': 'i686',
    'i586': 'i686',
}


def normalize_arch(arch: str) -> str:
    """
    >>> normalize_arch('AMD64')
    'x86_64'
    >>> normalize_arch('armv7l')
    'armv7l'
    """
    arch = arch.lower()
    return ARCH_ALIASES.get(arch, arch)


def get_target_arch(requested_arch: Optional[str] = None) -> str:
    """
    Determines the architecture to build for. An explicitly requested architecture must match the
    machine we are running on, except on macOS where both supported architectures can be
    targeted.
    """
    actual_arch = platform.machine()
    if requested_arch is None:
        if is_macos():
            return actual_arch
        return normalize_arch(actual_arch)

    if is_macos():
        if requested_arch not in MACOS_CPU_ARCHITECTURES:
            raise ValueError("Unsupported target architecture on macOS: %s" % requested_arch)
        return requested_arch

    if normalize_arch(requested_arch) != normalize_arch(actual_arch):
        raise ValueError("Machine architecture is %s but we expect %s" % (
            actual_arch, requested_arch))
    return normalize_arch(requested_arch)


# GNU target triples of the architectures recipes are built for.
TARGET_TRIPLES = {
    'x86_64': 'x86_64-linux-gnu',
    'aarch64': 'aarch64-linux-gnu',
    'armv7l': 'armv7l-linux-gnueabihf',
    'i686': 'i686-linux-gnu',
}


def get_target_triple(target_arch: str) -> str:
    """
    >>> get_target_triple('armv7l')
    'armv7l-linux-gnueabihf'
    >>> get_target_triple('riscv64')
    'riscv64-linux-gnu'
    """
    return TARGET_TRIPLES.get(target_arch, '%s-linux-gnu' % target_arch)
