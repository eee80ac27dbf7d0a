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

import shutil
import stat

from typing import Tuple

from recipe_builder.recipe_helpers import *  # noqa
from recipe_builder.util import get_staged_path


LLVM_URL_PREFIX = 'https://github.com/llvm/llvm-project/releases/download/llvmorg-{0}/'

# (archive name, sha256, parent directory, directory name)
LLVM_SUB_PROJECTS = [
    ('clang', '0f96acace1e8326b39f220ba19e055ba99b0ab21c2475042dbc6a482649c5209',
     'tools', 'clang'),
    ('lld', 'efe7be4a7b7cdc6f3bcf222827c6f837439e6e656d12d6c885d5c8a80ff4fd1c',
     'tools', 'lld'),
    ('lldb', '8570c09f57399e21e0eea0dcd66ae0231d47eafc7a04d6fe5c4951b13c4d2c72',
     'tools', 'lldb'),
    ('polly', 'dcfadb8d11f2ea0743a3f19bab3b43ee1cb855e136bc81c76e2353cd76148440',
     'tools', 'polly'),
    ('compiler-rt', '374aff82ff573a449f9aabbd330a5d0a441181c535a3599996127378112db234',
     'projects', 'compiler-rt'),
    ('libcxx', '6c1ee6690122f2711a77bc19241834a9219dda5036e1597bfa397f341a9b8b7a',
     'projects', 'libcxx'),
    ('libcxxabi', '58697d4427b7a854ec7529337477eb4fba16407222390ad81a40d125673e4c15',
     'projects', 'libcxxabi'),
    ('openmp', '2d704df8ca67b77d6d94ebf79621b0f773d5648963dd19e0f78efef4404b684c',
     'projects', 'openmp'),
    ('libunwind', '8455011c33b14abfe57b2fd9803fb610316b16d4c9818bec552287e2ba68922f',
     'projects', 'libunwind'),
]

CLC_SCRIPT_TEMPLATE = """#!/bin/bash
machine=$(gcc -dumpmachine)
version=$(gcc -dumpversion)
gnuc_lib={lib_prefix}/gcc/${{machine}}/${{version}}
clang -B ${{gnuc_lib}} -L ${{gnuc_lib}} "$@"
"""

CLCXX_SCRIPT_TEMPLATE = """#!/bin/bash
machine=$(gcc -dumpmachine)
version=$(gcc -dumpversion)
cxx_sys={prefix}/include/c++/${{version}}
cxx_inc={prefix}/include/c++/${{version}}/${{machine}}
gnuc_lib={lib_prefix}/gcc/${{machine}}/${{version}}
clang++ -fPIC -rtlib=compiler-rt -stdlib=libc++ -cxx-isystem ${{cxx_sys}} -I ${{cxx_inc}} \
-B ${{gnuc_lib}} -L ${{gnuc_lib}} "$@"
"""

WRAPPER_SCRIPT_MODE = (
    stat.S_IRWXU | stat.S_IRGRP | stat.S_IXGRP | stat.S_IROTH | stat.S_IXOTH)


class LlvmBackend(CMakeBackend):
    """
    Also generates the clc and clc++ wrapper scripts that point clang at the GCC runtime
    libraries and headers.
    """

    def get_wrapper_scripts(self) -> List[Tuple[str, str]]:
        format_args = dict(prefix=self.config.prefix, lib_prefix=self.config.lib_prefix)
        return [
            ('clc', CLC_SCRIPT_TEMPLATE.format(**format_args)),
            ('clc++', CLCXX_SCRIPT_TEMPLATE.format(**format_args)),
        ]

    def configure(self) -> None:
        super().configure()
        for script_name, script_body in self.get_wrapper_scripts():
            write_file(os.path.join(self.build_dir, script_name), script_body)

    def install(self, dest_dir: str) -> None:
        super().install(dest_dir)
        bin_dir = get_staged_path(dest_dir, os.path.join(self.config.prefix, 'bin'))
        mkdir_p(bin_dir)
        for script_name, _ in self.get_wrapper_scripts():
            installed_path = os.path.join(bin_dir, script_name)
            log("Installing %s to %s", script_name, installed_path)
            shutil.copyfile(os.path.join(self.build_dir, script_name), installed_path)
            os.chmod(installed_path, WRAPPER_SCRIPT_MODE)


class LlvmPackage(Package):
    def __init__(self) -> None:
        super(LlvmPackage, self).__init__(
            name='llvm',
            version='11.0.0',
            url_pattern=LLVM_URL_PREFIX + 'llvm-{0}.src.tar.xz',
            source_digest='913f68c898dfb4a03b397c5e11c6a2f39d0f22ed7665c9cefa87a34423a72469',
            description='The LLVM Project is a collection of modular and reusable compiler and '
                        'toolchain technologies. The optional packages clang, lld, lldb, polly, '
                        'compiler-rt, libcxx, libcxxabi and openmp are included.',
            homepage='http://llvm.org/')
        self.dependencies = ['libedit', 'libtirpc', 'swig']
        self.build_dependencies = ['ld_default', 'graphviz', 'python27', 'sphinx', 'ocaml']
        self.auxiliary_archives = [
            AuxiliaryArchive(
                name=archive_name,
                version=self.version,
                url_pattern=LLVM_URL_PREFIX + archive_name + '-{0}.src.tar.xz',
                digest=digest,
                parent_dir_name=parent_dir_name,
                dir_name=dir_name)
            for archive_name, digest, parent_dir_name, dir_name in LLVM_SUB_PROJECTS
        ]

    def get_cmake_args(self, config: BuildConfig) -> List[str]:
        args = [
            '-DCURSES_INCLUDE_PATH={}'.format(os.path.join(config.prefix, 'include', 'ncursesw')),
            '-DCMAKE_CXX_FLAGS=-fPIC',
        ]
        if config.target_arch == 'x86_64':
            args.append('-DLLVM_LIBDIR_SUFFIX=64')
        args += [
            '-DBUILD_SHARED_LIBS=ON',
            '-DLLVM_ENABLE_RTTI=ON',
            '-Wno-dev',
        ]
        return args

    def create_build_backend(
            self,
            config: BuildConfig,
            src_path: str,
            build_path: str) -> BuildBackend:
        return LlvmBackend(
            self.name,
            config,
            src_dir=src_path,
            build_dir=build_path,
            extra_cmake_args=self.get_cmake_args(config),
            use_ninja_if_available=False)

    def get_postinstall_messages(self, config: BuildConfig) -> List[str]:
        return [
            "To compile programs, use 'clang' or 'clang++'.",
            "To avoid the repeated use of switch options, try the wrapper scripts 'clc' or "
            "'clc++'.",
            "For more information, see http://llvm.org/pubs/2008-10-04-ACAT-LLVM-Intro.pdf",
        ]
