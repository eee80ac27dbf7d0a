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

from recipe_builder.recipe_helpers import *  # noqa
from recipe_builder.util import get_staged_path


# Compiler names that get a ccache symlink in the ccache bin directory. The GNU ones also get a
# link prefixed with the target triple, e.g. x86_64-linux-gnu-gcc.
GNU_COMPILER_NAMES = ['gcc', 'g++', 'c++']
OTHER_COMPILER_NAMES = ['cc', 'clang', 'clang++']

CCACHE_CONF_CONTENTS = "sloppiness = file_macro,locale,time_macros\n"


def get_ccache_compiler_names(target_triple: str) -> List[str]:
    """
    >>> get_ccache_compiler_names('aarch64-linux-gnu')[-3:]
    ['aarch64-linux-gnu-gcc', 'aarch64-linux-gnu-g++', 'aarch64-linux-gnu-c++']
    """
    return GNU_COMPILER_NAMES + OTHER_COMPILER_NAMES + [
        '%s-%s' % (target_triple, compiler_name) for compiler_name in GNU_COMPILER_NAMES
    ]


class CcacheBackend(CMakeBackend):
    def install(self, dest_dir: str) -> None:
        super().install(dest_dir)
        ccache_bin_dir = get_staged_path(
            dest_dir, os.path.join(self.config.lib_prefix, 'ccache', 'bin'))
        mkdir_p(ccache_bin_dir)
        ccache_path = os.path.join(self.config.prefix, 'bin', 'ccache')
        for compiler_name in get_ccache_compiler_names(self.config.target_triple):
            link_path = os.path.join(ccache_bin_dir, compiler_name)
            if not os.path.lexists(link_path):
                log("Creating symlink %s -> %s", link_path, ccache_path)
                os.symlink(ccache_path, link_path)

        # Read by the installed ccache, which is configured with SYSCONFDIR=<prefix>/etc.
        etc_dir = get_staged_path(dest_dir, os.path.join(self.config.prefix, 'etc'))
        mkdir_p(etc_dir)
        log("Writing ccache configuration to %s", os.path.join(etc_dir, 'ccache.conf'))
        write_file(os.path.join(etc_dir, 'ccache.conf'), CCACHE_CONF_CONTENTS)


class CcachePackage(Package):
    def __init__(self) -> None:
        super(CcachePackage, self).__init__(
            name='ccache',
            version='4.1',
            url_pattern='https://github.com/ccache/ccache/releases/download/v{0}/ccache-{0}.tar.xz',
            source_digest='5fdc804056632d722a1182e15386696f0ea6c59cb4ab4d65a54f0b269ae86f99',
            description='Compiler cache that speeds up recompilation by caching previous '
                        'compilations',
            homepage='https://ccache.samba.org/',
            license='GPL-3 and LGPL-3')
        self.dependencies = ['xdg_base']
        self.build_dependencies = ['asciidoc']

    def create_build_backend(
            self,
            config: BuildConfig,
            src_path: str,
            build_path: str) -> BuildBackend:
        return CcacheBackend(
            self.name,
            config,
            src_dir=src_path,
            build_dir=build_path,
            extra_cmake_args=[
                '-DCMAKE_C_FLAGS=-flto',
                '-DCMAKE_CXX_FLAGS=-flto',
                '-DCMAKE_INSTALL_SYSCONFDIR={}'.format(os.path.join(config.prefix, 'etc')),
                '-DZSTD_FROM_INTERNET=ON',
            ])

    def get_postinstall_messages(self, config: BuildConfig) -> List[str]:
        ccache_bin_dir = os.path.join(config.lib_prefix, 'ccache', 'bin')
        return [
            "To compile using ccache you need to add the ccache bin directory to your PATH",
            "e.g. put this in your ~/.bashrc:",
            "export PATH=%s:%s:/usr/bin:/bin" % (
                ccache_bin_dir, os.path.join(config.prefix, 'bin')),
        ]
