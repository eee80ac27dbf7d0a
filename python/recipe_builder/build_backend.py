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

from typing import Any, Dict, List, Optional

from recipe_builder.build_config import BuildConfig
from recipe_builder.builder_helpers import format_cmake_args_for_log, is_ninja_available
from recipe_builder.custom_logging import debug, log, log_output_internal
from recipe_builder.string_util import normalize_cmd_args
from recipe_builder.util import mkdir_p, remove_path

# -------------------------------------------------------------------------------------------------
# Default arguments for the CMake backend
# -------------------------------------------------------------------------------------------------

DEFAULT_EXTRA_CMAKE_ARGS: List[str] = []
DEFAULT_USE_NINJA_IF_AVAILABLE = True
DEFAULT_EXTRA_MAKE_OR_NINJA_ARGS: List[str] = []
DEFAULT_CMAKE_BUILD_TYPE = 'Release'

# -------------------------------------------------------------------------------------------------
# Default arguments for the configure/make backend
# -------------------------------------------------------------------------------------------------

DEFAULT_EXTRA_CONFIGURE_ARGS: List[str] = []
DEFAULT_CONFIGURE_CMD: List[str] = ['./configure']
DEFAULT_EXTRA_MAKE_ARGS: List[str] = []
DEFAULT_INSTALL_TARGETS: List[str] = ['install']


class BuildBackend:
    """
    The interface through which packages drive an external build system. Each method runs to
    completion or raises.
    """

    log_prefix: str
    config: BuildConfig

    def __init__(self, log_prefix: str, config: BuildConfig) -> None:
        self.log_prefix = log_prefix
        self.config = config

    def configure(self) -> None:
        raise NotImplementedError()

    def build(self) -> None:
        raise NotImplementedError()

    def install(self, dest_dir: str) -> None:
        """
        Installs the build output under dest_dir, i.e. into dest_dir + config.prefix.
        """
        raise NotImplementedError()

    def run_cmd(
            self,
            args: List[Any],
            cwd: str,
            extra_env: Optional[Dict[str, str]] = None) -> None:
        env = None
        if extra_env:
            for k, v in sorted(extra_env.items()):
                debug("Setting env var %s to %s", k, v)
            env = dict(os.environ)
            env.update(extra_env)
        log_output_internal(self.log_prefix, normalize_cmd_args(args), cwd=cwd, env=env)


class CMakeBackend(BuildBackend):
    """
    Out-of-tree CMake build, using Ninja if it is available and make otherwise.
    """

    src_dir: str
    build_dir: str
    extra_cmake_args: List[str]
    build_tool: str
    extra_build_tool_args: List[str]

    def __init__(
            self,
            log_prefix: str,
            config: BuildConfig,
            src_dir: str,
            build_dir: str,
            extra_cmake_args: List[str] = DEFAULT_EXTRA_CMAKE_ARGS,
            use_ninja_if_available: bool = DEFAULT_USE_NINJA_IF_AVAILABLE,
            extra_build_tool_args: List[str] = DEFAULT_EXTRA_MAKE_OR_NINJA_ARGS,
            cmake_build_type: str = DEFAULT_CMAKE_BUILD_TYPE) -> None:
        super().__init__(log_prefix, config)
        self.src_dir = src_dir
        self.build_dir = build_dir
        self.extra_cmake_args = extra_cmake_args
        self.extra_build_tool_args = extra_build_tool_args
        self.cmake_build_type = cmake_build_type
        self.build_tool = 'make'
        if use_ninja_if_available:
            ninja_available = is_ninja_available()
            log('Ninja is %s', 'available' if ninja_available else 'unavailable')
            if ninja_available:
                self.build_tool = 'ninja'

    def get_cmake_args(self) -> List[str]:
        args = ['cmake', self.src_dir]
        if self.build_tool == 'ninja':
            args += ['-G', 'Ninja']
        args += [
            '-DCMAKE_INSTALL_PREFIX={}'.format(self.config.prefix),
            '-DCMAKE_BUILD_TYPE={}'.format(self.cmake_build_type),
        ]
        args += self.extra_cmake_args
        return args

    def configure(self) -> None:
        mkdir_p(self.build_dir)
        remove_path(os.path.join(self.build_dir, 'CMakeCache.txt'))
        remove_path(os.path.join(self.build_dir, 'CMakeFiles'))

        cmake_args = self.get_cmake_args()
        log("CMake command line (one argument per line):\n%s" %
            format_cmake_args_for_log(cmake_args))
        self.run_cmd(cmake_args, cwd=self.build_dir)

    def build(self) -> None:
        self.run_cmd(
            [self.build_tool, '-j{}'.format(self.config.make_parallelism)] +
            self.extra_build_tool_args,
            cwd=self.build_dir)

    def install(self, dest_dir: str) -> None:
        # CMake-generated install rules honor DESTDIR from the environment for both generators.
        self.run_cmd(
            [self.build_tool] + DEFAULT_INSTALL_TARGETS,
            cwd=self.build_dir,
            extra_env={'DESTDIR': dest_dir})


class ConfigureMakeBackend(BuildBackend):
    """
    In-source autotools-style build: ./configure, make, make install.
    """

    src_dir: str
    extra_configure_args: List[str]
    configure_cmd: List[str]
    extra_make_args: List[str]
    install_targets: List[str]

    def __init__(
            self,
            log_prefix: str,
            config: BuildConfig,
            src_dir: str,
            extra_configure_args: List[str] = DEFAULT_EXTRA_CONFIGURE_ARGS,
            configure_cmd: List[str] = DEFAULT_CONFIGURE_CMD,
            extra_make_args: List[str] = DEFAULT_EXTRA_MAKE_ARGS,
            install_targets: List[str] = DEFAULT_INSTALL_TARGETS) -> None:
        super().__init__(log_prefix, config)
        self.src_dir = src_dir
        self.extra_configure_args = extra_configure_args
        self.configure_cmd = configure_cmd
        self.extra_make_args = extra_make_args
        self.install_targets = install_targets

    def configure(self) -> None:
        log("Building in %s using the configure tool", self.src_dir)
        self.run_cmd(
            self.configure_cmd +
            ['--prefix={}'.format(self.config.prefix)] +
            self.extra_configure_args,
            cwd=self.src_dir)

    def build(self) -> None:
        self.run_cmd(
            ['make', '-j{}'.format(self.config.make_parallelism)] + self.extra_make_args,
            cwd=self.src_dir)

    def install(self, dest_dir: str) -> None:
        if not self.install_targets:
            return
        self.run_cmd(
            ['make', 'DESTDIR={}'.format(dest_dir)] + self.install_targets,
            cwd=self.src_dir)
