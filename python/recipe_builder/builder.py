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

import time

from typing import List, Optional

from recipe_builder.archive_spec import FetchResult
from recipe_builder.build_config import BuildConfig
from recipe_builder.custom_logging import (
    FatalError,
    heading,
    log,
    log_info_highlighted,
    log_success,
)
from recipe_builder.download_manager import DownloadManager
from recipe_builder.package import Package


class Builder:
    """
    Runs the fetch/verify/unpack pipeline and the build backend for each selected package,
    strictly one package and one archive at a time.
    """

    config: BuildConfig
    packages: List[Package]
    selected_packages: List[Package]
    download_manager: DownloadManager

    def __init__(
            self,
            config: BuildConfig,
            packages: List[Package],
            download_manager: Optional[DownloadManager] = None) -> None:
        self.config = config
        self.packages = packages
        self.selected_packages = packages
        self.download_manager = download_manager or DownloadManager(config)

    def select_packages(self, names: List[str]) -> None:
        if not names:
            self.selected_packages = self.packages
            return
        known_names = set(package.name for package in self.packages)
        for name in names:
            if name not in known_names:
                raise FatalError("Unknown recipe name: %s. Valid recipe names:\n%s" % (
                    name, " " * 4 + ("\n" + " " * 4).join(sorted(known_names))))
        self.selected_packages = [
            package for package in self.packages if package.name in names
        ]

    def clean(self, clean_downloads: bool) -> None:
        self.config.fs_layout.clean(self.selected_packages, clean_downloads)

    def download_and_extract(self, package: Package) -> List[FetchResult]:
        fs_layout = self.config.fs_layout
        src_path = fs_layout.get_source_path(package)
        specs = [package.get_source_archive_spec(fs_layout.src_dir)]
        specs += package.get_auxiliary_archive_specs(src_path)
        results = self.download_manager.ensure_all(specs)
        if len(specs) > 1:
            log_success("Optional packages for %s are ready", package.name)
        return results

    def build_package(self, package: Package) -> None:
        heading("Building %s %s" % (package.name, package.version))
        self.download_and_extract(package)
        if self.config.download_extract_only:
            log("Skipping the build of %s, --download-extract-only is specified", package.name)
            return

        start_time_sec = time.time()
        backend = package.create_build_backend(
            self.config,
            src_path=self.config.fs_layout.get_source_path(package),
            build_path=self.config.fs_layout.get_build_path(package))
        backend.configure()
        backend.build()
        backend.install(self.config.dest_dir)
        log("Built and staged %s into %s in %.1f sec",
            package.name, self.config.dest_dir, time.time() - start_time_sec)

        for message in package.get_postinstall_messages(self.config):
            log_info_highlighted(message)

    def run(self) -> None:
        self.config.fs_layout.prepare_out_dirs()
        for package in self.selected_packages:
            self.build_package(package)
