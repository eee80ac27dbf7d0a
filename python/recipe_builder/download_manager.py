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
import shutil
import subprocess

from typing import List, Optional

from recipe_builder.archive_handling import get_extract_cmd
from recipe_builder.archive_spec import ArchiveSpec, FetchResult
from recipe_builder.build_config import BuildConfig
from recipe_builder.custom_logging import (
    FatalError,
    debug,
    log,
    log_success,
    log_warning,
)
from recipe_builder.string_util import shlex_join
from recipe_builder.util import (
    compute_file_digest,
    get_temporal_randomized_file_name_suffix,
    mkdir_p,
    remove_path,
    which_must_exist,
)


class NetworkError(FatalError):
    """
    The archive transfer failed or was interrupted. Not retried automatically; a partially
    downloaded file is kept so that the next attempt can resume it.
    """
    pass


class IntegrityError(FatalError):
    """
    The digest of a downloaded archive does not match the declared expected digest.
    """
    pass


class DownloadManager:
    config: BuildConfig
    download_dir: str
    curl_path: Optional[str]

    def __init__(self, config: BuildConfig, curl_path: Optional[str] = None) -> None:
        self.config = config
        self.download_dir = config.download_dir
        # Looked up lazily, so that archives that are already present can be verified and
        # extracted on machines without curl.
        self.curl_path = curl_path

    def get_archive_path(self, spec: ArchiveSpec) -> str:
        return os.path.join(self.download_dir, spec.local_filename)

    def verify_checksum(self, file_path: str, expected_digest: str, digest_type: str) -> bool:
        real_digest = compute_file_digest(file_path, digest_type)
        if real_digest == expected_digest:
            return True
        log("File %s has %s %s, expected %s",
            file_path, digest_type, real_digest, expected_digest)
        return False

    def get_curl_cmd_line(self, url: str, file_path: str) -> List[str]:
        if self.curl_path is None:
            self.curl_path = which_must_exist('curl')
        cmd_line = [
            self.curl_path,
            '-o',
            file_path,
            '--location',  # follow redirects
            '--fail',
            '--silent',
            '--show-error',
        ]
        if self.config.resume_downloads and os.path.exists(file_path):
            # Continue from the current size of the partially downloaded file.
            cmd_line += ['--continue-at', '-']
        if self.config.insecure_tls:
            cmd_line.append('--insecure')
        cmd_line.append(url)
        return cmd_line

    def fetch_url(self, url: str, file_path: str) -> None:
        """
        Transfers the given URL into the given local file. Raises NetworkError on failure.
        """
        if self.config.insecure_tls:
            log_warning("TLS certificate validation is disabled for %s", url)
        if os.path.exists(file_path):
            if self.config.resume_downloads:
                log("Resuming download of %s at byte offset %d",
                    file_path, os.path.getsize(file_path))
            else:
                remove_path(file_path)

        try:
            curl_cmd_line = self.get_curl_cmd_line(url, file_path)
        except IOError as ex:
            raise NetworkError("Cannot download %s: %s" % (url, ex))

        log("Running command: %s", shlex_join(curl_cmd_line))
        try:
            subprocess.check_call(curl_cmd_line)
        except subprocess.CalledProcessError as ex:
            msg = "Failed to download %s to %s: curl exited with code %d" % (
                url, file_path, ex.returncode)
            if os.path.exists(file_path):
                msg += (". The partially downloaded file is kept for resuming; remove it if the "
                        "error persists.")
            raise NetworkError(msg)

        if not os.path.exists(file_path):
            raise NetworkError("Downloaded %s but unable to find %s" % (url, file_path))

    def ensure_file_downloaded(self, spec: ArchiveSpec) -> FetchResult:
        """
        Makes sure that the archive described by the given spec is present in the download
        directory and has the expected digest, downloading it if necessary.
        """
        file_path = self.get_archive_path(spec)
        log("Ensuring %s is downloaded to path %s", spec.source_url, file_path)
        mkdir_p(self.download_dir)

        if (os.path.isfile(file_path) and
                self.verify_checksum(file_path, spec.expected_digest, spec.digest_type)):
            log("No need to re-download %s: checksum already correct", spec.local_filename)
            return FetchResult(path=file_path, verified=True, downloaded=False)

        log_warning("Downloading %s from %s", spec.local_filename, spec.source_url)
        resumed = self.config.resume_downloads and os.path.exists(file_path)
        self.fetch_url(spec.source_url, file_path)

        real_digest = compute_file_digest(file_path, spec.digest_type)
        if real_digest != spec.expected_digest and resumed:
            # The local file was stale or corrupt rather than partial.
            log_warning("Resumed download of %s has %s %s, expected %s. Downloading it again "
                        "from scratch.", spec.local_filename, spec.digest_type, real_digest,
                        spec.expected_digest)
            remove_path(file_path)
            self.fetch_url(spec.source_url, file_path)
            real_digest = compute_file_digest(file_path, spec.digest_type)
        if real_digest != spec.expected_digest:
            # A corrupted download is not resumable, start from scratch next time.
            remove_path(file_path)
            raise IntegrityError(
                "Checksum mismatch for '%s' downloaded from '%s'. Has %s %s, but expected: %s." %
                (spec.local_filename, spec.source_url, spec.digest_type, real_digest,
                 spec.expected_digest))

        log_success("%s archive downloaded", spec.local_filename)
        return FetchResult(path=file_path, verified=True, downloaded=True)

    def extract_archive(
            self,
            archive_file_name: str,
            out_dir: str,
            out_name: str) -> str:
        """
        Extract the given archive into out_dir/out_name. The archive is expected to contain
        exactly one top-level directory, which is renamed to out_name. An existing out_dir/out_name
        is removed first. Returns the path of the extracted directory.
        """
        mkdir_p(out_dir)
        full_out_path = os.path.join(out_dir, out_name)

        tmp_out_dir = os.path.join(
            out_dir, 'tmp-extract-%s-%s' % (
                os.path.basename(archive_file_name),
                get_temporal_randomized_file_name_suffix()
            ))
        if os.path.exists(tmp_out_dir):
            raise IOError("Just-generated unique directory name already exists: %s" % tmp_out_dir)
        os.makedirs(tmp_out_dir)

        try:
            cmd = get_extract_cmd(os.path.abspath(archive_file_name))
            log("Extracting %s in temporary directory %s", shlex_join(cmd), tmp_out_dir)
            subprocess.check_call(cmd, cwd=tmp_out_dir)
            extracted_subdirs = [
                subdir_name for subdir_name in os.listdir(tmp_out_dir)
                if not subdir_name.startswith('.')
            ]
            if len(extracted_subdirs) != 1:
                raise IOError(
                    "Expected the extracted archive %s to contain exactly one "
                    "subdirectory and no files, found: %s" % (
                        archive_file_name, sorted(extracted_subdirs)))
            extracted_subdir_path = os.path.join(tmp_out_dir, extracted_subdirs[0])
            if not os.path.isdir(extracted_subdir_path):
                raise IOError(
                    "This is a file, expected it to be a directory: %s" %
                    extracted_subdir_path)

            if os.path.lexists(full_out_path):
                log("Removing existing directory %s", full_out_path)
                remove_path(full_out_path)

            log("Moving %s to %s", extracted_subdir_path, full_out_path)
            shutil.move(extracted_subdir_path, full_out_path)
        finally:
            debug("Removing temporary directory: %s", tmp_out_dir)
            shutil.rmtree(tmp_out_dir, ignore_errors=True)
        return full_out_path

    def ensure(self, spec: ArchiveSpec) -> FetchResult:
        """
        Downloads (if needed), verifies and extracts one archive. Raises NetworkError or
        IntegrityError; in both cases nothing is extracted.
        """
        result = self.ensure_file_downloaded(spec)
        result.extracted_path = self.extract_archive(
            result.path, spec.extract_dir, spec.target_subdir_name)
        log_success("%s unpacked into %s", spec.local_filename, result.extracted_path)
        return result

    def ensure_all(self, specs: List[ArchiveSpec]) -> List[FetchResult]:
        """
        Processes the given archives one by one, in order, stopping at the first failure.
        """
        return [self.ensure(spec) for spec in specs]
