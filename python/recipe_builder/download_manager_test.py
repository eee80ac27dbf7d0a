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
import shutil
import subprocess
import tempfile
import unittest

from unittest import mock

from recipe_builder.archive_fixtures import (
    FakeFetcher,
    create_tar_archive,
    create_test_config,
    list_dir_names,
)
from recipe_builder.archive_spec import ArchiveSpec
from recipe_builder.custom_logging import FatalError, configure_logging
from recipe_builder.download_manager import DownloadManager, IntegrityError, NetworkError
from recipe_builder.util import compute_file_digest, read_file, write_file


FOO_URL = 'https://example.com/releases/foo-1.0.tar.gz'
BAR_URL = 'https://example.com/releases/bar-2.0.tar.gz'
BAZ_URL = 'https://example.com/releases/baz-3.0.tar.gz'


class TestDownloadManager(unittest.TestCase):
    def setUp(self) -> None:
        configure_logging()
        self.tmp_dir = tempfile.mkdtemp(prefix='download_manager_test_')
        self.fixtures_dir = os.path.join(self.tmp_dir, 'fixtures')
        os.makedirs(self.fixtures_dir)
        self.work_dir = os.path.join(self.tmp_dir, 'work')
        self.tools_dir = os.path.join(self.work_dir, 'tools')

        self.foo_archive = os.path.join(self.fixtures_dir, 'foo-1.0.tar.gz')
        self.foo_digest = create_tar_archive(
            self.foo_archive, 'foo-1.0', {'README': 'foo sources\n', 'src/foo.c': 'int x;\n'})
        self.corrupted_archive = os.path.join(self.fixtures_dir, 'foo-1.0-corrupted.tar.gz')
        create_tar_archive(self.corrupted_archive, 'foo-1.0', {'README': 'tampered\n'})

        self.config = create_test_config(os.path.join(self.tmp_dir, 'root'))
        self.download_manager = DownloadManager(self.config)

    def tearDown(self) -> None:
        shutil.rmtree(self.tmp_dir)

    def make_spec(self, url: str = FOO_URL, digest: str = '', target: str = 'foo') -> ArchiveSpec:
        return ArchiveSpec(
            source_url=url,
            expected_digest=digest or self.foo_digest,
            extract_dir=self.tools_dir,
            target_subdir_name=target)

    def use_fake_fetcher(self, url_to_local_path: dict, resume: bool = False) -> FakeFetcher:
        fake_fetcher = FakeFetcher(url_to_local_path, resume=resume)
        patcher = mock.patch.object(self.download_manager, 'fetch_url', side_effect=fake_fetcher)
        patcher.start()
        self.addCleanup(patcher.stop)
        return fake_fetcher

    def downloaded_path(self, file_name: str = 'foo-1.0.tar.gz') -> str:
        return os.path.join(self.config.download_dir, file_name)

    def test_download_verify_and_extract(self) -> None:
        fake_fetcher = self.use_fake_fetcher({FOO_URL: self.foo_archive})

        result = self.download_manager.ensure(self.make_spec())

        self.assertEqual([FOO_URL], fake_fetcher.fetched_urls)
        self.assertTrue(result.verified)
        self.assertTrue(result.downloaded)
        self.assertEqual(self.downloaded_path(), result.path)
        self.assertEqual(os.path.join(self.tools_dir, 'foo'), result.extracted_path)
        self.assertEqual('foo sources\n', read_file(os.path.join(self.tools_dir, 'foo', 'README')))
        self.assertTrue(os.path.isfile(os.path.join(self.tools_dir, 'foo', 'src', 'foo.c')))
        # Only the renamed directory is left behind, no temporary extraction directories.
        self.assertEqual(['foo'], list_dir_names(self.tools_dir))

    def test_existing_valid_archive_is_not_downloaded_again(self) -> None:
        os.makedirs(self.config.download_dir)
        shutil.copyfile(self.foo_archive, self.downloaded_path())
        fake_fetcher = self.use_fake_fetcher({})

        result = self.download_manager.ensure(self.make_spec())

        self.assertEqual([], fake_fetcher.fetched_urls)
        self.assertFalse(result.downloaded)
        self.assertTrue(result.verified)
        # curl is only looked up when something has to be transferred.
        self.assertIsNone(self.download_manager.curl_path)
        self.assertTrue(os.path.isdir(os.path.join(self.tools_dir, 'foo')))

    def test_second_run_is_idempotent(self) -> None:
        fake_fetcher = self.use_fake_fetcher({FOO_URL: self.foo_archive})
        self.download_manager.ensure(self.make_spec())
        result = self.download_manager.ensure(self.make_spec())
        self.assertEqual([FOO_URL], fake_fetcher.fetched_urls)
        self.assertFalse(result.downloaded)

    def test_stale_target_directory_is_replaced(self) -> None:
        stale_dir = os.path.join(self.tools_dir, 'foo')
        os.makedirs(stale_dir)
        write_file(os.path.join(stale_dir, 'stale.txt'), 'left over from an earlier run')
        self.use_fake_fetcher({FOO_URL: self.foo_archive})

        self.download_manager.ensure(self.make_spec())

        self.assertFalse(os.path.exists(os.path.join(stale_dir, 'stale.txt')))
        self.assertTrue(os.path.isfile(os.path.join(stale_dir, 'README')))

    def test_checksum_mismatch_raises_integrity_error(self) -> None:
        existing_dir = os.path.join(self.tools_dir, 'foo')
        os.makedirs(existing_dir)
        write_file(os.path.join(existing_dir, 'marker.txt'), 'untouched')
        self.use_fake_fetcher({FOO_URL: self.corrupted_archive})

        with self.assertRaises(IntegrityError) as context:
            self.download_manager.ensure(self.make_spec())

        self.assertIsInstance(context.exception, FatalError)
        self.assertIn('Checksum mismatch', str(context.exception))
        self.assertIn(self.foo_digest, str(context.exception))
        self.assertEqual(['foo'], list_dir_names(self.tools_dir))
        self.assertEqual(['marker.txt'], list_dir_names(existing_dir))
        # The corrupted download is discarded so that the next attempt starts from scratch.
        self.assertFalse(os.path.exists(self.downloaded_path()))

    def test_checksum_mismatch_does_not_create_target_directory(self) -> None:
        self.use_fake_fetcher({FOO_URL: self.corrupted_archive})
        with self.assertRaises(IntegrityError):
            self.download_manager.ensure(self.make_spec())
        self.assertFalse(os.path.exists(os.path.join(self.tools_dir, 'foo')))

    def test_rerun_after_manually_fixing_the_archive(self) -> None:
        fake_fetcher = self.use_fake_fetcher({FOO_URL: self.corrupted_archive})
        with self.assertRaises(IntegrityError):
            self.download_manager.ensure(self.make_spec())

        shutil.copyfile(self.foo_archive, self.downloaded_path())
        fake_fetcher.url_to_local_path.clear()

        result = self.download_manager.ensure(self.make_spec())
        self.assertFalse(result.downloaded)
        self.assertEqual([FOO_URL], fake_fetcher.fetched_urls)
        self.assertTrue(os.path.isfile(os.path.join(self.tools_dir, 'foo', 'README')))

    def test_network_error_is_propagated(self) -> None:
        self.use_fake_fetcher({})
        with self.assertRaises(NetworkError):
            self.download_manager.ensure(self.make_spec())
        self.assertFalse(os.path.exists(os.path.join(self.tools_dir, 'foo')))

    def test_ensure_all_is_sequential_and_stops_at_first_failure(self) -> None:
        bar_archive = os.path.join(self.fixtures_dir, 'bar-2.0.tar.gz')
        bar_digest = create_tar_archive(bar_archive, 'bar-2.0', {'bar.txt': 'bar\n'})
        fake_fetcher = self.use_fake_fetcher({
            FOO_URL: self.foo_archive,
            BAR_URL: self.corrupted_archive,
            BAZ_URL: self.foo_archive,
        })
        specs = [
            self.make_spec(),
            self.make_spec(url=BAR_URL, digest=bar_digest, target='bar'),
            self.make_spec(url=BAZ_URL, target='baz'),
        ]

        with self.assertRaises(IntegrityError):
            self.download_manager.ensure_all(specs)

        self.assertEqual([FOO_URL, BAR_URL], fake_fetcher.fetched_urls)
        self.assertEqual(['foo'], list_dir_names(self.tools_dir))

    def test_ensure_all_returns_results_in_order(self) -> None:
        bar_archive = os.path.join(self.fixtures_dir, 'bar-2.0.tar.gz')
        bar_digest = create_tar_archive(bar_archive, 'bar-2.0', {'bar.txt': 'bar\n'})
        self.use_fake_fetcher({FOO_URL: self.foo_archive, BAR_URL: bar_archive})

        results = self.download_manager.ensure_all([
            self.make_spec(),
            self.make_spec(url=BAR_URL, digest=bar_digest, target='bar'),
        ])

        self.assertEqual(
            [os.path.join(self.tools_dir, 'foo'), os.path.join(self.tools_dir, 'bar')],
            [result.extracted_path for result in results])

    def test_archive_must_contain_exactly_one_directory(self) -> None:
        flat_archive = os.path.join(self.fixtures_dir, 'flat-1.0.tar.gz')
        flat_digest = create_tar_archive(flat_archive, None, {'a.txt': 'a', 'b.txt': 'b'})
        flat_url = 'https://example.com/flat-1.0.tar.gz'
        self.use_fake_fetcher({flat_url: flat_archive})

        with self.assertRaises(IOError):
            self.download_manager.ensure(
                self.make_spec(url=flat_url, digest=flat_digest, target='flat'))
        self.assertEqual([], list_dir_names(self.tools_dir))

    def write_local_archive(self, data: bytes) -> None:
        os.makedirs(self.config.download_dir, exist_ok=True)
        with open(self.downloaded_path(), 'wb') as local_file:
            local_file.write(data)

    def read_fixture(self, path: str) -> bytes:
        with open(path, 'rb') as fixture_file:
            return fixture_file.read()

    def test_partial_local_file_is_completed(self) -> None:
        fake_fetcher = self.use_fake_fetcher({FOO_URL: self.foo_archive}, resume=True)
        archive_data = self.read_fixture(self.foo_archive)
        self.write_local_archive(archive_data[:len(archive_data) // 2])

        result = self.download_manager.ensure(self.make_spec())

        self.assertEqual([FOO_URL], fake_fetcher.fetched_urls)
        self.assertTrue(result.downloaded)
        self.assertTrue(os.path.isfile(os.path.join(self.tools_dir, 'foo', 'README')))

    def test_stale_complete_local_file_is_downloaded_from_scratch(self) -> None:
        fake_fetcher = self.use_fake_fetcher({FOO_URL: self.foo_archive}, resume=True)
        archive_data = bytearray(self.read_fixture(self.foo_archive))
        archive_data[len(archive_data) // 2] ^= 0xff
        self.write_local_archive(bytes(archive_data))

        result = self.download_manager.ensure(self.make_spec())

        # Resuming appends nothing to a file of full size, so the archive is fetched again.
        self.assertEqual([FOO_URL, FOO_URL], fake_fetcher.fetched_urls)
        self.assertTrue(result.downloaded)
        self.assertEqual(self.foo_digest, compute_file_digest(self.downloaded_path()))
        self.assertTrue(os.path.isfile(os.path.join(self.tools_dir, 'foo', 'README')))

    def test_mismatch_after_downloading_from_scratch(self) -> None:
        fake_fetcher = self.use_fake_fetcher({FOO_URL: self.corrupted_archive}, resume=True)
        self.write_local_archive(b'stale')

        with self.assertRaises(IntegrityError):
            self.download_manager.ensure(self.make_spec())

        self.assertEqual([FOO_URL, FOO_URL], fake_fetcher.fetched_urls)
        self.assertFalse(os.path.exists(self.downloaded_path()))
        self.assertFalse(os.path.exists(os.path.join(self.tools_dir, 'foo')))

    def test_tar_xz_archive(self) -> None:
        foo_xz_archive = os.path.join(self.fixtures_dir, 'foo-1.0.tar.xz')
        foo_xz_digest = create_tar_archive(foo_xz_archive, 'foo-1.0', {'README': 'xz sources\n'})
        foo_xz_url = 'https://example.com/releases/foo-1.0.tar.xz'
        self.use_fake_fetcher({foo_xz_url: foo_xz_archive})

        result = self.download_manager.ensure(
            self.make_spec(url=foo_xz_url, digest=foo_xz_digest))

        self.assertEqual(self.downloaded_path('foo-1.0.tar.xz'), result.path)
        self.assertEqual('xz sources\n', read_file(os.path.join(self.tools_dir, 'foo', 'README')))
        self.assertEqual(['foo'], list_dir_names(self.tools_dir))

    def test_verify_checksum_sha1(self) -> None:
        sha1_digest = compute_file_digest(self.foo_archive, 'sha1')
        self.assertEqual(40, len(sha1_digest))
        self.assertTrue(
            self.download_manager.verify_checksum(self.foo_archive, sha1_digest, 'sha1'))
        self.assertFalse(
            self.download_manager.verify_checksum(self.corrupted_archive, sha1_digest, 'sha1'))


class TestCurlInvocation(unittest.TestCase):
    def setUp(self) -> None:
        configure_logging()
        self.tmp_dir = tempfile.mkdtemp(prefix='curl_invocation_test_')
        self.file_path = os.path.join(self.tmp_dir, 'foo-1.0.tar.gz')

    def tearDown(self) -> None:
        shutil.rmtree(self.tmp_dir)

    def create_download_manager(self, **kwargs: bool) -> DownloadManager:
        config = create_test_config(self.tmp_dir, **kwargs)
        return DownloadManager(config, curl_path='/usr/bin/curl')

    def test_tls_validation_is_enabled_by_default(self) -> None:
        cmd_line = self.create_download_manager().get_curl_cmd_line(FOO_URL, self.file_path)
        self.assertEqual('/usr/bin/curl', cmd_line[0])
        self.assertEqual(FOO_URL, cmd_line[-1])
        self.assertNotIn('--insecure', cmd_line)
        self.assertIn('--location', cmd_line)
        self.assertIn('--fail', cmd_line)
        self.assertNotIn('--continue-at', cmd_line)

    def test_insecure_tls_when_requested(self) -> None:
        download_manager = self.create_download_manager(insecure_tls=True)
        self.assertIn('--insecure', download_manager.get_curl_cmd_line(FOO_URL, self.file_path))

    def test_partial_download_is_resumed(self) -> None:
        write_file(self.file_path, 'partial')
        cmd_line = self.create_download_manager().get_curl_cmd_line(FOO_URL, self.file_path)
        continue_index = cmd_line.index('--continue-at')
        self.assertEqual('-', cmd_line[continue_index + 1])

    def test_partial_download_is_discarded_without_resume(self) -> None:
        write_file(self.file_path, 'partial')
        download_manager = self.create_download_manager(resume_downloads=False)

        def fake_check_call(cmd_line: list) -> None:
            self.assertFalse(os.path.exists(self.file_path))
            self.assertNotIn('--continue-at', cmd_line)
            write_file(self.file_path, 'complete')

        with mock.patch('recipe_builder.download_manager.subprocess.check_call',
                        side_effect=fake_check_call):
            download_manager.fetch_url(FOO_URL, self.file_path)
        self.assertEqual('complete', read_file(self.file_path))

    def test_failed_transfer_raises_network_error_and_keeps_partial_file(self) -> None:
        write_file(self.file_path, 'partial')
        download_manager = self.create_download_manager()
        with mock.patch('recipe_builder.download_manager.subprocess.check_call',
                        side_effect=subprocess.CalledProcessError(56, ['curl'])):
            with self.assertRaises(NetworkError) as context:
                download_manager.fetch_url(FOO_URL, self.file_path)
        self.assertIn('code 56', str(context.exception))
        self.assertEqual('partial', read_file(self.file_path))

    def test_missing_curl_is_a_network_error(self) -> None:
        download_manager = DownloadManager(create_test_config(self.tmp_dir))
        with mock.patch('recipe_builder.download_manager.which_must_exist',
                        side_effect=IOError("Executable not found: curl")):
            with self.assertRaises(NetworkError):
                download_manager.fetch_url(FOO_URL, self.file_path)


@unittest.skipUnless(shutil.which('curl'), "curl is not installed")
class TestCurlFileTransfer(unittest.TestCase):
    def setUp(self) -> None:
        configure_logging()
        self.tmp_dir = tempfile.mkdtemp(prefix='curl_file_transfer_test_')
        self.archive_path = os.path.join(self.tmp_dir, 'mirror', 'foo-1.0.tar.xz')
        os.makedirs(os.path.dirname(self.archive_path))
        self.digest = create_tar_archive(
            self.archive_path, 'foo-1.0', {'README': 'foo sources\n', 'src/foo.c': 'int x;\n'})
        self.config = create_test_config(os.path.join(self.tmp_dir, 'root'))
        self.download_manager = DownloadManager(self.config)
        self.tools_dir = os.path.join(self.tmp_dir, 'work', 'tools')
        self.spec = ArchiveSpec(
            source_url='file://' + self.archive_path,
            expected_digest=self.digest,
            extract_dir=self.tools_dir,
            target_subdir_name='foo')
        self.local_path = os.path.join(self.config.download_dir, 'foo-1.0.tar.xz')

    def tearDown(self) -> None:
        shutil.rmtree(self.tmp_dir)

    def test_download_with_curl(self) -> None:
        result = self.download_manager.ensure(self.spec)
        self.assertTrue(result.downloaded)
        self.assertEqual(self.local_path, result.path)
        self.assertEqual('foo sources\n', read_file(os.path.join(self.tools_dir, 'foo', 'README')))

        result = self.download_manager.ensure(self.spec)
        self.assertFalse(result.downloaded)

    def test_stale_local_file_of_full_size(self) -> None:
        with open(self.archive_path, 'rb') as archive_file:
            archive_data = bytearray(archive_file.read())
        archive_data[-1] ^= 0xff
        os.makedirs(self.config.download_dir)
        with open(self.local_path, 'wb') as local_file:
            local_file.write(bytes(archive_data))

        result = self.download_manager.ensure(self.spec)

        self.assertTrue(result.downloaded)
        self.assertEqual(self.digest, compute_file_digest(self.local_path))
        self.assertTrue(os.path.isfile(os.path.join(self.tools_dir, 'foo', 'src', 'foo.c')))


if __name__ == '__main__':
    unittest.main()
