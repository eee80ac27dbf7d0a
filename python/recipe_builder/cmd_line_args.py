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

import argparse

from typing import List, Optional

from recipe_builder.arch import get_target_arch
from recipe_builder.build_config import BuildConfig, DEFAULT_PREFIX
from recipe_builder.file_system_layout import FileSystemLayout


DEFAULT_ROOT_DIR = '.'


def create_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='build-recipes',
        description='Download, verify, unpack, build and stage-install package recipes.')
    parser.add_argument(
        '--root-dir',
        default=DEFAULT_ROOT_DIR,
        help='Directory containing the download, src, build and dest subdirectories.')
    parser.add_argument(
        '--prefix',
        default=DEFAULT_PREFIX,
        help='Installation prefix the packages are configured for.')
    parser.add_argument(
        '--target-arch',
        default=None,
        help='Architecture to build for. Defaults to the architecture of this machine.')
    parser.add_argument(
        '--insecure',
        action='store_true',
        help='Do not validate TLS certificates when downloading archives. Use only with mirrors '
             'you trust, the archive checksums are still verified.')
    parser.add_argument(
        '--no-resume',
        action='store_true',
        help='Discard partially downloaded archives instead of resuming them.')
    parser.add_argument(
        '-j', '--make-parallelism',
        type=int,
        help='How many cores should the build use. This is passed to Make/Ninja child '
             'processes.')
    parser.add_argument(
        '--download-extract-only',
        action='store_true',
        help='Only download and extract archives. Do not build anything.')
    parser.add_argument(
        '--clean',
        action='store_true',
        default=False,
        help='Clean, but keep downloads.')
    parser.add_argument(
        '--clean-downloads',
        action='store_true',
        default=False,
        help='Clean, including downloads.')
    parser.add_argument(
        '--list',
        action='store_true',
        help='List the available recipes and exit.')
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Show verbose output')
    parser.add_argument(
        'recipes',
        nargs='*',
        help='Recipes to build. All recipes are built if none are specified.')
    return parser


def parse_cmd_line_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    args = create_arg_parser().parse_args(argv)
    if args.make_parallelism is not None and args.make_parallelism <= 0:
        raise ValueError("--make-parallelism must be positive, got %d" % args.make_parallelism)
    return args


def create_build_config(args: argparse.Namespace) -> BuildConfig:
    return BuildConfig(
        fs_layout=FileSystemLayout(args.root_dir),
        target_arch=get_target_arch(args.target_arch),
        prefix=args.prefix,
        insecure_tls=args.insecure,
        resume_downloads=not args.no_resume,
        make_parallelism=args.make_parallelism,
        download_extract_only=args.download_extract_only)
