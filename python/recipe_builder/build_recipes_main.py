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

import sys
import time

from typing import List, Optional

from recipe_builder.builder import Builder
from recipe_builder.cmd_line_args import create_build_config, parse_cmd_line_args
from recipe_builder.custom_logging import (
    FatalError,
    RED_COLOR,
    colored_log,
    configure_logging,
    log,
)

import recipes


def list_recipes() -> None:
    for package in recipes.get_all_packages():
        print('%-10s %-10s %s' % (package.name, package.version, package.description))


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    try:
        args = parse_cmd_line_args(argv)
        config = create_build_config(args)
    except ValueError as ex:
        colored_log(RED_COLOR, "Invalid arguments: %s", ex)
        return 1
    configure_logging(verbose=args.verbose)

    if args.list:
        list_recipes()
        return 0

    start_time_sec = time.time()
    try:
        if config.insecure_tls:
            log("TLS certificate validation is disabled for all downloads (--insecure)")
        builder = Builder(config, recipes.get_all_packages())
        builder.select_packages(args.recipes)
        if args.clean or args.clean_downloads:
            builder.clean(clean_downloads=args.clean_downloads)
        builder.run()
    except FatalError as ex:
        colored_log(RED_COLOR, "Build failed: %s", ex)
        return 1

    log("Build finished in %.1f sec", time.time() - start_time_sec)
    return 0


if __name__ == "__main__":
    sys.exit(main())
