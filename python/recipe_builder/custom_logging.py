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
import sys
import subprocess
import logging
import time

from recipe_builder.string_util import shlex_join
from typing import Any, Dict, List, Optional, Union


g_logging_configured = False


YELLOW_COLOR = "\033[0;33m"
RED_COLOR = "\033[0;31m"
GREEN_COLOR = "\033[0;32m"
BLUE_COLOR = "\033[0;34m"
CYAN_COLOR = "\033[0;36m"
NO_COLOR = "\033[0m"
SEPARATOR = "-" * 80


# Based on http://bit.ly/python_terminal_color_detection (code from Django).
def _terminal_supports_colors() -> bool:
    """
    Returns True if the running system's terminal supports color, and False
    otherwise.
    """
    plat = sys.platform
    supported_platform = plat != 'Pocket PC' and (plat != 'win32' or
                                                  'ANSICON' in os.environ)
    # isatty is not always implemented, #6223.
    is_a_tty = hasattr(sys.stderr, 'isatty') and sys.stderr.isatty()
    return supported_platform and is_a_tty


terminal_supports_colors = _terminal_supports_colors()


def convert_log_args_to_message(*args: Any) -> str:
    """
    >>> convert_log_args_to_message()
    ''
    >>> convert_log_args_to_message('plain')
    'plain'
    >>> convert_log_args_to_message('%s-%d', 'llvm', 11)
    'llvm-11'
    """
    n_args = len(args)
    if n_args == 0:
        message = ""
    elif n_args == 1:
        message = args[0]
    else:
        message = args[0] % args[1:]
    return message


class FatalError(Exception):
    """
    An error that terminates the build of the current package. The command-line driver turns
    this into a non-zero exit code.
    """
    pass


def log(*args: Any) -> None:
    if not g_logging_configured:
        raise RuntimeError("log() called before logging is configured")
    logging.info(*args)


def debug(*args: Any) -> None:
    if not g_logging_configured:
        raise RuntimeError("debug() called before logging is configured")
    logging.debug(*args)


def colored_log(color: str, *args: Any) -> None:
    if terminal_supports_colors:
        sys.stderr.write(color + convert_log_args_to_message(*args) + NO_COLOR + "\n")
    else:
        log(*args)


def log_warning(*args: Any) -> None:
    colored_log(YELLOW_COLOR, *args)


def log_success(*args: Any) -> None:
    colored_log(GREEN_COLOR, *args)


def log_info_highlighted(*args: Any) -> None:
    colored_log(BLUE_COLOR, *args)


def format_line_with_colored_prefix(prefix: Optional[str], line: str, color: bool) -> str:
    """
    >>> format_line_with_colored_prefix(None, 'hello\\n', color=False)
    'hello'
    >>> format_line_with_colored_prefix('ccache', 'hello\\n', color=False)
    '[ccache] hello'
    """
    line = line.rstrip()
    if prefix is None:
        return line
    if color:
        start_color = CYAN_COLOR
        end_color = NO_COLOR
    else:
        start_color = ''
        end_color = ''
    prefix = '%s[%s] %s' % (start_color, prefix, end_color)
    return prefix + line


class LogOutputException(FatalError):
    pass


def log_output_internal(
        prefix: str,
        args: List[Any],
        cwd: Optional[str] = None,
        env: Optional[Dict[str, str]] = None,
        color: bool = True) -> None:
    """
    Runs the given command, streaming its combined stdout/stderr into the log with the given
    prefix. Raises LogOutputException if the command exits with a non-zero code.
    """
    cmd_str = shlex_join(args)
    start_time_sec = time.time()

    exit_code: Union[str, int] = "<unknown>"

    try:
        log("Running command: %s (current directory: %s)", cmd_str, cwd or os.getcwd())
        process = subprocess.Popen(
            args, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, cwd=cwd, env=env)
        assert process.stdout is not None

        prev_line: Optional[bytes] = None
        for line in process.stdout:
            formatted_line = format_line_with_colored_prefix(
                # Do not print the prefix if the previous line ends with a line continuation
                # character.
                prefix=None if prev_line is not None and prev_line.endswith(b'\\\n') else prefix,
                line=line.decode('utf-8', errors='replace'),
                color=color and terminal_supports_colors)
            prev_line = line
            log(formatted_line)

        process.stdout.close()
        exit_code = process.wait()
        if exit_code != 0:
            raise LogOutputException("Execution failed with code: {}".format(exit_code))
    finally:
        elapsed_time_sec = time.time() - start_time_sec
        log("Command completed with exit code %s (took %.1f sec): %s",
            exit_code, elapsed_time_sec, cmd_str)


def heading(title: str) -> None:
    log("")
    log(SEPARATOR)
    log(title)
    log(SEPARATOR)
    log("")


def configure_logging(verbose: bool = False) -> None:
    global g_logging_configured
    if g_logging_configured:
        if verbose:
            logging.getLogger().setLevel(logging.DEBUG)
        return
    g_logging_configured = True
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s")
