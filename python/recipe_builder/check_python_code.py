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

"""
Runs static and dynamic checks over the Python code of the recipe builder and the recipes:
type checking with MyPy, pycodestyle, byte-compilation, imports, unit tests and doctests.
Checks of different files run in parallel.
"""

import argparse
import collections
import concurrent.futures
import fnmatch
import os
import subprocess
import sys
import time

from typing import List, Optional, Tuple


REPO_ROOT = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
PYTHON_DIR = os.path.join(REPO_ROOT, 'python')

CHECK_TYPES = [
    'mypy',
    'compile',
    'import',
    'pycodestyle',
    'unittest',
    'doctest',
]

MAX_PARALLEL_CHECKS = 16
REPORT_LINE_WIDTH = 80


def get_module_name(file_path: str) -> str:
    """
    >>> get_module_name(os.path.join(PYTHON_DIR, 'recipes', 'llvm.py'))
    'recipes.llvm'
    >>> get_module_name(os.path.join(PYTHON_DIR, 'recipes', '__init__.py'))
    'recipes'
    """
    rel_path_components = os.path.splitext(os.path.relpath(file_path, PYTHON_DIR))[0].split('/')
    if rel_path_components[-1] == '__init__':
        rel_path_components = rel_path_components[:-1]
    return '.'.join(rel_path_components)


def get_check_cmd(check_type: str, file_path: str) -> List[str]:
    """
    >>> get_check_cmd('unittest', os.path.join(PYTHON_DIR, 'recipes', 'recipes_test.py'))[1:]
    ['-m', 'unittest', 'recipes.recipes_test']
    >>> os.path.basename(get_check_cmd('pycodestyle', os.path.join(PYTHON_DIR, 'llvm.py'))[-1])
    'llvm.py'
    """
    module_name = get_module_name(file_path)
    if check_type == 'mypy':
        return ['mypy', '--config-file', os.path.join(REPO_ROOT, 'mypy.ini'), file_path]
    if check_type == 'compile':
        return [sys.executable, '-m', 'py_compile', file_path]
    if check_type == 'import':
        return [sys.executable, '-c', 'import %s' % module_name]
    if check_type == 'pycodestyle':
        return ['pycodestyle', '--config=%s' % os.path.join(REPO_ROOT, 'pycodestyle.cfg'),
                file_path]
    if check_type == 'unittest':
        return [sys.executable, '-m', 'unittest', module_name]
    if check_type == 'doctest':
        return [
            sys.executable, '-c',
            'import doctest, sys, %s as m; sys.exit(doctest.testmod(m).failed)' % module_name
        ]
    raise ValueError("Unknown check type: %s" % check_type)


class CheckResult:
    check_type: str
    file_path: str
    returncode: int
    output: str

    def __init__(self, check_type: str, file_path: str, returncode: int, output: str) -> None:
        self.check_type = check_type
        self.file_path = file_path
        self.returncode = returncode
        self.output = output

    def get_description(self) -> str:
        return "Check '%s' for %s" % (
            self.check_type, os.path.relpath(self.file_path, REPO_ROOT))

    def format_failure(self) -> str:
        separator = '-' * REPORT_LINE_WIDTH
        return '\n'.join([
            separator,
            self.get_description(),
            separator,
            'Exit code: %d' % self.returncode,
            '',
            self.output,
        ])


def run_check(check_type: str, file_path: str) -> CheckResult:
    process = subprocess.run(
        get_check_cmd(check_type, file_path),
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        cwd=PYTHON_DIR)
    return CheckResult(
        check_type=check_type,
        file_path=file_path,
        returncode=process.returncode,
        output=process.stdout.decode('utf-8', errors='replace'))


def find_python_files(file_pattern: Optional[str]) -> List[str]:
    file_paths = []
    for dir_path, _, file_names in os.walk(PYTHON_DIR):
        for file_name in file_names:
            if not file_name.endswith('.py'):
                continue
            if file_pattern and not fnmatch.fnmatch(file_name, '*%s*' % file_pattern):
                continue
            file_paths.append(os.path.join(dir_path, file_name))
    return sorted(file_paths)


def get_checks(file_paths: List[str]) -> List[Tuple[str, str]]:
    """
    Unit tests only run for test modules, every other check runs for every file.
    """
    return [
        (check_type, file_path)
        for file_path in file_paths
        for check_type in CHECK_TYPES
        if check_type != 'unittest' or file_path.endswith('_test.py')
    ]


def check_python_code(file_pattern: Optional[str]) -> bool:
    start_time_sec = time.time()
    checks = get_checks(find_python_files(file_pattern))

    os.environ['MYPYPATH'] = PYTHON_DIR
    os.environ['PYTHONPATH'] = PYTHON_DIR

    counts_by_type: collections.Counter = collections.Counter()
    counts_by_result: collections.Counter = collections.Counter()
    with concurrent.futures.ThreadPoolExecutor(max_workers=MAX_PARALLEL_CHECKS) as executor:
        futures = [executor.submit(run_check, check_type, file_path)
                   for check_type, file_path in checks]
        for future in concurrent.futures.as_completed(futures):
            check_result = future.result()
            counts_by_type[check_result.check_type] += 1
            if check_result.returncode == 0:
                counts_by_result['success'] += 1
            else:
                counts_by_result['failure'] += 1
                print(check_result.format_failure())

    for description, counts in [('Checks by type', counts_by_type),
                                ('Checks by result', counts_by_result)]:
        print("%s:" % description)
        for key, count in sorted(counts.items()):
            print("    %s: %d" % (key, count))
    print("Elapsed time: %.1f seconds" % (time.time() - start_time_sec))

    success = counts_by_result['failure'] == 0
    print("All checks are successful" if success else "Some checks failed")
    return success


def main() -> None:
    parser = argparse.ArgumentParser(prog='check-python-code')
    parser.add_argument('-f', '--file-pattern',
                        help='Only check files whose names match this glob-style pattern.')
    args = parser.parse_args()
    sys.exit(0 if check_python_code(args.file_pattern) else 1)


if __name__ == '__main__':
    main()
