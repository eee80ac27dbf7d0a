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


class StunnelPackage(Package):
    def __init__(self) -> None:
        super(StunnelPackage, self).__init__(
            name='stunnel',
            version='5.41',
            url_pattern='https://www.stunnel.org/downloads/stunnel-{0}.tar.gz',
            source_digest='9aa8335e0f9571480b0d62b4b58d9d510447b732',
            source_digest_type='sha1',
            description='Proxy that adds TLS encryption to existing clients and servers',
            homepage='https://www.stunnel.org/')
        self.dependencies = ['openssl']

    def create_build_backend(
            self,
            config: BuildConfig,
            src_path: str,
            build_path: str) -> BuildBackend:
        return ConfigureMakeBackend(self.name, config, src_dir=src_path)
