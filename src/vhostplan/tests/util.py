"""Test utilities."""
import logging
import os
import shutil
import tempfile
from typing import Any
from typing import Dict
from typing import List
from typing import Sequence
import unittest
from unittest import mock

from vhostplan import configuration
from vhostplan._internal import constants
from vhostplan._internal.entrypoint import get_platform
from vhostplan._internal.platform import Platform


def debian_platform(**overrides: Any) -> Platform:
    """Platform of the Debian family."""
    return get_platform("debian", **overrides)


def redhat_platform(**overrides: Any) -> Platform:
    """Platform of the RedHat family, with SELinux."""
    return get_platform("redhat", **overrides)


def vhost_params(name: str = "www.example.com", **params: Any) -> Dict[str, Any]:
    """Raw declaration parameters of a virtual host."""
    params["name"] = name
    return params


def write_declarations(directory: str, text: str, filename: str = "vhosts.ini") -> str:
    """Write a declaration file in directory and return its path."""
    path = os.path.join(directory, filename)
    with open(path, "w") as fh:
        fh.write(text)
    return path


class FakeGenerator:
    """Stands for the certificate generation script and the reload command.

    Generator invocations write ``{name}.crt``, ``{name}.key`` and
    ``{name}.csr`` in the output directory given on the command line.

    """

    def __init__(self, generator: str = constants.GENERATOR_SCRIPT) -> None:
        self.generator = generator
        self.calls: List[List[str]] = []

    def __call__(self, params: Sequence[str], *args: Any, **kwargs: Any) -> tuple:
        params = list(params)
        self.calls.append(params)
        if params[0] == self.generator:
            name, _, output_dir = params[1:4]
            for ext in ("crt", "key", "csr"):
                with open(os.path.join(output_dir, "{0}.{1}".format(name, ext)), "w") as fh:
                    fh.write("{0} {1}\n".format(name, ext))
        return "", ""

    def generated(self) -> List[List[str]]:
        """Invocations of the generator."""
        return [call for call in self.calls if call[0] == self.generator]

    def reloads(self) -> List[List[str]]:
        """Invocations of anything but the generator."""
        return [call for call in self.calls if call[0] != self.generator]


class TempDirTestCase(unittest.TestCase):
    """Base test class which sets up and tears down a temporary directory"""

    def setUp(self) -> None:
        """Execute before test"""
        self.tempdir = tempfile.mkdtemp()

    def tearDown(self) -> None:
        """Execute after test"""
        # Cleanup opened resources after a test. This is usually done
        # through atexit handlers, which only run when the whole test
        # process exits.
        logging.shutdown()
        # Remove logging handlers that have been closed so they won't be
        # accidentally used in future tests.
        logging.getLogger().handlers = []

        shutil.rmtree(self.tempdir)


class ConfigTestCase(TempDirTestCase):
    """Test class which sets up a NamespaceConfig object."""
    def setUp(self) -> None:
        super().setUp()
        declarations = write_declarations(self.tempdir, "[www.example.com]\n")
        namespace = mock.MagicMock(**constants.CLI_DEFAULTS)
        namespace.verb = "plan"
        namespace.verbose_level = None
        namespace.declarations = [declarations]
        namespace.templates_dir = None
        namespace.logs_dir = os.path.join(self.tempdir, 'logs')
        self.config = configuration.NamespaceConfig(namespace)
