"""Test for vhostplan._internal.entrypoint."""
import sys
import unittest
from unittest import mock

import pytest

from vhostplan import errors
from vhostplan._internal import entrypoint
from vhostplan._internal import override_centos
from vhostplan._internal import override_debian
from vhostplan._internal import platform


class EntryPointTest(unittest.TestCase):
    """Entrypoint tests"""

    @classmethod
    def _call(cls, *args, **kwargs):
        return entrypoint.get_platform_class(*args, **kwargs)

    def test_get_platform_class(self):
        with mock.patch("vhostplan.util.get_os_info") as mock_info:
            with mock.patch("vhostplan.util.get_systemd_os_like", return_value=[]):
                for distro in entrypoint.OVERRIDE_CLASSES:
                    mock_info.return_value = (distro, "whatever")
                    assert self._call() == entrypoint.OVERRIDE_CLASSES[distro]

    def test_nonexistent_like(self):
        with mock.patch("vhostplan.util.get_os_info") as mock_info:
            mock_info.return_value = ("nonexistent", "irrelevant")
            with mock.patch("vhostplan.util.get_systemd_os_like") as mock_like:
                for like in entrypoint.OVERRIDE_CLASSES:
                    mock_like.return_value = [like]
                    assert self._call() == entrypoint.OVERRIDE_CLASSES[like]

    def test_nonexistent_generic(self):
        with mock.patch("vhostplan.util.get_os_info") as mock_info:
            mock_info.return_value = ("nonexistent", "irrelevant")
            with mock.patch("vhostplan.util.get_systemd_os_like") as mock_like:
                mock_like.return_value = ["unknown"]
                assert self._call() == platform.Platform

    def test_explicit_family(self):
        assert self._call("Debian") == override_debian.DebianPlatform
        assert self._call(" redhat ") == override_centos.CentOSPlatform
        with mock.patch("vhostplan.util.get_os_info") as mock_info:
            self._call("debian")
            mock_info.assert_not_called()

    def test_unsupported_family(self):
        with pytest.raises(errors.NotSupportedError, match="solaris"):
            self._call("solaris")


class GetPlatformTest(unittest.TestCase):
    """Tests for vhostplan._internal.entrypoint.get_platform."""

    def test_overrides(self):
        debian = entrypoint.get_platform("debian", vhost_root="/srv/www", selinux=None)
        assert debian.family == "debian"
        assert debian.options.vhost_root == "/srv/www"
        assert debian.options.selinux is False
        assert debian.options.restart_cmd == ["apache2ctl", "graceful"]
        assert repr(debian) == "DebianPlatform(family='debian')"

    def test_defaults_not_shared(self):
        first = entrypoint.get_platform("redhat", restart_cmd=["systemctl", "reload", "httpd"])
        second = entrypoint.get_platform("redhat")
        assert first.options.restart_cmd == ["systemctl", "reload", "httpd"]
        assert second.options.restart_cmd == ["apachectl", "graceful"]
        assert second.seltype("httpd_config_t") == "httpd_config_t"

    def test_unknown_override(self):
        with pytest.raises(TypeError):
            entrypoint.get_platform("debian", color="blue")


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
