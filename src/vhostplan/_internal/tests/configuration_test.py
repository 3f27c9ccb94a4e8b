"""Tests for vhostplan.configuration."""
import os
import sys

import pytest

from vhostplan import errors
from vhostplan.tests import util as test_util


class NamespaceConfigTest(test_util.ConfigTestCase):
    """Tests for vhostplan.configuration.NamespaceConfig."""

    def _config(self, **attrs):
        from vhostplan.configuration import NamespaceConfig
        namespace = self.config.namespace
        for name, value in attrs.items():
            setattr(namespace, name, value)
        return NamespaceConfig(namespace)

    def test_delegation(self):
        assert self.config.verb == "plan"
        self.config.dry_run = True
        assert self.config.namespace.dry_run is True

    def test_paths_made_absolute(self):
        os.makedirs(os.path.join(self.tempdir, "stage"))
        cwd = os.getcwd()
        os.chdir(self.tempdir)
        try:
            config = self._config(logs_dir="logs", chroot="stage")
        finally:
            os.chdir(cwd)
        assert os.path.isabs(config.logs_dir)
        assert config.logs_dir.endswith(os.sep + "logs")
        assert os.path.isabs(config.chroot)

    def test_declarations(self):
        assert len(self.config.declarations) == 1
        with pytest.raises(errors.Error, match="declaration file"):
            self._config(declarations=None)

    def test_reload_cmd(self):
        assert self.config.reload_cmd is None
        config = self._config(reload_cmd="systemctl  reload httpd")
        assert config.reload_cmd == ["systemctl", "reload", "httpd"]

    def test_relative_root(self):
        assert self._config(root="/srv/www").root == "/srv/www"
        with pytest.raises(errors.Error, match="--root"):
            self._config(root="srv/www")

    def test_missing_chroot(self):
        with pytest.raises(errors.Error, match="--chroot"):
            self._config(chroot=os.path.join(self.tempdir, "nowhere"))

    def test_verbose_level(self):
        assert self.config.verbose_level is None
        assert self._config(verbose_level=2).verbose_level == 2


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
