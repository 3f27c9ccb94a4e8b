"""Tests for vhostplan._internal.paths."""
import sys
import unittest

import pytest

from vhostplan import errors
from vhostplan.tests import util as test_util


class VhostRootTest(unittest.TestCase):
    """Tests for vhostplan._internal.paths.vhost_root."""

    @classmethod
    def _call(cls, *args, **kwargs):
        from vhostplan._internal.paths import vhost_root
        return vhost_root(*args, **kwargs)

    def test_family_defaults(self):
        assert self._call(test_util.debian_platform()) == "/var/www"
        assert self._call(test_util.redhat_platform()) == "/var/www/vhosts"

    def test_explicit(self):
        assert self._call(test_util.debian_platform(), "/srv/www/") == "/srv/www"

    def test_relative(self):
        with pytest.raises(errors.ValidationError):
            self._call(test_util.debian_platform(), "srv/www")

    def test_relative_platform_root(self):
        with pytest.raises(errors.ValidationError):
            self._call(test_util.debian_platform(vhost_root="www"))


class ResolvePathsTest(unittest.TestCase):
    """Tests for vhostplan._internal.paths.resolve_paths."""

    @classmethod
    def _call(cls, *args, **kwargs):
        from vhostplan._internal.paths import resolve_paths
        return resolve_paths(*args, **kwargs)

    def test_debian_layout(self):
        paths = self._call(None, "www.example.com", test_util.debian_platform())
        assert paths.root == "/var/www"
        assert paths.instance_dir == "/var/www/www.example.com"
        assert paths.document_root == "/var/www/www.example.com/htdocs"
        assert paths.cgi_bin == "/var/www/www.example.com/cgi-bin/"
        assert paths.conf_dir == "/var/www/www.example.com/conf"
        assert paths.private_dir == "/var/www/www.example.com/private"
        assert paths.logs_dir == "/var/www/www.example.com/logs"
        assert paths.readme == "/var/www/www.example.com/README"
        assert paths.config_file == "/etc/apache2/sites-enabled/www.example.com.conf"
        assert paths.default_ca_bundle == "/etc/ssl/certs/ca-certificates.crt"

    def test_ssl_layout(self):
        paths = self._call(None, "www.example.com", test_util.redhat_platform())
        ssl = "/var/www/vhosts/www.example.com/ssl"
        assert paths.ssl_dir == ssl
        assert paths.ssl_config == ssl + "/ssleay.cnf"
        assert paths.cert == ssl + "/www.example.com.crt"
        assert paths.key == ssl + "/www.example.com.key"
        assert paths.csr == ssl + "/www.example.com.csr"
        assert paths.cacert == ssl + "/cacert.crt"
        assert paths.cacrl == ssl + "/cacert.crl"
        assert paths.certchain == ssl + "/certchain.crt"
        assert paths.default_ca_bundle == "/etc/pki/tls/certs/ca-bundle.crt"

    def test_userdir_conf(self):
        for platform, root in ((test_util.debian_platform(), "/var/www"),
                               (test_util.redhat_platform(), "/var/www/vhosts")):
            paths = self._call(None, "www.example.com", platform)
            assert paths.userdir_conf == root + "/www.example.com/conf/userdir.conf"

    def test_overrides(self):
        paths = self._call("/srv", "www.example.com", test_util.debian_platform(),
                           docroot="/data/site", cgibin="/data/cgi/")
        assert paths.instance_dir == "/srv/www.example.com"
        assert paths.document_root == "/data/site"
        assert paths.cgi_bin == "/data/cgi/"

    def test_no_cgi_bin(self):
        paths = self._call(None, "www.example.com", test_util.debian_platform(), cgibin=False)
        assert paths.cgi_bin is None

    def test_relative_root(self):
        with pytest.raises(errors.ValidationError):
            self._call("srv", "www.example.com", test_util.debian_platform())


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
