"""Tests for vhostplan._internal.render."""
import os
import sys
import unittest

import pytest

from vhostplan import errors
from vhostplan._internal.compiler import compile_vhost
from vhostplan._internal.render import TemplateRenderer
from vhostplan.tests import util as test_util

CONFIG = "file:/etc/apache2/sites-enabled/www.example.com.conf"


def _render_config(**params):
    plan = compile_vhost(test_util.vhost_params(**params), test_util.debian_platform())
    return TemplateRenderer().render_ref(plan.graph[CONFIG].template).decode()


class BindAddressesTest(unittest.TestCase):
    """Tests for vhostplan._internal.render.bind_addresses."""

    @classmethod
    def _call(cls, *args, **kwargs):
        from vhostplan._internal.render import bind_addresses
        return bind_addresses(*args, **kwargs)

    def test_wildcard(self):
        assert self._call(("*:80", "*:8080")) == "*:80 *:8080"

    def test_ip_address(self):
        assert self._call(("*:80", "[::1]:8080", "_default_:81"), "192.0.2.1") == \
            "192.0.2.1:80 [::1]:8080 _default_:81"


class TemplateRendererTest(unittest.TestCase):
    """Tests for vhostplan._internal.render.TemplateRenderer."""

    def test_plain_vhost(self):
        text = _render_config(aliases=["example.com"], options=["-Indexes", "+FollowSymLinks"])
        assert text.startswith("<VirtualHost *:80>\n")
        assert "  ServerName www.example.com\n" in text
        assert "  ServerAlias example.com\n" in text
        assert "  DocumentRoot /var/www/www.example.com/htdocs\n" in text
        assert "    Options -Indexes +FollowSymLinks\n" in text
        assert "  ScriptAlias /cgi-bin/ /var/www/www.example.com/cgi-bin/\n" in text
        assert "    Options +ExecCGI\n" in text
        assert "  ErrorLog /var/www/www.example.com/logs/error.log\n" in text
        assert "  IncludeOptional /var/www/www.example.com/conf/*.conf\n" in text
        assert text.endswith("</VirtualHost>\n")
        assert "SSLEngine" not in text
        assert "{" not in text.replace("%{", "")

    def test_optional_directives_omitted(self):
        text = _render_config(cgibin=False)
        assert "ServerAlias" not in text
        assert "ScriptAlias" not in text
        assert "  <Directory /var/www/www.example.com/htdocs>\n    AllowOverride None\n" in text
        assert "\n\n" not in text

    def test_ip_address(self):
        text = _render_config(ip_address="192.0.2.1", ports=["*:80", "[::1]:8080"])
        assert text.startswith("<VirtualHost 192.0.2.1:80 [::1]:8080>\n")

    def test_ssl_vhost(self):
        text = _render_config(ssl=True, verify_client="require", ip_address="192.0.2.1")
        assert text.count("<VirtualHost") == 2
        assert "<VirtualHost 192.0.2.1:80>" in text
        assert ("  RewriteRule ^ https://%{SERVER_NAME}%{REQUEST_URI} [END,NE,R=permanent]\n"
                in text)
        assert "<VirtualHost 192.0.2.1:443>" in text
        assert ("  SSLCertificateFile /var/www/www.example.com/ssl/www.example.com.crt\n"
                in text)
        assert ("  SSLCertificateKeyFile /var/www/www.example.com/ssl/www.example.com.key\n"
                in text)
        assert ("  SSLVerifyClient require\n"
                "  SSLCACertificateFile /etc/ssl/certs/ca-certificates.crt\n"
                "  ErrorLog /var/www/www.example.com/logs/ssl_error.log\n") in text
        assert "SSLCertificateChainFile" not in text
        assert "SSLCARevocationFile" not in text

    def test_ssl_revocation(self):
        text = _render_config(ssl=True, verify_client="optional", cacrl_source="/srv/ca.crl")
        assert "  SSLCARevocationFile /var/www/www.example.com/ssl/cacert.crl\n" in text
        assert "  SSLCARevocationCheck chain\n" in text

    def test_ssl_only(self):
        text = _render_config(ssl=True, ssl_only=True, certchain_source="/srv/chain.crt")
        assert text.count("<VirtualHost") == 1
        assert "RewriteRule" not in text
        assert "SSLVerifyClient" not in text
        assert ("  SSLCertificateChainFile /var/www/www.example.com/ssl/certchain.crt\n"
                in text)

    def test_ssleay(self):
        plan = compile_vhost(test_util.vhost_params(ssl=True, country="CH", days=30),
                             test_util.debian_platform())
        node = plan.graph["file:/var/www/www.example.com/ssl/ssleay.cnf"]
        text = TemplateRenderer().render_ref(node.template).decode()
        assert "# Input of the certificate generation script for www.example.com\n" in text
        assert "default_days = 30\n" in text
        assert text.endswith(
            "[ req_distinguished_name ]\n"
            "C = CH\n"
            "O = undefined organisation\n"
            "CN = www.example.com\n")

    def test_unknown_template(self):
        with pytest.raises(errors.ApplyError, match="Unknown template"):
            TemplateRenderer().render("nope.conf", {})


class TemplateDirectoryTest(test_util.TempDirTestCase):
    """Tests for templates found in a local directory."""

    def _write(self, name, text):
        with open(os.path.join(self.tempdir, name), "w") as fh:
            fh.write(text)

    def test_local_first(self):
        self._write("README", "site {{ name }}\n")
        renderer = TemplateRenderer(self.tempdir)
        assert renderer.render("README", {"name": "www.example.com"}) == b"site www.example.com\n"
        assert b"mod_userdir" in renderer.render("userdir.conf", {})

    def test_unbound_variable(self):
        self._write("README", "site {{ nickname }}\n")
        with pytest.raises(errors.ApplyError, match="nickname"):
            TemplateRenderer(self.tempdir).render("README", {"name": "www.example.com"})

    def test_syntax_error(self):
        self._write("README", "{% if name %}site\n")
        with pytest.raises(errors.ApplyError, match="invalid"):
            TemplateRenderer(self.tempdir).render("README", {"name": "www.example.com"})


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
