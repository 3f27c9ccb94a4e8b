"""Tests for vhostplan._internal.planner."""
import sys
import unittest

import pytest

from vhostplan import errors
from vhostplan._internal.compiler import compile_vhost
from vhostplan._internal.obj import ContentSource
from vhostplan._internal.obj import NO_CONTENT
from vhostplan._internal.resources import NodeKind
from vhostplan._internal.resources import TemplateRef
from vhostplan.tests import util as test_util

BASE = "/var/www/www.example.com"
CONFIG = "file:/etc/apache2/sites-enabled/www.example.com.conf"


def _plan(platform=None, **params):
    if platform is None:
        platform = test_util.debian_platform()
    return compile_vhost(test_util.vhost_params(**params), platform)


class SelectContentTest(unittest.TestCase):
    """Tests for vhostplan._internal.planner.select_content."""

    @classmethod
    def _call(cls, *args, **kwargs):
        from vhostplan._internal.planner import select_content
        return select_content(*args, **kwargs)

    def setUp(self):
        self.default = TemplateRef.build(["README"], {})

    def test_inline_first(self):
        assert self._call("readme", ContentSource(content="hi"), self.default) == {
            "content": "hi"}

    def test_source(self):
        assert self._call("readme", ContentSource(source="/srv/README"), self.default) == {
            "source": "/srv/README"}

    def test_template(self):
        assert self._call("readme", NO_CONTENT, self.default) == {"template": self.default}

    def test_nothing(self):
        assert self._call("htdocs", NO_CONTENT) == {}

    def test_conflict(self):
        with pytest.raises(errors.ConfigurationConflictError):
            self._call("readme", ContentSource(content="hi", source="/srv/README"))


class ConfigTemplatesTest(unittest.TestCase):
    """Tests for vhostplan._internal.planner.config_templates."""

    @classmethod
    def _call(cls, **params):
        from vhostplan._internal.planner import config_templates
        from vhostplan._internal.validation import ParameterValidator
        spec = ParameterValidator(test_util.debian_platform()).validate(
            test_util.vhost_params(**params))
        return config_templates(spec)

    def test_variants(self):
        assert self._call() == ("vhost.conf",)
        assert self._call(ssl=True) == ("vhost-redirect.conf", "vhost-ssl.conf")
        assert self._call(ssl=True, ssl_only=True) == ("vhost-ssl.conf",)


class ResourcePlannerTest(unittest.TestCase):
    """Tests for vhostplan._internal.planner.ResourcePlanner."""

    def test_present_layout(self):
        plan = _plan()
        assert [node.key for node in plan.order()] == [
            "directory:" + BASE,
            "directory:" + BASE + "/conf",
            "directory:" + BASE + "/htdocs",
            "directory:" + BASE + "/cgi-bin",
            "directory:" + BASE + "/private",
            "directory:" + BASE + "/logs",
            "file:" + BASE + "/README",
            CONFIG,
        ]
        assert plan.graph.missing() == []
        assert [edge.source for edge in plan.triggers] == [CONFIG]

    def test_identities(self):
        plan = _plan(admin="alice", group="webadm", mode="0750")
        htdocs = plan.graph["directory:" + BASE + "/htdocs"]
        assert (htdocs.owner, htdocs.group, htdocs.mode) == ("alice", "webadm", 0o750)
        config = plan.graph[CONFIG]
        assert (config.owner, config.mode) == ("alice", 0o644)

    def test_config_default_template(self):
        config = _plan(aliases=["example.com"]).graph[CONFIG]
        assert config.template.names == ("vhost.conf",)
        bindings = config.template.bindings_dict()
        assert bindings["name"] == "www.example.com"
        assert bindings["aliases"] == ("example.com",)
        assert bindings["document_root"] == BASE + "/htdocs"
        assert bindings["cgi_bin"] == BASE + "/cgi-bin/"
        assert config.content is None and config.source is None

    def test_config_needs_directories(self):
        config = _plan().graph[CONFIG]
        assert "directory:" + BASE + "/htdocs" in config.needs
        assert "directory:" + BASE + "/logs" in config.needs

    def test_config_inline(self):
        config = _plan(config_content="<VirtualHost *:80>\n</VirtualHost>\n").graph[CONFIG]
        assert config.content.startswith("<VirtualHost")
        assert config.template is None

    def test_config_source(self):
        config = _plan(config_source="/srv/vhost.conf").graph[CONFIG]
        assert config.source == "/srv/vhost.conf"
        assert config.template is None

    def test_readme(self):
        readme = _plan().graph["file:" + BASE + "/README"]
        assert readme.template.names == ("README",)
        readme = _plan(readme_content="hello").graph["file:" + BASE + "/README"]
        assert readme.content == "hello"

    def test_htdocs_source(self):
        htdocs = _plan(htdocs_source="/srv/site").graph["directory:" + BASE + "/htdocs"]
        assert htdocs.source == "/srv/site"
        assert htdocs.recurse

    def test_directory_inline_content(self):
        from vhostplan._internal.planner import ResourcePlanner
        from vhostplan._internal.paths import resolve_paths
        from vhostplan._internal.reload import ReloadCoordinator
        from vhostplan._internal.validation import ParameterValidator
        platform = test_util.debian_platform()
        spec = ParameterValidator(platform).validate(test_util.vhost_params())
        spec = spec._replace(htdocs=ContentSource(content="<html/>"))
        planner = ResourcePlanner(platform, ReloadCoordinator())
        with pytest.raises(errors.ValidationError, match="htdocs"):
            planner.plan(spec, resolve_paths(None, spec.name, platform))

    def test_without_cgi_bin(self):
        plan = _plan(cgibin=False, cgi_source="/srv/cgi")
        assert "directory:" + BASE + "/cgi-bin" not in plan.graph
        assert plan.graph[CONFIG].template.bindings_dict()["cgi_bin"] is None

    def test_custom_docroot(self):
        plan = _plan(docroot="/srv/site")
        assert "directory:/srv/site" in plan.graph
        assert "directory:" + BASE + "/htdocs" not in plan.graph

    def test_no_labels_on_debian(self):
        assert all(node.seltype is None for node in _plan().graph)

    def test_labels_on_redhat(self):
        plan = _plan(test_util.redhat_platform(), ssl=True)
        base = "/var/www/vhosts/www.example.com"
        labels = {node.key: node.seltype for node in plan.graph}
        assert labels["directory:" + base + "/conf"] == "httpd_config_t"
        assert labels["directory:" + base + "/htdocs"] == "httpd_sys_content_t"
        assert labels["directory:" + base + "/cgi-bin"] == "httpd_sys_script_exec_t"
        assert labels["directory:" + base + "/logs"] == "httpd_log_t"
        assert labels["directory:" + base + "/ssl"] == "cert_t"
        assert labels["file:/etc/httpd/conf.d/www.example.com.conf"] == "httpd_config_t"

    def test_absent(self):
        for platform in (test_util.debian_platform(), test_util.redhat_platform()):
            plan = _plan(platform, ensure="absent", ssl=True, userdir=True)
            nodes = plan.order()
            assert all(not node.present for node in nodes)
            assert all(not node.has_content for node in nodes)
            assert all(node.kind is not NodeKind.RUN_IF_MISSING for node in nodes)
            assert plan.triggers
            assert all(not plan.graph[edge.source].present for edge in plan.triggers)

    def test_absent_nodes(self):
        plan = _plan(ensure="absent", ssl=True)
        assert [node.key for node in plan.order()] == [
            CONFIG,
            "directory:" + BASE + "/ssl",
            "directory:" + BASE,
        ]
        assert plan.graph["directory:" + BASE].force
        assert plan.graph["directory:" + BASE + "/ssl"].force


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
