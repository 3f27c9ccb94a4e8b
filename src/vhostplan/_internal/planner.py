"""Resource planning of a virtual host."""
import logging
from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from typing import Tuple

from vhostplan import errors
from vhostplan._internal import constants
from vhostplan._internal.obj import ContentSource
from vhostplan._internal.obj import VhostSpec
from vhostplan._internal.paths import PathSet
from vhostplan._internal.platform import Platform
from vhostplan._internal.reload import ReloadCoordinator
from vhostplan._internal.resources import absent
from vhostplan._internal.resources import directory
from vhostplan._internal.resources import directory_key
from vhostplan._internal.resources import file
from vhostplan._internal.resources import NodeKind
from vhostplan._internal.resources import ResourceNode
from vhostplan._internal.resources import TemplateRef
from vhostplan._internal.ssl_materializer import SSLMaterializer

logger = logging.getLogger(__name__)


def select_content(field: str, declared: ContentSource,
                   default: Optional[TemplateRef] = None) -> Dict[str, Any]:
    """Pick the content of field.

    Precedence: inline content, then external source, then the default
    template, then nothing. Exactly one form is returned.

    :returns: keyword arguments for a `.ResourceNode`, possibly empty
    :raises .errors.ConfigurationConflictError: if both inline content
        and an external source are declared

    """
    if declared.content is not None and declared.source is not None:
        raise errors.ConfigurationConflictError(
            field, (field + "_content", field + "_source"))
    if declared.content is not None:
        return {"content": declared.content}
    if declared.source is not None:
        return {"source": declared.source}
    if default is not None:
        return {"template": default}
    return {}


def config_templates(spec: VhostSpec) -> Tuple[str, ...]:
    """Template variant of the Apache configuration of spec.

    A plain vhost uses the plain template. An SSL vhost serves HTTPS, and
    unless it is SSL only, also gets a plain-port vhost redirecting to
    HTTPS.

    """
    if spec.ssl is None:
        return (constants.TEMPLATE_VHOST,)
    if spec.ssl.ssl_only:
        return (constants.TEMPLATE_VHOST_SSL,)
    return (constants.TEMPLATE_VHOST_REDIRECT, constants.TEMPLATE_VHOST_SSL)


class ResourcePlanner:
    """Turns a validated `.VhostSpec` into resource nodes.

    The instance directory ``{root}/{name}`` is only asserted as a
    dependency, :class:`~vhostplan._internal.instance.InstancePlanner`
    owns it. Resources whose change requires Apache to reload are
    registered on the shared `.ReloadCoordinator`.

    """

    def __init__(self, platform: Platform, coordinator: ReloadCoordinator) -> None:
        self.platform = platform
        self.coordinator = coordinator
        self.ssl = SSLMaterializer(platform, coordinator)

    def plan(self, spec: VhostSpec, paths: PathSet) -> List[ResourceNode]:
        """Plan every resource of spec.

        :param spec: validated declaration
        :param paths: paths resolved for spec

        :returns: nodes, in dependency order
        :rtype: list

        :raises .errors.ConfigurationConflictError: on conflicting content

        """
        if not spec.present:
            nodes = [absent(NodeKind.FILE, paths.config_file)]
            self.coordinator.register(nodes[0].key)
            if spec.ssl is not None:
                nodes.extend(self.ssl.materialize_ssl(spec, paths))
            logger.debug("Planned removal of %s", spec.name)
            return nodes

        instance = directory_key(paths.instance_dir)
        seltype = self.platform.seltype

        nodes = [
            directory(paths.conf_dir, owner=spec.admin, group=spec.group,
                      mode=spec.mode, seltype=seltype(constants.SELTYPE_CONFIG),
                      ).needing(instance),
            self._content_directory("htdocs", spec, paths.document_root,
                                    spec.htdocs, constants.SELTYPE_CONTENT, instance),
        ]
        if paths.cgi_bin is not None:
            nodes.append(self._content_directory(
                "cgi", spec, paths.cgi_bin, spec.cgi, constants.SELTYPE_SCRIPT, instance))
        elif spec.cgi.is_set:
            logger.warning("cgi-bin of %s is disabled, ignoring its source", spec.name)
        nodes.append(self._content_directory(
            "private", spec, paths.private_dir, spec.private,
            constants.SELTYPE_CONTENT, instance))
        nodes.append(directory(paths.logs_dir, owner=spec.admin, mode=0o755,
                               seltype=seltype(constants.SELTYPE_LOG)).needing(instance))

        readme_default = TemplateRef.build(
            [constants.TEMPLATE_README], self._bindings(spec, paths))
        nodes.append(file(paths.readme, owner=spec.admin, group=spec.group, mode=0o644,
                          **select_content("readme", spec.readme, readme_default)
                          ).needing(instance))

        config_needs = [node.key for node in nodes if node.kind is NodeKind.DIRECTORY]
        bindings = self._bindings(spec, paths)
        if spec.ssl is not None:
            ssl_nodes = self.ssl.materialize_ssl(spec, paths)
            nodes.extend(ssl_nodes)
            bindings.update(self.ssl.bindings(spec, paths))
            config_needs.extend(self.ssl.config_dependencies(ssl_nodes))

        config_default = TemplateRef.build(config_templates(spec), bindings)
        config = file(paths.config_file, owner=spec.admin, mode=0o644,
                      seltype=seltype(constants.SELTYPE_CONFIG),
                      **select_content("config", spec.config, config_default)
                      ).needing(*config_needs)
        nodes.append(config)
        self.coordinator.register(config.key)

        logger.debug("Planned %d resources for %s", len(nodes), spec.name)
        return nodes

    def _content_directory(self, field: str, spec: VhostSpec, path: str,
                           declared: ContentSource, label: str,
                           instance: str) -> ResourceNode:
        if declared.content is not None:
            raise errors.ValidationError(
                "{0} of {1} is a directory and only accepts a source".format(
                    field, spec.name))
        content = select_content(field, declared)
        return directory(path, owner=spec.admin, group=spec.group, mode=spec.mode,
                         seltype=self.platform.seltype(label),
                         recurse="source" in content, **content).needing(instance)

    @staticmethod
    def _bindings(spec: VhostSpec, paths: PathSet) -> Dict[str, Any]:
        return {
            "name": spec.name,
            "aliases": list(spec.aliases),
            "ip_address": spec.ip_address,
            "user": spec.user,
            "group": spec.group,
            "ports": list(spec.ports),
            "options": list(spec.options),
            "document_root": paths.document_root,
            "cgi_bin": paths.cgi_bin,
            "logs_dir": paths.logs_dir,
            "instance_dir": paths.instance_dir,
            "ssl": spec.ssl is not None,
        }
