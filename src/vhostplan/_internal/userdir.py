"""Per-user directories (mod_userdir) of a virtual host."""
import logging
from typing import List
from typing import Optional

from vhostplan._internal import constants
from vhostplan._internal.obj import Ensure
from vhostplan._internal.paths import resolve_paths
from vhostplan._internal.platform import Platform
from vhostplan._internal.reload import ReloadCoordinator
from vhostplan._internal.resources import absent
from vhostplan._internal.resources import directory_key
from vhostplan._internal.resources import file
from vhostplan._internal.resources import NodeKind
from vhostplan._internal.resources import ResourceNode
from vhostplan._internal.resources import TemplateRef

logger = logging.getLogger(__name__)


class UserdirPlanner:
    """Manages ``{root}/{vhost}/conf/userdir.conf`` of an existing vhost."""

    def __init__(self, platform: Platform, coordinator: ReloadCoordinator) -> None:
        self.platform = platform
        self.coordinator = coordinator

    def plan(self, vhost: str, ensure: Ensure = Ensure.PRESENT,
             root: Optional[str] = None) -> List[ResourceNode]:
        """Plan the userdir configuration of vhost.

        :param str vhost: name of the virtual host
        :param ensure: presence of the userdir configuration
        :param str root: root of all virtual hosts, None for the platform default

        """
        paths = resolve_paths(root, vhost, self.platform)
        if ensure is Ensure.ABSENT:
            node = absent(NodeKind.FILE, paths.userdir_conf)
        else:
            node = file(paths.userdir_conf, mode=0o644,
                        template=TemplateRef.build([constants.TEMPLATE_USERDIR],
                                                   {"name": vhost}),
                        seltype=self.platform.seltype(constants.SELTYPE_CONFIG),
                        ).needing(directory_key(paths.conf_dir))
        self.coordinator.register(node.key)
        logger.debug("Planned userdir configuration of %s", vhost)
        return [node]
