"""Top-level directory of a virtual host instance."""
from typing import List

from vhostplan._internal.obj import VhostSpec
from vhostplan._internal.paths import PathSet
from vhostplan._internal.platform import Platform
from vhostplan._internal.resources import absent
from vhostplan._internal.resources import directory
from vhostplan._internal.resources import NodeKind
from vhostplan._internal.resources import ResourceNode


class InstancePlanner:
    """Owns ``{root}/{name}``, which every other vhost resource needs."""

    def __init__(self, platform: Platform) -> None:
        self.platform = platform

    def plan(self, spec: VhostSpec, paths: PathSet) -> List[ResourceNode]:
        """Directory of the instance, or its recursive removal."""
        if not spec.present:
            return [absent(NodeKind.DIRECTORY, paths.instance_dir, force=True)]
        return [directory(paths.instance_dir, owner=spec.admin, group=spec.group,
                          mode=0o755)]
