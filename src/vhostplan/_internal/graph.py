"""Dependency graph of planned resources."""
import heapq
import logging
import posixpath
from typing import Dict
from typing import Iterable
from typing import Iterator
from typing import List
from typing import Optional
from typing import Set

from vhostplan import errors
from vhostplan._internal.resources import directory_key
from vhostplan._internal.resources import NodeKind
from vhostplan._internal.resources import ResourceNode

logger = logging.getLogger(__name__)


class ResourceGraph:
    """Directed acyclic graph of `.ResourceNode`, keyed by `.ResourceNode.key`.

    Besides the explicit ``needs`` of every node, the graph derives
    ordering edges from the file system hierarchy:

    - a present node is applied after its closest managed ancestor
      directory,
    - an absent directory is removed after everything managed below it.

    Nodes are kept in insertion order, which is also the tie-break of
    :meth:`order`, so the same plan always yields the same sequence.

    """

    def __init__(self) -> None:
        self._nodes: Dict[str, ResourceNode] = {}
        self._index: Dict[str, int] = {}

    def __contains__(self, key: object) -> bool:
        return key in self._nodes

    def __getitem__(self, key: str) -> ResourceNode:
        return self._nodes[key]

    def __iter__(self) -> Iterator[ResourceNode]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, key: str) -> Optional[ResourceNode]:
        """Node with key, or None."""
        return self._nodes.get(key)

    def add(self, node: ResourceNode) -> ResourceNode:
        """Add node to the graph.

        Adding a node equal to an existing one, up to its dependencies,
        merges the dependencies.

        :returns: the node stored in the graph
        :raises .errors.PlanningInvariantViolation: if another node already
            manages the same target with a different desired state, or if
            node declares more than one form of content

        """
        forms = [form for form in ("content", "source", "template", "copy_of")
                 if getattr(node, form) is not None]
        if len(forms) > 1:
            raise errors.PlanningInvariantViolation(
                "{0} declares more than one content: {1}".format(node.key, ", ".join(forms)))
        if node.kind is NodeKind.RUN_IF_MISSING and not node.command:
            raise errors.PlanningInvariantViolation(
                "{0} has no command to run".format(node.key))

        existing = self._nodes.get(node.key)
        if existing is not None:
            if existing._replace(needs=node.needs) != node:
                raise errors.PlanningInvariantViolation(
                    "Conflicting desired state for {0}".format(node.key))
            merged = existing._replace(needs=existing.needs | node.needs)
            self._nodes[node.key] = merged
            return merged

        if node.kind is not NodeKind.RUN_IF_MISSING:
            for other in self._nodes.values():
                if (other.path.rstrip("/") == node.path.rstrip("/")
                        and other.kind is not node.kind
                        and other.kind is not NodeKind.RUN_IF_MISSING):
                    raise errors.PlanningInvariantViolation(
                        "{0} and {1} manage the same path".format(other.key, node.key))

        self._index[node.key] = len(self._index)
        self._nodes[node.key] = node
        return node

    def extend(self, nodes: Iterable[ResourceNode]) -> None:
        """Add every node of nodes."""
        for node in nodes:
            self.add(node)

    def _managed_ancestor(self, node: ResourceNode) -> Optional[ResourceNode]:
        path = node.path.rstrip("/")
        parent = posixpath.dirname(path)
        while parent and parent != path:
            ancestor = self._nodes.get(directory_key(parent))
            if ancestor is not None:
                return ancestor
            path, parent = parent, posixpath.dirname(parent)
        return None

    def dependencies(self) -> Dict[str, Set[str]]:
        """Every ordering edge of the graph, restricted to managed nodes.

        :returns: key of each node mapped to the keys it must follow
        :raises .errors.PlanningInvariantViolation: if a present node is
            below a directory that is being removed

        """
        deps: Dict[str, Set[str]] = {
            key: {need for need in node.needs if need in self._nodes}
            for key, node in self._nodes.items()}
        for key, node in self._nodes.items():
            ancestor = self._managed_ancestor(node)
            if ancestor is None:
                continue
            if node.present and ancestor.present:
                deps[key].add(ancestor.key)
            elif node.present:
                raise errors.PlanningInvariantViolation(
                    "{0} is below {1} which is being removed".format(key, ancestor.key))
            elif not ancestor.present:
                deps[ancestor.key].add(key)
        return deps

    def missing(self) -> List[str]:
        """Needed keys which are not managed by this graph.

        These are preconditions the caller has to guarantee, eg. the
        instance directory when a virtual host is planned on its own.

        """
        needed: Set[str] = set()
        for node in self._nodes.values():
            needed.update(node.needs)
        return sorted(needed - set(self._nodes))

    def order(self) -> List[ResourceNode]:
        """Topologically sorted nodes, dependencies first.

        :raises .errors.PlanningInvariantViolation: on a dependency cycle

        """
        deps = self.dependencies()
        dependents: Dict[str, List[str]] = {key: [] for key in self._nodes}
        indegree: Dict[str, int] = {}
        for key, needs in deps.items():
            indegree[key] = len(needs)
            for need in needs:
                dependents[need].append(key)

        ready = [(self._index[key], key) for key, count in indegree.items() if count == 0]
        heapq.heapify(ready)
        ordered: List[ResourceNode] = []
        while ready:
            _, key = heapq.heappop(ready)
            ordered.append(self._nodes[key])
            for dependent in dependents[key]:
                indegree[dependent] -= 1
                if indegree[dependent] == 0:
                    heapq.heappush(ready, (self._index[dependent], dependent))

        if len(ordered) != len(self._nodes):
            cycle = sorted(key for key, count in indegree.items() if count > 0)
            raise errors.PlanningInvariantViolation(
                "Dependency cycle between: {0}".format(", ".join(cycle)))
        logger.debug("Ordered %d resources", len(ordered))
        return ordered
