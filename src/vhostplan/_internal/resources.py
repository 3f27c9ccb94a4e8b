"""Planned provisioning actions."""
import enum
from typing import Any
from typing import Dict
from typing import FrozenSet
from typing import Iterable
from typing import Mapping
from typing import NamedTuple
from typing import Optional
from typing import Tuple

from vhostplan import util
from vhostplan._internal import constants
from vhostplan._internal.obj import Ensure


class NodeKind(enum.Enum):
    """Kind of a `ResourceNode`."""

    DIRECTORY = "directory"
    FILE = "file"
    RUN_IF_MISSING = "exec"


class TemplateRef(NamedTuple):
    """Content rendered from one or more templates, concatenated in order."""
    names: Tuple[str, ...]
    bindings: Tuple[Tuple[str, Any], ...] = ()

    @classmethod
    def build(cls, names: Iterable[str], bindings: Mapping[str, Any]) -> "TemplateRef":
        """Build a hashable reference from a bindings mapping.

        List values are stored as tuples.

        """
        return cls(tuple(names), tuple(sorted(
            (key, tuple(value) if isinstance(value, list) else value)
            for key, value in bindings.items())))

    def bindings_dict(self) -> Dict[str, Any]:
        """Bindings as a dictionary."""
        return dict(self.bindings)


class ResourceNode(NamedTuple):
    """A planned action on one path.

    ``content``, ``source``, ``template`` and ``copy_of`` are mutually
    exclusive. ``copy_of`` names another managed path, while ``source``
    is an external reference.

    For `NodeKind.RUN_IF_MISSING`, ``path`` is the output whose absence
    gates the execution of ``command``.

    :ivar frozenset needs: keys of the nodes to apply before this one
    :ivar bool always_apply: re-applied on every pass, even if the target
        exists. A dry run reports such a copy as changed while its origin
        is still to be generated.

    """
    kind: NodeKind
    path: str
    ensure: Ensure = Ensure.PRESENT
    content: Optional[str] = None
    source: Optional[str] = None
    template: Optional[TemplateRef] = None
    copy_of: Optional[str] = None
    owner: Optional[str] = None
    group: Optional[str] = None
    mode: Optional[int] = None
    seltype: Optional[str] = None
    recurse: bool = False
    force: bool = False
    command: Tuple[str, ...] = ()
    needs: FrozenSet[str] = frozenset()
    always_apply: bool = False

    @property
    def key(self) -> str:
        """Identifier of the node in a graph, eg. ``file:/etc/foo``."""
        return node_key(self.kind, self.path)

    @property
    def present(self) -> bool:
        """Whether the node brings its path into existence."""
        return self.ensure is Ensure.PRESENT

    @property
    def has_content(self) -> bool:
        """Whether the node carries desired content of any form."""
        return any(value is not None for value in (
            self.content, self.source, self.template, self.copy_of))

    def needing(self, *keys: Optional[str]) -> "ResourceNode":
        """Return a copy of this node with additional dependencies."""
        return self._replace(needs=self.needs.union(key for key in keys if key))

    def to_dict(self) -> Dict[str, Any]:
        """Serializable representation, empty fields left out."""
        data: Dict[str, Any] = {
            "key": self.key,
            "kind": self.kind.value,
            "path": self.path,
            "ensure": self.ensure.value,
        }
        for field in ("content", "source", "copy_of", "owner", "group", "seltype"):
            value = getattr(self, field)
            if value is not None:
                data[field] = value
        if self.template is not None:
            data["template"] = {
                "names": list(self.template.names),
                "bindings": self.template.bindings_dict(),
            }
        if self.mode is not None:
            data["mode"] = util.format_mode(self.mode)
        for flag in ("recurse", "force", "always_apply"):
            if getattr(self, flag):
                data[flag] = True
        if self.command:
            data["command"] = list(self.command)
        if self.needs:
            data["needs"] = sorted(self.needs)
        return data


class TriggerEdge(NamedTuple):
    """If the source node changes the system, schedule the target once."""
    source: str
    target: str = constants.RELOAD_TARGET


def node_key(kind: NodeKind, path: str) -> str:
    """Key of the node of kind managing path."""
    return "{0}:{1}".format(kind.value, path)


def directory_key(path: str) -> str:
    """Key of the directory node managing path."""
    return node_key(NodeKind.DIRECTORY, path.rstrip("/") or "/")


def file_key(path: str) -> str:
    """Key of the file node managing path."""
    return node_key(NodeKind.FILE, path)


def directory(path: str, **kwargs: Any) -> ResourceNode:
    """Ensure-directory node. A trailing slash is dropped."""
    return ResourceNode(NodeKind.DIRECTORY, path.rstrip("/") or "/", **kwargs)


def file(path: str, **kwargs: Any) -> ResourceNode:
    """Ensure-file node."""
    return ResourceNode(NodeKind.FILE, path, **kwargs)


def run_if_missing(creates: str, command: Iterable[str], **kwargs: Any) -> ResourceNode:
    """Node running command only while creates does not exist."""
    return ResourceNode(NodeKind.RUN_IF_MISSING, creates, command=tuple(command), **kwargs)


def absent(kind: NodeKind, path: str, force: bool = False) -> ResourceNode:
    """Removal node, without any content field.

    :param bool force: remove a directory tree recursively

    """
    if kind is NodeKind.DIRECTORY:
        path = path.rstrip("/") or "/"
    return ResourceNode(kind, path, ensure=Ensure.ABSENT, force=force)
