"""Reference convergence engine applying a plan to the local machine."""
import grp
import logging
import os
import pwd
import shutil
from typing import Callable
from typing import List
from typing import NamedTuple
from typing import Optional
from typing import Sequence
from typing import Tuple

from vhostplan import errors
from vhostplan import util
from vhostplan._internal.compiler import Plan
from vhostplan._internal.platform import Platform
from vhostplan._internal.render import TemplateRenderer
from vhostplan._internal.resources import NodeKind
from vhostplan._internal.resources import ResourceNode

logger = logging.getLogger(__name__)

SELINUX_XATTR = "security.selinux"


class ApplyReport(NamedTuple):
    """Outcome of one convergence pass."""
    changed: Tuple[str, ...]
    reloaded: bool
    dry_run: bool = False


class Engine:
    """Diffs planned resources against the file system and applies deltas.

    Every action is idempotent: applying an unchanged plan a second time
    modifies nothing and does not reload Apache. Generators only run
    while their output is missing.

    :ivar str chroot: prefix of every planned path, for staging and tests
    :ivar bool dry_run: report what would change without touching anything

    """

    def __init__(self, platform: Platform, renderer: Optional[TemplateRenderer] = None,
                 chroot: Optional[str] = None, dry_run: bool = False,
                 reload_cmd: Optional[Sequence[str]] = None,
                 runner: Callable[..., Tuple[str, str]] = util.run_script) -> None:
        self.platform = platform
        self.renderer = renderer if renderer is not None else TemplateRenderer()
        self.chroot = chroot
        self.dry_run = dry_run
        self.reload_cmd = list(reload_cmd) if reload_cmd else platform.options.restart_cmd
        self.runner = runner

    def host_path(self, path: str) -> str:
        """Location of a planned path on this machine."""
        if self.chroot is None:
            return path
        return os.path.join(self.chroot, path.lstrip("/"))

    def apply(self, plan: Plan) -> ApplyReport:
        """Apply plan in dependency order, then reload at most once.

        :returns: keys of the nodes which changed the system
        :rtype: `ApplyReport`

        :raises .errors.ApplyError: if a resource cannot be converged
        :raises .errors.SubprocessError: if a generator or the reload fails

        """
        plan.coordinator.begin_pass()
        changed: List[str] = []
        for node in plan.order():
            if self._apply_node(node):
                logger.info("%s %s", "Would change" if self.dry_run else "Changed",
                            node.key)
                changed.append(node.key)

        if self.dry_run:
            reloaded = plan.coordinator.should_reload(changed)
        else:
            reloaded = plan.coordinator.fire(changed, self.reload)
        return ApplyReport(tuple(changed), reloaded, self.dry_run)

    def reload(self) -> None:
        """Gracefully reload Apache."""
        self.runner(self.reload_cmd)

    def _apply_node(self, node: ResourceNode) -> bool:
        if node.kind is NodeKind.RUN_IF_MISSING:
            return self._run_if_missing(node)
        if not node.present:
            return self._remove(node)
        if node.kind is NodeKind.DIRECTORY:
            changed = self._directory(node)
        else:
            changed = self._file(node)
        if os.path.exists(self.host_path(node.path)):
            changed = self._attributes(node) or changed
        return changed

    def _remove(self, node: ResourceNode) -> bool:
        path = self.host_path(node.path)
        if not os.path.lexists(path):
            return False
        if self.dry_run:
            return True
        if node.kind is NodeKind.DIRECTORY and not os.path.islink(path):
            if node.force:
                shutil.rmtree(path)
            else:
                os.rmdir(path)
        else:
            os.remove(path)
        return True

    def _directory(self, node: ResourceNode) -> bool:
        path = self.host_path(node.path)
        changed = False
        if not os.path.isdir(path):
            if os.path.lexists(path):
                raise errors.ApplyError(
                    "{0} exists and is not a directory".format(node.path))
            if not self.dry_run:
                os.makedirs(path)
            changed = True
        if node.source is not None and node.recurse:
            changed = self._sync_tree(self._source_path(node.source), path) or changed
        return changed

    def _sync_tree(self, source: str, target: str) -> bool:
        if not os.path.isdir(source):
            raise errors.ApplyError("Source {0} is not a directory".format(source))
        changed = False
        for dirpath, _, filenames in os.walk(source):
            relative = os.path.relpath(dirpath, source)
            destination = os.path.normpath(os.path.join(target, relative))
            if not os.path.isdir(destination):
                changed = True
                if not self.dry_run:
                    os.makedirs(destination)
            for filename in filenames:
                with open(os.path.join(dirpath, filename), "rb") as fh:
                    data = fh.read()
                changed = self._write(os.path.join(destination, filename), data) or changed
        return changed

    def _file(self, node: ResourceNode) -> bool:
        path = self.host_path(node.path)
        if os.path.isdir(path):
            raise errors.ApplyError("{0} is a directory".format(node.path))
        desired = self._desired_content(node)
        if desired is None:
            if node.always_apply and self.dry_run:
                # refreshed from an origin generated later in this pass
                return True
            if os.path.lexists(path):
                return False
            desired = b""
        return self._write(path, desired)

    def _desired_content(self, node: ResourceNode) -> Optional[bytes]:
        if node.content is not None:
            return node.content.encode("utf-8")
        if node.template is not None:
            return self.renderer.render_ref(node.template)
        if node.source is not None:
            return self._read(self._source_path(node.source))
        if node.copy_of is not None:
            origin = self.host_path(node.copy_of)
            if self.dry_run and not os.path.exists(origin):
                # Not generated yet, a real pass would create it.
                return None
            return self._read(origin)
        return None

    def _write(self, path: str, data: bytes) -> bool:
        if os.path.isfile(path):
            with open(path, "rb") as fh:
                if fh.read() == data:
                    return False
        if not self.dry_run:
            try:
                with open(path, "wb") as fh:
                    fh.write(data)
            except OSError as error:
                raise errors.ApplyError("Unable to write {0}: {1}".format(path, error))
        return True

    @staticmethod
    def _read(path: str) -> bytes:
        try:
            with open(path, "rb") as fh:
                return fh.read()
        except OSError as error:
            raise errors.ApplyError("Unable to read {0}: {1}".format(path, error))

    @staticmethod
    def _source_path(source: str) -> str:
        if source.startswith("file://"):
            source = source[len("file://"):]
        if not os.path.isabs(source):
            raise errors.ApplyError(
                "Unsupported source {0}, expected a local absolute path".format(source))
        return source

    def _attributes(self, node: ResourceNode) -> bool:
        path = self.host_path(node.path)
        changed = False
        if node.mode is not None:
            current = os.stat(path).st_mode & 0o7777
            if current != node.mode:
                logger.debug("Changing mode of %s from %s to %s", node.path,
                             util.format_mode(current), util.format_mode(node.mode))
                if not self.dry_run:
                    os.chmod(path, node.mode)
                changed = True
        if (node.owner or node.group) and os.geteuid() == 0:
            changed = self._ownership(path, node) or changed
        if node.seltype and self.platform.options.selinux:
            changed = self._label(path, node.seltype) or changed
        return changed

    def _ownership(self, path: str, node: ResourceNode) -> bool:
        stat = os.stat(path)
        try:
            uid = pwd.getpwnam(node.owner).pw_uid if node.owner else stat.st_uid
            gid = grp.getgrnam(node.group).gr_gid if node.group else stat.st_gid
        except KeyError as error:
            raise errors.ApplyError("Unknown owner of {0}: {1}".format(path, error))
        if (uid, gid) == (stat.st_uid, stat.st_gid):
            return False
        if not self.dry_run:
            os.chown(path, uid, gid)
        return True

    def _label(self, path: str, seltype: str) -> bool:
        try:
            context = os.getxattr(path, SELINUX_XATTR).rstrip(b"\x00").decode()
        except OSError:
            context = ""
        parts = context.split(":")
        if len(parts) >= 3 and parts[2] == seltype:
            return False
        if not self.dry_run:
            self.runner(["chcon", "-t", seltype, path])
        return True

    def _run_if_missing(self, node: ResourceNode) -> bool:
        creates = self.host_path(node.path)
        if os.path.exists(creates):
            logger.debug("%s exists, not running %s", node.path, node.command[0])
            return False
        if self.dry_run:
            return True
        command = [node.command[0]] + [
            self.host_path(arg) if arg.startswith("/") else arg for arg in node.command[1:]]
        self.runner(command)
        if not os.path.exists(creates):
            raise errors.ApplyError(
                "{0} did not create {1}".format(" ".join(command), node.path))
        return True
