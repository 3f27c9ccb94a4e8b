"""vhostplan user-supplied configuration."""
import argparse
import os
from typing import Any
from typing import List
from typing import Optional

from vhostplan import errors


class NamespaceConfig:
    """Configuration wrapper around :class:`argparse.Namespace`.

    Attribute access is delegated to the namespace. Paths given on the
    command line are made absolute, and the sanity of the combination of
    flags is checked on construction.

    :ivar namespace: Namespace typically produced by
        :meth:`argparse.ArgumentParser.parse_args`.
    :type namespace: :class:`argparse.Namespace`

    """

    def __init__(self, namespace: argparse.Namespace) -> None:
        self.namespace: argparse.Namespace
        # Avoid recursion loop because of the delegation defined in __setattr__
        object.__setattr__(self, 'namespace', namespace)

        self.namespace.logs_dir = os.path.abspath(self.namespace.logs_dir)
        if self.namespace.chroot is not None:
            self.namespace.chroot = os.path.abspath(self.namespace.chroot)

        _check_config_sanity(self)

    def __getattr__(self, name: str) -> Any:
        return getattr(self.namespace, name)

    def __setattr__(self, name: str, value: Any) -> None:
        setattr(self.namespace, name, value)

    @property
    def declarations(self) -> List[str]:
        """Declaration files, in the order they were given."""
        return list(self.namespace.declarations or [])

    @property
    def reload_cmd(self) -> Optional[List[str]]:
        """Command reloading Apache, split on whitespace."""
        if not self.namespace.reload_cmd:
            return None
        return self.namespace.reload_cmd.split()

    @property
    def verbose_level(self) -> Optional[int]:
        """Explicit verbosity set in a configuration file, if any."""
        return getattr(self.namespace, 'verbose_level', None)


def _check_config_sanity(config: NamespaceConfig) -> None:
    """Validate command line options and display error message if
    requirements are not met.

    :param config: NamespaceConfig instance holding user configuration
    :type args: :class:`vhostplan.configuration.NamespaceConfig`

    """
    if not config.declarations:
        raise errors.Error("At least one declaration file is needed, see --declarations")
    if config.root is not None and not os.path.isabs(config.root):
        raise errors.Error("--root must be an absolute path, got {0}".format(config.root))
    if config.chroot is not None and not os.path.isdir(config.chroot):
        raise errors.Error("--chroot {0} is not a directory".format(config.chroot))
