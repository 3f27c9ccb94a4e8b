"""Operating system family specificities."""
from typing import List
from typing import Optional


class OsOptions:
    """
    Dedicated class to describe the OS specificities (eg. paths, identities,
    binary names) that the planners need to be aware of to operate properly.
    """
    def __init__(self,
                 family: str = "generic",
                 vhost_root: str = "/var/www/vhosts",
                 server_root: str = "/etc/httpd",
                 vhost_conf_dir: str = "/etc/httpd/conf.d",
                 user: str = "apache",
                 group: str = "apache",
                 admin: str = "root",
                 ca_bundle: Optional[str] = None,
                 selinux: bool = False,
                 restart_cmd: Optional[List[str]] = None,
                 generator: Optional[str] = None,
                 ):
        self.family = family
        self.vhost_root = vhost_root
        self.server_root = server_root
        self.vhost_conf_dir = vhost_conf_dir
        self.user = user
        self.group = group
        self.admin = admin
        self.ca_bundle = ca_bundle
        self.selinux = selinux
        self.restart_cmd = ['apachectl', 'graceful'] if not restart_cmd else restart_cmd
        self.generator = generator


class Platform:
    """Options of one operating system family, resolved once.

    Planners receive a Platform instance and never inspect the running
    system themselves. Subclasses only override :attr:`OS_DEFAULTS`.

    """

    OS_DEFAULTS = OsOptions()

    def __init__(self, **overrides: object) -> None:
        options = self.OS_DEFAULTS
        self.options = OsOptions(
            family=options.family,
            vhost_root=options.vhost_root,
            server_root=options.server_root,
            vhost_conf_dir=options.vhost_conf_dir,
            user=options.user,
            group=options.group,
            admin=options.admin,
            ca_bundle=options.ca_bundle,
            selinux=options.selinux,
            restart_cmd=list(options.restart_cmd),
            generator=options.generator,
        )
        for key, value in overrides.items():
            if value is None:
                continue
            if not hasattr(self.options, key):
                raise TypeError("Unknown platform option: {0}".format(key))
            setattr(self.options, key, value)

    @property
    def family(self) -> str:
        """Name of the OS family, eg. "debian" or "redhat"."""
        return self.options.family

    def seltype(self, label: str) -> Optional[str]:
        """Security label to set on a resource, None without SELinux.

        :param str label: SELinux type, eg. ``httpd_config_t``

        """
        return label if self.options.selinux else None

    def __repr__(self) -> str:
        return "{0}(family={1!r})".format(self.__class__.__name__, self.family)
