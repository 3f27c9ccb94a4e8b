"""File system layout of a virtual host."""
import posixpath
from typing import NamedTuple
from typing import Optional
from typing import Union

from vhostplan import errors
from vhostplan._internal import constants
from vhostplan._internal.platform import Platform


class PathSet(NamedTuple):
    """Every path derived from a root directory and a virtual host name."""
    root: str
    instance_dir: str
    conf_dir: str
    document_root: str
    cgi_bin: Optional[str]
    private_dir: str
    logs_dir: str
    readme: str
    config_file: str
    ssl_dir: str
    ssl_config: str
    cert: str
    key: str
    csr: str
    cacert: str
    cacrl: str
    certchain: str
    userdir_conf: str
    default_ca_bundle: Optional[str]


def vhost_root(platform: Platform, root: Optional[str] = None) -> str:
    """Root directory of all virtual hosts.

    ``/var/www`` on the Debian family, ``/var/www/vhosts`` elsewhere,
    unless explicitly overridden.

    :raises .errors.ValidationError: if root is not absolute

    """
    if root is None:
        root = platform.options.vhost_root
    if not isinstance(root, str) or not posixpath.isabs(root):
        raise errors.ValidationError(
            "Virtual host root must be an absolute path, got {0!r}".format(root))
    return posixpath.normpath(root)


def resolve_paths(root: Optional[str], name: str, platform: Platform,
                  docroot: Optional[str] = None,
                  cgibin: Union[bool, str] = True) -> PathSet:
    """Derive all paths of virtual host name.

    :param str root: root of all virtual hosts, None for the platform default
    :param str name: virtual host name
    :param platform: OS family options
    :param str docroot: explicit DocumentRoot
    :param cgibin: True for the default cgi-bin, False for none, or a path

    :rtype: `PathSet`

    :raises .errors.ValidationError: if root is relative; resolution never
        proceeds with a relative base

    """
    base = posixpath.join(vhost_root(platform, root), name)
    ssl_dir = posixpath.join(base, constants.SSL_DIR)
    conf_dir = posixpath.join(base, constants.CONF_DIR)

    if cgibin is True:
        cgi_bin: Optional[str] = posixpath.join(base, constants.CGI_BIN_DIR) + "/"
    elif cgibin is False:
        cgi_bin = None
    else:
        cgi_bin = cgibin

    return PathSet(
        root=posixpath.dirname(base),
        instance_dir=base,
        conf_dir=conf_dir,
        document_root=docroot if docroot is not None else posixpath.join(
            base, constants.HTDOCS_DIR),
        cgi_bin=cgi_bin,
        private_dir=posixpath.join(base, constants.PRIVATE_DIR),
        logs_dir=posixpath.join(base, constants.LOGS_DIR),
        readme=posixpath.join(base, constants.README_FILE),
        config_file=posixpath.join(platform.options.vhost_conf_dir, name + ".conf"),
        ssl_dir=ssl_dir,
        ssl_config=posixpath.join(ssl_dir, constants.SSL_CONFIG_FILE),
        cert=posixpath.join(ssl_dir, name + ".crt"),
        key=posixpath.join(ssl_dir, name + ".key"),
        csr=posixpath.join(ssl_dir, name + ".csr"),
        cacert=posixpath.join(ssl_dir, constants.CACERT_FILE),
        cacrl=posixpath.join(ssl_dir, constants.CACRL_FILE),
        certchain=posixpath.join(ssl_dir, constants.CERTCHAIN_FILE),
        userdir_conf=posixpath.join(conf_dir, constants.USERDIR_CONF),
        default_ca_bundle=platform.options.ca_bundle,
    )
