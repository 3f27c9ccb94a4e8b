""" Platform selection based on the OS fingerprint """
import logging
from typing import Dict
from typing import Optional
from typing import Type

from vhostplan import errors
from vhostplan import util
from vhostplan._internal import override_centos
from vhostplan._internal import override_debian
from vhostplan._internal import platform

logger = logging.getLogger(__name__)

OVERRIDE_CLASSES: Dict[str, Type[platform.Platform]] = {
    "debian": override_debian.DebianPlatform,
    "ubuntu": override_debian.DebianPlatform,
    "linuxmint": override_debian.DebianPlatform,
    "raspbian": override_debian.DebianPlatform,
    "redhat": override_centos.CentOSPlatform,
    "rhel": override_centos.CentOSPlatform,
    "red hat enterprise linux server": override_centos.CentOSPlatform,
    "centos": override_centos.CentOSPlatform,
    "centos linux": override_centos.CentOSPlatform,
    "fedora": override_centos.CentOSPlatform,
    "rocky": override_centos.CentOSPlatform,
    "almalinux": override_centos.CentOSPlatform,
    "cloudlinux": override_centos.CentOSPlatform,
    "amazon": override_centos.CentOSPlatform,
    "ol": override_centos.CentOSPlatform,
    "oracle": override_centos.CentOSPlatform,
    "scientific": override_centos.CentOSPlatform,
    "generic": platform.Platform,
    "arch": platform.Platform,
    "gentoo": platform.Platform,
    "suse": platform.Platform,
    "opensuse": platform.Platform,
}


def get_platform_class(os_family: Optional[str] = None) -> Type[platform.Platform]:
    """Get correct Platform class.

    :param str os_family: Explicit OS family or distribution name. When
        None, the running system is fingerprinted with `distro`.

    :raises .errors.NotSupportedError: if an explicit family is unknown

    """
    if os_family is not None:
        try:
            return OVERRIDE_CLASSES[os_family.strip().lower()]
        except KeyError:
            raise errors.NotSupportedError(
                "Unsupported OS family: {0}. Supported values are: {1}".format(
                    os_family, ", ".join(sorted(OVERRIDE_CLASSES))))

    os_name, _ = util.get_os_info()
    override_class = OVERRIDE_CLASSES.get(os_name.lower())
    if override_class is None:
        for os_like in util.get_systemd_os_like():
            override_class = OVERRIDE_CLASSES.get(os_like)
            if override_class:
                break
    if override_class is None:
        logger.warning("Could not determine the OS family of %s, "
                       "using generic defaults", os_name)
        override_class = platform.Platform
    logger.debug("Selected %s for %s", override_class.__name__, os_name)
    return override_class


def get_platform(os_family: Optional[str] = None, **overrides: object) -> platform.Platform:
    """Resolve the Platform once, at the boundary of the program.

    :param str os_family: See :func:`get_platform_class`
    :param overrides: `.OsOptions` attributes to override

    """
    return get_platform_class(os_family)(**overrides)
