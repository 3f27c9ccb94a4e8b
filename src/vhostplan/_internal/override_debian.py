""" Distribution specific override class for Debian family (Ubuntu/Debian) """
from vhostplan._internal import platform
from vhostplan._internal.platform import OsOptions


class DebianPlatform(platform.Platform):
    """Debian specific Platform override class"""

    OS_DEFAULTS = OsOptions(
        family="debian",
        vhost_root="/var/www",
        server_root="/etc/apache2",
        vhost_conf_dir="/etc/apache2/sites-enabled",
        user="www-data",
        group="www-data",
        ca_bundle="/etc/ssl/certs/ca-certificates.crt",
        selinux=False,
        restart_cmd=['apache2ctl', 'graceful'],
    )
