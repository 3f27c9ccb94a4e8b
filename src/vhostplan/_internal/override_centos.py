""" Distribution specific override class for the RedHat family (RHEL/CentOS/Fedora) """
from vhostplan._internal import platform
from vhostplan._internal.platform import OsOptions


class CentOSPlatform(platform.Platform):
    """RedHat family specific Platform override class"""

    OS_DEFAULTS = OsOptions(
        family="redhat",
        vhost_root="/var/www/vhosts",
        server_root="/etc/httpd",
        vhost_conf_dir="/etc/httpd/conf.d",
        user="apache",
        group="apache",
        ca_bundle="/etc/pki/tls/certs/ca-bundle.crt",
        selinux=True,
        restart_cmd=['apachectl', 'graceful'],
    )
