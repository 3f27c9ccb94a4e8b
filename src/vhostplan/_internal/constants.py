"""vhostplan constants."""
import logging
from typing import Dict
from typing import List
from typing import Tuple


CLI_DEFAULTS: Dict[str, object] = dict(
    config_files=[
        "/etc/vhostplan/cli.ini",
        "~/.config/vhostplan/cli.ini",
    ],
    verbose_count=0,
    quiet=False,
    debug=False,
    os_family=None,
    root=None,
    chroot=None,
    dry_run=False,
    selinux=None,
    logs_dir="/var/log/vhostplan",
    max_log_backups=100,
    generator=None,
    reload_cmd=None,
)
"""Defaults for CLI flags and `.NamespaceConfig` attributes."""

QUIET_LOGGING_LEVEL = logging.ERROR
"""Logging level to use in quiet mode."""

DEFAULT_LOGGING_LEVEL = logging.WARNING
"""Default logging level to use when not in quiet mode."""

ENSURE_VALUES: Tuple[str, ...] = ("present", "absent")
"""Accepted values for the ``ensure`` parameter."""

VERIFY_CLIENT_VALUES: Tuple[str, ...] = (
    "none", "optional", "require", "optional_no_ca")
"""Accepted values for SSLVerifyClient."""

DEFAULT_PORTS: List[str] = ["*:80"]
DEFAULT_SSL_PORTS: List[str] = ["*:443"]

DEFAULT_MODE = 0o2570
"""Default permission bits of the htdocs, cgi-bin and private directories."""

DEFAULT_SSL_DAYS = 3650
"""Default validity period of a locally generated certificate (10 years)."""

DEFAULT_ORGANIZATION = "undefined organisation"
"""Default certificate subject organization, kept verbatim for compatibility."""

GENERATOR_SCRIPT = "/usr/local/sbin/generate-ssl-cert.sh"
"""External certificate generation script, called as
``generate-ssl-cert.sh <name> <ssleay.cnf> <output dir> <days>``."""

RELOAD_TARGET = "service:apache:reload"
"""Key of the single conceptual reload action."""

# Names of the files and directories of a virtual host instance,
# relative to {root}/{name}.
HTDOCS_DIR = "htdocs"
CGI_BIN_DIR = "cgi-bin"
CONF_DIR = "conf"
PRIVATE_DIR = "private"
LOGS_DIR = "logs"
SSL_DIR = "ssl"
README_FILE = "README"
USERDIR_CONF = "userdir.conf"

SSL_CONFIG_FILE = "ssleay.cnf"
CACERT_FILE = "cacert.crt"
CACRL_FILE = "cacert.crl"
CERTCHAIN_FILE = "certchain.crt"

# SELinux types used on platforms with mandatory access control.
SELTYPE_CONFIG = "httpd_config_t"
SELTYPE_CONTENT = "httpd_sys_content_t"
SELTYPE_SCRIPT = "httpd_sys_script_exec_t"
SELTYPE_LOG = "httpd_log_t"
SELTYPE_CERT = "cert_t"

# Template identifiers, see vhostplan._internal.render
TEMPLATE_VHOST = "vhost.conf"
TEMPLATE_VHOST_REDIRECT = "vhost-redirect.conf"
TEMPLATE_VHOST_SSL = "vhost-ssl.conf"
TEMPLATE_README = "README"
TEMPLATE_SSLEAY = "ssleay.cnf"
TEMPLATE_USERDIR = "userdir.conf"
