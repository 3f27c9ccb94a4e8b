"""vhostplan command line argument & config processing."""
import argparse
import logging
from typing import Any
from typing import List

import configargparse

import vhostplan
from vhostplan._internal import constants

logger = logging.getLogger(__name__)

VERBS = ("plan", "apply")

SHORT_USAGE = """
  vhostplan plan -d FILE     print the resources planned for the declared vhosts
  vhostplan apply -d FILE    converge this machine to the declared vhosts
"""


def flag_default(name: str) -> Any:
    """Default value for CLI flag."""
    return constants.CLI_DEFAULTS[name]


def prepare_and_parse_args(args: List[str]) -> argparse.Namespace:
    """Returns parsed command line arguments.

    Every option can also be set in a configuration file (``-c``) or
    through an environment variable, eg. ``VHOSTPLAN_OS_FAMILY``.

    :param list args: command line arguments with the program name removed

    :returns: parsed command line arguments
    :rtype: argparse.Namespace

    """
    parser = configargparse.ArgParser(
        prog="vhostplan",
        usage="%(prog)s [plan|apply] [options]" + SHORT_USAGE,
        args_for_setting_config_path=["-c", "--config"],
        default_config_files=flag_default("config_files"),
        config_arg_help_message="path to config file (default: {0})".format(
            " and ".join(flag_default("config_files"))),
        auto_env_var_prefix="VHOSTPLAN_")

    parser.add_argument(
        "verb", nargs="?", choices=VERBS, default="plan",
        help="action to perform (default: %(default)s)")
    parser.add_argument(
        "--version", action="version",
        version="%(prog)s {0}".format(vhostplan.__version__))
    parser.add_argument(
        "-d", "--declarations", action="append", metavar="FILE",
        help="declaration file, one section per virtual host; may be repeated")

    parser.add_argument(
        "-v", "--verbose", dest="verbose_count", action="count",
        default=flag_default("verbose_count"), help="This flag can be used "
        "multiple times to incrementally increase the verbosity of output, "
        "e.g. -vvv.")
    # This is for developers to set the level in the cli.ini, and overrides
    # the --verbose flag
    parser.add_argument(
        "--verbose-level", dest="verbose_level", type=int,
        default=None, help=argparse.SUPPRESS)
    parser.add_argument(
        "-q", "--quiet", dest="quiet", action="store_true",
        default=flag_default("quiet"),
        help="Silence all output except errors.")
    parser.add_argument(
        "--debug", action="store_true", default=flag_default("debug"),
        help="Show tracebacks in case of errors")
    parser.add_argument(
        "--logs-dir", default=flag_default("logs_dir"),
        help="Logs directory.")
    parser.add_argument(
        "--max-log-backups", type=int, default=flag_default("max_log_backups"),
        help="Specifies the maximum number of backup logs that should "
        "be kept. Setting this to 0 disables log rotation.")

    platform_group = parser.add_argument_group("platform")
    platform_group.add_argument(
        "--os-family", default=flag_default("os_family"),
        help="Operating system family, eg. debian or redhat. Detected "
        "from the running system by default.")
    platform_group.add_argument(
        "--root", default=flag_default("root"),
        help="Root of all virtual hosts (default: /var/www on the Debian "
        "family, /var/www/vhosts elsewhere)")
    platform_group.add_argument(
        "--selinux", dest="selinux", action="store_true", default=None,
        help="Label managed files with SELinux types")
    platform_group.add_argument(
        "--no-selinux", dest="selinux", action="store_false",
        help="Never label managed files, even on the RedHat family")
    platform_group.add_argument(
        "--generator", default=flag_default("generator"),
        help="Certificate generation script (default: {0})".format(
            constants.GENERATOR_SCRIPT))
    platform_group.add_argument(
        "--reload-cmd", default=flag_default("reload_cmd"),
        help="Command reloading Apache, eg. 'systemctl reload httpd'")

    apply_group = parser.add_argument_group("apply")
    apply_group.add_argument(
        "--chroot", default=flag_default("chroot"),
        help="Apply every planned path below this directory")
    apply_group.add_argument(
        "--dry-run", action="store_true", default=flag_default("dry_run"),
        help="Report the changes without applying them")
    apply_group.add_argument(
        "--templates-dir", default=None,
        help="Directory searched for templates before the bundled ones")

    namespace = parser.parse_args(args)
    logger.debug("Parsed arguments for verb %s", namespace.verb)
    return namespace
