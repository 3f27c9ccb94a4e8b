"""vhostplan main entry point."""
import json
import logging
import sys
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Union

import vhostplan
from vhostplan import configuration
from vhostplan import util
from vhostplan._internal import cli
from vhostplan._internal import constants
from vhostplan._internal import declarations
from vhostplan._internal import entrypoint
from vhostplan._internal import log
from vhostplan._internal.compiler import compile_declarations
from vhostplan._internal.compiler import Plan
from vhostplan._internal.engine import Engine
from vhostplan._internal.platform import Platform
from vhostplan._internal.render import TemplateRenderer
from vhostplan._internal.resources import NodeKind

logger = logging.getLogger(__name__)


def make_platform(config: configuration.NamespaceConfig) -> Platform:
    """Resolve the platform, applying the overrides given by the user."""
    platform = entrypoint.get_platform(
        config.os_family,
        vhost_root=config.root,
        selinux=config.selinux,
        generator=config.generator,
        restart_cmd=config.reload_cmd,
    )
    logger.debug("Using %r", platform)
    return platform


def make_plan(config: configuration.NamespaceConfig, platform: Platform) -> Plan:
    """Load the declarations of config and plan them."""
    return compile_declarations(declarations.load_all(config.declarations), platform)


def plan(config: configuration.NamespaceConfig) -> Optional[str]:
    """Print the plan of the declared virtual hosts as JSON.

    :param config: Configuration object
    :type config: configuration.NamespaceConfig

    :returns: `None`
    :rtype: None

    """
    vhost_plan = make_plan(config, make_platform(config))
    json.dump(vhost_plan.to_dict(), sys.stdout, indent=2)
    sys.stdout.write("\n")
    return None


def apply(config: configuration.NamespaceConfig) -> Optional[str]:
    """Converge the machine to the declared virtual hosts.

    :param config: Configuration object
    :type config: configuration.NamespaceConfig

    :returns: `None`
    :rtype: None

    """
    platform = make_platform(config)
    vhost_plan = make_plan(config, platform)

    generator = platform.options.generator or constants.GENERATOR_SCRIPT
    needs_generator = any(node.kind is NodeKind.RUN_IF_MISSING
                          for node in vhost_plan.graph)
    if needs_generator and not util.exe_exists(generator):
        logger.warning("Certificate generator %s is not executable, generating "
                       "missing certificates will fail", generator)

    engine = Engine(platform, renderer=TemplateRenderer(config.templates_dir),
                    chroot=config.chroot, dry_run=config.dry_run)
    report = engine.apply(vhost_plan)

    verb = "would change" if report.dry_run else "changed"
    print("{0} resource(s) {1}".format(len(report.changed), verb))
    for key in report.changed:
        print("  " + key)
    if report.reloaded:
        print("Apache {0}".format("would be reloaded" if report.dry_run else "reloaded"))
    return None


VERBS: Dict[str, Callable[[configuration.NamespaceConfig], Optional[str]]] = {
    "plan": plan,
    "apply": apply,
}


def main(cli_args: Optional[List[str]] = None) -> Optional[Union[str, int]]:
    """Run vhostplan.

    :param cli_args: command line to vhostplan, defaults to ``sys.argv[1:]``
    :type cli_args: `list` of `str`

    :returns: value for `sys.exit` about the exit status of vhostplan
    :rtype: `str` or `int` or `None`

    """
    if cli_args is None:
        cli_args = sys.argv[1:]

    log.pre_arg_parse_setup()

    logger.debug("vhostplan version: %s", vhostplan.__version__)
    logger.debug("Arguments: %r", cli_args)

    # note: arg parser internally handles --help (and exits afterwards)
    args = cli.prepare_and_parse_args(cli_args)
    config = configuration.NamespaceConfig(args)

    log.post_arg_parse_setup(config)

    return VERBS[config.verb](config)
