"""Compilation of declarations into a single plan."""
import logging
from typing import Any
from typing import Dict
from typing import Iterable
from typing import List
from typing import Mapping
from typing import Optional

from vhostplan._internal.graph import ResourceGraph
from vhostplan._internal.instance import InstancePlanner
from vhostplan._internal.obj import VhostSpec
from vhostplan._internal.paths import resolve_paths
from vhostplan._internal.planner import ResourcePlanner
from vhostplan._internal.platform import Platform
from vhostplan._internal.reload import ReloadCoordinator
from vhostplan._internal.resources import ResourceNode
from vhostplan._internal.resources import TriggerEdge
from vhostplan._internal.userdir import UserdirPlanner
from vhostplan._internal.validation import ParameterValidator

logger = logging.getLogger(__name__)


class Plan:
    """Resource graph of one convergence pass and its reload coordinator.

    :ivar graph: planned resources
    :type graph: :class:`~vhostplan._internal.graph.ResourceGraph`
    :ivar coordinator: reload sink shared by every planned vhost
    :type coordinator: :class:`~vhostplan._internal.reload.ReloadCoordinator`

    """

    def __init__(self) -> None:
        self.graph = ResourceGraph()
        self.coordinator = ReloadCoordinator()
        self.vhosts: List[str] = []

    @property
    def triggers(self) -> List[TriggerEdge]:
        """Registered trigger edges."""
        return self.coordinator.edges

    def order(self) -> List[ResourceNode]:
        """Resources in application order."""
        return self.graph.order()

    def to_dict(self) -> Dict[str, Any]:
        """Serializable representation of the plan."""
        return {
            "vhosts": list(self.vhosts),
            "resources": [node.to_dict() for node in self.order()],
            "triggers": [{"source": edge.source, "target": edge.target}
                         for edge in self.triggers],
            "preconditions": self.graph.missing(),
        }


def add_vhost(spec: VhostSpec, platform: Platform, plan: Optional[Plan] = None) -> Plan:
    """Plan a validated declaration.

    :param spec: validated declaration
    :param platform: OS family options
    :param plan: plan to extend, a new one by default

    :raises .errors.PlanningInvariantViolation: if the resulting graph is
        not a consistent DAG

    """
    if plan is None:
        plan = Plan()
    paths = resolve_paths(spec.root, spec.name, platform, spec.document_root, spec.cgi_bin)
    plan.graph.extend(InstancePlanner(platform).plan(spec, paths))
    plan.graph.extend(ResourcePlanner(platform, plan.coordinator).plan(spec, paths))
    if spec.userdir:
        plan.graph.extend(UserdirPlanner(platform, plan.coordinator).plan(
            spec.name, spec.ensure, spec.root))
    plan.vhosts.append(spec.name)
    plan.order()
    logger.info("Planned %s (%s)", spec.name, spec.ensure.value)
    return plan


def compile_vhost(params: Mapping[str, Any], platform: Platform,
                  plan: Optional[Plan] = None) -> Plan:
    """Validate and plan one declaration.

    :raises .errors.ValidationError: if a parameter is malformed
    :raises .errors.ConfigurationConflictError: on conflicting content

    """
    spec = ParameterValidator(platform).validate(params)
    return add_vhost(spec, platform, plan)


def compile_declarations(declarations: Iterable[Mapping[str, Any]],
                         platform: Platform) -> Plan:
    """Plan several declarations sharing one reload coordinator.

    Every declaration is validated before anything is planned.

    """
    validator = ParameterValidator(platform)
    specs = [validator.validate(params) for params in declarations]
    plan = Plan()
    for spec in specs:
        add_vhost(spec, platform, plan)
    return plan
