"""Coalescing of reload notifications."""
import logging
from typing import Callable
from typing import Iterable
from typing import List
from typing import Set

from vhostplan._internal import constants
from vhostplan._internal.resources import TriggerEdge

logger = logging.getLogger(__name__)


class ReloadCoordinator:
    """Shared sink of reload triggers for one convergence pass.

    Planners only register their intent; the engine applying the plan
    asks the coordinator to fire, which happens at most once per pass no
    matter how many registered resources changed.

    """

    def __init__(self, target: str = constants.RELOAD_TARGET) -> None:
        self.target = target
        self._edges: List[TriggerEdge] = []
        self._sources: Set[str] = set()
        self.fired = False

    def register(self, source_key: str) -> TriggerEdge:
        """Record that a change of source_key requires a reload."""
        edge = TriggerEdge(source_key, self.target)
        if source_key not in self._sources:
            self._sources.add(source_key)
            self._edges.append(edge)
        return edge

    def begin_pass(self) -> None:
        """Forget the reload of a previous pass over the same plan."""
        self.fired = False

    @property
    def edges(self) -> List[TriggerEdge]:
        """Registered trigger edges, without duplicates."""
        return list(self._edges)

    def triggered_by(self, changed_keys: Iterable[str]) -> List[str]:
        """Registered sources among changed_keys."""
        return sorted(self._sources.intersection(changed_keys))

    def should_reload(self, changed_keys: Iterable[str]) -> bool:
        """Whether changing changed_keys requires a reload not yet performed."""
        return not self.fired and bool(self.triggered_by(changed_keys))

    def fire(self, changed_keys: Iterable[str], reloader: Callable[[], object]) -> bool:
        """Call reloader once if a registered source changed.

        :param changed_keys: keys of the nodes that modified the system
        :param callable reloader: performs the actual reload

        :returns: whether reloader was called
        :rtype: bool

        """
        if self.fired:
            logger.debug("Reload already performed during this pass")
            return False
        triggers = self.triggered_by(changed_keys)
        if not triggers:
            logger.debug("No change requires a reload")
            return False
        logger.info("Reloading Apache, triggered by %s", ", ".join(triggers))
        reloader()
        self.fired = True
        return True
