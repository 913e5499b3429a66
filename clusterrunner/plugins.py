"""
This module implements the environment-setup plugin contract.

Plugin modules need to be registered using the clusterrunner entrypoint. Modules
that are registered as such can implement any of the functions:

    def priority():
        return {"mountCommands": 100}

    def mountCommands(spec):
        # Shell commands run by the pre-exec script on the execution host,
        # e.g. to mount the automount directories the job reads from.
        return ["ls /net/shared > /dev/null"]

All of these functions are optional. If the plugin cannot provide a sensible value
for the given job then it should raise NotImplementedError so that the next
plugin at a possibly lower priority will get called instead.
"""
from importlib import metadata
import logging
from operator import attrgetter
from typing import List

from .domain import JobSpec

logger = logging.getLogger(__name__)
PRIO_LOWEST = 1 << 31
PRIO_HIGHEST = 0
ENTRY_POINT_GROUP = "clusterrunner"


def get_plugins(group: str) -> List[metadata.EntryPoint]:
    eps = metadata.entry_points()
    if not hasattr(eps, 'get'):
        # in 3.12+, EntryPoints.get() should be replaced by select().
        return list(eps.select(group=group))
    return list(eps.get(group, []))


class Plugins(object):
    def __init__(self):
        plugins = {plug.load() for plug in get_plugins(ENTRY_POINT_GROUP)}
        self.plugins = list(sorted(plugins, key=attrgetter("__name__")))
        logger.debug("all plugins: %r", [p.__name__ for p in self.plugins])
        self._prio = {}
        for plugin in self.plugins:
            if hasattr(plugin, "priority"):
                self._prio[plugin.__name__] = plugin.priority()

    def _pluginCalls(self, func, *args, **kwargs):
        prio = {}
        for plugin in self.plugins:
            if hasattr(plugin, func):
                pluginPrioMap = self._prio.get(plugin.__name__, {})
                pval = pluginPrioMap.get(func, pluginPrioMap.get("", PRIO_LOWEST))
                prio.setdefault(pval, []).append(plugin)

        if not prio:
            return

        for prio, plugins in sorted(prio.items()):
            for plugin in plugins:
                name = plugin.__name__
                try:
                    result = getattr(plugin, func)(*args, **kwargs)
                    logger.debug("%r: yield plugin %s => %r", prio, name, result)
                    yield result
                except NotImplementedError:
                    logger.debug("%r: plugin %s NotImplementedError", prio, name)
                    continue

    def mountCommands(self, spec: JobSpec) -> List[str]:
        commands = []
        for ret in self._pluginCalls("mountCommands", spec):
            commands.extend(ret or [])
        return commands
