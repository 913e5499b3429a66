from __future__ import absolute_import

from . import service
from ..backend.gridengine import GridEngineBackend
from ..backend.local import LocalBackend
from ..backend.lsf import LsfBackend

BACKENDS = (LsfBackend, GridEngineBackend, LocalBackend)


def registerServices(testing: bool = False) -> None:
    """
    Register the scheduler backends under "backend.<name>".

    Args:
        testing: If True, clear services for testing
    """
    if testing:
        service().clear(thisIsATest=testing)

    for backendClass in BACKENDS:
        service().register("backend." + backendClass.name, backendClass)
