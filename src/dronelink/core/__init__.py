from dronelink.core.actor import ActorCell, CellContext
from dronelink.core.behavior import Behavior, Directive
from dronelink.core.context import ActorContext, System
from dronelink.core.mailbox import Mailbox
from dronelink.core.ref import ActorId, ActorRef, LocalActorRef
from dronelink.core.system import ActorSystem

__all__ = [
    "ActorCell",
    "ActorContext",
    "ActorId",
    "ActorRef",
    "ActorSystem",
    "Behavior",
    "CellContext",
    "Directive",
    "LocalActorRef",
    "Mailbox",
    "System",
]
