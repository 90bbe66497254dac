from chat.relay import ChatRelay

from .broadcast import BroadcastRouter
from .membership import MembershipManager
from .playback import PlaybackCoordinator
from .session_store import SessionStore
from .sweeper import IdleRoomSweeper


class SessionCoordinator:
    """Wires the per-process session components together."""

    def __init__(self, store=None, router=None):
        self.store = store or SessionStore()
        self.router = router or BroadcastRouter()
        self.membership = MembershipManager(self.store, self.router)
        self.playback = PlaybackCoordinator(self.store, self.router, self.membership)
        self.chat = ChatRelay(self.store, self.router, self.membership)
        self.sweeper = IdleRoomSweeper(self.store, self.membership)


_coordinator = None


def get_coordinator() -> SessionCoordinator:
    global _coordinator
    if _coordinator is None:
        _coordinator = SessionCoordinator()
    return _coordinator


def reset_coordinator():
    """Drop the process-wide coordinator; used between tests."""
    global _coordinator
    if _coordinator is not None:
        _coordinator.sweeper.stop()
    _coordinator = None
