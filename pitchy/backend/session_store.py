import threading
import uuid
from typing import Callable, Dict, Optional, Protocol

from .session import SessionController


ControllerFactory = Callable[[str], SessionController]


class SessionStore(Protocol):
    storage_name: str

    def create_session(self) -> SessionController:
        pass

    def get_session(self, session_id: str) -> Optional[SessionController]:
        pass

    def delete_session(self, session_id: str) -> bool:
        pass


class InMemorySessionStore:
    storage_name = "memory"

    def __init__(self, factory: ControllerFactory = SessionController) -> None:
        self._sessions: Dict[str, SessionController] = {}
        self._factory = factory
        self._lock = threading.Lock()

    def create_session(self) -> SessionController:
        session_id = str(uuid.uuid4())
        controller = self._factory(session_id)
        with self._lock:
            self._sessions[session_id] = controller
        return controller

    def get_session(self, session_id: str) -> Optional[SessionController]:
        with self._lock:
            return self._sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


def build_session_store() -> SessionStore:
    return InMemorySessionStore()
