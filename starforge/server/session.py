"""System session management for the HTTP API."""

import logging
import os
import uuid
from dataclasses import dataclass, field

from ..engine import GenerationOptions, SystemProcessor, generate_system
from ..models import RulePack, System, load_rulepack, load_starter_rulepack
from ..utils.serialization import system_to_dict

logger = logging.getLogger(__name__)

RULEPACK_ENV = "STARFORGE_RULEPACK"


def load_configured_rulepack() -> RulePack:
    """Rulepack named by $STARFORGE_RULEPACK, or the bundled starter pack."""
    path = os.environ.get(RULEPACK_ENV)
    if path:
        return load_rulepack(path)
    return load_starter_rulepack()


@dataclass
class SystemSession:
    """One system being generated and edited through the API.

    Edits replace ``system`` with the processed copy returned by the edit
    operation.
    """

    id: str
    system: System
    pack: RulePack
    processor: SystemProcessor = field(default_factory=SystemProcessor)

    def apply(self, edited: System) -> System:
        """Process an edited copy and make it the current system."""
        self.processor.process(edited, self.pack)
        self.system = edited
        return edited

    def get_state(self) -> dict:
        return system_to_dict(self.system)


class SystemSessionManager:
    """Manages all active system sessions.

    In-memory storage; sessions are lost when the server stops.
    """

    def __init__(self, pack: RulePack | None = None):
        self.sessions: dict[str, SystemSession] = {}
        self._pack = pack

    @property
    def pack(self) -> RulePack:
        if self._pack is None:
            self._pack = load_configured_rulepack()
        return self._pack

    def create_session(
        self,
        seed: str | None = None,
        star_type: str | None = None,
        empty: bool = False,
        toytown_factor: float = 0.0,
        planet_count: int | None = None,
    ) -> SystemSession:
        """Generate a system and open a session for it.

        Args:
            seed: Seed string (random when None)
            star_type: Optional star choice such as "Type K Binary"
            empty: Generate only the stars
            toytown_factor: Display compression hint
            planet_count: Force the number of planet slots

        Returns:
            Newly created SystemSession
        """
        session_id = f"system-{uuid.uuid4().hex[:8]}"
        if seed is None:
            seed = uuid.uuid4().hex[:12]

        system = generate_system(
            seed,
            self.pack,
            GenerationOptions(planet_count=planet_count),
            star_choice=star_type,
            empty=empty,
            toytown_factor=toytown_factor,
        )
        session = SystemSession(id=session_id, system=system, pack=self.pack)
        self.sessions[session_id] = session

        logger.info(f"Created session {session_id}: seed={seed}, nodes={len(system.nodes)}")
        return session

    def get(self, session_id: str) -> SystemSession | None:
        return self.sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        """Delete a session.

        Returns:
            True if deleted, False if not found
        """
        if session_id in self.sessions:
            del self.sessions[session_id]
            logger.info(f"Deleted session {session_id}")
            return True
        return False

    def cleanup_all(self):
        """Drop every session (called on shutdown)."""
        logger.info(f"Cleaning up {len(self.sessions)} system sessions")
        self.sessions.clear()
