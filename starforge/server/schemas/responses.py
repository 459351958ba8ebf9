"""Pydantic response schemas for API endpoints."""

from pydantic import BaseModel, Field


class SystemResponse(BaseModel):
    """Response containing a session's current system."""

    sessionId: str  # noqa: N815
    seed: str
    name: str
    nodeCount: int  # noqa: N815
    system: dict


class NodeStateResponse(BaseModel):
    """Orbital state of one node at a given time."""

    nodeId: str  # noqa: N815
    hostId: str | None  # noqa: N815
    t: float = Field(description="Time in seconds")
    x: float = Field(description="Position in AU, host frame")
    y: float
    vx: float = Field(description="Velocity in AU/s, host frame")
    vy: float


class PlanetTypesResponse(BaseModel):
    """Archetypes a host accepts."""

    hostId: str  # noqa: N815
    planetTypes: list[str]  # noqa: N815

