"""FastAPI server for starforge.

Provides an HTTP API to generate star systems, edit them and sample orbital
state. Sessions live in memory; every edit re-runs the system processor.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from ..engine import (
    EditError,
    add_habitable_planet,
    add_planetary_body,
    delete_node,
    rename_node,
    valid_planet_types,
)
from ..physics.orbits import propagate_state
from .schemas.requests import AddBodyRequest, AddHabitableRequest, CreateSystemRequest, RenameRequest
from .schemas.responses import NodeStateResponse, PlanetTypesResponse, SystemResponse
from .session import SystemSession, SystemSessionManager

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Global session manager
sessions = SystemSessionManager()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown."""
    logger.info("starforge server starting...")
    yield
    logger.info("starforge server shutting down...")
    sessions.cleanup_all()


app = FastAPI(
    title="starforge API",
    description="Procedural star-system generation and editing",
    version="0.3.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_session(session_id: str) -> SystemSession:
    session = sessions.get(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="System not found")
    return session


def _require_node(session: SystemSession, node_id: str):
    node = session.system.get(node_id)
    if node is None:
        raise HTTPException(status_code=404, detail=f"Node {node_id} not found")
    return node


def _system_response(session: SystemSession) -> SystemResponse:
    return SystemResponse(
        sessionId=session.id,
        seed=session.system.seed,
        name=session.system.name,
        nodeCount=len(session.system.nodes),
        system=session.get_state(),
    )


def _apply_edit(session: SystemSession, operation, *args) -> SystemResponse:
    """Run an edit operation against the session and process the result."""
    try:
        edited = operation(session.system, *args)
        session.apply(edited)
    except EditError as e:
        logger.info(f"Session {session.id}: edit rejected: {e.reason}")
        raise HTTPException(status_code=400, detail=e.reason)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Session {session.id}: edit failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to edit system: {str(e)}")
    return _system_response(session)


@app.get("/api")
async def api_root():
    """API root endpoint - server health check."""
    return {
        "service": "starforge",
        "status": "operational",
        "activeSystems": len(sessions.sessions),
    }


@app.post("/api/systems", response_model=SystemResponse)
async def create_system(request: CreateSystemRequest):
    """Generate a new system.

    Example:
        POST /api/systems
        {"seed": "alpha-42", "starType": "Type K", "empty": false}
    """
    try:
        session = sessions.create_session(
            seed=request.seed,
            star_type=request.starType,
            empty=request.empty,
            toytown_factor=request.toytownFactor,
            planet_count=request.planetCount,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Failed to create system: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Failed to create system: {str(e)}")
    return _system_response(session)


@app.get("/api/systems/{session_id}", response_model=SystemResponse)
async def get_system(session_id: str):
    """Current processed system of a session."""
    return _system_response(_require_session(session_id))


@app.delete("/api/systems/{session_id}")
async def delete_system(session_id: str):
    """Delete a session."""
    if sessions.delete(session_id):
        return {"message": f"System {session_id} deleted"}
    raise HTTPException(status_code=404, detail="System not found")


@app.post("/api/systems/{session_id}/bodies", response_model=SystemResponse)
async def add_body(session_id: str, request: AddBodyRequest):
    """Add a planet or moon of a given archetype outside the host's last orbit."""
    session = _require_session(session_id)
    _require_node(session, request.hostId)
    return _apply_edit(session, add_planetary_body, request.hostId, request.planetType, session.pack)


@app.post("/api/systems/{session_id}/habitable", response_model=SystemResponse)
async def add_habitable(session_id: str, request: AddHabitableRequest):
    """Add a habitable planet in a free habitable-zone orbit."""
    session = _require_session(session_id)
    _require_node(session, request.hostId)
    return _apply_edit(session, add_habitable_planet, request.hostId, request.tier, session.pack)


@app.delete("/api/systems/{session_id}/nodes/{node_id}", response_model=SystemResponse)
async def remove_node(session_id: str, node_id: str):
    """Delete a node and its subtree."""
    session = _require_session(session_id)
    _require_node(session, node_id)
    return _apply_edit(session, delete_node, node_id)


@app.patch("/api/systems/{session_id}/nodes/{node_id}", response_model=SystemResponse)
async def rename(session_id: str, node_id: str, request: RenameRequest):
    """Rename a node; automatically named descendants follow."""
    session = _require_session(session_id)
    _require_node(session, node_id)
    return _apply_edit(session, rename_node, node_id, request.name)


@app.get("/api/systems/{session_id}/nodes/{node_id}/planet-types", response_model=PlanetTypesResponse)
async def planet_types(session_id: str, node_id: str):
    """Archetypes that may be added around a node."""
    session = _require_session(session_id)
    node = _require_node(session, node_id)
    return PlanetTypesResponse(hostId=node_id, planetTypes=valid_planet_types(node, session.pack))


@app.get("/api/systems/{session_id}/nodes/{node_id}/state", response_model=NodeStateResponse)
async def node_state(session_id: str, node_id: str, t: float = 0.0):
    """Position and velocity of a node relative to its host at time ``t`` (seconds).

    Example:
        GET /api/systems/system-1a2b3c4d/nodes/alpha-42-body-1/state?t=86400
    """
    session = _require_session(session_id)
    node = _require_node(session, node_id)
    state = propagate_state(node.orbit, t)
    return NodeStateResponse(
        nodeId=node_id,
        hostId=node.orbit.host_id if node.orbit else None,
        t=t,
        x=state.x,
        y=state.y,
        vx=state.vx,
        vy=state.vy,
    )
