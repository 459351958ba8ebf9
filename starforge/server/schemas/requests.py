"""Pydantic request schemas for API endpoints."""

from pydantic import BaseModel, Field


class CreateSystemRequest(BaseModel):
    """Request to generate a new system."""

    seed: str | None = Field(default=None, description="Seed string; random when omitted")
    starType: str | None = Field(  # noqa: N815
        default=None, description="Star choice such as 'Type G', 'Type M Binary' or 'Random'"
    )
    empty: bool = Field(default=False, description="Generate only the stars")
    toytownFactor: float = Field(  # noqa: N815
        default=0.0, ge=0, description="Display compression hint stored on the system"
    )
    planetCount: int | None = Field(  # noqa: N815
        default=None, ge=0, description="Force the number of planet slots"
    )


class AddBodyRequest(BaseModel):
    """Request to add a planet or moon of a given archetype."""

    hostId: str = Field(description="Star, barycenter or planet to orbit")  # noqa: N815
    planetType: str = Field(  # noqa: N815
        default="planet/terrestrial", description="Archetype template, e.g. 'planet/gas-giant'"
    )


class AddHabitableRequest(BaseModel):
    """Request to add a habitable planet around a star."""

    hostId: str = Field(description="Star to orbit")  # noqa: N815
    tier: str = Field(default="earth-like", description="'earth-like', 'human' or 'alien'")


class RenameRequest(BaseModel):
    """Request to rename a node."""

    name: str = Field(description="New display name")
