"""Health endpoint response bodies."""

from typing import Literal

from pydantic import BaseModel


class LivenessResponse(BaseModel):
    """Body of /health/live."""

    status: Literal["alive"] = "alive"


class ReadinessResponse(BaseModel):
    """Body of /health/ready.

    ``checks`` maps each precondition of ``POST /api/name`` to whether it
    currently holds; ``status`` is ``ready`` only when all of them do.
    """

    status: Literal["ready", "not_ready"]
    version: str
    checks: dict[str, bool]
