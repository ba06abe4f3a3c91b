"""Plant naming endpoint handler."""

import logging

from fastapi import APIRouter, Request
from pydantic import ValidationError

from plantnamer.api.deps import ClientIdDep, NameGeneratorDep, RequestIdDep
from plantnamer.models.name import NameRequest, NameResult
from plantnamer.utils.errors import ErrorResponse, InvalidInput

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_name_request(request: Request) -> NameRequest:
    """Parse and validate the JSON body.

    Done by hand rather than as a body parameter so that bad input answers
    400 "Invalid description" after the rate limit check, instead of
    FastAPI's 422 before it.

    Raises:
        InvalidInput: If the body is not JSON or the description is invalid.
    """
    try:
        body = await request.json()
    except ValueError as e:
        raise InvalidInput(f"Body is not valid JSON: {e}") from e

    try:
        return NameRequest.model_validate(body)
    except ValidationError as e:
        raise InvalidInput(f"Description failed validation: {e.error_count()} error(s)") from e


@router.post(
    "/api/name",
    response_model=NameResult,
    responses={
        400: {"model": ErrorResponse},
        429: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": NameRequest.model_json_schema()}},
        }
    },
)
async def generate_name(
    request: Request,
    client_id: ClientIdDep,
    generator: NameGeneratorDep,
    request_id: RequestIdDep,
) -> NameResult:
    """Generate one punny name for a houseplant.

    The canned fallback name is a normal 200 answer. Credential, rate-limit
    and validation failures are raised as PlantNamerError subclasses and
    rendered by the app's exception handler.
    """
    name_request = await read_name_request(request)

    logger.debug(
        f"Naming plant for client {client_id}: {name_request.description!r}",
        extra={"request_id": request_id},
    )

    return await generator.generate(name_request.description)
