"""CEP lookup API endpoint."""
from typing import Optional
from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse
from cepfinder.api.deps import get_dispatcher, require_cep
from cepfinder.config import get_settings
from cepfinder.core.exceptions import MissingParameterError
from cepfinder.lookup.dispatcher import RaceDispatcher
from cepfinder.lookup.models import ResultEnvelope

settings = get_settings()

router = APIRouter()


def timeout_message(timeout: float) -> str:
    """Fixed body returned when no source answers in time."""
    return f"timeout: no upstream responded within {timeout:g}s"


@router.get(
    settings.LOOKUP_PATH,
    response_model=ResultEnvelope,
    responses={
        status.HTTP_400_BAD_REQUEST: {"description": "Missing cep parameter"},
        status.HTTP_504_GATEWAY_TIMEOUT: {"description": "No upstream answered in time"},
    },
)
async def lookup_cep(
    cep: Optional[str] = None,
    dispatcher: RaceDispatcher = Depends(get_dispatcher),
):
    """
    Resolve a CEP by racing every upstream source.

    - Returns the first envelope delivered, success or failure
    - 400 when cep is missing
    - 504 when the shared deadline elapses first
    """
    try:
        cep = require_cep(cep)
    except MissingParameterError as e:
        return PlainTextResponse(str(e), status_code=status.HTTP_400_BAD_REQUEST)

    outcome = await dispatcher.dispatch(cep)

    if outcome.deadline_exceeded:
        return PlainTextResponse(
            timeout_message(dispatcher.timeout),
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
        )

    return outcome.envelope
