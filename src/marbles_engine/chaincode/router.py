"""Chaincode invocation API router."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from marbles_engine.chaincode.schemas import InvokeRequest, InvokeResponse
from marbles_engine.chaincode.service import ChaincodeResponse
from marbles_engine.common.schemas import ErrorResponse
from marbles_engine.common.security import require_api_key

router = APIRouter()

_HTTP_STATUS = {
    "NOT_FOUND": 404,
    "ALREADY_EXISTS": 409,
    "INVALID_ARGUMENT": 400,
    "UNAUTHORIZED": 403,
    "INVALID_STATE": 409,
    "STORE_ERROR": 503,
    "UNKNOWN_FUNCTION": 404,
}


def _get_service():
    from marbles_engine.deps import get_invocation_service
    return get_invocation_service()


def _get_db():
    from marbles_engine.deps import get_db
    return get_db()


def _to_http(response: ChaincodeResponse):
    if response.ok:
        return InvokeResponse(
            status=response.status,
            tx_id=response.tx_id,
            payload=response.payload.decode(errors="replace"),
        )
    return JSONResponse(
        status_code=_HTTP_STATUS.get(response.code, 500),
        content=ErrorResponse(
            error=response.message, code=response.code, detail=response.tx_id,
        ).model_dump(),
    )


@router.post(
    "/invoke",
    response_model=InvokeResponse,
    responses={400: {"model": ErrorResponse}, 403: {"model": ErrorResponse},
               404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def invoke(body: InvokeRequest, _=Depends(require_api_key)):
    svc = _get_service()
    response = await svc.execute(_get_db(), body.function, body.args, tx_id=body.tx_id)
    return _to_http(response)


@router.post("/query", response_model=InvokeResponse)
async def query(body: InvokeRequest, _=Depends(require_api_key)):
    """Same as /invoke but limited to read-only functions."""
    svc = _get_service()
    response = await svc.execute(
        _get_db(), body.function, body.args, tx_id=body.tx_id, read_only=True,
    )
    return _to_http(response)
