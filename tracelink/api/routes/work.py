"""Simulated workload endpoint."""

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from tracelink.api.dependencies import OrchestratorDep

router = APIRouter()


@router.get("/work", response_class=PlainTextResponse)
async def work(request: Request, orchestrator: OrchestratorDep) -> PlainTextResponse:
    """Run one simulated request.

    Responds 200 "Work completed" or, for a simulated failure,
    500 "Internal Server Error". Both outcomes are logged and recorded.
    """
    result = await orchestrator.handle(method=request.method)
    return PlainTextResponse(
        result.body,
        status_code=result.status_code,
        headers={"X-Request-ID": result.context.request_id},
    )
