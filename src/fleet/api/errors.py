"""Fleet-specific HTTP mappings layered on Protean's standard handlers.

`protean.integrations.fastapi.register_exception_handlers` covers the
generic cases (validation 400, not found 404). A lost reservation race also
reports the refused step, and an unreachable adapter answers 503.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from fleet.exceptions import AdapterUnavailable, StaleMatch


def register_fleet_exception_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)

    # Starlette resolves handlers along the MRO, so this wins over ValidationError.
    @app.exception_handler(StaleMatch)
    async def stale_match_handler(request: Request, exc: StaleMatch):
        return JSONResponse(status_code=400, content={"error": exc.messages, "step": exc.step})

    @app.exception_handler(AdapterUnavailable)
    async def adapter_unavailable_handler(request: Request, exc: AdapterUnavailable):
        return JSONResponse(status_code=503, content={"error": exc.message, "step": exc.step})
