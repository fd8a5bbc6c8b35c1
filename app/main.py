from __future__ import annotations

import logging
import os
from typing import Any, Dict

from fastapi import APIRouter, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from akinator.core.schemas import StepRequest
from akinator.orchestrator import run_step
from config.settings import get_settings


settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="[%(asctime)s] %(levelname)s - %(message)s",
)
logger = logging.getLogger("akinator")

app = FastAPI(title="Akinator Backend", version="2.0.0")

# CORS: allow local frontend during development
if settings.app_env.lower() in {"dev", "development", "local"}:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

api = APIRouter(prefix="/api")


@api.post("/step")
def step(req: StepRequest) -> Any:
    settings = get_settings()
    if not settings.fireworks_api_key:
        return JSONResponse(status_code=500, content={"error": "Server missing FIREWORKS_API_KEY"})

    try:
        logger.info(
            "Incoming step: domain=%s history=%s turns=%s force_final=%s hint=%s",
            req.domain,
            len(req.history),
            req.turns,
            req.force_final,
            bool(req.hint),
        )
        action = run_step(req, settings)
        logger.info("Model responded with %s", action.type)
        return action.model_dump()
    except Exception as e:
        logger.exception("Step failed: %s", e)
        return JSONResponse(status_code=500, content={"error": str(e) or "Server error"})


API_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


@api.api_route("", methods=API_METHODS)
@api.api_route("/{path:path}", methods=API_METHODS)
def api_not_found(path: str = "") -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": "API route not found"})


app.include_router(api)


@app.exception_handler(RequestValidationError)
async def validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=422, content={"error": errors or "Invalid request"})


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


# Static last so /api/* never falls through
if os.path.isdir(settings.public_dir):
    app.mount("/", StaticFiles(directory=settings.public_dir, html=True), name="public")


def run() -> None:
    import uvicorn

    logger.info("Akinator running: http://localhost:%s", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
