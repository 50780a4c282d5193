# main.py
"""
FastAPI entry point for the Nigerian meal suggestion service.
Startup health check against Supabase, request-id middleware,
and liveness/readiness endpoints.
"""
import asyncio
import logging
import os
import uuid
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.suggestions import router as suggestions_router
from app.config.settings import settings
from app.config.supabase import supabase_client

logger = logging.getLogger("uvicorn.error")


async def _run_sync_in_executor(fn, *args, timeout: Optional[float] = None):
    """
    Run a blocking function in the default threadpool with a timeout.
    Returns the function's result or raises TimeoutError.
    """
    loop = asyncio.get_running_loop()
    return await asyncio.wait_for(
        loop.run_in_executor(None, fn, *args),
        timeout=timeout if timeout is not None else settings.health_check_timeout,
    )


async def _check_store() -> bool:
    try:
        return bool(await _run_sync_in_executor(supabase_client.health_check))
    except asyncio.TimeoutError:
        logger.warning("Supabase health_check timed out after %.1fs", settings.health_check_timeout)
    except Exception as exc:
        logger.exception("Unexpected error calling supabase_client.health_check: %s", exc)
    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting meal suggestion service...")

    app.state.supabase_healthy = await _check_store()
    logger.info(
        "Supabase health: %s (database suggestions %s, AI suggestions %s)",
        app.state.supabase_healthy,
        "on" if settings.enable_database_suggestions else "off",
        "on" if settings.enable_ai_suggestions else "off",
    )

    if not app.state.supabase_healthy and settings.fail_on_db_startup:
        logger.error("FAIL_ON_DB_STARTUP enabled and Supabase unhealthy. Aborting startup.")
        raise RuntimeError("Supabase unhealthy on startup")

    try:
        yield
    finally:
        logger.info("Shutting down meal suggestion service...")


app = FastAPI(
    title="Nigerian Meal Suggestions",
    description="Curated and AI-generated Nigerian meal suggestions with per-criteria pagination",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_id_and_log(request: Request, call_next):
    request_id = request.headers.get("X-Request-Id") or str(uuid.uuid4())
    request.state.request_id = request_id
    logger.info("→ Incoming request %s %s id=%s", request.method, request.url.path, request_id)
    try:
        response: Response = await call_next(request)
    except Exception as exc:
        logger.exception("Handler error for request id=%s: %s", request_id, exc)
        return JSONResponse(
            {
                "ok": False,
                "status": 500,
                "message": "Internal server error",
                "diagnostics": {"error": str(exc), "request_id": request_id},
            },
            status_code=500,
        )
    logger.info("← Completed request id=%s status=%s", request_id, getattr(response, "status_code", None))
    response.headers["X-Request-Id"] = request_id
    return response


app.include_router(suggestions_router, prefix="/suggestions", tags=["suggestions"])


@app.get("/")
async def root() -> Dict[str, str]:
    return {"message": "Meal suggestion service is running!", "status": "healthy"}


@app.get("/health")
async def health_check():
    """Quick Supabase check; reports degraded with 503 instead of failing."""
    db_ok = await _check_store()
    return JSONResponse(
        {
            "status": "healthy" if db_ok else "degraded",
            "service": "meal-suggestions",
            "database": "connected" if db_ok else "disconnected",
            "diagnostics": supabase_client.diagnostics(),
        },
        status_code=200 if db_ok else 503,
    )


@app.get("/ready")
async def readiness_check():
    """Uses the startup result when available, otherwise one bounded check."""
    supabase_state: Optional[bool] = getattr(app.state, "supabase_healthy", None)
    if supabase_state is None:
        try:
            supabase_state = await _run_sync_in_executor(supabase_client.health_check, timeout=2.0)
        except Exception:
            supabase_state = False

    if supabase_state:
        return JSONResponse({"ready": True, "database": "connected"}, status_code=200)
    return JSONResponse({"ready": False, "database": "disconnected"}, status_code=503)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", 5000)), reload=True)
