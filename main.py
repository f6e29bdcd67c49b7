from contextlib import asynccontextmanager
from datetime import datetime, UTC

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from sportsmatch.cache import Cache, create_cache
from sportsmatch.config import CORS_ORIGIN, DATABASE_URL, IS_DEFAULT_JWT_SECRET, SEED_SAMPLE_DATA
from sportsmatch.dependencies import get_cache, get_query
from sportsmatch.errors import AppError
from sportsmatch.logging_setup import setup_logging
from sportsmatch.prediction import PredictionGenerator
from sportsmatch.store import QueryEngine, create_store


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: store, cache (one connection attempt) and prediction backend
    setup_logging()
    if IS_DEFAULT_JWT_SECRET:
        logger.warning("Using default JWT_SECRET - NOT SECURE FOR PRODUCTION! Set JWT_SECRET.")

    store = create_store(DATABASE_URL, seed=SEED_SAMPLE_DATA)
    cache = create_cache()
    await cache.connect()
    predictor = PredictionGenerator()
    if not predictor.configured:
        logger.info("OPENAI_API_KEY not set, predictions use the fallback heuristic")

    app.state.store = store
    app.state.query = QueryEngine(store)
    app.state.cache = cache
    app.state.predictor = predictor
    yield
    # Shutdown
    await cache.close()
    store.close()
    logger.info("Shutdown complete")


# Initialize FastAPI app
app = FastAPI(
    title="SportsMatch API",
    description="Player stats, team data and match predictions",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[CORS_ORIGIN],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


# Include routers
from sportsmatch.routers import auth, teams, players, matches

app.include_router(auth.router)
app.include_router(teams.router)
app.include_router(players.router)
app.include_router(matches.router)


@app.get("/health")
async def health_check(
    query: QueryEngine = Depends(get_query),
    cache: Cache = Depends(get_cache),
):
    """Health check endpoint."""
    in_memory = query.store.kind == "memory"
    return {
        "success": True,
        "message": "Server is running",
        "timestamp": datetime.now(UTC).isoformat(),
        "database": {
            "type": "mock (in-memory)" if in_memory else "sql",
            "status": "connected",
            "note": "Using in-memory storage - data will be lost on restart" if in_memory else None,
        },
        "cache": {"status": "connected" if cache.available else "disabled"},
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
