# auth_code_api/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

# --- App imports ---
from app.api.endpoints import admin, codes
from app.core.config import settings
from app.core.logging import setup_logging
from app.db.session import (
    create_engine, create_session_factory, check_connection, init_models, dispose_engine,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()

    # Errors here abort startup
    engine = create_engine()
    try:
        await check_connection(engine)
        if settings.CREATE_TABLES_ON_STARTUP:
            await init_models(engine)
    except Exception as e:
        logger.critical(f"FATAL: could not initialise the database: {e}")
        await dispose_engine(engine)
        raise
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    logger.info(f"Database connected ({engine.url.render_as_string(hide_password=True)})")

    yield

    logger.info("Shutting down: disposing database engine...")
    await dispose_engine(engine)
    logger.info("Database engine disposed.")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Issues, activates and verifies single-use device authorization codes",
    version="1.0.0",
    lifespan=lifespan,
)

# The admin page and the client apps are served from other origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies get the same structured outcome as any other failure."""
    logger.info(f"Invalid request to {request.url.path}: {exc.errors()}")
    if request.url.path.endswith("/verify"):
        return JSONResponse({"valid": False})
    return JSONResponse({"success": False, "message": "Invalid request parameters"})


# --- Routers ---
api_prefix = settings.API_PREFIX

app.include_router(
    codes.router,
    prefix=api_prefix,
    tags=["Authorization Codes"],
)
app.include_router(
    admin.router,
    prefix=f"{api_prefix}/admin",
    tags=["Admin"],
)


@app.get("/")
def read_root():
    return {"message": "Auth Code API is running!"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=settings.HOST, port=settings.PORT)
