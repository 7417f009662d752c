import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from zappi.agent.launcher import launch_agents, make_agent_factory
from zappi.agent.registry import AgentRegistry
from zappi.core.config import COOLDOWN_SECONDS, ESTABLISHMENTS_PATH, PORT, PROJECT_ROOT
from zappi.core.database import SessionLocal, engine
from zappi.core.logging_setup import configure_logging
from zappi.core.startup_checks import prepare_schema, validate_database_environment
from zappi.routers.simulator import router as simulator_router
from zappi.routers.status import router as status_router
from zappi.routers.webhook import router as webhook_router

configure_logging()

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"
ALEMBIC_CONFIG_PATH = Path(os.getenv("ALEMBIC_CONFIG", str(PROJECT_ROOT / "alembic.ini")))


def _startup_tasks() -> None:
    try:
        validate_database_environment()
        prepare_schema(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
    except Exception:
        logger.exception("%s ERROR startup failed", STARTUP_PREFIX)
        raise


@asynccontextmanager
async def lifespan(app: FastAPI):
    _startup_tasks()
    registry = AgentRegistry(
        make_agent_factory(
            establishments_path=ESTABLISHMENTS_PATH,
            session_factory=SessionLocal,
            cooldown_seconds=COOLDOWN_SECONDS,
        )
    )
    app.state.registry = registry
    app.state.establishments_path = ESTABLISHMENTS_PATH
    launch_agents(registry, ESTABLISHMENTS_PATH)
    try:
        yield
    finally:
        await registry.stop_all()


app = FastAPI(title="ZappiBot", lifespan=lifespan)

app.include_router(webhook_router)
app.include_router(simulator_router)
app.include_router(status_router)


@app.get("/health")
def health():
    return {"status": "healthy"}


def run() -> None:
    uvicorn.run("zappi.main:app", host="0.0.0.0", port=PORT)


if __name__ == "__main__":
    run()
