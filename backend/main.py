from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from studio.logger import get_logger
from studio.routes import router
from studio.workspace import workspace

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Artifact Studio starting on port {config.PORT}")
    yield
    # cancel pending checkpoints and release live previews
    workspace.close()
    logger.info("Artifact Studio stopped")


def create_app() -> FastAPI:
    app = FastAPI(title="Artifact Studio", lifespan=lifespan)

    # CORS configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
