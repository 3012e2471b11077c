"""
FastAPI application for SlideAvatar.

Serves the avatar video endpoints and, with local storage, the rendered slide
images under ``/files`` so the video service can fetch them.
"""

from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from slideavatar import __version__
from slideavatar.configs.config import config
from slideavatar.configs.logging_config import setup_logging
from slideavatar.routes.avatar_video_routes import router as avatar_video_router

app = FastAPI(title="SlideAvatar API", version=__version__)


@app.on_event("startup")
async def startup_event() -> None:
    setup_logging(config.log_level, log_file=config.log_file, component="api")

    # Uploaded slide images must be reachable at LOCAL_STORAGE_BASE_URL
    if config.storage_provider == "local":
        config.ensure_directories_exist()
        app.mount("/files", StaticFiles(directory=config.output_dir), name="files")


app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(avatar_video_router)


@app.get("/")
async def root() -> dict[str, str]:
    return {"message": "SlideAvatar Backend API"}


@app.get("/health")
async def health() -> dict[str, Any]:
    return {"status": "ok", "version": __version__}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.server_host, port=config.server_port)
