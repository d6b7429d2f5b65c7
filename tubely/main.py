from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from tubely.config import get_settings
from tubely.errors import IngestError
from tubely.logging_setup import setup_logging
from tubely.routers import auth, thumbnails, videos
from tubely.services.staging import staging_dir
from tubely.services.storage import local_media_dir
from tubely.services.thumbnail_upload import assets_dir

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level, settings.log_file)
    assets_dir(settings).mkdir(parents=True, exist_ok=True)
    staging_dir(settings)
    if settings.storage_backend == "local":
        local_media_dir(settings).mkdir(parents=True, exist_ok=True)
    yield


app = FastAPI(title="Tubely API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(IngestError)
async def ingest_error_handler(request: Request, exc: IngestError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "kind": exc.kind})


app.include_router(auth.router)
app.include_router(videos.router)
app.include_router(thumbnails.router)

app.mount("/assets", StaticFiles(directory=assets_dir(settings), check_dir=False), name="assets")
if settings.storage_backend == "local":
    app.mount("/media", StaticFiles(directory=local_media_dir(settings), check_dir=False), name="media")


@app.get("/")
def root():
    return {"message": "Tubely API", "docs": "/docs"}
