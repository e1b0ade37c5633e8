import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from comments import router as comments_router
from content import router as content_router
from content.schemas import ContentKind
from core import db, log, settings
from core.errors import AppError
from reactions import router as reactions_router

logger = logging.getLogger(__name__)

CONTENT_PREFIXES = {
    ContentKind.POST: "/api/posts",
    ContentKind.MAGAZINE: "/api/magazines",
    ContentKind.RECIPE: "/api/recipes",
    ContentKind.REVIEW: "/api/reviews",
}


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize logging and the DB pool once per process.
    log.setup_logging()
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(lifespan=lifespan)

# Allow the frontend dev server to call this API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.detail, extra={"path": request.url.path})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Unhandled exception on %s", request.url.path, exc_info=exc, extra={"path": request.url.path})
    return JSONResponse(status_code=500, content={"detail": "Internal server error."})


for kind, prefix in CONTENT_PREFIXES.items():
    app.include_router(content_router.build_router(kind), prefix=prefix, tags=[kind.value])
    app.include_router(reactions_router.build_router(kind), prefix=prefix, tags=[kind.value])
app.include_router(reactions_router.router, prefix="/api", tags=["reactions"])
app.include_router(comments_router.router, prefix="/api", tags=["comments"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "bread-back api"}
