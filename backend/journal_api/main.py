import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from journal_api.core.config import settings
from journal_api.core.logging import setup_logging
from journal_api.api import ws as ws_router
from journal_api.api.v1 import auth as auth_router
from journal_api.api.v1 import contact as contact_router
from journal_api.api.v1 import entries as entries_router
from journal_api.api.v1 import friendships as friendships_router
from journal_api.api.v1 import users as users_router
from journal_api.db.base import Base
from journal_api.db.session import engine
from journal_api.middleware.logging import RequestLoggingMiddleware


logger = logging.getLogger(__name__)

app = FastAPI(title=settings.project_name)


app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.backend_cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def on_startup() -> None:
    setup_logging()
    Base.metadata.create_all(bind=engine)


@app.exception_handler(IntegrityError)
async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning("integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": "Conflicting record"})


@app.get("/health", tags=["health"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(ws_router.router)
app.include_router(auth_router.router, prefix="/api/v1")
app.include_router(users_router.router, prefix="/api/v1")
app.include_router(entries_router.router, prefix="/api/v1")
app.include_router(friendships_router.router, prefix="/api/v1")
app.include_router(contact_router.router, prefix="/api/v1")
