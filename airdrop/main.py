# airdrop/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select
from starlette.exceptions import HTTPException as StarletteHTTPException

# Core application imports
from .core import *
from .admin import *
from .api import api_router
from .services import TaskCatalog


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_db_and_tables()
    if settings.seed_default_tasks:
        with Session(engine) as session:
            if not session.exec(select(Task)).first():
                print("No tasks found, creating default tasks...")
                TaskCatalog(session).seed(DEFAULT_TASKS)
                print("Default tasks created.")
    yield


app = FastAPI(title="Tap Airdrop", lifespan=lifespan)

app.include_router(api_router, prefix="/api", tags=["Airdrop"])
app.include_router(router, prefix="/api/admin", tags=["Admin"])


def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


@app.exception_handler(AirdropError)
async def airdrop_error_handler(request: Request, exc: AirdropError):
    return error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return error_response(400, "Invalid request data")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, exc.detail, getattr(exc, "headers", None))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    print(f"--- Database error on {request.method} {request.url.path}: {exc}")
    return error_response(500, "Internal server error")


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    print(f"--- Unhandled error on {request.method} {request.url.path}: {exc!r}")
    return error_response(500, "Internal server error")


@app.get("/health")
def health():
    return {"status": "ok"}
