import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.config import AUTO_CREATE_TABLES, CORS_ORIGINS
from app.core.database import init_db
from app.core.errors import DomainError, DependencyFailure, ValidationFailed
from app.routes import (
    auth, parties, trust, merges, alliances, supports, escalations, questions
)

logger = logging.getLogger("openpolitics.main")
logger.setLevel(logging.INFO)


app = FastAPI(title="Open Politics API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0].get("msg", "Invalid input") if errors else "Invalid input"
    body = ValidationFailed(first).to_dict()
    body["errors"] = [{"loc": list(e.get("loc", [])), "msg": e.get("msg")} for e in errors]
    return JSONResponse(status_code=422, content=body)


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error(f"Store error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    err = DependencyFailure()
    return JSONResponse(status_code=err.status_code, content=err.to_dict())


# Routers
app.include_router(auth.router)
app.include_router(parties.router)
app.include_router(trust.router)
app.include_router(merges.router)
app.include_router(supports.router)
app.include_router(escalations.router)
app.include_router(questions.router)
app.include_router(alliances.router)


@app.on_event("startup")
def on_startup():
    if AUTO_CREATE_TABLES:
        logger.info("Creating tables (AUTO_CREATE_TABLES)")
        init_db()
