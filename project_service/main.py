# ---------------------------------------------------------
# project_service/main.py
# Project Service - project records for the project-management backend
#
# Run: uvicorn project_service.main:app --reload (from repo root)
#
# - FastAPI + SQLite (dev) / PostgreSQL (prod)
# - /api/v1/project/* : create, read, update, complete, soft-delete
# - Task counts, completion and deletion are delegated to the task service
# ---------------------------------------------------------

from __future__ import annotations

import sqlite3
from typing import Dict

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from project_service.config import CORS_ORIGINS, IS_DEV, IS_PROD
from project_service.db import init_db
from project_service.errors import ProjectServiceError
from project_service.routes_projects import router as project_router
from project_service.schemas import ExceptionWrapper, FieldViolation

app = FastAPI(title="Project Service", version="0.1")

# CORS configuration from config module
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS if IS_PROD else ["*"],  # Restrict origins in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

init_db()


def _render(wrapper: ExceptionWrapper) -> JSONResponse:
    return JSONResponse(
        status_code=wrapper.http_status,
        content=jsonable_encoder(wrapper, exclude_none=True),
    )


# ---------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------
@app.exception_handler(ProjectServiceError)
def handle_project_error(request: Request, exc: ProjectServiceError) -> JSONResponse:
    if IS_DEV:
        print(f"[PROJECTS] {type(exc).__name__} on {request.method} {request.url.path}: {exc.message}")
    return _render(ExceptionWrapper(message=exc.message, http_status=exc.status_code))


@app.exception_handler(RequestValidationError)
def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    violations = [
        FieldViolation(
            field=".".join(str(part) for part in error.get("loc", ())[1:]) or "body",
            rejected_value=error.get("input"),
            reason=error.get("msg", "invalid"),
        )
        for error in exc.errors()
    ]
    return _render(ExceptionWrapper(
        message="Invalid Input(s)",
        http_status=400,
        error_count=len(violations),
        validation_errors=violations,
    ))


@app.exception_handler(sqlite3.Error)
@app.exception_handler(SQLAlchemyError)
def handle_db_error(request: Request, exc: Exception) -> JSONResponse:
    # Log error but don't expose internal details
    print(f"[DB] Error on {request.method} {request.url.path}: {type(exc).__name__}: {exc}")
    return _render(ExceptionWrapper(message="Database error", http_status=500))


# ---------------------------------------------------------
# Routes
# ---------------------------------------------------------
@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


app.include_router(project_router)
