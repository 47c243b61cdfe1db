import logging
import threading

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from classsync.core.errors import ConflictError, NotFoundError, ValidationError
from classsync.core.logging_middleware import LoggingMiddleware
from classsync.db.init_db import init_db
from classsync.routers.gradebook import router as gradebook_router
from classsync.routers.students import router as students_router
from classsync.routers.submissions import router as submissions_router
from classsync.services.cache import GradebookCache

logging.basicConfig(level=logging.INFO)

app = FastAPI(title="ClassSync Gradebook")

# Shared across requests; never persisted
app.state.gradebook_cache = GradebookCache()
app.state.gradebook_write_lock = threading.Lock()

# Middleware
app.add_middleware(LoggingMiddleware)


# Domain errors -> HTTP
@app.exception_handler(NotFoundError)
def not_found_handler(_request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.message})


@app.exception_handler(ValidationError)
def validation_handler(_request: Request, exc: ValidationError):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": exc.message})


@app.exception_handler(ConflictError)
def conflict_handler(_request: Request, exc: ConflictError):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": exc.message})


# Health check
@app.get("/health")
def health():
    return {"status": "ok"}


# Startup event
@app.on_event("startup")
def on_startup():
    init_db()


# Include routers
app.include_router(gradebook_router, prefix="/gradebook", tags=["gradebook"])
app.include_router(students_router, prefix="/students", tags=["students"])
app.include_router(submissions_router, tags=["submissions"])
