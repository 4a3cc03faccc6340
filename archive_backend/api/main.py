# archive_backend/api/main.py

# This is the main FastAPI application entry point.
# It sets up the FastAPI app instance, adds global middleware,
# defines startup/shutdown events, and includes routers from feature modules.
# Relies on modules in db/, shared/, config/ and features/.

import traceback

import uvicorn
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

# --- Import modules from their locations ---
from ..config.settings import settings
from ..db import mongo_client as database
from ..features.admin import routes as admin_routes
from ..features.archive import routes as archive_routes
from ..features.contribute import routes as contribute_routes
from ..features.pages import routes as page_routes
from ..features.user.account import routes as account_routes
from ..features.user.auth import routes as auth_routes
from ..features.user.auth.gate import SessionGateMiddleware
from ..shared.errors import AppError, format_validation_errors


# --- FastAPI App Instance ---
app = FastAPI(title="Chilahati Archive")

# --- Middleware ---
# Added last runs first: CORS wraps the page gate.
app.add_middleware(SessionGateMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Application Startup Event ---
@app.on_event("startup")
async def startup_event():
    """Connect to MongoDB and make sure indexes exist."""
    print("Application startup initiated.")
    try:
        await database.connect_to_mongo(settings)
        print("Database connection established and indexes are in place.")
    except Exception as e:
        # Handlers connect lazily, so a later request can still recover
        print(f"FATAL ERROR: Database connection failed on startup: {e}")
        traceback.print_exc()
    print("Application startup complete.")


# --- Application Shutdown Event ---
@app.on_event("shutdown")
async def shutdown_event():
    print("Application shutdown initiated.")
    await database.close_mongo_connection()


# --- Include Feature Routers ---
app.include_router(auth_routes.router)
app.include_router(account_routes.router)
app.include_router(admin_routes.router)
app.include_router(archive_routes.router)
app.include_router(contribute_routes.router)
app.include_router(page_routes.router)


@app.get("/api/health")
async def health_check():
    return {"message": "Chilahati Archive backend is running."}


# --- Global Exception Handlers ---
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    code = exc.code if isinstance(exc, AppError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "code": code},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    message = format_validation_errors(exc.errors())
    print(f"Validation error on {request.method} {request.url.path}: {message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": message, "code": "VALIDATION"},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    print(f"Unhandled exception occurred on {request.method} {request.url.path}: {exc}")
    print(traceback.format_exc())
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "An internal server error occurred.", "code": "INTERNAL"},
    )


# --- Main Execution Block ---
if __name__ == "__main__":
    print("Starting FastAPI server with uvicorn...")
    uvicorn.run(
        "archive_backend.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
