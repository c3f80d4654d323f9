from contextlib import asynccontextmanager
from typing import AsyncGenerator
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo.errors import ServerSelectionTimeoutError
from starlette.exceptions import HTTPException as StarletteHTTPException
from database import init_db, seed_builtin_roles
from schemas.response_models import error_response
from services.exceptions import PanelError, PermissionValidationError, InvalidArgument, TransportError
from tools.logger import logger
from auth.token_validation_router import router as validate_token_router
from api.roles_management import router as roles_router
from api.users_management import router as users_router
from api.meta_management import router as meta_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    try:
        init_db()
        logger.info("MongoDB connection established")
        seed_builtin_roles()
    except ServerSelectionTimeoutError:
        logger.exception("Could not connect to MongoDB on startup")
    yield


app = FastAPI(
    title="Dealer Panel API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/", include_in_schema=False)
def read_root():
    return {"message": "Dealer Panel API is running!"}


@app.exception_handler(ServerSelectionTimeoutError)
async def db_connection_error_handler(request: Request, exc: ServerSelectionTimeoutError):
    return JSONResponse(
        status_code=503,
        content=error_response("Database connection error. Check that the server is online."),
    )


@app.exception_handler(PanelError)
async def panel_error_handler(request: Request, exc: PanelError):
    content = error_response(exc.message)
    if isinstance(exc, PermissionValidationError):
        content["errors"] = exc.problems
    if isinstance(exc, InvalidArgument):
        logger.error(f"Invalid permission reference on {request.url.path}: {exc.message}")
    elif isinstance(exc, TransportError):
        logger.error(f"Storage failure on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc.detail),
        headers=getattr(exc, "headers", None),
    )


# Auth
app.include_router(validate_token_router)

# Roles
app.include_router(roles_router)

# Users
app.include_router(users_router)

# Meta
app.include_router(meta_router)

# uvicorn main:app --reload
