# backend/main.py
from contextlib import asynccontextmanager
import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import init_db
from utils.errors import CanteenError

# Routers
from routes.auth import router as auth_router
from routes.orders import router as orders_router
from routes.food import router as food_router
from routes.admin import router as admin_router
from routes.logs import router as logs_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="CanteenX API", version="1.0.0", lifespan=lifespan)

origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
if settings.FRONTEND_URL and settings.FRONTEND_URL not in origins:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Every domain error becomes {"detail": ..., "code": ...} with its fixed status code
@app.exception_handler(CanteenError)
async def canteen_error_handler(request: Request, exc: CanteenError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code},
        headers=headers,
    )


# Malformed bodies answer 400 like every other validation failure
@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"Invalid value for {location}: {first.get('msg')}" if location else "Invalid request"
    return JSONResponse(status_code=400, content={"detail": message, "code": "ValidationError"})


app.include_router(auth_router)
app.include_router(orders_router)
app.include_router(food_router)
app.include_router(admin_router)
app.include_router(logs_router)


@app.get("/health")
def health():
    return {"status": "ok", "service": "canteenx-api"}


@app.get("/")
def read_root():
    return {"message": "CanteenX API is running"}
