import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from newsdesk.config import settings
from newsdesk.database import engine
from newsdesk.errors import install_exception_handlers
from newsdesk.middleware import RequestMiddleware
from newsdesk.routers import admin, auth, categories, news

VERSION = "1.0.0"

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Newsdesk API %s starting (env=%s)", VERSION, settings.APP_ENV)
    yield
    await engine.dispose()
    logger.info("Newsdesk API stopped")

app = FastAPI(
    title="Newsdesk API",
    description="News articles with categories, JWT authentication and admin roles",
    version=VERSION,
    lifespan=lifespan,
)

# Middleware
app.add_middleware(RequestMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_exception_handlers(app)

# Routers
app.include_router(auth.router)
app.include_router(news.router)
app.include_router(categories.router)
app.include_router(admin.router)

@app.get("/health")
async def health():
    return {"status": "healthy", "version": VERSION}
