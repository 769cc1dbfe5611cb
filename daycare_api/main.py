from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from daycare_api.config import get_settings
from daycare_api.routers import messages, notifications, health

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    from daycare_api.ws import init_redis, close_redis
    init_redis()
    yield
    # Shutdown
    await close_redis()


app = FastAPI(
    title="Daycare Messaging API",
    description="Internal mail between parents, teachers and administrators",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(messages.router, prefix="/api/messages", tags=["Messages"])
app.include_router(health.router, prefix="/api/health", tags=["Health"])
app.include_router(notifications.router, tags=["Notifications"])


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
