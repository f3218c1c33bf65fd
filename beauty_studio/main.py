from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from beauty_studio.api import auth, bookings
from beauty_studio.core.config import settings
from beauty_studio.core.errors import register_exception_handlers
from beauty_studio.core.logger import logger, setup_logging

setup_logging()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info(f"🚀 Starting {settings.PROJECT_NAME} ({settings.ENVIRONMENT})")
    yield
    # Shutdown
    logger.info("🛑 Shutting down backend")

app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include routers
app.include_router(bookings.router, prefix=settings.API_PREFIX, tags=["Bookings"])
app.include_router(auth.router, prefix=settings.API_PREFIX, tags=["Auth"])

@app.get("/health")
async def health_check():
    return {"status": "ok", "environment": settings.ENVIRONMENT, "timestamp": datetime.now().isoformat()}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("beauty_studio.main:app", host="0.0.0.0", port=settings.PORT, reload=not settings.is_production)
