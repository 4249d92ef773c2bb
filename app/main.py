from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.routers import (
    profiles, videos, coaches, featured_coaches, dashboard,
    admin, quota, matchmaking, analysis, community,
)
from app.database import engine, Base
from app.models import profile, video, coach, subscription
from app.models import analysis as analysis_models, dashboard as dashboard_models, community as community_models
import structlog

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Coaching Marketplace API",
    description="Backend API for sports coaching: video review, subscriptions, matchmaking and community",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(profiles.router)
app.include_router(videos.router)
app.include_router(coaches.router)
app.include_router(featured_coaches.router)
app.include_router(dashboard.router)
app.include_router(admin.router)
app.include_router(quota.router)
app.include_router(matchmaking.router)
app.include_router(analysis.router)
app.include_router(community.router)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"message": "Coaching Marketplace API is running"}


@app.get("/health")
async def health_check():
    """Detailed health check endpoint."""
    return {
        "status": "healthy",
        "service": "coaching-marketplace-api",
        "environment": settings.environment,
        "version": "1.0.0"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
