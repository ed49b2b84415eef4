"""
Household Overlap API Server

Public-facing REST API for detecting conflicts between planned moves.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import get_settings
from .routers import health, overlaps

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# ============================================
# Application Lifespan
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown"""
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    yield

    logger.info(f"Shutting down {settings.app_name}")


# ============================================
# FastAPI Application
# ============================================

app = FastAPI(
    title=settings.app_name,
    description="""
    Detect conflicts between planned residential moves.

    ## Overview

    Households (one planned move each: date, addresses, members, size) are
    compared against each other. The analysis reports move dates that are
    too close, address hand-offs, members registered twice, busy upcoming
    weeks and weeks with many people moving at once.

    ## Endpoints

    - **POST /api/v1/overlaps/analyze** - Analyze posted households
    - **GET /api/v1/overlaps** - Analyze households stored in the database
    - **POST /api/v1/overlaps/resolve** - Propose an automatic fix for an overlap
    - **POST /api/v1/overlaps/timeline** - Moves and overlaps on a timeline
    - **GET /api/v1/health** - Health check

    ## Usage Example

    ```python
    import httpx

    response = httpx.post(
        'http://localhost:8000/api/v1/overlaps/analyze',
        json={
            'households': [
                {'id': 'A', 'name': 'Familie Müller', 'move_date': '2025-06-10'},
                {'id': 'B', 'name': 'WG Schmidt', 'move_date': '2025-06-11'}
            ]
        }
    )
    print(response.json()['summary'])
    ```
    """,
    version=settings.app_version,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(overlaps.router)


# ============================================
# Root Endpoints
# ============================================

@app.get("/health", tags=["Health"])
async def root_health():
    """Liveness probe for load balancers"""
    return {"status": "ok"}


@app.get("/", tags=["Health"])
async def root():
    """API information"""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "health": "/api/v1/health",
        "endpoints": {
            "analyze": "POST /api/v1/overlaps/analyze",
            "stored": "GET /api/v1/overlaps",
            "resolve": "POST /api/v1/overlaps/resolve",
            "timeline": "POST /api/v1/overlaps/timeline"
        }
    }


# ============================================
# Run with: uvicorn api.main:app --port 8000
# ============================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
