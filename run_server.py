#!/usr/bin/env python3
"""
Salon Reviews Backend Startup Script
This script starts the FastAPI server.
"""

import logging
import os

import uvicorn

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

if __name__ == "__main__":
    port = int(os.getenv("PORT", "8000"))

    logger.info("Starting Salon Reviews Backend...")
    logger.info("Available endpoints:")
    logger.info("  - Health Check: GET /health")
    logger.info("  - Review Stats: GET /api/comments/stats")
    logger.info("  - Featured / Recent: GET /api/comments/featured, /api/comments/recent")
    logger.info("  - Filtered Listings: GET /api/comments/by-rating, /verified, /search")
    logger.info("  - Reviews: GET/POST/PUT/DELETE /api/comments")
    logger.info("  - Moderation: PATCH /api/comments/{id}/moderate, GET /api/comments/admin/pending")
    logger.info(f"  - API Docs: http://localhost:{port}/docs")

    uvicorn.run(
        "salon.main:app",
        host="0.0.0.0",
        port=port,
        reload=os.getenv("RELOAD", "false").lower() == "true",
        log_level="info"
    )
