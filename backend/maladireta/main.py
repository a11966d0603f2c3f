"""
Mala Direta Backend API
FastAPI application that converts direct-mail address files into PCL print jobs.
"""

import logging

from fastapi import FastAPI, HTTPException

from maladireta.config import get_settings
from maladireta.routers import batches
from maladireta.services.storage import SupabaseObjectStorage

# Configure logging to output to console
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Mala Direta API",
    description="Direct-mail batch processing: address files to PCL envelope jobs",
    version="0.1.0",
)

app.include_router(batches.router, prefix="/api/lotes", tags=["lotes"])


@app.get("/")
async def root():
    return {"message": "Mala Direta API", "version": "0.1.0"}


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/health/storage")
def health_storage():
    """
    Test Supabase Storage access.

    Verifies the configured bucket is visible to the service client.
    Returns 503 if storage is unreachable or the bucket is missing.
    """
    bucket = get_settings().storage_bucket

    try:
        found = SupabaseObjectStorage().bucket_exists(bucket)
    except Exception as exc:
        logger.error(f"Storage health check failed: {exc}")
        raise HTTPException(
            status_code=503,
            detail=f"Storage check failed: {str(exc)}",
        )

    if not found:
        raise HTTPException(
            status_code=503,
            detail=f"Storage bucket '{bucket}' not found",
        )

    return {"status": "ok", "storage": "reachable", "bucket": bucket}
