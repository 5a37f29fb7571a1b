from typing import Annotated
import logging

from fastapi import APIRouter, HTTPException, Query

from tvfeed.schemas import (
    ProgrammeListResponse,
    ProgrammeResponse,
    ThumbnailListResponse,
    ThumbnailResponse,
)
from tvfeed.services import feed_cache, fetch_and_process


logger = logging.getLogger(__name__)

main_router = APIRouter()

@main_router.get("/")
async def root() -> dict:
    """Root endpoint with service information"""
    return {
        "service": "Programme Feed Service",
        "version": "0.1.0",
        "endpoints": {
            "fetch": "/fetch - Manually trigger feed fetch",
            "programmes": "/programmes - Get cached programmes (query param: channel_id)",
            "thumbnails": "/thumbnails - Get cached thumbnails",
            "health": "/health - Health check"
        }
    }


@main_router.get("/health")
async def health_check() -> dict:
    """Health check endpoint"""
    updated_at = feed_cache.updated_at
    last_fetch_at = feed_cache.last_fetch_at
    return {
        "status": "ok",
        "last_update": updated_at.isoformat() if updated_at else None,
        "last_fetch": last_fetch_at.isoformat() if last_fetch_at else None,
        "programmes_cached": len(feed_cache.get_programmes()),
        "thumbnails_cached": len(feed_cache.get_thumbnails()),
        "sources": feed_cache.get_sources(),
    }


@main_router.post("/fetch")
async def trigger_fetch() -> dict:
    """
    Manually trigger feed fetch from the configured sources

    This will download and parse every feed and refresh the cache
    """
    logger.info("Manual feed fetch triggered via API")
    result = await fetch_and_process()

    if "error" in result:
        raise HTTPException(status_code=500, detail=result["error"])

    return result


@main_router.get("/programmes", response_model=ProgrammeListResponse)
async def get_programmes(
    channel_id: Annotated[int | None, Query(description="Only programmes of this channel")] = None
) -> ProgrammeListResponse:
    """Get cached programmes in feed order"""
    programmes = feed_cache.get_programmes(channel_id)
    logger.debug(f"Returning {len(programmes)} programmes (channel filter: {channel_id})")

    return ProgrammeListResponse(
        count=len(programmes),
        updated_at=feed_cache.updated_at,
        programmes=[ProgrammeResponse.from_record(programme) for programme in programmes],
    )


@main_router.get("/thumbnails", response_model=ThumbnailListResponse)
async def get_thumbnails() -> ThumbnailListResponse:
    """Get cached thumbnails in feed order"""
    thumbnails = feed_cache.get_thumbnails()

    return ThumbnailListResponse(
        count=len(thumbnails),
        updated_at=feed_cache.updated_at,
        thumbnails=[ThumbnailResponse.from_record(thumbnail) for thumbnail in thumbnails],
    )
