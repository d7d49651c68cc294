"""FastAPI endpoints for the heart rate relay."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from hr_relay.errors import DownstreamUnavailable, TimestampParseError
from hr_relay.forwarder import GreptimeForwarder
from hr_relay.logger import get_logger
from hr_relay.models import HealthResponse, HeartRateSample, IngestResponse

logger = get_logger(__name__)

router = APIRouter()


def get_forwarder(request: Request) -> GreptimeForwarder:
    """Return the forwarder created at startup."""
    forwarder = getattr(request.app.state, "forwarder", None)
    if forwarder is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Forwarder not initialized",
        )
    return forwarder


@router.post(
    "/heart-rate",
    response_model=IngestResponse,
    status_code=status.HTTP_200_OK,
    summary="Relay a heart rate reading",
    description="Encode a heart rate reading as line protocol and write it to GreptimeDB",
)
async def relay_heart_rate(
    sample: HeartRateSample,
    device_id: Optional[str] = Query(None, description="Device tag for the reading"),
    forwarder: GreptimeForwarder = Depends(get_forwarder),
) -> IngestResponse:
    """
    Relay one heart rate reading to the database.

    Malformed bodies are rejected by validation (422), unrecognized timestamps
    with 400, and a failed database write with 502. Exactly one write is made
    for an accepted reading.
    """
    try:
        record = forwarder.translate(sample, device_id)
    except TimestampParseError as e:
        logger.warning(f"Rejected reading - {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Parse error: {e}",
        )

    try:
        await forwarder.write(record)
    except DownstreamUnavailable as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(e),
        )

    logger.info(f"Forwarded reading - value: {sample.value}, timestamp: {sample.timestamp}")
    return IngestResponse(
        success=True,
        message="Successfully processed 1 heart rate record",
        processed_count=1,
    )


@router.get("/health", response_model=HealthResponse, summary="Health check endpoint")
async def health_check() -> HealthResponse:
    """Health check endpoint for monitoring."""
    return HealthResponse()
