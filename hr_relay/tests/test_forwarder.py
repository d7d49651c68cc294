"""Tests for translation and the database write."""

import httpx
import pytest

from hr_relay.config import RelayConfig
from hr_relay.errors import DownstreamUnavailable, TimestampParseError
from hr_relay.forwarder import GreptimeForwarder
from hr_relay.models import HeartRateSample


def test_translate_sample():
    """Test the documented example record."""
    forwarder = GreptimeForwarder(RelayConfig())
    sample = HeartRateSample(value=72, timestamp="2024-01-01T10:00:00Z")
    assert forwarder.translate(sample) == "heart_rate value=72 1704103200000000000"


def test_translate_request_device_overrides_default():
    forwarder = GreptimeForwarder(RelayConfig(default_device_id="apple-watch"))
    sample = HeartRateSample(value=72, timestamp="2024-01-01T10:00:00Z")
    assert forwarder.translate(sample).startswith("heart_rate,device_id=apple-watch ")
    assert forwarder.translate(sample, "ring").startswith("heart_rate,device_id=ring ")


def test_translate_invalid_timestamp():
    forwarder = GreptimeForwarder(RelayConfig())
    sample = HeartRateSample(value=72, timestamp="yesterday")
    with pytest.raises(TimestampParseError):
        forwarder.translate(sample)


@pytest.mark.asyncio
async def test_write_posts_record(greptime):
    """Test one POST carries the record to the write endpoint."""
    forwarder = GreptimeForwarder(RelayConfig(database="health"), transport=greptime.transport)
    await forwarder.start()
    try:
        await forwarder.write("heart_rate value=72 1704103200000000000")
    finally:
        await forwarder.stop()

    assert len(greptime.requests) == 1
    request = greptime.requests[0]
    assert str(request.url) == (
        "http://127.0.0.1/v1/influxdb/api/v2/write?db=health&precision=ns"
    )
    assert greptime.records == ["heart_rate value=72 1704103200000000000"]


@pytest.mark.asyncio
async def test_write_non_success_status(greptime):
    """Test non-2xx responses carry status and body."""
    greptime.status_code = 400
    greptime.body = "invalid line protocol"
    forwarder = GreptimeForwarder(RelayConfig(), transport=greptime.transport)
    await forwarder.start()
    try:
        with pytest.raises(DownstreamUnavailable) as exc_info:
            await forwarder.write("heart_rate value=72 1704103200000000000")
    finally:
        await forwarder.stop()

    assert exc_info.value.status_code == 400
    assert exc_info.value.body == "invalid line protocol"
    assert "HTTP 400" in str(exc_info.value)
    assert len(greptime.requests) == 1


@pytest.mark.asyncio
async def test_write_timeout(greptime):
    """Test transport failures are reported without a status code."""
    greptime.error = httpx.ReadTimeout("timed out")
    forwarder = GreptimeForwarder(RelayConfig(), transport=greptime.transport)
    await forwarder.start()
    try:
        with pytest.raises(DownstreamUnavailable) as exc_info:
            await forwarder.write("heart_rate value=72 1704103200000000000")
    finally:
        await forwarder.stop()

    assert exc_info.value.status_code is None
    assert "timed out" in str(exc_info.value)


@pytest.mark.asyncio
async def test_write_before_start():
    forwarder = GreptimeForwarder(RelayConfig())
    with pytest.raises(RuntimeError):
        await forwarder.write("heart_rate value=72 1704103200000000000")
