"""Translate heart rate samples to line protocol and write them to GreptimeDB."""

from typing import Optional

import httpx

from hr_relay.config import RelayConfig
from hr_relay.errors import DownstreamUnavailable
from hr_relay.lineprotocol import encode_record, sample_tags
from hr_relay.logger import get_logger
from hr_relay.models import HeartRateSample
from hr_relay.timestamps import parse_timestamp_ns, to_precision

logger = get_logger(__name__)


class GreptimeForwarder:
    """Encodes one sample per call and POSTs it to the InfluxDB write endpoint."""

    def __init__(
        self,
        config: RelayConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the forwarder.

        Args:
            config: Relay settings, shared read-only across requests
            transport: Optional httpx transport, used by tests to stand in
                for the database
        """
        self.config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def start(self) -> None:
        """Open the pooled HTTP client."""
        if self._client is None:
            auth = None
            if self.config.username is not None:
                auth = httpx.BasicAuth(self.config.username, self.config.password or "")
            self._client = httpx.AsyncClient(
                auth=auth,
                timeout=self.config.request_timeout,
                transport=self._transport,
            )

    async def stop(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def translate(self, sample: HeartRateSample, device_id: Optional[str] = None) -> str:
        """
        Convert a validated sample into a line protocol record.

        Raises:
            TimestampParseError: If the sample timestamp is not recognized.
        """
        epoch_ns = parse_timestamp_ns(sample.timestamp, self.config.tz)
        timestamp = to_precision(epoch_ns, self.config.precision)
        tags = sample_tags(device_id or self.config.default_device_id, sample.source)
        return encode_record(sample.value, timestamp, tags, precision=self.config.precision)

    async def write(self, record: str) -> None:
        """
        POST a single record to the database.

        Raises:
            DownstreamUnavailable: On connection failure, timeout or a
                non-2xx response. Nothing is retried.
        """
        if self._client is None:
            raise RuntimeError("Forwarder not started")

        logger.debug(f"Writing to {self.config.write_url} db={self.config.database}: {record}")
        try:
            response = await self._client.post(
                self.config.write_url,
                params={"db": self.config.database, "precision": self.config.precision},
                headers={"Content-Type": "text/plain; charset=utf-8"},
                content=record.encode("utf-8"),
            )
        except httpx.HTTPError as e:
            logger.error(f"GreptimeDB unreachable: {e!r}")
            raise DownstreamUnavailable(None, str(e) or type(e).__name__) from e

        if not response.is_success:
            logger.error(f"GreptimeDB rejected write - status: {response.status_code}, body: {response.text}")
            raise DownstreamUnavailable(response.status_code, response.text)
