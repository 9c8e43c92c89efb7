"""LibreHardwareMonitor JSON feed client"""

from typing import Optional

import httpx

from .log_handler import get_structured_logger
from .sensor_tree import SensorNode

logger = get_structured_logger(__name__, component="source")

DEFAULT_TIMEOUT = 0.3


class LhmJsonSource:
    """Fetches the sensor tree from the LibreHardwareMonitor web server"""

    def __init__(
        self,
        port: int,
        host: str = "localhost",
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the feed client.

        Args:
            port: LibreHardwareMonitor web server port
            host: Host serving data.json
            timeout: Whole-request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        self.host = host
        self.port = port
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        logger.info("Initialized LHM JSON source", url=self.url)

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}/data.json"

    def set_port(self, port: int) -> None:
        """Point the client at a different JSON port"""
        if port != self.port:
            logger.info("LHM JSON port changed", old_port=self.port, new_port=port)
            self.port = port

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure HTTP client is initialized"""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._client

    async def close(self) -> None:
        """Close HTTP client"""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch(self) -> Optional[SensorNode]:
        """
        Fetch and parse the current sensor tree.

        Every failure (connection refused, timeout, HTTP error, bad JSON,
        unexpected document shape) is reported the same way.

        Returns:
            Root SensorNode, or None if the feed is unavailable
        """
        try:
            client = await self._ensure_client()
            response = await client.get(self.url)
            response.raise_for_status()
            return SensorNode.from_json(response.json())
        except httpx.HTTPError as e:
            logger.debug("LHM JSON request failed", url=self.url, error=repr(e))
        except ValueError as e:
            # JSONDecodeError and MalformedTreeError
            logger.debug("LHM JSON body could not be parsed", url=self.url, error=str(e))
        except RecursionError:
            logger.debug("LHM JSON body nested too deeply", url=self.url)
        return None
