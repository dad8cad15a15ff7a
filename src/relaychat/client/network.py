"""Network availability signal.

``NetworkMonitor`` is the single source of truth for "is the network
usable". It is event driven: anything that learns about connectivity calls
``set_online``, and waiters resume as soon as the state flips back.
``ConnectivityProbe`` feeds it by polling the gateway health endpoint and,
when the gateway does not answer, checking for a route to its host.
"""

import asyncio
import socket
from collections.abc import Callable

import httpx

from ..logging_config import get_logger
from .config import NETWORK_POLL_INTERVAL, NETWORK_PROBE_TIMEOUT

logger = get_logger(__name__)

NetworkListener = Callable[[bool], None]


class NetworkMonitor:
    """Tracks whether the network is reportedly online."""

    def __init__(self, online: bool = True) -> None:
        self._online = asyncio.Event()
        if online:
            self._online.set()
        self._listeners: list[NetworkListener] = []

    @property
    def is_online(self) -> bool:
        return self._online.is_set()

    def subscribe(self, listener: NetworkListener) -> Callable[[], None]:
        """Register a listener called with the new status on every change."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def set_online(self, online: bool) -> None:
        if online == self.is_online:
            return
        if online:
            self._online.set()
        else:
            self._online.clear()
        logger.info("Network %s", "online" if online else "offline")
        for listener in list(self._listeners):
            listener(online)

    async def wait_online(self) -> None:
        """Return once the network is online (immediately if it already is)."""
        await self._online.wait()


class ConnectivityProbe:
    """Polls ``GET {base_url}/health`` and reports the result to a monitor.

    A gateway that answers, with any status, proves the network is up. When
    the request fails the probe falls back to a route check: a gateway that
    is down on a reachable host leaves the network online so sessions keep
    retrying toward their limit; only a host without a route (or one that
    does not resolve) counts as offline.
    """

    def __init__(
        self,
        monitor: NetworkMonitor,
        base_url: str,
        interval: float = NETWORK_POLL_INTERVAL,
        timeout: float = NETWORK_PROBE_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._monitor = monitor
        self._url = f"{base_url.rstrip('/')}/health"
        gateway = httpx.URL(base_url)
        self._host = gateway.host
        self._port = gateway.port or (443 if gateway.scheme == "https" else 80)
        self._interval = interval
        self._timeout = timeout
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None
        self._task: asyncio.Task | None = None

    async def check(self) -> bool:
        """Probe once and update the monitor. Returns the observed status."""
        try:
            response = await self._client.get(self._url)
        except httpx.HTTPError as e:
            online = await self.route_available()
            logger.debug("Health check failed (%s); route to %s: %s", e, self._host, online)
        else:
            online = True
            if not response.is_success:
                logger.debug("Gateway unhealthy: HTTP %d", response.status_code)
        self._monitor.set_online(online)
        return online

    async def route_available(self) -> bool:
        """Whether the gateway host resolves and the OS has a route to it.

        Connecting a UDP socket sends nothing; it only asks the kernel to
        pick a route, which fails when every interface is down.
        """
        loop = asyncio.get_running_loop()
        try:
            async with asyncio.timeout(self._timeout):
                addresses = await loop.getaddrinfo(self._host, self._port, type=socket.SOCK_DGRAM)
        except (OSError, TimeoutError):
            return False
        for family, kind, proto, _, address in addresses:
            with socket.socket(family, kind, proto) as sock:
                try:
                    sock.connect(address)
                except OSError:
                    continue
                return True
        return False

    async def run(self) -> None:
        while True:
            await self.check()
            await asyncio.sleep(self._interval)

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self.run())

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._owns_client:
            await self._client.aclose()
