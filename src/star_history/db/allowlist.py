"""Database network access list management.

Hosted databases often only accept connections from allow-listed IPs.
AllowlistManager adds this host's public IP for the duration of a run
and removes every IP it added when the run shuts down. One instance is
constructed per process with injected credentials; its cleanup is
registered as a scheduler shutdown hook.
"""

from __future__ import annotations

import asyncio
from urllib.parse import quote

import httpx

from star_history.config import AllowlistConfig
from star_history.logging import get_logger

logger = get_logger(__name__)


class AllowlistError(Exception):
    """Raised when the access list cannot be updated."""

    pass


class AllowlistManager:
    """Adds and removes access list entries through the admin API.

    Usage:
        manager = AllowlistManager(settings.allowlist)
        await manager.add_current_ip()
        scheduler.add_shutdown_hook(manager.remove_all_added)
    """

    def __init__(
        self,
        config: AllowlistConfig,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            config: Credentials and endpoints
            client: Optional HTTP client (a digest-auth client is created otherwise)
        """
        self._config = config
        self._client = client or httpx.AsyncClient(
            auth=httpx.DigestAuth(config.public_key, config.private_key),
            timeout=10.0,
        )
        self._added: list[str] = []

    @property
    def added_ips(self) -> list[str]:
        return list(self._added)

    @property
    def _access_list_url(self) -> str:
        return f"{self._config.api_base_url}/groups/{self._config.project_id}/accessList"

    async def get_current_ip(self) -> str:
        """Public IP of this host, as reported by the lookup service."""
        try:
            resp = await self._client.get(
                self._config.ip_lookup_url,
                headers={"User-Agent": "star-history-db/allowlist"},
                timeout=5.0,
            )
            resp.raise_for_status()
        except httpx.HTTPError as e:
            raise AllowlistError(f"Failed to get current IP: {e}") from e
        return resp.text.strip()

    async def add_ip(self, ip: str, comment: str = "auto-added") -> None:
        """Add ``ip`` to the access list and remember it for cleanup."""
        logger.info("Adding {} to the database access list", ip)
        try:
            resp = await self._client.post(
                self._access_list_url,
                json=[{"ipAddress": ip, "comment": comment}],
                headers={"Accept": "application/json"},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise AllowlistError(
                f"Failed to add {ip} to access list ({e.response.status_code}): {e.response.text}"
            ) from e
        except httpx.HTTPError as e:
            raise AllowlistError(f"Failed to add {ip} to access list: {e}") from e

        if ip not in self._added:
            self._added.append(ip)

    async def add_current_ip(self, comment: str = "auto-added") -> str:
        """Add this host's IP, then wait for the rule to propagate."""
        ip = await self.get_current_ip()
        await self.add_ip(ip, comment)
        if self._config.propagation_delay_seconds > 0:
            await asyncio.sleep(self._config.propagation_delay_seconds)
        return ip

    async def remove_ip(self, ip: str) -> bool:
        """Remove ``ip`` from the access list.

        Single addresses are stored as /32 CIDR entries.

        Returns:
            True if the entry is gone (removed now or already absent)
        """
        entry = ip if "/" in ip else f"{ip}/32"
        url = f"{self._access_list_url}/{quote(entry, safe='')}"
        try:
            resp = await self._client.delete(url, headers={"Accept": "application/json"})
        except httpx.HTTPError as e:
            logger.error("Failed to remove {} from access list: {}", ip, e)
            return False

        if resp.status_code == 404:
            logger.info("{} was not on the access list", ip)
        elif resp.is_error:
            logger.error(
                "Failed to remove {} from access list ({}): {}",
                ip,
                resp.status_code,
                resp.text,
            )
            return False
        else:
            logger.info("Removed {} from the database access list", ip)

        if ip in self._added:
            self._added.remove(ip)
        return True

    async def remove_all_added(self) -> None:
        """Remove every IP this manager added."""
        if not self._added:
            logger.debug("No access list entries to clean up")
            return
        for ip in list(self._added):
            await self.remove_ip(ip)
        logger.info("Access list cleanup completed")

    async def aclose(self) -> None:
        await self._client.aclose()
