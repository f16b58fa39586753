"""Tests for AllowlistManager using httpx.MockTransport."""

import json

import httpx
import pytest

from star_history.db.allowlist import AllowlistError, AllowlistManager
from tests.factories import FakeAccessList, make_allowlist_config


@pytest.fixture
def access_list() -> FakeAccessList:
    return FakeAccessList()


class TestAllowlistManager:
    async def test_get_current_ip(self, access_list: FakeAccessList) -> None:
        manager = access_list.manager()

        assert await manager.get_current_ip() == "203.0.113.7"
        await manager.aclose()

    async def test_add_current_ip(self, access_list: FakeAccessList) -> None:
        manager = access_list.manager()

        ip = await manager.add_current_ip(comment="nightly run")

        assert ip == "203.0.113.7"
        assert access_list.entries == {"203.0.113.7/32"}
        assert manager.added_ips == ["203.0.113.7"]
        post = next(r for r in access_list.requests if r.method == "POST")
        assert json.loads(post.content) == [{"ipAddress": "203.0.113.7", "comment": "nightly run"}]
        await manager.aclose()

    async def test_add_failure_raises(self, access_list: FakeAccessList) -> None:
        access_list.fail_post = True
        manager = access_list.manager()

        with pytest.raises(AllowlistError, match="401"):
            await manager.add_ip("203.0.113.7")

        assert manager.added_ips == []
        await manager.aclose()

    async def test_remove_all_added(self, access_list: FakeAccessList) -> None:
        manager = access_list.manager()
        await manager.add_ip("203.0.113.7")
        await manager.add_ip("198.51.100.2")

        await manager.remove_all_added()

        assert access_list.entries == set()
        assert manager.added_ips == []

    async def test_remove_uses_encoded_cidr(self, access_list: FakeAccessList) -> None:
        manager = access_list.manager()
        await manager.add_ip("203.0.113.7")

        assert await manager.remove_ip("203.0.113.7") is True

        delete = next(r for r in access_list.requests if r.method == "DELETE")
        assert delete.url.raw_path.endswith(b"/accessList/203.0.113.7%2F32")

    async def test_remove_missing_entry_is_success(self, access_list: FakeAccessList) -> None:
        manager = access_list.manager()

        assert await manager.remove_ip("192.0.2.1") is True

    async def test_remove_all_without_additions_makes_no_requests(
        self, access_list: FakeAccessList
    ) -> None:
        manager = access_list.manager()

        await manager.remove_all_added()

        assert access_list.requests == []

    def test_default_client_uses_digest_auth(self) -> None:
        manager = AllowlistManager(make_allowlist_config())

        assert isinstance(manager._client.auth, httpx.DigestAuth)
