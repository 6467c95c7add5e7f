"""
账户服务单元测试
"""

import pytest

from core.accounts import AccountService, normalize_email
from core.errors import AppException, ErrorCode


def test_normalize_email():
    assert normalize_email("  Alice@Example.COM ") == "alice@example.com"


@pytest.mark.asyncio
class TestAccountService:
    """账户服务"""

    async def test_create_and_get_user(self, db_session):
        service = AccountService(db_session)
        user = await service.create_user(" Alice ", "Alice@Example.com", "secret1")

        assert user.id is not None
        assert user.name == "Alice"
        assert user.email == "alice@example.com"
        assert user.password_hash != "secret1"

        assert (await service.get_user(user.id)).email == "alice@example.com"
        assert (await service.get_user_by_email("ALICE@example.com")).id == user.id

    async def test_duplicate_email(self, db_session):
        service = AccountService(db_session)
        await service.create_user("Alice", "alice@example.com", "secret1")

        with pytest.raises(AppException) as exc_info:
            await service.create_user("Alice 2", "ALICE@example.com", "secret2")
        assert exc_info.value.code == ErrorCode.ACCOUNT_EXISTS

    async def test_authenticate(self, db_session):
        service = AccountService(db_session)
        user = await service.create_user("Alice", "alice@example.com", "secret1")

        assert (await service.authenticate("alice@example.com", "secret1")).id == user.id
        assert await service.authenticate("alice@example.com", "wrong") is None
        assert await service.authenticate("missing@example.com", "secret1") is None

    async def test_get_missing_user(self, db_session):
        service = AccountService(db_session)
        assert await service.get_user(404) is None
