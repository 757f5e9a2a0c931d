"""
SocialHub Backend — Notification Service Tests
================================================

What we test:
    ✅ Self-actions write nothing
    ✅ One event → exactly one unread row, message rendered with the actor's name
    ✅ Repeated events are never de-duplicated
    ✅ mark_read: own → read, someone else's → 403, missing → 404
    ✅ mark_all_read touches only the caller's unread rows
"""

from uuid import uuid4

import pytest
from sqlalchemy import func, select

from socialhub.exceptions import ForbiddenError, NotFoundError
from socialhub.models import Notification, NotificationKind
from socialhub.services.notification_service import NotificationEvent, NotificationService


async def _count_notifications(db_session, recipient_id) -> int:
    result = await db_session.execute(
        select(func.count()).select_from(Notification).where(Notification.recipient_id == recipient_id)
    )
    return result.scalar()


class TestFanOut:

    def setup_method(self):
        self.service = NotificationService()

    @pytest.mark.asyncio
    async def test_self_action_writes_nothing(self, db_session, make_account):
        alice = await make_account("alice")
        event = NotificationEvent(alice.id, alice.id, NotificationKind.LIKE, entity_id=uuid4())

        result = await self.service.fan_out(db_session, event)
        await db_session.commit()

        assert result is None
        assert await _count_notifications(db_session, alice.id) == 0

    @pytest.mark.asyncio
    async def test_self_action_never_touches_the_session(self, mock_db_session):
        actor = uuid4()
        event = NotificationEvent(actor, actor, NotificationKind.FOLLOW)

        assert await self.service.fan_out(mock_db_session, event) is None
        mock_db_session.add.assert_not_called()
        mock_db_session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_writes_one_unread_row(self, db_session, make_account):
        alice = await make_account("alice")
        bob = await make_account("bob")
        post_id = uuid4()

        row = await self.service.fan_out(
            db_session, NotificationEvent(bob.id, alice.id, NotificationKind.LIKE, entity_id=post_id)
        )
        await db_session.commit()

        assert row.is_read is False
        assert row.sender_id == bob.id
        assert row.entity_id == post_id
        assert row.message == "bob liked your post"
        assert await _count_notifications(db_session, alice.id) == 1

    @pytest.mark.asyncio
    async def test_repeated_events_are_not_deduplicated(self, db_session, make_account):
        alice = await make_account("alice")
        bob = await make_account("bob")
        event = NotificationEvent(bob.id, alice.id, NotificationKind.LIKE, entity_id=uuid4())

        await self.service.fan_out(db_session, event)
        await self.service.fan_out(db_session, event)
        await db_session.commit()

        assert await _count_notifications(db_session, alice.id) == 2

    @pytest.mark.asyncio
    async def test_explicit_message_wins(self, db_session, make_account):
        alice = await make_account("alice")
        bob = await make_account("bob")

        row = await self.service.fan_out(
            db_session,
            NotificationEvent(bob.id, alice.id, NotificationKind.MESSAGE, message="custom text"),
        )
        assert row.message == "custom text"


class TestReadSide:

    def setup_method(self):
        self.service = NotificationService()

    async def _notify(self, db_session, actor, recipient, kind=NotificationKind.FOLLOW):
        row = await self.service.fan_out(db_session, NotificationEvent(actor.id, recipient.id, kind))
        await db_session.commit()
        return row

    @pytest.mark.asyncio
    async def test_list_includes_unread_count_and_pagination(self, db_session, make_account):
        alice = await make_account("alice")
        bob = await make_account("bob")
        for _ in range(3):
            await self._notify(db_session, bob, alice)

        page = await self.service.list_for_recipient(db_session, alice.id, page=1, limit=2)

        assert len(page.notifications) == 2
        assert page.unread_count == 3
        assert page.pagination.total == 3
        assert page.pagination.total_pages == 2
        assert page.notifications[0].sender.username == "bob"

    @pytest.mark.asyncio
    async def test_mark_read_own_notification(self, db_session, make_account):
        alice = await make_account("alice")
        bob = await make_account("bob")
        row = await self._notify(db_session, bob, alice)

        result = await self.service.mark_read(db_session, row.id, alice.id)

        assert result.is_read is True
        assert await self.service.count_unread(db_session, alice.id) == 0

    @pytest.mark.asyncio
    async def test_mark_read_someone_elses_notification_is_forbidden(
        self, db_session, make_account
    ):
        alice = await make_account("alice")
        bob = await make_account("bob")
        row = await self._notify(db_session, bob, alice)

        with pytest.raises(ForbiddenError):
            await self.service.mark_read(db_session, row.id, bob.id)

    @pytest.mark.asyncio
    async def test_mark_read_missing_notification(self, db_session, make_account):
        alice = await make_account("alice")
        with pytest.raises(NotFoundError):
            await self.service.mark_read(db_session, uuid4(), alice.id)

    @pytest.mark.asyncio
    async def test_mark_all_read_only_touches_callers_rows(self, db_session, make_account):
        alice = await make_account("alice")
        bob = await make_account("bob")
        await self._notify(db_session, bob, alice)
        await self._notify(db_session, bob, alice)
        await self._notify(db_session, alice, bob)

        updated = await self.service.mark_all_read(db_session, alice.id)
        await db_session.commit()

        assert updated == 2
        assert await self.service.count_unread(db_session, alice.id) == 0
        assert await self.service.count_unread(db_session, bob.id) == 1
