"""
SocialHub Backend — Story Lifecycle
=====================================

What:  Creating, listing, viewing and deleting 24-hour stories.
Who:   Story routes.

Lifecycle:
    create  → expires_at = created_at + STORY_LIFETIME (fixed, not per item)
    list    → live stories (expires_at > now) of the viewer and followees,
              newest first, grouped by owner in first-seen order, each
              flagged is_viewed for the viewer
    view    → INSERT story_views ... ON CONFLICT DO NOTHING RETURNING;
              only a new row bumps views_count (same transaction).
              Viewing twice is a successful no-op, never an error.
    delete  → owner only

Expiry is enforced at query time only. Expired stories are not viewable
or listable but remain in the table; there is no sweep job.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.exceptions import NotFoundError, ValidationError
from socialhub.models.account import utcnow
from socialhub.models.story import Story
from socialhub.repositories.account_directory import AccountDirectory
from socialhub.repositories.content_store import STORY_VIEWS, ContentStore
from socialhub.schemas.account import AccountSummary
from socialhub.schemas.story import StoryCreateRequest, StoryGroup, StoryResponse, StoryViewResult

logger = logging.getLogger(__name__)

STORY_LIFETIME = timedelta(hours=24)


def group_stories_by_owner(stories: Sequence[Story]) -> List[Tuple[UUID, List[Story]]]:
    """
    Groups an already-ordered story list by owner.

    Owners appear in the order their first story appears; within a group
    the input order is kept. Pure function, no I/O.
    """
    groups: Dict[UUID, List[Story]] = {}
    for story in stories:
        groups.setdefault(story.owner_id, []).append(story)
    return list(groups.items())


def _naive_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; compare like with like
    return value.astimezone(timezone.utc).replace(tzinfo=None) if value.tzinfo else value


class StoryService:

    async def create_story(
        self,
        db: AsyncSession,
        owner_id: UUID,
        request: StoryCreateRequest,
        now: Optional[datetime] = None,
    ) -> StoryResponse:
        if not request.media_url:
            raise ValidationError("Story media is required", field="media_url")

        created_at = now or utcnow()
        story = await ContentStore(db, Story).create_item(
            owner_id=owner_id,
            media_url=request.media_url,
            media_type=request.media_type,
            caption=request.caption,
            created_at=created_at,
            expires_at=created_at + STORY_LIFETIME,
        )
        logger.info("Story %s created by %s", story.id, owner_id)
        return StoryResponse.model_validate(story)

    async def list_visible(
        self, db: AsyncSession, viewer_id: UUID, now: Optional[datetime] = None
    ) -> List[StoryGroup]:
        now = now or utcnow()
        owners = AccountDirectory(db).visibility_set(viewer_id)
        store = ContentStore(db, Story)

        stories = await store.page_by_owner_set(owners, Story.expires_at > now)
        viewed = await store.existing_edges(STORY_VIEWS, [s.id for s in stories], viewer_id)

        groups = []
        for _, owned in group_stories_by_owner(stories):
            views = []
            for story in owned:
                view = StoryResponse.model_validate(story)
                view.is_viewed = story.id in viewed
                views.append(view)
            groups.append(
                StoryGroup(owner=AccountSummary.model_validate(owned[0].owner), stories=views)
            )
        return groups

    async def view_story(
        self,
        db: AsyncSession,
        story_id: UUID,
        viewer_id: UUID,
        now: Optional[datetime] = None,
    ) -> StoryViewResult:
        """Records the view once per viewer; repeat views change nothing."""
        store = ContentStore(db, Story)
        story = await store.require_item(story_id)
        if _naive_utc(story.expires_at) <= _naive_utc(now or utcnow()):
            raise NotFoundError("story", str(story_id))

        recorded = await store.create_edge_if_absent(STORY_VIEWS, story_id, viewer_id)
        if recorded:
            logger.debug("Story %s viewed by %s", story_id, viewer_id)
        return StoryViewResult(
            story_id=story_id,
            recorded=recorded,
            views_count=await store.counter_value(story_id, "views_count"),
        )

    async def delete_story(self, db: AsyncSession, story_id: UUID, requester_id: UUID) -> None:
        await ContentStore(db, Story).delete_item(story_id, requester_id)


story_service = StoryService()
