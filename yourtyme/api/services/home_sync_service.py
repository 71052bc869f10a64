"""
Home Tab Sync Service.
Rebuilds a user's Slack Home tab from channel membership, stored cities and
live local times.
"""

import asyncio
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from yourtyme.api.dto.home_dto import ChannelGroup, HomeSyncResult, MemberRow
from yourtyme.api.templates.home_view_blocks import (
    DATABASE_UNAVAILABLE,
    NOT_SET,
    build_error_home_view,
    build_home_view,
    format_local_time,
)
from yourtyme.core.config import Settings, settings
from yourtyme.core.exceptions import (
    DatabaseError,
    UpstreamTransientError,
    YourTymeException,
)
from yourtyme.core.logging import get_logger, log_error, log_home_sync
from yourtyme.core.retry import exponential_backoff, fixed_delay, retry
from yourtyme.domain.models.user import UserProfile
from yourtyme.domain.repositories.profile_repository import ProfileRepository
from yourtyme.infrastructure.slack.slack_client import (
    SlackChannel,
    SlackPlatformClient,
)
from yourtyme.infrastructure.worldtime.worldtime_client import WorldTimeClient

logger = get_logger(__name__)


class HomeSyncService:
    """
    Builds and publishes the Home tab for one user.

    Every collaborator is injected. No external failure is fatal: each call
    retries and degrades locally, and the worst outcome is the error view.
    """

    def __init__(
        self,
        slack_client: SlackPlatformClient,
        profile_repository: ProfileRepository,
        time_client: WorldTimeClient,
        config: Settings = settings,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.slack = slack_client
        self.profiles = profile_repository
        self.time_client = time_client
        self.config = config
        self.sleep = sleep
        self._slack_backoff = exponential_backoff(
            base=config.SLACK_BACKOFF_BASE_SECONDS,
            factor=config.SLACK_BACKOFF_FACTOR,
            cap=config.SLACK_BACKOFF_CAP_SECONDS,
        )

    async def sync_home(self, user_id: str) -> HomeSyncResult:
        """
        Rebuild and publish the Home tab of `user_id`.

        Args:
            user_id: Slack user who opened the Home tab

        Returns:
            HomeSyncResult describing what was published
        """
        started = time.monotonic()
        deadline = started + self.config.HOME_SYNC_TIME_BUDGET_SECONDS

        try:
            view, groups, partial = await self._build_view(user_id, deadline)
        except Exception as e:
            log_error(e, {"operation": "home_sync", "user_id": user_id})
            return await self._publish_fallback(user_id, started)

        if not await self._publish(user_id, view):
            return await self._publish_fallback(user_id, started)

        result = HomeSyncResult(
            user_id=user_id,
            view=view,
            published=True,
            partial=partial,
            channel_count=sum(1 for g in groups if g.members),
            member_count=sum(len(g.members) for g in groups),
        )
        log_home_sync(
            user_id,
            channels=result.channel_count,
            members=result.member_count,
            partial=partial,
            duration=round(time.monotonic() - started, 3),
        )
        return result

    async def _build_view(
        self, user_id: str, deadline: float
    ) -> Tuple[Dict[str, Any], List[ChannelGroup], bool]:
        self_profile = await self._load_own_profile(user_id)

        partial = False
        try:
            channels: List[SlackChannel] = await self._scan_call(
                "conversations.list",
                lambda: self.slack.list_channels(self.config.SLACK_CHANNEL_PAGE_SIZE),
                deadline,
            )
        except asyncio.TimeoutError:
            channels, partial = [], True

        ignored = set(self.config.SLACK_IGNORED_USER_IDS) | {user_id}
        first_channel: Dict[str, str] = {}
        channel_order: List[SlackChannel] = []
        for channel in channels:
            if _remaining(deadline) <= 0:
                partial = True
                break
            try:
                member_ids: List[str] = await self._scan_call(
                    f"conversations.members {channel.id}",
                    lambda: self.slack.list_members(channel.id),
                    deadline,
                )
            except asyncio.TimeoutError:
                partial = True
                break
            # Only the bot itself, or a channel the viewer is not in
            if len(member_ids) <= 1 or user_id not in member_ids:
                continue
            channel_order.append(channel)
            for member_id in member_ids:
                if member_id not in ignored and member_id not in first_channel:
                    first_channel[member_id] = channel.id

        rows, truncated = await self._resolve_members(list(first_channel), deadline)
        partial = partial or truncated

        times, truncated = await self._lookup_times(
            sorted({row.city for row in rows.values() if row.has_city}), deadline
        )
        partial = partial or truncated

        groups = []
        for channel in channel_order:
            members = [
                rows[member_id].model_copy(
                    update={"local_time": times.get(rows[member_id].city)}
                )
                for member_id, channel_id in first_channel.items()
                if channel_id == channel.id and member_id in rows
            ]
            groups.append(
                ChannelGroup(
                    channel_id=channel.id, channel_name=channel.name, members=members
                )
            )

        return build_home_view(self_profile, groups, partial=partial), groups, partial

    async def _load_own_profile(self, user_id: str) -> Optional[UserProfile]:
        try:
            return await self._get_profile(user_id)
        except (DatabaseError, asyncio.TimeoutError):
            return None

    async def _get_profile(self, user_id: str) -> Optional[UserProfile]:
        return await retry(
            lambda: self.profiles.get(user_id),
            self.config.PROFILE_LOOKUP_ATTEMPTS,
            fixed_delay(self.config.PROFILE_LOOKUP_DELAY_SECONDS),
            retry_on=(DatabaseError,),
            timeout=self.config.EXTERNAL_CALL_TIMEOUT_SECONDS,
            sleep=self.sleep,
            description=f"profile lookup {user_id}",
        )

    async def _slack_call(
        self, description: str, operation: Callable[[], Awaitable[Any]], fallback: Any
    ) -> Any:
        try:
            return await retry(
                operation,
                self.config.SLACK_MAX_ATTEMPTS,
                self._slack_backoff,
                fallback=fallback,
                retry_on=(UpstreamTransientError,),
                timeout=self.config.EXTERNAL_CALL_TIMEOUT_SECONDS,
                sleep=self.sleep,
                description=f"Slack {description}",
            )
        except YourTymeException as e:
            logger.error(f"Slack {description} rejected, degrading: {e.message}")
            return fallback

    async def _scan_call(
        self, description: str, operation: Callable[[], Awaitable[Any]], deadline: float
    ) -> Any:
        """Run a channel scan call, retries included, within the remaining budget."""
        try:
            return await asyncio.wait_for(
                self._slack_call(description, operation, fallback=[]),
                timeout=_remaining(deadline),
            )
        except asyncio.TimeoutError:
            logger.warning(f"Home sync time budget exhausted during Slack {description}")
            raise

    async def _resolve_members(
        self, member_ids: List[str], deadline: float
    ) -> Tuple[Dict[str, MemberRow], bool]:
        """
        Resolve names and cities concurrently.

        Each member runs in its own task so one failure never cancels the
        others; tasks still running at the deadline are cancelled.
        """
        if not member_ids:
            return {}, False

        tasks = {
            member_id: asyncio.create_task(self._resolve_member(member_id))
            for member_id in member_ids
        }
        done, pending = await asyncio.wait(
            tasks.values(), timeout=_remaining(deadline)
        )
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning(
                f"Home sync time budget exhausted, {len(pending)} members dropped"
            )

        rows: Dict[str, MemberRow] = {}
        for member_id, task in tasks.items():
            if task not in done:
                continue
            if task.exception() is not None:
                logger.error(
                    f"Resolving member {member_id} failed: {task.exception()}"
                )
                rows[member_id] = MemberRow(
                    user_id=member_id, display_name=member_id, city=NOT_SET
                )
                continue
            row = task.result()
            if row is not None:
                rows[member_id] = row
        return rows, bool(pending)

    async def _resolve_member(self, member_id: str) -> Optional[MemberRow]:
        user = await self._slack_call(
            f"users.info {member_id}",
            lambda: self.slack.get_user_info(member_id),
            fallback=None,
        )
        if user is not None and (user.is_bot or user.deleted):
            return None

        try:
            profile = await self._get_profile(member_id)
        except (DatabaseError, asyncio.TimeoutError):
            city, has_city = DATABASE_UNAVAILABLE, False
        else:
            if profile is not None and profile.city:
                city, has_city = profile.city, True
            else:
                city, has_city = NOT_SET, False

        return MemberRow(
            user_id=member_id,
            display_name=user.display_name if user is not None else member_id,
            city=city,
            has_city=has_city,
        )

    async def _lookup_times(
        self, cities: List[str], deadline: float
    ) -> Tuple[Dict[str, Optional[str]], bool]:
        """Look up each distinct city once."""
        if not cities:
            return {}, False

        tasks = {city: asyncio.create_task(self._lookup_time(city)) for city in cities}
        done, pending = await asyncio.wait(tasks.values(), timeout=_remaining(deadline))
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

        times: Dict[str, Optional[str]] = {}
        for city, task in tasks.items():
            if task in done and task.exception() is None:
                times[city] = task.result()
            else:
                times[city] = None
        return times, bool(pending)

    async def _lookup_time(self, city: str) -> Optional[str]:
        try:
            world_time = await retry(
                lambda: self.time_client.lookup(city),
                self.config.TIME_LOOKUP_ATTEMPTS,
                fixed_delay(self.config.SLACK_BACKOFF_BASE_SECONDS),
                retry_on=(UpstreamTransientError,),
                timeout=self.config.EXTERNAL_CALL_TIMEOUT_SECONDS,
                sleep=self.sleep,
                description=f"time lookup {city}",
            )
        except (YourTymeException, asyncio.TimeoutError) as e:
            logger.info(f"Time unavailable for {city}: {e}")
            return None
        return format_local_time(world_time.datetime, world_time.timezone)

    async def _publish(self, user_id: str, view: Dict[str, Any]) -> bool:
        try:
            await retry(
                lambda: self.slack.publish_home_view(user_id, view),
                self.config.HOME_PUBLISH_ATTEMPTS,
                self._slack_backoff,
                retry_on=(UpstreamTransientError,),
                timeout=self.config.EXTERNAL_CALL_TIMEOUT_SECONDS,
                sleep=self.sleep,
                description="Slack views.publish",
            )
        except (YourTymeException, asyncio.TimeoutError) as e:
            logger.error(f"Publishing Home tab for {user_id} failed: {e}")
            return False
        return True

    async def _publish_fallback(self, user_id: str, started: float) -> HomeSyncResult:
        """Publish the error view once; its failure is only logged."""
        view = build_error_home_view()
        published = True
        try:
            await self.slack.publish_home_view(user_id, view)
        except Exception as e:
            published = False
            logger.error(f"Publishing fallback Home tab for {user_id} failed: {e}")

        log_home_sync(
            user_id,
            channels=0,
            members=0,
            fallback=True,
            duration=round(time.monotonic() - started, 3),
        )
        return HomeSyncResult(
            user_id=user_id, view=view, published=published, fallback=True
        )


def _remaining(deadline: float) -> float:
    return max(0.0, deadline - time.monotonic())
