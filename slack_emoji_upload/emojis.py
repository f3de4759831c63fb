"""
Paginated listing of a workspace's custom emojis

The adminList endpoint is walked page by page and merged into one index keyed
by emoji name. Aliases point at another emoji's image and are left out.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List

from .errors import ErrorKind, SlackEmojiError
from .transport import parse_json

logger = logging.getLogger("slack_emoji_upload.emojis")

PAGE_SIZE = 1000


@dataclass(frozen=True)
class Emoji:
    name: str
    url: str = ""
    alias_for: str = ""
    is_alias: bool = False
    created: datetime = datetime.fromtimestamp(0, tz=timezone.utc)
    user_id: str = ""
    user_display_name: str = ""
    can_delete: bool = False
    is_bad: bool = False
    synonyms: List[str] = field(default_factory=list)
    team_id: str = ""
    avatar_hash: str = ""

    @classmethod
    def from_record(cls, record):
        """Build an Emoji from one adminList record"""
        return cls(
            name=record["name"],
            # The URL is backslash escaped in transit.
            url=(record.get("url") or "").replace("\\", ""),
            alias_for=record.get("alias_for") or "",
            is_alias=bool(record.get("is_alias")),
            created=datetime.fromtimestamp(int(record.get("created") or 0), tz=timezone.utc),
            user_id=record.get("user_id") or "",
            user_display_name=record.get("user_display_name") or "",
            can_delete=bool(record.get("can_delete")),
            is_bad=bool(record.get("is_bad")),
            synonyms=list(record.get("synonyms") or []),
            team_id=record.get("team_id") or "",
            avatar_hash=record.get("avatar_hash") or "",
        )

    @property
    def is_aliasing(self):
        return bool(self.alias_for) or self.is_alias

    @property
    def is_usable(self):
        return not self.is_bad

    @property
    def is_removable(self):
        return self.can_delete


@dataclass
class PageCursor:
    page: int = 1
    size: int = PAGE_SIZE
    # Placeholder until the first page reports the real count.
    pages: int = 1

    @property
    def has_next(self):
        return self.page <= self.pages

    def advance(self, paging):
        reported = int(paging["page"])
        if reported < self.page:
            raise SlackEmojiError(
                ErrorKind.PARSE_FAILURE, f"emoji list page {self.page} was reported as page {reported}"
            )
        self.pages = int(paging["pages"])
        self.page = reported + 1


def _listing_page(response):
    payload = parse_json(response, "requesting emoji list")
    if not payload["ok"]:
        raise SlackEmojiError(
            ErrorKind.REMOTE_REJECTED,
            f"emoji list response is not OK, error: {payload.get('error', 'unknown')}",
            retryable=True,
        )
    if not isinstance(payload.get("paging"), dict):
        raise SlackEmojiError(ErrorKind.PARSE_FAILURE, "emoji list response has no paging block")
    return payload


def list_emojis(workspace, api_token, page_size=PAGE_SIZE):
    """Return every non-alias custom emoji of the workspace by name"""
    transport = workspace.transport
    url = workspace.emoji_admin_list_url
    cursor = PageCursor(size=page_size)
    emojis = {}

    while cursor.has_next:
        form = {
            "count": str(cursor.size),
            "page": str(cursor.page),
            "query": "",
            "token": api_token,
        }
        payload = transport.call(
            f"requesting emoji list page {cursor.page}",
            lambda: transport.post(url, data=form),
            classify=_listing_page,
        )

        if cursor.page == 1 and "custom_emoji_total_count" in payload:
            logger.debug("Workspace reports %s custom emojis", payload["custom_emoji_total_count"])

        try:
            records = [Emoji.from_record(record) for record in payload.get("emoji") or []]
            cursor.advance(payload["paging"])
        except (KeyError, TypeError, ValueError) as exc:
            raise SlackEmojiError(
                ErrorKind.PARSE_FAILURE, f"malformed emoji list page {cursor.page}", cause=exc
            ) from exc

        for emoji in records:
            if emoji.is_aliasing:
                continue
            emojis.setdefault(emoji.name, emoji)

    return emojis
