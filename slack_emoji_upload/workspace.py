"""
Session objects shared by every emoji operation

A Workspace knows where a team lives and how to reach it. A SlackContext adds
the scraped API token and the emoji index fetched once at startup; it is
built by connect() and passed explicitly to each operation.
"""

import logging
import time
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

import requests

from .api_token import acquire_token
from .emojis import list_emojis
from .errors import invalid_value
from .transport import Transport

logger = logging.getLogger("slack_emoji_upload.workspace")

CUSTOMIZE_EMOJI_PATH = "customize/emoji"
EMOJI_ADD_PATH = "api/emoji.add"
EMOJI_ADMIN_LIST_PATH = "api/emoji.adminList"
EMOJI_REMOVE_PATH = "api/emoji.remove"

DEFAULT_DOMAIN = "slack.com"


@dataclass(frozen=True)
class Workspace:
    team_name: str
    transport: Transport
    domain: str = DEFAULT_DOMAIN

    @property
    def host(self):
        return f"https://{self.team_name}.{self.domain}"

    def url(self, path):
        return f"{self.host}/{path}"

    @property
    def customize_emoji_url(self):
        return self.url(CUSTOMIZE_EMOJI_PATH)

    @property
    def emoji_add_url(self):
        return self.url(EMOJI_ADD_PATH)

    @property
    def emoji_admin_list_url(self):
        return self.url(EMOJI_ADMIN_LIST_PATH)

    @property
    def emoji_remove_url(self):
        return self.url(EMOJI_REMOVE_PATH)


@dataclass(frozen=True)
class SlackContext:
    workspace: Workspace
    api_token: str
    emojis: Mapping

    @property
    def transport(self):
        return self.workspace.transport


def open_workspace(team_name, cookie, policy=None, sleep=time.sleep, session=None, domain=DEFAULT_DOMAIN):
    """Create a workspace whose transport sends the cookie to the team host only"""
    if not team_name:
        raise invalid_value("team name is empty")
    if not cookie:
        raise invalid_value("cookie is empty")

    session = session or requests.Session()
    transport = Transport(
        session, policy=policy, sleep=sleep, cookie=cookie, cookie_host=f"{team_name}.{domain}"
    )
    return Workspace(team_name=team_name, transport=transport, domain=domain)


def connect(workspace):
    """Scrape the API token and take the emoji snapshot for this run"""
    api_token = acquire_token(workspace)
    emojis = list_emojis(workspace, api_token)
    logger.info("Connected to %s with %d existing custom emojis", workspace.host, len(emojis))
    return SlackContext(workspace=workspace, api_token=api_token, emojis=MappingProxyType(emojis))
