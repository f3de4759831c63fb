"""
Scrape the short-lived API token from the customize/emoji page

The token is not published through any API. The page embeds it in an inline
script directly under <body>, as `api_token: "xoxs-..."` or
`"api_token":"xoxs-..."`.
"""

import logging
import re

from bs4 import BeautifulSoup
from bs4.element import Tag

from .errors import ErrorKind, SlackEmojiError

logger = logging.getLogger("slack_emoji_upload.api_token")

API_TOKEN_PATTERN = re.compile(r'"?api_token"?:\s*"([^"]+)"')


def _is_token_script(tag):
    """Match <script type="text/javascript"> children of html > body mentioning api_token"""
    if tag.name != "script" or tag.get("type") != "text/javascript":
        return False
    body = tag.parent
    html = body.parent if body is not None else None
    if not isinstance(body, Tag) or body.name != "body":
        return False
    if not isinstance(html, Tag) or html.name != "html" or not isinstance(html.parent, BeautifulSoup):
        return False
    return "api_token" in (tag.string or "")


def token_from_html(markup):
    """Return the API token embedded in the page markup, or None"""
    soup = BeautifulSoup(markup, "html.parser")
    for script in soup.find_all(_is_token_script):
        match = API_TOKEN_PATTERN.search(script.string)
        if match:
            return match.group(1)
    return None


def acquire_token(workspace):
    """Fetch the customize/emoji page and extract its API token"""
    url = workspace.customize_emoji_url
    response = workspace.transport.call(
        "requesting API token",
        lambda: workspace.transport.get(url),
    )

    api_token = token_from_html(response.text)
    if api_token is None:
        raise SlackEmojiError(ErrorKind.TOKEN_NOT_FOUND, f"API token not found in {url}")

    logger.debug("API token acquired from %s", url)
    return api_token
