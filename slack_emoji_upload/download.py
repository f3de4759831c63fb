import logging
import os
from urllib.parse import urlparse

from .errors import ErrorKind, SlackEmojiError

logger = logging.getLogger("slack_emoji_upload.download")

DEFAULT_EXTENSION = ".png"


def emoji_file_name(emoji):
    """Build the local file name of an emoji from its image URL"""
    extension = os.path.splitext(urlparse(emoji.url).path)[1]
    return f"{emoji.name}{extension or DEFAULT_EXTENSION}"


def download_emoji(context, emoji, output_dir):
    """Download a single emoji image into output_dir"""
    if not emoji.url:
        raise SlackEmojiError(ErrorKind.INVALID_VALUE, f"emoji has no image URL: {emoji.name}")

    transport = context.transport
    response = transport.call(
        f"downloading emoji {emoji.name}",
        lambda: transport.get(emoji.url),
    )

    output_file = os.path.join(output_dir, emoji_file_name(emoji))
    with open(output_file, "wb") as f:
        f.write(response.content)
    return output_file


def download_emojis(context, output_dir):
    """Download all indexed emoji images, one at a time"""
    os.makedirs(output_dir, exist_ok=True)
    logger.info("Downloading %d emojis to %s", len(context.emojis), output_dir)

    downloaded = []
    for name in sorted(context.emojis):
        downloaded.append(download_emoji(context, context.emojis[name], output_dir))
        logger.info("downloaded :%s:", name)

    return downloaded
