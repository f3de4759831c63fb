import logging

from .errors import ErrorKind, SlackEmojiError
from .transport import parse_json

logger = logging.getLogger("slack_emoji_upload.remove")


def _emoji_removed(response):
    payload = parse_json(response, "requesting emoji removal")
    if not payload["ok"]:
        raise SlackEmojiError(
            ErrorKind.REMOTE_REJECTED,
            f"emoji removal response is not OK, error: {payload.get('error', 'unknown')}",
            retryable=True,
        )
    return payload


def delete_emoji(context, name):
    """Delete a single custom emoji by name"""
    if name not in context.emojis:
        raise SlackEmojiError(ErrorKind.DOES_NOT_EXIST, f"emoji does not exist: {name}")

    transport = context.transport
    url = context.workspace.emoji_remove_url
    form = {"name": name, "token": context.api_token}
    transport.call(
        f"requesting emoji removal of {name}",
        lambda: transport.post(url, data=form),
        classify=_emoji_removed,
    )


def delete_emojis(context, names=None):
    """Delete the named emojis, or every custom emoji when no names are given"""
    names = sorted(names if names else context.emojis)
    total = len(names)
    deleted = 0

    for name in names:
        try:
            delete_emoji(context, name)
        except SlackEmojiError as exc:
            if exc.kind is not ErrorKind.DOES_NOT_EXIST:
                raise SlackEmojiError(exc.kind, f"deleting emoji failed, name: {name}", cause=exc) from exc
            logger.info("skipped missing :%s:", name)
        else:
            logger.info("deleted :%s:", name)
            deleted += 1

        remaining = total - deleted
        logger.info(
            "Deleted: %d (%.2f%%), Remaining: %d (%.2f%%), total: %d",
            deleted,
            deleted / total * 100.0,
            remaining,
            remaining / total * 100.0,
            total,
        )

    return deleted
