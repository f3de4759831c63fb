"""
Upload a directory of images as custom emojis

Each file is uploaded under its derived name. A name already in the emoji
index is skipped without a request. A name the server reports as taken by a
built-in emoji is retried once under the taken name; there is no third tier.
"""

import logging
import os
from dataclasses import dataclass
from enum import Enum

from .errors import ErrorKind, SlackEmojiError, invalid_value
from .names import derive_names
from .transport import parse_json

logger = logging.getLogger("slack_emoji_upload.upload")

NAME_TAKEN_ERRORS = ("error_name_taken", "error_name_taken_i18n")


class UploadOutcome(Enum):
    UPLOADED = "uploaded"
    SKIPPED = "skipped"


def _percent(count, total):
    return count / total * 100.0 if total else 0.0


@dataclass(frozen=True)
class UploadProgress:
    total: int
    skipped: int = 0
    uploaded: int = 0

    @property
    def done(self):
        return self.skipped + self.uploaded

    @property
    def remaining(self):
        return self.total - self.done

    def record(self, outcome):
        if outcome is UploadOutcome.SKIPPED:
            return UploadProgress(self.total, self.skipped + 1, self.uploaded)
        return UploadProgress(self.total, self.skipped, self.uploaded + 1)

    def summary(self):
        return (
            f"Skipped+Uploaded=Existing: {self.skipped}+{self.uploaded}={self.done} "
            f"({_percent(self.skipped, self.total):.2f}%+{_percent(self.uploaded, self.total):.2f}%"
            f"={_percent(self.done, self.total):.2f}%), "
            f"Remaining: {self.remaining} ({_percent(self.remaining, self.total):.2f}%), "
            f"total: {self.total}"
        )


def _emoji_added(response):
    payload = parse_json(response, "requesting emoji addition")
    if payload["ok"]:
        return payload
    error = payload.get("error")
    if error in NAME_TAKEN_ERRORS:
        raise SlackEmojiError(ErrorKind.NAME_TAKEN, f"emoji name is already taken, error: {error}")
    raise SlackEmojiError(
        ErrorKind.REMOTE_REJECTED, f"emoji addition response is not OK, error: {error}", retryable=True
    )


def post_emoji(context, name, path):
    """Upload one image file under the given emoji name"""
    if name in context.emojis:
        raise SlackEmojiError(ErrorKind.ALREADY_EXISTS, f"emoji already exists: {name}")

    transport = context.transport
    url = context.workspace.emoji_add_url
    form = {"mode": "data", "name": name, "token": context.api_token}

    def send():
        # Reopened per attempt so every retry sends the whole file.
        try:
            image = open(path, "rb")
        except OSError as exc:
            raise SlackEmojiError(ErrorKind.INVALID_VALUE, f"reading emoji file failed: {path}", cause=exc) from exc
        with image:
            return transport.post(url, data=form, files={"image": image})

    transport.call(f"requesting emoji addition of {name}", send, classify=_emoji_added, honor_retry_after=True)


def upload_candidate(context, path, name, taken_name):
    """Upload a file under its name, falling back to the taken name once"""
    try:
        post_emoji(context, name, path)
        logger.info("uploaded :%s:", name)
        return UploadOutcome.UPLOADED
    except SlackEmojiError as exc:
        if exc.kind is ErrorKind.ALREADY_EXISTS:
            logger.info("skipped existing :%s:", name)
            return UploadOutcome.SKIPPED
        if exc.kind is not ErrorKind.NAME_TAKEN:
            raise

    logger.info("name :%s: is taken by a non-custom emoji, using taken name :%s:", name, taken_name)
    try:
        post_emoji(context, taken_name, path)
        logger.info("uploaded :%s:", taken_name)
        return UploadOutcome.UPLOADED
    except SlackEmojiError as exc:
        if exc.kind is ErrorKind.ALREADY_EXISTS:
            logger.info("skipped existing :%s:", taken_name)
            return UploadOutcome.SKIPPED
        if exc.kind is ErrorKind.NAME_TAKEN:
            raise SlackEmojiError(
                ErrorKind.BOTH_NAMES_EXHAUSTED,
                f"original and taken names were already taken, name: {name}, taken name: {taken_name}",
                cause=exc,
            ) from exc
        raise


def _raise_walk_error(error):
    raise error


def walk_files(directory):
    """Yield every file below directory in lexicographic walk order"""
    try:
        for root, dirs, files in os.walk(directory, onerror=_raise_walk_error):
            dirs.sort()
            for file_name in sorted(files):
                yield os.path.join(root, file_name)
    except OSError as exc:
        raise SlackEmojiError(ErrorKind.WALK_FAILURE, f"walking {directory} failed", cause=exc) from exc


def post_emojis(context, directory, prefix="", suffix="", taken_prefix="", taken_suffix=""):
    """Upload every file below directory and return the final progress"""
    if not directory:
        raise invalid_value("emoji directory path is empty")
    if not taken_suffix:
        raise invalid_value("emoji taken suffix is empty")
    affixes = {"prefix": prefix, "suffix": suffix, "taken prefix": taken_prefix, "taken suffix": taken_suffix}
    for label, affix in affixes.items():
        if ":" in affix:
            raise invalid_value(f"emoji {label} contains a colon: {affix!r}")
    if not os.path.isdir(directory):
        raise SlackEmojiError(ErrorKind.WALK_FAILURE, f"emoji directory does not exist: {directory}")

    progress = UploadProgress(total=sum(1 for _ in walk_files(directory)))
    logger.info("Found %d emoji files in %s", progress.total, directory)

    for path in walk_files(directory):
        name, taken_name = derive_names(path, prefix, suffix, taken_prefix, taken_suffix)
        logger.info("%s -> :%s:", os.path.basename(path), name)

        try:
            outcome = upload_candidate(context, path, name, taken_name)
        except SlackEmojiError as exc:
            raise SlackEmojiError(exc.kind, f"posting emoji failed, path: {path}", cause=exc) from exc

        progress = progress.record(outcome)
        logger.info(progress.summary())

    return progress
