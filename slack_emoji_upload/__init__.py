"""Sync a local directory of images with a Slack workspace's custom emojis"""

from .emojis import Emoji, list_emojis
from .errors import ErrorKind, SlackEmojiError
from .names import derive_names
from .upload import UploadProgress, post_emoji, post_emojis
from .workspace import SlackContext, Workspace, connect, open_workspace

__version__ = "0.1.0"
