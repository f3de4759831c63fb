from __future__ import annotations

import json
from pathlib import Path
from types import MappingProxyType
from unittest.mock import patch

import pytest

from slack_emoji_upload import cli
from slack_emoji_upload.emojis import Emoji
from slack_emoji_upload.errors import ErrorKind, SlackEmojiError
from slack_emoji_upload.upload import UploadProgress
from slack_emoji_upload.workspace import SlackContext

BASE_ARGS = ["--team-name", "team", "--cookie", "d=abc"]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch) -> None:
    for key in ("SLACK_TEAM", "SLACK_COOKIE", "EMOJI_NAME_PREFIX", "EMOJI_NAME_SUFFIX"):
        monkeypatch.delenv(key, raising=False)


def fake_context(workspace, *names):
    emojis = {name: Emoji(name=name, url=f"https://e.example/{name}.png") for name in names}
    return SlackContext(workspace=workspace, api_token="xoxs", emojis=MappingProxyType(emojis))


def test_missing_command_prints_help(capsys) -> None:
    assert cli.main([]) == cli.EXIT_CONFIGURATION
    assert "usage" in capsys.readouterr().out


def test_missing_cookie_is_a_configuration_error() -> None:
    assert cli.main(["--team-name", "team", "list"]) == cli.EXIT_CONFIGURATION


def test_upload_requires_taken_suffix() -> None:
    assert cli.main(BASE_ARGS + ["upload", "--directory", "/emoji"]) == cli.EXIT_CONFIGURATION


def test_connection_failure_exit_code() -> None:
    error = SlackEmojiError(ErrorKind.TOKEN_NOT_FOUND, "API token not found")
    with patch.object(cli, "connect", side_effect=error):
        assert cli.main(BASE_ARGS + ["list"]) == cli.EXIT_CONNECTION


def test_list_writes_output_file(tmp_path: Path, capsys) -> None:
    output_file = tmp_path / "emoji_list.json"
    with patch.object(cli, "connect", side_effect=lambda ws: fake_context(ws, "b", "a")):
        assert cli.main(BASE_ARGS + ["list", "--output-file", str(output_file)]) == 0

    assert json.loads(output_file.read_text()) == {"a": "https://e.example/a.png", "b": "https://e.example/b.png"}
    out = capsys.readouterr().out
    assert out.index(":a:") < out.index(":b:")


def test_upload_passes_configuration(tmp_path: Path) -> None:
    with patch.object(cli, "connect", side_effect=lambda ws: fake_context(ws)), \
            patch.object(cli, "post_emojis", return_value=UploadProgress(total=2, uploaded=2)) as post:
        code = cli.main(BASE_ARGS + ["upload", "-d", str(tmp_path), "-p", "x-", "--taken-suffix", "_t"])

    assert code == 0
    _, directory, prefix, suffix, taken_prefix, taken_suffix = post.call_args.args
    assert (directory, prefix, suffix, taken_prefix, taken_suffix) == (str(tmp_path), "x-", "", "", "_t")


def test_command_failure_exit_code(tmp_path: Path) -> None:
    error = SlackEmojiError(ErrorKind.BOTH_NAMES_EXHAUSTED, "taken twice")
    with patch.object(cli, "connect", side_effect=lambda ws: fake_context(ws)), \
            patch.object(cli, "post_emojis", side_effect=error):
        code = cli.main(BASE_ARGS + ["upload", "-d", str(tmp_path), "--taken-suffix", "_t"])
    assert code == cli.EXIT_COMMAND
