from __future__ import annotations

from pathlib import Path

from slack_emoji_upload.download import download_emojis, emoji_file_name
from slack_emoji_upload.emojis import Emoji

from .conftest import FakeSession, make_response


def test_file_name_uses_url_extension() -> None:
    assert emoji_file_name(Emoji(name="party", url="https://e.example/T1/party/abc.gif")) == "party.gif"
    assert emoji_file_name(Emoji(name="plain", url="https://e.example/T1/plain/abc")) == "plain.png"


def test_download_writes_every_emoji(make_context, session: FakeSession, tmp_path: Path) -> None:
    context = make_context("b", "a")
    for name in ("a", "b"):
        session.queue("GET", context.emojis[name].url, make_response(text=f"{name}-bytes"))

    output_dir = tmp_path / "out"
    written = download_emojis(context, str(output_dir))

    assert [Path(p).name for p in written] == ["a.png", "b.png"]
    assert (output_dir / "a.png").read_bytes() == b"a-bytes"
    assert (output_dir / "b.png").read_bytes() == b"b-bytes"


def test_download_does_not_send_the_session_cookie(make_context, session: FakeSession, tmp_path: Path) -> None:
    context = make_context("a")
    session.queue("GET", context.emojis["a"].url, make_response(text="a-bytes"))

    download_emojis(context, str(tmp_path))

    (call,) = session.calls
    assert "Cookie" not in call["headers"]
