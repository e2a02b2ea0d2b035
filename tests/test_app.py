"""
Tests for the command line entry point.
"""
import errno

import pytest

from conftest import SAMPLE_PLAYLIST
from m3u_viewer import app as app_module


@pytest.fixture
def fake_flet(monkeypatch, tmp_path):
    """Replace the Flet window loop with a recorder."""
    monkeypatch.setenv("M3U_VIEWER_CACHE_DIR", str(tmp_path / "cache"))
    launched = []
    monkeypatch.setattr(app_module.ft, "app", lambda target, **kwargs: launched.append(target))
    return launched


def test_wrong_argument_count_prints_usage(fake_flet, capsys):
    assert app_module.run(["m3u-viewer"]) == errno.EINVAL
    assert app_module.run(["m3u-viewer", "a.m3u", "b.m3u"]) == errno.EINVAL
    assert "Usage" in capsys.readouterr().err
    assert fake_flet == []


def test_unreadable_playlist_exits_with_os_error(fake_flet, tmp_path):
    assert app_module.run(["m3u-viewer", str(tmp_path / "missing.m3u")]) == errno.ENOENT
    assert fake_flet == []


def test_playlist_without_channels_exits_non_zero(fake_flet, write_playlist):
    path = write_playlist("#EXTM3U\n# nothing here\n")
    status = app_module.run(["m3u-viewer", path])
    assert status != 0
    assert status == getattr(errno, "ENODATA", errno.EINVAL)
    assert fake_flet == []


def test_valid_playlist_opens_the_viewer(fake_flet, write_playlist):
    path = write_playlist(SAMPLE_PLAYLIST)
    assert app_module.run(["m3u-viewer", path]) == 0
    assert len(fake_flet) == 1
    assert callable(fake_flet[0])


def test_main_exits_with_run_status(monkeypatch):
    monkeypatch.setattr(app_module.sys, "argv", ["m3u-viewer"])
    with pytest.raises(SystemExit) as exc_info:
        app_module.main()
    assert exc_info.value.code == errno.EINVAL


def test_playlist_url_is_downloaded(fake_flet, monkeypatch):
    requested = []

    async def fake_parse_from_url(url, timeout=None):
        requested.append((url, timeout))
        return app_module.M3UParser.parse_lines(SAMPLE_PLAYLIST.splitlines(), source=url)

    monkeypatch.setenv("M3U_VIEWER_PLAYLIST_TIMEOUT", "30")
    monkeypatch.setattr(app_module.M3UParser, "parse_from_url", fake_parse_from_url)

    assert app_module.run(["m3u-viewer", "https://provider.example/list.m3u"]) == 0
    assert requested == [("https://provider.example/list.m3u", 30.0)]
    assert len(fake_flet) == 1
