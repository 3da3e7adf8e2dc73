import json
from pathlib import Path

import pytest
import requests
from PIL import Image

from portfolio_builder import cli
from portfolio_builder.build import SitePaths, build_site
from portfolio_builder.config import SiteConfig
from portfolio_builder.content import ContentError
from portfolio_builder.report import BuildReport

from conftest import FakeResponse, FakeSession


def build(site_root, session, **kwargs):
    report = BuildReport(quiet=True)
    build_site(SitePaths(site_root), SiteConfig(), session=session, report=report, **kwargs)
    return report


def test_output_layout(site_root, fake_session):
    report = build(site_root, fake_session)
    output = site_root / 'output'

    assert report.ok
    for page in ('index.html', 'about.html', 'style.css', 'assets/placeholder.svg',
                 'sculpture/index.html', 'sculpture/bust/index.html',
                 'video/index.html', 'video/reel/index.html'):
        assert (output / page).is_file(), page


def test_two_derivatives_per_image_within_width_cap(site_root, fake_session):
    build(site_root, fake_session)
    images = site_root / 'output' / 'sculpture' / 'bust' / 'images'

    for stem, (width, height) in {'01-front': (2400, 1600), '02-side': (640, 480)}.items():
        for name, cap in ((f'{stem}.webp', 1920), (f'{stem}-thumb.webp', 1200)):
            with Image.open(images / name) as img:
                assert img.width <= cap
                assert img.width == min(width, cap)
                assert abs(img.height - img.width * height / width) <= 1


def test_project_without_info_is_excluded(site_root, fake_session):
    report = build(site_root, fake_session)
    output = site_root / 'output'

    assert not (output / 'sculpture' / 'no-info').exists()
    assert 'no-info' not in (output / 'sculpture' / 'index.html').read_text()
    assert (output / 'sculpture' / 'bust' / 'index.html').exists()
    assert any('no-info' in w for w in report.warnings)


def test_listing_thumbnail_prefers_local_image(site_root, fake_session):
    build(site_root, fake_session)

    listing = (site_root / 'output' / 'sculpture' / 'index.html').read_text()

    assert 'src="bust/images/01-front-thumb.webp"' in listing
    assert 'vimeo-123456789-thumb.jpg' not in listing


def test_second_build_makes_no_network_calls(site_root, fake_session):
    build(site_root, fake_session)
    assert fake_session.calls

    second = FakeSession()
    report = build(site_root, second)

    assert second.calls == []
    assert report.ok


def test_clean_build_refetches(site_root, fake_session):
    build(site_root, fake_session)

    second = FakeSession()
    build(site_root, second, clean=True)

    assert second.calls


def test_failed_thumbnail_uses_placeholder(site_root, failing_session):
    report = build(site_root, failing_session)

    listing = (site_root / 'output' / 'video' / 'index.html').read_text()
    assert 'src="../assets/placeholder.svg"' in listing
    assert len(report.errors) == 3   # two Vimeo videos and one YouTube video
    assert (site_root / 'output' / 'video' / 'reel' / 'index.html').exists()


def test_home_and_statement(site_root, fake_session):
    build(site_root, fake_session)
    output = site_root / 'output'

    home = (output / 'index.html').read_text(encoding='utf-8')
    assert '<a href="sculpture/">SCULPTURE</a>' in home
    assert '<a href="video/">VIDEO</a>' in home

    detail = (output / 'sculpture' / 'bust' / 'index.html').read_text()
    assert '<strong>bold</strong>' in detail
    reel = (output / 'video' / 'reel' / 'index.html').read_text()
    assert 'class="statement"' not in reel

    about = (output / 'about.html').read_text()
    assert '<h1>About me</h1>' in about


def test_missing_projects_root(tmp_path):
    with pytest.raises(ContentError):
        build_site(SitePaths(tmp_path), SiteConfig(), session=FakeSession(),
                   report=BuildReport(quiet=True))


# --- CLI ---

def test_cli_build_exit_codes(site_root, monkeypatch):
    monkeypatch.setattr(requests, 'Session', lambda: FakeSession())
    assert cli.main(['--root', str(site_root), '--quiet']) == 0

    monkeypatch.setattr(requests, 'Session',
                        lambda: FakeSession(default=FakeResponse(500)))
    assert cli.main(['--root', str(site_root), '--quiet', '--clean']) == 1


def test_cli_missing_root(tmp_path):
    assert cli.main(['--root', str(tmp_path / 'missing')]) == 1


def test_cli_bad_config(site_root):
    (site_root / 'site.json').write_text(json.dumps({'colour': 'red'}))

    assert cli.main(['--root', str(site_root)]) == 1


def test_cli_new_project(tmp_path):
    assert cli.main(['--root', str(tmp_path), '--new', 'print/first-print', '--title', 'First']) == 0

    info = tmp_path / 'projects' / 'print' / 'first-print' / 'info.md'
    assert 'title: First' in info.read_text()


def test_cli_mistyped_config_fails_before_building(site_root):
    (site_root / 'site.json').write_text(json.dumps({'images': {'max_width': '800'}}))

    assert cli.main(['--root', str(site_root), '--quiet']) == 1
    assert not (site_root / 'output').exists()


def test_unwritable_thumbnail_does_not_abort_build(site_root, fake_session, monkeypatch):
    write_bytes = Path.write_bytes

    def disk_full(self, data):
        if self.name.endswith('-thumb.jpg'):
            raise OSError(28, 'No space left on device')
        return write_bytes(self, data)
    monkeypatch.setattr(Path, 'write_bytes', disk_full)

    report = build(site_root, fake_session)

    assert len(report.errors) == 3
    assert (site_root / 'output' / 'index.html').exists()
    listing = (site_root / 'output' / 'video' / 'index.html').read_text()
    assert 'src="../assets/placeholder.svg"' in listing


def test_default_session_is_closed(site_root, monkeypatch):
    opened = []

    def open_session():
        opened.append(FakeSession())
        return opened[-1]
    monkeypatch.setattr(requests, 'Session', open_session)

    build(site_root, None)

    assert len(opened) == 1
    assert opened[0].calls
    assert opened[0].closed


def test_injected_session_is_left_open(site_root, fake_session):
    build(site_root, fake_session)

    assert not fake_session.closed
