from pathlib import Path

import pytest
import requests
from PIL import Image

from portfolio_builder.report import BuildReport


class FakeResponse:
    def __init__(self, status_code=200, content=b'\xff\xd8fake-jpeg', headers=None):
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}


class FakeSession:
    """Stands in for requests.Session; records every URL requested."""

    def __init__(self, responses=None, default=None):
        self.responses = responses or {}
        self.default = default or FakeResponse()
        self.calls = []
        self.closed = False

    def get(self, url, timeout=None, allow_redirects=True):
        self.calls.append(url)
        response = self.responses.get(url, self.default)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, list):
            return response.pop(0)
        return response

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


def make_image(path: Path, size=(800, 600), color=(200, 40, 40), fmt=None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new('RGB', size, color).save(path, fmt)
    return path


def write_info(project_dir: Path, text: str) -> Path:
    project_dir.mkdir(parents=True, exist_ok=True)
    info = project_dir / 'info.md'
    info.write_text(text, encoding='utf-8')
    return info


@pytest.fixture
def report():
    return BuildReport(quiet=True)


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def site_root(tmp_path):
    """
    A small site:
      sculpture/bust     two images (one wide), a PDF, a Vimeo link and a statement
      sculpture/no-info  images but no info.md
      video/reel         Vimeo + YouTube only, no images folder
    """
    projects = tmp_path / 'projects'

    bust = projects / 'sculpture' / 'bust'
    write_info(bust, (
        "---\n"
        "title: Bronze Bust\n"
        "date: 2024-05-01\n"
        "materials: Bronze, marble\n"
        "vimeo: https://vimeo.com/123456789\n"
        "---\n"
        "**bold** text\n"
    ))
    make_image(bust / 'images' / '01-front.jpg', size=(2400, 1600))
    make_image(bust / 'images' / '02-side.png', size=(640, 480))
    (bust / 'images' / '03-sketch.pdf').write_bytes(b'%PDF-1.4 fake')
    (bust / 'images' / 'notes.txt').write_text('ignored')

    make_image(projects / 'sculpture' / 'no-info' / 'images' / '01.jpg')

    write_info(projects / 'video' / 'reel', (
        "---\n"
        "title: Showreel\n"
        "date: '2023'\n"
        "vimeo:\n"
        "  - https://player.vimeo.com/video/555\n"
        "youtube: https://youtu.be/dQw4w9WgXcQ\n"
        "---\n"
    ))

    (tmp_path / 'about.md').write_text("# About me\n\nI make things.\n", encoding='utf-8')
    (tmp_path / 'assets').mkdir()
    return tmp_path


@pytest.fixture
def failing_session():
    return FakeSession(default=requests.ConnectionError('network down'))
