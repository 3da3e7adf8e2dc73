import re
from pathlib import Path

import pytest

from portfolio_builder.config import SiteConfig, config_from_dict
from portfolio_builder.content import Project
from portfolio_builder.media import build_media_items, select_thumbnail
from portfolio_builder.pages import (
    ProjectCard,
    create_jinja_env,
    render_about_page,
    render_css,
    render_home_page,
    render_project_page,
    render_type_page,
    type_label,
)


@pytest.fixture
def env():
    return create_jinja_env()


def make_project(**kwargs):
    defaults = dict(type='photo-video', slug='bust', path=Path('/tmp/bust'), title='Bust',
                    date='2024')
    defaults.update(kwargs)
    return Project(**defaults)


def test_type_label():
    assert type_label('photo-video') == 'Photo-Video'
    assert type_label('sculpture') == 'Sculpture'


def test_css_uses_config_tokens(env):
    config = config_from_dict({'design': {'colors': {'link': '#123456'}, 'homepage_width': '80vw'}})

    css = render_css(env, config)

    assert 'color: #123456;' in css
    assert 'width: 80vw;' in css
    assert 'font-family: "Times New Roman", Times, serif;' in css
    assert '&#34;' not in css
    assert '{{' not in css


def test_project_page_with_carousel_and_statement(env):
    project = make_project(
        images=('01-a.jpg', '02-b.jpg'),
        pdfs=('03-c.pdf',),
        vimeos=('https://vimeo.com/77',),
        statement='<p><strong>bold</strong> text</p>',
        materials='Bronze',
    )

    html = render_project_page(env, project, build_media_items(project))

    assert 'href="../../style.css"' in html
    assert '&larr; Back to Photo-Video' in html
    assert 'class="carousel-container"' in html
    assert html.count('class="carousel-slide"') == 4
    assert html.count('onclick="carouselGoTo(') == 4
    assert 'https://player.vimeo.com/video/77' in html
    assert '<div class="statement">' in html
    assert '<strong>bold</strong>' in html
    assert '<span class="materials">Bronze</span>' in html
    # each image opens the popup at its own position
    assert re.findall(r'openImagePopup\((\d+)\)', html) == ['0', '1']


def test_project_page_without_statement_or_media(env):
    project = make_project()

    html = render_project_page(env, project, [])

    assert 'No media available' in html
    assert 'class="statement"' not in html
    assert 'class="materials"' not in html


def test_single_item_has_no_carousel_controls(env):
    project = make_project(images=('01-a.jpg',))

    html = render_project_page(env, project, build_media_items(project))

    assert 'class="carousel-slide"' in html
    assert 'carousel-controls' not in html


def test_titles_are_escaped(env):
    project = make_project(title='<script>x</script>')

    html = render_project_page(env, project, [])

    assert '<h1>&lt;script&gt;x&lt;/script&gt;</h1>' in html


def test_type_page_cards(env):
    project = make_project(images=('01-a.jpg',), vimeos=('https://vimeo.com/5',))
    pdf_project = make_project(slug='zine', title='Zine', pdfs=('zine.pdf',))
    cards = [ProjectCard(project, select_thumbnail(project)),
             ProjectCard(pdf_project, select_thumbnail(pdf_project))]

    html = render_type_page(env, 'photo-video', cards)

    assert 'href="../style.css"' in html
    assert '<h2>PHOTO-VIDEO</h2>' in html
    assert 'src="bust/images/01-a-thumb.webp"' in html
    assert 'vimeo-5-thumb.jpg' not in html
    assert 'href="bust/index.html"' in html
    assert 'data="zine/images/zine.pdf"' in html
    assert '<p class="date">2024</p>' in html


def test_home_page_lists_sorted_types_and_about(env, tmp_path):
    html = render_home_page(env, SiteConfig(), ['sculpture', 'print'], tmp_path)

    assert 'href="style.css"' in html
    assert html.index('PRINT') < html.index('SCULPTURE')
    assert '<a href="about.html">ABOUT</a>' in html
    assert 'skeleton-art' not in html
    assert 'flame-art' not in html


def test_home_page_decorations_when_present(env, tmp_path):
    (tmp_path / 'skeleton.gif').write_bytes(b'GIF89a')
    (tmp_path / 'flame.gif').write_bytes(b'GIF89a')

    html = render_home_page(env, SiteConfig(), [], tmp_path)

    assert html.count('src="assets/skeleton.gif"') == 2
    assert 'src="assets/flame.gif"' in html


def test_about_page(env, tmp_path):
    about = tmp_path / 'about.md'
    about.write_text("---\nlayout: x\n---\n# Hello\n", encoding='utf-8')

    html = render_about_page(env, about)

    assert '<h1>Hello</h1>' in html
    assert 'layout' not in html


def test_about_page_placeholder(env, tmp_path):
    html = render_about_page(env, tmp_path / 'about.md')

    assert 'No about content found' in html
