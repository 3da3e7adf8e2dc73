"""
Page compiler.

Turns projects and the site config into HTML/CSS text with Jinja2. The
render_* functions do no I/O apart from checking which decorative assets
exist; write_page() is the only thing that touches the output directory.

Relative links depend on page depth: project pages sit two levels below
the output root, type pages one, and home/about pages at the root.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import frontmatter
from jinja2 import Environment, FileSystemLoader, select_autoescape

from .config import SiteConfig
from .content import Project, render_markdown
from .media import MediaItem, ThumbnailRef, popup_index, popup_items
from .report import BuildReport


TEMPLATES_DIR = Path(__file__).parent / 'templates'

ABOUT_PLACEHOLDER = (
    '<p>No about content found. Create an <code>about.md</code> file in the project root.</p>'
)


@dataclass(frozen=True)
class ProjectCard:
    project: Project
    thumbnail: ThumbnailRef


@dataclass(frozen=True)
class Slide:
    index: int
    item: MediaItem
    popup_index: Optional[int]


def type_label(project_type: str) -> str:
    """'photo-video' -> 'Photo-Video'."""
    return '-'.join(word[:1].upper() + word[1:] for word in project_type.split('-'))


def create_jinja_env() -> Environment:
    """Create Jinja2 environment with the site's custom filters."""
    env = Environment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        autoescape=select_autoescape(['html']),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters['type_label'] = type_label
    return env


# --- Pages ---

def render_project_page(env: Environment, project: Project, items: list) -> str:
    """Project detail page: carousel over every item, popup over images and PDFs."""
    slides = [Slide(i, item, popup_index(items, i)) for i, item in enumerate(items)]
    template = env.get_template('project.html')
    return template.render(
        root='../../',
        project=project,
        slides=slides,
        carousel_media=[{'kind': item.kind, 'src': item.src} for item in items],
        popup_media=[{'kind': item.kind, 'src': item.src} for item in popup_items(items)],
    )


def render_type_page(env: Environment, project_type: str, cards: list) -> str:
    template = env.get_template('type.html')
    return template.render(root='../', type=project_type, cards=cards)


def _existing_asset(assets_dir: Optional[Path], name: str) -> Optional[str]:
    if assets_dir and name and (assets_dir / name).is_file():
        return name
    return None


def render_home_page(env: Environment, config: SiteConfig, types: list,
                     assets_dir: Optional[Path] = None, inline_css: str = None) -> str:
    """
    Home page: hero title, sorted type links and a fixed About link.

    The decorative GIFs are only included when they exist in assets/.
    """
    homepage = config.homepage
    template = env.get_template('home.html')
    return template.render(
        root='',
        homepage=homepage,
        types=sorted(types),
        skeleton_gif=_existing_asset(assets_dir, homepage.skeleton_gif),
        flame_gif=_existing_asset(assets_dir, homepage.flame_gif),
        inline_css=inline_css,
    )


def load_about_content(about_path: Optional[Path]) -> str:
    """Render about.md (front matter ignored), or a placeholder if it's missing."""
    if about_path is None or not about_path.exists():
        return ABOUT_PLACEHOLDER
    post = frontmatter.load(about_path)
    return render_markdown(post.content)


def render_about_page(env: Environment, about_path: Optional[Path]) -> str:
    template = env.get_template('about.html')
    return template.render(root='', about_content=load_about_content(about_path))


def render_css(env: Environment, config: SiteConfig) -> str:
    """Generate the global stylesheet from the config's design tokens."""
    template = env.get_template('style.css')
    return template.render(design=config.design)


# --- Output ---

def write_page(path: Path, text: str, output_dir: Path = None,
               report: Optional[BuildReport] = None) -> Path:
    """Write a compiled page, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding='utf-8')
    if report:
        shown = path.relative_to(output_dir) if output_dir else path
        report.info(f"Built: {shown.as_posix()}")
    return path
