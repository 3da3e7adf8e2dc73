"""
Content scanning.

Projects live in a fixed two-level layout:

    projects/<type>/<slug>/info.md        front matter + markdown statement
    projects/<type>/<slug>/images/*       images and PDFs, shown in filename order

Each info.md is parsed once into an immutable Project record.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import frontmatter
import markdown
import yaml

from .report import BuildReport


INFO_FILENAME = 'info.md'
IMAGES_DIRNAME = 'images'

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.gif', '.webp'}
PDF_EXTENSIONS = {'.pdf'}


class ContentError(Exception):
    """Raised when the projects root itself cannot be read."""


@dataclass(frozen=True)
class Project:
    type: str
    slug: str
    path: Path
    title: str
    date: str = ''
    materials: str = ''
    statement: str = ''          # rendered HTML, empty when info.md has no body
    images: tuple = ()
    pdfs: tuple = ()
    vimeos: tuple = ()
    youtubes: tuple = ()

    @property
    def images_dir(self) -> Path:
        return self.path / IMAGES_DIRNAME


# --- Parsing helpers ---

def render_markdown(text: str) -> str:
    """Render markdown text to HTML."""
    return markdown.markdown(text, extensions=['extra'])


def as_list(value) -> tuple:
    """Normalize a front matter value that may be a string or a list."""
    if value is None or value == '':
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(v).strip() for v in value if v is not None and str(v).strip())
    return (str(value).strip(),)


def as_text(value, default: str = '') -> str:
    # YAML turns bare dates and numbers into objects; keep them opaque
    if value is None:
        return default
    return str(value)


def list_media(images_dir: Path) -> tuple:
    """
    Split a project's images folder into (images, pdfs).

    Both are sorted by filename; zero-padded prefixes control display order.
    Anything that is neither an image nor a PDF is ignored.
    """
    if not images_dir.is_dir():
        return (), ()

    names = sorted(p.name for p in images_dir.iterdir() if p.is_file())
    images = tuple(n for n in names if Path(n).suffix.lower() in IMAGE_EXTENSIONS)
    pdfs = tuple(n for n in names if Path(n).suffix.lower() in PDF_EXTENSIONS)
    return images, pdfs


# --- Scanning ---

def _subdirectories(path: Path) -> list:
    return sorted(
        p.name for p in path.iterdir()
        if p.is_dir() and not p.name.startswith('.')
    )


def get_project_types(projects_dir: Path) -> list:
    """Top-level directories under the projects root, sorted."""
    try:
        return _subdirectories(projects_dir)
    except OSError as e:
        raise ContentError(f"Cannot read projects directory {projects_dir}: {e}") from e


def get_projects_in_type(projects_dir: Path, project_type: str) -> list:
    return _subdirectories(projects_dir / project_type)


def parse_project(project_dir: Path, project_type: str,
                  report: Optional[BuildReport] = None) -> Optional[Project]:
    """
    Parse a project's info.md.

    Returns None (after a warning) when the project has no info.md, which
    leaves it out of the build entirely.
    """
    slug = project_dir.name
    info_path = project_dir / INFO_FILENAME
    if not info_path.is_file():
        if report:
            report.warn(f"No {INFO_FILENAME} found for {project_type}/{slug}, skipping")
        return None

    try:
        post = frontmatter.load(info_path)
    except (yaml.YAMLError, UnicodeDecodeError) as e:
        if report:
            report.error(f"Could not parse {project_type}/{slug}/{INFO_FILENAME}: {e}")
        return None

    images, pdfs = list_media(project_dir / IMAGES_DIRNAME)

    body = post.content or ''
    statement = render_markdown(body) if body.strip() else ''

    return Project(
        type=project_type,
        slug=slug,
        path=project_dir,
        title=as_text(post.get('title')) or slug,
        date=as_text(post.get('date')),
        materials=as_text(post.get('materials')),
        statement=statement,
        images=images,
        pdfs=pdfs,
        vimeos=as_list(post.get('vimeo')),
        youtubes=as_list(post.get('youtube')),
    )


def collect_projects(projects_dir: Path, report: Optional[BuildReport] = None) -> list:
    """Parse every project under the projects root, skipping ones without info.md."""
    if not projects_dir.is_dir():
        raise ContentError(f"Projects directory not found: {projects_dir}")

    projects = []
    for project_type in get_project_types(projects_dir):
        try:
            slugs = get_projects_in_type(projects_dir, project_type)
        except OSError as e:
            if report:
                report.warn(f"Cannot read {project_type}/, skipping: {e}")
            continue
        for slug in slugs:
            project = parse_project(projects_dir / project_type / slug, project_type, report)
            if project is not None:
                projects.append(project)
    return projects


def project_types(projects: list) -> list:
    """Distinct types that have at least one buildable project, sorted."""
    return sorted({p.type for p in projects})
