"""Create new project folders with a seeded info.md."""

from datetime import date
from pathlib import Path

import frontmatter

from .content import IMAGES_DIRNAME, INFO_FILENAME


SEED_BODY = '''Write the project statement here. Markdown is supported.

Images and PDFs go in the images/ folder and are shown in filename order,
so prefix them with numbers: 01-front.jpg, 02-detail.jpg, ...
'''


def create_project(projects_dir: Path, project_type: str, slug: str,
                   title: str = None) -> Path:
    """
    Create projects/<type>/<slug>/ with info.md and an empty images folder.

    An existing, non-empty info.md is never overwritten.
    """
    for part in (project_type, slug):
        if not part or part.startswith('.') or '/' in part or '\\' in part:
            raise ValueError(f"Invalid project path segment: {part!r}")

    project_dir = projects_dir / project_type / slug
    (project_dir / IMAGES_DIRNAME).mkdir(parents=True, exist_ok=True)

    info_path = project_dir / INFO_FILENAME
    needs_seed = not info_path.exists() or info_path.stat().st_size == 0
    if needs_seed:
        post = frontmatter.Post(
            content=SEED_BODY,
            title=title or slug.replace('-', ' ').title(),
            date=str(date.today().year),
            materials='',
        )
        info_path.write_text(frontmatter.dumps(post) + '\n', encoding='utf-8')

    return project_dir
