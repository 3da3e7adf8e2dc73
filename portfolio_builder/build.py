"""
Build driver: scan projects, process their assets, compile pages and
write everything under the output directory.

    output/index.html, about.html, style.css, assets/*
    output/<type>/index.html
    output/<type>/<slug>/index.html
    output/<type>/<slug>/images/*
"""

import shutil
from contextlib import nullcontext
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests

from .assets import ThumbnailFetcher, copy_assets, process_project_assets
from .config import SiteConfig
from .content import IMAGES_DIRNAME, collect_projects, project_types
from .media import build_media_items, placeholder_thumbnail, select_thumbnail
from .pages import (
    ProjectCard,
    create_jinja_env,
    render_about_page,
    render_css,
    render_home_page,
    render_project_page,
    render_type_page,
    write_page,
)
from .report import BuildReport


@dataclass(frozen=True)
class SitePaths:
    """Where a site's inputs live and where its output goes."""

    root: Path
    output_dir: Optional[Path] = None

    @property
    def projects_dir(self) -> Path:
        return self.root / 'projects'

    @property
    def assets_dir(self) -> Path:
        return self.root / 'assets'

    @property
    def about_path(self) -> Path:
        return self.root / 'about.md'

    @property
    def output(self) -> Path:
        return self.output_dir or self.root / 'output'


def listing_thumbnail(project, fallbacks, project_out: Path):
    """
    Thumbnail for a project's listing card. A video thumbnail that never
    made it to disk is swapped for the placeholder.
    """
    thumbnail = select_thumbnail(project, fallbacks)
    if thumbnail.kind == 'video':
        name = thumbnail.path.rsplit('/', 1)[-1]
        if not (project_out / IMAGES_DIRNAME / name).exists():
            return placeholder_thumbnail()
    return thumbnail


def build_site(paths: SitePaths, config: SiteConfig, session=None,
               report: Optional[BuildReport] = None, clean: bool = False) -> BuildReport:
    """
    Build the complete static site.

    Raises ContentError if the projects directory can't be read; every
    other failure is recorded on the returned report.
    """
    report = report or BuildReport()
    output_dir = paths.output

    report.info("Building portfolio...\n")
    projects = collect_projects(paths.projects_dir, report)
    report.info(f"Found {len(projects)} projects\n")

    if clean and output_dir.exists():
        shutil.rmtree(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    env = create_jinja_env()

    cards_by_type = {}
    # a session we open here is closed once the downloads are done
    session_context = nullcontext(session) if session else requests.Session()
    with session_context as session:
        fetcher = ThumbnailFetcher(session=session, timeout=config.network.timeout)
        for project in projects:
            report.info(f"  Processing {project.type}/{project.slug}...")
            project_out = output_dir / project.type / project.slug

            fallbacks = process_project_assets(
                project, project_out / IMAGES_DIRNAME, config, fetcher, report
            )
            items = build_media_items(project, fallbacks)
            write_page(project_out / 'index.html', render_project_page(env, project, items),
                       output_dir, report)

            card = ProjectCard(project, listing_thumbnail(project, fallbacks, project_out))
            cards_by_type.setdefault(project.type, []).append(card)

    copy_assets(paths.assets_dir, output_dir)

    types = project_types(projects)
    write_page(output_dir / 'index.html',
               render_home_page(env, config, types, paths.assets_dir), output_dir, report)

    for project_type in types:
        write_page(output_dir / project_type / 'index.html',
                   render_type_page(env, project_type, cards_by_type[project_type]),
                   output_dir, report)

    write_page(output_dir / 'about.html', render_about_page(env, paths.about_path),
               output_dir, report)
    write_page(output_dir / 'style.css', render_css(env, config), output_dir, report)

    if report.ok:
        report.info(f"\nSite built to {output_dir}/")
    else:
        report.info(f"\nSite built to {output_dir}/ with {len(report.errors)} error(s)")
    return report
