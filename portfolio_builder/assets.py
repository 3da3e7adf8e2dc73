"""
Asset pipeline.

For each project:
  - every image becomes <name>.webp (full size) and <name>-thumb.webp
  - PDFs are copied as-is
  - each Vimeo/YouTube video gets <provider>-<id>-thumb.jpg from the
    provider's thumbnail CDN, unless that file is already there

Images and thumbnail downloads within a project run concurrently. A
failure on one item is reported and never stops the others.
"""

import shutil
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Optional
from urllib.parse import urljoin

import requests
from PIL import Image, ImageOps

from .config import ImageSettings, SiteConfig
from .content import Project
from .media import PLACEHOLDER_THUMBNAIL, full_size_name, thumb_name, video_ids, video_thumbnail_name
from .report import BuildReport


VIMEO_THUMBNAIL_URL = 'https://vumbnail.com/{id}.jpg'
YOUTUBE_THUMBNAIL_URL = 'https://img.youtube.com/vi/{id}/{variant}.jpg'
YOUTUBE_VARIANTS = ('maxresdefault', 'hqdefault')   # best first, then the reliable one

REDIRECT_CODES = {301, 302, 303, 307, 308}

PLACEHOLDER_SVG = '''<svg xmlns="http://www.w3.org/2000/svg" width="400" height="300" viewBox="0 0 400 300">
  <rect width="400" height="300" fill="#F0F0F0"/>
  <text x="200" y="155" font-family="serif" font-size="20" text-anchor="middle" fill="#666666">No preview</text>
</svg>
'''


class FetchError(Exception):
    """Raised when a thumbnail cannot be downloaded."""


# --- Images ---

def target_size(width: int, height: int, cap: int) -> tuple:
    """Size for a derivative capped at `cap` px wide. Never upscales."""
    if width <= cap:
        return width, height
    return cap, max(1, round(cap / width * height))


def _prepare(img: Image.Image) -> Image.Image:
    """Apply EXIF rotation and pick a mode WebP can encode."""
    img = ImageOps.exif_transpose(img)
    if img.mode in ('RGBA', 'LA', 'P') or 'transparency' in img.info:
        return img.convert('RGBA')
    if img.mode != 'RGB':
        return img.convert('RGB')
    return img


def optimize_image(source: Path, dest_dir: Path, settings: ImageSettings) -> tuple:
    """
    Write the full-size and thumbnail WebP derivatives of one image.

    Returns the two paths written. Decode/encode errors propagate; the
    caller decides on the fallback.
    """
    full_path = dest_dir / full_size_name(source.name)
    thumb_path = dest_dir / thumb_name(source.name)

    with Image.open(source) as original:
        img = _prepare(original)
        width, height = img.size

        full = img.resize(target_size(width, height, settings.max_width), Image.BICUBIC)
        full.save(full_path, 'WEBP', quality=settings.quality)

        # Lanczos keeps the smaller listing images sharp
        thumb = img.resize(target_size(width, height, settings.thumbnail_width), Image.LANCZOS)
        thumb.save(thumb_path, 'WEBP', quality=settings.thumbnail_quality)

    return full_path, thumb_path


def process_image(source: Path, dest_dir: Path, settings: ImageSettings,
                  report: BuildReport) -> bool:
    """
    Optimize one image, copying the original verbatim if that fails.

    Returns True when the WebP derivatives were written.
    """
    try:
        full_path, thumb_path = optimize_image(source, dest_dir, settings)
    except (OSError, ValueError, Image.DecompressionBombError) as e:
        report.error(f"Could not optimize {source.name}: {e}; copying original")
        try:
            shutil.copyfile(source, dest_dir / source.name)
        except OSError as copy_error:
            report.error(f"Could not copy {source.name}: {copy_error}")
        return False

    report.info(f"    Optimized {source.name} -> {full_path.name} + {thumb_path.name}")
    return True


def copy_pdf(source: Path, dest_dir: Path) -> Path:
    dest = dest_dir / source.name
    shutil.copyfile(source, dest)
    return dest


# --- Video thumbnails ---

class ThumbnailFetcher:
    """Downloads video thumbnails from the Vimeo and YouTube CDNs."""

    def __init__(self, session=None, timeout: float = 15.0):
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get(self, url: str):
        try:
            return self.session.get(url, timeout=self.timeout, allow_redirects=False)
        except requests.RequestException as e:
            raise FetchError(f"{url}: {e}") from e

    def download(self, url: str, dest: Path) -> Path:
        """
        Fetch `url` into `dest`, following at most one redirect.

        `dest` is only written after a 200 response.
        """
        response = self._get(url)
        if response.status_code in REDIRECT_CODES and response.headers.get('Location'):
            location = urljoin(url, response.headers['Location'])
            response = self._get(location)

        if response.status_code != 200:
            raise FetchError(f"Failed to download {url}: HTTP {response.status_code}")

        dest.write_bytes(response.content)
        return dest

    def fetch_vimeo(self, video_id: str, dest: Path) -> Path:
        return self.download(VIMEO_THUMBNAIL_URL.format(id=video_id), dest)

    def fetch_youtube(self, video_id: str, dest: Path) -> Path:
        """Try the max-resolution thumbnail, then fall back once to hqdefault."""
        best, fallback = YOUTUBE_VARIANTS
        try:
            return self.download(YOUTUBE_THUMBNAIL_URL.format(id=video_id, variant=best), dest)
        except FetchError:
            return self.download(YOUTUBE_THUMBNAIL_URL.format(id=video_id, variant=fallback), dest)

    def fetch(self, provider: str, video_id: str, dest: Path) -> Path:
        if provider == 'vimeo':
            return self.fetch_vimeo(video_id, dest)
        return self.fetch_youtube(video_id, dest)


def fetch_video_thumbnail(fetcher: ThumbnailFetcher, provider: str, video_id: str,
                          dest_dir: Path, report: BuildReport) -> bool:
    """Download one video thumbnail unless it is already cached on disk."""
    name = video_thumbnail_name(provider, video_id)
    dest = dest_dir / name
    if dest.exists():
        report.info(f"    Thumbnail already exists: {name}")
        return True

    try:
        fetcher.fetch(provider, video_id, dest)
    except FetchError as e:
        report.error(f"Could not download {provider} thumbnail for {video_id}: {e}")
        return False
    except OSError as e:
        report.error(f"Could not save {provider} thumbnail {name}: {e}")
        return False

    report.info(f"    Downloaded {provider} thumbnail: {name}")
    return True


# --- Per-project driver ---

def process_project_assets(project: Project, dest_dir: Path, config: SiteConfig,
                           fetcher: ThumbnailFetcher, report: BuildReport) -> frozenset:
    """
    Produce every asset a project page links to under `dest_dir`.

    Returns the names of images that fell back to a verbatim copy.
    """
    dest_dir.mkdir(parents=True, exist_ok=True)
    source_dir = project.images_dir
    has_images_dir = source_dir.is_dir()

    if has_images_dir:
        for pdf in project.pdfs:
            try:
                copy_pdf(source_dir / pdf, dest_dir)
            except OSError as e:
                report.error(f"Could not copy {pdf}: {e}")
                continue
            report.info(f"    Copied {pdf}")

    fallbacks = set()
    with ThreadPoolExecutor(max_workers=max(1, config.network.workers)) as pool:
        image_jobs = {}
        if has_images_dir:
            for image in project.images:
                future = pool.submit(process_image, source_dir / image, dest_dir,
                                     config.images, report)
                image_jobs[future] = image

        thumbnail_jobs = [
            pool.submit(fetch_video_thumbnail, fetcher, provider, video_id, dest_dir, report)
            for provider, video_id in video_ids(project)
        ]

        for future in as_completed(list(image_jobs) + thumbnail_jobs):
            ok = future.result()
            if not ok and future in image_jobs:
                fallbacks.add(image_jobs[future])

    return frozenset(fallbacks)


# --- Site assets ---

def copy_assets(assets_dir: Optional[Path], output_dir: Path) -> Path:
    """
    Copy top-level files from assets/ into output/assets/.

    A placeholder thumbnail is written as well unless the site ships its own.
    """
    dest_dir = output_dir / 'assets'
    dest_dir.mkdir(parents=True, exist_ok=True)

    if assets_dir and assets_dir.is_dir():
        for item in sorted(assets_dir.iterdir()):
            if item.is_file():
                shutil.copy2(item, dest_dir / item.name)

    placeholder = dest_dir / PLACEHOLDER_THUMBNAIL
    if not placeholder.exists():
        placeholder.write_text(PLACEHOLDER_SVG, encoding='utf-8')

    return dest_dir
