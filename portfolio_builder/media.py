"""
Media resolution: which items a project page shows, in which order, and
which file its listing card uses as a thumbnail.

The carousel shows every item; the popup only steps through images and
PDFs. Both are derived from the one list returned by build_media_items()
so their indices cannot drift apart.
"""

import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Optional

from .content import IMAGES_DIRNAME, Project


VIMEO_ID_RE = re.compile(r'(?:vimeo\.com/|player\.vimeo\.com/video/)(\d+)')

YOUTUBE_ID_RES = [
    re.compile(r'(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/embed/)([a-zA-Z0-9_-]{11})'),
    re.compile(r'youtube\.com/.*[?&]v=([a-zA-Z0-9_-]{11})'),
]

POPUP_KINDS = ('image', 'pdf')

PLACEHOLDER_THUMBNAIL = 'placeholder.svg'


@dataclass(frozen=True)
class MediaItem:
    kind: str        # 'image', 'pdf', 'vimeo' or 'youtube'
    src: str         # path relative to the project page, or an embed URL
    alt: str = ''

    @property
    def in_popup(self) -> bool:
        return self.kind in POPUP_KINDS


@dataclass(frozen=True)
class ThumbnailRef:
    path: str        # relative to the type listing page
    kind: str        # 'image', 'pdf', 'video' or 'placeholder'


# --- Video URLs ---

def get_vimeo_id(url: str) -> Optional[str]:
    match = VIMEO_ID_RE.search(url or '')
    return match.group(1) if match else None


def get_youtube_id(url: str) -> Optional[str]:
    """
    Extract a YouTube video ID. Handles:
      https://www.youtube.com/watch?v=VIDEO_ID
      https://youtu.be/VIDEO_ID
      https://www.youtube.com/embed/VIDEO_ID
      any youtube.com URL with a v= query parameter
    """
    for pattern in YOUTUBE_ID_RES:
        match = pattern.search(url or '')
        if match:
            return match.group(1)
    return None


def vimeo_embed_url(video_id: str) -> str:
    return f"https://player.vimeo.com/video/{video_id}"


def youtube_embed_url(video_id: str) -> str:
    return f"https://www.youtube.com/embed/{video_id}"


def video_thumbnail_name(provider: str, video_id: str) -> str:
    return f"{provider}-{video_id}-thumb.jpg"


def video_ids(project: Project) -> list:
    """(provider, id) pairs for every recognizable video, Vimeo first."""
    ids = []
    for url in project.vimeos:
        video_id = get_vimeo_id(url)
        if video_id:
            ids.append(('vimeo', video_id))
    for url in project.youtubes:
        video_id = get_youtube_id(url)
        if video_id:
            ids.append(('youtube', video_id))
    return ids


# --- Derivative names ---

def full_size_name(image: str) -> str:
    return f"{PurePosixPath(image).stem}.webp"


def thumb_name(image: str) -> str:
    return f"{PurePosixPath(image).stem}-thumb.webp"


# --- Media lists ---

def build_media_items(project: Project, fallbacks=()) -> list:
    """
    Ordered media for a project page: images, PDFs, Vimeo, YouTube.

    `fallbacks` names images whose optimization failed; those were copied
    verbatim, so the page points at the original file instead of the WebP.
    Video URLs without a recognizable ID are dropped.
    """
    items = []
    for image in project.images:
        name = image if image in fallbacks else full_size_name(image)
        items.append(MediaItem('image', f"{IMAGES_DIRNAME}/{name}", project.title))
    for pdf in project.pdfs:
        items.append(MediaItem('pdf', f"{IMAGES_DIRNAME}/{pdf}", project.title))
    for provider, video_id in video_ids(project):
        embed = vimeo_embed_url(video_id) if provider == 'vimeo' else youtube_embed_url(video_id)
        items.append(MediaItem(provider, embed, project.title))
    return items


def popup_items(items: list) -> list:
    """The images-and-PDFs view the popup steps through."""
    return [item for item in items if item.in_popup]


def popup_index(items: list, index: int) -> Optional[int]:
    """Position of items[index] within popup_items(items), None for videos."""
    if not items[index].in_popup:
        return None
    return sum(1 for item in items[:index] if item.in_popup)


def select_thumbnail(project: Project, fallbacks=()) -> ThumbnailRef:
    """
    Choose the listing thumbnail: first local image, else first PDF, else
    first Vimeo video, else first YouTube video. Only the first non-empty
    category is considered.
    """
    base = f"{project.slug}/{IMAGES_DIRNAME}"

    if project.images:
        image = project.images[0]
        name = image if image in fallbacks else thumb_name(image)
        return ThumbnailRef(f"{base}/{name}", 'image')

    if project.pdfs:
        return ThumbnailRef(f"{base}/{project.pdfs[0]}", 'pdf')

    if project.vimeos:
        video_id = get_vimeo_id(project.vimeos[0])
        if video_id:
            return ThumbnailRef(f"{base}/{video_thumbnail_name('vimeo', video_id)}", 'video')
    elif project.youtubes:
        video_id = get_youtube_id(project.youtubes[0])
        if video_id:
            return ThumbnailRef(f"{base}/{video_thumbnail_name('youtube', video_id)}", 'video')

    return placeholder_thumbnail()


def placeholder_thumbnail() -> ThumbnailRef:
    return ThumbnailRef(f"../assets/{PLACEHOLDER_THUMBNAIL}", 'placeholder')
