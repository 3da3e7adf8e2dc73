"""
Preview documents and reverse-sync of design tokens.

write_preview() renders the home page with the generated stylesheet inlined
into a single file that can be opened and tweaked in a browser. Once the
CSS or the homepage title in that file has been edited, sync_from_preview()
reads the known values back out and stores them in the JSON config file,
which stays the only source of truth.

Extraction is plain pattern matching over the first rule for each selector;
values that can't be found are left alone.
"""

import json
import re
from html import unescape
from pathlib import Path

from .config import SiteConfig, config_from_dict, config_to_dict
from .pages import create_jinja_env, render_css, render_home_page


class SyncError(Exception):
    """Raised when a preview document can't be used for syncing."""


STYLE_RE = re.compile(r'<style[^>]*>(.*?)</style>', re.DOTALL | re.IGNORECASE)
COMMENT_RE = re.compile(r'/\*.*?\*/', re.DOTALL)
RULE_RE = re.compile(r'([^{}]+)\{([^{}]*)\}')

# Homepage text shown in the preview hero
TEXT_MAPPINGS = [
    (re.compile(r'<h1>([^<]+)</h1>'), 'homepage.title'),
    (re.compile(r'<p class="flame-text">([^<]+)</p>'), 'homepage.subtitle'),
]

# (selector, property, config key, which whitespace-separated part of the value)
TOKEN_MAPPINGS = [
    ('body', 'font-family', 'design.fonts.body', None),
    ('body', 'font-size', 'design.font_size.body', None),
    ('body', 'color', 'design.colors.text', None),
    ('body', 'background-color', 'design.colors.bg', None),
    ('body:has(.homepage-container)', 'background-color', 'design.colors.homepage_bg', None),
    ('.homepage-container', 'width', 'design.homepage_width', None),
    ('.homepage-container', 'padding', 'design.homepage_padding', None),
    ('.homepage-container', 'border', 'design.homepage_border', None),
    ('.homepage-container', 'background-color', 'design.homepage_bg', None),
    ('.header-with-skeletons', 'gap', 'design.skeleton_gap', None),
    ('.skeleton-art', 'width', 'design.skeleton_width', None),
    ('.skeleton-art', 'padding', 'design.skeleton_padding', None),
    ('.skeleton-art', 'border', 'design.skeleton_border', None),
    ('.skeleton-art', 'background-color', 'design.colors.skeleton_bg', None),
    ('.flame-art', 'background-color', 'design.colors.flame_bg', None),
    ('.flame-art', 'border', 'design.colors.flame_border', -1),
    ('a:link', 'color', 'design.colors.link', None),
    ('a:visited', 'color', 'design.colors.link_visited', None),
    ('a:hover', 'color', 'design.colors.link_hover', None),
    ('.site-header', 'background-color', 'design.colors.header_bg', None),
    ('.site-header', 'border', 'design.colors.header_border', -1),
    ('.site-header h1', 'color', 'design.colors.header_text', None),
    ('.site-header h1', 'font-size', 'design.font_size.header_h1', None),
    ('.flame-text', 'color', 'design.colors.flame_text', None),
    ('.flame-text', 'font-size', 'design.font_size.header_subtitle', None),
    ('.type-list a', 'font-size', 'design.font_size.type_links', None),
    ('.type-section h2', 'font-size', 'design.font_size.type_section', None),
    ('.project h1', 'font-size', 'design.font_size.project_title', None),
    ('.project-card h3', 'font-size', 'design.font_size.project_card', None),
    ('.about-content code', 'font-family', 'design.fonts.monospace', None),
]


# --- Preview ---

def write_preview(config: SiteConfig, preview_path: Path, types: list = (),
                  assets_dir: Path = None) -> Path:
    """Write a standalone home page with the stylesheet inlined."""
    env = create_jinja_env()
    html = render_home_page(env, config, list(types), assets_dir,
                            inline_css=render_css(env, config))
    preview_path.write_text(html, encoding='utf-8')
    return preview_path


# --- CSS scraping ---

def _normalize_selector(selector: str) -> str:
    return ' '.join(selector.split())


def parse_rules(css: str) -> list:
    """Flat list of (selectors, declarations) in source order."""
    css = COMMENT_RE.sub('', css)
    rules = []
    for match in RULE_RE.finditer(css):
        selectors = [_normalize_selector(s) for s in match.group(1).split(',')]
        declarations = {}
        for declaration in match.group(2).split(';'):
            if ':' not in declaration:
                continue
            prop, value = declaration.split(':', 1)
            declarations[prop.strip().lower()] = value.strip()
        rules.append((selectors, declarations))
    return rules


def find_value(rules: list, selector: str, prop: str):
    """Value of `prop` in the first rule that targets `selector` and sets it."""
    selector = _normalize_selector(selector)
    for selectors, declarations in rules:
        if selector in selectors and prop in declarations:
            return declarations[prop]
    return None


def extract_tokens(css: str) -> dict:
    """Config key -> value for every mapped token present in `css`."""
    rules = parse_rules(css)
    tokens = {}
    for selector, prop, key, part in TOKEN_MAPPINGS:
        value = find_value(rules, selector, prop)
        if not value:
            continue
        if part is not None:
            value = value.split()[part]
        tokens[key] = value
    return tokens


def extract_text(html: str) -> dict:
    """Config key -> value for the homepage title and subtitle in `html`."""
    values = {}
    for pattern, key in TEXT_MAPPINGS:
        match = pattern.search(html)
        if match and match.group(1).strip():
            values[key] = unescape(match.group(1).strip())
    return values


# --- Config update ---

def _set_key(data: dict, dotted_key: str, value) -> None:
    *parents, leaf = dotted_key.split('.')
    node = data
    for part in parents:
        node = node.setdefault(part, {})
    node[leaf] = value


def _get_key(data: dict, dotted_key: str):
    node = data
    for part in dotted_key.split('.'):
        node = node[part]
    return node


def sync_from_preview(preview_path: Path, config_path: Path) -> list:
    """
    Copy design tokens from a preview document's <style> block, plus the
    homepage title and subtitle, into the JSON config. Returns (key, old,
    new) for every value that changed.
    """
    if not preview_path.exists():
        raise SyncError(f"{preview_path} not found. Create it with --write-preview first")

    html = preview_path.read_text(encoding='utf-8')
    match = STYLE_RE.search(html)
    if not match:
        raise SyncError(f"Could not find a <style> block in {preview_path}")

    if config_path.exists():
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    else:
        data = {}

    # Compare against effective values, defaults included
    current = config_to_dict(config_from_dict(data))

    changes = []
    found = extract_tokens(match.group(1))
    found.update(extract_text(html))
    for key, value in found.items():
        old = _get_key(current, key)
        if old == value:
            continue
        _set_key(data, key, value)
        changes.append((key, old, value))

    if changes:
        config_from_dict(data)
        with open(config_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write('\n')
    return changes
