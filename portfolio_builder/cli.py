"""
Command line entry point.

Usage:
    portfolio-build                          # Build output/ from projects/
    portfolio-build --clean                  # Remove output/ before building
    portfolio-build --write-preview test.html
    portfolio-build --sync-preview test.html # Copy edited design tokens into site.json
    portfolio-build --new sculpture/my-piece --title "My Piece"
"""

import argparse
import sys
from pathlib import Path

from .build import SitePaths, build_site
from .config import ConfigError, load_config
from .content import ContentError, get_project_types
from .report import BuildReport
from .scaffold import create_project
from .sync import SyncError, sync_from_preview, write_preview


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build the static portfolio site")
    parser.add_argument('--root', '-r', type=Path, default=Path('.'),
                        help='Folder containing projects/, assets/ and about.md (default: .)')
    parser.add_argument('--output', '-o', type=Path,
                        help='Output folder (default: <root>/output)')
    parser.add_argument('--config', '-c', type=Path,
                        help='JSON config file (default: <root>/site.json)')
    parser.add_argument('--clean', action='store_true',
                        help='Remove the output folder first (re-downloads video thumbnails)')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Only print warnings and errors')

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument('--write-preview', type=Path, metavar='FILE',
                      help='Write a standalone preview page with the stylesheet inlined')
    mode.add_argument('--sync-preview', type=Path, metavar='FILE',
                      help='Copy design tokens edited in a preview page back into the config')
    mode.add_argument('--new', metavar='TYPE/SLUG',
                      help='Create a new project folder with a seeded info.md')
    parser.add_argument('--title', help='Title for --new')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    root = args.root
    config_path = args.config or root / 'site.json'
    paths = SitePaths(root=root, output_dir=args.output)

    try:
        if args.new:
            project_type, _, slug = args.new.partition('/')
            project_dir = create_project(paths.projects_dir, project_type, slug, args.title)
            print(f"Created {project_dir}/")
            return 0

        if args.sync_preview:
            print(f"Syncing from {args.sync_preview} to {config_path}...\n")
            changes = sync_from_preview(args.sync_preview, config_path)
            for key, old, new in changes:
                print(f"  Updated {key}: {old} -> {new}")
            print(f"\n{len(changes)} value(s) updated")
            return 0

        config = load_config(config_path)

        if args.write_preview:
            types = get_project_types(paths.projects_dir) if paths.projects_dir.is_dir() else []
            write_preview(config, args.write_preview, types, paths.assets_dir)
            print(f"Wrote preview to {args.write_preview}")
            return 0

        report = build_site(paths, config, report=BuildReport(quiet=args.quiet), clean=args.clean)
    except (ConfigError, ContentError, SyncError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0 if report.ok else 1


if __name__ == '__main__':
    sys.exit(main())
