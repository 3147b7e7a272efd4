#!/usr/bin/env python3
"""
ctxpack: pack a project into a single file for AI context, and back.

Walks a directory (honouring built-in ignore patterns, --ignore patterns and
the project's .gitignore), bundles every file as text or base64, and writes a
JSON bundle or a flattened readable text file. Large outputs can be split
into parts with a manifest. ``ctxpack unpack`` rebuilds the tree from a JSON
bundle or manifest.
"""

from __future__ import annotations

import argparse
import logging
import pathlib
import sys
from typing import List, Optional

from ctxbundle import __version__
from ctxbundle.bundler.clipboard import copy_to_clipboard
from ctxbundle.bundler.config_manager import CONFIG_FILE_NAME, ConfigManager
from ctxbundle.bundler.utils.error_handling import BundleError, CapacityWarning, ClipboardError
from ctxbundle.library import PackOptions, ProjectPacker


def bytes_human(n: int) -> str:
    """Human-readable bytes: 2 decimals for KB and above, integer for bytes."""
    units = ["Bytes", "KB", "MB", "GB", "TB"]
    f = float(n)
    i = 0
    while f >= 1024.0 and i < len(units) - 1:
        f /= 1024.0
        i += 1
    if i == 0:
        return f"{int(f)} {units[i]}"
    return f"{f:.2f} {units[i]}"


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def build_pack_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="ctxpack",
        description="Pack a directory into a single file for AI context.",
        epilog="""
Examples:
  %(prog)s                                  # Pack current directory into project-context.json
  %(prog)s ./my-app -f text                 # Flattened tree + contents for reading
  %(prog)s -s --chunk-size 500000           # Split into parts with a manifest
  %(prog)s -i "*.csv" "docs/" --no-binary   # Extra ignore patterns, text files only
  %(prog)s unpack project-context.json      # Rebuild the tree from a bundle
""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ap.add_argument("directory", nargs="?", default=".",
                    help="The directory to pack. Defaults to the current directory.")
    ap.add_argument("-o", "--output",
                    help="Output file path (default: project-context.json or project-context.txt)")
    ap.add_argument("-f", "--format", choices=["json", "text"], default=None,
                    help="Output format (default: json)")
    ap.add_argument("-c", "--copy", action="store_true", default=None,
                    help="Copy the output to the clipboard")
    ap.add_argument("-s", "--split", action="store_true", default=None,
                    help="Split the output into multiple smaller chunks")
    ap.add_argument("--chunk-size", type=int, default=None,
                    help="The maximum size of each chunk in characters (default: 1000000)")
    ap.add_argument("-i", "--ignore", nargs="+", action="extend", default=None,
                    help="Additional ignore patterns")
    ap.add_argument("--no-binary", action="store_true", default=None,
                    help="Exclude binary files from the bundle")
    ap.add_argument("--config", type=pathlib.Path, default=None,
                    help=f"Config file (default: {CONFIG_FILE_NAME} in the packed directory)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    ap.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return ap


def build_unpack_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="ctxpack unpack",
        description="Unpack a bundle file or manifest back into a folder structure.",
    )
    ap.add_argument("bundle", help="The bundle or _manifest.json to unpack")
    ap.add_argument("-o", "--output", help="The directory to unpack the files into")
    ap.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    return ap


def run_pack(args: argparse.Namespace) -> int:
    repo_dir = pathlib.Path(args.directory)
    if not repo_dir.is_dir():
        print(f"❌ Error: Directory not found at {repo_dir.resolve()}", file=sys.stderr)
        return 1

    config_manager = ConfigManager(repo_dir)
    try:
        config = config_manager.load_config(args.config)
        options = PackOptions.from_config(
            config,
            output_format=args.format,
            output_path=pathlib.Path(args.output) if args.output else None,
            split=args.split,
            chunk_size=args.chunk_size,
            ignore_patterns=list(config.ignore_custom_patterns) + (args.ignore or []),
            no_binary=args.no_binary,
            show_progress=True,
        )
    except (BundleError, ValueError) as e:
        print(f"❌ {e}", file=sys.stderr)
        return 1

    copy = args.copy if args.copy is not None else config.copy_to_clipboard

    print(f"📦 Packing {repo_dir.resolve()}...", file=sys.stderr)
    try:
        result = ProjectPacker(options).pack(repo_dir)
    except BundleError as e:
        print(f"❌ An error occurred: {e}", file=sys.stderr)
        return 1

    if result.file_count == 0:
        print("⚠️  No files found to pack. Check ignore patterns.", file=sys.stderr)
        return 0

    if result.is_split:
        print(f"✅ Project split into {len(result.written_paths)} parts. "
              f"Manifest created at {result.manifest_path}", file=sys.stderr)
    else:
        print(f"✅ Project successfully packed into {options.output_path.resolve()}", file=sys.stderr)

    stats = result.stats
    print(f"✨ Summary: {stats.text_files} text files, {stats.binary_files} binary files"
          f" - Total size: {bytes_human(stats.total_size)}", file=sys.stderr)
    if result.read_errors:
        print(f"⚠️  Skipped {result.read_errors} unreadable entries (see warnings above)", file=sys.stderr)
    if config_manager.config_path:
        print(f"📋 Settings from {config_manager.config_path.name}", file=sys.stderr)

    if copy:
        try:
            copy_to_clipboard(result.output, config.clipboard_limit_bytes)
            print("📋 Content copied to clipboard!", file=sys.stderr)
        except CapacityWarning as e:
            print(f"⚠️  Content is too large ({bytes_human(e.size_bytes)}) to copy to clipboard.",
                  file=sys.stderr)
            print(f"✨ Tip: Use the generated file '{options.output_path.name}' "
                  f"or try the --split flag for very large projects.", file=sys.stderr)
        except ClipboardError as e:
            print(f"⚠️  {e}", file=sys.stderr)

    return 0


def run_unpack(args: argparse.Namespace) -> int:
    print(f"📥 Unpacking {args.bundle}...", file=sys.stderr)
    try:
        result = ProjectPacker(PackOptions(show_progress=True)).unpack(args.bundle, args.output)
    except BundleError as e:
        print(f"❌ An error occurred: {e}", file=sys.stderr)
        return 1

    print(f"✅ Successfully unpacked {result.files_written} files to {result.output_dir}", file=sys.stderr)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)

    if argv and argv[0] == "unpack":
        args = build_unpack_parser().parse_args(argv[1:])
        configure_logging(args.verbose)
        return run_unpack(args)

    args = build_pack_parser().parse_args(argv)
    configure_logging(args.verbose)
    return run_pack(args)


if __name__ == "__main__":
    sys.exit(main())
