"""Command line entry point: HTML file (or stdin) in, Markdown out."""

import argparse
import datetime as dt
import json
import re
import sys
from pathlib import Path

from .assemble import extract_content_items
from .config import load_config
from .items import items_to_markdown
from .log import configure_logging, log_debug
from .profiles import ProfileNotFoundError, detect_profile, get_profile, load_profiles
from .soup import decode_html_bytes, extract_fragment, from_html, page_title, select_messages
from .walker import Walker


def sanitize_filename(name: str) -> str:
    name = re.sub(r'[\x00-\x1f\x7f-\x9f]', "", name)
    name = re.sub(r'[<>:"/\\|?*#]', "_", name)
    name = name.replace("`", "").replace("*", "").replace("#", "").strip()
    return name[:80]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="chat-markdown", description="Convert a saved chat page to Markdown.")
    parser.add_argument("input", help="HTML file to convert, or '-' for stdin.")
    parser.add_argument("--profile", help="Platform profile to use instead of auto-detection.")
    parser.add_argument("--items", action="store_true", help="Print content items as JSON instead of Markdown.")
    parser.add_argument("-o", "--output", help="Write the result to this file.")
    parser.add_argument("--save", action="store_true", help="Save into the configured output directory.")
    parser.add_argument("--base-url", help="Resolve relative image sources against this URL.")
    parser.add_argument("--max-depth", type=int, help="Maximum element nesting depth.")
    parser.add_argument("--config", help="Config file to use instead of the user config.yaml.")
    parser.add_argument("--debug", action="store_true", help="Show debug information.")
    return parser


def read_input(source: str) -> str:
    if source == "-":
        raw = sys.stdin.buffer.read()
    else:
        raw = Path(source).read_bytes()
    return extract_fragment(decode_html_bytes(raw))


def resolve_save_path(config: dict, profile_key: str, title: str, now: dt.datetime = None) -> Path:
    """Output path from the configured directory and filename templates."""
    now = now or dt.datetime.now()
    y_str = now.strftime(config.get("year_format", "%Y"))
    m_str = now.strftime(config.get("month_format", "%m"))
    d_str = now.strftime(config.get("date_format", "%Y%m%d"))
    time_str = now.strftime(config["time_format"])

    out_dir = config["output"]["dir"].replace("{year}", y_str).replace("{month}", m_str).replace("{date}", d_str)

    filename = config["output"]["filename"].replace("{year}", y_str).replace("{month}", m_str).replace("{date}", d_str)
    filename = filename.replace("{time}", time_str).replace("{profile}", profile_key).replace("{title}", sanitize_filename(title))
    return Path(out_dir) / filename


def convert(html: str, config: dict, profile_name: str = None):
    """(profile key, list of per-message item lists) for one page."""
    root = from_html(html)
    profiles = load_profiles(config.get("profiles_dir"))
    if profile_name:
        profile_key, profile = profile_name, get_profile(profile_name, profiles)
    else:
        profile_key, profile = detect_profile(root, profiles)
    log_debug(f"Using profile: {profile_key}")

    walker = Walker(profile, max_depth=config["max_depth"], base_url=config.get("base_url"))
    messages = []
    for body in select_messages(root, profile):
        items = extract_content_items(body, walker)
        if items:
            messages.append(items)
    return profile_key, messages


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.debug)

    config = load_config(args.config)
    if args.max_depth is not None:
        config["max_depth"] = args.max_depth
    if args.base_url:
        config["base_url"] = args.base_url

    try:
        html = read_input(args.input)
    except OSError as e:
        print(f"Cannot read {args.input}: {e}", file=sys.stderr)
        return 2

    try:
        profile_key, messages = convert(html, config, args.profile or config.get("profile"))
    except ProfileNotFoundError as e:
        print(f"Unknown profile: {e.args[0]}", file=sys.stderr)
        return 2

    if not messages:
        print("No content found.", file=sys.stderr)
        return 1

    if args.items:
        result = json.dumps([[item.to_dict() for item in items] for items in messages],
                            ensure_ascii=False, indent=2)
    else:
        separator = f"\n\n{config.get('separator', '---')}\n\n"
        result = separator.join(items_to_markdown(items) for items in messages)

    targets = []
    if args.output:
        targets.append(Path(args.output))
    if args.save:
        title = page_title(html) or f"Chat_{dt.datetime.now().strftime('%Y%m%d_%H%M%S')}"
        targets.append(resolve_save_path(config, profile_key, title))

    if not targets:
        sys.stdout.write(result + "\n")
        return 0

    for filepath in targets:
        try:
            filepath.parent.mkdir(parents=True, exist_ok=True)
            filepath.write_text(result + "\n", encoding="utf-8")
        except OSError as e:
            print(f"Error saving file: {e}", file=sys.stderr)
            return 2
        print(f"Saved to: {filepath}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
