#!/usr/bin/env python3
"""
CLI tool for SlideAvatar.

This tool provides command-line interface for:
- Generating an avatar video from text, a URL or a local deck
- Checking which voice a language resolves to
"""

import argparse
import asyncio
import json
import sys
from typing import Any

from pydantic import ValidationError

from slideavatar.configs.config import config
from slideavatar.configs.logging_config import setup_logging
from slideavatar.pipeline import build_default_pipeline
from slideavatar.schemas.avatar_video import AvatarVideoRequest
from slideavatar.voice import VoiceResolver


def build_request(args: argparse.Namespace) -> AvatarVideoRequest:
    """Build a validated request from ``generate`` arguments."""
    fields: dict[str, Any] = {
        "source_text": args.text,
        "document_url": args.url,
        "document_path": args.file,
        "language": args.language,
        "title": args.title,
        "voice_id": args.voice_id,
        "job_id": args.job_id,
    }
    if args.allow_embedded_images:
        fields["require_full_rendering"] = False
    if args.no_captions:
        fields["caption"] = False
    return AvatarVideoRequest(**fields)


async def generate(args: argparse.Namespace) -> int:
    try:
        request = build_request(args)
    except ValidationError as e:
        print(f"Invalid request: {e}", file=sys.stderr)
        return 2

    pipeline = build_default_pipeline()
    result = await pipeline.run(request)
    print(json.dumps(result, indent=2))
    return 0 if result["success"] else 1


def resolve_voice(language: str) -> int:
    resolver = VoiceResolver(
        config.heygen_default_voice_id, voices_path=config.heygen_voices_path
    )
    print(resolver.resolve(language))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="SlideAvatar CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cli.py generate --file deck.pptx --language es     # Narrate an existing deck
  cli.py generate --text "Quarterly results..."      # Generate a deck first
  cli.py voice fr-CA                                 # Show the resolved voice id
        """,
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    gen_parser = subparsers.add_parser("generate", help="Generate an avatar video")
    source = gen_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--text", help="Source text to generate slides from")
    source.add_argument("--url", help="URL of a PDF or PPTX deck")
    source.add_argument("--file", help="Path to a local PDF or PPTX deck")
    gen_parser.add_argument("--language", default="en", help="Narration language")
    gen_parser.add_argument("--title", help="Video title")
    gen_parser.add_argument("--voice-id", help="Explicit voice id")
    gen_parser.add_argument("--job-id", help="Job id (defaults to a random id)")
    gen_parser.add_argument(
        "--allow-embedded-images",
        action="store_true",
        help="Use embedded images when LibreOffice/pdftoppm are missing",
    )
    gen_parser.add_argument(
        "--no-captions", action="store_true", help="Disable captions"
    )

    voice_parser = subparsers.add_parser("voice", help="Resolve a language to a voice")
    voice_parser.add_argument("language", help="Language code or name")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI tool."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    setup_logging("DEBUG" if args.verbose else config.log_level, component="cli")

    if args.command == "generate":
        return asyncio.run(generate(args))
    if args.command == "voice":
        return resolve_voice(args.language)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
