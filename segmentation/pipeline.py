#!/usr/bin/env python3
"""
Transcript Segmentation Pipeline

Orchestrates the segmentation steps for a pasted chat transcript.

Pipeline Steps:
1. Classify every line
2. Aggregate document patterns into a profile
3. Resolve message boundaries
4. Extract messages from segments
5. Validate messages

Usage:
  # Segment a pasted transcript and print JSONL
  python3 -m segmentation.pipeline paste.txt

  # Read from stdin, resolve display names, write to a file
  pbpaste | python3 -m segmentation.pipeline - --user-map users.json --output out.jsonl

  # Write the classification and boundary trace to stderr
  python3 -m segmentation.pipeline paste.txt --debug

Environment Variables:
- SEGMENTATION_DEBUG: enable the debug trace (default false)
- SEGMENTATION_USER_MAP_JSON: JSON object of display name -> canonical name
- SEGMENTATION_EMOJI_MAP_JSON: JSON object of emoji code -> glyph
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, TextIO, Union

from .config import ParserConfig
from .exceptions import ConfigurationError
from .models import Message, ParseResult, TranscriptContext
from .steps.a_line_classification import LineClassifier
from .steps.b_pattern_aggregation import PatternAggregator
from .steps.c_boundary_resolution import BoundaryResolver
from .steps.d_message_extraction import MessageExtractor
from .steps.e_validation import MessageValidator

STEP_NAMES = (
    "line_classification",
    "pattern_aggregation",
    "boundary_resolution",
    "message_extraction",
    "validation",
)


class TranscriptParser:
    """Split pasted chat transcripts into messages."""

    def __init__(
        self,
        config: Optional[ParserConfig] = None,
        step_configs: Optional[Dict[str, Dict[str, Any]]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the parser.

        Args:
            config: Read-only parser configuration
            step_configs: Per-step tunables keyed by step name
            logger: Logger used by every step (debug trace included)

        Raises:
            ConfigurationError: If the configuration is malformed
        """
        if config is None:
            config = ParserConfig()
        if not isinstance(config, ParserConfig):
            raise ConfigurationError(
                f"config must be a ParserConfig, got {type(config).__name__}"
            )
        step_configs = step_configs or {}
        if not isinstance(step_configs, dict):
            raise ConfigurationError("step_configs must be a dict keyed by step name")
        unknown = set(step_configs) - set(STEP_NAMES)
        if unknown:
            raise ConfigurationError(f"Unknown steps in step_configs: {', '.join(sorted(unknown))}")
        for name, step_config in step_configs.items():
            if not isinstance(step_config, dict):
                raise ConfigurationError(f"Config for step {name!r} must be a dict")

        self.config = config
        self.logger = logger or logging.getLogger(self.__class__.__name__)

        def build(step_class, name):
            return step_class(step_configs.get(name), parser_config=config, logger=logger)

        self.classifier = build(LineClassifier, "line_classification")
        self.aggregator = build(PatternAggregator, "pattern_aggregation")
        self.resolver = build(BoundaryResolver, "boundary_resolution")
        self.extractor = build(MessageExtractor, "message_extraction")
        self.validator = build(MessageValidator, "validation")

    def parse(self, text: Union[str, bytes, None]) -> List[Message]:
        """
        Parse a transcript into messages.

        Args:
            text: Pasted transcript

        Returns:
            Messages in document order
        """
        return self.parse_with_diagnostics(text).messages

    def parse_with_diagnostics(self, text: Union[str, bytes, None]) -> ParseResult:
        """Parse a transcript and keep the intermediate lines, profile and segments."""
        if text is None:
            return ParseResult()
        if isinstance(text, bytes):
            text = text.decode("utf-8", errors="replace")
        if not isinstance(text, str):
            raise TypeError(f"Transcript must be str or bytes, got {type(text).__name__}")
        if not text.strip():
            return ParseResult()

        lines = self.classifier.execute(text)
        profile = self.aggregator.execute(lines)
        segments = self.resolver.execute(lines, profile)
        extracted = self.extractor.execute(lines, segments)
        messages = self.validator.execute(extracted)

        self.logger.debug(
            f"Parsed {len(lines)} lines into {len(messages)} messages "
            f"(format={profile.format}, confidence={profile.confidence:.2f})"
        )
        return ParseResult(messages=messages, lines=lines, profile=profile, segments=segments)


def parse_transcript(
    text: Union[str, bytes, None], config: Optional[ParserConfig] = None
) -> List[Message]:
    """Parse a transcript with a one-off parser."""
    return TranscriptParser(config).parse(text)


def _load_map_file(path: Optional[str], name: str) -> Optional[Dict[str, str]]:
    if not path:
        return None
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{name} file {path} is not valid JSON: {e}") from e


def write_jsonl(result: ParseResult, source_name: str, output: TextIO) -> None:
    """Write a context record followed by one record per message."""
    context = TranscriptContext.from_messages(source_name, result.messages, result.profile)
    context_record = {"type": "context", "data": context.to_dict()}
    output.write(json.dumps(context_record, ensure_ascii=False) + "\n")

    for message in result.messages:
        message_record = {"type": "message", **message.to_dict()}
        output.write(json.dumps(message_record, ensure_ascii=False) + "\n")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Transcript Segmentation - Splits a pasted chat transcript into messages (JSONL)"
    )
    parser.add_argument("input", help="Transcript text file, or '-' to read stdin")
    parser.add_argument("--output", help="Write JSONL here instead of stdout")
    parser.add_argument(
        "--user-map", help="JSON file mapping display names to canonical names"
    )
    parser.add_argument(
        "--emoji-map",
        help="JSON file mapping emoji codes to glyphs (validated and carried in the "
        "configuration only; message bodies keep emoji codes as pasted)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Log the classification and boundary trace"
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="[%(asctime)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    logger = logging.getLogger("segmentation")

    overrides: Dict[str, Any] = {}
    if args.debug:
        overrides["debug"] = True
    try:
        user_map = _load_map_file(args.user_map, "user map")
        emoji_map = _load_map_file(args.emoji_map, "emoji map")
        if user_map is not None:
            overrides["user_map"] = user_map
        if emoji_map is not None:
            overrides["emoji_map"] = emoji_map
        config = ParserConfig.from_env(**overrides)
    except (ConfigurationError, OSError) as e:
        logger.error(f"❌ Invalid configuration: {e}")
        return 1

    try:
        if args.input == "-":
            text = sys.stdin.read()
            source_name = "stdin"
        else:
            source_path = Path(args.input)
            text = source_path.read_text(encoding="utf-8", errors="replace")
            source_name = source_path.name
    except OSError as e:
        logger.error(f"❌ Could not read transcript: {e}")
        return 1

    logger.info(f"🎯 Segmenting transcript: {source_name}")
    result = TranscriptParser(config, logger=logger).parse_with_diagnostics(text)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            write_jsonl(result, source_name, f)
        logger.info(f"💾 Saved JSONL: {args.output}")
    else:
        write_jsonl(result, source_name, sys.stdout)

    logger.info(f"📊 {len(result.messages)} messages from {len(result.lines)} lines")
    return 0


if __name__ == "__main__":
    sys.exit(main())
