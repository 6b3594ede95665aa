# -*- coding: utf-8 -*-
# Turns a consent text dump (or builder flags) back into a consent string.
# Python 3.10+
# Usage:  python3 -m consent_string.load_consent_text [--stdin | --build [options] | path/to/dump.txt]

from __future__ import annotations
from datetime import datetime, timezone
from io import StringIO
import argparse
import sys

from .codec import encode
from .errors import ConsentStringError
from .log import LOG_LEVELS, configure_logging
from .records import ConsentRecord
from .records.builder import ConsentBuilder
from utils import parse_range_str


def load_consent_text(tw: StringIO) -> str:
  record = ConsentRecord.load_from_text(tw)
  return encode(record)


def build_consent_string(args: argparse.Namespace) -> str:
  now = datetime.now(timezone.utc)
  created = datetime.fromisoformat(args.created) if args.created else now
  updated = datetime.fromisoformat(args.last_updated) if args.last_updated else created
  record = (
    ConsentBuilder()
    .with_consent_record_created_on(created)
    .with_consent_record_last_updated_on(updated)
    .with_cmp_id(args.cmp_id)
    .with_cmp_version(args.cmp_version)
    .with_consent_screen_id(args.consent_screen)
    .with_consent_language(args.language)
    .with_vendor_list_version(args.vendor_list_version)
    .with_publisher_purposes_list_version(args.publisher_purposes_version)
    .with_allowed_purpose_ids(parse_range_str(args.purposes))
    .with_custom_allowed_purpose_ids(parse_range_str(args.custom_purposes))
    .build()
  )
  return encode(record)


def main(argv: list[str] | None = None) -> int:
  parser = argparse.ArgumentParser(prog="python3 -m consent_string.load_consent_text")
  parser.add_argument("path", nargs="?", help="text produced by dump_consent_string")
  parser.add_argument("--stdin", action="store_true")
  parser.add_argument("--build", action="store_true", help="assemble from the flags below")
  parser.add_argument("--created", help="ISO 8601 timestamp (default: now)")
  parser.add_argument("--last-updated", help="ISO 8601 timestamp (default: --created)")
  parser.add_argument("--cmp-id", type=int, default=0)
  parser.add_argument("--cmp-version", type=int, default=0)
  parser.add_argument("--consent-screen", type=int, default=0)
  parser.add_argument("--language", default="EN")
  parser.add_argument("--vendor-list-version", type=int, default=1)
  parser.add_argument("--publisher-purposes-version", type=int, default=1)
  parser.add_argument("--purposes", default="", help="e.g. 1,3-4")
  parser.add_argument("--custom-purposes", default="", help="e.g. 1-3")
  parser.add_argument("--log-level", default="WARNING", type=str.upper, choices=LOG_LEVELS)
  args = parser.parse_args(argv)
  configure_logging(args.log_level)

  try:
    if args.build:
      token = build_consent_string(args)
    elif args.stdin:
      token = load_consent_text(StringIO(sys.stdin.read()))
    elif args.path:
      with open(args.path, 'r') as f:
        token = load_consent_text(StringIO(f.read()))
    else:
      parser.print_usage(sys.stderr)
      return 1
  except (ConsentStringError, ValueError) as e:
    print(f"[!] {e}", file=sys.stderr)
    return 2

  print(token)
  return 0


if __name__ == '__main__':
  sys.exit(main())
