# -*- coding: utf-8 -*-
# Human readable dump of a publisher purposes consent string.
# Python 3.10+
# Usage:  python3 -m consent_string.dump_consent_string [--stdin | <consent_string>]

from __future__ import annotations
from io import StringIO
import argparse
import sys

from .codec import decode
from .errors import ConsentStringError
from .log import LOG_LEVELS, configure_logging
from .records import ConsentRecord


def dump_consent_string(consent: str | bytes) -> str:
  tw = StringIO()
  record: ConsentRecord = decode(consent)
  record.dump_string(tw)
  return tw.getvalue()


def main(argv: list[str] | None = None) -> int:
  parser = argparse.ArgumentParser(prog="python3 -m consent_string.dump_consent_string")
  parser.add_argument("consent_string", nargs="?", help="URL-safe Base64 consent string")
  parser.add_argument("--stdin", action="store_true", help="read the consent string from stdin")
  parser.add_argument("--log-level", default="WARNING", type=str.upper, choices=LOG_LEVELS)
  args = parser.parse_args(argv)
  configure_logging(args.log_level)

  if args.stdin:
    consent = sys.stdin.read().strip()
  elif args.consent_string:
    consent = args.consent_string
  else:
    parser.print_usage(sys.stderr)
    return 1

  try:
    print(dump_consent_string(consent), end="")
  except ConsentStringError as e:
    print(f"[!] {e}", file=sys.stderr)
    return 2
  return 0


if __name__ == '__main__':
  sys.exit(main())
