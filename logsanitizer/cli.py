# logsanitizer/cli.py

"""
Log sanitizer command-line interface.

Removes IPv4 and IPv6 addresses from a log file, or from every file below a
folder, writing the result next to each input with a ``.clean`` suffix.
Lines containing an address are omitted unless a replacement token is given
with ``-r``, in which case only the addresses are replaced.

>>> logsanitizer -f logs/ -r '<redacted>' -D -c

decompresses every ``.gz`` archive below ``logs/`` (removing the archives),
sanitizes each file and compresses every ``.clean`` output with zstd.

>>> cat latest.log | logsanitizer -f - > latest.log.clean

streams standard input to standard output.
"""

import argparse
import logging
import sys
from typing import List, Optional

from logsanitizer.logging_config import configure_logging
from logsanitizer.service.config import settings
from logsanitizer.service.pipeline import (
    ArchiveOptions,
    SanitizerService,
    audit_path,
    sanitize_path,
    sanitize_stream,
)
from logsanitizer.engine.sanitizer import policy_from_replacement
from logsanitizer.core.exceptions import SanitizerError

logger = logging.getLogger(__name__)

STDIO_TARGET = "-"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logsanitizer",
        description="Remove or replace IP addresses in log files.",
    )
    compression = parser.add_mutually_exclusive_group()
    compression.add_argument(
        "-c",
        dest="compress",
        action="store_const",
        const="remove",
        help="Compress resulting files and remove the uncompressed resulting file.",
    )
    compression.add_argument(
        "-C",
        dest="compress",
        action="store_const",
        const="keep",
        help="Compress resulting files and keep the uncompressed resulting file.",
    )
    decompression = parser.add_mutually_exclusive_group()
    decompression.add_argument(
        "-d",
        dest="decompress",
        action="store_const",
        const="keep",
        help="Decompress all archives and keep the source file (recursive!).",
    )
    decompression.add_argument(
        "-D",
        dest="decompress",
        action="store_const",
        const="remove",
        help="Decompress all archives and remove the source file (recursive!).",
    )
    parser.add_argument(
        "-o",
        "--overwrite",
        action="store_true",
        help="(De-)compression will not prompt when overwriting existing files.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="(De-)compression runs with its verbose flag.",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Do not report which files are being worked on.",
    )
    parser.add_argument(
        "-f",
        "--file",
        dest="target",
        default=settings.default_target,
        help="The file/folder that should be targeted ('-' for STDIN/STDOUT).",
    )
    parser.add_argument(
        "-r",
        "--replacement",
        default=settings.replacement,
        help=(
            "Replacement used when an address is found. "
            "If not set the line is omitted."
        ),
    )
    parser.add_argument(
        "--audit",
        action="store_true",
        help="Only report the addresses found; no files are written.",
    )
    parser.add_argument(
        "--log-format",
        choices=["json", "text"],
        default=settings.log_format,
        help="Format of diagnostic messages written to STDERR.",
    )
    return parser


def _archive_options(args: argparse.Namespace) -> ArchiveOptions:
    return ArchiveOptions(
        decompress=args.decompress is not None,
        keep_archives=args.decompress != "remove",
        compress=args.compress is not None,
        keep_uncompressed=args.compress == "keep",
        verbose=args.verbose,
        overwrite=args.overwrite,
    )


def _run_audit(target: str) -> int:
    total = 0
    for path, detected in audit_path(target):
        for address in detected:
            sys.stdout.write(
                f"{path}:{address.line_number}:{address.start}-{address.end}"
                f"\t{address.entity_type}\t{address.text}\n"
            )
        total += len(detected)
    logger.info(f"Audit found {total} addresses")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    parser = build_parser()

    if not argv:
        parser.print_help()
        return 0

    args = parser.parse_args(argv)
    configure_logging("WARNING" if args.quiet else settings.log_level, args.log_format)

    try:
        if args.audit:
            return _run_audit(args.target)

        matcher = SanitizerService.get_instance()
        policy = policy_from_replacement(args.replacement, matcher)

        if args.target == STDIO_TARGET:
            sanitize_stream(sys.stdin, sys.stdout, policy)
            return 0

        reports = sanitize_path(args.target, policy, _archive_options(args))
        logger.info(
            "Sanitize run finished",
            extra={
                "file_count": len(reports),
                "lines_dropped": sum(r.lines_dropped for r in reports),
                "lines_changed": sum(r.lines_changed for r in reports),
            },
        )
        return 0

    except SanitizerError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
