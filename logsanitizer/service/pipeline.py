# logsanitizer/service/pipeline.py

"""Main sanitize service pipeline: streams, files and directory trees."""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, TextIO, Tuple, Union

from logsanitizer.service import archive
from logsanitizer.service.config import settings
from logsanitizer.engine.audit import AddressAuditor
from logsanitizer.engine.recognizers import AddressMatcher
from logsanitizer.engine.sanitizer import LineSanitizer, policy_from_replacement
from logsanitizer.core.domain import (
    DetectedAddress,
    FileReport,
    SanitizePolicy,
    SanitizeResult,
)
from logsanitizer.core.exceptions import (
    InitializationError,
    PipelineError,
    ValidationError,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class SanitizerService:
    """Singleton holder for the process-wide matcher and auditor.

    Both are built once, on first use, and are read-only afterwards.
    """

    _matcher: Optional[AddressMatcher] = None
    _auditor: Optional[AddressAuditor] = None
    _lock = threading.Lock()

    @classmethod
    def get_instance(cls) -> AddressMatcher:
        """Returns the singleton address matcher.

        Raises:
            InitializationError: If the patterns cannot be loaded or compiled
        """
        if cls._matcher is None:
            with cls._lock:
                # Double-checked locking pattern
                if cls._matcher is None:
                    try:
                        logger.info("Compiling address patterns")
                        cls._matcher = AddressMatcher.from_loader()
                    except Exception as e:
                        logger.error("Failed to build address matcher", exc_info=True)
                        if isinstance(e, InitializationError):
                            raise
                        raise InitializationError(
                            "Address matcher initialization failed"
                        ) from e

        return cls._matcher

    @classmethod
    def get_auditor(cls) -> AddressAuditor:
        """Returns the singleton address auditor."""
        if cls._auditor is None:
            with cls._lock:
                if cls._auditor is None:
                    cls._auditor = AddressAuditor()

        return cls._auditor

    @classmethod
    def get_sanitizer(cls) -> LineSanitizer:
        return LineSanitizer(cls.get_instance())


@dataclass
class ArchiveOptions:
    """External archive steps chained around a sanitize run."""

    decompress: bool = False
    keep_archives: bool = True
    compress: bool = False
    keep_uncompressed: bool = False
    verbose: bool = False
    overwrite: bool = False


def _strip_newline(line: str) -> str:
    return line[:-1] if line.endswith("\n") else line


def sanitize_stream(
    source: Iterable[str],
    sink: TextIO,
    policy: SanitizePolicy,
    sanitizer: Optional[LineSanitizer] = None,
) -> FileReport:
    """Sanitizes a line stream into a writable text sink.

    Each emitted line is terminated with a newline, including a final
    input line that had none.

    Args:
        source: Iterable of lines, newline-terminated or not
        sink: Text stream receiving the output
        policy: Omit or Replace
        sanitizer: Line sanitizer, defaults to the shared one

    Returns:
        FileReport with line counters (paths left unset)
    """
    sanitizer = sanitizer or SanitizerService.get_sanitizer()
    report = FileReport()

    for raw in source:
        line = _strip_newline(raw)
        report.lines_read += 1
        result = sanitizer.sanitize(line, policy)

        if result is None:
            report.lines_dropped += 1
            continue

        if result != line:
            report.lines_changed += 1
        sink.write(result + "\n")
        report.lines_written += 1

    return report


def output_path_for(path: PathLike) -> Path:
    """Returns where the sanitized copy of a file is written."""
    path = Path(path)
    return path.with_name(path.name + settings.clean_suffix)


def sanitize_file(
    path: PathLike,
    policy: SanitizePolicy,
    sanitizer: Optional[LineSanitizer] = None,
) -> FileReport:
    """Writes a sanitized copy of a file next to it.

    Lines end at "\\n" only. Undecodable bytes and carriage returns are
    carried through unchanged.

    Raises:
        PipelineError: If the input cannot be read or the output written
    """
    source = Path(path)
    destination = output_path_for(source)

    if not source.is_file():
        logger.error(f"The requested file ({source}) does not exist")
        raise PipelineError(f"The requested file ({source}) does not exist")

    try:
        with open(
            source,
            "r",
            encoding=settings.encoding,
            errors="surrogateescape",
            newline="\n",
        ) as fin, open(
            destination,
            "w",
            encoding=settings.encoding,
            errors="surrogateescape",
            newline="\n",
        ) as fout:
            report = sanitize_stream(fin, fout, policy, sanitizer)

    except (OSError, LookupError, UnicodeError) as e:
        logger.error(
            "Failed to sanitize file",
            exc_info=True,
            extra={"source": str(source), "destination": str(destination)},
        )
        raise PipelineError(f"Failed to sanitize {source}: {e}") from e

    report.source = source
    report.destination = destination

    logger.info(
        f"Sanitized {source}",
        extra={
            "destination": str(destination),
            "lines_read": report.lines_read,
            "lines_written": report.lines_written,
            "lines_dropped": report.lines_dropped,
            "lines_changed": report.lines_changed,
        },
    )
    return report


def iter_target_files(
    root: PathLike, skip_suffixes: Optional[Sequence[str]] = None
) -> List[Path]:
    """Lists every file below root that should be sanitized.

    The list is collected up front so outputs written during the run are
    never picked up.
    """
    if skip_suffixes is None:
        skip_suffixes = settings.skip_suffixes
    suffixes = tuple(skip_suffixes)
    return sorted(
        p
        for p in Path(root).rglob("*")
        if p.is_file() and not p.name.endswith(suffixes)
    )


def sanitize_tree(
    root: PathLike,
    policy: SanitizePolicy,
    options: Optional[ArchiveOptions] = None,
    sanitizer: Optional[LineSanitizer] = None,
) -> List[FileReport]:
    """Sanitizes every eligible file below a directory.

    Stops at the first file that fails.

    Raises:
        PipelineError: If a file or an external tool fails
    """
    options = options or ArchiveOptions()
    sanitizer = sanitizer or SanitizerService.get_sanitizer()

    if options.decompress:
        archive.decompress_tree(
            root,
            keep_source=options.keep_archives,
            verbose=options.verbose,
            overwrite=options.overwrite,
        )

    reports = []
    for path in iter_target_files(root):
        logger.info(f"Working on {path}")
        report = sanitize_file(path, policy, sanitizer)
        if options.compress:
            _compress_output(report, options)
        reports.append(report)

    logger.info(
        "Directory sanitized",
        extra={
            "root": str(root),
            "file_count": len(reports),
            "lines_dropped": sum(r.lines_dropped for r in reports),
        },
    )
    return reports


def _compress_output(report: FileReport, options: ArchiveOptions) -> None:
    archive.compress_file(
        report.destination,
        keep_source=options.keep_uncompressed,
        verbose=options.verbose,
        overwrite=options.overwrite,
    )


def sanitize_path(
    target: PathLike,
    policy: SanitizePolicy,
    options: Optional[ArchiveOptions] = None,
    sanitizer: Optional[LineSanitizer] = None,
) -> List[FileReport]:
    """Sanitizes a single file or a whole directory tree.

    Decompression only applies to directories; compression applies to every
    sanitized output.

    Raises:
        ValidationError: If the target does not exist
        PipelineError: If a file or an external tool fails
    """
    options = options or ArchiveOptions()
    path = Path(target)
    logger.info(f"Handling {path}")

    if not path.exists():
        logger.error("File/Folder does not exist", extra={"target": str(path)})
        raise ValidationError(f"File/Folder does not exist: {path}")

    if path.is_dir():
        return sanitize_tree(path, policy, options, sanitizer)

    report = sanitize_file(path, policy, sanitizer)
    if options.compress:
        _compress_output(report, options)
    return [report]


def audit_path(
    target: PathLike, auditor: Optional[AddressAuditor] = None
) -> Iterator[Tuple[Path, List[DetectedAddress]]]:
    """Yields the addresses found in each eligible file, writing nothing.

    Raises:
        ValidationError: If the target does not exist
    """
    auditor = auditor or SanitizerService.get_auditor()
    path = Path(target)

    if not path.exists():
        raise ValidationError(f"File/Folder does not exist: {path}")

    files = iter_target_files(path) if path.is_dir() else [path]
    for file_path in files:
        try:
            with open(
                file_path,
                "r",
                encoding=settings.encoding,
                errors="surrogateescape",
                newline="\n",
            ) as fh:
                detected = auditor.audit_lines(_strip_newline(line) for line in fh)
        except (OSError, LookupError, UnicodeError) as e:
            logger.error(f"Failed to audit {file_path}", exc_info=True)
            raise PipelineError(f"Failed to audit {file_path}: {e}") from e
        yield file_path, detected


def sanitize_text(text: str, policy: Optional[SanitizePolicy] = None) -> SanitizeResult:
    """Sanitizes a block of text held in memory.

    Args:
        text: Input text, split on newlines
        policy: Omit or Replace, defaults to the configured replacement

    Returns:
        SanitizeResult with sanitized text, detected addresses and metadata.
        On failure, returns a result indicating the error safely.
    """
    if not text:
        logger.warning("Empty text provided for sanitizing")
        return SanitizeResult(
            original_text="",
            sanitized_text="",
            metadata={"error": "Empty input provided"},
        )

    if not isinstance(text, str):
        logger.error(f"Invalid input type received: {type(text)}")
        return SanitizeResult(
            original_text=str(text),
            sanitized_text="",
            metadata={"error": "Invalid input format"},
        )

    try:
        matcher = SanitizerService.get_instance()
        if policy is None:
            policy = policy_from_replacement(settings.replacement, matcher)

        lines = text.split("\n")
        sanitizer = LineSanitizer(matcher)
        kept = list(sanitizer.sanitize_lines(lines, policy))
        entities = SanitizerService.get_auditor().audit_lines(lines)

        logger.info(
            "Text sanitized",
            extra={
                "text_length": len(text),
                "lines_dropped": len(lines) - len(kept),
                "address_count": len(entities),
            },
        )

        return SanitizeResult(
            original_text=text,
            sanitized_text="\n".join(kept),
            entities=entities,
            metadata={
                "count": len(entities),
                "policy": type(policy).__name__,
                "lines_read": len(lines),
                "lines_dropped": len(lines) - len(kept),
                "entity_types": sorted({e.entity_type for e in entities}),
            },
        )

    except (InitializationError, PipelineError, ValidationError) as e:
        logger.error(
            f"Known error during sanitizing: {type(e).__name__}",
            exc_info=True,
            extra={"text_length": len(text)},
        )
        return SanitizeResult(
            original_text=text,
            sanitized_text="",
            metadata={
                "error": "The sanitizer encountered a processing error.",
                "status": "failed",
                "error_type": type(e).__name__,
            },
        )
