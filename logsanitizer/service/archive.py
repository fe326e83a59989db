# logsanitizer/service/archive.py

"""External (de)compression of the files a sanitize run touches."""

import logging
import subprocess
from pathlib import Path
from typing import List, Sequence, Union

from logsanitizer.core.exceptions import PipelineError
from logsanitizer.service.config import settings

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def build_decompress_command(
    path: PathLike,
    keep_source: bool = True,
    verbose: bool = False,
    overwrite: bool = False,
    executable: str = "",
) -> List[str]:
    """Builds a recursive gzip decompression command for a directory.

    Args:
        path: Directory holding .gz archives
        keep_source: Keep the archives after decompressing them
        verbose: Pass the tool's verbose flag
        overwrite: Overwrite existing files without prompting
        executable: Tool to run, defaults to the configured one
    """
    flags = "-dr"
    if keep_source:
        flags += "k"
    if verbose:
        flags += "v"
    if overwrite:
        flags += "f"
    return [executable or settings.decompress_command, flags, str(path)]


def build_compress_command(
    path: PathLike,
    keep_source: bool = False,
    verbose: bool = False,
    overwrite: bool = False,
    level: int = 0,
    executable: str = "",
) -> List[str]:
    """Builds a zstd command compressing a single sanitized file."""
    level = level or settings.compression_level
    argv = [executable or settings.compress_command]
    if level > 19:
        argv.append("--ultra")
    argv.append(f"-{level}")
    argv.append("-k" if keep_source else "--rm")
    argv.append("-v" if verbose else "-q")
    if overwrite:
        argv.append("-f")
    argv.append(str(path))
    return argv


def run_command(argv: Sequence[str]) -> None:
    """Runs an external tool and waits for it to finish.

    Raises:
        PipelineError: If the tool is missing or exits with an error.
    """
    logger.debug("Running external tool", extra={"argv": list(argv)})
    try:
        subprocess.run(list(argv), check=True)
    except FileNotFoundError as e:
        logger.error(f"External tool not found: {argv[0]}")
        raise PipelineError(f"Required tool '{argv[0]}' is not installed") from e
    except subprocess.CalledProcessError as e:
        logger.error(
            "External tool failed",
            extra={"argv": list(argv), "returncode": e.returncode},
        )
        raise PipelineError(
            f"'{argv[0]}' exited with status {e.returncode}"
        ) from e


def decompress_tree(
    root: PathLike,
    keep_source: bool = True,
    verbose: bool = False,
    overwrite: bool = False,
) -> None:
    """Decompresses every .gz archive below root in place."""
    logger.info(f"Decompressing archives under {root}")
    run_command(build_decompress_command(root, keep_source, verbose, overwrite))


def compress_file(
    path: PathLike,
    keep_source: bool = False,
    verbose: bool = False,
    overwrite: bool = False,
) -> None:
    """Compresses one sanitized output file."""
    logger.info(f"Compressing {path}")
    run_command(build_compress_command(path, keep_source, verbose, overwrite))
