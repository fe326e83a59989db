from __future__ import annotations

import io
import subprocess
from pathlib import Path
from typing import List

import pytest

from logsanitizer.core.domain import Omit, Replace
from logsanitizer.core.exceptions import PipelineError, ValidationError
from logsanitizer.service import archive
from logsanitizer.service import pipeline
from logsanitizer.service.config import settings
from logsanitizer.service.pipeline import ArchiveOptions

LOG = (
    "[12:00:00] [Server thread/INFO]: Starting minecraft server\n"
    "[12:00:05] [User Authenticator #1/INFO]: Player joined from /192.168.1.100:25565\n"
    "[12:00:06] [Server thread/INFO]: Steve joined the game\n"
    "[12:01:00] [Server thread/INFO]: Query from [2001:db8::1]:25565\n"
)


@pytest.fixture
def fake_tools(monkeypatch: pytest.MonkeyPatch) -> List[List[str]]:
    calls: List[List[str]] = []

    def fake_run(argv, check):
        calls.append(argv)
        return subprocess.CompletedProcess(argv, 0)

    monkeypatch.setattr(archive.subprocess, "run", fake_run)
    return calls


def test_sanitize_stream_counts_lines(sanitizer) -> None:
    sink = io.StringIO()
    report = pipeline.sanitize_stream(
        io.StringIO("keep\ndrop 10.0.0.1\nlast without newline"), sink, Omit(), sanitizer
    )

    assert sink.getvalue() == "keep\nlast without newline\n"
    assert (report.lines_read, report.lines_written, report.lines_dropped) == (3, 2, 1)
    assert report.lines_changed == 0


def test_sanitize_file_omit(tmp_path: Path) -> None:
    source = tmp_path / "latest.log"
    source.write_text(LOG, encoding="utf-8")

    report = pipeline.sanitize_file(source, Omit())

    assert report.destination == tmp_path / "latest.log.clean"
    assert report.destination.read_text(encoding="utf-8") == (
        "[12:00:00] [Server thread/INFO]: Starting minecraft server\n"
        "[12:00:06] [Server thread/INFO]: Steve joined the game\n"
    )
    assert report.lines_dropped == 2
    assert source.read_text(encoding="utf-8") == LOG


def test_sanitize_file_replace(tmp_path: Path) -> None:
    source = tmp_path / "latest.log"
    source.write_text(LOG, encoding="utf-8")

    report = pipeline.sanitize_file(source, Replace("<redacted>"))

    lines = report.destination.read_text(encoding="utf-8").splitlines()
    assert lines[1].endswith("Player joined from /<redacted>:25565")
    assert lines[3].endswith("Query from [<redacted>]:25565")
    assert report.lines_changed == 2
    assert report.lines_written == 4


def test_sanitize_file_preserves_bytes(tmp_path: Path) -> None:
    source = tmp_path / "raw.log"
    source.write_bytes(b"\xff\xfe from 10.0.0.1\r\nplain\r\n")

    pipeline.sanitize_file(source, Replace("X"))

    assert (tmp_path / "raw.log.clean").read_bytes() == b"\xff\xfe from X\r\nplain\r\n"


def test_sanitize_file_omit_drops_whole_record_with_carriage_return(tmp_path: Path) -> None:
    source = tmp_path / "progress.log"
    source.write_bytes(b"from 10.0.0.1\rtail text\nkeep\rme\n")

    report = pipeline.sanitize_file(source, Omit())

    assert report.destination.read_bytes() == b"keep\rme\n"
    assert (report.lines_read, report.lines_dropped) == (2, 1)


def test_sanitize_file_replace_keeps_lone_carriage_return(tmp_path: Path) -> None:
    source = tmp_path / "progress.log"
    source.write_bytes(b"progress 10%\rprogress 20% from 10.0.0.1\n")

    report = pipeline.sanitize_file(source, Replace("X"))

    assert report.destination.read_bytes() == b"progress 10%\rprogress 20% from X\n"
    assert report.lines_read == 1


def test_sanitize_file_unknown_encoding(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(settings, "encoding", "no-such-codec")
    source = tmp_path / "latest.log"
    source.write_text("ok\n", encoding="utf-8")

    with pytest.raises(PipelineError, match="Failed to sanitize"):
        pipeline.sanitize_file(source, Omit())


def test_sanitize_file_missing_input(tmp_path: Path) -> None:
    with pytest.raises(PipelineError, match="does not exist"):
        pipeline.sanitize_file(tmp_path / "absent.log", Omit())
    assert not (tmp_path / "absent.log.clean").exists()


def test_custom_clean_suffix(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "clean_suffix", ".scrubbed")
    source = tmp_path / "a.log"
    source.write_text("x\n", encoding="utf-8")

    assert pipeline.sanitize_file(source, Omit()).destination == tmp_path / "a.log.scrubbed"


def _make_tree(root: Path) -> None:
    (root / "nested" / "deeper").mkdir(parents=True)
    (root / "latest.log").write_text("from 10.0.0.1\n", encoding="utf-8")
    (root / "nested" / "2024-01-01-1.log").write_text("ok\n", encoding="utf-8")
    (root / "nested" / "deeper" / "debug.log").write_text("::1\n", encoding="utf-8")
    (root / "nested" / "old.log.gz").write_bytes(b"\x1f\x8b")
    (root / "nested" / "old.log.zst").write_bytes(b"\x28\xb5")
    (root / "stale.log.clean").write_text("previous run\n", encoding="utf-8")


def test_iter_target_files_skips_archives_and_outputs(tmp_path: Path) -> None:
    _make_tree(tmp_path)
    assert pipeline.iter_target_files(tmp_path) == [
        tmp_path / "latest.log",
        tmp_path / "nested" / "2024-01-01-1.log",
        tmp_path / "nested" / "deeper" / "debug.log",
    ]


def test_sanitize_tree(tmp_path: Path) -> None:
    _make_tree(tmp_path)

    reports = pipeline.sanitize_tree(tmp_path, Replace("X"))

    assert [r.source for r in reports] == pipeline.iter_target_files(tmp_path)
    assert (tmp_path / "latest.log.clean").read_text(encoding="utf-8") == "from X\n"
    assert (tmp_path / "nested" / "deeper" / "debug.log.clean").read_text(
        encoding="utf-8"
    ) == "X\n"
    assert not (tmp_path / "stale.log.clean.clean").exists()
    assert not (tmp_path / "nested" / "old.log.gz.clean").exists()


def test_sanitize_tree_chains_archive_tools(tmp_path: Path, fake_tools) -> None:
    _make_tree(tmp_path)
    options = ArchiveOptions(
        decompress=True, keep_archives=False, compress=True, keep_uncompressed=True
    )

    pipeline.sanitize_tree(tmp_path, Omit(), options)

    assert fake_tools[0] == ["gzip", "-dr", str(tmp_path)]
    assert fake_tools[1:] == [
        ["zstd", "--ultra", "-22", "-k", "-q", str(tmp_path / "latest.log.clean")],
        [
            "zstd",
            "--ultra",
            "-22",
            "-k",
            "-q",
            str(tmp_path / "nested" / "2024-01-01-1.log.clean"),
        ],
        [
            "zstd",
            "--ultra",
            "-22",
            "-k",
            "-q",
            str(tmp_path / "nested" / "deeper" / "debug.log.clean"),
        ],
    ]


def test_sanitize_path_single_file_skips_decompression(tmp_path: Path, fake_tools) -> None:
    source = tmp_path / "latest.log"
    source.write_text("ok\n", encoding="utf-8")

    reports = pipeline.sanitize_path(
        source, Omit(), ArchiveOptions(decompress=True, compress=True)
    )

    assert len(reports) == 1
    assert fake_tools == [
        ["zstd", "--ultra", "-22", "--rm", "-q", str(tmp_path / "latest.log.clean")]
    ]


def test_sanitize_path_missing_target(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        pipeline.sanitize_path(tmp_path / "nothing", Omit())


def test_audit_path_writes_nothing(tmp_path: Path) -> None:
    _make_tree(tmp_path)

    found = {
        path.name: [d.text for d in detected]
        for path, detected in pipeline.audit_path(tmp_path)
    }

    assert found == {
        "latest.log": ["10.0.0.1"],
        "2024-01-01-1.log": [],
        "debug.log": ["::1"],
    }
    assert not (tmp_path / "latest.log.clean").exists()


def test_audit_path_counts_lines_like_sanitize(tmp_path: Path) -> None:
    (tmp_path / "progress.log").write_bytes(b"10%\r20%\nfrom 10.0.0.1\n")

    [(_, detected)] = list(pipeline.audit_path(tmp_path / "progress.log"))

    assert [(d.line_number, d.text) for d in detected] == [(2, "10.0.0.1")]


def test_sanitize_text_omit() -> None:
    result = pipeline.sanitize_text("keep\nConnected: ::1\nkeep too", Omit())

    assert result.sanitized_text == "keep\nkeep too"
    assert result.metadata["lines_dropped"] == 1
    assert result.metadata["policy"] == "Omit"
    assert [e.text for e in result.entities] == ["::1"]


def test_sanitize_text_replace() -> None:
    result = pipeline.sanitize_text(
        "Player joined from 192.168.1.100:25565", Replace("<redacted>")
    )
    assert result.sanitized_text == "Player joined from <redacted>:25565"
    assert result.metadata["entity_types"] == ["IPV4_ADDRESS"]


def test_sanitize_text_counts_mapped_address_once() -> None:
    result = pipeline.sanitize_text("::ffff:192.168.0.1 then fe80::1%eth0", Omit())
    assert result.metadata["count"] == 2


def test_sanitize_text_uses_configured_policy(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "replacement", "*")
    assert pipeline.sanitize_text("at 1.2.3.4").sanitized_text == "at *"


def test_sanitize_text_empty_input() -> None:
    result = pipeline.sanitize_text("")
    assert result.metadata["error"] == "Empty input provided"


def test_service_builds_matcher_once() -> None:
    first = pipeline.SanitizerService.get_instance()
    assert pipeline.SanitizerService.get_instance() is first
    assert pipeline.SanitizerService.get_sanitizer().matcher is first
