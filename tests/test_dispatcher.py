"""
Tests for HashDispatcherImpl: the worker pool over top-level entries.
Result order across workers is not part of the contract, so tests compare sets.
"""
import logging
import threading
import zipfile

import pytest

from fuzzplag.core.dispatcher import HashDispatcherImpl
from fuzzplag.core.errors import ArchiveError
from conftest import make_zip, sample_text


def paths_of(fingerprints):
    return sorted(f.path for f in fingerprints)


class TestHashDispatcherImpl:
    """Test dispatch, classification and aggregation across workers."""

    def test_fingerprints_leaves_inside_top_level_containers(self, submissions_zip, make_params, char_diff):
        dispatcher = HashDispatcherImpl(make_params(submissions_zip), algorithm=char_diff)

        fingerprints = dispatcher.run()

        # tiny.txt is below the threshold, notes.rar is unsupported, readme.txt is a top-level leaf
        assert paths_of(fingerprints) == [
            "alice123456.zip:src/main.c",
            "alice123456.zip:src/util.c",
            "bob654321xx.zip:extra.zip/extra/helper.c",
            "bob654321xx.zip:src/main.c",
        ]

    def test_top_level_leaves_skipped_by_default(self, submissions_zip, make_params, char_diff):
        fingerprints = HashDispatcherImpl(make_params(submissions_zip), algorithm=char_diff).run()

        assert "readme.txt" not in paths_of(fingerprints)

    def test_top_level_leaves_fingerprinted_when_enabled(self, submissions_zip, make_params, char_diff):
        params = make_params(submissions_zip, fingerprint_top_level_leaves=True)

        fingerprints = HashDispatcherImpl(params, algorithm=char_diff).run()

        assert "readme.txt" in paths_of(fingerprints)
        assert len(fingerprints) == 5

    def test_top_level_leaf_below_min_size_never_fingerprinted(self, tmp_path, make_params, char_diff):
        root = tmp_path / "root.zip"
        make_zip({"small.txt": b"z" * 50, "big.txt": sample_text(1, 200)}, root)
        params = make_params(root, fingerprint_top_level_leaves=True, min_size_bytes=100)

        fingerprints = HashDispatcherImpl(params, algorithm=char_diff).run()

        assert paths_of(fingerprints) == ["big.txt"]

    @pytest.mark.parametrize("workers", [1, 2, 3, 8])
    def test_same_result_set_for_any_worker_count(self, tmp_path, make_params, char_diff, workers):
        root = tmp_path / "many.zip"
        make_zip({
            f"student{i:04d}xx.zip": make_zip({f"hw/{j}.c": sample_text(i * 10 + j) for j in range(3)})
            for i in range(7)
        }, root)
        params = make_params(root, parallel=workers)

        fingerprints = HashDispatcherImpl(params, algorithm=char_diff).run()

        assert len(fingerprints) == 21
        assert len(set(paths_of(fingerprints))) == 21

    def test_digest_and_metadata_recorded(self, tmp_path, make_params, char_diff):
        root = tmp_path / "root.zip"
        content = sample_text(11)
        make_zip({"alice123456.zip": make_zip({"a.c": content})}, root)

        [fingerprint] = HashDispatcherImpl(make_params(root), algorithm=char_diff).run()

        assert fingerprint.path == "alice123456.zip:a.c"
        assert fingerprint.digest == content.decode("latin-1")
        assert fingerprint.size == len(content)
        assert fingerprint.content_hash

    def test_missing_root_archive_is_fatal(self, tmp_path, make_params):
        dispatcher = HashDispatcherImpl(make_params(tmp_path / "missing.zip"))

        with pytest.raises(ArchiveError, match="Error opening zip file"):
            dispatcher.run()

    def test_non_zip_root_archive_is_fatal(self, tmp_path, make_params):
        root = tmp_path / "root.zip"
        root.write_bytes(b"definitely not a zip file")

        with pytest.raises(ArchiveError):
            HashDispatcherImpl(make_params(root)).run()

    def test_fingerprint_failure_skips_only_that_entry(self, tmp_path, make_params, char_diff, caplog):
        root = tmp_path / "root.zip"
        make_zip({"alice123456.zip": make_zip({"blank.c": b" " * 64, "ok.c": sample_text(1)})}, root)

        with caplog.at_level(logging.WARNING):
            fingerprints = HashDispatcherImpl(make_params(root), algorithm=char_diff).run()

        assert paths_of(fingerprints) == ["alice123456.zip:ok.c"]
        assert any("blank.c" in r.getMessage() for r in caplog.records)

    def test_corrupt_top_level_entry_is_skipped(self, tmp_path, make_params, char_diff, caplog):
        root = tmp_path / "root.zip"
        make_zip({
            "broken.zip": b"PK\x03\x04" + b"\x00\xff" * 200,
            "alice123456.zip": make_zip({"a.c": sample_text(1)}),
        }, root)

        with caplog.at_level(logging.WARNING):
            fingerprints = HashDispatcherImpl(make_params(root), algorithm=char_diff).run()

        assert paths_of(fingerprints) == ["alice123456.zip:a.c"]

    def test_identical_content_hashed_once_per_worker(self, tmp_path, make_params, char_diff):
        root = tmp_path / "root.zip"
        same = sample_text(3)
        make_zip({"alice123456.zip": make_zip({"a.c": same, "b.c": same, "c.c": same})}, root)
        dispatcher = HashDispatcherImpl(make_params(root, parallel=1), algorithm=char_diff)

        fingerprints = dispatcher.run()

        assert len(fingerprints) == 3
        assert char_diff.calls == 1
        assert dispatcher.cache_hits == 2

    def test_stopped_flag_cancels_before_work(self, submissions_zip, make_params, char_diff):
        dispatcher = HashDispatcherImpl(make_params(submissions_zip), algorithm=char_diff)

        assert dispatcher.run(stopped_flag=lambda: True) == []
        assert char_diff.calls == 0

    def test_progress_reaches_total_entries(self, submissions_zip, make_params, char_diff):
        events = []
        with zipfile.ZipFile(submissions_zip) as archive:
            total = len(archive.infolist())

        HashDispatcherImpl(make_params(submissions_zip), algorithm=char_diff).run(
            progress_callback=lambda stage, current, t: events.append((stage, current, t))
        )

        assert len(events) == total
        assert events[-1] == ("Hashing", total, total)

    def test_worker_unable_to_open_root_archive_is_fatal(self, tmp_path, make_params, char_diff, monkeypatch):
        root = tmp_path / "root.zip"
        make_zip({f"student{i:04d}xx.zip": make_zip({"a.c": sample_text(i)}) for i in range(6)}, root)
        real_zipfile = zipfile.ZipFile

        def flaky_zipfile(file, *args, **kwargs):
            if threading.current_thread().name == "hash-worker-1" and isinstance(file, str):
                raise OSError("too many open files")
            return real_zipfile(file, *args, **kwargs)

        monkeypatch.setattr(zipfile, "ZipFile", flaky_zipfile)
        dispatcher = HashDispatcherImpl(make_params(root, parallel=2), algorithm=char_diff)

        with pytest.raises(ArchiveError, match="too many open files"):
            dispatcher.run()

    def test_failing_progress_callback_does_not_stop_workers(self, submissions_zip, make_params, char_diff, caplog):
        def broken_callback(stage, current, total):
            raise RuntimeError("display gone")

        with caplog.at_level(logging.WARNING):
            fingerprints = HashDispatcherImpl(make_params(submissions_zip), algorithm=char_diff).run(
                progress_callback=broken_callback
            )

        assert len(fingerprints) == 4
        assert any("display gone" in r.getMessage() for r in caplog.records)
