# siqpack/tests/test_extractor.py
"""
Tests for extractor.py - archive entries onto disk
"""
import zipfile

import pytest

from conftest import write_corrupt_deflated, write_siq
from siqpack.errors import ExtractionError
from siqpack.extractor import PackageExtractor, decode_entry_name, extract_package


class TestDecodeEntryName:

    def test_legacy_codepage(self):
        """Names without the UTF-8 flag are read as cp866"""
        raw = "Images/Кот.jpg".encode("cp866")
        info = zipfile.ZipInfo(raw.decode("cp437"))
        info.flag_bits = 0
        assert decode_entry_name(info) == "Images/Кот.jpg"

    def test_utf8_flag_respected(self):
        info = zipfile.ZipInfo("Images/Кот.jpg")
        info.flag_bits = 0x800
        assert decode_entry_name(info) == "Images/Кот.jpg"

    def test_uri_decoding(self):
        info = zipfile.ZipInfo("Images/%D0%9A%D0%BE%D1%82%20one.jpg")
        assert decode_entry_name(info) == "Images/Кот one.jpg"


class TestExtract:

    def test_materializes_tree(self, tmp_path):
        archive = write_siq(tmp_path / "p.siq", {
            "content.xml": "<package/>",
            "Images/a%20b.png": b"png",
            "Audio/deep/x.mp3": b"mp3",
        })
        dest = tmp_path / "out"
        written = extract_package(archive, dest, workers=2)

        assert (dest / "content.xml").read_text() == "<package/>"
        assert (dest / "Images" / "a b.png").read_bytes() == b"png"
        assert (dest / "Audio" / "deep" / "x.mp3").read_bytes() == b"mp3"
        assert len(written) == 3

    def test_many_entries_same_directory(self, tmp_path):
        entries = {f"Images/{i}.bin": bytes([i]) * 32 for i in range(40)}
        archive = write_siq(tmp_path / "p.siq", entries)
        dest = tmp_path / "out"
        PackageExtractor(workers=8, verbose=False).extract(archive, dest)
        assert len(list((dest / "Images").iterdir())) == 40

    def test_existing_directory_tolerated(self, tmp_path):
        archive = write_siq(tmp_path / "p.siq", {"Images/a.png": b"1"})
        dest = tmp_path / "out"
        (dest / "Images").mkdir(parents=True)
        extract_package(archive, dest)
        assert (dest / "Images" / "a.png").exists()

    def test_zip_slip_entry_skipped(self, tmp_path, capsys):
        archive = write_siq(tmp_path / "p.siq", {
            "../escape.txt": b"nope",
            "ok.txt": b"fine",
        })
        dest = tmp_path / "out"
        extract_package(archive, dest)
        assert not (tmp_path / "escape.txt").exists()
        assert (dest / "ok.txt").exists()
        assert "Skipping entry outside package" in capsys.readouterr().out

    def test_not_a_zip(self, tmp_path):
        bogus = tmp_path / "p.siq"
        bogus.write_bytes(b"definitely not a zip")
        with pytest.raises(ExtractionError, match="Not a readable zip"):
            extract_package(bogus, tmp_path / "out")

    def test_corrupt_deflate_stream(self, tmp_path, sample_descriptor):
        """A damaged entry surfaces as ExtractionError, not a zlib error"""
        archive = write_corrupt_deflated(tmp_path / "p.siq", "content.xml", sample_descriptor)
        with pytest.raises(ExtractionError, match="Failed to extract") as exc_info:
            PackageExtractor(workers=2, verbose=False).extract(archive, tmp_path / "out")
        assert exc_info.value.cause is not None
