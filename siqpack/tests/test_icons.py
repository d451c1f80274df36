# siqpack/tests/test_icons.py
"""
Tests for icons.py output helpers
"""
from siqpack.icons import SUCCESS, WARNING, format_size, log, log_warning


class TestLog:

    def test_with_prefix(self):
        assert log(SUCCESS, "Archive written", prefix="archive") == f"[archive] {SUCCESS} Archive written"

    def test_without_prefix(self):
        assert log(SUCCESS, "Done") == f"{SUCCESS} Done"

    def test_warning_helper(self):
        assert log_warning("odd atom", prefix="normalize:warn") == f"[normalize:warn] {WARNING} odd atom"


class TestFormatSize:

    def test_bytes(self):
        assert format_size(500) == "500 B"

    def test_kilobytes(self):
        assert format_size(1536) == "1.5 KB"

    def test_megabytes(self):
        assert format_size(3 * 1024 * 1024) == "3.0 MB"
