"""Tests for archive validation — structure, filtering, normalization."""

from __future__ import annotations

import pytest

from bobhost.core.archive_validator import (
    ArchiveValidator,
    detect_root_folder,
    is_platform_junk,
    is_suspicious_path,
    looks_like_html,
    strip_current_dir,
)
from bobhost.core.errors import ArchiveValidationError
from bobhost.models.config import ArchiveLimits


class TestHelpers:
    @pytest.mark.parametrize(
        "path",
        ["__MACOSX/._index.html", "site/.DS_Store", "Thumbs.db", "a/desktop.ini", "._app.js"],
    )
    def test_platform_junk(self, path: str):
        assert is_platform_junk(path)

    def test_regular_file_is_not_junk(self):
        assert not is_platform_junk("site/index.html")

    @pytest.mark.parametrize("path", ["../etc/passwd.txt", "a/../../b.html", "/abs.html", "a//b.css"])
    def test_suspicious(self, path: str):
        assert is_suspicious_path(path)

    def test_dots_in_names_are_not_suspicious(self):
        assert not is_suspicious_path("a/..hidden/b..c.css")

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("./index.html", "index.html"),
            ("./site/./css/a.css", "site/css/a.css"),
            ("./", ""),
            ("a/.hidden/b.css", "a/.hidden/b.css"),
        ],
    )
    def test_strip_current_dir(self, raw: str, expected: str):
        assert strip_current_dir(raw) == expected

    def test_looks_like_html(self):
        assert looks_like_html("  <!DOCTYPE html><p>x</p>")
        assert looks_like_html("<HTML></HTML>")
        assert not looks_like_html("just some text")


class TestDetectRootFolder:
    def test_wrapper_detected(self):
        assert detect_root_folder(["site/index.html", "site/app.js"]) == "site"

    def test_root_file_disables_detection(self):
        assert detect_root_folder(["index.html", "css/site.css"]) is None

    def test_dotted_folder_is_not_a_wrapper(self):
        assert detect_root_folder(["site.v2/index.html"]) is None

    def test_empty(self):
        assert detect_root_folder([]) is None


class TestValidate:
    def test_valid_site(self, validator: ArchiveValidator, site_zip: bytes):
        manifest = validator.validate(site_zip)
        assert manifest.entry_point == "index.html"
        assert sorted(manifest.paths) == [
            "about.html",
            "css/site.css",
            "img/logo.png",
            "index.html",
            "js/app.js",
        ]
        assert manifest.root_folder is None
        assert manifest.skipped == []

    def test_content_types_assigned(self, validator: ArchiveValidator, site_zip: bytes):
        manifest = validator.validate(site_zip)
        types = {f.path: f.content_type for f in manifest.files}
        assert types["css/site.css"] == "text/css"
        assert types["img/logo.png"] == "image/png"

    def test_total_size(self, validator: ArchiveValidator, make_zip, index_html: str):
        raw = make_zip({"index.html": index_html, "a.txt": "12345"})
        manifest = validator.validate(raw)
        assert manifest.total_size == len(index_html.encode()) + 5

    def test_wrapper_folder_stripped(self, validator: ArchiveValidator, make_zip, index_html: str):
        raw = make_zip({
            "my-site/": b"",
            "my-site/index.html": index_html,
            "my-site/css/main.css": "p {}",
        })
        manifest = validator.validate(raw)
        assert manifest.root_folder == "my-site"
        assert sorted(manifest.paths) == ["css/main.css", "index.html"]

    def test_only_first_top_level_folder_is_stripped(
        self, validator: ArchiveValidator, make_zip, index_html: str
    ):
        raw = make_zip({
            "docs/site.css": "p {}",
            "build/app/index.html": index_html,
        })
        manifest = validator.validate(raw)
        assert manifest.root_folder == "docs"
        assert sorted(manifest.paths) == ["build/app/index.html", "site.css"]
        assert manifest.entry_point == "build/app/index.html"

    def test_shallowest_entry_point_wins(self, validator: ArchiveValidator, make_zip, index_html: str):
        raw = make_zip({
            "index.html": index_html,
            "blog/index.html": index_html,
        })
        assert validator.validate(raw).entry_point == "index.html"

    def test_disallowed_types_skipped(self, validator: ArchiveValidator, make_zip, index_html: str):
        raw = make_zip({
            "index.html": index_html,
            "server.php": "<?php ?>",
            "run.sh": "rm -rf /",
        })
        manifest = validator.validate(raw)
        assert manifest.paths == ["index.html"]
        assert sorted(manifest.skipped) == ["run.sh", "server.php"]

    def test_junk_skipped_silently(self, validator: ArchiveValidator, make_zip, index_html: str):
        raw = make_zip({
            "index.html": index_html,
            "__MACOSX/._index.html": b"\x00",
            ".DS_Store": b"\x00",
        })
        manifest = validator.validate(raw)
        assert manifest.paths == ["index.html"]
        assert manifest.skipped == []

    def test_html_without_markup_warns(self, validator: ArchiveValidator, make_zip):
        manifest = validator.validate(make_zip({"index.html": "hello there"}))
        assert any("index.html" in w for w in manifest.warnings)

    def test_invalid_utf8_html_is_replaced(self, validator: ArchiveValidator, make_zip):
        raw = make_zip({"index.html": b"<html><head></head>\xff</html>"})
        manifest = validator.validate(raw)
        assert "\ufffd" in manifest.files[0].data.decode("utf-8")
        assert manifest.files[0].size == len(b"<html><head></head>\xff</html>")


class TestValidateFailures:
    def test_not_a_zip(self, validator: ArchiveValidator):
        with pytest.raises(ArchiveValidationError):
            validator.validate(b"definitely not a zip")

    def test_empty_zip(self, validator: ArchiveValidator, make_zip):
        with pytest.raises(ArchiveValidationError, match="empty"):
            validator.validate(make_zip({}))

    def test_no_entry_point_lists_files(self, validator: ArchiveValidator, make_zip, index_html: str):
        raw = make_zip({"about.html": index_html, "css/a.css": "p {}"})
        with pytest.raises(ArchiveValidationError) as info:
            validator.validate(raw)
        assert sorted(info.value.files) == ["about.html", "css/a.css"]

    def test_no_valid_files(self, validator: ArchiveValidator, make_zip):
        with pytest.raises(ArchiveValidationError, match="No valid files") as info:
            validator.validate(make_zip({"tool.exe": b"MZ"}))
        assert info.value.files == ["tool.exe"]

    def test_upload_too_large(self, site_zip: bytes):
        validator = ArchiveValidator(ArchiveLimits(max_upload_bytes=100))
        with pytest.raises(ArchiveValidationError, match="too large"):
            validator.validate(site_zip)

    def test_too_many_entries(self, make_zip):
        validator = ArchiveValidator(ArchiveLimits(max_entries=3))
        raw = make_zip({f"f{i}.txt": "x" for i in range(4)})
        with pytest.raises(ArchiveValidationError, match="Too many files"):
            validator.validate(raw)

    def test_directories_count_toward_entries(self, make_zip, index_html: str):
        validator = ArchiveValidator(ArchiveLimits(max_entries=2))
        raw = make_zip({"a/": b"", "b/": b"", "index.html": index_html})
        with pytest.raises(ArchiveValidationError, match="Too many files"):
            validator.validate(raw)
