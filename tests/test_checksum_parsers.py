"""Tests for checksum manifest parsing."""

import pytest

from sigverify.core.checksum_parser import (
    BSDChecksumParser,
    EqualsChecksumParser,
    StandardChecksumParser,
    algorithm_for_digest,
    algorithm_label,
    contains_checksums,
    normalize_filename,
    parse_entries,
    parse_line,
    parse_manifest,
)

SHA256 = "2c26b46b68ffc68ff99b453c1d30413413422d706483bfa0f98a5e886266e7ae"
SHA1 = "0beec7b5ea3f0fdbc95d0dd47f3c5bc275da8a33"
MD5 = "acbd18db4cc2f85cedef654fccc4a4d8"
SHA512 = (
    "f7fbba6e0636f890e56fbbf3283e524c6fa3204ae298382d624741d0dc663832"
    "6e282c41be5e4254d8820772c5518a2c5a8c0c7f7eda19594a7eb539453e1ed7"
)


class TestStandardParser:
    def test_two_space_separator(self):
        entry = StandardChecksumParser().parse_line(f"{SHA256}  foo.txt")
        assert entry.filename == "foo.txt"
        assert entry.digest == SHA256
        assert entry.algorithm == "sha256"

    def test_binary_marker_is_not_part_of_name(self):
        entry = StandardChecksumParser().parse_line(f"{SHA256} *foo.iso")
        assert entry.filename == "foo.iso"

    def test_uppercase_digest_is_lowered(self):
        entry = StandardChecksumParser().parse_line(
            f"{SHA256.upper()}  foo.txt"
        )
        assert entry.digest == SHA256

    def test_filename_with_spaces(self):
        entry = StandardChecksumParser().parse_line(f"{MD5}  my file.txt")
        assert entry.filename == "my file.txt"
        assert entry.algorithm == "md5"

    def test_unsupported_length_rejected(self):
        assert StandardChecksumParser().parse_line("abc123  foo") is None


class TestBSDParser:
    def test_sha256_line(self):
        entry = BSDChecksumParser().parse_line(f"SHA256 (foo.txt) = {SHA256}")
        assert entry.filename == "foo.txt"
        assert entry.algorithm == "sha256"

    def test_label_does_not_decide_algorithm(self):
        entry = BSDChecksumParser().parse_line(f"SHA256 (foo.txt) = {SHA1}")
        assert entry.algorithm == "sha1"

    def test_sha512_line(self):
        entry = BSDChecksumParser().parse_line(f"SHA512 (a.iso) = {SHA512}")
        assert entry.algorithm == "sha512"

    def test_name_with_parentheses(self):
        entry = BSDChecksumParser().parse_line(
            f"SHA256 (app (1).iso) = {SHA256}"
        )
        assert entry.filename == "app (1).iso"

    def test_other_format_rejected(self):
        assert BSDChecksumParser().parse_line(f"{SHA256}  foo") is None


class TestEqualsParser:
    def test_equals_line(self):
        entry = EqualsChecksumParser().parse_line(f"{SHA256} = foo.txt")
        assert entry.filename == "foo.txt"

    def test_tight_equals_line(self):
        entry = EqualsChecksumParser().parse_line(f"{SHA256}=foo.txt")
        assert entry.filename == "foo.txt"


class TestParseLine:
    def test_equals_line_keeps_clean_filename(self):
        entry = parse_line(f"{SHA256} = foo.txt")
        assert entry.filename == "foo.txt"

    def test_garbage_line(self):
        assert parse_line("hello world") is None


class TestNormalizer:
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("foo.txt", "foo.txt"),
            ("dist/foo.txt", "foo.txt"),
            ("./a/b/foo.txt", "foo.txt"),
            ("C:\\build\\foo.txt", "foo.txt"),
            ("  foo.txt  ", "foo.txt"),
        ],
    )
    def test_normalize_filename(self, raw, expected):
        assert normalize_filename(raw) == expected

    @pytest.mark.parametrize(
        ("digest", "algorithm", "label"),
        [
            (MD5, "md5", "MD5"),
            (SHA1, "sha1", "SHA-1"),
            (SHA256, "sha256", "SHA-256"),
            (SHA512, "sha512", "SHA-512"),
        ],
    )
    def test_algorithm_from_length(self, digest, algorithm, label):
        assert algorithm_for_digest(digest) == algorithm
        assert algorithm_label(digest) == label

    def test_unknown_length(self):
        assert algorithm_for_digest("abcd") is None
        assert algorithm_label("abcd") == "Unknown"


class TestParseManifest:
    def test_skips_comments_and_blank_lines(self, manifest_text):
        manifest = parse_manifest(manifest_text + "\n\n# trailer\n")
        assert list(manifest) == ["foo.txt", "bar.txt"]

    def test_mixed_formats(self):
        text = (
            f"{SHA256}  a.txt\n"
            f"SHA1 (b.txt) = {SHA1}\n"
            f"{MD5} = c.txt\n"
            "not a checksum line\n"
        )
        manifest = parse_manifest(text, "SUMS")
        assert len(manifest) == 3
        assert manifest.algorithms == ("sha256", "sha1", "md5")
        assert manifest.source_name == "SUMS"

    def test_later_duplicate_wins(self):
        other = "f" * 64
        text = f"{SHA256}  a.txt\n{SHA1}  b.txt\n{other}  a.txt\n"
        entries = parse_entries(text)
        assert entries["a.txt"].digest == other
        assert list(entries) == ["b.txt", "a.txt"]

    def test_windows_line_endings(self):
        manifest = parse_manifest(f"{SHA256}  a.txt\r\n{SHA1}  b.txt\r\n")
        assert set(manifest) == {"a.txt", "b.txt"}

    def test_content_key_tracks_text(self, manifest_text):
        first = parse_manifest(manifest_text)
        second = parse_manifest(manifest_text)
        changed = parse_manifest(manifest_text + f"{SHA1}  c.txt\n")
        assert first.content_key == second.content_key
        assert first.content_key != changed.content_key

    @pytest.mark.parametrize(
        "text",
        [
            f"# release\n{SHA256}  foo.txt\n{SHA1}  bar.txt\n",
            f"{SHA256}  **star.iso\n",
            f"SHA256 (= weird.iso) = {SHA256}\n",
            f"SHA256 (app (1).iso) = {SHA256}\n{MD5} = b.txt\n",
        ],
    )
    def test_to_text_parses_back_to_same_entries(self, text):
        manifest = parse_manifest(text)
        assert len(manifest) > 0
        reparsed = parse_manifest(manifest.to_text())
        assert reparsed.entries == manifest.entries
        assert parse_manifest(reparsed.to_text()).to_text() == (
            manifest.to_text()
        )

    def test_to_text_keeps_leading_marker_characters(self):
        manifest = parse_manifest(
            f"{SHA256}  **star.iso\nSHA1 (= weird.iso) = {SHA1}\n"
        )
        reparsed = parse_manifest(manifest.to_text())
        assert list(reparsed) == ["*star.iso", "= weird.iso"]

    def test_empty_text(self):
        assert len(parse_manifest("")) == 0


class TestContainsChecksums:
    def test_true_for_manifest(self, manifest_text):
        assert contains_checksums(manifest_text)

    def test_false_for_prose(self):
        assert not contains_checksums("Release notes\n\nNothing here.\n")

    def test_comment_lines_ignored(self):
        assert not contains_checksums(f"# {SHA256}  foo.txt\n")
