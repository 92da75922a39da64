"""Tests for filename sanitization."""

from __future__ import annotations

import pytest

from pkm_sync.utils.filename import sanitize_filename, sanitize_thread_subject


class TestSanitizeFilename:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("", "default-filename"),
            ("Meeting Notes", "Meeting-Notes"),
            ("../../../etc/passwd", "etc-passwd"),
            ("./sensitive/file", "sensitive-file"),
            ("../config/../secrets", "config-secrets"),
            ("~/private/data", "private-data"),
            (".hidden_file", "hidden_file"),
            ("file\\with\\backslashes", "file-with-backslashes"),
            ("file\x00name", "filename"),
            ("file\nwith\tcontrol\rchars", "filewithcontrolchars"),
            ("../../../etc/../home/user/.ssh/id_rsa", "etc-home-user-ssh-id_rsa"),
            ("   ", "safe-filename"),
            ("!@#$%^&*()", "at-$%^-and"),
            ("-----", "safe-filename"),
            ("Héllo Wörld", "Héllo-Wörld"),
            ("!!!Important Subject!!!", "Important-Subject"),
            ("Q&A: Roadmap", "Q-and-A-Roadmap"),
            ("a | b", "a-b"),
        ],
    )
    def test_sanitize(self, name: str, expected: str) -> None:
        assert sanitize_filename(name) == expected

    def test_length_is_capped(self) -> None:
        result = sanitize_filename("Test " * 50)
        assert result == "Test-" * 15 + "Test"
        assert len(result) <= 80

    @pytest.mark.parametrize(
        "name",
        ["../../etc/shadow", "..\\..\\windows", "a/b\\c", "~root/.bashrc", "..", "."],
    )
    def test_never_produces_path_components(self, name: str) -> None:
        result = sanitize_filename(name)
        assert "/" not in result
        assert "\\" not in result
        assert ".." not in result
        assert result not in ("", ".")


class TestSanitizeThreadSubject:
    @pytest.mark.parametrize(
        "subject, thread_id, expected",
        [
            ("", "t1", "email-thread-t1"),
            ("", "", "email-thread"),
            ("", "t/1", "email-thread-t-1"),
            ("Re: Budget Review", "t1", "Budget-Review"),
            ("@@@", "", "at-at-at"),
            ("!!!", "abc", "safe-filename-abc"),
            ("!!!", "", "safe-filename"),
            ("Re:", "", "Re"),
        ],
    )
    def test_subject(self, subject: str, thread_id: str, expected: str) -> None:
        assert sanitize_thread_subject(subject, thread_id) == expected
