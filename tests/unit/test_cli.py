"""
Unit tests for the command-line entry point.
"""

import socket

import pytest

from rhs.__main__ import UsageError, main, parse_port, resolve_target


pytestmark = pytest.mark.usefixtures("restore_rhs_logger")


class TestParsePort:

    @pytest.mark.parametrize("value, expected", [
        ("80", 80),
        ("0", 0),
        ("65535", 65535),
        ("65536", None),
        ("-1", None),
        ("8o", None),
        ("./public", None),
        ("²", None),
        ("１２３", None),
    ])
    def test_values(self, value, expected):
        assert parse_port(value) == expected


class TestResolveTarget:
    """The positional argument rules."""

    def test_directory_and_port(self, log):
        assert resolve_target(["public", "8080"], log) == ("public", 8080)
        assert log.records == []

    def test_invalid_port(self, log):
        with pytest.raises(UsageError, match="Invalid port number: http"):
            resolve_target(["public", "http"], log)

    def test_single_port_serves_current_directory(self, log):
        assert resolve_target(["3000"], log) == (".", 3000)
        assert log.messages("info") == [
            "assuming `3000` is a port. "
            "Pass both <dir> and <port> if you meant it as the directory"
        ]

    def test_single_directory_uses_port_80(self, log):
        assert resolve_target(["public"], log) == ("public", 80)

    def test_non_ascii_digits_are_a_directory(self, log):
        assert resolve_target(["²"], log) == ("²", 80)
        assert log.records == []

    def test_no_arguments(self, log):
        with pytest.raises(UsageError, match="Usage"):
            resolve_target([], log)

    def test_too_many_arguments(self, log):
        with pytest.raises(UsageError, match="Usage"):
            resolve_target(["public", "8080", "extra"], log)


class TestMain:

    def test_no_arguments_exits_1(self, capsys):
        assert main([]) == 1
        assert "Usage: rhs [directory] [port]" in capsys.readouterr().out

    def test_three_arguments_exits_1(self, served_root, capsys):
        assert main([str(served_root), "8080", "extra"]) == 1
        assert "[ERR!] Usage: rhs [directory] [port]" in capsys.readouterr().out

    def test_invalid_port_exits_1(self, served_root, capsys):
        assert main([str(served_root), "notaport"]) == 1
        assert "[ERR!] Invalid port number: notaport" in capsys.readouterr().out

    def test_missing_directory_exits_1(self, tmp_path, capsys):
        assert main([str(tmp_path / "nowhere"), "8080"]) == 1
        assert "does not exist" in capsys.readouterr().out

    def test_bad_timeout_exits_1(self, served_root):
        assert main([str(served_root), "8080", "--timeout", "0"]) == 1

    def test_port_in_use_exits_1(self, served_root, capsys):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as blocker:
            blocker.bind(("127.0.0.1", 0))
            blocker.listen(1)
            port = blocker.getsockname()[1]

            assert main([str(served_root), str(port)]) == 1

        assert f"could not bind to 127.0.0.1:{port}" in capsys.readouterr().out

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "rhs 0.1.0" in capsys.readouterr().out
