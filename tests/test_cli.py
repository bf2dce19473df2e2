import io
import logging
import pytest
from sensorhttp.cli import main, format_request
from sensorhttp.parser import parse_request


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("SENSORHTTP_DIAGNOSTICS", raising=False)
    monkeypatch.delenv("SENSORHTTP_MAX_HEADERS", raising=False)


def test_format_request():
    request = parse_request("POST /x HTTP/1.0\nHost: a\n\nhello")
    assert format_request(request) == (
        "method: POST\n"
        "path: /x\n"
        "version: 1.0\n"
        "header: Host: a\n"
        "body: 5 chars"
    )


def test_main_parses_file(tmp_path, capsys):
    capture = tmp_path / "request.txt"
    capture.write_bytes(b"GET /metrics HTTP/1.1\nHost: sensor\n\n")

    assert main([str(capture)]) == 0
    out = capsys.readouterr().out
    assert "method: GET" in out
    assert "path: /metrics" in out
    assert "header: Host: sensor" in out


def test_main_reads_stdin(monkeypatch, capsys):
    data = b"PUT /location HTTP/1.1\nHost: sensor\n\nkitchen"
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(data)))

    assert main([]) == 0
    assert "body: 7 chars" in capsys.readouterr().out


def test_main_max_headers_flag(tmp_path, capsys):
    capture = tmp_path / "request.txt"
    capture.write_bytes(b"GET / HTTP/1.1\nA: 1\nB: 2\n\n")

    assert main(["--max-headers", "1", str(capture)]) == 0
    out = capsys.readouterr().out
    assert "header: A: 1" in out
    assert "header: B: 2" not in out


def test_main_invalid_request(tmp_path, capsys):
    capture = tmp_path / "request.txt"
    capture.write_bytes(b"garbage")

    assert main([str(capture)]) == 2
    assert "method: INVALID" in capsys.readouterr().out


def test_main_missing_file(tmp_path):
    assert main([str(tmp_path / "missing.txt")]) == 1


def test_main_bad_config(tmp_path):
    capture = tmp_path / "request.txt"
    capture.write_bytes(b"GET / HTTP/1.1\n\n")
    assert main(["--max-headers", "0", str(capture)]) == 1


def test_main_multiple_files(tmp_path, capsys):
    first = tmp_path / "a.txt"
    second = tmp_path / "b.txt"
    first.write_bytes(b"GET /a HTTP/1.1\n\n")
    second.write_bytes(b"HEAD /b HTTP/1.1\n\n")

    assert main([str(first), str(second)]) == 0
    out = capsys.readouterr().out
    assert f"== {first}" in out
    assert "method: HEAD" in out


def test_main_flags_override_env(monkeypatch, tmp_path, capsys, caplog):
    monkeypatch.setenv("SENSORHTTP_MAX_HEADERS", "5")
    caplog.set_level(logging.INFO, logger="sensorhttp.diagnostics")
    capture = tmp_path / "request.txt"
    capture.write_bytes(b"GET / HTTP/1.1\nA: 1\nB: 2\n\n")

    assert main(["--diagnostics", "--max-headers", "1", str(capture)]) == 0
    out = capsys.readouterr().out
    assert "header: A: 1" in out
    assert "header: B: 2" not in out
    assert any(r.name == "sensorhttp.diagnostics" for r in caplog.records)
