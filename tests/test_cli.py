import json

from conftest import stats, url_report
from vtscan_agent import cli


def test_prints_notification_and_exits_zero_when_safe(scanner, upstream, capsys):
    upstream.reports = [None, url_report(last_analysis_stats=stats(harmless=70))]

    code = cli.main(["https://example.com"], scanner=scanner)

    out = capsys.readouterr().out
    assert code == 0
    assert "=== VirusTotal: SAFE ✅ ===" in out
    assert "URL: https://example.com" in out


def test_json_output_and_exit_one_when_unsafe(scanner, upstream, capsys):
    upstream.reports = [None, url_report(last_analysis_stats=stats(suspicious=1))]

    code = cli.main(["--json", "https://example.com"], scanner=scanner)

    assert code == 1
    data = json.loads(capsys.readouterr().out)
    assert data["safe"] is False
    assert data["wasStale"] is False


def test_errors_exit_two(scanner, capsys):
    code = cli.main(["not-a-url"], scanner=scanner)
    assert code == 2
    assert "Error:" in capsys.readouterr().err


def test_missing_api_key_exits_two(monkeypatch, capsys):
    monkeypatch.delenv("VIRUS_TOTAL_API_KEY", raising=False)
    code = cli.main(["https://example.com"])
    assert code == 2
    assert "VIRUS_TOTAL_API_KEY" in capsys.readouterr().err
