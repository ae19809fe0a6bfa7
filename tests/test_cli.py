"""
Command line tests: each subcommand end to end on temporary files.
"""

import zipfile

import polars as pl
import pytest

from maxspan.cli import main
from maxspan.parsers.span_parser import parse_span_document
from maxspan.sources import read_bhav, read_span
from tests.fixtures.span_fixtures import fut_xml, span_xml


@pytest.fixture
def files(tmp_path, sample_span_xml, sample_bhav_html):
    span = tmp_path / "nsccl.spn"
    span.write_text(sample_span_xml)
    bhav = tmp_path / "fo_bhav.xls"
    bhav.write_text(sample_bhav_html)
    return tmp_path, span, bhav


@pytest.fixture(autouse=True)
def no_config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MAXSPAN_LOG_FILE", raising=False)


def test_contracts_command_writes_csv(files):
    tmp_path, span, bhav = files
    out = tmp_path / "contracts.csv"

    code = main(["contracts", "--span", str(span), "--bhav", str(bhav), "--type", "OPT", "--out", str(out)])

    assert code == 0
    frame = pl.read_csv(out, infer_schema_length=0)
    assert frame["type"].to_list() == ["OPT", "OPT"]


def test_portfolio_command(files, capsys):
    tmp_path, span, bhav = files
    positions = tmp_path / "positions.csv"
    positions.write_text("symbol,month,type,strike,lots\nXYZ,JAN-2025,FUT,,2\nXYZ,JAN-2025,FUT,,-3\nXYZ,MAR-2025,FUT,,1\n")
    out = tmp_path / "contributors.csv"

    code = main([
        "portfolio", "--span", str(span), "--bhav", str(bhav),
        "--positions", str(positions), "--spreads", "--out", str(out),
    ])

    printed = capsys.readouterr().out
    assert code == 0
    assert "Portfolio worst: 20.00 (scenario #2)" in printed
    assert "Not found in SPAN: XYZ MAR-2025 FUT 0.00" in printed
    assert "XYZ FUT  | legs=3 | netLots=0" in printed
    assert pl.read_csv(out).height == 2


def test_merge_command(tmp_path, bod_span_xml):
    earlier = tmp_path / "bod.spn"
    earlier.write_text(bod_span_xml)
    later = tmp_path / "i02.spn"
    later.write_text(span_xml(f"<futPf><pfId>10</pfId><pfCode>XYZ</pfCode>{fut_xml([3, 9, 1])}</futPf>"))
    out = tmp_path / "merged" / "out.spn"

    code = main(["merge", "--earlier", str(earlier), "--later", str(later), "--out", str(out)])

    assert code == 0
    assert parse_span_document(out.read_bytes()).contracts[0].scenario_values == (5.0, 9.0, 1.0)


def test_merge_missing_document_fails(tmp_path, bod_span_xml):
    earlier = tmp_path / "bod.spn"
    earlier.write_text(bod_span_xml)

    code = main(["merge", "--earlier", str(earlier), "--mode", "merge-max", "--out", str(tmp_path / "o.spn")])

    assert code == 1


def test_missing_input_file_fails(tmp_path):
    code = main(["contracts", "--span", str(tmp_path / "absent.spn"), "--bhav", str(tmp_path / "absent.xls")])
    assert code == 1


def test_bad_config_fails(tmp_path):
    config = tmp_path / "bad.yaml"
    config.write_text("merge:\n  default_mode: average\n")

    assert main(["--config", str(config), "merge", "--out", str(tmp_path / "o.spn")]) == 1


def test_zipped_span_is_unpacked(tmp_path, sample_span_xml):
    archive = tmp_path / "nsccl.20250115.s.zip"
    with zipfile.ZipFile(archive, "w") as z:
        z.writestr("readme.txt", "not span")
        z.writestr("nsccl.20250115.s.spn", sample_span_xml)

    assert read_span(archive) == sample_span_xml.encode("utf-8")


def test_bhav_latin1_fallback(tmp_path):
    path = tmp_path / "bhav.xls"
    path.write_bytes("<table><tr><td>caf\xe9</td></tr></table>".encode("latin-1"))

    assert "café" in read_bhav(path)
