from __future__ import annotations

import json
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import serialization

from ocsp_loadgen.cli import main

from conftest import SERIALS


@pytest.fixture
def inputs(tmp_path: Path, issuer: x509.Certificate) -> tuple[Path, Path]:
    issuer_path = tmp_path / "issuer.pem"
    issuer_path.write_bytes(issuer.public_bytes(serialization.Encoding.PEM))
    serials_path = tmp_path / "serials.txt"
    serials_path.write_text("\n".join(SERIALS))
    return issuer_path, serials_path


def test_missing_issuer_is_fatal(tmp_path: Path, inputs: tuple[Path, Path]) -> None:
    _, serials = inputs
    with pytest.raises(SystemExit) as exc:
        main(["--ocsp-base", "http://127.0.0.1:1", "--issuer", str(tmp_path / "nope.pem"), "--serials", str(serials)])
    assert exc.value.code == 1


def test_empty_pool_is_fatal(tmp_path: Path, inputs: tuple[Path, Path]) -> None:
    issuer, _ = inputs
    bad = tmp_path / "bad.txt"
    bad.write_text("not-a-serial\n")
    db = tmp_path / "lat.duckdb"
    with pytest.raises(SystemExit):
        main(["--ocsp-base", "http://127.0.0.1:1", "--issuer", str(issuer), "--serials", str(bad), "--latency-db", str(db)])


def test_run_against_closed_port(
    tmp_path: Path, inputs: tuple[Path, Path], capsys: pytest.CaptureFixture[str]
) -> None:
    issuer, serials = inputs
    config = tmp_path / "run.json"
    settings = {
        "ocsp_base": "http://127.0.0.1:1",
        "get_rate": 10,
        "issuer_path": str(issuer),
        "serials_path": str(serials),
        "latency_db": str(tmp_path / "lat.duckdb"),
    }
    config.write_text(json.dumps(settings))
    main(["--config", str(config), "--runtime", "0.5", "--timeout", "2", "--post-rate", "4"])
    out = capsys.readouterr().out
    assert "Run complete:" in out
    assert "(duration elapsed)" in out
    assert "error=" in out
