import pytest
from click.testing import CliRunner

from gsn import cli as cli_mod
from gsn.certs.keys import load_private_key
from gsn.common import GenerationError
from gsn.x509meta import pkcs7_to_meta


@pytest.fixture(autouse=True)
def _no_log_handlers(monkeypatch):
    # CliRunner swaps sys.stderr per invocation; keep handlers off the root logger
    monkeypatch.setattr(cli_mod, "setup_logging", lambda settings: None)


def _blocks(output: str) -> tuple[str, str, str]:
    _, rest = output.split("Private key PEM:\n", 1)
    key, rest = rest.split("CSR PEM:\n", 1)
    csr, b64 = rest.split("PKCS#7 Certificate (Base64):\n", 1)
    return key, csr, b64.strip()


def test_csr_command_prints_three_blocks():
    result = CliRunner().invoke(cli_mod.cli, ["csr", "sha256"], catch_exceptions=False)
    assert result.exit_code == 0, result.output

    key, csr, b64 = _blocks(result.output)
    load_private_key(key)
    assert csr.startswith("-----BEGIN CERTIFICATE REQUEST-----")
    meta = pkcs7_to_meta(b64)
    assert meta["x509_chain"][0]["validity_days"] == 365


def test_csr_command_honours_validity_setting(monkeypatch):
    monkeypatch.setenv("GSN_VALIDITY_DAYS", "7")
    result = CliRunner().invoke(cli_mod.cli, ["csr", "sha256"])
    assert result.exit_code == 0, result.output
    _, _, b64 = _blocks(result.output)
    assert pkcs7_to_meta(b64)["x509_chain"][0]["validity_days"] == 7


def test_csr_command_ignores_hash_algorithm(caplog):
    result = CliRunner().invoke(cli_mod.cli, ["csr", "sha512"])
    assert "hash algorithm 'sha512' is ignored" in caplog.text
    assert result.exit_code == 0, result.output
    _, _, b64 = _blocks(result.output)
    assert pkcs7_to_meta(b64)["x509_chain"][0]["signature_hash"] == "sha256"


def test_csr_command_requires_hash_algorithm():
    result = CliRunner().invoke(cli_mod.cli, ["csr"])
    assert result.exit_code == 2


def test_csr_command_reports_stage_and_exits(monkeypatch):
    def boom(profile):
        raise GenerationError("failed to generate key", "entropy exhausted")

    monkeypatch.setattr(cli_mod, "generate_bundle", boom)
    result = CliRunner().invoke(cli_mod.cli, ["csr", "sha256"])
    assert result.exit_code == 1
    assert "Error: failed to generate key: entropy exhausted" in result.output
    assert "PEM" not in result.output


def test_show_command():
    runner = CliRunner()
    assert runner.invoke(cli_mod.cli, ["show", "-n", "Ada"]).output == "Hello, Ada!\n"
    assert runner.invoke(cli_mod.cli, ["show"]).output == "No name provided. Use -n or --name.\n"
