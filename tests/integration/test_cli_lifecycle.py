"""End-to-end CLI run over a directory of input files."""

from click.testing import CliRunner

from capgains.cli.main import main
from capgains.system import LoggerFactory


def test_mixed_inputs_with_file_logging(tmp_path):
    """Good, missing and failing inputs in one invocation, with a JSON log file."""
    good = tmp_path / "good.json"
    good.write_text(
        '[{"operation":"buy", "unit-cost":10, "quantity": 10000},'
        '{"operation":"sell", "unit-cost":20, "quantity": 5000},'
        '{"operation":"sell", "unit-cost":5, "quantity": 5000}]'
    )
    bad = tmp_path / "bad.json"
    bad.write_text('[{"operation":"sell", "unit-cost":10, "quantity": 0}]')
    missing = tmp_path / "missing.json"
    log_file = tmp_path / "logs" / "capgains.log"
    config_file = tmp_path / "system.yaml"
    config_file.write_text(f"logging:\n  enable_file: true\n  file_level: INFO\n  file_path: {log_file}\n")

    try:
        result = CliRunner().invoke(main, ["calculate", "-c", str(config_file), str(good), str(missing), str(bad)])
    finally:
        LoggerFactory.reset()

    assert result.exit_code == 1
    assert result.stdout.splitlines() == [
        '[{"tax":"0.00"},{"tax":"10000.00"},{"tax":"0.00"}]',
        f"File not found: {missing}",
    ]
    assert "quantity" in result.stderr

    log_text = log_file.read_text(encoding="utf-8")
    assert "cli.calculate.run_completed" in log_text
    assert "cli.calculate.file_not_found" in log_text
    assert "cli.calculate.run_failed" in log_text
