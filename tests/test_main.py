"""
Tests for command line handling
"""

import pytest
import yaml

from cisco_exporter.main import build_config, parse_args, parse_listen_address, parse_target


@pytest.mark.parametrize("address,expected", [
    (":9362", ("0.0.0.0", 9362)),
    ("127.0.0.1:9000", ("127.0.0.1", 9000)),
])
def test_parse_listen_address(address, expected):
    assert parse_listen_address(address) == expected


@pytest.mark.parametrize("address", ["9362", "host:", "host:http"])
def test_parse_listen_address_invalid(address):
    with pytest.raises(ValueError):
        parse_listen_address(address)


def test_parse_target():
    assert parse_target("10.0.0.1").address == "10.0.0.1:22"
    assert parse_target(" 10.0.0.1:2222 ").address == "10.0.0.1:2222"


def test_build_config_from_targets(monkeypatch):
    monkeypatch.setenv("CISCO_EXPORTER_PASSWORD", "pw")
    args = parse_args([
        "--ssh.targets", "10.0.0.1,10.0.0.2:2222",
        "--ssh.user", "monitor",
        "--ssh.timeout", "9",
        "--legacy.ciphers",
    ])

    config = build_config(args)

    assert [d.address for d in config.devices] == ["10.0.0.1:22", "10.0.0.2:2222"]
    assert config.username == "monitor"
    assert config.password == "pw"
    assert config.timeout == 9
    assert config.legacy_ciphers is True


def test_cli_overrides_config_file(tmp_path):
    path = tmp_path / "config.yml"
    path.write_text(yaml.safe_dump({
        'timeout': 5,
        'legacy_ciphers': True,
        'devices': [{'host': 'r1'}],
    }))

    config = build_config(parse_args(["--config.file", str(path), "--ssh.batch-size", "2048"]))

    assert config.batch_size == 2048
    # flag not given: file value kept
    assert config.legacy_ciphers is True


def test_targets_or_config_required():
    with pytest.raises(ValueError, match="--config.file or --ssh.targets"):
        build_config(parse_args([]))


def test_invalid_timeout_rejected():
    with pytest.raises(ValueError):
        build_config(parse_args(["--ssh.targets", "r1", "--ssh.timeout", "0"]))
