import pytest

from shortener import cli
from shortener.config import _get_float, _get_int, default_backend


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("SERVER_ADDRESS", "BASE_URL", "DATABASE_DSN", "STORAGE_BACKEND"):
        monkeypatch.delenv(name, raising=False)


def test_flags_are_parsed():
    args = cli.parse_args(["-a", ":9090", "-b", "http://short.example/", "-d", "postgresql://x/y"])
    assert args.address == ":9090"
    assert args.base_url == "http://short.example"
    assert args.dsn == "postgresql://x/y"


def test_env_overrides_flags(monkeypatch):
    monkeypatch.setenv("BASE_URL", "http://env.example/")
    monkeypatch.setenv("SERVER_ADDRESS", "0.0.0.0:8000")
    args = cli.parse_args(["-a", ":9090", "-b", "http://flag.example"])
    assert args.base_url == "http://env.example"
    assert args.address == "0.0.0.0:8000"


@pytest.mark.parametrize(
    "address,expected",
    [("localhost:8080", ("localhost", 8080)), (":8080", ("0.0.0.0", 8080))],
)
def test_split_address(address, expected):
    assert cli.split_address(address) == expected


@pytest.mark.parametrize("address", ["8080", "localhost:http"])
def test_split_address_rejects(address):
    with pytest.raises(ValueError):
        cli.split_address(address)


def test_env_number_parsing_falls_back(monkeypatch):
    monkeypatch.setenv("DB_POOL_MAX_SIZE", "ten")
    monkeypatch.setenv("DB_TIMEOUT", "soon")
    assert _get_int("DB_POOL_MAX_SIZE", 10) == 10
    assert _get_float("DB_TIMEOUT", 5.0) == 5.0


def test_default_backend(monkeypatch):
    assert default_backend("") == "memory"
    assert default_backend("postgresql://x/y") == "postgres"
    monkeypatch.setenv("STORAGE_BACKEND", "Memory")
    assert default_backend("postgresql://x/y") == "memory"
