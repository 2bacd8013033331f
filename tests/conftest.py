import pytest

from msgmapper.core.helpers.naming import TypeNamer
from msgmapper.core.mapper import MessageMapper
from msgmapper.core.mapping.registry import TypeRegistry
from msgmapper.core.mapping.synthesizer import ProxyTypeSynthesizer
from msgmapper.core.mapping.walker import TypeGraphWalker


@pytest.fixture
def namer() -> TypeNamer:
    return TypeNamer()


@pytest.fixture
def registry(namer) -> TypeRegistry:
    return TypeRegistry(namer)


@pytest.fixture
def synthesizer(namer) -> ProxyTypeSynthesizer:
    return ProxyTypeSynthesizer(namer)


@pytest.fixture
def walker(registry, synthesizer, namer) -> TypeGraphWalker:
    return TypeGraphWalker(registry, synthesizer, namer)


@pytest.fixture
def mapper() -> MessageMapper:
    return MessageMapper()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run from an empty directory with no MSGMAPPER_* variables set."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("MSGMAPPERCONFIG", raising=False)
    for name in ("PROXY_SUFFIX", "FIELD_PREFIX", "KEY_VALUE_NAMESPACE", "LOG_LEVEL", "SCAN_PACKAGES"):
        monkeypatch.delenv(f"MSGMAPPER_{name}", raising=False)
    return tmp_path
