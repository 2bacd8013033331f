import pytest
from pydantic import ValidationError

from msgmapper.bootstrap import deps
from msgmapper.bootstrap.config.loader import get_configfile
from msgmapper.bootstrap.config.settings import MapperSettings
from tests.fake.scanned.orders import IPlaceOrder
from tests.helpers import write_config


@pytest.fixture
def clear_deps():
    for fn in (deps.get_config, deps.get_mapper, deps.get_initializer):
        fn.cache_clear()
    yield
    for fn in (deps.get_config, deps.get_mapper, deps.get_initializer):
        fn.cache_clear()


@pytest.mark.ut
def test_no_configfile(clean_env):
    assert get_configfile() is None


@pytest.mark.ut
def test_configfile_in_working_directory(clean_env):
    file = write_config(clean_env, {"proxy_suffix": "Impl"})

    assert get_configfile() == file


@pytest.mark.ut
def test_configfile_from_env(clean_env, monkeypatch):
    file = write_config(clean_env, {}, name="custom.yaml")
    monkeypatch.setenv("MSGMAPPERCONFIG", str(file))

    assert get_configfile() == file


@pytest.mark.ut
def test_missing_configfile_from_env_exits(clean_env, monkeypatch):
    monkeypatch.setenv("MSGMAPPERCONFIG", str(clean_env / "missing.yaml"))

    with pytest.raises(SystemExit, match="Configuration file not found"):
        get_configfile()


@pytest.mark.ut
def test_defaults(clean_env):
    settings = MapperSettings()

    assert settings.proxy_suffix == "__impl"
    assert settings.field_prefix == "_field_"
    assert settings.key_value_namespace == "msgmapper"
    assert settings.replicate_metadata is True
    assert settings.seal_proxies is True
    assert settings.import_fallback is True
    assert settings.log_level == "INFO"
    assert settings.scan_packages == []


@pytest.mark.ut
def test_yaml_configuration(clean_env):
    write_config(clean_env, {
        "proxy_suffix": "Impl",
        "key_value_namespace": "acme",
        "import_fallback": False,
        "scan_packages": ["tests.fake.scanned"],
    })

    settings = MapperSettings()

    assert settings.proxy_suffix == "Impl"
    assert settings.key_value_namespace == "acme"
    assert settings.import_fallback is False
    assert settings.scan_packages == ["tests.fake.scanned"]


@pytest.mark.ut
def test_env_overrides_yaml(clean_env, monkeypatch):
    write_config(clean_env, {"proxy_suffix": "Impl", "log_level": "DEBUG"})
    monkeypatch.setenv("MSGMAPPER_PROXY_SUFFIX", "Proxy")

    settings = MapperSettings()

    assert settings.proxy_suffix == "Proxy"
    assert settings.log_level == "DEBUG"


@pytest.mark.ut
@pytest.mark.parametrize("suffix", ["", "-impl", "a.b", "has space"])
def test_invalid_suffix(clean_env, suffix):
    with pytest.raises(ValidationError):
        MapperSettings(proxy_suffix=suffix)


@pytest.mark.ut
def test_invalid_log_level(clean_env):
    with pytest.raises(ValidationError):
        MapperSettings(log_level="VERBOSE")


@pytest.mark.ut
def test_get_config_exits_on_invalid_configuration(clean_env, clear_deps):
    write_config(clean_env, {"field_prefix": "not valid"})

    with pytest.raises(SystemExit, match="Configuration validation failed"):
        deps.get_config()


@pytest.mark.ut
def test_get_mapper_uses_configuration(clean_env, clear_deps):
    write_config(clean_env, {"proxy_suffix": "Impl"})

    mapper = deps.get_mapper()
    mapper.initialize([IPlaceOrder])

    assert deps.get_mapper() is mapper
    assert mapper.get_mapped_type_for(IPlaceOrder).__name__ == "IPlaceOrderImpl"


@pytest.mark.ut
def test_bootstrap_scans_configured_packages(clean_env, clear_deps):
    write_config(clean_env, {"scan_packages": ["tests.fake.scanned"], "log_level": "WARNING"})

    mapper = deps.bootstrap()

    assert mapper.initialized
    assert mapper.get_mapped_type_for(IPlaceOrder).__name__ == "IPlaceOrder__impl"
    assert deps.bootstrap() is mapper
