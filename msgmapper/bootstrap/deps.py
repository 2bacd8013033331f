import json
from functools import lru_cache

from pydantic import ValidationError

from msgmapper.bootstrap.config.settings import MapperSettings
from msgmapper.bootstrap.initializer import MessageTypesInitializer
from msgmapper.core.helpers.utils import setup_logging
from msgmapper.core.mapper import MessageMapper


@lru_cache
def get_mapper() -> MessageMapper:
    config = get_config()
    return MessageMapper(
        suffix=config.proxy_suffix,
        field_prefix=config.field_prefix,
        key_value_namespace=config.key_value_namespace,
        replicate_metadata=config.replicate_metadata,
        seal_proxies=config.seal_proxies,
        import_fallback=config.import_fallback,
    )


@lru_cache
def get_initializer() -> MessageTypesInitializer:
    return MessageTypesInitializer(get_mapper())


def bootstrap() -> MessageMapper:
    """Configure logging, scan the configured packages and initialize the mapper."""
    config = get_config()
    mapper = get_mapper()
    if mapper.initialized:
        return mapper

    setup_logging(config.log_level)
    get_initializer().run(config.scan_packages)
    return mapper


@lru_cache
def get_config() -> MapperSettings:
    try:
        return MapperSettings()
    except ValidationError as ex:
        msg = ["Configuration validation failed:"]
        errs = json.loads(ex.json())
        for err in errs:
            msg.append(f"  {'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}")
        raise SystemExit("\n".join(msg))
