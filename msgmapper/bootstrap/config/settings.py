from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict, PydanticBaseSettingsSource, YamlConfigSettingsSource

from msgmapper.bootstrap.config.loader import get_configfile


class MapperSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="MSGMAPPER_",
        extra="ignore"
    )

    proxy_suffix: Annotated[
        str,
        Field(
            description=(
                "Suffix appended to an interface's canonical name to name its generated class.\n"
                "Type tags ending with this suffix resolve to the interface they implement,\n"
                "so it must not change while messages tagged with it are still in flight."
            ),
            default="__impl"
        )
    ]

    field_prefix: Annotated[
        str,
        Field(
            description="Prefix of the private slot backing each generated property.",
            default="_field_"
        )
    ]

    key_value_namespace: Annotated[
        str,
        Field(
            description=(
                "Namespace qualifying the canonical name of bound key/value pairs,\n"
                "e.g. 'msgmapper.KeyValuePairOfstrAndint'."
            ),
            default="msgmapper"
        )
    ]

    replicate_metadata: Annotated[
        bool,
        Field(
            description=(
                "Rebuild the Annotated metadata of interface properties on the generated\n"
                "properties. When disabled, the original metadata objects are shared."
            ),
            default=True
        )
    ]

    seal_proxies: Annotated[
        bool,
        Field(
            description="Forbid subclassing of generated classes.",
            default=True
        )
    ]

    import_fallback: Annotated[
        bool,
        Field(
            description=(
                "Resolve unknown type tags by importing their dotted path.\n"
                "Disable it when payload tags come from untrusted peers."
            ),
            default=True
        )
    ]

    log_level: Annotated[
        Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        Field(
            description="Logging verbosity applied by the bootstrap helpers.",
            default="INFO"
        )
    ]

    scan_packages: Annotated[
        list[str],
        Field(
            description=(
                "Packages scanned at startup for message types.\n"
                "Every module of each package is imported."
            ),
            default_factory=list
        )
    ]

    @field_validator("proxy_suffix", "field_prefix")
    @classmethod
    def validate_identifier_part(cls, v: str) -> str:
        if not v or not f"x{v}".isidentifier():
            raise ValueError(f"'{v}' cannot be used inside a Python identifier")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        configfile = get_configfile()
        if configfile is None:
            return init_settings, env_settings
        return init_settings, env_settings, YamlConfigSettingsSource(settings_cls, yaml_file=configfile)
