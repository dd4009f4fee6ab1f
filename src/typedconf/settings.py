"""
Library settings using pydantic-settings.

Settings come from constructor arguments, then environment variables with
the TYPEDCONF_ prefix:

  TYPEDCONF_JSON_COMMENTS=false
  TYPEDCONF_ENCODING=latin-1
"""

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings


class Settings(_pydantic_settings.BaseSettings):
    """
    Settings controlling how typedconf reads configuration sources.

    Binding and merging have no settings; their behaviour is fixed.
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="TYPEDCONF_",
        extra="ignore",
    )

    json_comments: bool = True
    """Strip // and /* */ comments before parsing JSON."""

    encoding: str = _pydantic.Field(default="utf-8", min_length=1)
    """Text encoding of configuration files."""
