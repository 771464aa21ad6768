"""
Configuration Schemas for sparkrun.

Pydantic models for run configuration records and resolver settings.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sparkrun import keys


class RunConfiguration(BaseModel):
    """
    A named execution target for the remote Spark engine.

    The engine URL is stored in two parts, the schema (e.g. "http://")
    and the rest of the URL (e.g. "spark-daemon:53000"), the way the
    run configuration editor stores them.

    The schema is exposed as `schema_` because `schema` collides with
    a BaseModel attribute; it is read and written as "schema".

    Example:
        {
            "name": "Spark cluster",
            "schema": "http://",
            "url": "spark-daemon:53000"
        }
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field("", description="Run configuration name")
    description: str = Field("", description="Human-readable description")
    schema_: str = Field("", alias="schema", description="URL scheme prefix, e.g. 'http://'")
    url: str = Field("", description="Engine URL without the scheme prefix")

    @field_validator("name", "description", "schema_", "url", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value


class ResolverSettings(BaseModel):
    """
    Resolver settings.

    Defaults used when the run configuration does not say otherwise.
    Built from SPARKRUN_* environment variables by get_settings().
    """

    default_protocol: str = keys.DEFAULT_PROTOCOL
    default_host: str = keys.DEFAULT_HOST
    default_zookeeper_port: str = keys.DEFAULT_ZOOKEEPER_PORT
    default_websocket_port: str = keys.DEFAULT_WEBSOCKET_PORT
    default_daemon_version: str = keys.DEFAULT_DAEMON_VERSION

    # Raise on a malformed engine URL instead of falling back to defaults
    strict_endpoints: bool = False
