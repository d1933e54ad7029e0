"""Client context and global defaults."""

import json
from dataclasses import dataclass, field
from typing import Any

from ..config import SDK_NAME, SDK_VERSION, ClientOptions


@dataclass(frozen=True)
class ClientContext:
    """Static app/device/service metadata sent with every submission."""

    client: dict[str, Any]
    env: dict[str, Any]
    services: dict[str, Any]
    custom: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_options(cls, options: ClientOptions, client_id: str) -> "ClientContext":
        return cls(
            client={
                "client_id": client_id,
                "app_title": options.app_title,
                "app_version_name": options.app_version_name,
                "app_version_code": options.app_version_code,
                "app_package_name": options.app_package_name,
            },
            env={
                "platform": options.platform,
                "platform_version": options.platform_version,
                "model": options.model,
                "make": options.make,
                "locale": options.locale,
            },
            services={
                "mobile_analytics": {
                    "app_id": options.app_id,
                    "sdk_name": SDK_NAME,
                    "sdk_version": SDK_VERSION,
                },
            },
        )

    @classmethod
    def from_dict(cls, data: dict) -> "ClientContext":
        return cls(
            client=dict(data.get("client") or {}),
            env=dict(data.get("env") or {}),
            services=dict(data.get("services") or {}),
            custom=dict(data.get("custom") or {}),
        )

    def to_dict(self) -> dict:
        return {
            "client": dict(self.client),
            "env": dict(self.env),
            "services": dict(self.services),
            "custom": dict(self.custom),
        }

    def serialize(self) -> str:
        return json.dumps(self.to_dict())


@dataclass
class GlobalDefaults:
    """Attributes and metrics applied to every created event.

    Call-site values always win over these.
    """

    attributes: dict[str, Any] = field(default_factory=dict)
    metrics: dict[str, Any] = field(default_factory=dict)
