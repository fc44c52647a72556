# src/loginsights/telemetry/context.py
"""Envelope context tags.

Tags are the ``ai.*`` keys Application Insights uses to group telemetry by
user, session, operation and cloud role. A TelemetryContext holds the tags
stamped on every envelope a client sends; track calls can override them per
item with ``tag_overrides``.
"""

import os
import socket
from dataclasses import dataclass

from loginsights import __version__

SDK_VERSION = f"py:loginsights{__version__}"


@dataclass(frozen=True, slots=True)
class ContextTagKeys:
    """Well-known tag names.

    Example:
        client.track_trace("signed in", tag_overrides={client.context.keys.user_id: "u-1"})
    """

    application_version: str = "ai.application.ver"
    device_id: str = "ai.device.id"
    device_os_version: str = "ai.device.osVersion"
    session_id: str = "ai.session.id"
    user_id: str = "ai.user.id"
    user_auth_user_id: str = "ai.user.authUserId"
    user_account_id: str = "ai.user.accountId"
    operation_id: str = "ai.operation.id"
    operation_name: str = "ai.operation.name"
    operation_parent_id: str = "ai.operation.parentId"
    cloud_role: str = "ai.cloud.role"
    cloud_role_instance: str = "ai.cloud.roleInstance"
    internal_sdk_version: str = "ai.internal.sdkVersion"


class TelemetryContext:
    """Tags shared by every envelope of one client.

    Defaults identify the host as the cloud role instance and this package
    as the SDK. ``WEBSITE_SITE_NAME`` (set by Azure App Service) becomes the
    cloud role when present.
    """

    keys = ContextTagKeys()

    def __init__(self) -> None:
        self.tags: dict[str, str] = {
            self.keys.cloud_role_instance: socket.gethostname(),
            self.keys.internal_sdk_version: SDK_VERSION,
        }
        site_name = os.environ.get("WEBSITE_SITE_NAME")
        if site_name:
            self.tags[self.keys.cloud_role] = site_name

    def merged(self, overrides: dict[str, str] | None = None) -> dict[str, str]:
        """Return the context tags with per-item overrides applied."""
        if not overrides:
            return dict(self.tags)
        return {**self.tags, **{key: str(value) for key, value in overrides.items()}}
