"""clocktick - schedule delayed and recurring jobs and receive them as webhooks.

Public API:
- Router: registers handlers, schedules jobs, dispatches callbacks
- custom_endpoint: deliver a handler's jobs to a non-default endpoint
- from_datetime / from_now: job timing properties
- delete_job: remove a scheduled job

Errors live in clocktick.errors.
"""

from clocktick.client import ClocktickClient, JobCreationResponse, delete_job
from clocktick.errors import (
    APIError,
    ApplicationError,
    ArityMismatch,
    ClocktickError,
    ConfigurationError,
    HttpStatusError,
    InvalidArgument,
    RouteNotFound,
    TransportError,
)
from clocktick.properties import (
    Delta,
    DeltaBuilder,
    JobProperties,
    JobPropertiesBuilder,
    from_datetime,
    from_now,
)
from clocktick.router import Router, WebhookResponse
from clocktick.routing import custom_endpoint

__version__ = "0.1.0"

__all__ = [
    "APIError",
    "ApplicationError",
    "ArityMismatch",
    "ClocktickClient",
    "ClocktickError",
    "ConfigurationError",
    "Delta",
    "DeltaBuilder",
    "HttpStatusError",
    "InvalidArgument",
    "JobCreationResponse",
    "JobProperties",
    "JobPropertiesBuilder",
    "RouteNotFound",
    "Router",
    "TransportError",
    "WebhookResponse",
    "custom_endpoint",
    "delete_job",
    "from_datetime",
    "from_now",
]
