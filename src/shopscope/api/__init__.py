"""REST collaborator for the back-office admin API."""

from .client import AdminApiClient, ApiError, ResourceGateway

__all__ = ["AdminApiClient", "ApiError", "ResourceGateway"]
