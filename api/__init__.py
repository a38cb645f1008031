"""API-Modul: HTTP-Client (requests) für die Schulportal-REST-API."""

from api.client import ApiClient, RemoteError

__all__ = ["ApiClient", "RemoteError"]
