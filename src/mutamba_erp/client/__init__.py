"""
mutamba_erp.client

Client-side boundary to the backend.

Responsibilities:
- HTTP transport with API key and session token attached.
- Client identity provider emitting ordered auth-state notifications.
- Directory reader and callable-function invoker over HTTP.
"""

# Package marker.
