"""
mutamba_erp.frontend

Presentation-facing gate over the client core.

Responsibilities:
- Decide which screen to show (configuration error, loading, login, app).
- Filter navigation by role.
- Controllers that turn core results and errors into user-visible messages.
"""

# Package marker.
