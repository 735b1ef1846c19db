"""
mutamba_erp.api.routers

HTTP routers: health probes, sign-in, directory reads and callable functions.
"""

# Package marker.
