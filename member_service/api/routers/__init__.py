# This file marks the routers package for API route modules.
# Endpoint modules are grouped by concern: operational health and member accounts.
