# This file marks the HTTP API package for the member service.
# The application factory lives in `app.py`; routers and schemas are grouped in subpackages.
