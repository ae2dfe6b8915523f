"""
Package marker for the member account service.
It groups the query-construction layer, the repository, and the HTTP API under one import path.
Most functionality lives in the sibling packages; this file intentionally stays lightweight.
"""
