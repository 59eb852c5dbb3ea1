"""Score ledger domain services: graph, snapshots, totals and standings.

This package holds the ledger's domain logic, imported by HTTP routes,
socket handlers and CLI commands. Nothing here commits the session;
callers persist through ``pubranker.services.persistence.save``.
"""
