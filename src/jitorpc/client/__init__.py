"""
Client - block-engine interaction layer.

Provides the JSON-RPC transport, bundle / transaction services, ledger
lookups, transaction assembly and the bounded status poller.

Uses httpx for HTTP and solders for transaction building.
"""
