"""
ID generation utilities for healthmem.

Provides consistent ID generation:
- Nodes: node_xxx
- Routing requests: req_xxx
"""

from uuid import uuid4


def generate_node_id() -> str:
    """
    Generate unique node ID.

    Returns:
        ID in format "node_xxx" where xxx is 12 hex characters
    """
    return f"node_{uuid4().hex[:12]}"


def generate_request_id() -> str:
    """
    Generate an ID used to correlate routing decisions in the logs.

    Returns:
        ID in format "req_xxx" where xxx is 8 hex characters
    """
    return f"req_{uuid4().hex[:8]}"
