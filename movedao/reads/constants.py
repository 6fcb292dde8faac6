"""Shared network constants.

This module centralizes endpoints and the activity tracker's view function
identifiers so the transport and paginator stay free of string literals.
"""

from __future__ import annotations

MODULE_ADDRESS = "0x68a5b5caaa956e8f124cd2f01451c73886dc60b88797ba3da254263bd7a4818b"

# Movement testnet (bardock) endpoints
NETWORK_CONFIG = {
    "fullnode": "https://testnet.movementnetwork.xyz/v1",
    "indexer": "https://hasura.testnet.movementnetwork.xyz/v1/graphql",
    "request_timeout": 30.0,
}

ACTIVITY_MODULE = "activity_tracker"


def view_function(name: str, module: str = ACTIVITY_MODULE, address: str = MODULE_ADDRESS) -> str:
    """Build a fully qualified view function id (``addr::module::name``)."""
    return f"{address}::{module}::{name}"


GET_TOTAL_ACTIVITIES = view_function("get_total_activities")
GET_DAO_ACTIVITIES = view_function("get_dao_activities")
GET_USER_ACTIVITIES = view_function("get_user_activities")
GET_ACTIVITY_BY_ID = view_function("get_activity_by_id")
ACTIVITY_EVENT_TYPE = view_function("ActivityEvent")

# Prefix used for cache keys of event-log scans (they are not view calls)
EVENTS_FUNCTION_PREFIX = "events:"

# Contract stores amounts in octas
OCTAS_PER_UNIT = 10**8
