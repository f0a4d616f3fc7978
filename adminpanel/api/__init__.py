"""HTTP integration points for the routing layer."""
