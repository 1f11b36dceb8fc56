"""Quote fetching, storage and conversion services."""
