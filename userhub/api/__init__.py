"""HTTP layer: routers and auth dependencies."""
