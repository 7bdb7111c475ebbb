"""HTTP API — request validation, query facade, and the aiohttp server."""
