"""HTTP surface of the affiliate commission engine (aiohttp)."""
