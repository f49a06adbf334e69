"""Infrastructure adapters: logging, cache, rate limiting, transport, the API
client runtime and the services built on it."""
