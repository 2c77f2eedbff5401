"""
Dashboard Package.

Serves the BTC battle dashboard over HTTP.

Modules:
- state: latest readings and derived scores
- services: feed refresh and score recomputation
- poller: background refresh cadences
- api: FastAPI application
- routers/: API endpoints
"""
