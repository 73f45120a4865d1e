"""
FastAPI routers grouped by use case (auth, events, members).

Each file exposes an APIRouter included by the application factory in
memberhub/app.py. Routers only translate HTTP to CommunityService calls.
"""
