# Routes package init
"""
DevNote Backend - API Routes Package
====================================

Route Inventory:
    - auth.py:    POST /api/auth/register, POST /api/auth/login
    - users.py:   profile, privacy, follow, and the per-profile lists
    - posts.py:   create, read, visibility, like, favorite
    - files.py:   GET /uploads/{path}  (stored avatars)
    - health.py:  GET /health

Routes stay thin: they resolve the Viewer and the session through
dependencies, call one service method, and set response headers.
"""
