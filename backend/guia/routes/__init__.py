# Routes package init
"""
Guia Backend — API Routes Package
===================================

Route Inventory:
    - listings.py:  /<plural> for each listing kind (built per kind)
    - comments.py:  /comments
    - users.py:     /users
    - auth.py:      /login, /google
    - health.py:    /health

Routes stay thin: read the request, call the service held by the
application context, return the response model. Business rules live in
services/.
"""
