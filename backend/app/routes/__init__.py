# Routes package init
"""
Blog Backend — API Routes Package
===================================

Route Inventory:
    - users.py:   POST /users/signup   (register a user)
                  PUT  /users/{id}     (update a user)
    - health.py:  GET  /health         (service health check)

Routes stay thin: read the request, call the service, return the result.
"""
