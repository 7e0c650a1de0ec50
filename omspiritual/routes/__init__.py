"""
OM Spiritual Backend - API Routes Package
==========================================

Route Inventory:
    - auth.py:      POST /api/auth/signup, POST /api/auth/login, GET /api/auth/me
    - chants.py:    GET  /api/chants
    - moods.py:     POST /api/moods, GET /api/moods/history
    - ai.py:        GET  /api/ai/recommendation
    - payments.py:  POST /api/payments/create-subscription, POST /api/payments/webhook
    - admin.py:     GET  /api/admin/stats, POST /api/admin/chants,
                    POST /api/admin/users/toggle-status     (admin role)
    - health.py:    GET  /health

Routes stay thin: parse the request, declare auth requirements as
dependencies, call one service, return its result.
"""
