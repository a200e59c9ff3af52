"""
Browser push delivery.

Components:
- push_models.py: Subscription, per-subscriber outcomes, DispatchResult
- payload.py: typed notification payload builder
- subscription_store.py: SQLite registry of push endpoints
- webpush_transport.py: VAPID Web Push transport (pywebpush)
- dispatcher.py: concurrent fan-out with outcome classification
- subscription_api.py: register/unregister helpers for the outer API
"""
