"""
Billing blueprint (Stripe Checkout JSON endpoint + customer portal).

The blueprint object lives in billing/routes.py as billing_bp; app.py
registers it.
"""
