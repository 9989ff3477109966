# config.py
"""
Flask config (loaded via app.config.from_object("config")).

Everything comes from the environment so the same code runs locally and in
production. Payment values are also re-read at request time through
services.checkout.get_cfg, so changing the env is picked up without reload.
"""
import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

SQLALCHEMY_DATABASE_URI = os.getenv("SQLALCHEMY_DATABASE_URI", "sqlite:///aitexgen.db")
SQLALCHEMY_TRACK_MODIFICATIONS = False

# Stripe: publishable key gates the subscribe flow, secret key mints sessions
STRIPE_PUBLIC_KEY = os.getenv("STRIPE_PUBLIC_KEY", "")
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY", "")

PRICE_BASIC = os.getenv("PRICE_BASIC", "")
PRICE_PRO = os.getenv("PRICE_PRO", "")
PRICE_POWER = os.getenv("PRICE_POWER", "")

# Absolute site base for Stripe success/cancel URLs (falls back to request root)
APP_BASE_URL = os.getenv("APP_BASE_URL", "")

# Optional external checkout backend; when set it replaces direct Stripe calls
CHECKOUT_API_URL = os.getenv("CHECKOUT_API_URL", "")
CHECKOUT_TIMEOUT_SECONDS = float(os.getenv("CHECKOUT_TIMEOUT_SECONDS", "15"))

LOG_DIR = os.getenv("LOG_DIR", "")
