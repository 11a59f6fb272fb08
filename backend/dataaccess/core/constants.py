"""Shared constants used by the models and the repository validation."""

# ── Column lengths ────────────────────────────
NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 320
PRODUCT_MAX_LENGTH = 100

# ── Order value rules ─────────────────────────
MIN_QUANTITY = 1
PRICE_SCALE = 2
PRICE_PRECISION = 18
