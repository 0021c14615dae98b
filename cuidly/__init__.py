"""Cuidly marketplace core: plan entitlements and nanny/family matching."""
