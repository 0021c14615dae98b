"""Exceptions raised for caller contract violations.

Business-rule denials are never raised; they come back as decision models.
"""


class InvalidLookupError(ValueError):
    """A subscription lookup that does not identify exactly one nanny or family."""


class UnknownPlanError(ValueError):
    """A plan identifier outside the closed SubscriptionPlan set."""


class JobNotFoundError(LookupError):
    """The referenced job does not exist in the store."""
