"""Exceptions raised by the relevance engine."""


class RelevanceEngineError(Exception):
    """Base class for engine errors."""


class OrganizationNotFoundError(RelevanceEngineError):
    """No profile exists for the requested organization."""

    def __init__(self, organization_id):
        self.organization_id = organization_id
        super().__init__(f"Organization {organization_id} not found")


class TrendNotFoundError(RelevanceEngineError):
    """No trend exists for the requested identifier."""

    def __init__(self, trend_id):
        self.trend_id = trend_id
        super().__init__(f"Trend {trend_id} not found")


class SemanticClassifierError(RelevanceEngineError):
    """The external semantic classifier failed or returned garbage."""
