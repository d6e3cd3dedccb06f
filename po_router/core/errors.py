class RoutingError(Exception):
    """Base class for failures that make an assignment impossible."""


class EmptyPoolError(RoutingError):
    """Raised when no generalist operator is eligible for workload balancing."""


class RoutingRulesError(Exception):
    """Raised when the routing rules file cannot be read or validated."""


class RosterConflictError(Exception):
    """Raised when a roster replacement contains duplicate operator ids."""
