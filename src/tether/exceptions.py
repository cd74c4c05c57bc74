"""Tether exception hierarchy.

All Tether-specific exceptions inherit from TetherError.

Only construction-time validation and wiring mistakes are raised.
Expected business-rule outcomes (a rejected stage skip, an unknown
constraint during lookup, an out-of-order workflow transition) are
returned as result objects instead.
"""


class TetherError(Exception):
    """Base exception for all Tether errors."""


class ConstraintValidationError(TetherError, ValueError):
    """Raised when a constraint or value object is built from invalid data.

    Named ConstraintValidationError (not ValidationError) to avoid
    collision with pydantic.ValidationError.
    """


class ConstraintNotFoundError(TetherError):
    """Raised when a resolver is asked for an unknown constraint id."""

    def __init__(self, constraint_id: str) -> None:
        self.constraint_id = constraint_id
        super().__init__(f"Constraint not found: {constraint_id}")


class DuplicateConstraintError(ConstraintValidationError):
    """Raised when a library receives two constraints with the same id."""

    def __init__(self, constraint_id: str) -> None:
        self.constraint_id = constraint_id
        super().__init__(f"Constraint already registered: {constraint_id}")


class UnknownHierarchyLevelError(ConstraintValidationError):
    """Raised when a constraint references a level its hierarchy lacks."""

    def __init__(self, constraint_id: str, level: int) -> None:
        self.constraint_id = constraint_id
        self.level = level
        super().__init__(
            f"Constraint {constraint_id} references hierarchy level {level}, "
            f"which is not defined"
        )


class ResolverError(TetherError):
    """Raised by a constraint resolver that cannot produce its snapshot."""


class ConfigurationError(TetherError, ValueError):
    """Raised when configuration values are missing or out of range."""


class CompositionError(TetherError):
    """Raised when a composition strategy is driven with inconsistent state.

    For example, advancing a sequence with a step id the sequence does
    not define.
    """
