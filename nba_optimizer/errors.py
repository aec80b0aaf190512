"""Exceptions raised by the roster optimization pipeline."""


class OptimizerError(RuntimeError):
    """Base class for all roster optimization failures."""


class FormulationError(OptimizerError):
    """The problem is unsatisfiable from the player pool alone; nothing was solved."""


class InfeasibleError(OptimizerError):
    """
    The solver found no assignment satisfying every constraint, or stopped
    before proving the one it found optimal.
    """

    def __init__(self, message: str, status: str | None = None):
        super().__init__(message)
        self.status = status


class ConsistencyError(OptimizerError):
    """A decoded assignment or roster breaks a roster invariant."""


class DegenerateMetricError(OptimizerError):
    """Metric values cannot be split proportionally (zero, negative or NaN)."""
