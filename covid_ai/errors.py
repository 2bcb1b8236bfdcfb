"""Exceptions raised by the decision engine."""


class EvaluationError(RuntimeError):
    """
    A broken invariant inside an evaluation pass: a cell seeded twice, a
    score asked for at distance zero, an enemy scored while adjacent, or
    an ally scored before any ally was counted. These point to a geometry
    or search bug, so the pass aborts.
    """


class ConfigError(ValueError):
    """Invalid or unknown entry in a bot configuration."""
