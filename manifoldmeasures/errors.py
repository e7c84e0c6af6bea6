# errors.py
"""
Exceptions raised by manifoldmeasures.

Invalid numeric parameters are never checked; they surface as NaN/Inf in
results. The classes here cover the few conditions that are reported by
raising: a sampler exceeding its configured rejection limit. Unimplemented
generality (e.g. general matrix-argument hypergeometric functions) is
reported with the builtin `NotImplementedError`.
"""

__all__ = [
    "ManifoldMeasuresError",
    "RejectionLimitError",
]


class ManifoldMeasuresError(Exception):
    """Base class for errors raised by manifoldmeasures."""


class RejectionLimitError(ManifoldMeasuresError, RuntimeError):
    """A rejection sampler exceeded `options.max_rejections` for one draw.

    The draw can be retried; the random stream has advanced, so a retry with
    the same generator makes fresh proposals.
    """

    def __init__(self, sampler: str, max_rejections: int):
        self.sampler = sampler
        self.max_rejections = int(max_rejections)
        super().__init__(
            f"{sampler}: no proposal accepted after {self.max_rejections} rejections. "
            f"Increase `options.max_rejections` or set it to None."
        )
