"""
Exceptions raised by ChIPViz

Both are single-shot failures: nothing is retried and no partial result
is returned.
"""


class ConfigurationError(ValueError):
    """Invalid arguments supplied to a plotting function"""


class RenderError(RuntimeError):
    """The underlying diagram library rejected the computed inputs"""
