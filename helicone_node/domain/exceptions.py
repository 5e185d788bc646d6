from __future__ import annotations


class NodeConfigurationError(Exception):
    """Raised when a node parameter is missing or invalid (before any request is sent)."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NodeOperationError(Exception):
    """Raised when processing one input item fails and the batch must abort.

    The original exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, *, item_index: int):
        super().__init__(message)
        self.message = message
        self.item_index = item_index
