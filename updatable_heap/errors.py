class EmptyHeapError(IndexError):
    """Raised when peeking at a heap that holds no elements."""


class HeapInvariantError(RuntimeError):
    """The heap array or its position index is inconsistent.

    Only raised by explicit invariant checks. Seeing one means a mutation
    left the structure broken, it is not a recoverable condition.
    """
