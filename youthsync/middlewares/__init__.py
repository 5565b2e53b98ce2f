from .error_handler import add_error_handlers
from .timing import TimingMiddleware

__all__ = ["add_error_handlers", "TimingMiddleware"]
