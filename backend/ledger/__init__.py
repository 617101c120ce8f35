from .engine import MovementEngine
from .movements import MovementFilter, MovementRequest
from .result import Err, ErrorKind, Ok, Result

__all__ = [
    "MovementEngine",
    "MovementFilter",
    "MovementRequest",
    "Err",
    "ErrorKind",
    "Ok",
    "Result",
]
