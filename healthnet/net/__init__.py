from .requester import Requester, parse_address
from .responder import Responder

__all__ = [
    "Requester",
    "Responder",
    "parse_address",
]
