from .elb import ELBEvent, Port

__all__ = [
    "ELBEvent",
    "Port",
]
