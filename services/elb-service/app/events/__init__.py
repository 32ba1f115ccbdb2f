from .rabbit import RabbitBus

__all__ = ["RabbitBus"]
