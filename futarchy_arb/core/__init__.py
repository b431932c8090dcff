from .context import ArbContext

__all__ = ["ArbContext"]
