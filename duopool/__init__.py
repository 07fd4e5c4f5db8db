"""
duopool - two-asset constant-product liquidity pool

Core imports are lazily loaded so that importing a submodule does not pull
in the logging and configuration stack. For direct module access, import
from submodules:

    from duopool.pool import ConstantProductPool
    from duopool.tokens import Token
    from duopool.exceptions import PoolError
"""

__version__ = "1.0.0"


def __getattr__(name):
    """Lazy module loading."""
    if name == 'ConstantProductPool':
        from .pool import ConstantProductPool
        return ConstantProductPool
    elif name == 'PoolState':
        from .pool import PoolState
        return PoolState
    elif name == 'Token':
        from .tokens import Token
        return Token
    elif name == 'load_config':
        from .config import load_config
        return load_config
    raise AttributeError(f"module 'duopool' has no attribute {name!r}")

__all__ = ['ConstantProductPool', 'PoolState', 'Token', 'load_config']
