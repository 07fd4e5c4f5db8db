"""
duopool Exceptions

Custom exception classes for the constant-product pool.

Every pool failure aborts the whole operation; the exception name and
message are the only diagnostic.
"""


class DuopoolException(Exception):
    """Base exception for duopool."""
    pass


class ConfigurationError(DuopoolException):
    """Configuration error."""
    pass


class PoolError(DuopoolException):
    """Base exception for pool operations."""
    pass


# -- Validation / precondition failures ---------------------------------

class InvalidTokensError(PoolError):
    """Asset pair does not match the pool's fixed pair."""
    pass


class ExpiredError(PoolError):
    """Current time is past the caller's deadline."""
    pass


class InsufficientAAmountError(PoolError):
    """Accepted amount of asset A is below the caller's minimum."""
    pass


class InsufficientBAmountError(PoolError):
    """Accepted amount of asset B is below the caller's minimum."""
    pass


class NoLiquidityMintedError(PoolError):
    """Deposit would mint zero liquidity."""
    pass


class InsufficientShareError(PoolError):
    """Owner holds fewer liquidity shares than requested."""
    pass


class InvalidLiquidityError(PoolError):
    """Liquidity amount to burn is not positive."""
    pass


class UnsupportedPathError(PoolError):
    """Swap path is not exactly two assets long."""
    pass


class InvalidPairError(PoolError):
    """Assets do not name the pool's pair."""
    pass


class InsufficientOutputError(PoolError):
    """Swap output is below the caller's minimum."""
    pass


class NoLiquidityError(PoolError):
    """Reserve needed for a price is zero."""
    pass


class InvalidAmountError(PoolError):
    """Input amount is zero or negative."""
    pass


class InsufficientLiquidityError(PoolError):
    """A reserve needed for a quote is zero."""
    pass


class TransferFailedError(PoolError):
    """An asset ledger refused a transfer."""

    def __init__(self, asset: str, message: str = ""):
        self.asset = asset
        super().__init__(message or f"Transfer of {asset} failed")


# -- Execution guards ---------------------------------------------------

class ReentrancyError(PoolError):
    """A pool operation was entered while another one is in progress."""
    pass


class InvariantViolationError(PoolError):
    """Pool bookkeeping no longer satisfies its invariants."""
    pass
