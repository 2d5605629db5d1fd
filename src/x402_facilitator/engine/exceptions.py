"""
Exception and Error Definitions Module

Defines the custom exception hierarchy for payment decoding, verification,
settlement and blockchain interactions. All exceptions inherit from
BaseException for unified exception handling.

Inside the verify/settle engine boundary, input and verification failures are
reported as result models rather than raised. These exceptions are raised by
chain clients and configuration code, and converted into results by the
settlement engine.

Exception Hierarchy:
    BaseException (root)
    ├── ConfigurationError
    ├── UnsupportedNetworkError
    └── BlockchainInteractionError
        └── TransactionExecutionError
"""


class BaseException(Exception):
    """
    Root exception class for all project-specific exceptions.

    All custom exceptions should inherit from this class to enable
    unified exception handling and centralized error processing.
    """
    pass


class ConfigurationError(BaseException):
    """
    Raised when configuration is missing or invalid.

    This includes scenarios such as:
    - Settlement wallet requested before it was initialized
    - Missing or malformed private key
    - No chain client registered for a network family
    """
    pass


class UnsupportedNetworkError(BaseException):
    """
    Raised when a network tag is not present in the supported catalog
    or has no facilitator configured for its family.
    """
    pass


class BlockchainInteractionError(BaseException):
    """
    Raised when blockchain interaction (RPC call) fails.

    This includes scenarios such as:
    - RPC call timeout
    - Network connectivity issues
    - Node returned an error payload

    Attributes:
        rpc_method: RPC method or API path that was called
    """

    def __init__(self, message: str, rpc_method: str = None):
        super().__init__(message)
        self.rpc_method = rpc_method


class TransactionExecutionError(BlockchainInteractionError):
    """
    Raised when a transaction cannot be built, signed or broadcast.

    This includes scenarios such as:
    - Node rejected the transaction
    - Contract trigger returned no transaction
    - Broadcast result was not accepted

    Attributes:
        tx_hash: Transaction hash if one was assigned before the failure
    """

    def __init__(self, message: str, rpc_method: str = None, tx_hash: str = None):
        super().__init__(message, rpc_method=rpc_method)
        self.tx_hash = tx_hash
