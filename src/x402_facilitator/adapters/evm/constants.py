"""
EVM Chain Constants

Gas ceilings used when the facilitator submits EVM transfers. Gas is never
estimated: each transfer carries a fixed limit and the node's current gas price.
"""

from typing import Final

#: Gas used by a plain value transfer.
NATIVE_TRANSFER_GAS: Final[int] = 21_000

#: Gas ceiling for ERC20 ``transfer`` calls.
DEFAULT_TOKEN_TRANSFER_GAS: Final[int] = 100_000

#: Receipt result reported for ``status == 1`` receipts, matching TRON's result code.
RECEIPT_SUCCESS: Final[str] = "SUCCESS"
RECEIPT_REVERT: Final[str] = "REVERT"
