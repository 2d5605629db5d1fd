"""
TRON Chain Constants

Address encoding, message signing and TronGrid HTTP API constants shared by
the TRON address helpers and the TRON chain client.
"""

from typing import Final

#: Version byte prepended to the 20-byte account hash of every TRON address.
ADDRESS_PREFIX: Final[bytes] = b"\x41"
ADDRESS_PREFIX_HEX: Final[str] = "41"

#: Length of a base58check encoded TRON address ("T" + 33 chars).
BASE58_ADDRESS_LENGTH: Final[int] = 34
#: Length of a hex encoded TRON address ("41" + 40 hex chars).
HEX_ADDRESS_LENGTH: Final[int] = 42

#: Personal message framing used by TronWeb ``signMessage`` / ``verifyMessage``:
#: keccak256(b"\x19TRON Signed Message:\n32" + message).
MESSAGE_VERSION: Final[bytes] = b"T"
MESSAGE_HEADER: Final[bytes] = b"RON Signed Message:\n32"

#: TRC20 transfer entrypoint.
TRANSFER_FUNCTION_SELECTOR: Final[str] = "transfer(address,uint256)"

#: Energy fee ceiling for contract transfers, in sun (100 TRX).
DEFAULT_FEE_LIMIT: Final[int] = 100_000_000

#: TronGrid HTTP API header carrying the API key.
API_KEY_HEADER: Final[str] = "TRON-PRO-API-KEY"

CREATE_TRANSACTION_PATH: Final[str] = "/wallet/createtransaction"
TRIGGER_SMART_CONTRACT_PATH: Final[str] = "/wallet/triggersmartcontract"
BROADCAST_TRANSACTION_PATH: Final[str] = "/wallet/broadcasttransaction"
GET_TRANSACTION_INFO_PATH: Final[str] = "/wallet/gettransactioninfobyid"
