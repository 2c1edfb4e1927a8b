from typing import Optional, Protocol

from eth_account import Account
from eth_account.messages import _hash_eip191_message, encode_defunct, encode_typed_data
from eth_account.signers.local import LocalAccount
from web3 import Web3

from veil_client.dal.datamodel.quote import SignedZeroExOrder, ZeroExOrder
from veil_client.exceptions import AuthenticationPreconditionError

# 0x v2 signature type appended to the VRS bytes for eth_sign signatures
ETH_SIGN_SIGNATURE_TYPE = b"\x03"

ZEROEX_DOMAIN_NAME = "0x Protocol"
ZEROEX_DOMAIN_VERSION = "2"

ZEROEX_ORDER_TYPES = {
    "EIP712Domain": [
        {"name": "name", "type": "string"},
        {"name": "version", "type": "string"},
        {"name": "verifyingContract", "type": "address"},
    ],
    "Order": [
        {"name": "makerAddress", "type": "address"},
        {"name": "takerAddress", "type": "address"},
        {"name": "feeRecipientAddress", "type": "address"},
        {"name": "senderAddress", "type": "address"},
        {"name": "makerAssetAmount", "type": "uint256"},
        {"name": "takerAssetAmount", "type": "uint256"},
        {"name": "makerFee", "type": "uint256"},
        {"name": "takerFee", "type": "uint256"},
        {"name": "expirationTimeSeconds", "type": "uint256"},
        {"name": "salt", "type": "uint256"},
        {"name": "makerAssetData", "type": "bytes"},
        {"name": "takerAssetData", "type": "bytes"},
    ],
}


class MessageSigner(Protocol):
    async def sign(self, address: str, message: bytes) -> str: ...


class OrderSigner(Protocol):
    async def sign_order(self, order: ZeroExOrder) -> SignedZeroExOrder: ...


def _hex(b: bytes) -> str:
    h = b.hex()
    return h if h.startswith("0x") else "0x" + h


def zeroex_order_typed_data(order: ZeroExOrder) -> dict:
    return {
        "types": ZEROEX_ORDER_TYPES,
        "primaryType": "Order",
        "domain": {
            "name": ZEROEX_DOMAIN_NAME,
            "version": ZEROEX_DOMAIN_VERSION,
            "verifyingContract": Web3.to_checksum_address(order.exchange_address),
        },
        "message": {
            "makerAddress": Web3.to_checksum_address(order.maker_address),
            "takerAddress": Web3.to_checksum_address(order.taker_address),
            "feeRecipientAddress": Web3.to_checksum_address(order.fee_recipient_address),
            "senderAddress": Web3.to_checksum_address(order.sender_address),
            "makerAssetAmount": int(order.maker_asset_amount),
            "takerAssetAmount": int(order.taker_asset_amount),
            "makerFee": int(order.maker_fee),
            "takerFee": int(order.taker_fee),
            "expirationTimeSeconds": int(order.expiration_time_seconds),
            "salt": int(order.salt),
            "makerAssetData": Web3.to_bytes(hexstr=order.maker_asset_data),
            "takerAssetData": Web3.to_bytes(hexstr=order.taker_asset_data),
        },
    }


def zeroex_order_hash(order: ZeroExOrder) -> bytes:
    encoded = encode_typed_data(full_message=zeroex_order_typed_data(order))
    return _hash_eip191_message(encoded)


class LocalWallet:
    """Signs session challenges and 0x orders with a local key."""

    def __init__(self, account: LocalAccount):
        self._account = account
        self.address = account.address.lower()

    @classmethod
    def from_private_key(cls, private_key: str) -> "LocalWallet":
        return cls(Account.from_key(private_key))

    @classmethod
    def from_mnemonic(cls, mnemonic: str, account_path: str = "m/44'/60'/0'/0/0") -> "LocalWallet":
        Account.enable_unaudited_hdwallet_features()
        return cls(Account.from_mnemonic(mnemonic, account_path=account_path))

    async def sign(self, address: str, message: bytes) -> str:
        if address.lower() != self.address:
            raise AuthenticationPreconditionError(f"Wallet {self.address} cannot sign for {address}")
        signed = self._account.sign_message(encode_defunct(primitive=message))
        return _hex(signed.signature)

    async def sign_order(self, order: ZeroExOrder) -> SignedZeroExOrder:
        if order.maker_address.lower() != self.address:
            raise AuthenticationPreconditionError(
                f"Quote maker {order.maker_address} does not match wallet {self.address}"
            )
        # eth_sign over the EIP-712 order hash, laid out as v || r || s || type
        signed = self._account.sign_message(encode_defunct(primitive=zeroex_order_hash(order)))
        signature = (
            bytes([signed.v])
            + signed.r.to_bytes(32, "big")
            + signed.s.to_bytes(32, "big")
            + ETH_SIGN_SIGNATURE_TYPE
        )
        return SignedZeroExOrder(**order.model_dump(), signature=_hex(signature))


def build_wallet(mnemonic: Optional[str] = None, private_key: Optional[str] = None) -> Optional[LocalWallet]:
    if private_key:
        return LocalWallet.from_private_key(private_key)
    if mnemonic:
        return LocalWallet.from_mnemonic(mnemonic)
    return None
