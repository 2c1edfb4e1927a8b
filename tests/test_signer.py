import pytest
from eth_account import Account
from eth_account.messages import encode_defunct

from veil_client.core.auth.signer import LocalWallet, build_wallet, zeroex_order_hash
from veil_client.dal.datamodel.quote import ZeroExOrder
from veil_client.exceptions import AuthenticationPreconditionError

from conftest import ZEROEX_ORDER_WIRE

PRIVATE_KEY = "0x" + "11" * 32


@pytest.fixture
def wallet():
    return LocalWallet.from_private_key(PRIVATE_KEY)


def order_for(address):
    return ZeroExOrder.model_validate({**ZEROEX_ORDER_WIRE, "makerAddress": address})


@pytest.mark.asyncio
async def test_challenge_signature_recovers_wallet(wallet):
    signature = await wallet.sign(wallet.address, b"challenge-uid")

    recovered = Account.recover_message(encode_defunct(primitive=b"challenge-uid"), signature=signature)
    assert recovered.lower() == wallet.address


@pytest.mark.asyncio
async def test_sign_refuses_foreign_address(wallet):
    with pytest.raises(AuthenticationPreconditionError):
        await wallet.sign("0x0000000000000000000000000000000000000001", b"x")


@pytest.mark.asyncio
async def test_order_signature_layout_and_recovery(wallet):
    order = order_for(wallet.address)

    signed = await wallet.sign_order(order)

    raw = bytes.fromhex(signed.signature[2:])
    assert len(raw) == 66
    assert raw[-1] == 0x03
    v, r, s = raw[0], int.from_bytes(raw[1:33], "big"), int.from_bytes(raw[33:65], "big")
    recovered = Account.recover_message(encode_defunct(primitive=zeroex_order_hash(order)), vrs=(v, r, s))
    assert recovered.lower() == wallet.address
    assert signed.maker_asset_amount == order.maker_asset_amount


@pytest.mark.asyncio
async def test_order_for_other_maker_is_refused(wallet):
    with pytest.raises(AuthenticationPreconditionError):
        await wallet.sign_order(order_for("0x0000000000000000000000000000000000000009"))


def test_order_hash_changes_with_salt(wallet):
    order = order_for(wallet.address)
    other = order.model_copy(update={"salt": "43"})
    assert zeroex_order_hash(order) != zeroex_order_hash(other)
    assert len(zeroex_order_hash(order)) == 32


def test_signed_order_serializes_camel_case(wallet):
    wire = order_for(wallet.address).to_wire()
    assert wire["makerAssetAmount"] == "1000"
    assert wire["exchangeAddress"] == ZEROEX_ORDER_WIRE["exchangeAddress"]
    assert "maker_asset_amount" not in wire


def test_build_wallet_prefers_private_key():
    assert build_wallet() is None
    assert build_wallet(private_key=PRIVATE_KEY).address == LocalWallet.from_private_key(PRIVATE_KEY).address
    mnemonic = "test test test test test test test test test test test junk"
    assert build_wallet(mnemonic=mnemonic).address == "0xf39fd6e51aad88f6f4ce6ab8827279cfffb92266"
