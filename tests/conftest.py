import copy
import json
import logging
import os
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

# Set test environment variables before imports
os.environ['COVALENT_API_KEY'] = 'test-key'
os.environ['COVALENT_CHAIN_ID'] = '8217'

from covalent.client import CovalentClient
from covalent.transport import TransportResponse


BASE_URL = "https://api.covalenthq.com/v1"
KLAYTN_ADDR = "0xf4024faad5fafd0755875e3161524c9c4e1a1111"
KLAYTN_TX_HASH = "0x269fad968de5baf8d324b64d0a19df72ccfc762b33e1760729633f4946e0c863"
KLAYTN_CONTRACT_DAI = "0x5c74070fdea071359b86082bd9f9b3deaafbe32b"

CONTRACT = {
    "contract_decimals": 18,
    "contract_name": "Dai Stablecoin",
    "contract_ticker_symbol": "DAI",
    "contract_address": KLAYTN_CONTRACT_DAI,
    "supports_erc": ["erc20"],
    "logo_url": "https://logos.covalenthq.com/tokens/8217/dai.png",
}

LOG_EVENT = {
    "block_signed_at": "2022-05-18T07:31:12Z",
    "block_height": 91321199,
    "tx_offset": 3,
    "log_offset": 7,
    "tx_hash": KLAYTN_TX_HASH,
    "raw_log_topics": [
        "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef",
    ],
    "sender_contract_decimals": 18,
    "sender_name": "Dai Stablecoin",
    "sender_contract_ticker_symbol": "DAI",
    "sender_address": KLAYTN_CONTRACT_DAI,
    "sender_logo_url": "https://logos.covalenthq.com/tokens/8217/dai.png",
    "raw_log_data": "0x00000000000000000000000000000000000000000000000000000000000003e8",
    "decoded": {
        "name": "Transfer",
        "signature": "Transfer(indexed address from, indexed address to, uint256 value)",
        "params": [
            {"name": "from", "type": "address", "indexed": True, "decoded": True},
            {"name": "value", "type": "uint256", "indexed": False, "decoded": True},
        ],
    },
}

TRANSACTION = {
    "block_signed_at": "2022-05-18T07:31:12Z",
    "block_height": 91321199,
    "tx_hash": KLAYTN_TX_HASH,
    "tx_offset": 3,
    "successful": True,
    "from_address": KLAYTN_ADDR,
    "to_address": KLAYTN_CONTRACT_DAI,
    "value": "0",
    "value_quote": 0.0,
    "gas_offered": 200000,
    "gas_spent": 137042,
    "gas_price": 250000000000,
    "fees_paid": "34260500000000000",
    "gas_quote": 0.25,
    "gas_quote_rate": 0.5,
}

TRANSFER = {
    **CONTRACT,
    "block_signed_at": "2022-05-18T07:31:12Z",
    "tx_hash": KLAYTN_TX_HASH,
    "from_address": KLAYTN_ADDR,
    "to_address": "0x0000000000000000000000000000000000000001",
    "transfer_type": "OUT",
    "delta": "1000",
    "balance": "5000",
    "quote_rate": 1.0,
    "delta_quote": 0.5,
    "balance_quote": 2.5,
}

ADDRESS_HEADER = {
    "address": KLAYTN_ADDR,
    "updated_at": "2022-05-20T10:00:00Z",
    "next_update_at": "2022-05-20T10:05:00Z",
    "quote_currency": "USD",
    "chain_id": 8217,
}


def _envelope(data: dict, **overlay) -> dict:
    return {
        "data": data,
        "error": False,
        "error_message": None,
        "error_code": None,
        **overlay,
    }


WIRE_PAYLOADS = {
    "balances": _envelope({
        **ADDRESS_HEADER,
        "items": [{
            **CONTRACT,
            "last_transferred_at": "2022-05-18T07:31:12Z",
            "type": "cryptocurrency",
            "balance": "1250000000000000000",
            "balance_24h": "1000000000000000000",
            "quote_rate": 0.5,
            "quote_rate_24h": 0.25,
            "quote": 0.625,
            "quote_24h": 0.25,
        }],
    }, has_more=False),
    "historical_portfolio": _envelope({
        **ADDRESS_HEADER,
        "items": [{
            **CONTRACT,
            "holdings": [{
                "timestamp": "2022-05-20T00:00:00Z",
                "quote_rate": 1.0,
                "open": {"balance": "10", "quote": 10.0},
                "high": {"balance": "12", "quote": 12.0},
                "low": {"balance": "9", "quote": 9.0},
                "close": {"balance": "11", "quote": 11.0},
            }],
        }],
    }, has_more=True, page_number=0, page_size=10),
    "token_transfers": _envelope({
        **ADDRESS_HEADER,
        "items": [{**TRANSACTION, "transfers": [TRANSFER]}],
    }, has_more=False),
    "token_holders": _envelope({
        "updated_at": "2022-05-20T10:00:00Z",
        "items": [{
            **CONTRACT,
            "address": KLAYTN_ADDR,
            "balance": "5000",
            "total_supply": "1000000",
            "block_height": 91321208,
        }],
    }, has_more=False, page_number=0, page_size=100, total_count=1),
    "token_holder_changes": _envelope({
        "updated_at": "2022-05-20T10:00:00Z",
        "items": [{
            "token_holder": KLAYTN_ADDR,
            "prev_balance": "4000",
            "prev_block_height": 91321199,
            "next_balance": "5000",
            "next_block_height": 91321208,
            "diff": "1000",
        }],
    }, has_more=False),
    "transactions": _envelope({
        **ADDRESS_HEADER,
        "items": [{**TRANSACTION, "log_events": [LOG_EVENT]}],
    }, has_more=False),
    "transaction": _envelope({
        "updated_at": "2022-05-20T10:00:00Z",
        "items": [{**TRANSACTION, "log_events": [LOG_EVENT]}],
    }),
    "block": _envelope({
        "updated_at": "2022-05-20T10:00:00Z",
        "items": [{"signed_at": "2022-05-18T07:31:12Z", "height": 91321199}],
    }),
    "block_heights": _envelope({
        "updated_at": "2022-05-20T10:00:00Z",
        "items": [
            {"signed_at": "2022-05-18T00:00:00Z", "height": 91200000},
            {"signed_at": "2022-05-18T00:00:01Z", "height": 91200001},
        ],
    }, has_more=True, page_number=0, page_size=2),
    "log_events_by_contract": _envelope({
        "updated_at": "2022-05-20T10:00:00Z",
        "items": [LOG_EVENT],
    }, has_more=False),
    "log_events_by_topic": _envelope({
        "updated_at": "2022-05-20T10:00:00Z",
        "items": [LOG_EVENT],
    }, has_more=False),
    "contract_metadata": _envelope({
        "updated_at": "2022-05-20T10:00:00Z",
        "items": [
            [CONTRACT, {**CONTRACT, "contract_ticker_symbol": "USDC", "contract_decimals": 6}],
            [{**CONTRACT, "contract_ticker_symbol": "WETH"}],
        ],
    }, has_more=False),
    "chains": _envelope({
        "updated_at": "2022-05-20T10:00:00Z",
        "items": [{
            "name": "klaytn-mainnet",
            "chain_id": "8217",
            "is_testnet": False,
            "db_schema_name": "klaytn_mainnet",
            "label": "Klaytn Mainnet",
            "logo_url": "https://www.covalenthq.com/static/images/icons/display-icons/klaytn-logo.png",
        }],
    }),
    "chain_statuses": _envelope({
        "updated_at": "2022-05-20T10:00:00Z",
        "items": [{
            "name": "klaytn-mainnet",
            "chain_id": "8217",
            "is_testnet": False,
            "logo_url": "https://www.covalenthq.com/static/images/icons/display-icons/klaytn-logo.png",
            "synced_block_height": 91321208,
            "synced_blocked_signed_at": "2022-05-20T09:59:58Z",
        }],
    }),
}


def as_response(payload: dict | str, status: int = 200) -> TransportResponse:
    """Build a transport response from a payload."""
    body = payload if isinstance(payload, str) else json.dumps(payload)
    return TransportResponse(status=status, body=body.encode("utf-8"))


@pytest.fixture
def wire_payloads() -> dict:
    """Well-formed wire payloads per resource variant (deep copies)."""
    return copy.deepcopy(WIRE_PAYLOADS)


@pytest.fixture
def logger() -> logging.Logger:
    return logging.getLogger("covalent_client.tests")


@pytest.fixture
def transport():
    """
    Mock transport answering every GET with an empty balances page.

    Yields
    ------
    AsyncMock
        Transport whose ``get`` records requested URLs
    """
    mock = AsyncMock()
    mock.get = AsyncMock(return_value=as_response(WIRE_PAYLOADS["balances"]))
    mock.close = AsyncMock()
    return mock


@pytest_asyncio.fixture
async def client(transport, logger):
    """
    Client bound to Klaytn mainnet with a mocked transport.

    Parameters
    ----------
    transport : AsyncMock
        Mocked transport
    logger : logging.Logger
        Test logger

    Yields
    ------
    CovalentClient
        Client instance
    """
    async with CovalentClient.create(
        "8217", api_key="test-key", base_url=BASE_URL, transport=transport, logger=logger
    ) as covalent_client:
        yield covalent_client


def requested_url(transport) -> str:
    """URL of the last GET issued through a mocked transport."""
    return transport.get.call_args.args[0]
