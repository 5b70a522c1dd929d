"""
Proxy endpoints over ``CovalentClient``.

Responses are the typed projection of the upstream body, re-flattened by
``ResourceEnvelope.to_wire``, not the raw body: fields the models exclude
(``nft_data``, transfer ``method_calls``, decoded parameter ``value``) and
fields the models do not declare are dropped.
"""
from typing import Annotated, Any

from dishka import FromComponent
from dishka.integrations.fastapi import inject
from fastapi import APIRouter

from covalent.client import CovalentClient
from covalent.schemas import (
    AddressRequest,
    BlockHeightsRequest,
    BlockRequest,
    ChainRequest,
    ChainsRequest,
    LogEventsByContractRequest,
    LogEventsByTopicRequest,
    TokenHolderChangesRequest,
    TokenTransfersRequest,
    TransactionRequest,
)

router = APIRouter(
    prefix="/api/covalent",
    tags=["Covalent"]
)

Client = Annotated[CovalentClient, FromComponent("covalent")]


@router.post("/token-balances")
@inject
async def get_token_balances(request: AddressRequest, client: Client) -> dict[str, Any]:
    """
    Get token balances for an address.

    Parameters
    ----------
    request : AddressRequest
        Request with address, optional chain and pagination
    client : CovalentClient
        Covalent client

    Returns
    -------
    dict[str, Any]
        Envelope in the API's wire shape, error overlay included
    """
    envelope = await client.get_token_balances(request.address, **request.call_kwargs())
    return envelope.to_wire()


@router.post("/historical-portfolio-value")
@inject
async def get_historical_portfolio_value(request: AddressRequest, client: Client) -> dict[str, Any]:
    """Get historical portfolio value for an address."""
    envelope = await client.get_historical_portfolio_value(request.address, **request.call_kwargs())
    return envelope.to_wire()


@router.post("/token-transfers")
@inject
async def get_token_transfers(request: TokenTransfersRequest, client: Client) -> dict[str, Any]:
    """Get ERC20 transfers of a token contract for an address."""
    envelope = await client.get_token_transfers(
        request.address, request.contract_address, **request.call_kwargs()
    )
    return envelope.to_wire()


@router.post("/token-holders")
@inject
async def get_token_holders(request: AddressRequest, client: Client) -> dict[str, Any]:
    """Get holders of a token contract."""
    envelope = await client.get_token_holders(request.address, **request.call_kwargs())
    return envelope.to_wire()


@router.post("/token-holders-changes")
@inject
async def get_changes_in_token_holders(request: TokenHolderChangesRequest, client: Client) -> dict[str, Any]:
    """Get changes in token holders between two block heights."""
    envelope = await client.get_changes_in_token_holders(
        request.address, request.starting_block, request.ending_block, **request.call_kwargs()
    )
    return envelope.to_wire()


@router.post("/transactions")
@inject
async def get_transactions_for_address(request: AddressRequest, client: Client) -> dict[str, Any]:
    envelope = await client.get_transactions_for_address(request.address, **request.call_kwargs())
    return envelope.to_wire()


@router.post("/transaction")
@inject
async def get_transaction(request: TransactionRequest, client: Client) -> dict[str, Any]:
    envelope = await client.get_transaction(request.tx_hash, **request.call_kwargs())
    return envelope.to_wire()


@router.post("/block")
@inject
async def get_block(request: BlockRequest, client: Client) -> dict[str, Any]:
    envelope = await client.get_block(request.block_height, **request.call_kwargs())
    return envelope.to_wire()


@router.post("/block-heights")
@inject
async def get_block_heights(request: BlockHeightsRequest, client: Client) -> dict[str, Any]:
    envelope = await client.get_block_heights(
        request.start_date, request.end_date, **request.call_kwargs()
    )
    return envelope.to_wire()


@router.post("/log-events/contract")
@inject
async def get_log_events_by_contract(request: LogEventsByContractRequest, client: Client) -> dict[str, Any]:
    envelope = await client.get_log_events_by_contract(
        request.contract_address, request.starting_block, request.ending_block,
        **request.call_kwargs()
    )
    return envelope.to_wire()


@router.post("/log-events/topics")
@inject
async def get_log_events_by_topic_hashes(request: LogEventsByTopicRequest, client: Client) -> dict[str, Any]:
    envelope = await client.get_log_events_by_topic_hashes(
        request.topic_hash, request.sender_address, request.starting_block, request.ending_block,
        **request.call_kwargs()
    )
    return envelope.to_wire()


@router.post("/contract-metadata")
@inject
async def get_all_contract_metadata(request: ChainRequest, client: Client) -> dict[str, Any]:
    """Get metadata of all token contracts; ``items`` stays a list of lists."""
    envelope = await client.get_all_contract_metadata(**request.call_kwargs())
    return envelope.to_wire()


@router.post("/chains")
@inject
async def get_all_chains(request: ChainsRequest, client: Client) -> dict[str, Any]:
    envelope = await client.get_all_chains(request.quote_currency, **request.call_kwargs())
    return envelope.to_wire()


@router.post("/chains/status")
@inject
async def get_all_chain_statuses(request: ChainsRequest, client: Client) -> dict[str, Any]:
    envelope = await client.get_all_chain_statuses(request.quote_currency, **request.call_kwargs())
    return envelope.to_wire()
