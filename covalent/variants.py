from pydantic import BaseModel, ConfigDict, Field

from covalent import resources
from covalent.envelope import ResourceData


class ResourceVariant(BaseModel):
    """
    Request and decode rules of one resource variant.

    Attributes
    ----------
    name : str
        Variant name, used in logs and errors
    model : type[ResourceData]
        Model of the ``data`` object
    template : str
        Path template relative to the base URL
    query : dict[str, str]
        Argument name -> wire query parameter, in wire order
    """
    name: str
    model: type[ResourceData]
    template: str
    query: dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)


BLOCK_RANGE = {
    "starting_block": "starting-block",
    "ending_block": "ending-block",
}

VARIANTS: dict[str, ResourceVariant] = {
    variant.name: variant
    for variant in (
        ResourceVariant(
            name="balances", model=resources.BalancesData,
            template="{chain_id}/address/{address}/balances_v2/"
        ),
        ResourceVariant(
            name="historical_portfolio", model=resources.HistoricalPortfolioData,
            template="{chain_id}/address/{address}/portfolio_v2/"
        ),
        ResourceVariant(
            name="token_transfers", model=resources.TokenTransfersData,
            template="{chain_id}/address/{address}/transfers_v2/",
            query={"contract_address": "contract-address"}
        ),
        ResourceVariant(
            name="token_holders", model=resources.TokenHoldersData,
            template="{chain_id}/tokens/{address}/token_holders/"
        ),
        ResourceVariant(
            name="token_holder_changes", model=resources.TokenHolderChangesData,
            template="{chain_id}/tokens/{address}/token_holders_changes/",
            query=BLOCK_RANGE
        ),
        ResourceVariant(
            name="transactions", model=resources.TransactionsData,
            template="{chain_id}/address/{address}/transactions_v2/"
        ),
        ResourceVariant(
            name="transaction", model=resources.TransactionData,
            template="{chain_id}/transaction_v2/{tx_hash}/"
        ),
        ResourceVariant(
            name="block", model=resources.BlockData,
            template="{chain_id}/block_v2/{block_height}/"
        ),
        ResourceVariant(
            name="block_heights", model=resources.BlockHeightsData,
            template="{chain_id}/block_v2/{start_date}/{end_date}/"
        ),
        ResourceVariant(
            name="log_events_by_contract", model=resources.LogEventsData,
            template="{chain_id}/events/address/{contract_address}/",
            query=BLOCK_RANGE
        ),
        ResourceVariant(
            name="log_events_by_topic", model=resources.LogEventsData,
            template="{chain_id}/events/topics/{topic_hash}/",
            query={**BLOCK_RANGE, "sender_address": "sender-address"}
        ),
        ResourceVariant(
            name="contract_metadata", model=resources.ContractMetadataData,
            template="{chain_id}/tokens/tokenlists/all/"
        ),
        ResourceVariant(
            name="chains", model=resources.ChainsData,
            template="chains/",
            query={"quote_currency": "quote-currency"}
        ),
        ResourceVariant(
            name="chain_statuses", model=resources.ChainStatusesData,
            template="chains/status/",
            query={"quote_currency": "quote-currency"}
        ),
    )
}


def get_variant(name: str) -> ResourceVariant:
    """
    Look up a variant by name.

    Raises
    ------
    KeyError
        If the variant is unknown
    """
    try:
        return VARIANTS[name]
    except KeyError:
        raise KeyError(f"Unknown resource variant '{name}'") from None
