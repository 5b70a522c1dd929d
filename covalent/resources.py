"""
Typed shapes of the Covalent class A resources.

Every ``*Data`` model is the ``data`` object of one resource variant; item
models describe the entries of its ``items`` list. Fields that only some API
versions return are optional. Fields whose wire type varies between a scalar
and a list are listed in ``excluded_fields`` and dropped while decoding.
"""
from typing import Any, ClassVar

from pydantic import AliasChoices, ConfigDict, Field, model_validator

from covalent.envelope import ResourceData, ResourceModel


# python field name -> wire field name
WIRE_ALIASES: dict[str, str] = {
    "balance_type": "type",
    "param_type": "type",
}


def wire_field(name: str, default: Any = None) -> Any:
    """
    Declare a field whose wire name differs from its python name.

    Both names are accepted when decoding; the wire name is used when
    serializing back to the wire shape.
    """
    wire_name = WIRE_ALIASES[name]
    return Field(
        default=default,
        validation_alias=AliasChoices(name, wire_name),
        serialization_alias=wire_name
    )


class Item(ResourceModel):
    """Item base that drops variable-type wire fields."""

    excluded_fields: ClassVar[tuple[str, ...]] = ()

    model_config = ConfigDict(coerce_numbers_to_str=True)

    @model_validator(mode="before")
    @classmethod
    def drop_excluded(cls, value: Any) -> Any:
        if isinstance(value, dict) and cls.excluded_fields:
            return {k: v for k, v in value.items() if k not in cls.excluded_fields}
        return value


class Data(ResourceData):
    model_config = ConfigDict(coerce_numbers_to_str=True)


class AddressData(Data):
    """Common header of address-scoped resources."""
    address: str
    updated_at: str | None = None
    next_update_at: str | None = None
    quote_currency: str | None = None
    chain_id: int | None = None


class ContractInfo(Item):
    contract_decimals: int | None = None
    contract_name: str | None = None
    contract_ticker_symbol: str | None = None
    contract_address: str | None = None
    supports_erc: list[str] | None = None
    logo_url: str | None = None


# balances

class BalanceItem(ContractInfo):
    excluded_fields: ClassVar[tuple[str, ...]] = ("nft_data",)

    last_transferred_at: str | None = None
    balance_type: str | None = wire_field("balance_type")
    balance: str | None = None
    balance_24h: str | None = None
    quote_rate: float | None = None
    quote_rate_24h: float | None = None
    quote: float | None = None
    quote_24h: float | None = None


class BalancesData(AddressData):
    items: list[BalanceItem]


# historical portfolio

class HoldingValue(Item):
    balance: str | None = None
    quote: float | None = None


class Holding(Item):
    timestamp: str | None = None
    quote_rate: float | None = None
    open: HoldingValue | None = None
    high: HoldingValue | None = None
    low: HoldingValue | None = None
    close: HoldingValue | None = None


class PortfolioItem(ContractInfo):
    holdings: list[Holding] = Field(default_factory=list)


class HistoricalPortfolioData(AddressData):
    items: list[PortfolioItem]


# log events

class DecodedParam(Item):
    # value is a scalar or a list depending on the ABI type
    excluded_fields: ClassVar[tuple[str, ...]] = ("value",)

    name: str | None = None
    param_type: str | None = wire_field("param_type")
    indexed: bool | None = None
    decoded: bool | None = None


class DecodedLog(Item):
    name: str | None = None
    signature: str | None = None
    params: list[DecodedParam] | None = None


class LogEvent(Item):
    block_signed_at: str | None = None
    block_height: int | None = None
    tx_offset: int | None = None
    log_offset: int | None = None
    tx_hash: str | None = None
    raw_log_topics: list[str] | None = None
    sender_contract_decimals: int | None = None
    sender_name: str | None = None
    sender_contract_ticker_symbol: str | None = None
    sender_address: str | None = None
    sender_address_label: str | None = None
    sender_logo_url: str | None = None
    raw_log_data: str | None = None
    decoded: DecodedLog | None = None


class LogEventsData(Data):
    updated_at: str | None = None
    items: list[LogEvent]


# transactions

class BaseTransaction(Item):
    """Fields shared by every transaction shape."""
    block_signed_at: str | None = None
    block_height: int | None = None
    tx_hash: str
    tx_offset: int | None = None
    successful: bool | None = None
    from_address: str | None = None
    from_address_label: str | None = None
    to_address: str | None = None
    to_address_label: str | None = None
    value: str | None = None
    value_quote: float | None = None
    gas_offered: int | None = None
    gas_spent: int | None = None
    gas_price: int | None = None
    fees_paid: str | None = None
    gas_quote: float | None = None
    gas_quote_rate: float | None = None


class TransactionWithLogEvents(BaseTransaction):
    log_events: list[LogEvent] = Field(default_factory=list)


class TransactionsData(AddressData):
    items: list[TransactionWithLogEvents]


class TransactionData(Data):
    updated_at: str | None = None
    items: list[TransactionWithLogEvents]


# token transfers

class TransferItem(ContractInfo):
    # method_calls changes shape with the calling contract
    excluded_fields: ClassVar[tuple[str, ...]] = ("method_calls",)

    block_signed_at: str | None = None
    tx_hash: str | None = None
    from_address: str | None = None
    from_address_label: str | None = None
    to_address: str | None = None
    to_address_label: str | None = None
    transfer_type: str | None = None
    delta: str | None = None
    balance: str | None = None
    quote_rate: float | None = None
    delta_quote: float | None = None
    balance_quote: float | None = None


class TransactionWithTransfers(BaseTransaction):
    transfers: list[TransferItem] = Field(default_factory=list)


class TokenTransfersData(AddressData):
    items: list[TransactionWithTransfers]


# token holders

class TokenHolderItem(ContractInfo):
    address: str | None = None
    balance: str | None = None
    total_supply: str | None = None
    block_height: int | None = None


class TokenHoldersData(Data):
    updated_at: str | None = None
    items: list[TokenHolderItem]


class TokenHolderChangeItem(Item):
    token_holder: str | None = None
    prev_balance: str | None = None
    prev_block_height: int | None = None
    next_balance: str | None = None
    next_block_height: int | None = None
    diff: str | None = None


class TokenHolderChangesData(Data):
    updated_at: str | None = None
    items: list[TokenHolderChangeItem]


# blocks

class BlockItem(Item):
    signed_at: str | None = None
    height: int | None = None


class BlockData(Data):
    updated_at: str | None = None
    items: list[BlockItem]


class BlockHeightsData(Data):
    updated_at: str | None = None
    items: list[BlockItem]


# contract metadata

class ContractMetadataItem(ContractInfo):
    pass


class ContractMetadataData(Data):
    """
    All contract metadata of a chain.

    Upstream quirk: the live API returns ``items`` as a list of lists. The
    nesting is kept as is rather than flattened.
    """
    updated_at: str | None = None
    items: list[list[ContractMetadataItem]]


# chains

class ChainItem(Item):
    name: str | None = None
    chain_id: str | None = None
    is_testnet: bool | None = None
    db_schema_name: str | None = None
    label: str | None = None
    logo_url: str | None = None


class ChainsData(Data):
    updated_at: str | None = None
    items: list[ChainItem]


class ChainStatusItem(Item):
    name: str | None = None
    chain_id: str | None = None
    is_testnet: bool | None = None
    logo_url: str | None = None
    synced_block_height: int | None = None
    synced_blocked_signed_at: str | None = None


class ChainStatusesData(Data):
    updated_at: str | None = None
    items: list[ChainStatusItem]
