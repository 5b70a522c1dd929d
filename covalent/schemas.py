from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class PageRequest(BaseModel):
    """
    Pagination part of every proxy request.

    Attributes
    ----------
    page_size : int | None
        Items per page
    page_number : int | None
        Zero-based page index
    """
    page_size: int | None = Field(default=None, gt=0, description="Items per page")
    page_number: int | None = Field(default=None, ge=0, description="Zero-based page index")

    model_config = ConfigDict(from_attributes=True)

    def call_kwargs(self) -> dict[str, Any]:
        """
        Keyword arguments for the matching client operation.

        Returns
        -------
        dict[str, Any]
            Pagination (and chain) arguments
        """
        return {
            "page_size": self.page_size,
            "page_number": self.page_number
        }


class ChainRequest(PageRequest):
    """
    Request against one chain; the configured chain is used when omitted.

    Attributes
    ----------
    chain_id : str | None
        Chain identifier
    """
    chain_id: str | None = Field(default=None, min_length=1, description="Chain identifier")

    def call_kwargs(self) -> dict[str, Any]:
        return {**super().call_kwargs(), "chain_id": self.chain_id}


class AddressRequest(ChainRequest):
    address: str = Field(..., min_length=1, description="Wallet or token address")


class BlockRangeMixin(BaseModel):
    starting_block: str = Field(..., min_length=1, description="First block height")
    ending_block: str = Field(..., min_length=1, description="Last block height")


class TokenTransfersRequest(AddressRequest):
    contract_address: str = Field(..., min_length=1, description="Token contract address")


class TokenHolderChangesRequest(AddressRequest, BlockRangeMixin):
    pass


class TransactionRequest(ChainRequest):
    tx_hash: str = Field(..., min_length=1, description="Transaction hash")


class BlockRequest(ChainRequest):
    block_height: str = Field(..., min_length=1, description="Block height or 'latest'")


class BlockHeightsRequest(ChainRequest):
    start_date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="Start date, YYYY-MM-DD")
    end_date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$", description="End date, YYYY-MM-DD")


class LogEventsByContractRequest(ChainRequest, BlockRangeMixin):
    contract_address: str = Field(..., min_length=1, description="Emitting contract address")


class LogEventsByTopicRequest(ChainRequest, BlockRangeMixin):
    topic_hash: str = Field(..., min_length=1, description="Topic hash, comma separated for several")
    sender_address: str = Field(..., min_length=1, description="Sender contract address")


class ChainsRequest(PageRequest):
    quote_currency: str = Field(default="USD", min_length=1, description="Quote currency")
