import logging
from typing import Any, Awaitable, Callable, TypeVar

from pydantic import BaseModel, ValidationError

from core.environment.config import GENERAL_CREDENTIAL_SOURCE, Settings
from core.environment.credentials import CredentialReader
from core.exceptions import InvalidParameterException
from core.logging.providers import LOGGER_NAME
from covalent.configuration import DEFAULT_BASE_URL, ClientConfiguration
from covalent.decoder import ResourceDecoder
from covalent.endpoints import build_endpoint
from covalent.envelope import ResourceEnvelope
from covalent.pagination import Pages, PaginationCursor, PaginationParams
from covalent.resources import (
    BalancesData,
    BlockData,
    BlockHeightsData,
    ChainsData,
    ChainStatusesData,
    ContractMetadataData,
    HistoricalPortfolioData,
    LogEventsData,
    TokenHolderChangesData,
    TokenHoldersData,
    TokenTransfersData,
    TransactionData,
    TransactionsData,
)
from covalent.transport import AiohttpTransport, HttpTransport, RequestExecutor
from covalent.variants import get_variant


T = TypeVar("T", bound=BaseModel)


def _required(params: dict[str, Any]) -> dict[str, str]:
    checked = {}
    for name, value in params.items():
        if isinstance(value, int) and not isinstance(value, bool):
            value = str(value)
        if not isinstance(value, str) or not value.strip():
            raise InvalidParameterException(f"Parameter '{name}' must be a non-empty string")
        checked[name] = value
    return checked


def _pagination(model: type[T], page_size: Any, page_number: Any) -> T:
    try:
        return model(page_size=page_size, page_number=page_number)
    except ValidationError as e:
        raise InvalidParameterException(
            f"Invalid pagination (page_size={page_size!r}, page_number={page_number!r})"
        ) from e


class CovalentClient:
    """
    Async client for the Covalent class A API.

    Every operation builds one request, executes it, and decodes the response
    into a ``ResourceEnvelope``. API-level failures come back inside the
    envelope (``envelope.error.error``); transport and decode failures are
    raised. Chain selection is per call (``chain_id=``), with the
    configuration's chain as default, so one client can safely serve several
    chains concurrently.

    Parameters
    ----------
    configuration : ClientConfiguration
        Base URL, default chain and credential
    executor : RequestExecutor
        Request executor
    decoder : ResourceDecoder
        Response decoder
    logger : logging.Logger
        Logger instance
    owns_transport : bool
        Close the executor's transport when the client is closed
    """

    def __init__(
        self,
        configuration: ClientConfiguration,
        executor: RequestExecutor,
        decoder: ResourceDecoder,
        logger: logging.Logger,
        owns_transport: bool = False
    ):
        self.configuration = configuration
        self.executor = executor
        self.decoder = decoder
        self.logger = logger
        self._owns_transport = owns_transport

    @classmethod
    def create(
        cls,
        chain_id: str,
        api_key: str | None = None,
        credential_source: str = GENERAL_CREDENTIAL_SOURCE,
        base_url: str = DEFAULT_BASE_URL,
        transport: HttpTransport | None = None,
        timeout: float | None = None,
        logger: logging.Logger | None = None,
        reader: CredentialReader | None = None
    ) -> "CovalentClient":
        """
        Create a client bound to a default chain.

        Parameters
        ----------
        chain_id : str
            Default chain identifier, e.g. "8217" for Klaytn mainnet
        api_key : str | None
            Explicit API key; read from ``credential_source`` when omitted
        credential_source : str
            Environment variable holding the API key
        base_url : str
            API base URL
        transport : HttpTransport | None
            Transport to use; an owned aiohttp transport otherwise
        timeout : float | None
            Default per-request timeout in seconds
        logger : logging.Logger | None
            Logger instance
        reader : CredentialReader | None
            Credential source reader

        Returns
        -------
        CovalentClient
            Client instance

        Raises
        ------
        CredentialMissing
            If no API key is passed and the source is absent
        CredentialInvalid
            If the source value is not text
        """
        configuration = ClientConfiguration.create(
            chain_id=chain_id,
            credential=api_key,
            source=credential_source,
            base_url=base_url,
            reader=reader
        )
        logger = logger or logging.getLogger(LOGGER_NAME)
        owns_transport = transport is None
        executor = RequestExecutor(
            transport=transport or AiohttpTransport(),
            logger=logger,
            timeout=timeout
        )
        return cls(
            configuration=configuration,
            executor=executor,
            decoder=ResourceDecoder(logger),
            logger=logger,
            owns_transport=owns_transport
        )

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        api_key: str | None = None,
        transport: HttpTransport | None = None,
        logger: logging.Logger | None = None,
        reader: CredentialReader | None = None
    ) -> "CovalentClient":
        """
        Create a client from application settings.

        Parameters
        ----------
        settings : Settings
            Application settings
        api_key : str | None
            Explicit API key overriding the configured source
        transport : HttpTransport | None
            Transport to use
        logger : logging.Logger | None
            Logger instance
        reader : CredentialReader | None
            Credential source reader

        Returns
        -------
        CovalentClient
            Client instance
        """
        return cls.create(
            chain_id=settings.covalent_chain_id,
            api_key=api_key,
            credential_source=settings.covalent_credential_source,
            base_url=settings.covalent_base_url,
            transport=transport,
            timeout=settings.covalent_request_timeout,
            logger=logger,
            reader=reader
        )

    def with_chain(self, chain_id: str) -> "CovalentClient":
        """
        Client sharing this one's transport, bound to another default chain.

        The returned client does not own the transport.
        """
        chain_id = _required({"chain_id": chain_id})["chain_id"]
        return CovalentClient(
            configuration=self.configuration.model_copy(update={"chain_id": chain_id}),
            executor=self.executor,
            decoder=self.decoder,
            logger=self.logger
        )

    async def close(self) -> None:
        if self._owns_transport:
            await self.executor.transport.close()

    async def __aenter__(self) -> "CovalentClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(
        self,
        variant_name: str,
        path_params: dict[str, Any],
        query_args: dict[str, Any] | None = None,
        page_size: str | None = None,
        page_number: str | None = None,
        chain_id: str | None = None,
        timeout: float | None = None
    ) -> ResourceEnvelope:
        variant = get_variant(variant_name)
        query_args = _required(query_args or {})
        path_params = _required({
            "chain_id": self.configuration.chain_id if chain_id is None else chain_id,
            **path_params
        })

        descriptor = build_endpoint(
            base_url=self.configuration.base_url,
            template=variant.template,
            path_params=path_params,
            query_params={wire: query_args[name] for name, wire in variant.query.items()},
            pagination=_pagination(PaginationParams, page_size, page_number),
            credential=self.configuration.credential
        )
        response = await self.executor.execute(descriptor, timeout=timeout)
        return self.decoder.decode(variant, response.body, status=response.status)

    def pages(
        self,
        operation: Callable[..., Awaitable[ResourceEnvelope]],
        *args: Any,
        page_size: str | int | None = None,
        page_number: str | int | None = None,
        **kwargs: Any
    ) -> Pages:
        """
        Iterate the pages of any operation of this client.

        Parameters
        ----------
        operation : Callable[..., Awaitable[ResourceEnvelope]]
            Bound operation, e.g. ``client.get_token_holders``
        *args : Any
            Positional arguments of the operation
        page_size : str | int | None
            Items per page
        page_number : str | int | None
            First page to fetch
        **kwargs : Any
            Keyword arguments of the operation (``chain_id``, ``timeout``...)

        Returns
        -------
        Pages
            Lazy, restartable async iterable of envelopes

        Examples
        --------
        >>> async for page in client.pages(client.get_token_holders, token, page_size=100):
        ...     holders.extend(page.data.items)
        """
        async def fetch(params: PaginationParams) -> ResourceEnvelope:
            return await operation(
                *args,
                page_size=params.page_size,
                page_number=params.page_number,
                **kwargs
            )

        return Pages(fetch, _pagination(PaginationCursor, page_size, page_number))

    async def get_token_balances(
        self,
        address: str,
        page_size: str | None = None,
        page_number: str | None = None,
        *,
        chain_id: str | None = None,
        timeout: float | None = None
    ) -> ResourceEnvelope[BalancesData]:
        """Token balances held by an address."""
        return await self._request(
            "balances", {"address": address},
            page_size=page_size, page_number=page_number, chain_id=chain_id, timeout=timeout
        )

    async def get_historical_portfolio_value(
        self,
        address: str,
        page_size: str | None = None,
        page_number: str | None = None,
        *,
        chain_id: str | None = None,
        timeout: float | None = None
    ) -> ResourceEnvelope[HistoricalPortfolioData]:
        """Daily portfolio value of an address."""
        return await self._request(
            "historical_portfolio", {"address": address},
            page_size=page_size, page_number=page_number, chain_id=chain_id, timeout=timeout
        )

    async def get_token_transfers(
        self,
        address: str,
        contract_address: str,
        page_size: str | None = None,
        page_number: str | None = None,
        *,
        chain_id: str | None = None,
        timeout: float | None = None
    ) -> ResourceEnvelope[TokenTransfersData]:
        """ERC20 transfers of one token contract in and out of an address."""
        return await self._request(
            "token_transfers", {"address": address}, {"contract_address": contract_address},
            page_size=page_size, page_number=page_number, chain_id=chain_id, timeout=timeout
        )

    async def get_token_holders(
        self,
        address: str,
        page_size: str | None = None,
        page_number: str | None = None,
        *,
        chain_id: str | None = None,
        timeout: float | None = None
    ) -> ResourceEnvelope[TokenHoldersData]:
        """Holders of a token contract."""
        return await self._request(
            "token_holders", {"address": address},
            page_size=page_size, page_number=page_number, chain_id=chain_id, timeout=timeout
        )

    async def get_changes_in_token_holders(
        self,
        address: str,
        starting_block: str,
        ending_block: str,
        page_size: str | None = None,
        page_number: str | None = None,
        *,
        chain_id: str | None = None,
        timeout: float | None = None
    ) -> ResourceEnvelope[TokenHolderChangesData]:
        """Token holder balance changes between two block heights."""
        return await self._request(
            "token_holder_changes", {"address": address},
            {"starting_block": starting_block, "ending_block": ending_block},
            page_size=page_size, page_number=page_number, chain_id=chain_id, timeout=timeout
        )

    async def get_transactions_for_address(
        self,
        address: str,
        page_size: str | None = None,
        page_number: str | None = None,
        *,
        chain_id: str | None = None,
        timeout: float | None = None
    ) -> ResourceEnvelope[TransactionsData]:
        """Transactions of an address, with their log events."""
        return await self._request(
            "transactions", {"address": address},
            page_size=page_size, page_number=page_number, chain_id=chain_id, timeout=timeout
        )

    async def get_transaction(
        self,
        tx_hash: str,
        page_size: str | None = None,
        page_number: str | None = None,
        *,
        chain_id: str | None = None,
        timeout: float | None = None
    ) -> ResourceEnvelope[TransactionData]:
        """A single transaction by hash."""
        return await self._request(
            "transaction", {"tx_hash": tx_hash},
            page_size=page_size, page_number=page_number, chain_id=chain_id, timeout=timeout
        )

    async def get_block(
        self,
        block_height: str,
        page_size: str | None = None,
        page_number: str | None = None,
        *,
        chain_id: str | None = None,
        timeout: float | None = None
    ) -> ResourceEnvelope[BlockData]:
        """A block by height ("latest" is accepted by the API)."""
        return await self._request(
            "block", {"block_height": block_height},
            page_size=page_size, page_number=page_number, chain_id=chain_id, timeout=timeout
        )

    async def get_block_heights(
        self,
        start_date: str,
        end_date: str,
        page_size: str | None = None,
        page_number: str | None = None,
        *,
        chain_id: str | None = None,
        timeout: float | None = None
    ) -> ResourceEnvelope[BlockHeightsData]:
        """Blocks signed between two dates (YYYY-MM-DD)."""
        return await self._request(
            "block_heights", {"start_date": start_date, "end_date": end_date},
            page_size=page_size, page_number=page_number, chain_id=chain_id, timeout=timeout
        )

    async def get_log_events_by_contract(
        self,
        contract_address: str,
        starting_block: str,
        ending_block: str,
        page_size: str | None = None,
        page_number: str | None = None,
        *,
        chain_id: str | None = None,
        timeout: float | None = None
    ) -> ResourceEnvelope[LogEventsData]:
        """Log events emitted by a contract within a block range."""
        return await self._request(
            "log_events_by_contract", {"contract_address": contract_address},
            {"starting_block": starting_block, "ending_block": ending_block},
            page_size=page_size, page_number=page_number, chain_id=chain_id, timeout=timeout
        )

    async def get_log_events_by_topic_hashes(
        self,
        topic_hash: str,
        sender_address: str,
        starting_block: str,
        ending_block: str,
        page_size: str | None = None,
        page_number: str | None = None,
        *,
        chain_id: str | None = None,
        timeout: float | None = None
    ) -> ResourceEnvelope[LogEventsData]:
        """Log events matching topic hash(es), comma separated, from one sender."""
        return await self._request(
            "log_events_by_topic", {"topic_hash": topic_hash},
            {
                "starting_block": starting_block,
                "ending_block": ending_block,
                "sender_address": sender_address
            },
            page_size=page_size, page_number=page_number, chain_id=chain_id, timeout=timeout
        )

    async def get_all_contract_metadata(
        self,
        page_size: str | None = None,
        page_number: str | None = None,
        *,
        chain_id: str | None = None,
        timeout: float | None = None
    ) -> ResourceEnvelope[ContractMetadataData]:
        """Metadata of every token contract on a chain (items are a list of lists)."""
        return await self._request(
            "contract_metadata", {},
            page_size=page_size, page_number=page_number, chain_id=chain_id, timeout=timeout
        )

    async def get_all_chains(
        self,
        quote_currency: str = "USD",
        page_size: str | None = None,
        page_number: str | None = None,
        *,
        timeout: float | None = None
    ) -> ResourceEnvelope[ChainsData]:
        """All chains supported by the API."""
        return await self._request(
            "chains", {}, {"quote_currency": quote_currency},
            page_size=page_size, page_number=page_number, timeout=timeout
        )

    async def get_all_chain_statuses(
        self,
        quote_currency: str = "USD",
        page_size: str | None = None,
        page_number: str | None = None,
        *,
        timeout: float | None = None
    ) -> ResourceEnvelope[ChainStatusesData]:
        """Sync status of every supported chain."""
        return await self._request(
            "chain_statuses", {}, {"quote_currency": quote_currency},
            page_size=page_size, page_number=page_number, timeout=timeout
        )
