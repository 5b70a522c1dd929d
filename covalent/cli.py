"""
covctl - query the Covalent class A API from the command line.

The decoded envelope is printed as JSON in the API's wire shape. Logs go to
stderr so that stdout stays parseable.
"""
import argparse
import asyncio
import json
import sys
from typing import TextIO

from core.environment.config import Settings
from core.exceptions import BaseCustomException, ConfigurationException
from core.logging.providers import configure_logging
from covalent.client import CovalentClient
from covalent.envelope import ResourceEnvelope


ADDR = ("--addr", "address", "The wallet address")
CONTRACT_ADDR = ("--contract-addr", "contract_address", "The contract or token address")
STARTING_BLOCK = ("--starting-block", "starting_block", "The starting block")
ENDING_BLOCK = ("--ending-block", "ending_block", "The ending block")
QUOTE_CURRENCY = ("--quote-currency", "quote_currency", "The quote currency format")

# command -> (help, client operation, positional arguments in call order)
COMMANDS: dict[str, tuple[str, str, tuple[tuple[str, str, str], ...]]] = {
    "token-balances": (
        "Token balances for an address", "get_token_balances", (ADDR,)
    ),
    "historical-portfolio-value": (
        "Historical portfolio value for an address", "get_historical_portfolio_value", (ADDR,)
    ),
    "token-transfers": (
        "Token transfers given an address and the contract address", "get_token_transfers",
        (ADDR, CONTRACT_ADDR)
    ),
    "token-holders-any-bh": (
        "Token holders at any block height for an address", "get_token_holders", (ADDR,)
    ),
    "changes-in-token-holders": (
        "Changes in token holders between two block heights", "get_changes_in_token_holders",
        (ADDR, STARTING_BLOCK, ENDING_BLOCK)
    ),
    "transactions-for-address": (
        "Transactions for an address", "get_transactions_for_address", (ADDR,)
    ),
    "transaction": (
        "Data on a single transaction given a transaction hash", "get_transaction",
        (("--tx-hash", "tx_hash", "The transaction hash"),)
    ),
    "block": (
        "Data on a block given a block height", "get_block",
        (("--block-height", "block_height", "The block height"),)
    ),
    "block-heights": (
        "Block heights given a start and end date", "get_block_heights",
        (
            ("--start-date", "start_date", "The start date in YYYY-MM-DD format"),
            ("--end-date", "end_date", "The end date in YYYY-MM-DD format"),
        )
    ),
    "log-events-by-contract": (
        "Log events by contract address within a start and end block", "get_log_events_by_contract",
        (CONTRACT_ADDR, STARTING_BLOCK, ENDING_BLOCK)
    ),
    "log-events-by-topic-hashes": (
        "Log events by topic hashes", "get_log_events_by_topic_hashes",
        (
            ("--topic-hash", "topic_hash", "The topic hash - comma-separated to provide multiple"),
            ("--sender-addr", "sender_address", "The senders address"),
            STARTING_BLOCK,
            ENDING_BLOCK,
        )
    ),
    "all-contract-metadata": (
        "All contract metadata", "get_all_contract_metadata", ()
    ),
    "all-chains": (
        "All chains", "get_all_chains", (QUOTE_CURRENCY,)
    ),
    "all-chain-statuses": (
        "All chain statuses", "get_all_chain_statuses", (QUOTE_CURRENCY,)
    ),
}


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser, one subcommand per client operation.

    Returns
    -------
    argparse.ArgumentParser
        Parser
    """
    parser = argparse.ArgumentParser(prog="covctl", description=__doc__.strip().splitlines()[0])
    parser.add_argument(
        "-c", "--chain-id",
        help="The chain ID to query - the configured default (8217, Klaytn Mainnet) when omitted"
    )
    parser.add_argument(
        "-a", "--api-key",
        help="Your Covalent API key - if not set the configured environment variable is used"
    )
    parser.add_argument("--timeout", type=float, help="Request timeout in seconds")

    subparsers = parser.add_subparsers(dest="command", required=True)
    for name, (help_text, _, arguments) in COMMANDS.items():
        subparser = subparsers.add_parser(name, help=help_text)
        for flag, dest, arg_help in arguments:
            if dest == "quote_currency":
                subparser.add_argument(flag, dest=dest, default="USD", help=arg_help)
            else:
                subparser.add_argument(flag, dest=dest, required=True, help=arg_help)
        subparser.add_argument("--page-size", help="Number of items in a single page")
        subparser.add_argument("--page-number", help="Start with items on this page")
    return parser


async def execute_command(client: CovalentClient, args: argparse.Namespace) -> ResourceEnvelope:
    """
    Call the client operation selected by ``args.command``.

    Parameters
    ----------
    client : CovalentClient
        Client bound to the requested chain
    args : argparse.Namespace
        Parsed arguments

    Returns
    -------
    ResourceEnvelope
        Decoded envelope
    """
    _, operation_name, arguments = COMMANDS[args.command]
    operation = getattr(client, operation_name)
    return await operation(
        *(getattr(args, dest) for _, dest, _ in arguments),
        page_size=args.page_size,
        page_number=args.page_number,
        timeout=args.timeout
    )


async def run(client: CovalentClient, args: argparse.Namespace, out: TextIO | None = None) -> int:
    """
    Execute one command and print the envelope.

    Returns
    -------
    int
        Exit status
    """
    async with client:
        try:
            envelope = await execute_command(client, args)
        except BaseCustomException as e:
            client.logger.error(f"Failed to get {args.command}: {e.message}")
            return 1

    print(json.dumps(envelope.to_wire(), indent=2), file=out or sys.stdout)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = Settings()
    logger = configure_logging(settings.log_level, stream=sys.stderr)

    try:
        client = CovalentClient.create(
            chain_id=args.chain_id or settings.covalent_chain_id,
            api_key=args.api_key,
            credential_source=settings.covalent_credential_source,
            base_url=settings.covalent_base_url,
            timeout=settings.covalent_request_timeout,
            logger=logger
        )
    except ConfigurationException as e:
        logger.error(f"Failed to create covalent client: {e.message}")
        return 1

    return asyncio.run(run(client, args))


if __name__ == "__main__":
    sys.exit(main())
