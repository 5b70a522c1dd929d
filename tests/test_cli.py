import io
import json

import pytest

from core.exceptions import TransportError
from covalent import cli
from covalent.client import CovalentClient

from conftest import BASE_URL, KLAYTN_ADDR, KLAYTN_CONTRACT_DAI, as_response, requested_url


class TestParser:
    """
    Unit tests for covctl argument parsing.
    """

    def test_every_command_maps_to_an_operation(self):
        parser = cli.build_parser()
        for name, (_, operation, arguments) in cli.COMMANDS.items():
            assert hasattr(CovalentClient, operation)
            argv = [name]
            for flag, _, _ in arguments:
                argv += [flag, "1"]
            assert parser.parse_args(argv).command == name

    def test_global_and_command_options(self):
        args = cli.build_parser().parse_args([
            "-c", "1", "-a", "ckey", "--timeout", "2.5",
            "changes-in-token-holders",
            "--addr", KLAYTN_CONTRACT_DAI,
            "--starting-block", "100",
            "--ending-block", "200",
            "--page-size", "10"
        ])
        assert args.chain_id == "1"
        assert args.api_key == "ckey"
        assert args.timeout == 2.5
        assert args.address == KLAYTN_CONTRACT_DAI
        assert (args.starting_block, args.ending_block) == ("100", "200")
        assert args.page_size == "10"
        assert args.page_number is None

    def test_quote_currency_default(self):
        args = cli.build_parser().parse_args(["all-chain-statuses"])
        assert args.quote_currency == "USD"

    def test_required_argument(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["token-balances"])


class TestRun:
    """
    Tests for command execution against a mocked transport.
    """

    @pytest.mark.asyncio
    async def test_prints_wire_envelope(self, client, transport):
        out = io.StringIO()
        args = cli.build_parser().parse_args(["token-balances", "--addr", KLAYTN_ADDR, "--page-size", "5"])

        status = await cli.run(client, args, out=out)

        assert status == 0
        printed = json.loads(out.getvalue())
        assert printed["error"] is False
        assert printed["data"]["address"] == KLAYTN_ADDR
        assert requested_url(transport).endswith("balances_v2/?key=test-key&page-size=5")

    @pytest.mark.asyncio
    async def test_chain_statuses(self, client, transport, wire_payloads):
        transport.get.return_value = as_response(wire_payloads["chain_statuses"])
        out = io.StringIO()
        args = cli.build_parser().parse_args(["all-chain-statuses", "--quote-currency", "EUR"])

        assert await cli.run(client, args, out=out) == 0
        assert requested_url(transport) == f"{BASE_URL}/chains/status/?quote-currency=EUR&key=test-key"
        assert json.loads(out.getvalue())["data"]["items"][0]["synced_block_height"] == 91321208

    @pytest.mark.asyncio
    async def test_api_error_is_printed(self, client, transport):
        transport.get.return_value = as_response(
            {"data": None, "error": True, "error_message": "Invalid API key", "error_code": 401},
            status=401
        )
        out = io.StringIO()
        args = cli.build_parser().parse_args(["block", "--block-height", "latest"])

        assert await cli.run(client, args, out=out) == 0
        assert json.loads(out.getvalue())["error_message"] == "Invalid API key"

    @pytest.mark.asyncio
    async def test_transport_failure(self, client, transport):
        transport.get.side_effect = TransportError("Request failed: connection refused")
        out = io.StringIO()
        args = cli.build_parser().parse_args(["transaction", "--tx-hash", "0xabc"])

        assert await cli.run(client, args, out=out) == 1
        assert out.getvalue() == ""


class TestMain:
    """
    Tests for the covctl entry point.
    """

    def test_missing_credential(self, monkeypatch, capsys):
        monkeypatch.delenv("COVALENT_API_KEY", raising=False)
        assert cli.main(["token-balances", "--addr", KLAYTN_ADDR]) == 1
        assert capsys.readouterr().out == ""

    def test_end_to_end(self, monkeypatch, transport, capsys):
        create = CovalentClient.create

        def create_with_mock(**kwargs):
            return create(transport=transport, **kwargs)

        monkeypatch.setattr(cli.CovalentClient, "create", create_with_mock)

        status = cli.main(["-c", "1", "token-balances", "--addr", KLAYTN_ADDR])

        assert status == 0
        assert requested_url(transport) == f"{BASE_URL}/1/address/{KLAYTN_ADDR}/balances_v2/?key=test-key"
        assert json.loads(capsys.readouterr().out)["data"]["address"] == KLAYTN_ADDR
