import json

import pytest

from core.exceptions import ApiLogicalError, DecodeError
from covalent.decoder import ResourceDecoder
from covalent.resources import BalancesData, ContractMetadataItem
from covalent.variants import VARIANTS

from conftest import KLAYTN_ADDR


@pytest.fixture
def decoder(logger) -> ResourceDecoder:
    return ResourceDecoder(logger)


def encode(payload) -> bytes:
    return json.dumps(payload).encode("utf-8")


class TestResourceDecoder:
    """
    Unit tests for decoding flat wire envelopes.
    """

    @pytest.mark.parametrize("variant", sorted(VARIANTS))
    def test_well_formed_payload(self, decoder, wire_payloads, variant):
        """
        Every variant decodes its fixture exactly, with no error flagged.

        Parameters
        ----------
        decoder : ResourceDecoder
            Decoder fixture
        wire_payloads : dict
            Wire fixtures per variant
        variant : str
            Variant name
        """
        payload = wire_payloads[variant]
        envelope = decoder.decode(variant, encode(payload))

        assert envelope.error.error is False
        assert isinstance(envelope.data, VARIANTS[variant].model)
        decoded = envelope.data.model_dump(
            mode="json", by_alias=True, exclude_unset=True, exclude={"pagination"}
        )
        assert decoded == payload["data"]

    @pytest.mark.parametrize("variant", sorted(VARIANTS))
    def test_error_without_data(self, decoder, variant):
        """
        An API error without data is not a decode failure.
        """
        body = encode({
            "data": None,
            "error": True,
            "error_message": "Invalid API key",
            "error_code": 401
        })
        envelope = decoder.decode(variant, body, status=401)

        assert envelope.error.error is True
        assert envelope.error.error_message == "Invalid API key"
        assert envelope.error.error_code == 401
        assert envelope.data is None
        assert envelope.pagination is None

    @pytest.mark.parametrize("variant", sorted(VARIANTS))
    def test_error_with_partial_data(self, decoder, variant):
        body = encode({"data": {"updated_at": "2022-05-20T10:00:00Z"}, "error": True})
        envelope = decoder.decode(variant, body)
        assert envelope.error.error is True
        assert envelope.data is None

    def test_balances_scenario(self, decoder):
        envelope = decoder.decode(
            "balances",
            '{"data":{"address":"0xabc","items":[]},"error":false,"has_more":false}'
        )
        assert envelope.data.address == "0xabc"
        assert envelope.data.items == []
        assert envelope.error.error is False
        assert envelope.pagination.has_more is False

    def test_balance_type_alias(self, decoder, wire_payloads):
        """
        Wire ``type`` decodes as ``balance_type``; the python name is accepted too.
        """
        envelope = decoder.decode("balances", encode(wire_payloads["balances"]))
        assert envelope.data.items[0].balance_type == "cryptocurrency"

        payload = wire_payloads["balances"]
        item = payload["data"]["items"][0]
        item["balance_type"] = item.pop("type")
        envelope = decoder.decode("balances", encode(payload))
        assert envelope.data.items[0].balance_type == "cryptocurrency"
        assert envelope.to_wire()["data"]["items"][0]["type"] == "cryptocurrency"

    def test_optional_fields_may_be_missing(self, decoder):
        body = encode({
            "data": {"address": KLAYTN_ADDR, "items": [{"contract_name": "Klaytn", "balance": "1"}]},
            "error": False
        })
        item = decoder.decode("balances", body).data.items[0]
        assert item.last_transferred_at is None
        assert item.quote_rate_24h is None
        assert item.balance_type is None

    def test_unknown_fields_are_ignored(self, decoder):
        body = encode({
            "data": {"address": KLAYTN_ADDR, "items": [], "brand_new_field": {"x": 1}},
            "error": False,
            "trace_id": "abc"
        })
        envelope = decoder.decode("balances", body)
        assert envelope.data.address == KLAYTN_ADDR

    def test_variable_type_fields_are_dropped(self, decoder, wire_payloads):
        """
        Decoded parameter ``value`` may be a scalar or a list; it is left out.
        """
        payload = wire_payloads["log_events_by_contract"]
        params = payload["data"]["items"][0]["decoded"]["params"]
        params[0]["value"] = "0xf4024faad5fafd0755875e3161524c9c4e1a1111"
        params[1]["value"] = [{"name": "nested", "value": "1"}]

        envelope = decoder.decode("log_events_by_contract", encode(payload))

        decoded_params = envelope.data.items[0].decoded.params
        assert [param.param_type for param in decoded_params] == ["address", "uint256"]
        assert not hasattr(decoded_params[0], "value")
        assert "value" not in decoded_params[1].model_dump()

    def test_nft_data_is_dropped(self, decoder, wire_payloads):
        payload = wire_payloads["balances"]
        payload["data"]["items"][0]["nft_data"] = [{"token_id": "1"}]
        item = decoder.decode("balances", encode(payload)).data.items[0]
        assert "nft_data" not in item.model_dump()

    def test_contract_metadata_stays_double_nested(self, decoder, wire_payloads):
        """
        The upstream list-of-lists shape is reproduced, not flattened.
        """
        envelope = decoder.decode("contract_metadata", encode(wire_payloads["contract_metadata"]))
        items = envelope.data.items

        assert len(items) == 2
        assert [len(group) for group in items] == [2, 1]
        assert isinstance(items[0][1], ContractMetadataItem)
        assert items[0][1].contract_ticker_symbol == "USDC"
        assert envelope.to_wire()["data"]["items"][1][0]["contract_ticker_symbol"] == "WETH"

    def test_contract_metadata_rejects_flat_list(self, decoder, wire_payloads):
        payload = wire_payloads["contract_metadata"]
        payload["data"]["items"] = payload["data"]["items"][0]
        with pytest.raises(DecodeError) as exc_info:
            decoder.decode("contract_metadata", encode(payload))
        assert exc_info.value.variant == "contract_metadata"
        assert exc_info.value.field.startswith("data.items.0")

    def test_transactions_share_base_fields(self, decoder, wire_payloads):
        with_logs = decoder.decode("transaction", encode(wire_payloads["transaction"])).data.items[0]
        with_transfers = decoder.decode(
            "token_transfers", encode(wire_payloads["token_transfers"])
        ).data.items[0]

        assert with_logs.gas_spent == with_transfers.gas_spent == 137042
        assert with_logs.log_events[0].decoded.name == "Transfer"
        assert with_transfers.transfers[0].transfer_type == "OUT"

    def test_pagination_overlay_is_normalized(self, decoder):
        """
        String page numbers and sizes become integers.
        """
        body = encode({
            "data": {"items": []},
            "error": False,
            "has_more": True,
            "page_number": "2",
            "page_size": "50",
            "total_count": 300
        })
        envelope = decoder.decode("token_holders", body)
        assert envelope.pagination.model_dump() == {
            "has_more": True, "page_number": 2, "page_size": 50, "total_count": 300
        }

    def test_pagination_nested_under_data(self, decoder):
        body = encode({
            "data": {
                "items": [],
                "pagination": {"has_more": True, "page_number": 0, "page_size": 100, "total_count": None}
            },
            "error": False
        })
        pagination = decoder.decode("token_holders", body).pagination
        assert pagination.has_more is True
        assert pagination.page_size == 100
        assert pagination.total_count is None

    def test_top_level_pagination_wins(self, decoder):
        body = encode({
            "data": {"items": [], "has_more": False, "page_number": 9},
            "error": False,
            "has_more": True
        })
        pagination = decoder.decode("token_holders", body).pagination
        assert pagination.has_more is True
        assert pagination.page_number == 9

    def test_no_pagination_overlay(self, decoder):
        envelope = decoder.decode("block", encode({"data": {"items": []}, "error": False}))
        assert envelope.pagination is None

    @pytest.mark.parametrize("body", [b"<html>502 Bad Gateway</html>", b"", b"\xff\xfe"])
    def test_not_json(self, decoder, body):
        with pytest.raises(DecodeError) as exc_info:
            decoder.decode("balances", body)
        assert exc_info.value.variant == "balances"
        assert exc_info.value.field is None

    def test_not_an_object(self, decoder):
        with pytest.raises(DecodeError):
            decoder.decode("chains", b"[1, 2, 3]")

    def test_missing_error_flag(self, decoder):
        with pytest.raises(DecodeError) as exc_info:
            decoder.decode("balances", encode({"data": {"address": "0xabc", "items": []}}))
        assert exc_info.value.field == "error"

    def test_missing_data_on_success(self, decoder):
        with pytest.raises(DecodeError) as exc_info:
            decoder.decode("balances", encode({"error": False}))
        assert exc_info.value.field == "data"

    def test_missing_required_data_field(self, decoder):
        with pytest.raises(DecodeError) as exc_info:
            decoder.decode("balances", encode({"data": {"items": []}, "error": False}))
        assert exc_info.value.field == "data.address"
        assert "data.address" in exc_info.value.message

    def test_unknown_variant(self, decoder):
        with pytest.raises(KeyError):
            decoder.decode("nft_market", b"{}")

    def test_envelope_to_wire(self, decoder, wire_payloads):
        payload = wire_payloads["token_holders"]
        wire = decoder.decode("token_holders", encode(payload)).to_wire()

        assert wire["error"] is False
        assert wire["has_more"] is False
        assert wire["page_size"] == 100
        assert wire["total_count"] == 1
        assert "pagination" not in wire["data"]
        assert wire["data"]["items"][0]["address"] == payload["data"]["items"][0]["address"]

    def test_raise_for_error(self, decoder):
        ok = decoder.decode("balances", encode({"data": {"address": "0xabc", "items": []}, "error": False}))
        assert ok.raise_for_error() is ok
        assert ok.ok

        failed = decoder.decode(
            "balances",
            encode({"data": None, "error": True, "error_message": "Malformed address", "error_code": 400})
        )
        with pytest.raises(ApiLogicalError) as exc_info:
            failed.raise_for_error()
        assert exc_info.value.message == "Malformed address"
        assert exc_info.value.error_code == 400
        assert exc_info.value.get_status_code() == 400

    def test_envelope_is_parameterized(self, decoder):
        envelope = decoder.decode("balances", encode({"data": {"address": "0xabc", "items": []}, "error": False}))
        assert isinstance(envelope.data, BalancesData)
