import json

import pytest

from cleanlink_agent.errors import InvalidRequestError
from cleanlink_agent.print_request import BarcodeEntry, PrintRequest


class TestFromDict:
    def test_wire_field_names(self) -> None:
        request = PrintRequest.from_dict({
            "token": "secret",
            "title": "Laundry Co",
            "order_id": "123",
            "body": "Cuci Setrika\n",
            "qr_value": "legacy",
            "print_mode": "all",
            "qr_codes": [
                {"service_name": "Wash", "order_id": "123-1", "body": "2 kg\n", "qr_value": "https://qr/1"},
            ],
            "no_paper_cut": True,
        })

        assert request.token == "secret"
        assert request.title == "Laundry Co"
        assert request.order_id == "123"
        assert request.body == "Cuci Setrika\n"
        assert request.legacy_qr_value == "legacy"
        assert request.mode == "all"
        assert request.qr_codes == [
            BarcodeEntry(service_name="Wash", order_id="123-1", body="2 kg\n", qr_value="https://qr/1")
        ]

    def test_missing_fields_are_empty(self) -> None:
        request = PrintRequest.from_dict({})
        assert request == PrintRequest()
        assert not request.has_entries
        assert not request.has_legacy_value

    def test_null_fields_are_empty(self) -> None:
        request = PrintRequest.from_dict({"title": None, "qr_codes": None})
        assert request.title == ""
        assert request.qr_codes == []

    def test_entry_order_preserved(self) -> None:
        request = PrintRequest.from_dict({"qr_codes": [{"qr_value": str(i)} for i in range(5)]})
        assert [entry.qr_value for entry in request.qr_codes] == ["0", "1", "2", "3", "4"]

    @pytest.mark.parametrize(
        "payload",
        [
            [],
            "text",
            {"title": 5},
            {"order_id": 123},
            {"qr_codes": "abc"},
            {"qr_codes": ["abc"]},
            {"qr_codes": [{"qr_value": 1}]},
        ],
    )
    def test_wrong_types_rejected(self, payload) -> None:
        with pytest.raises(InvalidRequestError):
            PrintRequest.from_dict(payload)


class TestFromJson:
    def test_round_trip_from_text(self) -> None:
        raw = json.dumps({"title": "T", "order_id": "1", "body": "", "print_mode": ""})
        request = PrintRequest.from_json(raw)
        assert request.title == "T"
        assert request.order_id == "1"

    def test_invalid_json(self) -> None:
        with pytest.raises(InvalidRequestError, match="Invalid JSON"):
            PrintRequest.from_json("{not json")

    def test_bytes_decoded_with_charset(self) -> None:
        raw = json.dumps({"title": "Café"}, ensure_ascii=False).encode("latin-1")
        assert PrintRequest.from_json(raw, "latin-1").title == "Café"

    def test_undecodable_bytes(self) -> None:
        with pytest.raises(InvalidRequestError, match="not valid utf-8"):
            PrintRequest.from_json(b'{"title": "\xff\xfe"}')

    def test_unknown_charset(self) -> None:
        with pytest.raises(InvalidRequestError, match="Unknown charset"):
            PrintRequest.from_json(b'{"title": "T"}', "bogus")
