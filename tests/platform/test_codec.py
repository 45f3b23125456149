from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from dvtx.batch.models import RecordRef
from dvtx.platform.codec import decode_attributes, encode_attributes


def test_tagged_values_survive_encoding() -> None:
    account_id = uuid.uuid4()
    attributes = {
        "name": "Contoso",
        "numberofemployees": 250,
        "revenue": Decimal("1500000.50"),
        "parentcustomerid": RecordRef("account", account_id),
        "createdon": datetime(2025, 1, 31, 12, 0, tzinfo=timezone.utc),
        "donotemail": False,
    }

    decoded = decode_attributes(encode_attributes(attributes))

    assert decoded == attributes
    assert isinstance(decoded["revenue"], Decimal)
    assert decoded["parentcustomerid"].id == account_id


def test_encoding_is_stable_and_tagged() -> None:
    ref_id = uuid.UUID("00000000-0000-0000-0000-000000000001")
    raw = encode_attributes({"b": RecordRef("account", ref_id), "a": Decimal("1.10")})

    assert json.loads(raw) == {
        "a": {"@decimal": "1.10"},
        "b": {"@ref": {"logical_name": "account", "id": str(ref_id)}},
    }
    assert raw.index('"a"') < raw.index('"b"')


def test_plain_dict_with_other_key_is_left_alone() -> None:
    assert decode_attributes('{"x": {"other": 1}}') == {"x": {"other": 1}}


@pytest.mark.parametrize("raw", [None, ""])
def test_empty_payload_decodes_to_empty_bag(raw) -> None:
    assert decode_attributes(raw) == {}


def test_unsupported_value_type_raises_type_error() -> None:
    with pytest.raises(TypeError, match="Unsupported attribute value type"):
        encode_attributes({"tags": {"a", "b"}})
