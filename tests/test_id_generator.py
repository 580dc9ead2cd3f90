import re

import pytest

from src.id_generator import (
    generate_community_id,
    generate_company_id,
    generate_public_id,
    parse_public_id,
    validate_public_id,
)


class TestGenerate:

    def test_company_id_format(self):
        assert re.fullmatch(r"CPY-\d+-[A-Z0-9]{6}", generate_company_id())

    def test_community_id_format(self):
        assert re.fullmatch(r"CMY-\d+-[A-Z0-9]{6}", generate_community_id())

    def test_resource_type_name_maps_to_prefix(self):
        assert generate_public_id("company").startswith("CPY-")


class TestValidate:

    def test_valid_with_matching_prefix(self):
        assert validate_public_id("CPY-1699564234-A7K9M2", "CPY")

    def test_prefix_mismatch(self):
        assert not validate_public_id("CMY-1699564234-A7K9M2", "CPY")

    @pytest.mark.parametrize("value", [
        "Acme Homes",
        "Acme-Homes-Inc",
        "CPY-1699564234-a7k9m2",
        "CPY-1699564234-A7K9",
        "XYZ-1699564234-A7K9M2",
        None,
    ])
    def test_rejects_non_ids(self, value):
        assert not validate_public_id(value)

    def test_parse_round_trip_fields(self):
        parsed = parse_public_id("CMY-1699564234-Z5R7N4")
        assert parsed == {
            "prefix": "CMY",
            "timestamp": 1699564234,
            "random": "Z5R7N4",
            "resource_type": "community",
        }

    def test_parse_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_public_id("not-an-id")
