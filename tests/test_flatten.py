"""Tests for envyml.flatten"""

import datetime

from envyml.flatten import flatten, promote_root_key, scalar_to_string


class TestFlatten:
    """Recursive descent and key derivation"""

    def test_nested_mappings_join_with_underscore(self):
        tree = {"Database": {"Primary": {"Host": "db1", "Port": 5432}}}
        assert flatten(tree) == {"Database_Primary_Host": "db1", "Database_Primary_Port": "5432"}

    def test_sequences_use_zero_based_index(self):
        tree = {"Hosts": ["a", "b"], "Matrix": [[1, 2], [3]]}
        assert flatten(tree) == {
            "Hosts_0": "a",
            "Hosts_1": "b",
            "Matrix_0_0": "1",
            "Matrix_0_1": "2",
            "Matrix_1_0": "3",
        }

    def test_sequence_of_mappings(self):
        tree = {"Users": [{"Name": "ann"}, {"Name": "bob"}]}
        assert flatten(tree) == {"Users_0_Name": "ann", "Users_1_Name": "bob"}

    def test_explicit_flat_key_overrides_nested_value(self):
        """A root key declared later overwrites the composite key it collides with."""
        tree = {
            "Vendor": {
                "SSO": {"Secret": "superSecret", "Provider": "stuff"},
                "Captcha": {"Secret": "otherSecret", "Domain": "http://oldDomain"},
            },
            "Vendor_Captcha": {"Domain": "https://domain"},
        }

        result = flatten(tree)

        assert result == {
            "Vendor_SSO_Secret": "superSecret",
            "Vendor_SSO_Provider": "stuff",
            "Vendor_Captcha_Secret": "otherSecret",
            "Vendor_Captcha_Domain": "https://domain",
        }
        assert list(result) == [
            "Vendor_SSO_Secret",
            "Vendor_SSO_Provider",
            "Vendor_Captcha_Secret",
            "Vendor_Captcha_Domain",
        ]

    def test_earlier_flat_key_is_overwritten_by_later_nested_path(self):
        tree = {"A_B": "flat", "A": {"B": "nested"}}
        assert flatten(tree) == {"A_B": "nested"}

    def test_scalar_and_mapping_collision_keeps_later_value(self):
        tree = {"A": {"B": {"C": "deep"}}, "A_B_C": "explicit"}
        assert flatten(tree) == {"A_B_C": "explicit"}

    def test_empty_containers_produce_nothing(self):
        assert flatten({"Empty": {}, "None": [], "Key": "v"}) == {"Key": "v"}

    def test_non_string_keys_are_stringified(self):
        assert flatten({"Ports": {80: "http", 443: "https"}}) == {"Ports_80": "http", "Ports_443": "https"}

    def test_empty_document(self):
        assert flatten(None) == {}
        assert flatten({}) == {}

    def test_scalar_root_produces_nothing(self):
        assert flatten("just text") == {}

    def test_does_not_mutate_input(self):
        tree = {"ENV": {"A": "1"}, "B": {"C": "2"}}
        flatten(tree, root_key="ENV")
        assert tree == {"ENV": {"A": "1"}, "B": {"C": "2"}}

    def test_custom_separator(self):
        assert flatten({"a": {"b": "c"}}, separator="__") == {"a__b": "c"}

    def test_deterministic_for_equal_documents(self):
        tree = {"A": {"B": "1", "C": ["x", "y"]}, "D": "2"}
        assert flatten(tree) == flatten(dict(tree))


class TestRootPromotion:
    """Hoisting the ENV namespace to the root"""

    def test_promoted_value_wins_over_root_key(self):
        tree = {"A": "0", "ENV": {"A": "1"}}
        assert flatten(tree, root_key="ENV") == {"A": "1"}

    def test_promoted_keys_are_merged(self):
        tree = {"ENV": {"DEBUG": "1", "Mail": {"Host": "smtp"}}, "Name": "app"}
        assert flatten(tree, root_key="ENV") == {
            "Name": "app",
            "DEBUG": "1",
            "Mail_Host": "smtp",
        }

    def test_overwritten_root_key_keeps_its_position(self):
        tree = {"A": "0", "B": "b", "ENV": {"A": "1", "C": "c"}}
        assert list(promote_root_key(tree, "ENV")) == ["A", "B", "C"]

    def test_empty_namespace_is_flattened_normally(self):
        assert flatten({"ENV": {}, "A": "1"}, root_key="ENV") == {"A": "1"}

    def test_scalar_namespace_is_not_promoted(self):
        assert flatten({"ENV": "prod"}, root_key="ENV") == {"ENV": "prod"}

    def test_without_root_key_namespace_is_nested(self):
        assert flatten({"ENV": {"A": "1"}}) == {"ENV_A": "1"}

    def test_sequence_root_is_untouched(self):
        assert promote_root_key(["a"], "ENV") == ["a"]


class TestScalarToString:
    """Textual form of leaves"""

    def test_none_is_empty(self):
        assert scalar_to_string(None) == ""

    def test_booleans(self):
        assert scalar_to_string(True) == "1"
        assert scalar_to_string(False) == ""

    def test_numbers(self):
        assert scalar_to_string(42) == "42"
        assert scalar_to_string(1.5) == "1.5"

    def test_dates(self):
        assert scalar_to_string(datetime.date(2024, 1, 31)) == "2024-01-31"
