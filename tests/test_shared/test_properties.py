"""Tests for the tolerant properties parser."""

import pytest

from graph_explorer.shared.properties import parse_properties


class TestParseProperties:
    def test_strict_json(self):
        assert parse_properties('{"a": 1, "b": [true, null]}') == {"a": 1, "b": [True, None]}

    def test_python_literal_dialect(self):
        text = "{'approved': True, 'withdrawn': False, 'phase': None, 'score': NaN}"
        assert parse_properties(text) == {
            "approved": True,
            "withdrawn": False,
            "phase": None,
            "score": None,
        }

    def test_nan_in_otherwise_strict_json(self):
        assert parse_properties('{"score": NaN}') == {"score": None}

    def test_literal_words_inside_names_untouched(self):
        assert parse_properties("{'NoneSuch': 'Truest'}") == {"NoneSuch": "Truest"}

    @pytest.mark.parametrize("text", [None, "", "not json", "{'broken': }"])
    def test_unparseable_is_none(self, text):
        assert parse_properties(text) is None

    @pytest.mark.parametrize("text", ["[1, 2]", '"string"', "3"])
    def test_non_object_is_none(self, text):
        assert parse_properties(text) is None
