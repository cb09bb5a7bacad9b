"""
Tests for in-memory predicate execution and rule descriptions.
"""

import pytest

from service_collections.app.rules.compiler import compile_rule_predicate
from service_collections.app.rules.describe import describe_rule_config, NO_RULES
from service_collections.app.rules.evaluator import filter_recipes, matches_predicate


def recipe(recipe_id, tags=(), **fields):
    return {
        "id": recipe_id,
        "status": "published",
        "tags": [{"tagId": tag_id, "tag": {"type": tag_type}} for tag_type, tag_id in tags],
        **fields,
    }


@pytest.fixture
def recipes():
    """Small recipe catalogue."""
    return [
        recipe("r1", tags=[("crowd", "低脂")], cookTime=20, cuisineId="c1"),
        recipe("r2", tags=[("taste", "清淡")], cookTime=45, cuisineId="c2"),
        recipe("r3", tags=[("taste", "清淡"), ("taste", "重口味")], cookTime=15, cuisineId="c1"),
        recipe("r4", tags=[("scene", "清淡")], cookTime=10, cuisineId="c3"),
        recipe("r5", cookTime=None, cuisineId="c1"),
    ]


@pytest.fixture
def low_fat_quick_rules():
    """Low-fat or light recipes within 30 minutes, nothing heavy."""
    return {
        "mode": "custom",
        "groups": [
            {"logic": "OR", "conditions": [
                {"field": "tag", "operator": "eq", "value": "低脂", "tagType": "crowd"},
                {"field": "tag", "operator": "eq", "value": "清淡", "tagType": "taste"},
            ]},
            {"logic": "AND", "conditions": [{"field": "cookTime", "operator": "lte", "value": 30}]},
        ],
        "exclude": [{"field": "tag", "operator": "eq", "value": "重口味", "tagType": "taste"}],
    }


class TestMatchesPredicate:
    """Test cases for predicate evaluation."""

    def test_empty_predicate_matches_everything(self, recipes):
        """Test the empty predicate."""
        assert filter_recipes({}, recipes) == recipes

    def test_compiled_rules(self, recipes, low_fat_quick_rules):
        """Test groups, tag scoping and excludes end to end."""
        where = compile_rule_predicate(low_fat_quick_rules)

        matched = [item["id"] for item in filter_recipes(where, recipes)]

        # r2 too slow, r3 excluded, r4 tag in the wrong taxonomy, r5 has no tags
        assert matched == ["r1"]

    def test_excluded_ids(self, recipes):
        """Test id exclusion from context."""
        rules = {"mode": "custom", "groups": [
            {"logic": "AND", "conditions": [{"field": "cuisineId", "operator": "eq", "value": "c1"}]},
        ], "exclude": []}

        where = compile_rule_predicate(rules, {"excludedRecipeIds": ["r3"]})

        assert [item["id"] for item in filter_recipes(where, recipes)] == ["r1", "r5"]

    def test_null_values_never_compare(self, recipes):
        """Test missing values fail range and inequality filters."""
        assert not matches_predicate({"cookTime": {"lte": 60}}, recipes[4])
        assert not matches_predicate({"cookTime": {"not": 20}}, recipes[4])

    def test_tag_none_quantifier(self, recipes):
        """Test tags none membership."""
        where = compile_rule_predicate({"mode": "custom", "groups": [
            {"logic": "AND", "conditions": [{"field": "tagId", "operator": "neq", "value": "清淡"}]},
        ], "exclude": []})

        assert [item["id"] for item in filter_recipes(where, recipes)] == ["r1", "r5"]

    def test_in_filters(self, recipes):
        """Test in / notIn filters."""
        assert matches_predicate({"cuisineId": {"in": ["c1", "c2"]}}, recipes[1])
        assert not matches_predicate({"cuisineId": {"notIn": ["c1", "c2"]}}, recipes[1])


class TestDescribeRuleConfig:
    """Test cases for rule descriptions."""

    def test_auto_description(self):
        """Test auto rule summary."""
        assert describe_rule_config({"mode": "auto", "field": "cuisineId", "value": "c1"}) == "Auto match on Cuisine"

    def test_empty_description(self):
        """Test empty custom rules."""
        assert describe_rule_config({"mode": "custom", "groups": [], "exclude": []}) == NO_RULES

    def test_custom_description(self, low_fat_quick_rules):
        """Test groups and excludes are summarised in order."""
        description = describe_rule_config(low_fat_quick_rules)

        assert description == (
            "(Tag[crowd] = 低脂 OR Tag[taste] = 清淡) AND (Cook time <= 30)"
            " excluding: Tag[taste] = 重口味"
        )
