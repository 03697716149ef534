"""Unit tests for campaignflow.rules.

Covers rule derivation from the bundled schema and standard definition,
the firing semantics of single rules, and visibility evaluation for the
station type discriminator.
"""

from copy import deepcopy

import pytest

from campaignflow.common.exceptions import ConfigurationError
from campaignflow.models import RuleAction, RuleSource, Visibility
from campaignflow.paths import MISSING
from campaignflow.rules import ConditionalRule, VisibilityMap, derive_rules, scope_of

LOCATION = "measurement_location.items"
STATION_TYPE = f"{LOCATION}.properties.measurement_station_type_id"
GROUPS = ("logger_main_config", "model_config", "mast_properties", "vertical_profiler_properties")


class TestScope:
    """Test suite for rule scopes."""

    @pytest.mark.parametrize(
        "schema_path,expected",
        [
            ("author", ""),
            (STATION_TYPE, LOCATION),
            (
                f"{LOCATION}.properties.measurement_point.items.properties.name",
                f"{LOCATION}.properties.measurement_point.items",
            ),
            (LOCATION, LOCATION),
        ],
    )
    def test_scope_of(self, schema_path, expected):
        assert scope_of(schema_path) == expected


class TestConditionalRule:
    """Test suite for single rule semantics."""

    def make_rule(self, **overrides):
        values = {
            "targets": (f"{LOCATION}.properties.model_config",),
            "action": RuleAction.SHOW,
            "trigger_path": STATION_TYPE,
            "trigger_values": ("reanalysis", "virtual_met_mast"),
        }
        values.update(overrides)
        return ConditionalRule(**values)

    def test_scope_is_trigger_list_element(self):
        assert self.make_rule().scope == LOCATION

    def test_fires_on_matching_value(self):
        rule = self.make_rule()

        assert rule.fires("reanalysis")
        assert not rule.fires("mast")

    def test_negated_rule_fires_on_other_values(self):
        rule = self.make_rule(negate=True)

        assert rule.fires("mast")
        assert not rule.fires("reanalysis")

    @pytest.mark.parametrize("negate", [False, True])
    def test_absent_or_null_trigger_never_fires(self, negate):
        rule = self.make_rule(negate=negate)

        assert not rule.fires(MISSING)
        assert not rule.fires(None)

    def test_unconditional_rule_always_fires(self):
        rule = ConditionalRule(targets=(f"{LOCATION}.properties.uuid",), action=RuleAction.DISABLE)

        assert rule.fires(MISSING)

    def test_target_outside_trigger_element_is_rejected(self):
        with pytest.raises(ConfigurationError, match="outside the list element"):
            self.make_rule(targets=("author",))

    def test_target_in_nested_list_is_rejected(self):
        nested = f"{LOCATION}.properties.measurement_point.items.properties.name"

        with pytest.raises(ConfigurationError, match="nested list"):
            self.make_rule(targets=(nested,))

    def test_to_dict(self):
        result = self.make_rule(negate=True, message="conflict").to_dict()

        assert result == {
            "action": "show",
            "targets": [f"{LOCATION}.properties.model_config"],
            "source": "schema",
            "trigger": STATION_TYPE,
            "values": ["reanalysis", "virtual_met_mast"],
            "negate": True,
            "message": "conflict",
        }


class TestRuleDerivation:
    """Test suite for deriving the rule table."""

    def test_rule_sources(self, repository, standard):
        rules = derive_rules(repository, standard)

        by_source = {source: [r for r in rules if r.source == source] for source in RuleSource}
        # four if/then blocks on the location object
        assert len(by_source[RuleSource.SCHEMA]) == 4 + 1
        # a show and a hide rule per discriminator group
        assert len(by_source[RuleSource.DISCRIMINATOR]) == 8
        assert len(by_source[RuleSource.STANDARD]) == 2

    def test_schema_if_then_becomes_require(self, repository, standard):
        rules = derive_rules(repository, standard)

        require = [r for r in rules if r.action == RuleAction.REQUIRE]
        mast = next(r for r in require if r.trigger_values == ("mast",))
        assert mast.targets == (f"{LOCATION}.properties.mast_properties",)
        assert mast.trigger_path == STATION_TYPE

    def test_read_only_nodes_become_disable(self, repository, standard):
        rules = derive_rules(repository, standard)

        disable = [r for r in rules if r.action == RuleAction.DISABLE]
        assert [r.targets for r in disable] == [(f"{LOCATION}.properties.uuid",)]

    def test_recommendations(self, repository, standard):
        rules = derive_rules(repository, standard)

        recommend = [r.targets[0] for r in rules if r.action == RuleAction.RECOMMEND]
        assert recommend == ["license", "plant_name"]

    def test_without_standard_only_schema_rules(self, repository):
        rules = derive_rules(repository)

        assert {r.source for r in rules} == {RuleSource.SCHEMA}

    def test_unknown_discriminator_group_field_is_rejected(self, repository, standard):
        data = standard.model_dump()
        data["discriminators"][0]["groups"][0]["fields"] = ["no_such_group"]

        with pytest.raises(ConfigurationError, match="does not exist in the schema"):
            derive_rules(repository, type(standard).model_validate(data))


class TestVisibilityEvaluation:
    """Test suite for evaluating the rule table against snapshots."""

    def test_mast_shows_mast_and_logger_groups(self, engine, mast_document):
        visibility = engine.evaluate_visibility(mast_document)

        entries = visibility.entries
        assert entries["measurement_location[0].mast_properties"] == Visibility.VISIBLE_REQUIRED
        assert entries["measurement_location[0].logger_main_config"] == Visibility.VISIBLE_REQUIRED
        assert entries["measurement_location[0].model_config"] == Visibility.HIDDEN
        assert entries["measurement_location[0].vertical_profiler_properties"] == Visibility.HIDDEN

    def test_reanalysis_shows_only_model_group(self, engine, reanalysis_document):
        visibility = engine.evaluate_visibility(reanalysis_document)

        assert visibility.visibility("measurement_location[0].model_config") == Visibility.VISIBLE_REQUIRED
        for group in ("logger_main_config", "mast_properties", "vertical_profiler_properties"):
            assert visibility.is_hidden(f"measurement_location[0].{group}")

    def test_hidden_group_hides_descendants(self, engine, reanalysis_document):
        visibility = engine.evaluate_visibility(reanalysis_document)

        assert visibility.is_hidden("measurement_location[0].logger_main_config[0].logger_oem_id")
        assert visibility.visibility(
            "measurement_location[0].logger_main_config[0].date_from", static_required=True
        ) == Visibility.HIDDEN

    def test_unset_discriminator_hides_every_group(self, engine, mast_document):
        """No group is visible or required until the station type is chosen."""
        data = deepcopy(mast_document)
        del data["measurement_location"][0]["measurement_station_type_id"]

        visibility = engine.evaluate_visibility(data)

        for group in GROUPS:
            assert visibility.is_hidden(f"measurement_location[0].{group}")
        assert visibility.required_paths() == []

    def test_null_discriminator_hides_every_group(self, engine, mast_document):
        data = deepcopy(mast_document)
        data["measurement_location"][0]["measurement_station_type_id"] = None

        visibility = engine.evaluate_visibility(data)

        for group in GROUPS:
            assert visibility.is_hidden(f"measurement_location[0].{group}")

    def test_solar_has_logger_but_no_device_group(self, engine, mast_document):
        data = deepcopy(mast_document)
        data["measurement_location"][0]["measurement_station_type_id"] = "solar"

        visibility = engine.evaluate_visibility(data)

        assert not visibility.is_hidden("measurement_location[0].logger_main_config")
        assert visibility.is_hidden("measurement_location[0].mast_properties")
        assert visibility.is_hidden("measurement_location[0].vertical_profiler_properties")

    def test_locations_are_evaluated_independently(self, engine, valid_document):
        visibility = engine.evaluate_visibility(valid_document)

        assert not visibility.is_hidden("measurement_location[0].logger_main_config")
        assert visibility.is_hidden("measurement_location[1].logger_main_config")

    def test_location_index_restricts_evaluation(self, engine, valid_document):
        visibility = engine.evaluate_visibility(valid_document, location_index=1)

        assert all(path.startswith("measurement_location[1]") for path in visibility.entries)

    def test_read_only_uuid_is_disabled(self, engine, valid_document):
        visibility = engine.evaluate_visibility(valid_document)

        assert visibility.is_disabled("measurement_location[0].uuid")
        assert visibility.is_disabled("measurement_location[1].uuid")

    def test_forbidden_hits_record_trigger(self, engine, reanalysis_document):
        visibility = engine.evaluate_visibility(reanalysis_document)

        hit = next(h for h in visibility.forbidden if h.target_path.endswith("logger_main_config"))
        assert hit.trigger_data_path == "measurement_location[0].measurement_station_type_id"
        assert hit.trigger_value == "reanalysis"

    def test_recommended_hits_listed(self, engine):
        visibility = engine.evaluate_visibility({})

        assert [hit.target_path for hit in visibility.recommended] == ["license", "plant_name"]

    def test_evaluation_does_not_modify_data(self, engine, valid_document):
        before = deepcopy(valid_document)

        engine.evaluate_visibility(valid_document)

        assert valid_document == before


class TestVisibilityMap:
    """Test suite for hidden-subtree lookups on a visibility map."""

    @pytest.fixture
    def visibility(self):
        return VisibilityMap(
            entries={
                "measurement_location[0].logger": Visibility.HIDDEN,
                "measurement_location[1]": Visibility.HIDDEN,
                "measurement_location[0].mast_properties": Visibility.VISIBLE_REQUIRED,
            }
        )

    def test_hidden_paths_are_collected_once(self, visibility):
        assert visibility.hidden_paths == ["measurement_location[0].logger", "measurement_location[1]"]

    @pytest.mark.parametrize(
        "data_path,expected",
        [
            ("measurement_location[0].logger", True),
            ("measurement_location[0].logger.serial", True),
            ("measurement_location[1].mast_properties.height", True),
            ("measurement_location[0].logger_main_config", False),
            ("measurement_location[0].mast_properties", False),
            ("measurement_location[10]", False),
            ("", False),
        ],
    )
    def test_is_hidden_checks_ancestors(self, visibility, data_path, expected):
        assert visibility.is_hidden(data_path) is expected

    def test_map_without_hidden_entries(self):
        assert not VisibilityMap().is_hidden("measurement_location[0].logger")
