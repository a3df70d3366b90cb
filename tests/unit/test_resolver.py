"""Requirement resolver unit tests.

Tests value coercion, default fallback, omission of unanswered rows,
formula rows and requirement seeding.
"""

import pytest

from offer_engine.exceptions import NotFound, TypeMismatch
from offer_engine.layers.layer2_requirements import (
    RequirementResolver,
    coerce_boolean,
    coerce_number,
    coerce_select,
    detach_requirements,
    recompute_formula_values,
    requirement_id,
    seed_requirements,
)
from offer_engine.models import (
    DiagnosticKind,
    DiagnosticSeverity,
    FieldType,
    Project,
    ProjectRequirement,
    RequirementFormulaConfig,
)


def answer(row_id, value, category="alarm", **kwargs):
    return ProjectRequirement(
        id=f"grp-{category}-{row_id}",
        category_slug=category,
        template_row_id=row_id,
        value=value,
        **kwargs,
    )


@pytest.fixture
def resolver(store):
    return RequirementResolver(store)


class TestCoercion:
    @pytest.mark.parametrize(
        "raw,expected",
        [("3", 3.0), (" 2.5 ", 2.5), ("2,5", 2.5), ("1 200", 1200.0), ("-4", -4.0)],
    )
    def test_numbers(self, raw, expected):
        assert coerce_number(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "", "nan", "inf", "1,2.3"])
    def test_bad_numbers(self, raw):
        with pytest.raises(TypeMismatch):
            coerce_number(raw, "rooms")

    @pytest.mark.parametrize(
        "raw,expected",
        [("true", True), ("Yes", True), ("da", True), ("1", True),
         ("false", False), ("NO", False), ("ne", False), ("0", False)],
    )
    def test_booleans(self, raw, expected):
        assert coerce_boolean(raw) is expected

    def test_bad_boolean(self):
        with pytest.raises(TypeMismatch):
            coerce_boolean("maybe")

    def test_select_must_be_an_option(self):
        assert coerce_select(" outdoor ", ["indoor", "outdoor"]) == "outdoor"
        with pytest.raises(TypeMismatch):
            coerce_select("roof", ["indoor", "outdoor"])


class TestResolve:
    def test_answers_defaults_and_formula(self, resolver, project):
        environment = resolver.resolve(project, "alarm", "standard")

        assert environment.values == {
            "rooms": 3.0,
            "hasAlarm": True,
            "sirenType": "indoor",  # default
            "sensors": 6.0,         # rooms * 2
        }
        assert environment.issues == []

    def test_unanswered_row_without_default_is_omitted(self, resolver, project):
        environment = resolver.resolve(project, "alarm", "standard")
        assert "notes" not in environment.values

    def test_blank_answer_falls_back_to_default(self, resolver):
        project = Project(id="P", categories=["alarm"], requirements=[answer("rooms", "  ")])
        environment = resolver.resolve(project, "alarm", "standard")
        assert environment.values["rooms"] == 1.0
        assert environment.values["sensors"] == 2.0

    def test_text_value_is_kept_verbatim(self, resolver):
        project = Project(id="P", categories=["alarm"], requirements=[answer("notes", " side door ")])
        environment = resolver.resolve(project, "alarm", "standard")
        assert environment.values["notes"] == " side door "

    def test_answers_of_other_categories_are_ignored(self, resolver):
        project = Project(
            id="P",
            categories=["alarm", "lighting"],
            requirements=[answer("rooms", "9", category="lighting")],
        )
        environment = resolver.resolve(project, "alarm", "standard")
        assert environment.values["rooms"] == 1.0

    def test_uncoercible_value_is_omitted_with_issue(self, resolver):
        project = Project(
            id="P",
            categories=["alarm"],
            requirements=[answer("rooms", "three"), answer("sirenType", "roof")],
        )
        environment = resolver.resolve(project, "alarm", "standard")

        assert "rooms" not in environment.values
        assert "sirenType" not in environment.values
        kinds = {(issue.field_id, issue.kind) for issue in environment.issues}
        assert ("rooms", DiagnosticKind.TYPE_MISMATCH) in kinds
        assert ("sirenType", DiagnosticKind.TYPE_MISMATCH) in kinds
        # formula base is gone, so the derived row is unbound
        assert ("sensors", DiagnosticKind.UNBOUND_VARIABLE) in kinds
        assert all(issue.rule_id is None for issue in environment.issues)

    def test_requirement_formula_overrides_template(self, resolver):
        override = RequirementFormulaConfig(base_field_id="rooms", multiply_by=3)
        project = Project(
            id="P",
            categories=["alarm"],
            requirements=[answer("rooms", "2"), answer("sensors", "", formula_config=override)],
        )
        environment = resolver.resolve(project, "alarm", "standard")
        assert environment.values["sensors"] == 6.0

    def test_formula_forward_reference_is_invalid(self, resolver):
        # "rooms" referencing "sensors", which is declared after it
        override = RequirementFormulaConfig(base_field_id="sensors", multiply_by=1)
        project = Project(
            id="P",
            categories=["alarm"],
            requirements=[answer("rooms", "", formula_config=override, field_type=FieldType.NUMBER)],
        )
        environment = resolver.resolve(project, "alarm", "standard")

        invalid = [i for i in environment.issues if i.kind == DiagnosticKind.INVALID_FORMULA]
        assert len(invalid) == 1
        assert invalid[0].field_id == "rooms"
        assert invalid[0].severity == DiagnosticSeverity.ERROR
        assert "rooms" not in environment.values

    def test_formula_on_non_number_row_is_invalid(self, resolver):
        override = RequirementFormulaConfig(base_field_id="rooms", multiply_by=1)
        project = Project(
            id="P",
            categories=["alarm"],
            requirements=[answer("notes", "", formula_config=override)],
        )
        environment = resolver.resolve(project, "alarm", "standard")
        assert [i.field_id for i in environment.issues] == ["notes"]
        assert environment.issues[0].kind == DiagnosticKind.INVALID_FORMULA

    def test_unknown_pair_is_not_found(self, resolver, project):
        with pytest.raises(NotFound):
            resolver.resolve(project, "alarm", "custom")

    def test_project_is_not_mutated(self, resolver, project):
        before = project.model_dump()
        resolver.resolve(project, "alarm", "standard")
        assert project.model_dump() == before


class TestSeeding:
    def test_one_requirement_per_row(self, store, alarm_group):
        requirements = seed_requirements(store, ["alarm"], "standard")

        assert [r.template_row_id for r in requirements] == alarm_group.row_ids()
        assert requirements[0].id == requirement_id("grp-alarm", "rooms") == "grp-alarm-rooms"
        assert requirements[0].value == "1"
        assert requirements[1].value == ""

    def test_copies_formula_and_product_category(self, store):
        sensors = [r for r in seed_requirements(store, ["alarm"]) if r.template_row_id == "sensors"][0]
        assert sensors.formula_config.base_field_id == "rooms"
        assert sensors.product_category_slug == "sensor"
        assert sensors.field_type == FieldType.NUMBER

    def test_category_order_is_kept(self, store):
        requirements = seed_requirements(store, ["lighting", "alarm"])
        assert requirements[0].category_slug == "lighting"
        assert requirements[-1].category_slug == "alarm"

    def test_no_categories(self, store):
        assert seed_requirements(store, []) == []

    def test_seeded_project_resolves(self, store):
        project = Project(
            id="P",
            categories=["alarm"],
            variant_slug="standard",
            requirements=seed_requirements(store, ["alarm"], "standard"),
        )
        environment = RequirementResolver(store).resolve(project, "alarm", "standard")
        assert environment.values["rooms"] == 1.0
        assert environment.values["sensors"] == 2.0


class TestLifecycle:
    def test_recompute_updates_formula_rows_only(self, store, project):
        project.requirements.append(
            ProjectRequirement(
                id="grp-alarm-sensors",
                category_slug="alarm",
                template_row_id="sensors",
                value="2",
            )
        )

        updated = recompute_formula_values(store, project, "alarm", "standard")

        by_row = {r.template_row_id: r.value for r in updated}
        assert by_row["sensors"] == "6"
        assert by_row["rooms"] == "3"
        # input project keeps the old value
        assert project.find_requirement("alarm", "sensors").value == "2"

    def test_recompute_keeps_value_when_formula_fails(self, store):
        project = Project(
            id="P",
            categories=["alarm"],
            requirements=[
                answer("rooms", "three"),
                answer("sensors", "4"),
            ],
        )
        updated = recompute_formula_values(store, project, "alarm", "standard")
        assert [r.value for r in updated] == ["three", "4"]

    def test_detach_removes_category(self, project):
        remaining = detach_requirements(project, "Alarm")
        assert [r.template_row_id for r in remaining] == ["area"]
        assert len(project.requirements) == 3
