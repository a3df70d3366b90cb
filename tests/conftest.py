"""공유 pytest fixture 모음."""

import pytest

from offer_engine.config import Settings
from offer_engine.layers.layer5_offer import OfferDraftGenerator
from offer_engine.models import (
    CatalogProduct,
    FieldType,
    OfferGenerationRule,
    ProductSelectionMode,
    Project,
    ProjectRequirement,
    RequirementFormulaConfig,
    RequirementTemplateGroup,
    RequirementTemplateRow,
    RequirementTemplateVariant,
)
from offer_engine.services import CatalogSnapshot, CatalogStore


@pytest.fixture
def settings():
    """환경 변수와 무관한 기본 설정."""
    return Settings(
        quantity_decimals=2,
        include_zero_quantity=False,
        product_lookup_concurrency=4,
        fail_on_malformed_expression=False,
    )


@pytest.fixture
def alarm_group():
    """alarm/standard 템플릿 그룹 fixture."""
    return RequirementTemplateGroup(
        id="grp-alarm",
        category_slug="alarm",
        variant_slug="standard",
        label="Alarm system",
        rows=[
            RequirementTemplateRow(id="rooms", label="Rooms", field_type=FieldType.NUMBER, default_value="1"),
            RequirementTemplateRow(id="hasAlarm", label="Alarm", field_type=FieldType.BOOLEAN),
            RequirementTemplateRow(
                id="sirenType",
                label="Siren",
                field_type=FieldType.SELECT,
                options=["indoor", "outdoor"],
                default_value="indoor",
            ),
            RequirementTemplateRow(
                id="sensors",
                label="Sensors",
                field_type=FieldType.NUMBER,
                product_category_slug="sensor",
                formula_config=RequirementFormulaConfig(base_field_id="rooms", multiply_by=2),
            ),
            RequirementTemplateRow(id="notes", label="Notes", field_type=FieldType.TEXT),
        ],
    )


@pytest.fixture
def lighting_group():
    """lighting/standard 템플릿 그룹 fixture."""
    return RequirementTemplateGroup(
        id="grp-lighting",
        category_slug="lighting",
        variant_slug="standard",
        label="Lighting",
        rows=[
            RequirementTemplateRow(id="area", label="Area", field_type=FieldType.NUMBER),
        ],
    )


@pytest.fixture
def rules():
    """규칙 fixture. 일부러 lighting 규칙을 alarm 규칙보다 먼저 선언합니다."""
    return [
        OfferGenerationRule(
            id="r-light",
            category_slug="lighting",
            variant_slug="standard",
            label="Ceiling lights",
            target_product_category_slug="light",
            quantity_expression="area / 5",
        ),
        OfferGenerationRule(
            id="r-central",
            category_slug="alarm",
            variant_slug="standard",
            label="Alarm central",
            target_product_category_slug="alarm-central",
            condition_expression="hasAlarm == true",
            quantity_expression="1",
        ),
        OfferGenerationRule(
            id="r-sensors",
            category_slug="alarm",
            variant_slug="standard",
            label="Sensors",
            target_product_category_slug="sensor",
            quantity_expression="sensors",
        ),
        OfferGenerationRule(
            id="r-siren",
            category_slug="alarm",
            variant_slug="standard",
            label="Outdoor siren",
            target_product_category_slug="siren",
            condition_expression="sirenType == 'outdoor'",
            quantity_expression="1",
            product_selection_mode=ProductSelectionMode.MANUAL,
        ),
    ]


@pytest.fixture
def products():
    return [
        CatalogProduct(id="A", name="Sensor A", unit_price=30.0, category_slugs=["sensor"]),
        CatalogProduct(id="B", name="Sensor B", unit_price=45.0, category_slugs=["sensor"]),
        CatalogProduct(id="C1", name="Central", unit_price=400.0, category_slugs=["alarm-central"]),
        CatalogProduct(id="L1", name="LED panel", unit_price=25.0, category_slugs=["light"]),
    ]


@pytest.fixture
def catalog_snapshot(alarm_group, lighting_group, rules, products):
    return CatalogSnapshot(
        version="test",
        variants=[
            RequirementTemplateVariant(category_slug="alarm", variant_slug="standard", label="Standard"),
            RequirementTemplateVariant(category_slug="lighting", variant_slug="standard", label="Standard"),
        ],
        template_groups=[alarm_group, lighting_group],
        rules=rules,
        products=products,
    )


@pytest.fixture
def store(catalog_snapshot):
    """메모리 CatalogStore fixture."""
    return CatalogStore(catalog_snapshot)


@pytest.fixture
def project():
    """alarm + lighting 카테고리를 채택한 프로젝트 fixture."""
    return Project(
        id="PRJ-001",
        name="Family house",
        categories=["alarm", "lighting"],
        variant_slug="standard",
        requirements=[
            ProjectRequirement(id="grp-alarm-rooms", category_slug="alarm", template_row_id="rooms", value="3"),
            ProjectRequirement(id="grp-alarm-hasAlarm", category_slug="alarm", template_row_id="hasAlarm", value="da"),
            ProjectRequirement(id="grp-lighting-area", category_slug="lighting", template_row_id="area", value="20"),
        ],
    )


@pytest.fixture
def generator(store, settings):
    """CatalogStore 기반 OfferDraftGenerator fixture."""
    return OfferDraftGenerator.from_store(store, settings=settings)
