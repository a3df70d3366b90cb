"""
Layer 5: 오퍼 초안 생성기.

처리 흐름 (활성 (카테고리, 변형) 쌍마다):
1. 요구사항 해석: 템플릿 행 + 프로젝트 답변 → 환경(environment)
2. 규칙 평가: 조건식 → 수량식 (규칙 선언 순서대로)
3. 제품 선택: 가격표 조회 (규칙끼리 독립적이므로 동시에 진행)
4. 조립: (category_slug, variant_slug, 규칙 순서)대로 항목과 진단을 정리

한 규칙의 실패는 그 규칙의 진단으로만 남고 나머지 규칙의 생성을 막지 않습니다.
결과에는 시각, 난수, 카운터가 없으므로 같은 입력이면 항상 같은 출력이 나옵니다.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from offer_engine.config import Settings, get_settings
from offer_engine.exceptions import (
    InvalidQuantity,
    MalformedExpression,
    NoCandidateProduct,
    NotFound,
    OfferEngineError,
    PriceListUnavailable,
    TypeMismatch,
)
from offer_engine.layers.layer1_expression import evaluate, is_number, type_name
from offer_engine.layers.layer2_requirements import RequirementResolver
from offer_engine.layers.layer4_products import ProductResolver, ProductOutcome
from offer_engine.models import (
    Diagnostic,
    DiagnosticKind,
    DiagnosticSeverity,
    DraftLineItem,
    OfferDraft,
    OfferGenerationRule,
    Project,
    ResolvedEnvironment,
    ResolvedProduct,
)
from offer_engine.services.catalog_store import CatalogStore
from offer_engine.services.interfaces import (
    PriceListCatalog,
    RuleSource,
    SelectionSource,
    TemplateCatalog,
)
from offer_engine.services.selection import ProjectSelectionSource

logger = logging.getLogger(__name__)


@dataclass
class _RulePlan:
    """조건과 수량 평가를 통과해 제품 선택만 남은 규칙."""

    rule: OfferGenerationRule
    quantity: float
    explanation: list[str] = field(default_factory=list)


# 조립 순서를 유지하기 위한 항목: 진단이거나 제품 선택 대기 중인 규칙
_Entry = Union[Diagnostic, _RulePlan]


class OfferDraftGenerator:
    """
    Offer draft orchestration over templates, rules and the price list.

    All collaborators are read-only for the duration of a call, so concurrent
    generate() calls for different projects share nothing mutable.
    """

    def __init__(
        self,
        template_catalog: TemplateCatalog,
        rule_source: RuleSource,
        price_list: PriceListCatalog,
        selection_source: Optional[SelectionSource] = None,
        settings: Optional[Settings] = None,
    ):
        self.resolver = RequirementResolver(template_catalog)
        self.rule_source = rule_source
        self.product_resolver = ProductResolver(price_list)
        self.selection_source = selection_source or ProjectSelectionSource()
        self.settings = settings or get_settings()

    @classmethod
    def from_store(cls, store: CatalogStore, **kwargs) -> "OfferDraftGenerator":
        """CatalogStore 하나가 세 가지 카탈로그 역할을 모두 하는 경우."""
        return cls(store, store, store, **kwargs)

    async def generate(self, project: Project) -> OfferDraft:
        """
        Compute draft line items and diagnostics for a project.

        Args:
            project: Project snapshot (not mutated)

        Returns:
            OfferDraft with line items in (category, variant, rule order)

        Raises:
            MalformedExpression: only when fail_on_malformed_expression is set
        """
        selections = sorted(self.selection_source.get_active_selections(project))
        logger.info(f"[OfferDraft] {project.id}: 활성 쌍 {len(selections)}개 처리 시작")

        entries: list[_Entry] = []
        for category_slug, variant_slug in selections:
            entries.extend(self._plan_selection(project, category_slug, variant_slug))

        plans = [entry for entry in entries if isinstance(entry, _RulePlan)]
        outcomes = await self._resolve_products(plans)
        outcome_by_plan = {id(plan): outcome for plan, outcome in zip(plans, outcomes)}

        draft = OfferDraft(project_id=project.id)
        for entry in entries:
            if isinstance(entry, Diagnostic):
                draft.diagnostics.append(entry)
                continue
            outcome = outcome_by_plan[id(entry)]
            if isinstance(outcome, OfferEngineError):
                draft.diagnostics.append(self._rule_diagnostic(outcome, entry.rule))
                # 조회 실패는 항목 없이 진단만 남김
                if not isinstance(outcome, NoCandidateProduct):
                    continue
            draft.line_items.append(self._build_line_item(entry, outcome))

        logger.info(
            f"[OfferDraft] {project.id}: {len(draft.line_items)}개 항목, "
            f"{len(draft.diagnostics)}개 진단"
        )
        return draft

    # ==================== 계획 단계 (동기) ====================

    def _plan_selection(
        self,
        project: Project,
        category_slug: str,
        variant_slug: str,
    ) -> list[_Entry]:
        entries: list[_Entry] = []
        context = {"category_slug": category_slug, "variant_slug": variant_slug}

        try:
            environment = self.resolver.resolve(project, category_slug, variant_slug)
            rules = self.rule_source.get_generation_rules(category_slug, variant_slug)
        except NotFound as e:
            logger.warning(f"[OfferDraft] {category_slug}/{variant_slug} 건너뜀: {e.message}")
            return [Diagnostic.from_error(e, **context)]

        entries.extend(environment.issues)
        for rule in rules:
            entries.append(self._plan_rule(rule, environment))
        return entries

    def _plan_rule(self, rule: OfferGenerationRule, environment: ResolvedEnvironment) -> _Entry:
        try:
            if not self._condition_holds(rule, environment):
                logger.debug(f"[OfferDraft] 규칙 '{rule.id}' 조건 불충족")
                return Diagnostic(
                    kind=DiagnosticKind.SKIPPED,
                    severity=DiagnosticSeverity.INFO,
                    category_slug=rule.category_slug,
                    variant_slug=rule.variant_slug,
                    rule_id=rule.id,
                    message=f"Condition `{rule.condition_expression}` is false",
                )
            quantity = self._compute_quantity(rule, environment)
        except MalformedExpression as e:
            if self.settings.fail_on_malformed_expression:
                raise
            logger.error(f"[OfferDraft] 규칙 '{rule.id}' 표현식 오류: {e.message}")
            return self._rule_diagnostic(e, rule, severity=DiagnosticSeverity.ERROR)
        except OfferEngineError as e:
            logger.warning(f"[OfferDraft] 규칙 '{rule.id}' 실패: {e.message}")
            return self._rule_diagnostic(e, rule)

        if quantity == 0 and not self.settings.include_zero_quantity:
            return Diagnostic(
                kind=DiagnosticKind.SKIPPED,
                severity=DiagnosticSeverity.INFO,
                category_slug=rule.category_slug,
                variant_slug=rule.variant_slug,
                rule_id=rule.id,
                message=f"Quantity `{rule.quantity_expression}` is zero",
            )

        if rule.condition_expression is None:
            condition_text = "always active"
        else:
            condition_text = f"condition `{rule.condition_expression}` holds"
        return _RulePlan(
            rule=rule,
            quantity=quantity,
            explanation=[condition_text, f"quantity `{rule.quantity_expression}` = {quantity:g}"],
        )

    def _condition_holds(self, rule: OfferGenerationRule, environment: ResolvedEnvironment) -> bool:
        # 조건식이 없으면 항상 활성
        if rule.condition_expression is None:
            return True
        result = evaluate(rule.condition_expression, environment.values)
        if not isinstance(result, bool):
            raise TypeMismatch(
                f"Condition of rule '{rule.id}' evaluated to {type_name(result)}, expected boolean",
                details={"rule_id": rule.id, "type": type_name(result)},
            )
        return result

    def _compute_quantity(self, rule: OfferGenerationRule, environment: ResolvedEnvironment) -> float:
        result = evaluate(rule.quantity_expression, environment.values)
        if not is_number(result):
            raise InvalidQuantity(
                f"Quantity of rule '{rule.id}' is {type_name(result)}, expected number",
                details={"rule_id": rule.id, "value": result},
            )
        if result < 0:
            raise InvalidQuantity(
                f"Quantity of rule '{rule.id}' is negative ({result:g})",
                details={"rule_id": rule.id, "value": result},
            )
        # + 0.0 은 -0.0을 0.0으로 정리
        return round(float(result), self.settings.quantity_decimals) + 0.0

    # ==================== 제품 선택 단계 (비동기) ====================

    async def _resolve_products(
        self, plans: list[_RulePlan]
    ) -> list[Union[ProductOutcome, OfferEngineError]]:
        """
        규칙별 가격표 조회를 동시에 실행합니다 (동시 실행 수 제한).
        한 규칙의 조회 실패는 예외 객체로 돌려주어 다른 조회와 초안 전체를 막지 않습니다.
        asyncio.gather는 입력 순서대로 결과를 돌려주므로 조립 순서가 유지됩니다.
        호출자가 generate를 취소하면 진행 중인 조회도 함께 취소됩니다.
        """
        semaphore = asyncio.Semaphore(max(1, self.settings.product_lookup_concurrency))

        async def lookup(plan: _RulePlan):
            async with semaphore:
                try:
                    return await self.product_resolver.resolve(
                        plan.rule.target_product_category_slug,
                        plan.rule.product_selection_mode,
                    )
                except NoCandidateProduct as e:
                    logger.warning(f"[OfferDraft] 규칙 '{plan.rule.id}': {e.message}")
                    return e
                except OfferEngineError as e:
                    logger.error(f"[OfferDraft] 규칙 '{plan.rule.id}' 가격표 조회 실패: {e.message}")
                    return e
                except Exception as e:
                    logger.error(
                        f"[OfferDraft] 규칙 '{plan.rule.id}' 가격표 조회 실패: {e}", exc_info=True
                    )
                    return PriceListUnavailable(plan.rule.target_product_category_slug, str(e))

        return await asyncio.gather(*[lookup(plan) for plan in plans])

    # ==================== 조립 ====================

    def _build_line_item(
        self,
        plan: _RulePlan,
        outcome: Union[ProductOutcome, NoCandidateProduct],
    ) -> DraftLineItem:
        rule = plan.rule
        slug = rule.target_product_category_slug
        explanation = list(plan.explanation)

        if isinstance(outcome, ResolvedProduct):
            explanation.append(
                f"picked '{outcome.name}' ({outcome.product_id}), "
                f"first of {outcome.candidate_count} in '{slug}'"
            )
            product_fields = {
                "resolved_product_id": outcome.product_id,
                "product_name": outcome.name,
                "unit_price": outcome.unit_price,
            }
        else:
            if isinstance(outcome, NoCandidateProduct):
                explanation.append(f"no product in '{slug}', manual selection required")
            else:
                explanation.append(f"manual product selection in '{slug}'")
            product_fields = {"needs_manual_selection": True, "product_name": rule.label}

        return DraftLineItem(
            rule_id=rule.id,
            rule_label=rule.label,
            category_slug=rule.category_slug,
            variant_slug=rule.variant_slug,
            product_category_slug=slug,
            quantity=plan.quantity,
            explanation="; ".join(explanation),
            **product_fields,
        )

    def _rule_diagnostic(
        self,
        error: OfferEngineError,
        rule: OfferGenerationRule,
        severity: DiagnosticSeverity = DiagnosticSeverity.WARNING,
    ) -> Diagnostic:
        return Diagnostic.from_error(
            error,
            severity=severity,
            category_slug=rule.category_slug,
            variant_slug=rule.variant_slug,
            rule_id=rule.id,
        )
