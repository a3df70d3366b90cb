"""Layer 4: abstract product needs → concrete price-list products."""

import logging
from typing import Union

from offer_engine.exceptions import NoCandidateProduct
from offer_engine.models import ManualSelectionRequired, ProductSelectionMode, ResolvedProduct
from offer_engine.services.interfaces import PriceListCatalog

logger = logging.getLogger(__name__)

ProductOutcome = Union[ResolvedProduct, ManualSelectionRequired]


class ProductResolver:
    """
    가격표에서 제품 후보를 고릅니다.

    auto-first는 카탈로그가 정한 순서의 첫 번째 제품을 선택합니다. 순서 자체는
    외부 카탈로그의 계약이며, 같은 카탈로그 상태에서 항상 같아야 합니다.
    manual은 카탈로그를 조회하지 않고 항상 수동 선택 자리표시자를 돌려줍니다.
    """

    def __init__(self, price_list: PriceListCatalog):
        self.price_list = price_list

    async def resolve(
        self,
        product_category_slug: str,
        mode: ProductSelectionMode,
    ) -> ProductOutcome:
        """
        Raises:
            NoCandidateProduct: auto-first인데 후보가 하나도 없음
        """
        if mode == ProductSelectionMode.MANUAL:
            return ManualSelectionRequired(product_category_slug=product_category_slug)

        candidates = await self.price_list.find_products_by_category(product_category_slug)
        if not candidates:
            raise NoCandidateProduct(product_category_slug)

        first = candidates[0]
        logger.debug(
            f"[ProductResolver] '{product_category_slug}': {len(candidates)}개 후보 중 '{first.id}' 선택"
        )
        return ResolvedProduct(
            product_id=first.id,
            name=first.name,
            unit_price=first.unit_price,
            candidate_count=len(candidates),
        )
