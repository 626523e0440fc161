from decimal import Decimal

import pytest
from prometheus_client import REGISTRY

from marketplace.ordering.domain.services.order_validator import InvalidReason, ItemRequest, OrderValidator
from marketplace.tests.fakes import InMemoryCatalogLookup


def failures(reason: InvalidReason) -> float:
    return REGISTRY.get_sample_value("marketplace_order_item_validation_failures_total", {"reason": reason.value}) or 0


@pytest.mark.unit
class TestOrderValidator:
    def setup_method(self):
        self.catalog = InMemoryCatalogLookup()
        self.validator = OrderValidator(self.catalog)

    def test_valid_item_snapshots_price_and_seller(self):
        product = self.catalog.add(price="10.00", stock=5, seller_id="s1")

        result = self.validator.validate([ItemRequest(product.product_id, 2)])

        assert result.is_valid
        assert len(result.valid_items) == 1
        item = result.valid_items[0]
        assert item.unit_price == Decimal("10.00")
        assert item.seller_id == "s1"
        assert result.grouped_by_seller == {"s1": [item]}

    def test_empty_request_is_valid_with_no_sellers(self):
        result = self.validator.validate([])

        assert result.is_valid
        assert result.valid_items == []
        assert result.seller_ids == []

    def test_missing_product(self):
        result = self.validator.validate([ItemRequest("nope", 1)])

        assert not result.is_valid
        assert result.invalid_items[0].reason == InvalidReason.NOT_FOUND
        assert result.invalid_items[0].message == "Product not found"

    def test_inactive_product(self):
        product = self.catalog.add(is_active=False)

        result = self.validator.validate([ItemRequest(product.product_id, 1)])

        assert result.invalid_items[0].reason == InvalidReason.INACTIVE

    def test_inactive_is_reported_before_stock(self):
        product = self.catalog.add(is_active=False, stock=0)

        result = self.validator.validate([ItemRequest(product.product_id, 1)])

        assert result.invalid_items[0].reason == InvalidReason.INACTIVE

    def test_insufficient_stock_names_counts(self):
        product = self.catalog.add(stock=3)

        result = self.validator.validate([ItemRequest(product.product_id, 4)])

        invalid = result.invalid_items[0]
        assert invalid.reason == InvalidReason.INSUFFICIENT_STOCK
        assert invalid.message == "Insufficient stock. Available: 3, requested: 4"

    def test_stock_equal_to_quantity_is_enough(self):
        product = self.catalog.add(stock=4)

        assert self.validator.validate([ItemRequest(product.product_id, 4)]).is_valid

    def test_product_without_store(self):
        product = self.catalog.add(seller_id=None)

        result = self.validator.validate([ItemRequest(product.product_id, 1)])

        assert result.invalid_items[0].reason == InvalidReason.NO_ASSOCIATED_SELLER
        assert result.invalid_items[0].message == "Product has no associated store"

    def test_non_positive_quantity_skips_lookup(self):
        product = self.catalog.add()

        result = self.validator.validate([ItemRequest(product.product_id, 0)])

        assert result.invalid_items[0].reason == InvalidReason.INVALID_QUANTITY
        assert self.catalog.calls == []

    def test_lookup_failure_only_invalidates_that_item(self):
        good = self.catalog.add(seller_id="s1")
        broken = self.catalog.add(seller_id="s1")
        self.catalog.fail_on(broken.product_id)

        result = self.validator.validate([ItemRequest(broken.product_id, 1), ItemRequest(good.product_id, 1)])

        assert [i.reason for i in result.invalid_items] == [InvalidReason.LOOKUP_ERROR]
        assert [i.product_id for i in result.valid_items] == [good.product_id]

    def test_duplicates_are_validated_independently(self):
        product = self.catalog.add(stock=3, seller_id="s1")

        result = self.validator.validate([ItemRequest(product.product_id, 2), ItemRequest(product.product_id, 2)])

        # Each occurrence fits in stock on its own; demand is not merged
        assert result.is_valid
        assert len(result.grouped_by_seller["s1"]) == 2
        assert self.catalog.calls == [product.product_id, product.product_id]

    def test_groups_by_seller_in_first_seen_order(self):
        a = self.catalog.add(seller_id="s2")
        b = self.catalog.add(seller_id="s1")
        c = self.catalog.add(seller_id="s2")

        result = self.validator.validate([ItemRequest(p.product_id, 1) for p in (a, b, c)])

        assert result.seller_ids == ["s2", "s1"]
        assert [i.product_id for i in result.grouped_by_seller["s2"]] == [a.product_id, c.product_id]

    def test_mixed_request_partitions_in_input_order(self):
        ok = self.catalog.add()
        low = self.catalog.add(stock=1)

        result = self.validator.validate(
            [ItemRequest("missing", 1), ItemRequest(ok.product_id, 1), ItemRequest(low.product_id, 2)]
        )

        assert [i.product_id for i in result.invalid_items] == ["missing", low.product_id]
        assert [i.product_id for i in result.valid_items] == [ok.product_id]

    def test_invalid_items_are_counted_by_reason(self):
        before = failures(InvalidReason.NOT_FOUND)

        self.validator.validate([ItemRequest("missing-1", 1), ItemRequest("missing-2", 1)])

        assert failures(InvalidReason.NOT_FOUND) == before + 2
