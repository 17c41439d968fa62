"""
Unit tests for ProductService use cases.

The service runs against in-memory collaborators: a copying repository, a
session that counts commits and rollbacks, and a publisher that records
events.
"""

from decimal import Decimal

import pytest

from product_service.app.domain.exceptions import ProductErrorCode, ProductException
from product_service.app.domain.price import Price
from product_service.app.domain.product import ProductStatus
from product_service.app.events.schemas import (
    ProductCreatedEventData,
    ProductStatusChangedEventData,
)
from product_service.app.services.product_service import ProductService
from product_service.tests.fakes import (
    FailingEventPublisher,
    FakeSession,
    InMemoryProductRepository,
)


async def _create_widget(service: ProductService, **overrides):
    fields = {
        "seller_id": "seller-1",
        "name": "Widget",
        "description": "A very useful widget",
        "price": 10000,
        "min_order_quantity": 1,
        "max_order_quantity": 100,
    }
    fields.update(overrides)
    return await service.create_product(**fields)


class TestCreateProduct:
    @pytest.mark.asyncio
    async def test_create_persists_draft_and_publishes_created(
        self, product_service, repository, publisher, session
    ):
        # Act
        product = await _create_widget(
            product_service, hub_id="hub-7", correlation_id="corr-1"
        )

        # Assert
        assert product.product_id
        assert product.status is ProductStatus.DRAFT
        assert product.price == Price.of(10000)
        assert product.product_id in repository.rows
        assert session.commits == 1

        assert len(publisher.events) == 1
        kind, data, correlation_id = publisher.events[0]
        assert kind == "created"
        assert isinstance(data, ProductCreatedEventData)
        assert data.product_id == product.product_id
        assert data.hub_id == "hub-7"
        assert correlation_id == "corr-1"

    @pytest.mark.asyncio
    async def test_created_product_round_trips_through_repository(
        self, product_service
    ):
        created = await _create_widget(product_service)

        loaded = await product_service.get_product(created.product_id)

        assert loaded.name == created.name
        assert loaded.price == created.price
        assert loaded.status is created.status
        assert loaded.min_order_quantity == created.min_order_quantity
        assert loaded.max_order_quantity == created.max_order_quantity

    @pytest.mark.asyncio
    async def test_invalid_input_rolls_back_without_event(
        self, product_service, repository, publisher, session
    ):
        with pytest.raises(ProductException) as exc_info:
            await _create_widget(product_service, price=0)

        assert exc_info.value.error_code is ProductErrorCode.INVALID_PRICE
        assert session.rollbacks == 1
        assert session.commits == 0
        assert repository.rows == {}
        assert publisher.events == []

    @pytest.mark.asyncio
    async def test_commit_failure_propagates_and_nothing_is_published(
        self, repository, publisher
    ):
        session = FakeSession(commit_error=RuntimeError("database is locked"))
        service = ProductService(session, publisher, repository=repository)

        with pytest.raises(RuntimeError, match="database is locked"):
            await _create_widget(service)

        assert session.rollbacks == 1
        assert publisher.events == []

    @pytest.mark.asyncio
    async def test_publish_failure_does_not_fail_the_command(
        self, repository, session
    ):
        service = ProductService(
            session, FailingEventPublisher(), repository=repository
        )

        product = await _create_widget(service)

        assert session.commits == 1
        assert product.product_id in repository.rows

    @pytest.mark.asyncio
    async def test_without_publisher_commands_still_succeed(self, repository, session):
        service = ProductService(session, None, repository=repository)

        product = await _create_widget(service)
        await service.activate_product(product.product_id)

        assert repository.rows[product.product_id].status is ProductStatus.ACTIVE


class TestUpdateAndDelete:
    @pytest.mark.asyncio
    async def test_update_publishes_new_values(self, product_service, publisher):
        product = await _create_widget(product_service)

        updated = await product_service.update_product(
            product.product_id, "Gadget", None, "49.99", updated_by="seller-1"
        )

        assert updated.name == "Gadget"
        assert updated.updated_by == "seller-1"
        event = publisher.of_kind("updated")[0]
        assert event.name == "Gadget"
        assert event.price == Decimal("49.99")

    @pytest.mark.asyncio
    async def test_update_unknown_product(self, product_service, session):
        with pytest.raises(ProductException) as exc_info:
            await product_service.update_product("missing", "Gadget", None, 1)

        assert exc_info.value.error_code is ProductErrorCode.PRODUCT_NOT_FOUND
        assert session.rollbacks == 1

    @pytest.mark.asyncio
    async def test_delete_hides_product_and_publishes_deleted(
        self, product_service, publisher
    ):
        product = await _create_widget(product_service)

        await product_service.delete_product(product.product_id, deleted_by="ADMIN")

        assert await product_service.exists_product(product.product_id) is False
        with pytest.raises(ProductException):
            await product_service.get_product(product.product_id)
        deleted = publisher.of_kind("deleted")[0]
        assert deleted.product_id == product.product_id
        assert deleted.seller_id == "seller-1"

    @pytest.mark.asyncio
    async def test_deleted_event_carries_stored_timestamp(
        self, product_service, publisher, repository
    ):
        product = await _create_widget(product_service)

        await product_service.delete_product(product.product_id)

        stored = repository.rows[product.product_id]
        assert publisher.of_kind("deleted")[0].deleted_at == stored.deleted_at

    @pytest.mark.asyncio
    async def test_delete_records_actor(self, product_service, repository):
        product = await _create_widget(product_service)

        await product_service.delete_product(product.product_id, deleted_by="ADMIN")

        stored = repository.rows[product.product_id]
        assert stored.is_deleted is True
        assert stored.deleted_by == "ADMIN"


class TestStatusTransitions:
    @pytest.mark.asyncio
    async def test_activate_emits_draft_to_active(self, product_service, publisher):
        product = await _create_widget(product_service)

        activated = await product_service.activate_product(product.product_id)

        assert activated.status is ProductStatus.ACTIVE
        assert activated.is_sellable is True
        changes = publisher.of_kind("status_changed")
        assert len(changes) == 1
        assert isinstance(changes[0], ProductStatusChangedEventData)
        assert (changes[0].old_status, changes[0].new_status) == ("DRAFT", "ACTIVE")

    @pytest.mark.asyncio
    async def test_activate_twice_emits_once(self, product_service, publisher):
        product = await _create_widget(product_service)

        await product_service.activate_product(product.product_id)
        await product_service.activate_product(product.product_id)

        assert len(publisher.of_kind("status_changed")) == 1

    @pytest.mark.asyncio
    async def test_suspend_emits_change(self, product_service, publisher):
        product = await _create_widget(product_service)
        await product_service.activate_product(product.product_id)

        suspended = await product_service.suspend_product(
            product.product_id, updated_by="admin"
        )

        assert suspended.status is ProductStatus.SUSPENDED
        last = publisher.of_kind("status_changed")[-1]
        assert (last.old_status, last.new_status) == ("ACTIVE", "SUSPENDED")

    @pytest.mark.asyncio
    async def test_discontinue_then_modify_is_rejected(
        self, product_service, publisher
    ):
        product = await _create_widget(product_service)
        await product_service.discontinue_product(product.product_id)

        with pytest.raises(ProductException) as update_error:
            await product_service.update_product(
                product.product_id, "Renamed", None, 1
            )
        with pytest.raises(ProductException) as discontinue_error:
            await product_service.discontinue_product(product.product_id)

        assert (
            update_error.value.error_code
            is ProductErrorCode.CANNOT_MODIFY_DISCONTINUED_PRODUCT
        )
        assert (
            discontinue_error.value.error_code
            is ProductErrorCode.PRODUCT_ALREADY_DISCONTINUED
        )
        changes = publisher.of_kind("status_changed")
        assert len(changes) == 1
        assert changes[0].new_status == "DISCONTINUED"

    @pytest.mark.asyncio
    async def test_rejected_transition_leaves_store_untouched(
        self, product_service, repository
    ):
        product = await _create_widget(product_service)
        await product_service.discontinue_product(product.product_id)
        saves = repository.saves

        with pytest.raises(ProductException):
            await product_service.activate_product(product.product_id)

        assert repository.saves == saves
        assert repository.rows[product.product_id].status is ProductStatus.DISCONTINUED


class TestStockReconciliation:
    @pytest.mark.asyncio
    async def test_out_of_stock_is_idempotent(
        self, product_service, publisher, repository
    ):
        product = await _create_widget(product_service)
        await product_service.activate_product(product.product_id)

        marked = await product_service.mark_as_out_of_stock(product.product_id)
        saves = repository.saves
        again = await product_service.mark_as_out_of_stock(product.product_id)

        assert repository.saves == saves

        assert marked.status is ProductStatus.OUT_OF_STOCK
        assert marked.is_sellable is False
        assert again.status is ProductStatus.OUT_OF_STOCK
        changes = publisher.of_kind("status_changed")
        assert [(c.old_status, c.new_status) for c in changes] == [
            ("DRAFT", "ACTIVE"),
            ("ACTIVE", "OUT_OF_STOCK"),
        ]

    @pytest.mark.asyncio
    async def test_restore_reactivates_out_of_stock_product(
        self, product_service, publisher
    ):
        product = await _create_widget(product_service)
        await product_service.activate_product(product.product_id)
        await product_service.mark_as_out_of_stock(product.product_id)

        restored = await product_service.restore_from_out_of_stock(product.product_id)

        assert restored.status is ProductStatus.ACTIVE
        assert restored.is_sellable is True
        last = publisher.of_kind("status_changed")[-1]
        assert (last.old_status, last.new_status) == ("OUT_OF_STOCK", "ACTIVE")

    @pytest.mark.parametrize("setup", ["draft", "suspended", "active"])
    @pytest.mark.asyncio
    async def test_restore_ignores_products_not_out_of_stock(
        self, product_service, publisher, repository, setup
    ):
        product = await _create_widget(product_service)
        if setup == "suspended":
            await product_service.suspend_product(product.product_id)
        elif setup == "active":
            await product_service.activate_product(product.product_id)
        before = repository.rows[product.product_id].status
        events_before = len(publisher.events)
        saves = repository.saves

        result = await product_service.restore_from_out_of_stock(product.product_id)

        assert result.status is before
        assert len(publisher.events) == events_before
        assert repository.saves == saves

    @pytest.mark.asyncio
    async def test_discontinued_product_can_still_be_marked_out_of_stock(
        self, product_service
    ):
        product = await _create_widget(product_service)
        await product_service.discontinue_product(product.product_id)

        marked = await product_service.mark_as_out_of_stock(product.product_id)

        assert marked.status is ProductStatus.OUT_OF_STOCK

    @pytest.mark.asyncio
    async def test_unknown_product_is_not_found(self, product_service):
        with pytest.raises(ProductException) as exc_info:
            await product_service.mark_as_out_of_stock("missing")

        assert exc_info.value.error_code is ProductErrorCode.PRODUCT_NOT_FOUND


class TestEventFlag:
    @pytest.mark.asyncio
    async def test_set_event_flag_publishes_nothing(self, product_service, publisher):
        product = await _create_widget(product_service)

        updated = await product_service.set_product_event_status(
            product.product_id, True, updated_by="seller-1"
        )

        assert updated.has_event is True
        assert updated.status is ProductStatus.DRAFT
        assert [kind for kind, _, _ in publisher.events] == ["created"]


class TestQueries:
    @pytest.mark.asyncio
    async def test_paging_and_seller_filter(self, product_service):
        for index in range(5):
            await _create_widget(product_service, name=f"Widget {index}")
        await _create_widget(product_service, seller_id="seller-2", name="Other")

        page = await product_service.get_products_with_paging(0, 4)
        mine = await product_service.get_products_by_seller("seller-2", 0, 10)

        assert page.total_elements == 6
        assert len(page.content) == 4
        assert page.total_pages == 2
        assert page.is_last is False
        assert [p.name for p in mine.content] == ["Other"]
        assert len(await product_service.get_products_by_seller_id("seller-1")) == 5

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_and_paged(self, product_service):
        await _create_widget(product_service, name="Blue Widget")
        await _create_widget(product_service, name="Red WIDGET")
        await _create_widget(product_service, name="Gadget")

        first = await product_service.search_products("widget", 0, 1)
        second = await product_service.search_products("widget", 1, 1)

        assert first.total_elements == 2
        assert len(first.content) == 1
        assert len(second.content) == 1
        assert second.is_last is True
        assert {first.content[0].name, second.content[0].name} == {
            "Blue Widget",
            "Red WIDGET",
        }

    @pytest.mark.asyncio
    async def test_get_products_by_status(self, product_service):
        first = await _create_widget(product_service, name="One")
        await _create_widget(product_service, name="Two")
        await product_service.activate_product(first.product_id)

        active = await product_service.get_products_by_status(ProductStatus.ACTIVE)
        everything = await product_service.get_all_products()

        assert [p.product_id for p in active] == [first.product_id]
        assert len(everything) == 2

    @pytest.mark.asyncio
    async def test_check_order_quantity(self, product_service):
        product = await _create_widget(product_service)

        checked = await product_service.check_order_quantity(product.product_id, 50)
        with pytest.raises(ProductException) as exc_info:
            await product_service.check_order_quantity(product.product_id, 101)

        assert checked.product_id == product.product_id
        assert (
            exc_info.value.error_code
            is ProductErrorCode.ORDER_QUANTITY_EXCEEDS_MAXIMUM
        )

    @pytest.mark.asyncio
    async def test_validate_products_splits_known_and_unknown(self, product_service):
        product = await _create_widget(product_service)

        result = await product_service.validate_products(
            [product.product_id, "missing"]
        )

        assert result.valid_product_ids == [product.product_id]
        assert result.invalid_product_ids == ["missing"]
        assert result.errors == {"missing": "Product not found"}
        assert result.all_valid is False

    @pytest.mark.asyncio
    async def test_validate_products_reports_lookup_failures(self, session):
        class BrokenRepository(InMemoryProductRepository):
            async def exists_by_id(self, product_id):
                raise RuntimeError("connection reset")

        service = ProductService(session, None, repository=BrokenRepository())

        result = await service.validate_products(["p-1"])

        assert result.invalid_product_ids == ["p-1"]
        assert result.errors["p-1"] == "connection reset"

    @pytest.mark.asyncio
    async def test_inconsistent_flag_is_still_served(
        self, product_service, repository
    ):
        product = await _create_widget(product_service)
        repository.rows[product.product_id].is_sellable = True

        loaded = await product_service.get_product(product.product_id)

        assert loaded.is_sellable is True
        assert loaded.can_be_sold() is False
