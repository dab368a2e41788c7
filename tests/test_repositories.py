"""
Unit tests for repository classes.
Tests data access operations, filtering, search and pagination.
"""

import pytest
import uuid
from datetime import date
from decimal import Decimal

from app.repositories.hotel import HotelSearchFilters
from tests.conftest import UserFactory, HotelFactory, OrderFactory, make_image_bytes


class TestUserRepository:
    """Test cases for UserRepository."""

    @pytest.mark.asyncio
    async def test_create_user(self, user_repository):
        """Users are stored with a normalized email and hashed password."""
        user = await user_repository.create_user({
            "name": "  Jane Doe ",
            "email": "Jane@Example.com",
            "password": "secret123"
        })

        assert user.id is not None
        assert user.name == "Jane Doe"
        assert user.email == "jane@example.com"
        assert user.hashed_password != "secret123"
        assert user.is_active is True
        assert user.stripe_account_id is None
        assert user.stripe_seller == {}
        assert user.stripe_session is None

    @pytest.mark.asyncio
    async def test_create_user_duplicate_email(self, user_repository, test_user):
        """Creating a second account for the same email fails."""
        with pytest.raises(ValueError, match="already exists"):
            await user_repository.create_user({
                "name": "Other",
                "email": test_user.email.upper(),
                "password": "secret123"
            })

    @pytest.mark.asyncio
    async def test_create_user_short_password(self, user_repository):
        """Short passwords are rejected before anything is stored."""
        with pytest.raises(ValueError, match="at least 6 characters"):
            await user_repository.create_user({
                "name": "Shorty",
                "email": "short@test.com",
                "password": "123"
            })
        assert await user_repository.get_by_email("short@test.com") is None

    @pytest.mark.asyncio
    async def test_get_by_email_case_insensitive(self, user_repository, test_user):
        """Lookup by email ignores case and surrounding whitespace."""
        found = await user_repository.get_by_email("  BUYER@test.com ")
        assert found is not None
        assert found.id == test_user.id

    @pytest.mark.asyncio
    async def test_authenticate_user(self, user_repository, test_user):
        """Correct credentials return the user, wrong ones return None."""
        assert (await user_repository.authenticate_user(test_user.email, "testpassword123")).id == test_user.id
        assert await user_repository.authenticate_user(test_user.email, "wrongpassword") is None
        assert await user_repository.authenticate_user("nobody@test.com", "testpassword123") is None

    @pytest.mark.asyncio
    async def test_check_email_availability(self, user_repository, test_user):
        """Taken and malformed emails are unavailable."""
        assert await user_repository.check_email_availability("free@test.com") is True
        assert await user_repository.check_email_availability(test_user.email) is False
        assert await user_repository.check_email_availability("not-an-email") is False

    @pytest.mark.asyncio
    async def test_stripe_fields(self, user_repository, test_user):
        """Stripe account, seller snapshot and pending session are persisted."""
        await user_repository.set_stripe_account(test_user, "acct_abc")
        await user_repository.set_stripe_seller(test_user, {"id": "acct_abc", "charges_enabled": True})
        await user_repository.set_stripe_session(test_user, {"id": "cs_123", "payment_status": "unpaid"})

        reloaded = await user_repository.get_by_id(test_user.id)
        assert reloaded.stripe_account_id == "acct_abc"
        assert reloaded.charges_enabled is True
        assert reloaded.stripe_session["id"] == "cs_123"

        await user_repository.set_stripe_session(test_user, None)
        assert (await user_repository.get_by_id(test_user.id)).stripe_session is None


class TestHotelRepository:
    """Test cases for HotelRepository."""

    @pytest.mark.asyncio
    async def test_create_hotel(self, hotel_repository, test_seller):
        """Hotels are stored with their poster."""
        hotel = await HotelFactory.create_hotel(hotel_repository, posted_by_id=test_seller.id)

        assert hotel.id is not None
        assert hotel.title == "Test Hotel"
        assert hotel.price == Decimal("100.00")
        assert hotel.posted_by_id == test_seller.id
        assert hotel.posted_by.id == test_seller.id

    @pytest.mark.asyncio
    async def test_create_hotel_invalid_window(self, hotel_repository, test_seller):
        """A reversed availability window is rejected."""
        with pytest.raises(ValueError, match="'to' date must not be before 'from' date"):
            await HotelFactory.create_hotel(
                hotel_repository,
                posted_by_id=test_seller.id,
                from_date=date(2024, 9, 1),
                to_date=date(2024, 8, 1)
            )
        assert await hotel_repository.get_multi() == []

    @pytest.mark.asyncio
    async def test_get_by_unknown_field(self, hotel_repository):
        """Lookups by a column the model lacks are rejected."""
        with pytest.raises(ValueError, match="Field 'stars' does not exist on Hotel"):
            await hotel_repository.get_by_field("stars", 5)

    @pytest.mark.asyncio
    async def test_image_is_deferred(self, hotel_repository, test_seller):
        """The image column only loads through get_with_image."""
        image = make_image_bytes()
        hotel = await HotelFactory.create_hotel(
            hotel_repository,
            posted_by_id=test_seller.id,
            image=image,
            image_content_type="image/png"
        )

        with_image = await hotel_repository.get_with_image(hotel.id)
        assert with_image.image == image
        assert with_image.image_content_type == "image/png"

    @pytest.mark.asyncio
    async def test_get_with_image_missing(self, hotel_repository):
        """Unknown ids return None."""
        assert await hotel_repository.get_with_image(uuid.uuid4()) is None

    @pytest.mark.asyncio
    async def test_get_latest_limit(self, hotel_repository, test_seller):
        """Latest listing honours the limit."""
        for i in range(4):
            await HotelFactory.create_hotel(hotel_repository, posted_by_id=test_seller.id, title=f"Hotel {i}")

        assert len(await hotel_repository.get_latest(3)) == 3
        assert len(await hotel_repository.get_featured(2)) == 2

    @pytest.mark.asyncio
    async def test_get_by_owner(self, hotel_repository, test_seller, test_user):
        """Only the owner's hotels are returned."""
        await HotelFactory.create_hotel(hotel_repository, posted_by_id=test_seller.id, title="Mine")
        await HotelFactory.create_hotel(hotel_repository, posted_by_id=test_user.id, title="Theirs")

        hotels = await hotel_repository.get_by_owner(test_seller.id)
        assert [h.title for h in hotels] == ["Mine"]

    @pytest.mark.asyncio
    async def test_search_by_location(self, hotel_repository, test_seller):
        """Location matches location, title or content, ignoring case."""
        await HotelFactory.create_hotel(hotel_repository, posted_by_id=test_seller.id, title="Beach House", location="Lisbon")
        await HotelFactory.create_hotel(hotel_repository, posted_by_id=test_seller.id, title="Alfama Rooms", location="Old town", content="Near lisbon cathedral")
        await HotelFactory.create_hotel(hotel_repository, posted_by_id=test_seller.id, title="Ribeira Loft", location="Porto")

        hotels, total = await hotel_repository.search_hotels(HotelSearchFilters(location="LISBON"))
        assert total == 2
        assert {h.title for h in hotels} == {"Beach House", "Alfama Rooms"}

    @pytest.mark.asyncio
    async def test_search_by_stay_window(self, hotel_repository, test_seller):
        """Only hotels whose window covers the stay match."""
        await HotelFactory.create_hotel(
            hotel_repository, posted_by_id=test_seller.id, title="Summer",
            from_date=date(2024, 6, 1), to_date=date(2024, 8, 31)
        )
        await HotelFactory.create_hotel(
            hotel_repository, posted_by_id=test_seller.id, title="Autumn",
            from_date=date(2024, 9, 1), to_date=date(2024, 11, 30)
        )

        hotels, total = await hotel_repository.search_hotels(
            HotelSearchFilters(check_in=date(2024, 7, 1), check_out=date(2024, 7, 10))
        )
        assert total == 1
        assert hotels[0].title == "Summer"

        _, total = await hotel_repository.search_hotels(
            HotelSearchFilters(check_in=date(2024, 8, 25), check_out=date(2024, 9, 5))
        )
        assert total == 0

    @pytest.mark.asyncio
    async def test_search_by_bed_and_price(self, hotel_repository, test_seller):
        """Bed is a minimum and price bounds are inclusive."""
        await HotelFactory.create_hotel(hotel_repository, posted_by_id=test_seller.id, title="Small", bed=1, price=Decimal("50.00"))
        await HotelFactory.create_hotel(hotel_repository, posted_by_id=test_seller.id, title="Medium", bed=2, price=Decimal("100.00"))
        await HotelFactory.create_hotel(hotel_repository, posted_by_id=test_seller.id, title="Large", bed=4, price=Decimal("200.00"))

        hotels, total = await hotel_repository.search_hotels(HotelSearchFilters(bed=2))
        assert total == 2
        assert [h.title for h in hotels] == ["Medium", "Large"]

        hotels, total = await hotel_repository.search_hotels(
            HotelSearchFilters(min_price=Decimal("50.00"), max_price=Decimal("100.00"))
        )
        assert total == 2
        assert [h.title for h in hotels] == ["Small", "Medium"]

    @pytest.mark.asyncio
    async def test_search_sorting_and_pagination(self, hotel_repository, test_seller):
        """Results are sorted and paged while total counts every match."""
        for price in ("30.00", "10.00", "20.00"):
            await HotelFactory.create_hotel(
                hotel_repository, posted_by_id=test_seller.id, title=f"Hotel {price}", price=Decimal(price)
            )

        hotels, total = await hotel_repository.search_hotels(
            HotelSearchFilters(), skip=0, limit=2, order_by="price", order_direction="desc"
        )
        assert total == 3
        assert [h.price for h in hotels] == [Decimal("30.00"), Decimal("20.00")]

        hotels, total = await hotel_repository.search_hotels(HotelSearchFilters(), skip=2, limit=2)
        assert total == 3
        assert [h.price for h in hotels] == [Decimal("30.00")]

    @pytest.mark.asyncio
    async def test_delete_keeps_orders(self, db_session, hotel_repository, order_repository, test_hotel, test_user):
        """Deleting a hotel leaves its orders with a null hotel reference."""
        order = await OrderFactory.create_order(order_repository, test_hotel.id, test_user.id)

        assert await hotel_repository.delete(test_hotel.id) is True

        await db_session.refresh(order)
        assert order.hotel_id is None
        assert order.hotel is None
        assert await order_repository.get_by_session_id(order.session_id) is not None


class TestOrderRepository:
    """Test cases for OrderRepository."""

    @pytest.mark.asyncio
    async def test_create_order(self, order_repository, test_hotel, test_user):
        """Orders keep the session id and snapshot."""
        order = await OrderFactory.create_order(order_repository, test_hotel.id, test_user.id, session_id="cs_abc")

        assert order.session_id == "cs_abc"
        assert order.session["id"] == "cs_abc"
        assert order.hotel_id == test_hotel.id
        assert order.ordered_by_id == test_user.id

    @pytest.mark.asyncio
    async def test_create_order_requires_session_id(self, order_repository, test_hotel, test_user):
        """A session without an id cannot become an order."""
        with pytest.raises(ValueError, match="no id"):
            await order_repository.create_order(test_hotel.id, {"payment_status": "paid"}, test_user.id)

    @pytest.mark.asyncio
    async def test_get_by_session_id(self, order_repository, test_hotel, test_user):
        """Orders are found by checkout session id."""
        order = await OrderFactory.create_order(order_repository, test_hotel.id, test_user.id, session_id="cs_find")

        assert (await order_repository.get_by_session_id("cs_find")).id == order.id
        assert await order_repository.get_by_session_id("cs_missing") is None

    @pytest.mark.asyncio
    async def test_get_user_orders(self, order_repository, hotel_repository, test_seller, test_user, user_repository):
        """Only the buyer's orders are returned and paging keeps the total."""
        other = await UserFactory.create_user(user_repository, email="other@test.com")
        for i in range(3):
            hotel = await HotelFactory.create_hotel(hotel_repository, posted_by_id=test_seller.id, title=f"Hotel {i}")
            await OrderFactory.create_order(order_repository, hotel.id, test_user.id)
        await OrderFactory.create_order(order_repository, None, other.id)

        orders, total = await order_repository.get_user_orders(test_user.id)
        assert total == 3
        assert len(orders) == 3
        assert all(order.ordered_by_id == test_user.id for order in orders)

        orders, total = await order_repository.get_user_orders(test_user.id, skip=2, limit=2)
        assert total == 3
        assert len(orders) == 1

    @pytest.mark.asyncio
    async def test_has_booked(self, order_repository, test_hotel, test_user, test_seller):
        """has_booked is per user and hotel."""
        assert await order_repository.has_booked(test_user.id, test_hotel.id) is False

        await OrderFactory.create_order(order_repository, test_hotel.id, test_user.id)

        assert await order_repository.has_booked(test_user.id, test_hotel.id) is True
        assert await order_repository.has_booked(test_seller.id, test_hotel.id) is False
