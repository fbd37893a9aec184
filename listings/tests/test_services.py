from decimal import Decimal

from django.test import TestCase

from campusdeals.exceptions import Conflict, InvalidArgument, NotFound
from listings.models import Campus, Category, Listing
from listings.services import (
    build_listing_filters,
    create_campus,
    create_category,
    get_campus_by_slug,
    get_category_by_id,
    get_listing_by_id,
    list_listings,
    update_campus,
)
from users.models import User


class ListingFiltersTest(TestCase):
    def test_available_only_by_default(self):
        filters, condition = build_listing_filters({})
        self.assertEqual(filters, {})
        self.assertIn(('is_available', True), condition.children)

    def test_explicit_availability(self):
        filters, _ = build_listing_filters({'isAvailable': 'false'})
        self.assertEqual(filters, {'isAvailable': False})

    def test_price_range(self):
        filters, _ = build_listing_filters({'priceMin': '10', 'priceMax': '25.50'})
        self.assertEqual(filters, {'priceMin': '10', 'priceMax': '25.50'})

    def test_price_max_below_min(self):
        with self.assertRaises(InvalidArgument) as ctx:
            build_listing_filters({'priceMin': '50', 'priceMax': '10'})
        self.assertEqual(ctx.exception.errors[0]['field'], 'priceMax')

    def test_non_numeric_price(self):
        with self.assertRaises(InvalidArgument):
            build_listing_filters({'priceMin': 'cheap'})

    def test_unknown_condition(self):
        with self.assertRaises(InvalidArgument):
            build_listing_filters({'condition': 'refurbished'})

    def test_invalid_campus_id(self):
        with self.assertRaises(InvalidArgument):
            build_listing_filters({'campusId': '-3'})


class ListingQueryTest(TestCase):
    def setUp(self):
        self.seller = User.objects.create(name="Seller", email="seller@campus.test")
        self.campus = Campus.objects.create(name="North Campus", slug="north")
        self.books = Category.objects.create(name="Books", slug="books")
        self.bikes = Category.objects.create(name="Bikes", slug="bikes")

        self.textbook = Listing.objects.create(
            title="Calculus textbook", description="Barely used", price=Decimal("20.00"),
            condition="used", seller=self.seller, category=self.books, campus=self.campus,
        )
        self.bike = Listing.objects.create(
            title="Road bike", description="Brand new, never ridden", price=Decimal("250.00"),
            condition="brand_new", seller=self.seller, category=self.bikes,
        )
        self.sold = Listing.objects.create(
            title="Desk lamp", description="Works fine", price=Decimal("5.00"),
            condition="used", seller=self.seller, is_available=False,
        )

    def ids(self, options):
        return [row['id'] for row in list_listings(options)['data']]

    def test_default_excludes_unavailable(self):
        self.assertEqual(set(self.ids({})), {self.textbook.id, self.bike.id})

    def test_unavailable_on_request(self):
        self.assertEqual(self.ids({'isAvailable': 'false'}), [self.sold.id])

    def test_filter_by_category_and_campus(self):
        self.assertEqual(self.ids({'categoryId': str(self.books.id)}), [self.textbook.id])
        self.assertEqual(self.ids({'campusId': str(self.campus.id)}), [self.textbook.id])

    def test_filter_by_condition(self):
        self.assertEqual(self.ids({'condition': 'brand_new'}), [self.bike.id])

    def test_price_bounds_are_inclusive(self):
        self.assertEqual(set(self.ids({'priceMin': '20', 'priceMax': '250'})), {self.textbook.id, self.bike.id})
        self.assertEqual(self.ids({'priceMax': '20'}), [self.textbook.id])

    def test_search_title_and_description(self):
        self.assertEqual(self.ids({'search': 'never ridden'}), [self.bike.id])
        self.assertEqual(self.ids({'search': 'CALCULUS'}), [self.textbook.id])

    def test_sort_by_price(self):
        self.assertEqual(self.ids({'sortBy': 'price', 'order': 'asc'}), [self.textbook.id, self.bike.id])

    def test_get_listing_by_id(self):
        self.assertEqual(get_listing_by_id(self.bike.id), self.bike)
        with self.assertRaises(NotFound):
            get_listing_by_id(self.sold.id + 100)


class CampusCategoryServiceTest(TestCase):
    def setUp(self):
        self.campus = Campus.objects.create(name="Main Campus", slug="main")

    def test_lookup_by_slug(self):
        self.assertEqual(get_campus_by_slug("main"), self.campus)
        with self.assertRaises(NotFound):
            get_campus_by_slug("missing")

    def test_create_conflicts_on_name_case_insensitively(self):
        with self.assertRaises(Conflict):
            create_campus({"name": "MAIN CAMPUS", "slug": "other"})

    def test_update_to_taken_slug(self):
        other = create_campus({"name": "North", "slug": "north"})
        with self.assertRaises(Conflict):
            update_campus(other.id, {"slug": "main"})

    def test_category_slug_from_name(self):
        category = create_category({"name": "Lab Gear", "description": "Goggles and coats"})
        self.assertEqual(category.slug, "lab-gear")
        self.assertEqual(get_category_by_id(category.id), category)

    def test_category_name_without_slug_characters(self):
        with self.assertRaises(InvalidArgument):
            create_category({"name": "!!!", "description": ""})
