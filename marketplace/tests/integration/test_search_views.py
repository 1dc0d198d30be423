from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from marketplace.tests.factories import (
    CategoryFactory,
    PendingProductFactory,
    ProductFactory,
    ProductVariantFactory,
    SellerFactory,
)


class SearchViewIntegrationTest(TestCase):
    def setUp(self):
        self.client = APIClient()

        self.seller = SellerFactory(username="seller", email="seller@example.com")
        self.other_seller = SellerFactory(username="other", email="other@example.com")

        self.cat_electronics = CategoryFactory(name="Electronics", slug="electronics")
        self.cat_books = CategoryFactory(name="Books", slug="books")

        self.p1 = ProductFactory(
            name="iPhone 15",
            description="Latest Apple phone",
            price=Decimal("999.00"),
            seller=self.seller,
            category=self.cat_electronics,
            stock_quantity=10,
        )
        self.p2 = ProductFactory(
            name="Samsung Galaxy S24",
            description="Android flagship",
            price=Decimal("899.00"),
            seller=self.seller,
            category=self.cat_electronics,
            stock_quantity=0,
            condition="refurbished",
        )
        self.p3 = ProductFactory(
            name="Python Programming",
            description="Learn Python",
            price=Decimal("49.99"),
            seller=self.other_seller,
            category=self.cat_books,
            stock_quantity=0,
            condition="used",
        )
        ProductVariantFactory(product=self.p3, attributes={"Cover": "Hard"}, stock_quantity=3)

        # Never visible to buyers
        PendingProductFactory(name="iPhone 15 Pro", seller=self.seller, category=self.cat_electronics)

        self.url = reverse("marketplace:product-search")

    def ids(self, response):
        return [item["id"] for item in response.data["items"]]

    def test_search_is_public(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_count"], 3)

    def test_text_search(self):
        response = self.client.get(self.url, {"q": "  iphone "})

        self.assertEqual(self.ids(response), [str(self.p1.pk)])

    def test_text_search_matches_description(self):
        response = self.client.get(self.url, {"q": "android"})

        self.assertEqual(self.ids(response), [str(self.p2.pk)])

    def test_category_filter(self):
        response = self.client.get(self.url, {"category_id": str(self.cat_books.pk)})

        self.assertEqual(self.ids(response), [str(self.p3.pk)])

    def test_price_range_and_sort(self):
        response = self.client.get(self.url, {"min_price": "50", "max_price": "1000", "sort": "price_asc"})

        self.assertEqual(self.ids(response), [str(self.p2.pk), str(self.p1.pk)])

    def test_price_desc(self):
        response = self.client.get(self.url, {"sort": "PRICE_DESC"})

        self.assertEqual(self.ids(response), [str(self.p1.pk), str(self.p2.pk), str(self.p3.pk)])

    def test_condition_filter(self):
        response = self.client.get(self.url, {"condition": "Used"})

        self.assertEqual(self.ids(response), [str(self.p3.pk)])

    def test_seller_filter(self):
        response = self.client.get(self.url, {"seller_id": str(self.other_seller.pk)})

        self.assertEqual(self.ids(response), [str(self.p3.pk)])

    def test_in_stock_counts_variant_stock(self):
        response = self.client.get(self.url, {"in_stock": "true", "sort": "price_asc"})

        self.assertEqual(self.ids(response), [str(self.p3.pk), str(self.p1.pk)])

    def test_price_aggregates_cover_all_matches(self):
        response = self.client.get(self.url, {"page_size": "10"})

        self.assertEqual(response.data["aggregates"], {"min_price": "49.99", "max_price": "999.00"})

    def test_malformed_filters_are_ignored(self):
        response = self.client.get(
            self.url, {"min_price": "cheap", "category_id": "abc", "condition": "mint", "sort": "random"}
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_count"], 3)

    def test_no_matches(self):
        response = self.client.get(self.url, {"q": "typewriter", "page": "4"})

        self.assertEqual(response.data["items"], [])
        self.assertEqual(response.data["page_number"], 1)
        self.assertEqual(response.data["total_count"], 0)
        self.assertEqual(response.data["aggregates"], {})
