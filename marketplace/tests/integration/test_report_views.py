from datetime import timedelta
from decimal import Decimal

from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from marketplace.querying.statuses import OrderStatus, PaymentStatus, PayoutStatus
from marketplace.tests.factories import (
    AdminFactory,
    AuditLogEntryFactory,
    OrderFactory,
    PayoutFactory,
    ReturnCaseFactory,
    SellerFactory,
    SubOrderFactory,
    UserFactory,
)


class OrderReportViewIntegrationTest(TestCase):
    def setUp(self):
        self.client = APIClient()

        self.admin = AdminFactory(username="admin1")
        self.buyer = UserFactory(username="buyer1", email="buyer1@example.com")
        self.seller1 = SellerFactory(username="seller1")
        self.seller2 = SellerFactory(username="seller2")

        self.order = OrderFactory(buyer=self.buyer, order_number="ORD-100001")
        self.sub1 = SubOrderFactory(
            order=self.order,
            seller=self.seller1,
            sub_order_number="SUB-100001-1",
            order_value=Decimal("100.00"),
            commission=Decimal("10.00"),
            payout_amount=Decimal("90.00"),
        )
        self.sub2 = SubOrderFactory(
            order=self.order,
            seller=self.seller2,
            sub_order_number="SUB-100001-2",
            status=OrderStatus.SHIPPED,
            order_value=Decimal("50.00"),
            commission=Decimal("5.00"),
            payout_amount=Decimal("45.00"),
        )
        self.old = SubOrderFactory(
            seller=self.seller1,
            sub_order_number="SUB-OLD-1",
            created_at=timezone.now() - timedelta(days=45),
        )

        self.list_url = reverse("marketplace:admin-order-report-list")
        self.csv_url = reverse("marketplace:admin-order-report-csv")
        self.seller_list_url = reverse("marketplace:seller-order-report-list")
        self.seller_csv_url = reverse("marketplace:seller-order-report-csv")

    def test_anonymous_is_rejected(self):
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_buyer_is_rejected(self):
        self.client.force_authenticate(user=self.buyer)
        response = self.client.get(self.list_url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_staff_user_is_admin(self):
        staff = UserFactory(username="staff1", is_staff=True)
        self.client.force_authenticate(user=staff)

        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_default_window_is_last_30_days(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(self.list_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_count"], 2)
        numbers = {item["sub_order_number"] for item in response.data["items"]}
        self.assertEqual(numbers, {"SUB-100001-1", "SUB-100001-2"})
        self.assertEqual(response.data["aggregates"]["total_order_value"], "150.00")
        self.assertEqual(response.data["aggregates"]["total_commission"], "15.00")
        self.assertEqual(response.data["aggregates"]["total_payout"], "135.00")

    def test_explicit_range_reaches_older_orders(self):
        self.client.force_authenticate(user=self.admin)
        from_date = (timezone.now() - timedelta(days=60)).date().isoformat()

        response = self.client.get(self.list_url, {"from_date": from_date})

        self.assertEqual(response.data["total_count"], 3)

    def test_status_filter_accepts_labels(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(self.list_url, {"status": "Shipped"})

        self.assertEqual(response.data["total_count"], 1)
        self.assertEqual(response.data["items"][0]["seller_id"], str(self.seller2.pk))

    def test_unknown_status_is_ignored(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(self.list_url, {"status": "teleported"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_count"], 2)

    def test_seller_filter(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(self.list_url, {"seller_id": f" {self.seller2.pk} "})

        self.assertEqual(response.data["total_count"], 1)
        self.assertEqual(response.data["items"][0]["sub_order_number"], "SUB-100001-2")

    def test_non_numeric_seller_id_matches_nothing(self):
        self.client.force_authenticate(user=self.admin)

        for seller_id in ("abc", "²", "①"):
            response = self.client.get(self.list_url, {"seller_id": seller_id})

            self.assertEqual(response.status_code, status.HTTP_200_OK, seller_id)
            self.assertEqual(response.data["total_count"], 0, seller_id)

    def test_payment_status_filter(self):
        OrderFactory(payment_status=PaymentStatus.FAILED, order_number="ORD-FAILED")
        failed_order = OrderFactory(payment_status=PaymentStatus.FAILED, order_number="ORD-FAILED-2")
        SubOrderFactory(order=failed_order, seller=self.seller1)
        self.client.force_authenticate(user=self.admin)

        response = self.client.get(self.list_url, {"payment_status": "declined"})

        self.assertEqual(response.data["total_count"], 1)
        self.assertEqual(response.data["items"][0]["order_number"], "ORD-FAILED-2")

    def test_text_search(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(self.list_url, {"q": "  buyer1@EXAMPLE "})

        self.assertEqual(response.data["total_count"], 2)

    def test_page_size_is_clamped(self):
        for _ in range(11):
            SubOrderFactory(seller=self.seller1)
        self.client.force_authenticate(user=self.admin)

        response = self.client.get(self.list_url, {"page_size": "1", "page": "2"})

        self.assertEqual(response.data["page_size"], 10)
        self.assertEqual(response.data["total_count"], 13)
        self.assertEqual(response.data["total_pages"], 2)
        self.assertEqual(len(response.data["items"]), 3)
        self.assertTrue(response.data["has_previous"])
        self.assertFalse(response.data["has_next"])

    def test_page_beyond_end_is_empty(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(self.list_url, {"page": "9"})

        self.assertEqual(response.data["items"], [])
        self.assertEqual(response.data["page_number"], 1)
        self.assertEqual(response.data["total_pages"], 1)
        self.assertEqual(response.data["total_count"], 2)

    def test_csv_export(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(self.csv_url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response["Content-Type"], "text/csv; charset=utf-8")
        self.assertEqual(response["X-Total-Matching"], "2")
        self.assertEqual(response["X-Export-Truncated"], "false")

        lines = response.content.decode("utf-8").strip().splitlines()
        self.assertEqual(
            lines[0],
            "OrderNumber,SubOrderNumber,CreatedOn,Buyer,BuyerEmail,SellerId,SellerName,"
            "Status,PaymentStatus,OrderValue,Commission,PayoutAmount",
        )
        self.assertEqual(len(lines), 3)
        self.assertTrue(any(line.endswith(",100.00,10.00,90.00") for line in lines[1:]))

    def test_seller_sees_only_own_sub_orders(self):
        self.client.force_authenticate(user=self.seller1)

        response = self.client.get(self.seller_list_url, {"seller_id": str(self.seller2.pk)})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_count"], 1)
        self.assertEqual(response.data["items"][0]["sub_order_number"], "SUB-100001-1")
        self.assertEqual(response.data["aggregates"]["total_payout"], "90.00")

    def test_seller_csv_is_scoped(self):
        self.client.force_authenticate(user=self.seller2)

        response = self.client.get(self.seller_csv_url)

        self.assertEqual(response["X-Total-Matching"], "1")
        self.assertIn("SUB-100001-2", response.content.decode("utf-8"))
        self.assertNotIn("SUB-100001-1", response.content.decode("utf-8"))

    def test_buyer_cannot_read_seller_report(self):
        self.client.force_authenticate(user=self.buyer)
        response = self.client.get(self.seller_list_url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class PayoutAndReturnReportViewIntegrationTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = AdminFactory(username="admin1")
        self.seller = SellerFactory(username="seller1")
        self.client.force_authenticate(user=self.admin)

    def test_payout_report_aggregates(self):
        PayoutFactory(seller=self.seller, status=PayoutStatus.PAID)
        PayoutFactory(seller=self.seller, status=PayoutStatus.SCHEDULED)

        response = self.client.get(reverse("marketplace:admin-payout-report-list"), {"status": "paid"})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_count"], 1)
        self.assertEqual(response.data["aggregates"]["total_amount"], "180.00")

    def test_return_report_filters_by_seller(self):
        ReturnCaseFactory(seller=self.seller, case_number="RET-A")
        ReturnCaseFactory(case_number="RET-B")

        response = self.client.get(reverse("marketplace:admin-return-report-list"), {"seller_id": str(self.seller.pk)})

        self.assertEqual(response.data["total_count"], 1)
        self.assertEqual(response.data["items"][0]["case_number"], "RET-A")

    def test_return_report_csv(self):
        ReturnCaseFactory(seller=self.seller, case_number="RET-A", reason="Broken, on arrival")

        response = self.client.get(reverse("marketplace:admin-return-report-csv"))

        content = response.content.decode("utf-8")
        self.assertTrue(content.startswith("CaseNumber,OrderNumber,BuyerId,Buyer,SellerId,SellerName,Status,Reason"))
        self.assertIn('"Broken, on arrival"', content)


class AuditLogViewIntegrationTest(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = AdminFactory(username="auditor", first_name="", last_name="")
        self.client.force_authenticate(user=self.admin)
        self.url = reverse("marketplace:admin-audit-log-list")

        self.approved = AuditLogEntryFactory(actor=self.admin, action="moderation_approved", resource_id="p-1")
        self.failed = AuditLogEntryFactory(
            actor=self.admin, entity_type="ProductReview", action="moderation_hidden", succeeded=False
        )
        self.ancient = AuditLogEntryFactory(actor=self.admin, created_at=timezone.now() - timedelta(days=800))

    def test_retention_cutoff_applies_without_from_date(self):
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["total_count"], 2)

    def test_explicit_from_date_reaches_past_cutoff(self):
        from_date = (timezone.now() - timedelta(days=900)).date().isoformat()

        response = self.client.get(self.url, {"from_date": from_date})

        self.assertEqual(response.data["total_count"], 3)

    def test_range_ending_before_cutoff_is_honoured(self):
        to_date = (timezone.now() - timedelta(days=799)).date().isoformat()

        response = self.client.get(self.url, {"to_date": to_date})

        self.assertEqual(response.data["total_count"], 1)
        self.assertEqual(response.data["items"][0]["id"], self.ancient.pk)

    def test_filters(self):
        by_entity = self.client.get(self.url, {"entity_type": "productreview"})
        by_result = self.client.get(self.url, {"result": "failure"})
        by_resource = self.client.get(self.url, {"resource_id": "p-1"})
        by_actor = self.client.get(self.url, {"actor": "AUDIT"})

        self.assertEqual([item["id"] for item in by_entity.data["items"]], [self.failed.pk])
        self.assertEqual([item["id"] for item in by_result.data["items"]], [self.failed.pk])
        self.assertEqual([item["id"] for item in by_resource.data["items"]], [self.approved.pk])
        self.assertEqual(by_actor.data["total_count"], 2)

    def test_newest_first(self):
        response = self.client.get(self.url)
        self.assertEqual([item["id"] for item in response.data["items"]], [self.failed.pk, self.approved.pk])

    def test_seller_is_rejected(self):
        self.client.force_authenticate(user=SellerFactory())
        response = self.client.get(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
