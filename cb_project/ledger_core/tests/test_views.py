import json

import pytest
from django.test import Client, TestCase
from django.urls import reverse

from ..constants import PARTIAL
from ..models import Payment, PaymentAllocation
from .factories import make_entry, make_item, make_payment, make_vendor


class AllocationApiTests(TestCase):
    def setUp(self):
        self.vendor = make_vendor()
        self.item = make_item()
        self.entry = make_entry(self.item, self.vendor, "100.00", day=1)
        self.payment = make_payment(self.vendor, "60.00", day=2)
        self.url = reverse("ledger_core:payment-allocate", args=[self.payment.id])

    def post_json(self, url, body):
        return self.client.post(url, data=json.dumps(body), content_type="application/json")

    def test_allocate_success(self):
        response = self.post_json(
            self.url, {"allocations": [{"entry_id": self.entry.id, "amount": "40.00"}]})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "Allocation successful", "status": PARTIAL})

    def test_over_allocation_payload(self):
        response = self.post_json(
            self.url, {"allocations": [{"entry_id": self.entry.id, "amount": "60.01"}]})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json(),
            {
                "message": "Allocation exceeds payment amount",
                "currentAllocated": "0.00",
                "requestedTotal": "60.01",
                "paymentAmount": "60.00",
            },
        )
        self.assertFalse(PaymentAllocation.objects.exists())

    def test_empty_and_malformed_bodies(self):
        response = self.post_json(self.url, {"allocations": []})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "No allocations provided")

        response = self.client.post(self.url, data="{oops", content_type="application/json")
        self.assertEqual(response.status_code, 400)

    def test_unknown_payment_is_404(self):
        url = reverse("ledger_core:payment-allocate", args=[999999])
        response = self.post_json(url, {"allocations": [{"entry_id": self.entry.id, "amount": "1"}]})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["paymentId"], 999999)

    def test_oversized_values_are_400(self):
        for line in (
            {"entry_id": self.entry.id, "amount": "1e30"},
            {"entry_id": 10**20, "amount": "1.00"},
        ):
            with self.subTest(line=line):
                response = self.post_json(self.url, {"allocations": [line]})
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["index"], 0)
        self.assertFalse(PaymentAllocation.objects.exists())

    def test_json_endpoints_skip_csrf_tokens(self):
        api = Client(enforce_csrf_checks=True)
        response = api.post(
            self.url,
            data=json.dumps({"allocations": [{"entry_id": self.entry.id, "amount": "40.00"}]}),
            content_type="application/json",
        )
        self.assertEqual(response.status_code, 200)

        spare = make_entry(self.item, self.vendor, "5.00", day=9)
        response = api.post(reverse("ledger_core:entry-delete", args=[spare.id]))
        self.assertEqual(response.status_code, 200)

    def test_get_is_not_allowed(self):
        self.assertEqual(self.client.get(self.url).status_code, 405)

    def test_delete_endpoints(self):
        self.post_json(self.url, {"allocations": [{"entry_id": self.entry.id, "amount": "10"}]})

        response = self.client.post(reverse("ledger_core:payment-delete", args=[self.payment.id]))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(
            response.json()["message"],
            "Cannot delete payment with allocations. Remove allocations first.",
        )

        response = self.client.post(reverse("ledger_core:entry-delete", args=[self.entry.id]))
        self.assertEqual(response.status_code, 400)

        spare = make_entry(self.item, self.vendor, "5.00", day=9)
        response = self.client.post(reverse("ledger_core:entry-delete", args=[spare.id]))
        self.assertEqual(response.json(), {"message": "Entry deleted successfully"})


class ListingApiTests(TestCase):
    def setUp(self):
        self.vendor = make_vendor()
        self.other = make_vendor("Ganesh Sand Suppliers")
        item = make_item()
        self.entry = make_entry(item, self.vendor, "100.00", day=1)
        make_entry(item, self.other, "10.00", day=3)
        self.payment = make_payment(self.vendor, "30.00", day=2)
        self.client.post(
            reverse("ledger_core:payment-allocate", args=[self.payment.id]),
            data=json.dumps({"allocations": [{"entry_id": self.entry.id, "amount": "30"}]}),
            content_type="application/json",
        )

    def test_entry_list_shows_live_due(self):
        response = self.client.get(
            reverse("ledger_core:entry-list"), {"vendor_id": self.vendor.id})
        rows = response.json()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["paid_amount"], "30.00")
        self.assertEqual(rows[0]["due_amount"], "70.00")

    def test_entry_list_date_filter(self):
        response = self.client.get(
            reverse("ledger_core:entry-list"), {"start_date": "2024-01-02"})
        self.assertEqual(len(response.json()), 1)

    def test_payment_list(self):
        rows = self.client.get(
            reverse("ledger_core:payment-list"), {"allocation_status": "FULLY_ALLOCATED"}
        ).json()
        self.assertEqual([r["id"] for r in rows], [self.payment.id])
        self.assertEqual(rows[0]["remaining_amount"], "0.00")

    def test_dashboard_and_vendor_ledger(self):
        totals = self.client.get(reverse("ledger_core:dashboard")).json()
        self.assertEqual(totals["total_paid"], "30.00")
        self.assertEqual(totals["total_due"], "80.00")

        ledger = self.client.get(reverse("ledger_core:vendor-ledger")).json()
        self.assertEqual(ledger[0]["vendor_id"], self.vendor.id)
        self.assertEqual(ledger[0]["total_due"], "70.00")

    def test_entry_detail(self):
        data = self.client.get(
            reverse("ledger_core:entry-detail", args=[self.entry.id])).json()
        self.assertEqual(data["item"]["name"], "Cement")
        self.assertEqual(data["paid_to_vendor"], {"id": self.vendor.id, "name": self.vendor.name})
        self.assertEqual(data["source_vendor"]["id"], self.vendor.id)
        self.assertEqual(data["paid_amount"], "30.00")
        self.assertEqual(data["due_amount"], "70.00")

        response = self.client.get(reverse("ledger_core:entry-detail", args=[999999]))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"message": "Entry 999999 not found", "entryId": 999999})

    def test_payment_detail_lists_allocations(self):
        data = self.client.get(
            reverse("ledger_core:payment-detail", args=[self.payment.id])).json()
        self.assertEqual(data["vendor_name"], self.vendor.name)
        self.assertEqual(data["allocated_amount"], "30.00")
        self.assertEqual(data["remaining_amount"], "0.00")
        self.assertEqual(len(data["allocations"]), 1)
        line = data["allocations"][0]
        self.assertEqual(line["entry_id"], self.entry.id)
        self.assertEqual(line["allocated_amount"], "30.00")
        self.assertEqual(line["entry_date"], "2024-01-01")
        self.assertEqual(line["total_amount"], "100.00")
        self.assertEqual(line["source_vendor_name"], self.vendor.name)

        response = self.client.get(reverse("ledger_core:payment-detail", args=[999999]))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["message"], "Payment not found")

    def test_report_routes(self):
        rows = self.client.get(reverse("ledger_core:report-date-wise")).json()
        self.assertEqual(
            [(r["entry_date"], r["total_expense"]) for r in rows],
            [("2024-01-03", "10.00"), ("2024-01-01", "100.00")],
        )
        rows = self.client.get(
            reverse("ledger_core:report-date-wise"), {"end_date": "2024-01-02"}).json()
        self.assertEqual(len(rows), 1)

        items = self.client.get(reverse("ledger_core:report-items")).json()
        self.assertEqual(items[0]["item_name"], "Cement")
        self.assertEqual(items[0]["total_cost"], "110.00")


# ----------------------------------------------------------------------
# Pytest-style check of the payment listing
# ----------------------------------------------------------------------
@pytest.mark.django_db
def test_payment_list_filters_by_vendor(client):
    vendor = make_vendor()
    other = make_vendor("Ravi Masonry Works")
    mine = make_payment(vendor, "10.00")
    make_payment(other, "20.00")

    response = client.get(reverse("ledger_core:payment-list"), {"vendor_id": vendor.id})

    assert response.status_code == 200
    rows = response.json()
    assert [r["id"] for r in rows] == [mine.id]
    assert rows[0]["allocation_status"] == Payment.objects.get(pk=mine.pk).allocation_status
