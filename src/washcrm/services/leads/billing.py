"""Customer bill built from the wash history."""

from __future__ import annotations

from ...data import leads_repository
from ..time_rules import business_tz, to_iso, utc_now


def build_bill(reference: str | int) -> dict:
    """Line items from every wash-history entry, newest first, with paid/pending totals."""
    lead = leads_repository.get_lead(reference)

    items = []
    for index, entry in enumerate(lead.wash_history):
        local = entry.date.astimezone(business_tz()) if entry.date else None
        items.append(
            {
                "entryId": f"history_{index}",
                "description": f"{entry.wash_type} Wash - {entry.service_type or 'Exterior'}",
                "date": to_iso(entry.date),
                "time": local.strftime("%H:%M") if local else None,
                "vehicleNumber": lead.vehicle_number or lead.car_model or "N/A",
                "washType": entry.wash_type,
                "washStatus": entry.wash_status,
                "amount": entry.amount or 0.0,
                "isPaid": entry.paid,
                "source": "washHistory",
            }
        )
    items.sort(key=lambda item: item["date"] or "", reverse=True)

    total = round(sum(item["amount"] for item in items), 2)
    paid = round(sum(item["amount"] for item in items if item["isPaid"]), 2)

    bill = {
        "customerId": lead.lead_id,
        "customerName": lead.customer_name,
        "phone": lead.phone,
        "area": lead.area,
        "carModel": lead.car_model,
        "leadType": lead.lead_type,
        "billDate": to_iso(utc_now()),
        "items": items,
        "totalAmount": total,
        "paidAmount": paid,
        "pendingAmount": round(total - paid, 2),
    }

    subscription = lead.monthly_subscription
    if lead.lead_type == "Monthly" and subscription is not None:
        bill["subscriptionDetails"] = {
            "packageType": subscription.label,
            "customPlanName": subscription.custom_plan_name,
            "totalWashes": subscription.total_washes,
            "completedWashes": sum(1 for entry in lead.wash_history if entry.wash_status == "completed"),
            "monthlyPrice": subscription.monthly_price,
            "startDate": to_iso(subscription.start_date),
            "endDate": to_iso(subscription.end_date),
            "isActive": subscription.is_active,
        }
    return bill
