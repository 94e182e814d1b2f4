"""Discounts and payment — commands and handler.

Payment is bookkeeping only: it records how the order was settled and locks
it. No gateway is contacted.
"""

from protean import handle
from protean.fields import Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from dinein.audit import record_audit
from dinein.domain import dinein
from dinein.order.order import Order


@dinein.command(part_of="Order")
class ApplyDiscount:
    order_id = Identifier(required=True)
    percentage = Float(min_value=0.0, max_value=100.0)
    amount = Float(min_value=0.0)
    reason = String(max_length=500)
    approved_by = Identifier()
    actor_id = Identifier()
    actor_role = String(max_length=50)


@dinein.command(part_of="Order")
class RecordPayment:
    order_id = Identifier(required=True)
    method = String(max_length=20)
    amount = Float(min_value=0.0)
    transaction_id = String(max_length=255)
    loyalty_points_used = Integer(min_value=0)
    discount_percentage = Float(min_value=0.0, max_value=100.0)
    actor_id = Identifier()
    actor_role = String(max_length=50)


def _pricing_snapshot(order: Order) -> dict:
    return {
        "status": order.status,
        "subtotal": order.subtotal,
        "discount_amount": order.discount.amount if order.discount else 0.0,
        "total_amount": order.total_amount,
        "gst": order.gst,
        "payment_status": order.payment_status,
    }


@dinein.command_handler(part_of=Order)
class OrderPaymentHandler:
    @handle(ApplyDiscount)
    def apply_discount(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        before = _pricing_snapshot(order)

        order.apply_discount(
            percentage=command.percentage,
            amount=command.amount,
            reason=command.reason,
            approved_by=command.approved_by,
        )
        repo.add(order)

        record_audit(
            "order.discount_applied",
            order.id,
            before=before,
            after=_pricing_snapshot(order),
            actor_id=command.actor_id,
            actor_role=command.actor_role,
        )

    @handle(RecordPayment)
    def record_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        before = _pricing_snapshot(order)

        order.record_payment(
            method=command.method,
            amount=command.amount,
            transaction_id=command.transaction_id,
            loyalty_points_used=command.loyalty_points_used,
            discount_percentage=command.discount_percentage,
        )
        repo.add(order)

        record_audit(
            "order.payment_recorded",
            order.id,
            before=before,
            after=dict(_pricing_snapshot(order), method=order.payment.method, amount=order.payment.amount),
            actor_id=command.actor_id,
            actor_role=command.actor_role,
        )
