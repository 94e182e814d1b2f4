"""Booking linkage — batch command and handler.

Backfills booking metadata onto orders that have none, matching each order's
table number against the room lists of active bookings. Orders on a table no
booking covers are left untouched.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from dinein.audit import record_audit
from dinein.booking import get_booking_directory
from dinein.domain import dinein
from dinein.order.order import Order
from dinein.utils.config import custom_setting

logger = structlog.get_logger(__name__)

DEFAULT_BATCH_SIZE = 1000


@dinein.command(part_of="Order")
class LinkOrdersToBookings:
    actor_id = Identifier()
    actor_role = String(max_length=50)


@dinein.command_handler(part_of=Order)
class LinkOrdersToBookingsHandler:
    @handle(LinkOrdersToBookings)
    def link_orders_to_bookings(self, command):
        repo = current_domain.repository_for(Order)
        directory = get_booking_directory()

        unlinked = repo.find_unlinked_to_booking(int(custom_setting("BOOKING_LINK_BATCH_SIZE", DEFAULT_BATCH_SIZE)))
        linked_count = 0
        for order in unlinked:
            if not order.table_number:
                continue
            booking = directory.find_active_booking_for_table(order.table_number)
            if booking is None:
                continue

            order.link_booking(
                booking.booking_id,
                grc_no=booking.grc_no,
                room_number=booking.room_number,
                guest_name=booking.guest_name,
                guest_phone=booking.guest_phone,
            )
            repo.add(order)
            linked_count += 1

            record_audit(
                "order.booking_linked",
                order.id,
                after={"booking_id": str(booking.booking_id), "grc_no": booking.grc_no},
                actor_id=command.actor_id,
                actor_role=command.actor_role,
            )

        logger.info("Orders linked to bookings", linked_count=linked_count, total_unlinked=len(unlinked))
        return {"linked_count": linked_count, "total_unlinked": len(unlinked)}
