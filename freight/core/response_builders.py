from typing import Iterable, Optional

from freight.models.announcement import Announcement
from freight.models.catalog import ChecklistItem
from freight.models.counter_offer import CounterOffer
from freight.models.match import Match
from freight.models.notification import Notification
from freight.models.payment import Payment
from freight.models.quote import Quote, QuoteChecklistItem, QuoteStop
from freight.models.truck import Truck
from freight.schemas.announcement import AnnouncementOut
from freight.schemas.checklist import ChecklistItemOut
from freight.schemas.counter_offer import CounterOfferOut
from freight.schemas.match import MatchOut
from freight.schemas.notification import NotificationOut
from freight.schemas.payment import PaymentOut
from freight.schemas.quote import QuoteChecklistItemOut, QuoteListItem, QuoteOut, QuoteStopOut
from freight.schemas.truck import TruckOut


def build_checklist_selection_response(item: QuoteChecklistItem) -> QuoteChecklistItemOut:
    return QuoteChecklistItemOut(
        checklist_item_id=item.checklist_item_id,
        extra_input=item.extra_input,
        extra_fee=item.extra_fee if item.extra_fee is not None else 0,
    )


def build_stop_response(stop: QuoteStop) -> QuoteStopOut:
    return QuoteStopOut(
        id=stop.id,
        seq=stop.seq,
        address=stop.address,
        lat=stop.lat,
        lng=stop.lng,
        contact_name=stop.contact_name,
        contact_phone=stop.contact_phone,
        dept_name=stop.dept_name,
        manager_name=stop.manager_name,
    )


def build_quote_response(
    quote: Quote,
    items: Optional[Iterable[QuoteChecklistItem]] = None,
    stops: Optional[Iterable[QuoteStop]] = None,
) -> QuoteOut:
    return QuoteOut(
        id=quote.id,
        shipper_id=quote.shipper_id,
        origin_address=quote.origin_address,
        destination_address=quote.destination_address,
        origin_lat=quote.origin_lat,
        origin_lng=quote.origin_lng,
        destination_lat=quote.destination_lat,
        destination_lng=quote.destination_lng,
        distance_km=quote.distance_km,
        weight_kg=quote.weight_kg,
        volume_cbm=quote.volume_cbm,
        vehicle_type=quote.vehicle_type,
        vehicle_body_type=quote.vehicle_body_type,
        cargo_name=quote.cargo_name,
        cargo_type=quote.cargo_type,
        cargo_desc=quote.cargo_desc,
        base_price=quote.base_price,
        distance_price=quote.distance_price or 0,
        extra_price=quote.extra_price,
        desired_price=quote.desired_price,
        final_price=quote.final_price,
        allow_combine=quote.allow_combine,
        load_method=quote.load_method,
        unload_method=quote.unload_method,
        status=quote.status,
        created_at=quote.created_at,
        updated_at=quote.updated_at,
        checklist_items=[build_checklist_selection_response(i) for i in (items or [])],
        stops=[build_stop_response(s) for s in (stops or [])],
    )


def build_quote_list_item(quote: Quote) -> QuoteListItem:
    return QuoteListItem(
        id=quote.id,
        origin_address=quote.origin_address,
        destination_address=quote.destination_address,
        distance_km=quote.distance_km,
        vehicle_type=quote.vehicle_type,
        vehicle_body_type=quote.vehicle_body_type,
        cargo_name=quote.cargo_name,
        desired_price=quote.desired_price,
        final_price=quote.final_price,
        status=quote.status,
        created_at=quote.created_at,
    )


def build_match_response(match: Match) -> MatchOut:
    return MatchOut(
        id=match.id,
        quote_id=match.quote_id,
        driver_id=match.driver_id,
        accepted=match.accepted,
        accepted_at=match.accepted_at,
        status=match.status,
        created_at=match.created_at,
        updated_at=match.updated_at,
    )


def build_counter_offer_response(offer: CounterOffer) -> CounterOfferOut:
    return CounterOfferOut(
        id=offer.id,
        quote_id=offer.quote_id,
        driver_id=offer.driver_id,
        proposed_price=offer.proposed_price,
        message=offer.message,
        status=offer.status,
        created_at=offer.created_at,
        responded_at=offer.responded_at,
    )


def build_notification_response(notification: Notification) -> NotificationOut:
    return NotificationOut(
        id=notification.id,
        match_id=notification.match_id,
        type=notification.type,
        message=notification.message,
        is_read=notification.is_read,
        created_at=notification.created_at,
    )


def build_payment_response(payment: Payment) -> PaymentOut:
    return PaymentOut(
        id=payment.id,
        match_id=payment.match_id,
        order_no=payment.order_no,
        method=payment.method,
        status=payment.status,
        amount_type=payment.amount_type,
        total_amount=payment.total_amount,
        paid_at=payment.paid_at,
        pg_ref=payment.pg_ref,
        created_at=payment.created_at,
    )


def build_checklist_item_response(item: ChecklistItem) -> ChecklistItemOut:
    return ChecklistItemOut(
        id=item.id,
        category=item.category,
        name=item.name,
        icon=item.icon,
        has_extra_fee=item.has_extra_fee,
        base_extra_fee=item.base_extra_fee if item.base_extra_fee is not None else 0,
        requires_extra_input=item.requires_extra_input,
        extra_input_label=item.extra_input_label,
        sort_order=item.sort_order,
    )


def build_announcement_response(announcement: Announcement) -> AnnouncementOut:
    return AnnouncementOut(
        id=announcement.id,
        admin_id=announcement.admin_id,
        title=announcement.title,
        content=announcement.content,
        is_pinned=announcement.is_pinned,
        published_at=announcement.published_at,
        created_at=announcement.created_at,
        updated_at=announcement.updated_at,
    )


def build_match_response_list(matches: list) -> list:
    return [build_match_response(match) for match in matches]


def build_counter_offer_response_list(offers: list) -> list:
    return [build_counter_offer_response(offer) for offer in offers]


def build_payment_response_list(payments: list) -> list:
    return [build_payment_response(payment) for payment in payments]


def build_truck_response(truck: Truck) -> TruckOut:
    return TruckOut(
        id=truck.id,
        driver_id=truck.driver_id,
        vehicle_type=truck.vehicle_type,
        vehicle_body_type=truck.vehicle_body_type,
        tonnage=truck.tonnage,
        max_weight=truck.max_weight,
        max_volume=truck.max_volume,
        name=truck.name,
        image_url=truck.image_url,
        approved=bool(truck.approved),
        insurance=truck.insurance,
        odometer_km=truck.odometer_km,
        last_inspection_date=truck.last_inspection_date,
        created_at=truck.created_at,
        updated_at=truck.updated_at,
    )
