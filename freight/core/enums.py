from enum import Enum


class UserRole(str, Enum):
    SHIPPER = "SHIPPER"
    DRIVER = "DRIVER"
    ADMIN = "ADMIN"

    def __str__(self):
        return self.value


class LoadHandlingMethod(str, Enum):
    SHIPPER = "SHIPPER"
    DRIVER = "DRIVER"

    def __str__(self):
        return self.value


class QuoteStatus(str, Enum):
    OPEN = "OPEN"
    MATCHED = "MATCHED"
    CANCELLED = "CANCELLED"

    def __str__(self):
        return self.value


class MatchStatus(str, Enum):
    READY = "READY"
    IN_TRANSIT = "IN_TRANSIT"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    def __str__(self):
        return self.value


class CounterOfferStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"

    def __str__(self):
        return self.value


class NotificationType(str, Enum):
    MATCH_CREATED = "MATCH_CREATED"
    MATCH_ACCEPTED = "MATCH_ACCEPTED"
    MATCH_CANCELLED = "MATCH_CANCELLED"
    COUNTER_OFFER_CREATED = "COUNTER_OFFER_CREATED"
    COUNTER_OFFER_ACCEPTED = "COUNTER_OFFER_ACCEPTED"
    COUNTER_OFFER_REJECTED = "COUNTER_OFFER_REJECTED"

    def __str__(self):
        return self.value


class PaymentMethod(str, Enum):
    CARD = "CARD"
    TRANSFER = "TRANSFER"
    PREPAID = "PREPAID"

    def __str__(self):
        return self.value


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"

    def __str__(self):
        return self.value


class AuditAction(str, Enum):
    SIGNUP = "signup"
    LOGIN = "login"
    CREATE_QUOTE = "create_quote"
    UPDATE_QUOTE = "update_quote"
    DELETE_QUOTE = "delete_quote"
    CREATE_MATCH = "create_match"
    ACCEPT_MATCH = "accept_match"
    CANCEL_MATCH = "cancel_match"
    START_TRANSIT = "start_transit"
    COMPLETE_MATCH = "complete_match"
    CREATE_COUNTER_OFFER = "create_counter_offer"
    ACCEPT_COUNTER_OFFER = "accept_counter_offer"
    REJECT_COUNTER_OFFER = "reject_counter_offer"
    CREATE_PAYMENT = "create_payment"
    PREPARE_PAYMENT = "prepare_payment"
    CONFIRM_PAYMENT = "confirm_payment"
    CREATE_ANNOUNCEMENT = "create_announcement"
    UPDATE_ANNOUNCEMENT = "update_announcement"
    DELETE_ANNOUNCEMENT = "delete_announcement"
    CREATE_TRUCK = "create_truck"
    UPDATE_TRUCK = "update_truck"
    DELETE_TRUCK = "delete_truck"

    def __str__(self):
        return self.value
