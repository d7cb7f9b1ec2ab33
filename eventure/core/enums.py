from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"

    def __str__(self):
        return self.value


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"

    def __str__(self):
        return self.value


class PaymentState(str, Enum):
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    DISMISSED = "dismissed"

    def __str__(self):
        return self.value


class NotificationType(str, Enum):
    SUCCESS = "success"
    ERROR = "error"

    def __str__(self):
        return self.value


class AuditAction(str, Enum):
    CREATE_SCOOTER = "create_scooter"
    UPDATE_SCOOTER = "update_scooter"
    DELETE_SCOOTER = "delete_scooter"
    CHECKOUT = "checkout"
    CONFIRM_BOOKING = "confirm_booking"
    REGISTER = "register"
    LOGIN = "login"

    def __str__(self):
        return self.value
