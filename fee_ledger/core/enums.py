from enum import Enum


class InvoiceStatus(str, Enum):
    pending = "pending"
    partial = "partial"
    paid = "paid"
    # Set by an external time-based job, never by this service.
    overdue = "overdue"


class PaymentMethod(str, Enum):
    cash = "cash"
    transfer = "transfer"
    mobile_money = "mobile_money"
    check = "check"
    other = "other"


class FeeCategory(str, Enum):
    tuition = "tuition"
    canteen = "canteen"
    transport = "transport"
    exam = "exam"
    material = "material"
    other = "other"


class TeacherPaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"


class UserRole(str, Enum):
    SUPERADMIN = "superadmin"
    ADMIN = "admin"
    ACCOUNTANT = "accountant"
    TEACHER = "teacher"
    STUDENT = "student"
    AGENT = "agent"
