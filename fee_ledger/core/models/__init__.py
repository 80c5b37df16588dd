from fee_ledger.core.models.user import SchoolClass, User
from fee_ledger.core.models.fee import FeeType
from fee_ledger.core.models.student_fee import StudentFee
from fee_ledger.core.models.payment import Payment
from fee_ledger.core.models.teacher_payment import TeacherPayment
from fee_ledger.core.models.fee_audit_log import FeeAuditLog

__all__ = [
    "SchoolClass",
    "User",
    "FeeType",
    "StudentFee",
    "Payment",
    "TeacherPayment",
    "FeeAuditLog",
]
