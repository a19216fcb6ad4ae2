"""
Expense Service Layer.
"""
import logging
from typing import Dict

from django.db import IntegrityError, transaction
from django.db.models import Max

from core.operator import Operator
from .models import Expense

logger = logging.getLogger(__name__)


class ExpenseValidationError(Exception):
    pass


def next_sequence_number() -> int:
    highest = Expense.objects.aggregate(highest=Max('sequence_number'))['highest']
    return (highest or 0) + 1


def record_expense(operator: Operator, data: Dict) -> Expense:
    """
    Record an expense with the next sequence number.

    Args:
        operator: Who records the expense
        data: Expense fields (date, category, description, amount,
            provider, payment_method, receipt_ref, notes)

    Raises:
        ExpenseValidationError: If the description is blank or the
            sequence number was taken concurrently
    """
    if not (data.get('description') or '').strip():
        raise ExpenseValidationError("Description is required")

    try:
        with transaction.atomic():
            expense = Expense.objects.create(
                sequence_number=next_sequence_number(),
                recorded_by_id=operator.user_id,
                **data
            )
    except IntegrityError as e:
        logger.warning(f"Expense sequence number collision: {e}")
        raise ExpenseValidationError("Another expense was recorded at the same time, please retry")

    logger.info(
        f"Expense #{expense.sequence_number} recorded by {operator.name}: "
        f"{expense.category} ${expense.amount}"
    )
    return expense
