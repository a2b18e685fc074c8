import logging

from celery import shared_task
from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import get_template

from .enums import APPROVED, REJECTED, REIMBURSED

logger = logging.getLogger(__name__)

STATUS_SUBJECTS = {
    APPROVED: "Your expense has been approved",
    REJECTED: "Your expense has been rejected",
    REIMBURSED: "Your expense has been reimbursed",
}


def send_email(subject, email_to, html_alternative, text_alternative):
    msg = EmailMultiAlternatives(
        subject, text_alternative, settings.EMAIL_FROM, [email_to]
    )
    msg.attach_alternative(html_alternative, "text/html")
    msg.send(fail_silently=False)


@shared_task
def send_expense_status_email(expense_id):
    """Tell the owner of an expense that a reviewer acted on it."""
    from .models import Expense

    expense = (
        Expense.objects.select_related("user", "category")
        .filter(id=expense_id)
        .first()
    )
    if expense is None or expense.status not in STATUS_SUBJECTS:
        logger.warning("No status email for expense %s", expense_id)
        return

    context = {
        "name": expense.user.name or expense.user.email,
        "title": expense.title,
        "amount": expense.amount,
        "category": expense.category.name,
        "status": expense.status.lower(),
        "reason": expense.rejection_reason,
        "url": f"{settings.CLIENT_URL}/expenses/{expense.id}",
    }
    subject = f"{STATUS_SUBJECTS[expense.status]}: {expense.title}"
    html_alternative = get_template("expense/status_update.html").render(context)
    text_alternative = (
        f"Hi {context['name']}, your expense '{expense.title}' "
        f"({expense.amount}) has been {context['status']}."
    )
    if expense.rejection_reason:
        text_alternative += f" Reason: {expense.rejection_reason}"
    send_email(subject, expense.user.email, html_alternative, text_alternative)
    logger.info("Sent %s email for expense %s", expense.status, expense.id)
