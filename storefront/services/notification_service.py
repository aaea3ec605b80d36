# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Order notifications, delivered asynchronously through Celery.
    Enqueue failures are logged and swallowed: the order is already committed.
    """

    @staticmethod
    def send_order_notification(user_id: int, order_number: str, status: str) -> bool:
        try:
            send_order_notification_task.delay(user_id, order_number, status)
            return True
        except Exception as e:
            logger.warning(f"Could not enqueue notification for order {order_number}: {e}")
            return False


@celery_app.task(name="storefront.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_number: str, status: str):
    """
    Celery task. A real deployment would hand this to an email/SMS gateway,
    here it only logs.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_number} is now {status}")

    return {"user_id": user_id, "order_number": order_number, "status": status}
