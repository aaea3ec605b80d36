# storefront/domain/order_number.py
import random
from datetime import datetime, timezone

from storefront.utils.settings import ORDER_NUMBER_PREFIX


def generate_order_number(
    prefix: str = ORDER_NUMBER_PREFIX,
    now: datetime | None = None,
    rng: random.Random | None = None,
) -> str:
    """<prefix><YY><MM><DD><NNNN>, e.g. ORD2610190042."""
    now = now or datetime.now(timezone.utc)
    suffix = (rng or random).randint(0, 9999)
    return f"{prefix}{now:%y%m%d}{suffix:04d}"
