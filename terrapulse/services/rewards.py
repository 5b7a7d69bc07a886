from terrapulse.config import REWARDS_DIVISOR


def calculate_rewards(price: int) -> int:
    """
    Loyalty points earned for a purchase at `price`.

    One point per REWARDS_DIVISOR units, truncating: 250 -> 2, 99 -> 0.

    Raises:
        ValueError: If price is negative
    """
    if price < 0:
        raise ValueError(f"Price must be non-negative, got {price}")
    return price // REWARDS_DIVISOR
