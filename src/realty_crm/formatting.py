"""Display formatting for dashboard values."""

CRORE = 10_000_000
LAKH = 100_000


def group_indian(amount: float) -> str:
    """Group an amount the en-IN way: last three digits, then pairs.

    >>> group_indian(1234567)
    '12,34,567'
    """
    rounded = round(amount)
    sign = "-" if rounded < 0 else ""
    digits = str(abs(rounded))
    if len(digits) <= 3:
        return f"{sign}{digits}"
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return f"{sign}{','.join(pairs)},{tail}"


def format_currency(amount: float, symbol: str = "") -> str:
    """Render an amount in crore / lakh units.

    >>> format_currency(200000)
    '2.00 L'
    >>> format_currency(25000000, symbol="₹")
    '₹2.50 Cr'
    """
    # Thresholds apply to the whole-rupee figure the grouped form would show
    rounded = round(amount)
    if rounded >= CRORE:
        return f"{symbol}{amount / CRORE:.2f} Cr"
    if rounded >= LAKH:
        return f"{symbol}{amount / LAKH:.2f} L"
    return f"{symbol}{group_indian(amount)}"
