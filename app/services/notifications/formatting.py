def format_number(value: float) -> str:
    """1000.0 → "1,000", 12.5 → "12.5" """
    if float(value).is_integer():
        return f"{int(value):,}"
    return f"{value:,.2f}".rstrip("0").rstrip(".")
