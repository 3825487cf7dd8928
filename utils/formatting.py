CURRENCY_PREFIX = {
    "IDR": "Rp",
    "USD": "$",
}

# thousands separator per locale
GROUP_SEPARATOR = {
    "id-ID": ".",
    "en-US": ",",
}

def format_currency(amount, currency: str = "IDR", locale: str = "id-ID") -> str:
    """Whole-unit currency with locale grouping, e.g. 18000 -> 'Rp 18.000'."""
    value = int(round(float(amount)))
    prefix = CURRENCY_PREFIX.get(currency, currency)
    sep = GROUP_SEPARATOR.get(locale, ".")
    grouped = f"{abs(value):,}".replace(",", sep)
    sign = "-" if value < 0 else ""
    return f"{sign}{prefix} {grouped}"
