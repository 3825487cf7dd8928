from utils.formatting import format_currency


def test_format_currency():
    assert format_currency(18000) == "Rp 18.000"
    assert format_currency(9000000) == "Rp 9.000.000"
    assert format_currency(0) == "Rp 0"
    assert format_currency(1234.6) == "Rp 1.235"
    assert format_currency(-5000) == "-Rp 5.000"
    assert format_currency(1500, currency="EUR") == "EUR 1.500"


def test_format_currency_uses_locale_grouping():
    assert format_currency(1500, currency="USD", locale="en-US") == "$ 1,500"
    assert format_currency(9000000, locale="en-US") == "Rp 9,000,000"
    # unknown locales fall back to '.' grouping
    assert format_currency(1500, locale="xx-XX") == "Rp 1.500"
