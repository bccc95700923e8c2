from decimal import Decimal, ROUND_HALF_UP

# Core PDF fonts are latin-1 only, so the rupee sign is spelled out
CURRENCY_SYMBOLS = {
    "INR": "Rs.",
    "USD": "$",
    "EUR": "EUR",
}


def currency_symbol(currency: str) -> str:
    return CURRENCY_SYMBOLS.get(currency, currency)


def format_indian_currency(amount: Decimal, symbol: str = "Rs.") -> str:
    """12,34,567.50 style grouping: last three digits, then pairs."""
    if amount is None:
        return f"{symbol} 0.00"
    amount = Decimal(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if amount < 0 else ""
    integer_part, decimal_part = f"{abs(amount):.2f}".split(".")

    if len(integer_part) <= 3:
        return f"{sign}{symbol} {integer_part}.{decimal_part}"

    last_three = integer_part[-3:]
    remaining = integer_part[:-3]

    formatted_remaining = ""
    while len(remaining) > 2:
        formatted_remaining = "," + remaining[-2:] + formatted_remaining
        remaining = remaining[:-2]

    formatted_remaining = remaining + formatted_remaining

    return f"{sign}{symbol} {formatted_remaining},{last_three}.{decimal_part}"


def format_amount(amount: Decimal, currency: str) -> str:
    """Indian grouping for INR, western grouping for everything else."""
    if currency == "INR":
        return format_indian_currency(amount, currency_symbol(currency))
    amount = Decimal(amount or 0).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{currency_symbol(currency)} {amount:,.2f}"


def amount_to_words(n: Decimal, currency: str = "INR") -> str:
    if n is None:
        return ""
    n = Decimal(n).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    if n < 0:
        return "Minus " + amount_to_words(-n, currency)
    if n == 0:
        return "Zero"

    units = ["", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine", "Ten", "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen", "Seventeen", "Eighteen", "Nineteen"]
    tens = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]

    def convert(num):
        if num < 20:
            return units[num]
        elif num < 100:
            return tens[num // 10] + (" " + units[num % 10] if num % 10 != 0 else "")
        elif num < 1000:
            return units[num // 100] + " Hundred" + (" " + convert(num % 100) if num % 100 != 0 else "")
        elif num < 100000:
            return convert(num // 1000) + " Thousand" + (" " + convert(num % 1000) if num % 1000 != 0 else "")
        elif num < 10000000:
            return convert(num // 100000) + " Lakh" + (" " + convert(num % 100000) if num % 100000 != 0 else "")
        else:
            return convert(num // 10000000) + " Crore" + (" " + convert(num % 10000000) if num % 10000000 != 0 else "")

    integer_part = int(n)
    decimal_part = int((n - integer_part) * 100)

    major, minor = ("Rupees", "Paise") if currency == "INR" else (currency, "Cents")
    if integer_part > 0:
        result = f"{major} {convert(integer_part)}"
        if decimal_part > 0:
            result += f" and {convert(decimal_part)} {minor}"
    else:
        result = f"{convert(decimal_part)} {minor}"

    return result + " Only"
