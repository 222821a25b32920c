from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union


class FormattingUtils:
    """Money formatting shared by templates, invoices and messages"""

    CURRENCY_FORMATS = {
        'USD': {'symbol': '$', 'decimal_places': 2, 'symbol_position': 'before'},
        'EUR': {'symbol': '€', 'decimal_places': 2, 'symbol_position': 'after'},
        'GBP': {'symbol': '£', 'decimal_places': 2, 'symbol_position': 'before'},
    }

    @classmethod
    def format_money(
        cls,
        amount_cents: int,
        currency: str = 'USD',
        include_symbol: bool = True,
        thousands_separator: bool = True,
    ) -> str:
        """
        Format money amount for display

        Examples:
            format_money(10000) -> "$100.00"
            format_money(250000) -> "$2,500.00"
            format_money(250000, thousands_separator=False) -> "$2500.00"
        """
        currency_config = cls.CURRENCY_FORMATS.get(currency, cls.CURRENCY_FORMATS['USD'])
        decimal_places = currency_config['decimal_places']
        amount = Decimal(amount_cents) / (10 ** decimal_places)

        if thousands_separator:
            formatted_amount = f"{amount:,.{decimal_places}f}"
        else:
            formatted_amount = f"{amount:.{decimal_places}f}"

        if not include_symbol:
            return formatted_amount

        symbol = currency_config['symbol']
        if currency_config['symbol_position'] == 'before':
            return f"{symbol}{formatted_amount}"
        return f"{formatted_amount}{symbol}"

    @classmethod
    def to_cents(cls, amount: Union[Decimal, str, int, float]) -> int:
        """Convert a dollar amount (as typed in a form) to integer cents"""
        try:
            value = Decimal(str(amount))
        except InvalidOperation:
            raise ValueError(f"Invalid amount: {amount!r}")
        return int((value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @classmethod
    def to_dollars(cls, amount_cents: int) -> Decimal:
        """Integer cents as a two-place Decimal, e.g. 32000 -> Decimal("320.00")"""
        return (Decimal(amount_cents) / 100).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
