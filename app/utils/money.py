from decimal import Decimal, ROUND_HALF_UP

ZERO = Decimal("0")
CENT = Decimal("0.01")


def to_decimal(value, default: Decimal = ZERO) -> Decimal:
    """Convierte int/float/str a Decimal sin arrastrar errores de punto flotante."""
    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value) -> Decimal:
    """Redondea a centavos (half up, como en caja)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def money_str(value) -> str:
    """Representación exacta para columnas JSON."""
    return format(money(value), "f")
