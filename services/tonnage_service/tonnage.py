from decimal import ROUND_HALF_UP, Decimal

# litres -> m³ (1e3) and kg -> t (1e3)
TONNAGE_DIVISOR = Decimal(1_000_000)

# matches the NUMERIC(15, 8) tonnage column
TONNAGE_QUANTUM = Decimal("0.00000001")


def compute_tonnage(volume, density, vcf) -> Decimal:
    """tonnage = volume * density * vcf / 1_000_000, kept to 8 fractional digits."""
    product = Decimal(str(volume)) * Decimal(str(density)) * Decimal(str(vcf))
    return (product / TONNAGE_DIVISOR).quantize(TONNAGE_QUANTUM, rounding=ROUND_HALF_UP)
