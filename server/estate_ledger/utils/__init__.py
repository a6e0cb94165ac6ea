from .money import from_minor_units, quantize_money, to_minor_units

__all__ = ["from_minor_units", "quantize_money", "to_minor_units"]
