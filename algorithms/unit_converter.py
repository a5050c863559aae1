import math

from .math_tools import MathTools


class UnitConverter:
    """Utility for converting between imperial and metric units."""

    LB_PER_KG = 2.205
    KM_PER_MILE = 1.609344
    CM_PER_INCH = 2.54

    UNIT_DISPLAY = {
        "lb": "lbs",
        "kg": "kg",
        "in": "in",
        "cm": "cm",
        "miles": "mi",
        "kilometers": "km",
        "meters": "m",
        "feet": "ft",
        "seconds": "sec",
        "minutes": "min",
        "hours": "hr",
    }

    @staticmethod
    def pounds_to_kg(lb: float) -> float:
        return round(lb / UnitConverter.LB_PER_KG, 2)

    @staticmethod
    def kg_to_pounds(kg: float) -> float:
        return round(kg * UnitConverter.LB_PER_KG, 2)

    @staticmethod
    def miles_to_km(miles: float) -> float:
        return round(miles * UnitConverter.KM_PER_MILE, 2)

    @staticmethod
    def km_to_miles(km: float) -> float:
        return round(km / UnitConverter.KM_PER_MILE, 2)

    @staticmethod
    def inches_to_cm(inches: float) -> float:
        return round(inches * UnitConverter.CM_PER_INCH, 2)

    @staticmethod
    def cm_to_inches(cm: float) -> float:
        return round(cm / UnitConverter.CM_PER_INCH, 2)

    @staticmethod
    def feet_inches_to_cm(feet: float, inches: float = 0) -> float:
        return UnitConverter.inches_to_cm(feet * 12 + inches)

    @staticmethod
    def cm_to_feet_inches(cm: float) -> tuple[int, float]:
        total_inches = UnitConverter.cm_to_inches(cm)
        feet = math.floor(total_inches / 12)
        inches = round(total_inches - feet * 12, 2)
        return feet, inches

    @staticmethod
    def celsius_to_fahrenheit(celsius: float) -> float:
        return MathTools.round_half_up(celsius * 9 / 5 + 32)

    @staticmethod
    def fahrenheit_to_celsius(fahrenheit: float) -> float:
        return MathTools.round_half_up((fahrenheit - 32) * 5 / 9)

    @staticmethod
    def round_to_nearest_dumbbell(weight: float, unit: str) -> float:
        """Snap ``weight`` to the dumbbell increments commonly available."""
        if unit == "lb":
            increment = 2.5 if weight <= 50 else 5.0
        else:
            increment = 1.25 if weight <= 25 else 2.5
        return MathTools.round_to_increment(weight, increment)

    @staticmethod
    def round_to_nearest_plate(weight: float, unit: str) -> float:
        """Snap ``weight`` to barbell loading increments (5 lb / 2.5 kg)."""
        increment = 5.0 if unit == "lb" else 2.5
        return MathTools.round_to_increment(weight, increment)

    @classmethod
    def convert_weight(
        cls, value: float, from_unit: str, to_unit: str, precision: str = "exact"
    ) -> float:
        """Convert a weight and round it for ``precision``.

        ``precision`` is ``exact`` (two decimals), ``dumbbell`` or ``plate``.
        """
        if from_unit == to_unit:
            converted = value
        elif from_unit == "lb" and to_unit == "kg":
            converted = cls.pounds_to_kg(value)
        elif from_unit == "kg" and to_unit == "lb":
            converted = cls.kg_to_pounds(value)
        else:
            raise ValueError(f"unsupported weight units: {from_unit} -> {to_unit}")
        if precision == "dumbbell":
            return cls.round_to_nearest_dumbbell(converted, to_unit)
        if precision == "plate":
            return cls.round_to_nearest_plate(converted, to_unit)
        return round(converted, 2)

    @classmethod
    def format_weight(
        cls, value: float, from_unit: str, to_unit: str, precision: str = "exact"
    ) -> str:
        converted = cls.convert_weight(value, from_unit, to_unit, precision)
        return f"{cls.format_number(converted)} {cls.unit_display(to_unit)}"

    @classmethod
    def format_distance(cls, value: float, from_unit: str, to_unit: str) -> str:
        if from_unit == to_unit:
            converted = round(value, 2)
        elif from_unit == "miles" and to_unit == "kilometers":
            converted = cls.miles_to_km(value)
        elif from_unit == "kilometers" and to_unit == "miles":
            converted = cls.km_to_miles(value)
        else:
            raise ValueError(f"unsupported distance units: {from_unit} -> {to_unit}")
        return f"{cls.format_number(converted)} {cls.unit_display(to_unit)}"

    @classmethod
    def unit_display(cls, unit: str) -> str:
        return cls.UNIT_DISPLAY.get(unit, unit)

    @staticmethod
    def format_number(value: float) -> str:
        """Render ``value`` without a trailing ``.0`` for whole numbers."""
        if float(value).is_integer():
            return str(int(value))
        return f"{value:.2f}".rstrip("0").rstrip(".")
