from enum import Enum


class SeatClass(str, Enum):
    AC = "AC"
    SLEEPER = "Sleeper"

    @classmethod
    def parse(cls, value) -> "SeatClass":
        """Accept a SeatClass or its value, case-insensitively ("ac", "SLEEPER")."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.strip().lower():
                    return member
        raise ValueError(f"Unknown seat class: {value!r}")
