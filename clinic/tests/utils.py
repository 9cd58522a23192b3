from datetime import date, datetime

from django.utils import timezone

# Monday; scheduling tests run against this fixed clock
DAY = date(2030, 1, 14)
NOW = timezone.make_aware(datetime(2030, 1, 14, 8, 0))


def at(hour: int, minute: int = 0, day: date = DAY) -> datetime:
    return timezone.make_aware(datetime(day.year, day.month, day.day, hour, minute))
