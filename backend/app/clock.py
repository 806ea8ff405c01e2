"""
Source de temps injectable.

Toutes les fenêtres (TTL de session 15 min, cutoff campus 11h, balayages)
lisent l'heure ici. Les horodatages sont des datetimes naïfs à l'heure locale
du campus, c'est ce qui est stocké en base.
"""

from datetime import date, datetime
from zoneinfo import ZoneInfo


class Clock:
    """Horloge murale du campus."""

    def __init__(self, tz_name: str):
        self._tz = ZoneInfo(tz_name)

    def now(self) -> datetime:
        return datetime.now(self._tz).replace(tzinfo=None)

    def today(self) -> date:
        return self.now().date()
