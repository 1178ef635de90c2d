"""Public holiday table and red-day classification."""
import json
import logging
import time
from datetime import date
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import requests

from processor.exceptions import BackendError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_TABLE_PATH = Path(__file__).parent / 'data' / 'holidays_kr.json'

SATURDAY = 5
SUNDAY = 6


class HolidayTable:
    """
    Versioned holiday lookup table.

    Fixed-date holidays are keyed by (month, day) and repeat every supported
    year. Lunar-calendar holidays, substitute days and one-off holidays are
    precomputed to solar dates per year. Years outside
    [first_year, last_year] have no holidays at all.
    """

    def __init__(
        self,
        version: str,
        country: str,
        first_year: int,
        last_year: int,
        fixed: Dict[Tuple[int, int], str],
        dated: Dict[date, List[str]]
    ):
        self.version = version
        self.country = country
        self.first_year = first_year
        self.last_year = last_year
        self.fixed = fixed
        self.dated = dated

    @classmethod
    def from_dict(cls, data: dict) -> 'HolidayTable':
        """
        Build a table from its JSON representation.

        Raises:
            ValidationError: If the structure is malformed
        """
        try:
            first_year = int(data['first_year'])
            last_year = int(data['last_year'])
            if first_year > last_year:
                raise ValueError(f"first_year {first_year} is after last_year {last_year}")

            fixed = {}
            for entry in data.get('fixed', []):
                key = (int(entry['month']), int(entry['day']))
                # Feb 29 is a legal key even though it only exists in leap years
                date(2024, *key)
                fixed[key] = entry['name']

            dated: Dict[date, List[str]] = {}
            for year, entries in data.get('dated', {}).items():
                for entry in entries:
                    day = date.fromisoformat(entry['date'])
                    if day.year != int(year):
                        raise ValueError(f"{entry['date']} listed under year {year}")
                    dated.setdefault(day, []).append(entry['name'])
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Malformed holiday table: {e}") from e

        return cls(
            version=str(data.get('version', 'unversioned')),
            country=str(data.get('country', '')),
            first_year=first_year,
            last_year=last_year,
            fixed=fixed,
            dated=dated
        )

    @classmethod
    def load(cls, path) -> 'HolidayTable':
        """Load a table from a JSON file."""
        with open(path, 'r', encoding='utf-8') as f:
            table = cls.from_dict(json.load(f))
        logger.info(
            f"Loaded holiday table {table.country} v{table.version} "
            f"({table.first_year}-{table.last_year}) from {path}"
        )
        return table

    @classmethod
    def default(cls) -> 'HolidayTable':
        """Load the bundled table."""
        return cls.load(DEFAULT_TABLE_PATH)

    @classmethod
    def fetch(cls, url: str, timeout: int = 30) -> 'HolidayTable':
        """
        Download a table over HTTP with retry logic.

        Args:
            url: Location of the JSON table
            timeout: HTTP request timeout in seconds

        Returns:
            HolidayTable parsed from the response

        Raises:
            BackendError: If all retry attempts fail
            ValidationError: If the downloaded table is malformed
        """
        max_retries = 3
        base_delay = 1  # seconds

        for attempt in range(max_retries):
            try:
                logger.info(f"Fetching holiday table (attempt {attempt + 1}/{max_retries})")
                response = requests.get(url, timeout=timeout)
                response.raise_for_status()
                data = response.json()
                break
            except (requests.RequestException, ValueError) as e:
                if attempt < max_retries - 1:
                    delay = base_delay * (2 ** attempt)
                    logger.warning(
                        f"Request failed (attempt {attempt + 1}/{max_retries}): {e}. "
                        f"Retrying in {delay} seconds..."
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"All {max_retries} retry attempts failed. Last error: {e}"
                    )
                    raise BackendError(f"Failed to fetch holiday table: {e}") from e

        table = cls.from_dict(data)
        logger.info(f"Fetched holiday table {table.country} v{table.version} from {url}")
        return table

    def supports_year(self, year: int) -> bool:
        return self.first_year <= year <= self.last_year

    def names_for(self, day: date) -> List[str]:
        """Return holiday names on a date, fixed-date holidays first."""
        if not self.supports_year(day.year):
            return []

        names = []
        fixed_name = self.fixed.get((day.month, day.day))
        if fixed_name:
            names.append(fixed_name)
        for name in self.dated.get(day, []):
            if name not in names:
                names.append(name)
        return names


class HolidayClassifier:
    """Decides whether a date is a red day (weekend or public holiday)."""

    HOLIDAY = 'holiday'
    WEEKEND = 'weekend'

    def __init__(self, table: Optional[HolidayTable] = None):
        self.table = table or HolidayTable.default()

    def is_weekend(self, day: date) -> bool:
        return day.weekday() in (SATURDAY, SUNDAY)

    def holiday_name(self, day: date) -> Optional[str]:
        names = self.table.names_for(day)
        return ', '.join(names) if names else None

    def is_holiday(self, day: date) -> bool:
        return bool(self.table.names_for(day))

    def is_red_day(self, day: date) -> bool:
        return self.is_weekend(day) or self.is_holiday(day)

    def red_day_reason(self, day: date) -> Optional[str]:
        """Holiday wins over weekend when both apply."""
        if self.is_holiday(day):
            return self.HOLIDAY
        if self.is_weekend(day):
            return self.WEEKEND
        return None
