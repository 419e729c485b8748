# scrapers/__init__.py
import re
from abc import ABC, abstractmethod
from datetime import datetime

from scrapers.dom import source_name

ISO_DURATION_RE = re.compile(r'PT(?:(\d+)H)?(?:(\d+)M)?')
HOURS_TEXT_RE = re.compile(r'(\d+)\s*(?:hours?|hrs?)\b', re.IGNORECASE)
MINUTES_TEXT_RE = re.compile(r'(\d+)\s*(?:minutes?|mins?)\b', re.IGNORECASE)

# Compact forms used by plugin cards ("1h 30m")
HOURS_SHORT_RE = re.compile(r'(\d+)\s*(?:hours?|hrs?|h)\b', re.IGNORECASE)
MINUTES_SHORT_RE = re.compile(r'(\d+)\s*(?:minutes?|mins?|m)\b', re.IGNORECASE)
LEADING_INT_RE = re.compile(r'^\s*(\d+)')


class BaseScraper(ABC):
    """Abstract base class for all extraction strategies"""

    name = 'base'

    @abstractmethod
    def extract(self, dom, url):
        """
        Extract a raw recipe candidate from a loaded page

        Args:
            dom (DomDocument): Parsed page
            url (str): Fetched (post-redirect) page URL

        Returns:
            dict: Raw recipe candidate, or None when the strategy finds nothing
        """

    def _new_recipe(self, url):
        """Skeleton candidate carrying the source fields every strategy sets"""
        now = datetime.now().isoformat()
        return {
            'source_url': url,
            'source_name': source_name(url),
            'ingredients': [],
            'steps': [],
            'created_at': now,
            'updated_at': now
        }

    def _parse_iso_duration(self, iso_duration):
        """
        Parse an ISO 8601 duration ("PT1H30M") to minutes

        Args:
            iso_duration (str): ISO 8601 duration string

        Returns:
            int: Duration in minutes or None if it is not an ISO duration
        """
        if not iso_duration:
            return None

        match = ISO_DURATION_RE.search(str(iso_duration))
        if not match:
            return None

        hours = int(match.group(1) or 0)
        minutes = int(match.group(2) or 0)
        return hours * 60 + minutes

    def _parse_time_text(self, time_text):
        """
        Parse time text like "30 mins" or "1 hr 15 mins" into minutes

        Returns:
            int: Time in minutes, 0 if nothing matched
        """
        if not time_text:
            return 0

        total_minutes = 0

        hr_match = HOURS_TEXT_RE.search(time_text)
        if hr_match:
            total_minutes += int(hr_match.group(1)) * 60

        min_match = MINUTES_TEXT_RE.search(time_text)
        if min_match:
            total_minutes += int(min_match.group(1))

        return total_minutes

    def _parse_duration(self, duration):
        """ISO 8601 first, then free text, 0 when nothing matches"""
        if isinstance(duration, bool) or duration is None:
            return 0
        if isinstance(duration, (int, float)):
            return int(duration)

        minutes = self._parse_iso_duration(duration)
        if minutes is not None:
            return minutes
        return self._parse_time_text(str(duration))

    def _parse_time_value(self, value):
        """Plugin card times: "30 minutes", "1 hour 30 minutes", "1h 30m", "45" """
        if not value:
            return 0

        total = 0
        hours = HOURS_SHORT_RE.search(value)
        minutes = MINUTES_SHORT_RE.search(value)
        if hours:
            total += int(hours.group(1)) * 60
        if minutes:
            total += int(minutes.group(1))

        if total:
            return total

        leading = LEADING_INT_RE.match(value)
        return int(leading.group(1)) if leading else 0
